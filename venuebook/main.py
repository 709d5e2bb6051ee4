import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import ALLOWED_ORIGINS, LOAD_DEMO_DATA, RATE_LIMIT_ENABLED, SECURITY_HEADERS_ENABLED
from .database import Base, SessionLocal, engine
from .domain.bookings import router as bookings
from .domain.services import router as services
from .domain.venues import router as venues
from .domain.widget import router as widget
from .routes.auth import router as auth_router
from .routes.customers import router as customers_router
from .routes.payments import router as payments_router
from .routes.pets import router as pets_router
from .routes.users import router as users_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    if LOAD_DEMO_DATA:
        from .demo_data import seed_demo_data

        db = SessionLocal()
        try:
            seed_demo_data(db)
        except Exception as e:
            logger.error(f"Failed to load demo data: {e}")
        finally:
            db.close()

    if RATE_LIMIT_ENABLED:
        try:
            from .rate_limiter import get_redis_client

            get_redis_client()  # Connection test
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed - rate limited endpoints will return 503: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="VenueBook API", version=__version__, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    # For other validation errors, return 422 as normal
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Endpoints the embedded widget calls from third-party sites
PUBLIC_WIDGET_PATHS = (
    "/widget/token",
    "/widget/verify-token",
    "/widget/services",
    "/widget/validate-signature",
    "/widget/booking",
)
WIDGET_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Authorization, Content-Type",
    "Access-Control-Max-Age": "600",
}


@app.middleware("http")
async def widget_cors(request: Request, call_next):
    """Any origin may call the public widget endpoints (bearer tokens only, no cookies)"""
    if not request.url.path.startswith(PUBLIC_WIDGET_PATHS):
        return await call_next(request)

    if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
        return Response(status_code=200, headers=WIDGET_CORS_HEADERS)

    response = await call_next(request)
    for name, value in WIDGET_CORS_HEADERS.items():
        response.headers[name] = value
    if "access-control-allow-credentials" in response.headers:
        del response.headers["access-control-allow-credentials"]
    return response


# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(customers_router)
app.include_router(pets_router)
app.include_router(payments_router)
app.include_router(services.router)
app.include_router(venues.router)
app.include_router(venues.equipment_router)
app.include_router(venues.document_types_router)
app.include_router(bookings.router)
app.include_router(bookings.reviews_router)
app.include_router(widget.router)


@app.get("/")
def root():
    return {"message": "VenueBook API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
