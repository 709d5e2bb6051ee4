"""Service repository - Database operations for bookable services"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Service, ServiceAvailability, ServiceCustomForm


class ServiceRepository:
    """Repository for service database operations"""

    @staticmethod
    def list_services(
        db: Session,
        category: Optional[str] = None,
        provider_id: Optional[int] = None,
        viewer_id: Optional[int] = None,
        include_paused: bool = False,
    ) -> list[Service]:
        query = db.query(Service)
        if category:
            query = query.filter(Service.category == category)
        if provider_id is not None:
            query = query.filter(Service.provider_id == provider_id)
        if not include_paused:
            if viewer_id is not None:
                # Owners still see their own paused services
                query = query.filter(
                    or_(Service.is_paused.is_(False), Service.provider_id == viewer_id)
                )
            else:
                query = query.filter(Service.is_paused.is_(False))
        return query.order_by(Service.id).all()

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()

    @staticmethod
    def replace_availability(db: Session, service: Service, rows: list[ServiceAvailability]) -> None:
        db.query(ServiceAvailability).filter(ServiceAvailability.service_id == service.id).delete()
        db.add_all(rows)
        db.commit()
        db.refresh(service)

    @staticmethod
    def upsert_custom_form(db: Session, service: Service, form_schema: dict) -> ServiceCustomForm:
        form = db.query(ServiceCustomForm).filter(ServiceCustomForm.service_id == service.id).first()
        if form:
            form.form_schema = form_schema
        else:
            form = ServiceCustomForm(service_id=service.id, form_schema=form_schema)
            db.add(form)
        db.commit()
        db.refresh(form)
        return form
