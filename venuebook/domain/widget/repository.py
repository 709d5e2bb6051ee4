"""Widget repository - Database operations for API keys and widget settings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ROLE_BUSINESS, ApiKey, Service, User, WidgetSettings


class WidgetRepository:
    """Repository for widget database operations"""

    @staticmethod
    def create_api_key(db: Session, **key_data) -> ApiKey:
        api_key = ApiKey(**key_data)
        db.add(api_key)
        db.commit()
        db.refresh(api_key)
        return api_key

    @staticmethod
    def list_api_keys(db: Session, business_id: int) -> list[ApiKey]:
        return (
            db.query(ApiKey)
            .filter(ApiKey.business_id == business_id)
            .order_by(ApiKey.created_at, ApiKey.id)
            .all()
        )

    @staticmethod
    def get_api_key(db: Session, key_id: int, business_id: int) -> Optional[ApiKey]:
        return (
            db.query(ApiKey)
            .filter(ApiKey.id == key_id, ApiKey.business_id == business_id)
            .first()
        )

    @staticmethod
    def find_by_key(db: Session, key: str) -> Optional[ApiKey]:
        return db.query(ApiKey).filter(ApiKey.key == key).first()

    @staticmethod
    def delete_api_key(db: Session, api_key: ApiKey) -> None:
        db.delete(api_key)
        db.commit()

    @staticmethod
    def get_settings(db: Session, business_id: int) -> Optional[WidgetSettings]:
        return db.query(WidgetSettings).filter(WidgetSettings.business_id == business_id).first()

    @staticmethod
    def save_settings(db: Session, settings: WidgetSettings) -> WidgetSettings:
        db.add(settings)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def get_business(db: Session, business_id: int) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.id == business_id, User.role == ROLE_BUSINESS)
            .first()
        )

    @staticmethod
    def active_services(db: Session, business_id: int) -> list[Service]:
        return (
            db.query(Service)
            .filter(Service.provider_id == business_id, Service.is_paused.is_(False))
            .order_by(Service.id)
            .all()
        )
