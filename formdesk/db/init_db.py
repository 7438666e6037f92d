import logging
from sqlalchemy.orm import Session

from formdesk.core.config.settings import get_settings
from formdesk.core.security.auth import create_hashed_password
from formdesk.models.user import User, RoleType

logger = logging.getLogger("formdesk.db")

def init_db(db: Session) -> None:
    """Seed the default admin account when one is configured"""
    settings = get_settings()
    if not settings.DEFAULT_ADMIN_EMAIL or not settings.DEFAULT_ADMIN_PASSWORD:
        return

    email = settings.DEFAULT_ADMIN_EMAIL.strip().lower()
    existing_admin = db.query(User).filter(User.email == email).first()
    if existing_admin:
        return

    db.add(User(
        email=email,
        business_name=settings.DEFAULT_ADMIN_BUSINESS_NAME,
        hashed_password=create_hashed_password(settings.DEFAULT_ADMIN_PASSWORD),
        role=RoleType.ADMIN,
        is_active=True
    ))

    try:
        db.commit()
        logger.info(f"Default admin {email} created")
    except Exception as e:
        db.rollback()
        raise e
