import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException

from app.core.config import settings
from app.core.security import get_password_hash, verify_password, create_access_token
from app.models.admin import AdminUser
from app.schemas.auth import AdminLogin, AdminResponse, Token

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def seed_default_admin(db: Session):
        """Create the configured admin account if no admin exists yet."""
        if db.query(AdminUser).count():
            return
        admin = AdminUser(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            role="admin",
        )
        db.add(admin)
        db.commit()
        logger.info("Default admin user '%s' created", admin.username)

    @staticmethod
    def password_login(db: Session, login_data: AdminLogin) -> Token:
        admin = db.query(AdminUser).filter(AdminUser.username == login_data.username).first()
        if not admin or not verify_password(login_data.password, admin.password_hash):
            logger.warning("Failed admin login for '%s'", login_data.username)
            raise HTTPException(status_code=401, detail="Invalid username or password")

        if not admin.is_active:
            raise HTTPException(status_code=401, detail="Account is deactivated")

        access_token = create_access_token(data={"admin_id": admin.id, "username": admin.username})
        logger.info("Admin '%s' logged in", admin.username)
        return Token(access_token=access_token, token_type="bearer", user=AdminResponse.model_validate(admin))
