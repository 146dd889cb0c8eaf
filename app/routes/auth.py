from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.schemas.auth import AdminLogin, AdminResponse, Token
from app.services.auth import AuthService

router = APIRouter()

@router.post("/login", response_model=Token)
def login(login_data: AdminLogin, db: Session = Depends(get_db)):
    """Admin login"""
    return AuthService.password_login(db, login_data)

@router.get("/profile", response_model=AdminResponse)
def get_profile(current_admin=Depends(get_current_admin)):
    return current_admin
