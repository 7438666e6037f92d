from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from typing import Annotated
import logging

from formdesk.core.security.auth import verify_password, generate_token, create_hashed_password, get_current_user
from formdesk.db.session import get_db
from formdesk.models.user import User, RoleType
from formdesk.schemas.user import RegisterRequest
from formdesk.utils.helpers import format_datetime

router = APIRouter(prefix="/auth", tags=["authentication"])

logger = logging.getLogger("formdesk.auth")

def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "business_name": user.business_name,
        "role": user.role.value,
        "is_active": user.is_active,
        "created_at": format_datetime(user.created_at),
    }

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    # Check if email already exists
    existing_user = db.query(User).filter(User.email == request.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Email {request.email} is already registered"
        )

    new_user = User(
        email=request.email,
        business_name=request.business_name,
        hashed_password=create_hashed_password(request.password),
        role=RoleType.ADMIN,
        is_active=True
    )

    try:
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except Exception as e:
        db.rollback()
        logger.error(f"Registration error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    logger.info(f"Registered user {new_user.id}")
    return {
        "message": "User registered successfully",
        "access_token": generate_token({"sub": new_user.email}),
        "token_type": "bearer",
        "user": user_to_dict(new_user)
    }

@router.post("/login")
def login(request: Annotated[OAuth2PasswordRequestForm, Depends()], db: Session = Depends(get_db)):
    try:
        # The OAuth2 form calls it username, it carries the email
        email = request.username.strip().lower()
        user = db.query(User).filter(User.email == email).first()

        # Verify credentials
        if not user or not verify_password(request.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated"
            )

        token = generate_token({"sub": user.email})

        return {
            "access_token": token,
            "token_type": "bearer",
            "user": user_to_dict(user)
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        logger.error(f"Login error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/me")
def get_current_user_info(current_user: dict = Depends(get_current_user)):
    return {"user": user_to_dict(current_user["user"])}
