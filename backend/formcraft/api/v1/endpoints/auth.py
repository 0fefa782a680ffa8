from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from formcraft.core.auth import get_current_user
from formcraft.core.database import get_db
from formcraft.models.user import User
from formcraft.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from formcraft.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    if get_user_by_email(db, body.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )
    user = create_user(db, name=body.name, email=body.email, password=body.password)
    return AuthResponse(user=UserOut.model_validate(user), access_token=create_access_token(user.id))


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )
    return AuthResponse(user=UserOut.model_validate(user), access_token=create_access_token(user.id))


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
