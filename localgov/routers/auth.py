# File: localgov/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from localgov.db.session import get_db
from localgov.models.user import User, UserRole
from localgov.schemas.auth import RegisterIn, LoginIn, TokenPair
from localgov.core.security import hash_password, verify_password, make_tokens, get_current_user
from datetime import datetime, timezone

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=TokenPair)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    # Ensure unique email
    if db.query(User).filter(User.email == body.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=body.email,
        name=body.name.strip(),
        hashed_password=hash_password(body.password),
        role=UserRole.citizen,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    # Sign-in immediately
    return make_tokens(user.email, user.role.value)

@router.post("/login", response_model=TokenPair)
def login(body: LoginIn, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()
    if not user or not user.hashed_password:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Your account has been deactivated. Please contact support.")
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    return make_tokens(user.email, user.role.value)

@router.get("/me")
def me(current = Depends(get_current_user)):
    return {
        "id": current.id,
        "email": current.email,
        "name": current.name,
        "role": current.role.value,
        "is_active": current.is_active,
    }
