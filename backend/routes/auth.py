# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from models.users import User
from schemas import user as schemas
from utils.audit import write_log
from utils.errors import AuthError, ConflictError
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


# Register a new user
@router.post("/signup", response_model=schemas.SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Normalize email input
    normalized_email = payload.email.strip().lower()

    # Check for existing user
    db_user = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if db_user:
        write_log(db, user_id=None, action="SIGNUP", resource="auth", status="FAIL",
                  request=request, meta={"email": normalized_email, "reason": "Email exists"})
        db.commit()
        raise ConflictError("Email already registered")

    # Create new user instance with hashed password
    new_user = User(email=normalized_email, password_hash=get_password_hash(payload.password), role=payload.role)
    db.add(new_user)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent signup won the unique index
        db.rollback()
        raise ConflictError("Email already registered")

    write_log(db, user_id=new_user.id, action="SIGNUP", resource="auth",
              request=request, meta={"email": new_user.email, "role": new_user.role})
    db.commit()
    db.refresh(new_user)

    return {"message": "User created successfully", "user": new_user}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(
    payload: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    normalized_email = payload.email.strip().lower()
    db_user = db.query(User).filter(User.email == normalized_email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", request=request, meta={"email": normalized_email})
        db.commit()
        raise AuthError("Invalid credentials")

    access_token = create_access_token({"sub": str(db_user.id), "role": db_user.role}, settings)

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              request=request, meta={"email": db_user.email})
    db.commit()

    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
