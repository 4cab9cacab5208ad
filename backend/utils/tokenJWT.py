# utils/tokenJWT.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from models.users import User
from schemas.user import TokenData
from utils.errors import AuthError, ForbiddenError

# Bearer scheme; a missing header is reported by get_current_user itself
bearer_scheme = HTTPBearer(auto_error=False)


# Generate a new JWT access token
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Decode and check a token, returning the identity it carries
def verify_token(token: Optional[str], settings: Settings) -> TokenData:
    if not token:
        raise AuthError("Missing bearer token", status_code=401)

    invalid = AuthError("Could not validate credentials", status_code=403)
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise invalid

    sub = payload.get("sub")
    role = payload.get("role")
    if sub is None or role is None:
        raise invalid
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise invalid
    return TokenData(user_id=user_id, role=role)


# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    identity = verify_token(credentials.credentials if credentials else None, settings)

    user = db.query(User).filter(User.id == identity.user_id).first()
    if user is None:
        raise AuthError("Could not validate credentials", status_code=403)
    return user


def require_role(identity, role: str) -> None:
    if identity.role != role:
        raise ForbiddenError(f"Forbidden. {role.capitalize()} access required.")


# Dependency factory for Role-Based Access Control
def role_required(role: str):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        require_role(current_user, role)
        return current_user
    return _checker
