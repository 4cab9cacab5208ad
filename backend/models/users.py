# backend/models/users.py
from sqlalchemy import Column, Integer, String, CheckConstraint
from database import Base

# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'customer')", name="ck_users_role"),
    )
