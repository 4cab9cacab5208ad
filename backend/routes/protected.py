# backend/routes/protected.py
from fastapi import APIRouter, Depends

from models.users import User
from schemas.user import DashboardResponse
from utils.tokenJWT import role_required

router = APIRouter(tags=["Protected"])


@router.get("/admin-panel", response_model=DashboardResponse)
def admin_panel(current_user: User = Depends(role_required("admin"))):
    return {"message": "Admin panel accessed", "user": {"user_id": current_user.id, "role": current_user.role}}


@router.get("/customer-dashboard", response_model=DashboardResponse)
def customer_dashboard(current_user: User = Depends(role_required("customer"))):
    return {"message": "Customer dashboard accessed", "user": {"user_id": current_user.id, "role": current_user.role}}
