"""User directory endpoints."""

from fastapi import APIRouter, Depends

from app.db.models import User
from app.deps import get_current_user, get_services
from app.schemas.api import BootstrapAdminRequest, UserRead
from app.schemas.domain import UserInput
from app.services.factory import LifecycleServices

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/bootstrap-admin", response_model=UserRead, status_code=201)
def bootstrap_admin(
    body: BootstrapAdminRequest,
    services: LifecycleServices = Depends(get_services),
):
    """Create the first admin using the configured ADMIN_SECRET."""
    data = UserInput(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        department=body.department,
    )
    return UserRead.model_validate(services.users.bootstrap_admin(data, body.secret))


@router.post("", response_model=UserRead, status_code=201)
def create_user(
    data: UserInput,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Register a user (admin only)."""
    return UserRead.model_validate(services.users.register(data, user))


@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)
