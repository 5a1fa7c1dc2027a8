import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import jwt_manager
from app.models.enums import UserRole
from app.models.user import User
from app.services.payment_gateway import PaymentGatewayService
from app.utils.stripe_client import StripeClient

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _user_from_payload(payload: dict, db: Session) -> Optional[User]:
    user_id = payload.get("user_id")
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that requires a valid Bearer token and returns the active user.
    Raises 401 Unauthorized if the token is missing, invalid, or the user is not found.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = jwt_manager.verify_token(credentials.credentials, "access")
    user = _user_from_payload(payload, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Dependency that returns a user if a valid token is provided, or None otherwise.
    """
    if not credentials:
        return None

    try:
        payload = jwt_manager.verify_token(credentials.credentials, "access")
    except HTTPException:
        # Invalid or expired tokens are treated as anonymous
        return None

    user = _user_from_payload(payload, db)
    if not user or not user.is_active:
        return None
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting a route to the given roles.
    Usage: Depends(require_roles(UserRole.ADMIN, UserRole.INSTRUCTOR))
    """
    allowed = {role.value for role in roles}

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(sorted(allowed))}",
            )
        return current_user

    return role_checker


get_current_admin = require_roles(UserRole.ADMIN)
get_current_instructor = require_roles(UserRole.ADMIN, UserRole.INSTRUCTOR)


def get_stripe_client() -> StripeClient:
    return StripeClient()


def get_payment_gateway(
    db: Session = Depends(get_db),
    client: StripeClient = Depends(get_stripe_client),
) -> PaymentGatewayService:
    return PaymentGatewayService(db, client)
