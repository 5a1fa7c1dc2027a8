# services/auth.py
import logging
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.core.security import PasswordHelper, jwt_manager
from app.models.enums import UserRole
from app.models.session import UserSession
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)

# Setup logging
logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.password_helper = PasswordHelper()

    def _start_session(self, user: User, db: Session) -> str:
        """Invalidate any previous session of ``user`` and return a refresh token for a new one."""
        db.query(UserSession).filter(
            UserSession.user_id == user.id, UserSession.valid.is_(True)
        ).update({UserSession.valid: False}, synchronize_session=False)
        session = UserSession(user_id=user.id)
        db.add(session)
        db.flush()
        return jwt_manager.create_refresh_token(user.id, session.id)

    def _auth_response(self, user: User, login_time: datetime, db: Session) -> AuthResponse:
        refresh_token = self._start_session(user, db)
        user.last_login = login_time
        db.commit()
        db.refresh(user)

        access_token = jwt_manager.create_access_token(user=user, login_time=login_time)
        return AuthResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            user=UserResponse.model_validate(user),
        )

    def register_user(
        self, request: UserRegistrationRequest, db: Session
    ) -> AuthResponse:
        """
        Register a new user with email, username and password
        """
        existing_user = (
            db.query(User)
            .filter(
                or_(
                    User.email == request.email.lower(),
                    User.username == request.username,
                )
            )
            .first()
        )
        if existing_user:
            raise ConflictError("User already exists with this email or username")

        user = User(
            email=request.email.lower(),
            username=request.username,
            first_name=request.first_name,
            last_name=request.last_name,
            hashed_password=self.password_helper.hash_password(request.password),
            role=UserRole.USER.value,
        )

        try:
            db.add(user)
            db.flush()
            response = self._auth_response(user, datetime.utcnow(), db)
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Registration conflict: {e.orig}")
            raise ConflictError("User already exists with this email or username")

        logger.info(f"User registered: {user.username} (ID: {user.id})")
        return response

    def login(self, request: LoginRequest, db: Session) -> AuthResponse:
        """
        Login with username or email and password
        """
        identifier = request.username_or_email.strip().lower()
        user = (
            db.query(User)
            .filter(or_(User.username == identifier, User.email == identifier))
            .first()
        )

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            logger.info(f"Failed login for '{identifier}'")
            raise UnauthorizedError("Invalid credentials")

        if not user.is_active:
            raise UnauthorizedError("Account not found or deactivated")

        response = self._auth_response(user, datetime.utcnow(), db)
        logger.info(f"User login successful: {user.username}")
        return response

    def refresh_session(self, refresh_token: str, db: Session) -> str:
        """Issue a new access token from a refresh token whose session is still valid."""
        try:
            payload = jwt_manager.verify_token(refresh_token, "refresh")
        except HTTPException:
            raise UnauthorizedError("Could not refresh token")

        session = (
            db.query(UserSession)
            .filter(UserSession.id == payload.get("session_id"))
            .first()
        )
        if not session or not session.valid or str(session.user_id) != payload.get("sub"):
            raise UnauthorizedError("Could not refresh token")

        user = db.query(User).filter(User.id == session.user_id).first()
        if not user or not user.is_active:
            raise UnauthorizedError("Could not refresh token")

        return jwt_manager.create_access_token(user=user)

    def logout(self, user: User, db: Session) -> str:
        """End every session of ``user``; refresh tokens stop working."""
        closed = (
            db.query(UserSession)
            .filter(UserSession.user_id == user.id, UserSession.valid.is_(True))
            .update({UserSession.valid: False}, synchronize_session=False)
        )
        db.commit()
        logger.info(f"User {user.username} logged out ({closed} session(s) closed)")
        return "Logout successful"

    def set_role(self, user_id: int, role: UserRole, db: Session) -> User:
        """Assign a role to a user (admin only)"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")

        user.role = UserRole(role).value
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.username} role set to {user.role}")
        return user


auth_service = AuthService()
