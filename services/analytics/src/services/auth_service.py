from __future__ import annotations

from datetime import timedelta

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from src.core.config import Settings, settings
from src.core.errors import (
    AuthenticationError,
    UpstreamUnavailableError,
    ValidationError,
)
from src.core.logger import get_logger
from src.core.security import create_access_token, hash_password, verify_password
from src.infrastructure.database.engine import Database
from src.infrastructure.database.models import User
from src.infrastructure.database.repositories import UserRepository
from src.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserView

from shared.utils import run_blocking

logger = get_logger("analytics.auth")

DEFAULT_ROLE = "user"


class AuthService:
    def __init__(self, db: Database, config: Settings = settings):
        self.db = db
        self.config = config

    def _issue(self, user: User) -> AuthResponse:
        lifetime = timedelta(minutes=self.config.jwt_expires_minutes)
        token = create_access_token(
            {
                "sub": user.username,
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "role": user.role,
            },
            expires_delta=lifetime,
        )
        return AuthResponse(
            token=token,
            expires_in=int(lifetime.total_seconds()),
            user=UserView(
                id=user.id,
                username=user.username,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                role=user.role,
                is_active=user.is_active,
                created_at=user.created_at,
            ),
        )

    def _register(self, request: RegisterRequest) -> AuthResponse:
        with self.db.session_scope() as session:
            users = UserRepository(session)
            if users.exists_by_username(request.username):
                raise ValidationError("Username is already taken", field="username")
            if users.exists_by_email(request.email):
                raise ValidationError("Email is already in use", field="email")
            user = User(
                username=request.username,
                email=request.email,
                password=hash_password(
                    request.password, rounds=self.config.bcrypt_rounds
                ),
                first_name=request.first_name,
                last_name=request.last_name,
                role=DEFAULT_ROLE,
                is_active=True,
            )
            try:
                users.add(user)
            except IntegrityError as e:
                # A concurrent registration claimed the name or email first
                raise ValidationError("Username or email is already in use") from e
            return self._issue(user)

    def _login(self, request: LoginRequest) -> AuthResponse:
        with self.db.session_scope() as session:
            user = UserRepository(session).find_by_username(request.username)
            if user is None or not user.is_active:
                raise AuthenticationError()
            if not verify_password(request.password, user.password):
                raise AuthenticationError()
            return self._issue(user)

    async def _run(self, func, request):
        try:
            return await run_blocking(func, request)
        except (OperationalError, InterfaceError) as e:
            logger.error("database_unavailable", extra={"error": str(e.orig)})
            raise UpstreamUnavailableError("database") from e

    async def register(self, request: RegisterRequest) -> AuthResponse:
        response = await self._run(self._register, request)
        logger.info("user_registered", extra={"user_id": response.user.id})
        return response

    async def login(self, request: LoginRequest) -> AuthResponse:
        try:
            response = await self._run(self._login, request)
        except AuthenticationError:
            logger.warning("login_rejected", extra={"username": request.username})
            raise
        logger.info("user_logged_in", extra={"user_id": response.user.id})
        return response
