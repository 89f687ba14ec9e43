"""
Authentication service for signup, login and password reset.

Provides:
- Password hashing and verification (passlib + bcrypt)
- JWT token creation and validation
- User signup and login
- Password reset through the identity provider and mail relay
"""

import asyncio
import structlog
from typing import Optional
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from backend.src.config import Settings, get_settings
from backend.src.errors import (
    AppError, ConflictError, InvalidCredentialsError, NotFoundError,
    ProviderError, is_absent, require_fields
)
from backend.src.models.auth import SignupRequest, TokenPayload, UserDB
from backend.src.repositories.user_repo import UserRepository
from backend.src.services.identity_provider import FirebaseIdentityProvider
from backend.src.services.mail_relay import SmtpMailRelay
from shared.metrics import AuthMetrics

logger = structlog.get_logger(__name__)

RESET_PASSWORD_BODY = "Click the following link to reset your password: {link}"


class AuthService:
    """Service for authentication operations."""

    def __init__(
        self,
        user_repo: UserRepository,
        identity_provider: Optional[FirebaseIdentityProvider] = None,
        mail_relay: Optional[SmtpMailRelay] = None,
        settings: Optional[Settings] = None,
        metrics: Optional[AuthMetrics] = None
    ):
        """
        Initialize auth service.

        Args:
            user_repo: User repository
            identity_provider: Issues password reset links (None if not configured)
            mail_relay: Delivers password reset emails
            settings: Application settings (defaults to cached settings)
            metrics: Optional auth outcome counters
        """
        self.user_repo = user_repo
        self.identity_provider = identity_provider
        self.mail_relay = mail_relay
        self.settings = settings or get_settings()
        self.metrics = metrics

        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.settings.password_bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        try:
            hashed = self.pwd_context.hash(password)
            logger.debug("password_hashed")
            return hashed
        except Exception as e:
            logger.error("password_hash_failed", error=str(e))
            raise

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            verified = self.pwd_context.verify(plain_password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except Exception as e:
            logger.error("password_verify_failed", error=str(e))
            return False

    def create_access_token(
        self,
        user_id: str,
        email: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User ID
            email: User email
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "id": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp())
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.info(
            "access_token_created",
            user_id=user_id,
            expires_in=expires_delta.total_seconds()
        )

        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm]
            )
            token_payload = TokenPayload.model_validate(payload)
        except (JWTError, PydanticValidationError) as e:
            logger.warning("token_decode_failed", error=str(e))
            return None

        logger.debug("token_decoded", user_id=token_payload.id)
        return token_payload

    async def signup(self, request: SignupRequest) -> UserDB:
        """
        Register a new user.

        Args:
            request: Signup fields

        Returns:
            Created user

        Raises:
            ValidationError: If any field is absent
            ConflictError: If the email is already registered
        """
        try:
            require_fields(
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                password=request.password
            )

            # Pre-check only; the unique index on email is authoritative.
            if await self.user_repo.email_exists(request.email):
                logger.warning("signup_email_taken", email=request.email)
                raise ConflictError()

            password_hash = await asyncio.to_thread(self.hash_password, request.password)

            user = await self.user_repo.create_user(
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                password_hash=password_hash
            )
        except AppError as e:
            self._count("signups", type(e).__name__)
            raise

        self._count("signups", "success")
        logger.info("signup_success", user_id=user.id, email=user.email)
        return user

    async def login(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Verify credentials and issue an access token.

        Args:
            email: Account email
            password: Plain text password

        Returns:
            Signed JWT

        Raises:
            NotFoundError: If no user has this email
            InvalidCredentialsError: If the password does not match
        """
        user = None if is_absent(email) else await self.user_repo.get_user_by_email(email)

        if not user:
            logger.warning("authentication_failed_user_not_found", email=email)
            self._count("logins", "user_not_found")
            raise NotFoundError()

        verified = not is_absent(password) and await asyncio.to_thread(
            self.verify_password, password, user.password_hash
        )
        if not verified:
            logger.warning("authentication_failed_invalid_password", email=email)
            self._count("logins", "invalid_credentials")
            raise InvalidCredentialsError()

        token = self.create_access_token(user_id=user.id, email=user.email)

        self._count("logins", "success")
        logger.info("login_success", user_id=user.id, email=user.email)
        return token

    async def reset_password(self, email: Optional[str]) -> str:
        """
        Generate a password reset link and email it to the user.

        Args:
            email: Account email

        Returns:
            The reset link that was sent

        Raises:
            ProviderError: If no provider is configured or it rejects the email
            MailError: If the email could not be delivered
        """
        try:
            if self.identity_provider is None:
                logger.error("password_reset_provider_not_configured")
                raise ProviderError()

            link = await self.identity_provider.generate_password_reset_link(email)

            await self.mail_relay.send_mail(
                to=email,
                subject=self.settings.reset_password_subject,
                body=RESET_PASSWORD_BODY.format(link=link)
            )
        except AppError as e:
            self._count("password_resets", type(e).__name__)
            raise

        self._count("password_resets", "success")
        logger.info("password_reset_sent", email=email)
        return link

    def _count(self, counter: str, outcome: str) -> None:
        if self.metrics is not None:
            getattr(self.metrics, counter).labels(outcome=outcome).inc()
