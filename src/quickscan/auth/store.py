from __future__ import annotations

import hashlib
import hmac
import logging
import threading
import uuid
from datetime import timedelta
from typing import Iterable

from email_validator import EmailNotValidError, validate_email

from quickscan.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from quickscan.security.passwords import PasswordHasher, PasswordPolicy, validate_password

from .models import IssuedToken, User, UserRecord
from .settings import AuthSettings
from .tokens import Clock, TokenService, utcnow

logger = logging.getLogger(__name__)

_LOCK_STRIPES = 16
_DEMO_EMAIL_DOMAIN = "quickscan.app"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityStore:
    """In-memory users, demo credentials and bearer token resolution.

    Reads are plain dict lookups. Writes for a given email (or demo string)
    are serialized through one lock out of a fixed stripe table, so unrelated
    registrations never wait on each other.
    """

    def __init__(
        self,
        tokens: TokenService,
        *,
        hasher: PasswordHasher | None = None,
        policy: PasswordPolicy | None = None,
        demo_tokens: Iterable[str] = (),
        clock: Clock = utcnow,
    ):
        self.tokens = tokens
        self._hasher = hasher or PasswordHasher()
        self._policy = policy or PasswordPolicy()
        self._clock = clock
        self._allowed_demo = frozenset(t for t in demo_tokens if t)

        self._by_id: dict[uuid.UUID, UserRecord] = {}
        self._by_email: dict[str, uuid.UUID] = {}
        self._demo_users: dict[str, uuid.UUID] = {}
        self._locks = [threading.Lock() for _ in range(_LOCK_STRIPES)]

    @classmethod
    def from_settings(
        cls,
        settings: AuthSettings,
        *,
        hasher: PasswordHasher | None = None,
        clock: Clock = utcnow,
    ) -> "IdentityStore":
        tokens = TokenService(
            settings.jwt_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(seconds=settings.token_ttl_seconds),
            clock=clock,
        )
        policy = PasswordPolicy(
            min_length=settings.password_min_length,
            max_length=settings.password_max_length,
        )
        return cls(
            tokens,
            hasher=hasher,
            policy=policy,
            demo_tokens=settings.demo_tokens,
            clock=clock,
        )

    def _lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % _LOCK_STRIPES]

    # ------------------------------------------------------------------
    # Registration / login
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, confirm_password: str) -> User:
        try:
            email = normalize_email(
                validate_email(email.strip(), check_deliverability=False).normalized
            )
        except EmailNotValidError as exc:
            raise ValidationError(f"Invalid email address: {exc}") from exc

        if not hmac.compare_digest(password.encode(), confirm_password.encode()):
            raise ValidationError("Passwords do not match")
        validate_password(password, self._policy)

        if email in self._by_email:
            raise ConflictError("Email is already registered")

        password_hash = self._hasher.hash(password)
        with self._lock_for(email):
            if email in self._by_email:
                raise ConflictError("Email is already registered")
            record = UserRecord(
                id=uuid.uuid4(),
                email=email,
                password_hash=password_hash,
                created_at=self._clock(),
            )
            self._by_id[record.id] = record
            self._by_email[email] = record.id

        logger.info("Registered user %s", record.id)
        return record.public()

    def login(self, email: str, password: str) -> User:
        user_id = self._by_email.get(normalize_email(email))
        record = self._by_id.get(user_id) if user_id is not None else None
        if record is None:
            self._hasher.burn(password)
            raise AuthError("Invalid email or password")
        if not self._hasher.verify(password, record.password_hash):
            raise AuthError("Invalid email or password")
        if not record.is_active:
            raise AuthError("Account is disabled")
        return record.public()

    def login_with_token(self, preshared: str) -> User:
        """Exchange an allow-listed demo string for its synthetic user."""
        if preshared not in self._allowed_demo:
            raise AuthError("Invalid token")

        user_id = self._demo_users.get(preshared)
        if user_id is None:
            with self._lock_for(preshared):
                user_id = self._demo_users.get(preshared)
                if user_id is None:
                    digest = hashlib.sha256(preshared.encode()).hexdigest()[:8]
                    record = UserRecord(
                        id=uuid.uuid4(),
                        email=f"token-user+{digest}@{_DEMO_EMAIL_DOMAIN}",
                        password_hash="",
                        created_at=self._clock(),
                        demo=True,
                    )
                    self._by_id[record.id] = record
                    self._demo_users[preshared] = record.id
                    user_id = record.id
                    logger.info("Created demo user %s", record.id)

        record = self._by_id[user_id]
        if not record.is_active:
            raise AuthError("Account is disabled")
        return record.public()

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, user: User) -> IssuedToken:
        return self.tokens.issue(user)

    def resolve(self, credential: str | None) -> User:
        if not credential:
            raise AuthError("Missing bearer token")
        user_id = self.tokens.subject(credential)
        record = self._by_id.get(user_id)
        if record is None:
            raise AuthError("User no longer exists")
        if not record.is_active:
            raise AuthError("Account is disabled")
        return record.public()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_user(self, user_id: uuid.UUID) -> User:
        record = self._by_id.get(user_id)
        if record is None:
            raise NotFoundError(f"User {user_id} not found")
        return record.public()

    def set_active(self, user_id: uuid.UUID, active: bool) -> User:
        record = self._by_id.get(user_id)
        if record is None:
            raise NotFoundError(f"User {user_id} not found")
        with self._lock_for(record.email):
            record.is_active = active
        return record.public()

    def __len__(self) -> int:
        return len(self._by_id)
