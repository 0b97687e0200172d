from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class UserRecord:
    """Stored user, hash included. Never leaves the identity store."""

    id: uuid.UUID
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime = field(compare=False)
    is_active: bool = True
    # Set for synthetic users created from a pre-shared demo string.
    demo: bool = False

    def public(self) -> "User":
        return User(
            id=self.id,
            email=self.email,
            created_at=self.created_at,
            is_active=self.is_active,
        )


@dataclass(frozen=True)
class User:
    id: uuid.UUID
    email: str
    created_at: datetime
    is_active: bool = True


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime
