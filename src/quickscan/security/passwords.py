from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from fastapi_users.password import PasswordHelper

from quickscan.exceptions import ValidationError

UPPER = re.compile(r"[A-Z]")
DIGIT = re.compile(r"[0-9]")


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8
    max_length: int = 128
    require_upper: bool = False
    require_digit: bool = False


class PasswordValidationError(ValidationError):
    def __init__(self, reasons: Iterable[str]):
        self.reasons = list(reasons)
        super().__init__(
            "Password validation failed: " + ", ".join(self.reasons),
            context={"reasons": self.reasons},
        )


def validate_password(pw: str, policy: PasswordPolicy | None = None) -> None:
    policy = policy or PasswordPolicy()
    reasons: list[str] = []
    if len(pw) < policy.min_length:
        reasons.append(f"min_length({policy.min_length})")
    if len(pw) > policy.max_length:
        reasons.append(f"max_length({policy.max_length})")
    if policy.require_upper and not UPPER.search(pw):
        reasons.append("missing_upper")
    if policy.require_digit and not DIGIT.search(pw):
        reasons.append("missing_digit")
    if reasons:
        raise PasswordValidationError(reasons)


class PasswordHasher:
    """Salted, memory-hard hashing (argon2 through fastapi-users' helper)."""

    def __init__(self, helper: PasswordHelper | None = None):
        self._helper = helper or PasswordHelper()
        # Verified against unknown emails so login timing does not leak membership.
        self._dummy_hash = self._helper.hash("quickscan-dummy-password")

    def hash(self, password: str) -> str:
        return self._helper.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        verified, _ = self._helper.verify_and_update(password, password_hash)
        return verified

    def burn(self, password: str) -> None:
        self._helper.verify_and_update(password, self._dummy_hash)


__all__ = [
    "PasswordPolicy",
    "PasswordValidationError",
    "PasswordHasher",
    "validate_password",
]
