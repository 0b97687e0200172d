from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quickscan.auth import IdentityStore, User
from quickscan.files import FileService

_bearer = HTTPBearer(auto_error=False)


def get_identity(request: Request) -> IdentityStore:
    return request.app.state.identity


def get_file_service(request: Request) -> FileService:
    return request.app.state.files


def get_credential(
    creds: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str | None:
    """Raw bearer token; absence is reported by the identity store as 401."""
    return creds.credentials if creds else None


def get_current_user(
    identity: Annotated[IdentityStore, Depends(get_identity)],
    credential: Annotated[str | None, Depends(get_credential)],
) -> User:
    return identity.resolve(credential)


Identity = Annotated[IdentityStore, Depends(get_identity)]
Files = Annotated[FileService, Depends(get_file_service)]
Credential = Annotated[str | None, Depends(get_credential)]
CurrentUser = Annotated[User, Depends(get_current_user)]
