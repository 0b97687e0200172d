"""Registration, login and token routes.

Handlers are plain ``def`` so FastAPI runs them on its threadpool; password
hashing is CPU bound and would otherwise stall the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter

from quickscan.auth import IdentityStore, User

from ..dependencies import CurrentUser, Identity
from ..envelope import ApiResponse, ok
from ..schemas import AuthOut, LoginRequest, RegisterRequest, TokenRequest, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_out(identity: IdentityStore, user: User) -> AuthOut:
    issued = identity.issue_token(user)
    return AuthOut(
        user=UserOut.model_validate(user),
        token=issued.token,
        expires_at=issued.expires_at,
    )


@router.post("/register", response_model=ApiResponse[AuthOut])
def register(payload: RegisterRequest, identity: Identity):
    user = identity.register(payload.email, payload.password, payload.confirm_password)
    return ok(_auth_out(identity, user), "User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthOut])
def login(payload: LoginRequest, identity: Identity):
    user = identity.login(payload.email, payload.password)
    return ok(_auth_out(identity, user), "Login successful")


@router.post("/token", response_model=ApiResponse[AuthOut])
def login_with_token(payload: TokenRequest, identity: Identity):
    user = identity.login_with_token(payload.token)
    return ok(_auth_out(identity, user), "Token login successful")


@router.post("/verify", response_model=ApiResponse[UserOut])
def verify(payload: TokenRequest, identity: Identity):
    user = identity.resolve(payload.token)
    return ok(UserOut.model_validate(user), "Token is valid")


@router.get("/me", response_model=ApiResponse[UserOut])
def me(user: CurrentUser):
    return ok(UserOut.model_validate(user))
