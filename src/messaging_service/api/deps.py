"""FastAPI dependency injection helpers.

Long-lived handles (session factory, object storage, token verifier) live on
``app.state`` and are created by the application factory / lifespan; the
helpers below only hand them out per request.
"""
from __future__ import annotations

from typing import Annotated, Any, AsyncIterator, Callable, Coroutine

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from messaging_service.application.dto.principal import Principal
from messaging_service.application.policies.permissions import (
    MessagePermission,
    assert_permission,
)
from messaging_service.application.ports.auth import TokenVerifier
from messaging_service.application.ports.storage import ObjectStorage
from messaging_service.config import Settings
from messaging_service.infrastructure.auth.hs256_verifier import HS256Verifier
from messaging_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_uow(request: Request) -> AsyncIterator[SqlAlchemyUoW]:
    sessionmaker = request.app.state.sessionmaker
    async with sessionmaker() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


StorageDep = Annotated[ObjectStorage, Depends(get_storage)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def build_verifier(settings: Settings) -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_permission(
    permission: MessagePermission,
) -> Callable[[Principal], Coroutine[Any, Any, Principal]]:
    async def _check(principal: CurrentPrincipal) -> Principal:
        assert_permission(principal, permission)
        return principal

    return _check


CanInitiate = Annotated[Principal, Depends(require_permission(MessagePermission.INITIATE))]
CanSend = Annotated[Principal, Depends(require_permission(MessagePermission.SEND))]
CanRead = Annotated[Principal, Depends(require_permission(MessagePermission.READ))]
CanDelete = Annotated[Principal, Depends(require_permission(MessagePermission.DELETE))]
