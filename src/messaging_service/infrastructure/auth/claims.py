from __future__ import annotations

from typing import Any
from uuid import UUID

import jwt

from messaging_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from verified JWT claims (``sub`` + ``permissions``)."""
    try:
        user_id = UUID(str(payload["sub"]))
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token subject must be a user UUID") from exc

    permissions = payload.get("permissions") or []
    if not isinstance(permissions, list):
        raise jwt.InvalidTokenError("Token permissions must be a list")
    return Principal(user_id=user_id, permissions=frozenset(str(p) for p in permissions))
