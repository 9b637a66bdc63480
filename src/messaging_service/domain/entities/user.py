from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    """Read-only projection of an identity-subsystem user."""

    id: UUID
    name: str
    email: str | None = None
    avatar: str | None = None
