from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity with its pre-resolved permissions."""

    user_id: UUID
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, name: str) -> bool:
        return name in self.permissions
