from __future__ import annotations

from messaging_service.domain.entities.user import User
from messaging_service.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        name=model.name,
        email=model.email,
        avatar=model.avatar,
    )
