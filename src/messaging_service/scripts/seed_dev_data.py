"""Seed development data: a few users, one direct conversation and one group."""
from __future__ import annotations

import asyncio
import logging
import uuid

from messaging_service.application.dto.message import SendMessageDTO
from messaging_service.config import settings
from messaging_service.infrastructure.db.models import UserModel
from messaging_service.infrastructure.db.session import build_engine, build_sessionmaker
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.infrastructure.storage.factory import build_storage
from messaging_service.services import conversation_service, message_service

logger = logging.getLogger(__name__)

USERS = [
    ("Alice Martin", "alice@example.com"),
    ("Bob Keller", "bob@example.com"),
    ("Carol Diaz", "carol@example.com"),
]


async def seed() -> None:
    engine = build_engine(settings)
    sessionmaker = build_sessionmaker(engine)
    storage = build_storage(settings)
    try:
        async with sessionmaker() as session:
            ids = [uuid.uuid4() for _ in USERS]
            session.add_all(
                UserModel(id=uid, name=name, email=email)
                for uid, (name, email) in zip(ids, USERS)
            )
            await session.commit()

            alice, bob, carol = ids
            async with SqlAlchemyUoW(session) as uow:
                direct = await conversation_service.initiate_direct(
                    alice, bob, "Hi Bob, do you have a minute?", uow,
                )
                await conversation_service.initiate_direct(
                    bob, alice, "Sure, what's up?", uow,
                )

                group = await conversation_service.create_group(
                    alice, "Project team", [bob, carol], uow,
                )
                await message_service.send_message(
                    group.id, carol, SendMessageDTO(body="Hello everyone"), [], uow, storage,
                )

        logger.info(
            "Seeded users %s, direct conversation %s, group %s",
            ", ".join(str(i) for i in ids), direct.conversation_id, group.id,
        )
    finally:
        storage.close()
        await engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
