"""Compliment store — durable append-only log keyed by recipient code.

Every compliment is one INSERT, committed before append() returns, so a
history read issued after a submit response always sees it. There is no
update or delete path.

Reads are stateless: list_by_code() re-queries the database on every call,
there is no cursor to resume.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from complimentbox.db.models import Compliment
from complimentbox.errors import PersistenceError, ValidationError

logger = structlog.get_logger()


class ComplimentStore:
    """Append-only compliment log backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, code: str, message: str) -> Compliment:
        """Persist a compliment for `code`. Returns the stored row."""
        if message is None or not message.strip():
            raise ValidationError("message must not be empty")

        compliment = Compliment(recipient_code=code, message=message)
        try:
            self.db.add(compliment)
            await self.db.commit()
            await self.db.refresh(compliment)
        except (SQLAlchemyError, OSError) as e:
            await self.db.rollback()
            logger.exception("store.append_failed", recipient_code=code)
            raise PersistenceError("could not store compliment") from e
        return compliment

    async def list_by_code(self, code: str) -> list[Compliment]:
        """All compliments for `code`, newest first."""
        try:
            result = await self.db.execute(
                select(Compliment)
                .where(Compliment.recipient_code == code)
                .order_by(Compliment.id.desc())
            )
        except (SQLAlchemyError, OSError) as e:
            logger.exception("store.read_failed", recipient_code=code)
            raise PersistenceError("could not read compliments") from e
        return list(result.scalars().all())
