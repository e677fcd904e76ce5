"""Ingress service — anonymous senders submit compliments.

Submission is three ordered steps:
1. Validate code and message
2. Append to the store (committed before anything is published)
3. Publish to the code's room

A store failure fails the request and nothing is published. A publish
failure never does: the compliment is already durable and the recipient
will see it on the next history fetch.
"""

from typing import Optional

import structlog

from complimentbox.codes import normalize_code
from complimentbox.db.models import Compliment
from complimentbox.errors import ValidationError
from complimentbox.realtime.registry import ChannelRegistry
from complimentbox.schemas.compliment import ComplimentRead
from complimentbox.store import ComplimentStore

logger = structlog.get_logger()


class IngressService:
    """Validates, persists and publishes compliments."""

    def __init__(self, store: ComplimentStore, registry: ChannelRegistry):
        self.store = store
        self.registry = registry

    async def submit(self, code: Optional[str], message: Optional[str]) -> Compliment:
        """Store a compliment for `code` and push it to anyone watching."""
        code = normalize_code(code)
        if message is None or not message.strip():
            raise ValidationError("message must not be empty")

        compliment = await self.store.append(code, message)

        try:
            payload = ComplimentRead.model_validate(compliment).model_dump(mode="json")
            delivered = self.registry.publish(code, payload)
        except Exception:
            logger.exception(
                "compliments.publish_failed",
                compliment_id=compliment.id,
                recipient_code=code,
            )
        else:
            logger.info(
                "compliments.submitted",
                compliment_id=compliment.id,
                recipient_code=code,
                delivered=delivered,
            )
        return compliment
