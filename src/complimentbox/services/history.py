"""History service — everything a code has received, newest first."""

from typing import Optional

from complimentbox.codes import normalize_code
from complimentbox.db.models import Compliment
from complimentbox.store import ComplimentStore


class HistoryService:
    def __init__(self, store: ComplimentStore):
        self.store = store

    async def fetch(self, code: Optional[str]) -> list[Compliment]:
        """Full history for `code`. Unknown codes have an empty history."""
        return await self.store.list_by_code(normalize_code(code))
