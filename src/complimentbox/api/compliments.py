"""Compliments API — senders submit, recipients read history.

Routes:
- POST /compliments → submit an anonymous compliment (published live)
- GET /compliments/:code → full history for a code, newest first
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from complimentbox.api.dependencies import get_registry
from complimentbox.db.engine import get_db
from complimentbox.errors import PersistenceError, ValidationError
from complimentbox.realtime.registry import ChannelRegistry
from complimentbox.schemas.compliment import (
    ComplimentCreate,
    ComplimentList,
    ComplimentRead,
)
from complimentbox.services.history import HistoryService
from complimentbox.services.ingress import IngressService
from complimentbox.store import ComplimentStore

router = APIRouter()


def _get_ingress(
    db: AsyncSession = Depends(get_db),
    registry: ChannelRegistry = Depends(get_registry),
) -> IngressService:
    return IngressService(store=ComplimentStore(db), registry=registry)


def _get_history(db: AsyncSession = Depends(get_db)) -> HistoryService:
    return HistoryService(store=ComplimentStore(db))


# ─── Submit (sender → platform) ─────────────────────────


@router.post("/compliments", response_model=ComplimentRead, status_code=201)
async def submit_compliment(
    body: ComplimentCreate,
    svc: IngressService = Depends(_get_ingress),
):
    """Store a compliment and push it to the recipient's room."""
    try:
        return await svc.submit(body.recipient_code, body.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


# ─── History (recipient ← platform) ─────────────────────


@router.get("/compliments/{code}", response_model=ComplimentList)
async def list_compliments(
    code: str,
    svc: HistoryService = Depends(_get_history),
):
    """Every compliment received by a code, newest first."""
    try:
        compliments = await svc.fetch(code)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ComplimentList(
        compliments=[ComplimentRead.model_validate(c) for c in compliments]
    )
