from typing import List

from fastapi import APIRouter, HTTPException
from sqlmodel import select

import schemas
from api.api_v1.deps import SessionDep
from models import EventLog, Transaction

router = APIRouter()


@router.get("/{txhash}/events", response_model=List[schemas.EventLog])
async def get_transaction_events(session: SessionDep, txhash: str):
    if session.get(Transaction, txhash) is None:
        raise HTTPException(
            status_code=404,
            detail=f"Transaction {txhash} not found.",
        )

    events = session.exec(
        select(EventLog).where(EventLog.txhash == txhash).order_by(EventLog.log_index)
    ).all()
    return events
