from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from core.db import engine
from services.ledger import Ledger


def get_db() -> Generator:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]


def get_ledger(session: SessionDep) -> Ledger:
    return Ledger(session)


LedgerDep = Annotated[Ledger, Depends(get_ledger)]
