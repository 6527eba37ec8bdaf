"""Transactional runtime shared by every contract facade.

A ``Ledger`` wraps one SQLModel session. The outermost ``call`` opens a ``Transaction`` row
and either commits the whole unit of work or rolls all of it back, nested calls join it.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

import pendulum
from sqlmodel import Session, select

from core.constants import EVENT_SIGNATURES
from core.errors import InvariantViolation, ProtocolError, ReentrantCall
from models import ContractRecord, EventLog, Transaction
from services.base import CONTRACT_KINDS
from utils.web3_utils import event_topic, random_address, random_txhash

# importing the facades fills CONTRACT_KINDS
from services import adapters_registry, contracts_factory, token, trader_wallet, users_vault  # noqa: F401, E402
from services.adapters import perpetuals, spot_swap  # noqa: F401, E402

logger = logging.getLogger(__name__)


def _to_jsonable(value):
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if hasattr(value, "value"):
        return value.value
    return value


class Ledger:
    def __init__(self, session: Session):
        self.session = session
        self.last_txhash: Optional[str] = None
        self._tx: Optional[Transaction] = None
        self._log_index = 0
        self._locked = set()

    @property
    def in_transaction(self) -> bool:
        return self._tx is not None

    @contextmanager
    def call(self, contract_address: str, caller: str, method: str, nonreentrant=False):
        if nonreentrant:
            if contract_address in self._locked:
                raise ReentrantCall(method)
            self._locked.add(contract_address)

        outermost = self._tx is None
        if outermost:
            self._tx = Transaction(
                txhash=random_txhash(),
                caller=caller,
                contract_address=contract_address,
                method=method,
            )
            self._log_index = 0
            self.session.add(self._tx)
        txhash = self._tx.txhash

        try:
            yield txhash
            if outermost:
                self.session.commit()
                self.last_txhash = txhash
                logger.debug("%s.%s committed in %s", contract_address, method, txhash)
        except Exception as e:
            if outermost:
                self.session.rollback()
                if isinstance(e, ProtocolError):
                    logger.warning(
                        "%s.%s reverted with %s", contract_address, method, e.error_message
                    )
                else:
                    logger.error("%s.%s failed: %s", contract_address, method, e)
            raise
        finally:
            if nonreentrant:
                self._locked.discard(contract_address)
            if outermost:
                self._tx = None

    def emit(self, contract_address: str, event: str, **args):
        if self._tx is None:
            raise InvariantViolation(f"{event} emitted outside of a transaction")
        self.session.add(
            EventLog(
                txhash=self._tx.txhash,
                log_index=self._log_index,
                contract_address=contract_address,
                event=event,
                topic=event_topic(EVENT_SIGNATURES[event]),
                args={k: _to_jsonable(v) for k, v in args.items()},
            )
        )
        self._log_index += 1

    def events(self, txhash: Optional[str] = None, event: Optional[str] = None) -> List[EventLog]:
        statement = (
            select(EventLog)
            .where(EventLog.txhash == (txhash or self.last_txhash))
            .order_by(EventLog.log_index)
        )
        if event is not None:
            statement = statement.where(EventLog.event == event)
        return list(self.session.exec(statement).all())

    def register(self, address: str, kind: str, deployer_address: str):
        self.session.add(
            ContractRecord(address=address, kind=kind, deployer_address=deployer_address)
        )
        self.session.flush()

    def get(self, address: str):
        """Facade for the contract deployed at ``address``, None when nothing is there."""
        record = self.session.get(ContractRecord, address)
        if record is None:
            return None
        return CONTRACT_KINDS[record.kind](self, address)

    def new_address(self) -> str:
        return random_address()

    def timestamp(self) -> int:
        return int(pendulum.now(tz=pendulum.UTC).timestamp())
