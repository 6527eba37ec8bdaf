from typing import Dict, Optional, Tuple

from eth_abi.exceptions import DecodingError

from core.constants import RATIO_DENOMINATOR
from core.errors import InvalidOperationId
from models import AdapterConfig, OraclePrice
from schemas import AdapterOperation
from services.base import Contract, external, require_address
from utils.calculate_price import mul_div
from utils.web3_utils import decode_payload, encode_payload, normalize_address

FAILED = (False, b"")


class Adapter(Contract):
    """Venue adapter executed in the context of the calling wallet or vault.

    ``execute_operation`` moves the context's balances as if it were the context itself,
    ``ratio`` scales every size field of the payload (1e18 leaves it unchanged).
    """

    state_model = AdapterConfig
    # operation id -> (handler name, abi types of the payload)
    operations: Dict[int, Tuple[str, Tuple[str, ...]]] = {}

    @classmethod
    def deploy(cls, ledger, caller, owner_address=None, **config):
        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            ledger.session.add(
                AdapterConfig(address=address, owner_address=owner_address or caller, **config)
            )
            ledger.session.flush()
        return cls(ledger, address)

    @classmethod
    def encode(cls, operation_id: int, *values) -> AdapterOperation:
        _, types = cls.operations[operation_id]
        return AdapterOperation(operation_id=operation_id, data=encode_payload(types, values))

    def execute_operation(self, context, ratio: int, operation: AdapterOperation) -> Tuple[bool, bytes]:
        with self.ledger.call(self.address, context.address, "execute_operation"):
            if operation.operation_id not in self.operations:
                raise InvalidOperationId(operation.operation_id)
            handler, types = self.operations[operation.operation_id]
            try:
                values = decode_payload(types, operation.data)
            except DecodingError as e:
                raise InvalidOperationId(operation.operation_id) from e
            values = [
                normalize_address(v) if t == "address" else v for t, v in zip(types, values)
            ]
            return getattr(self, handler)(context, ratio, *values)

    def get_price(self, token_address: str) -> Optional[int]:
        row = self.session.get(OraclePrice, (self.address, token_address))
        return row.price if row else None

    @external()
    def set_price(self, caller, token_address: str, price: int):
        self._only_owner(caller, self.state().owner_address)
        require_address(token_address, "token")
        row = self.session.get(OraclePrice, (self.address, token_address))
        if row is None:
            self.session.add(OraclePrice(adapter_address=self.address, token_address=token_address, price=price))
            self.session.flush()
        else:
            row.price = price
        self.emit("PriceSet", token=token_address, price=price)

    @staticmethod
    def scale(amount: int, ratio: int) -> int:
        return mul_div(amount, ratio, RATIO_DENOMINATOR)

    def token(self, address: str):
        return self.ledger.get(address)
