import functools
from typing import Dict, Type

from core.errors import InvariantViolation, NotOwner, ZeroAddress
from utils.web3_utils import is_zero_address

# kind -> facade class, used by Ledger.get to rehydrate a contract from its address
CONTRACT_KINDS: Dict[str, Type["Contract"]] = {}


def contract_kind(kind: str):
    def decorator(cls):
        cls.kind = kind
        CONTRACT_KINDS[kind] = cls
        return cls

    return decorator


def external(nonreentrant: bool = False):
    """Run the decorated method as an externally callable contract method.

    The first positional argument after ``self`` is the caller address. The body runs inside
    ``Ledger.call`` so a top level invocation commits or reverts as a whole.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, caller, *args, **kwargs):
            with self.ledger.call(
                self.address, caller, func.__name__, nonreentrant=nonreentrant
            ):
                return func(self, caller, *args, **kwargs)

        return wrapper

    return decorator


def require_address(value, name: str):
    if is_zero_address(value):
        raise ZeroAddress(name)
    return value


class Contract:
    kind: str = None
    state_model = None

    def __init__(self, ledger, address: str):
        self.ledger = ledger
        self.address = address

    @property
    def session(self):
        return self.ledger.session

    def state(self):
        state = self.session.get(self.state_model, self.address)
        if state is None:
            raise InvariantViolation(f"{self.kind} {self.address} is not deployed")
        return state

    def emit(self, event: str, **args):
        self.ledger.emit(self.address, event, **args)

    def _only_owner(self, caller: str, owner_address: str):
        if caller != owner_address:
            raise NotOwner(caller)

    def _get_or_create(self, model, **primary_key):
        row = self.session.get(model, primary_key)
        if row is None:
            row = model(**primary_key)
            self.session.add(row)
            self.session.flush()
        return row

    def __eq__(self, other):
        return isinstance(other, Contract) and other.address == self.address

    def __hash__(self):
        return hash(self.address)

    def __repr__(self):
        return f"{type(self).__name__}({self.address})"
