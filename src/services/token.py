import logging

from core.constants import TOKEN_KIND, ZERO_ADDRESS
from core.errors import InsufficientAllowance, InsufficientBalance, NegativeAmount, ZeroAddress
from models import TokenAllowance, TokenBalance, TokenState
from services.base import Contract, contract_kind, external, require_address

logger = logging.getLogger(__name__)


def _require_non_negative(amount: int):
    if amount < 0:
        raise NegativeAmount(amount)


@contract_kind(TOKEN_KIND)
class ERC20Token(Contract):
    """Fungible token. Mutating methods return True, reverts raise."""

    @classmethod
    def deploy(cls, ledger, caller, name, symbol, decimals=18, owner_address=None):
        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            cls.initialize_token(ledger, address, name, symbol, decimals, owner_address or caller)
        return cls(ledger, address)

    @staticmethod
    def initialize_token(ledger, address, name, symbol, decimals, owner_address):
        ledger.session.add(
            TokenState(
                address=address,
                name=name,
                symbol=symbol,
                decimals=decimals,
                owner_address=owner_address,
            )
        )
        ledger.session.flush()

    def token_state(self) -> TokenState:
        return self.session.get(TokenState, self.address)

    def name(self) -> str:
        return self.token_state().name

    def symbol(self) -> str:
        return self.token_state().symbol

    def decimals(self) -> int:
        return self.token_state().decimals

    def total_supply(self) -> int:
        return self.token_state().total_supply

    def balance_of(self, holder: str) -> int:
        row = self.session.get(TokenBalance, (self.address, holder))
        return row.amount if row else 0

    def allowance(self, owner: str, spender: str) -> int:
        row = self.session.get(TokenAllowance, (self.address, owner, spender))
        return row.amount if row else 0

    @external()
    def transfer(self, caller, to, amount) -> bool:
        self._transfer(caller, to, amount)
        return True

    @external()
    def approve(self, caller, spender, amount) -> bool:
        require_address(spender, "spender")
        _require_non_negative(amount)
        row = self._get_or_create(
            TokenAllowance,
            token_address=self.address,
            owner_address=caller,
            spender_address=spender,
        )
        row.amount = amount
        self.emit("Approval", owner=caller, spender=spender, value=amount)
        return True

    @external()
    def transfer_from(self, caller, owner, to, amount) -> bool:
        _require_non_negative(amount)
        row = self._get_or_create(
            TokenAllowance,
            token_address=self.address,
            owner_address=owner,
            spender_address=caller,
        )
        if row.amount < amount:
            raise InsufficientAllowance(owner, caller, row.amount, amount)
        row.amount -= amount
        self._transfer(owner, to, amount)
        return True

    @external()
    def mint(self, caller, to, amount) -> bool:
        self._only_owner(caller, self.token_state().owner_address)
        self._mint(to, amount)
        return True

    @external()
    def burn(self, caller, holder, amount) -> bool:
        self._only_owner(caller, self.token_state().owner_address)
        self._burn(holder, amount)
        return True

    def _balance_row(self, holder: str) -> TokenBalance:
        return self._get_or_create(TokenBalance, token_address=self.address, holder_address=holder)

    def _transfer(self, sender, to, amount):
        require_address(to, "to")
        _require_non_negative(amount)
        source = self._balance_row(sender)
        if source.amount < amount:
            raise InsufficientBalance(sender, source.amount, amount)
        source.amount -= amount
        target = self._balance_row(to)
        target.amount += amount
        self.emit("Transfer", sender=sender, to=to, value=amount)

    def _mint(self, to, amount):
        _require_non_negative(amount)
        if to == ZERO_ADDRESS:
            raise ZeroAddress("to")
        state = self.token_state()
        state.total_supply += amount
        self._balance_row(to).amount += amount
        self.emit("Transfer", sender=ZERO_ADDRESS, to=to, value=amount)

    def _burn(self, holder, amount):
        _require_non_negative(amount)
        row = self._balance_row(holder)
        if row.amount < amount:
            raise InsufficientBalance(holder, row.amount, amount)
        row.amount -= amount
        self.token_state().total_supply -= amount
        self.emit("Transfer", sender=holder, to=ZERO_ADDRESS, value=amount)
