import logging

from sqlmodel import func, select

from core.config import settings
from core.constants import (
    PERP_ADAPTER_KIND,
    PERP_CANCEL_ORDER,
    PERP_CREATE_INCREASE_ORDER,
    PERP_DECREASE_POSITION,
    PERP_INCREASE_POSITION,
    PERP_UPDATE_ORDER,
)
from core.errors import TokenTransferFailed
from models import PerpOrder, PerpPosition
from services.adapters.base import FAILED, Adapter
from services.base import contract_kind, external
from utils.calculate_price import calculate_avg_entry_price, mul_div
from utils.web3_utils import encode_payload

logger = logging.getLogger(__name__)

POSITION_TYPES = ("address", "uint256", "uint256", "bool", "uint256")


@contract_kind(PERP_ADAPTER_KIND)
class PerpetualsAdapter(Adapter):
    """Perpetuals venue settled in the context's underlying token.

    Sizes are notional amounts in underlying units, collateral is posted in the underlying
    token and the adapter's own balance pays out realised profits.
    """

    operations = {
        PERP_INCREASE_POSITION: ("increase_position", POSITION_TYPES),
        PERP_DECREASE_POSITION: ("decrease_position", POSITION_TYPES),
        PERP_CREATE_INCREASE_ORDER: ("create_increase_order", POSITION_TYPES),
        PERP_UPDATE_ORDER: ("update_order", ("uint256", "uint256", "uint256")),
        PERP_CANCEL_ORDER: ("cancel_order", ("uint256",)),
    }

    @classmethod
    def deploy(cls, ledger, caller, owner_address=None, **config):
        config.setdefault("max_leverage", settings.PERP_MAX_LEVERAGE)
        return super().deploy(ledger, caller, owner_address=owner_address, **config)

    @classmethod
    def increase(cls, index_token, collateral, size_delta, is_long, acceptable_price):
        return cls.encode(PERP_INCREASE_POSITION, index_token, collateral, size_delta, is_long, acceptable_price)

    @classmethod
    def decrease(cls, index_token, collateral_delta, size_delta, is_long, acceptable_price):
        return cls.encode(PERP_DECREASE_POSITION, index_token, collateral_delta, size_delta, is_long, acceptable_price)

    @classmethod
    def create_order(cls, index_token, collateral, size_delta, is_long, trigger_price):
        return cls.encode(PERP_CREATE_INCREASE_ORDER, index_token, collateral, size_delta, is_long, trigger_price)

    @classmethod
    def update(cls, order_index, size_delta, trigger_price):
        return cls.encode(PERP_UPDATE_ORDER, order_index, size_delta, trigger_price)

    @classmethod
    def cancel(cls, order_index):
        return cls.encode(PERP_CANCEL_ORDER, order_index)

    # state

    def position(self, account: str, index_token: str, is_long: bool) -> PerpPosition:
        row = self.session.get(PerpPosition, (self.address, account, index_token, is_long))
        return row or PerpPosition(
            adapter_address=self.address, account=account, index_token=index_token, is_long=is_long
        )

    def _stored_position(self, account, index_token, is_long) -> PerpPosition:
        return self._get_or_create(
            PerpPosition,
            adapter_address=self.address,
            account=account,
            index_token=index_token,
            is_long=is_long,
        )

    def order(self, account: str, order_index: int) -> PerpOrder:
        return self.session.exec(
            select(PerpOrder).where(
                PerpOrder.adapter_address == self.address,
                PerpOrder.account == account,
                PerpOrder.order_index == order_index,
            )
        ).first()

    def _active_order(self, account, order_index):
        order = self.order(account, order_index)
        if order is None or order.cancelled or order.executed:
            return None
        return order

    def _leverage_ok(self, size: int, collateral: int) -> bool:
        return collateral > 0 and collateral <= size <= collateral * self.state().max_leverage

    @staticmethod
    def _price_acceptable(price: int, acceptable_price: int, is_long: bool, increase: bool) -> bool:
        # buying (long increase, short decrease) must not pay above the limit
        if is_long == increase:
            return price <= acceptable_price
        return price >= acceptable_price

    @staticmethod
    def realised_pnl(size_delta: int, entry_price: int, price: int, is_long: bool) -> int:
        if entry_price == 0:
            return 0
        move = price - entry_price if is_long else entry_price - price
        return mul_div(size_delta, move, entry_price)

    # operations

    def increase_position(self, context, ratio, index_token, collateral, size_delta, is_long, acceptable_price):
        collateral = self.scale(collateral, ratio)
        size_delta = self.scale(size_delta, ratio)
        price = self.get_price(index_token)
        if not price or size_delta == 0:
            return FAILED
        if not self._price_acceptable(price, acceptable_price, is_long, increase=True):
            return FAILED

        current = self.position(context.address, index_token, is_long)
        if not self._leverage_ok(current.size + size_delta, current.collateral + collateral):
            return FAILED
        token = context.underlying_token()
        if token.balance_of(context.address) < collateral:
            return FAILED
        if collateral and not token.transfer(context.address, self.address, collateral):
            raise TokenTransferFailed()

        self._open(context.address, index_token, is_long, collateral, size_delta, price)
        return True, encode_payload(("uint256",), (price,))

    def _open(self, account, index_token, is_long, collateral, size_delta, price):
        position = self._stored_position(account, index_token, is_long)
        position.entry_price = calculate_avg_entry_price(position.size, position.entry_price, size_delta, price)
        position.size += size_delta
        position.collateral += collateral
        self.emit(
            "PositionIncreased",
            account=account,
            index_token=index_token,
            is_long=is_long,
            size_delta=size_delta,
            collateral=collateral,
        )

    def decrease_position(self, context, ratio, index_token, collateral_delta, size_delta, is_long, acceptable_price):
        collateral_delta = self.scale(collateral_delta, ratio)
        size_delta = self.scale(size_delta, ratio)
        price = self.get_price(index_token)
        position = self.session.get(PerpPosition, (self.address, context.address, index_token, is_long))
        if not price or position is None or size_delta == 0:
            return FAILED
        if size_delta > position.size or collateral_delta > position.collateral:
            return FAILED
        if not self._price_acceptable(price, acceptable_price, is_long, increase=False):
            return FAILED

        pnl = self.realised_pnl(size_delta, position.entry_price, price, is_long)
        remaining_size = position.size - size_delta
        if remaining_size == 0:
            collateral_delta = position.collateral
        remaining_collateral = position.collateral - collateral_delta
        payout = collateral_delta + pnl
        if payout < 0:
            # losses beyond the withdrawn collateral come out of what is left
            remaining_collateral += payout
            payout = 0
        if remaining_size == 0:
            remaining_collateral = 0
        elif not self._leverage_ok(remaining_size, remaining_collateral):
            return FAILED

        token = context.underlying_token()
        if token.balance_of(self.address) < payout:
            logger.warning("perpetuals adapter %s cannot cover a payout of %d", self.address, payout)
            return FAILED

        position.size = remaining_size
        position.collateral = remaining_collateral
        if remaining_size == 0:
            position.entry_price = 0
        if payout and not token.transfer(self.address, context.address, payout):
            raise TokenTransferFailed()
        self.emit(
            "PositionDecreased",
            account=context.address,
            index_token=index_token,
            is_long=is_long,
            size_delta=size_delta,
            pnl=pnl,
        )
        return True, encode_payload(("int256",), (pnl,))

    def create_increase_order(self, context, ratio, index_token, collateral, size_delta, is_long, trigger_price):
        collateral = self.scale(collateral, ratio)
        size_delta = self.scale(size_delta, ratio)
        if not self.get_price(index_token) or not self._leverage_ok(size_delta, collateral):
            return FAILED
        token = context.underlying_token()
        if token.balance_of(context.address) < collateral:
            return FAILED
        if not token.transfer(context.address, self.address, collateral):
            raise TokenTransferFailed()

        # per account sequence, mirrored orders get the same index on both sides
        order_index = self.session.exec(
            select(func.count())
            .select_from(PerpOrder)
            .where(PerpOrder.adapter_address == self.address, PerpOrder.account == context.address)
        ).one()
        self.session.add(
            PerpOrder(
                adapter_address=self.address,
                account=context.address,
                order_index=order_index,
                index_token=index_token,
                is_long=is_long,
                collateral=collateral,
                size=size_delta,
                trigger_price=trigger_price,
            )
        )
        self.session.flush()
        self.emit("OrderCreated", account=context.address, order_index=order_index)
        return True, encode_payload(("uint256",), (order_index,))

    def update_order(self, context, ratio, order_index, size_delta, trigger_price):
        size_delta = self.scale(size_delta, ratio)
        order = self._active_order(context.address, order_index)
        if order is None or not self._leverage_ok(size_delta, order.collateral):
            return FAILED
        order.size = size_delta
        order.trigger_price = trigger_price
        self.emit("OrderUpdated", account=context.address, order_index=order_index)
        return True, b""

    def cancel_order(self, context, ratio, order_index):
        order = self._active_order(context.address, order_index)
        if order is None:
            return FAILED
        order.cancelled = True
        if not context.underlying_token().transfer(self.address, context.address, order.collateral):
            raise TokenTransferFailed()
        self.emit("OrderCancelled", account=context.address, order_index=order_index)
        return True, b""

    @external()
    def execute_increase_order(self, caller, account: str, order_index: int) -> bool:
        """Keeper fill of a pending order once the index price crossed its trigger."""
        self._only_owner(caller, self.state().owner_address)
        order = self._active_order(account, order_index)
        if order is None:
            return False
        price = self.get_price(order.index_token)
        if not price:
            return False
        triggered = price <= order.trigger_price if order.is_long else price >= order.trigger_price
        if not triggered:
            return False
        order.executed = True
        self._open(account, order.index_token, order.is_long, order.collateral, order.size, price)
        return True
