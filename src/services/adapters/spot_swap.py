import logging

from core.config import settings
from core.constants import (
    BPS_DENOMINATOR,
    PRICE_DENOMINATOR,
    SPOT_ADAPTER_KIND,
    SPOT_BUY_EXACT_OUTPUT,
    SPOT_SELL_EXACT_INPUT,
)
from core.errors import InvalidSlippage, TokenTransferFailed
from services.adapters.base import FAILED, Adapter
from services.base import contract_kind, external
from utils.web3_utils import encode_payload

logger = logging.getLogger(__name__)

SWAP_TYPES = ("address", "address", "uint256", "uint256")


@contract_kind(SPOT_ADAPTER_KIND)
class SpotSwapAdapter(Adapter):
    """Constant price AMM with a pool fee, liquidity is the adapter's own balance."""

    operations = {
        SPOT_BUY_EXACT_OUTPUT: ("buy_exact_output", SWAP_TYPES),
        SPOT_SELL_EXACT_INPUT: ("sell_exact_input", SWAP_TYPES),
    }

    @classmethod
    def deploy(cls, ledger, caller, owner_address=None, **config):
        config.setdefault("pool_fee_bps", settings.SPOT_POOL_FEE_BPS)
        config.setdefault("slippage_allowance_min", settings.SLIPPAGE_ALLOWANCE_MIN)
        config.setdefault("slippage_allowance_max", settings.SLIPPAGE_ALLOWANCE_MAX)
        return super().deploy(ledger, caller, owner_address=owner_address, **config)

    @classmethod
    def buy(cls, token_in, token_out, amount_out, amount_in_max):
        return cls.encode(SPOT_BUY_EXACT_OUTPUT, token_in, token_out, amount_out, amount_in_max)

    @classmethod
    def sell(cls, token_in, token_out, amount_in, amount_out_min):
        return cls.encode(SPOT_SELL_EXACT_INPUT, token_in, token_out, amount_in, amount_out_min)

    @external()
    def set_slippage_allowance(self, caller, slippage_allowance_min: int, slippage_allowance_max: int):
        config = self.state()
        self._only_owner(caller, config.owner_address)
        if slippage_allowance_min > slippage_allowance_max:
            raise InvalidSlippage(slippage_allowance_min, slippage_allowance_max)
        config.slippage_allowance_min = slippage_allowance_min
        config.slippage_allowance_max = slippage_allowance_max

    def _check_slippage(self, quote: int, limit_gap: int):
        config = self.state()
        slippage = limit_gap * PRICE_DENOMINATOR // quote
        if not config.slippage_allowance_min <= slippage <= config.slippage_allowance_max:
            raise InvalidSlippage(slippage)

    def _quote(self, token_from: str, token_to: str, amount: int):
        """Fee free amount of ``token_to`` worth ``amount`` of ``token_from``."""
        price_from = self.get_price(token_from)
        price_to = self.get_price(token_to)
        if not price_from or not price_to:
            return None
        return amount * price_from // price_to

    def _swap(self, context, token_in, token_out, amount_in, amount_out):
        source = self.token(token_in)
        target = self.token(token_out)
        if source.balance_of(context.address) < amount_in:
            return FAILED
        if target.balance_of(self.address) < amount_out:
            return FAILED
        if not source.transfer(context.address, self.address, amount_in):
            raise TokenTransferFailed()
        if not target.transfer(self.address, context.address, amount_out):
            raise TokenTransferFailed()
        self.emit(
            "Swap",
            account=context.address,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return True, encode_payload(("uint256", "uint256"), (amount_in, amount_out))

    def buy_exact_output(self, context, ratio, token_in, token_out, amount_out, amount_in_max):
        amount_out = self.scale(amount_out, ratio)
        amount_in_max = self.scale(amount_in_max, ratio)
        quote = self._quote(token_out, token_in, amount_out)
        if not quote:
            return FAILED
        self._check_slippage(quote, amount_in_max - quote)

        fee_bps = self.state().pool_fee_bps
        # round up so the pool never gives the fee away
        amount_in = -(-quote * BPS_DENOMINATOR // (BPS_DENOMINATOR - fee_bps))
        if amount_in > amount_in_max:
            logger.info("buy on %s missed its limit: %d > %d", self.address, amount_in, amount_in_max)
            return FAILED
        return self._swap(context, token_in, token_out, amount_in, amount_out)

    def sell_exact_input(self, context, ratio, token_in, token_out, amount_in, amount_out_min):
        amount_in = self.scale(amount_in, ratio)
        amount_out_min = self.scale(amount_out_min, ratio)
        quote = self._quote(token_in, token_out, amount_in)
        if not quote:
            return FAILED
        self._check_slippage(quote, quote - amount_out_min)

        fee_bps = self.state().pool_fee_bps
        amount_out = quote * (BPS_DENOMINATOR - fee_bps) // BPS_DENOMINATOR
        if amount_out < amount_out_min:
            logger.info("sell on %s missed its limit: %d < %d", self.address, amount_out, amount_out_min)
            return FAILED
        return self._swap(context, token_in, token_out, amount_in, amount_out)
