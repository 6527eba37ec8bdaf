"""Mirror a trader wallet operation into the users vault.

Both legs run inside the wallet's transaction, a failure on either side reverts both.
"""

from core.constants import RATIO_DENOMINATOR, TRADER, TRADER_WALLET_LABEL
from core.errors import AdapterOperationFailed, InvalidRound, ProtocolError, UsersVaultOperationFailed
from schemas import AdapterOperation, ExecutionResult


def replicate_operation(
    wallet,
    vault,
    adapter,
    protocol_id: int,
    operation: AdapterOperation,
    replicate: bool,
) -> ExecutionResult:
    # proportion fixed at the last rollover, read before the wallet leg moves any balance
    proportion = wallet.ratio_proportions()
    token = wallet.underlying_token()
    initial_balance = token.balance_of(wallet.address)

    success, trader_return_data = adapter.execute_operation(wallet, RATIO_DENOMINATOR, operation)
    if not success:
        raise AdapterOperationFailed(TRADER)

    vault_return_data = None
    if replicate:
        if proportion == 0:
            raise InvalidRound(wallet.current_round())
        try:
            vault_return_data = vault.execute_on_protocol(
                wallet.address, protocol_id, operation, proportion
            )
        except AdapterOperationFailed:
            raise
        except ProtocolError as e:
            raise UsersVaultOperationFailed() from e

    balance_delta = token.balance_of(wallet.address) - initial_balance
    wallet.emit(
        "OperationExecuted",
        protocol_id=protocol_id,
        timestamp=wallet.ledger.timestamp(),
        label=TRADER_WALLET_LABEL,
        replicate=replicate,
        initial_balance=initial_balance,
        balance_delta=balance_delta,
    )
    return ExecutionResult(
        protocol_id=protocol_id,
        operation_id=operation.operation_id,
        replicated=replicate,
        proportion=proportion,
        initial_balance=initial_balance,
        balance_delta=balance_delta,
        trader_return_data=trader_return_data,
        vault_return_data=vault_return_data,
    )
