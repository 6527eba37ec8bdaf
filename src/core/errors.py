"""Protocol errors.

Every error carries an ``error_code`` equal to its class name so API handlers and logs can
report it the same way regardless of the family it belongs to.
"""


class ProtocolError(Exception):
    def __init__(self, *args):
        super().__init__(*args)
        self.error_code = type(self).__name__

    @property
    def error_message(self) -> str:
        if not self.args:
            return self.error_code
        return f"{self.error_code}({', '.join(str(a) for a in self.args)})"

    def __str__(self) -> str:
        return self.error_message


class AuthorizationError(ProtocolError):
    pass


class InputValidationError(ProtocolError):
    pass


class EconomicError(ProtocolError):
    pass


class CollaboratorError(ProtocolError):
    pass


class InvariantViolation(ProtocolError):
    pass


# authorization
class CallerNotAllowed(AuthorizationError):
    pass


class UserNotAllowed(AuthorizationError):
    pass


class NotOwner(AuthorizationError):
    pass


class TraderNotAllowed(AuthorizationError):
    pass


# validation
class ZeroAddress(InputValidationError):
    pass


class ZeroAmount(InputValidationError):
    pass


class NegativeAmount(InputValidationError):
    pass


class InvalidRound(InputValidationError):
    pass


class InvalidRollover(InputValidationError):
    pass


class InvalidProtocol(InputValidationError):
    pass


class InvalidAdapter(InputValidationError):
    pass


class AdapterPresent(InputValidationError):
    pass


class AdapterNotPresent(InputValidationError):
    pass


class InvalidVault(InputValidationError):
    pass


class InvalidTraderWallet(InputValidationError):
    pass


class InvalidOperationId(InputValidationError):
    pass


class ReentrantCall(InputValidationError):
    pass


# economic / capacity
class InsufficientShares(EconomicError):
    pass


class InsufficientAssets(EconomicError):
    pass


class FeeRateError(EconomicError):
    pass


class InvalidSlippage(EconomicError):
    pass


class InsufficientBalance(EconomicError):
    pass


class InsufficientAllowance(EconomicError):
    pass


# collaborator failures
class TokenTransferFailed(CollaboratorError):
    pass


class AdapterOperationFailed(CollaboratorError):
    def __init__(self, who: str):
        super().__init__(who)
        self.who = who


class UsersVaultOperationFailed(CollaboratorError):
    pass


class SendToTraderFailed(CollaboratorError):
    pass


class RolloverFailed(CollaboratorError):
    pass
