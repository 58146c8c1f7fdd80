"""Exceptions raised by GachaForge services and storage backends."""


class GachaError(RuntimeError):
    """Base class for GachaForge exceptions."""


class ConfigurationError(GachaError):
    """Raised when the prize catalogue or draw settings are unusable."""


class InsufficientFundsError(GachaError):
    """Raised when an account cannot pay for a draw."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"Insufficient points: need {required}, have {available}")
        self.required = required
        self.available = available


class AuthenticationError(GachaError):
    """Raised when the staff passphrase does not match."""


class StoreError(GachaError):
    """Base class for failures reported by a store backend."""


class StoreUnavailableError(StoreError):
    """Raised when the backing store is not configured or cannot be reached."""


class PersistenceError(StoreError):
    """Raised when the store was reachable but a write or read failed."""


class NotFoundError(GachaError):
    """Raised when an account or draw record identifier does not resolve."""


class AlreadyRedeemedError(GachaError):
    """Raised when a draw record has already been marked as redeemed."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Draw record {record_id} is already redeemed")
        self.record_id = record_id


class NotRedeemableError(GachaError):
    """Raised when staff try to redeem an auto-settled prize."""
