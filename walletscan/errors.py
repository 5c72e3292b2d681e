"""Exception hierarchy shared by clients, services and the CLI."""
from __future__ import annotations


class WalletScanError(Exception):
    pass


class RequestValidationError(WalletScanError, ValueError):
    """Rejected request: bad addresses, unsupported network or size limits."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        invalid_wallets: list[str] | None = None,
        invalid_tokens: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [message])
        self.invalid_wallets = list(invalid_wallets or [])
        self.invalid_tokens = list(invalid_tokens or [])


class InvalidAddressError(RequestValidationError):
    pass


class UnsupportedNetworkError(RequestValidationError):
    pass


class DataSourceError(WalletScanError):
    """Transient provider failure; safe to retry."""


class RateLimitError(DataSourceError):
    pass


class BalanceReadError(DataSourceError):
    pass


class TerminalError(WalletScanError):
    """Provider rejected the request itself (bad key, malformed call). Never retried."""
