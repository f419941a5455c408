"""Domain errors raised by the chain, allowance and payout services.

Each error carries the HTTP status the API layer answers with, so endpoints
and the exception handler in ``app.main`` never need to know which service
raised it.
"""
from decimal import Decimal
from typing import Optional


class MarketplaceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ChainUnavailable(MarketplaceError):
    """RPC call failed, timed out or returned something unusable"""
    status_code = 502


class ChainCallReverted(MarketplaceError):
    """The chain accepted the request but rejected the call or transaction"""
    status_code = 400


class ConfigurationMissing(MarketplaceError):
    status_code = 500


class PayoutValidationError(MarketplaceError):
    status_code = 400


class PayoutInProgress(MarketplaceError):
    status_code = 409


class WalletNotFound(MarketplaceError):
    status_code = 404


class InsufficientAllowance(MarketplaceError):
    status_code = 400

    def __init__(self, held: Decimal, needed: Decimal):
        self.held = held
        self.needed = needed
        super().__init__(
            f"User allowance is insufficient. Has: {format_token_amount(held)}, Needs: {needed}"
        )


def format_token_amount(value: Decimal) -> str:
    """Render a token amount without exponent notation, keeping at least one decimal"""
    text = format(value.normalize(), "f") if value else "0"
    if "." not in text:
        text += ".0"
    return text
