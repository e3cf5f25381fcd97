"""Domain-specific exceptions"""

from enum import Enum
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RejectionKind(str, Enum):
    """How the link negotiator treats a Plaid error code"""

    INVALID_PRODUCT = "invalid_product"
    PRODUCTS_NOT_ENABLED = "products_not_enabled"
    OTHER = "other"


_NOT_ENABLED_CODES = {"PRODUCTS_NOT_ENABLED", "PRODUCTS_NOT_SUPPORTED"}


class PlaidAPIError(DomainException):
    """Plaid rejected a request or could not be reached"""

    def __init__(
        self,
        code: str,
        message: str = "",
        http_status: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.payload = payload or {}

    @classmethod
    def from_response(cls, http_status: int, payload: Dict[str, Any]) -> "PlaidAPIError":
        """Build from a non-2xx Plaid response body"""
        code = payload.get("error_code") or payload.get("error") or "PLAID_ERROR"
        message = payload.get("error_message") or payload.get("display_message") or ""
        return cls(code=str(code), message=str(message), http_status=http_status, payload=payload)

    @property
    def kind(self) -> RejectionKind:
        if self.code == "INVALID_PRODUCT":
            return RejectionKind.INVALID_PRODUCT
        if self.code in _NOT_ENABLED_CODES:
            return RejectionKind.PRODUCTS_NOT_ENABLED
        return RejectionKind.OTHER

    @property
    def response_status(self) -> int:
        """HTTP status to report to our own caller"""
        if self.http_status is not None and 400 <= self.http_status <= 599:
            return self.http_status
        return 500


class GatewayError(DomainException):
    """Request-level failure rendered as {"error": code}"""

    status_code = 500

    def __init__(self, code: str, status_code: Optional[int] = None):
        super().__init__(code)
        self.code = code
        if status_code is not None:
            self.status_code = status_code


class NoLinkedItemError(GatewayError):
    """User has no stored Plaid access token"""

    status_code = 401

    def __init__(self):
        super().__init__("NO_LINKED_ITEM_FOR_USER")


class MissingPublicTokenError(GatewayError):
    status_code = 400

    def __init__(self):
        super().__init__("MISSING_PUBLIC_TOKEN")


class EmptyMessageError(GatewayError):
    status_code = 400

    def __init__(self):
        super().__init__("NO_MESSAGE")
