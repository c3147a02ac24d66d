"""Typed domain errors for carts, orders, customers and checkout.

Every error carries a stable ``code``, a human readable ``message``, a
``type`` from the taxonomy below and the HTTP status the API maps it to.
Malformed field input is still reported by Protean's own ``ValidationError``.
"""

from enum import Enum
from typing import Any


class ErrorType(Enum):
    VALIDATION = "validation"
    BUSINESS = "business"
    NOT_FOUND = "not-found"
    INFRASTRUCTURE = "infrastructure"


class DomainError(Exception):
    code = "DOMAIN_ERROR"
    type = ErrorType.BUSINESS
    status_code = 400

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "type": self.type.value,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class InvalidMoneyError(DomainError):
    code = "INVALID_MONEY"
    type = ErrorType.VALIDATION


class InvalidQuantityError(DomainError):
    code = "INVALID_QUANTITY"
    type = ErrorType.VALIDATION


class InvalidPriceError(DomainError):
    code = "INVALID_PRICE"
    type = ErrorType.VALIDATION


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
class NegativeResultError(DomainError):
    code = "NEGATIVE_RESULT"


class InvalidDiscountError(DomainError):
    code = "INVALID_DISCOUNT"


class EmptyCartError(DomainError):
    code = "EMPTY_CART"


class EmptyOrderError(DomainError):
    code = "EMPTY_ORDER"


class TooManyItemsError(DomainError):
    code = "TOO_MANY_ITEMS"


class InvalidOrderStateError(DomainError):
    code = "INVALID_ORDER_STATE"
    status_code = 409


class PaymentAlreadyConfirmedError(DomainError):
    code = "PAYMENT_ALREADY_CONFIRMED"
    status_code = 409


class AmountMismatchError(DomainError):
    code = "AMOUNT_MISMATCH"


class PaymentNotConfiguredError(DomainError):
    code = "PAYMENT_NOT_CONFIGURED"


class CustomerNotEligibleError(DomainError):
    code = "CUSTOMER_NOT_ELIGIBLE"
    status_code = 403


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFoundError(DomainError):
    code = "NOT_FOUND"
    type = ErrorType.NOT_FOUND
    status_code = 404


class CartItemNotFoundError(NotFoundError):
    code = "CART_ITEM_NOT_FOUND"


class CartNotFoundError(NotFoundError):
    code = "CART_NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class CustomerNotFoundError(NotFoundError):
    code = "CUSTOMER_NOT_FOUND"


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------
class CheckoutError(DomainError):
    code = "CHECKOUT_ERROR"
    type = ErrorType.INFRASTRUCTURE
    status_code = 500


class PaymentGatewayError(DomainError):
    code = "PAYMENT_GATEWAY_ERROR"
    type = ErrorType.INFRASTRUCTURE
    status_code = 502


def is_domain_error(error: BaseException) -> bool:
    return isinstance(error, DomainError)


def is_validation_error(error: BaseException) -> bool:
    return is_domain_error(error) and error.type is ErrorType.VALIDATION


def is_business_error(error: BaseException) -> bool:
    return is_domain_error(error) and error.type is ErrorType.BUSINESS


def is_not_found_error(error: BaseException) -> bool:
    return is_domain_error(error) and error.type is ErrorType.NOT_FOUND
