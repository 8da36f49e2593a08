# storefront/exceptions.py


class ShopError(Exception):
    """Base class for storefront exceptions."""

    pass


class ValidationError(ShopError):
    """Raised when input data fails validation before any write."""

    pass


class InvalidTransitionError(ValidationError):
    """Raised when a campaign status change is not allowed."""

    pass


class EmptyCartError(ValidationError):
    """Raised when checkout is attempted on an empty cart."""

    pass


class AuthorizationError(ShopError):
    """Raised when the caller lacks the role an operation requires."""

    pass


class NotFoundError(ShopError):
    """Raised when a looked-up record does not exist."""

    pass


class CheckoutError(ShopError):
    """Raised when the checkout transaction fails and was rolled back."""

    pass
