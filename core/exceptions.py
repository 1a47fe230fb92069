"""Typed exceptions for checkout failures."""


class CheckoutError(Exception):
    """Base class for checkout errors. The message is safe to show the shopper."""


class CheckoutNotFoundError(CheckoutError):
    """Checkout does not exist or its snapshot expired."""

    def __init__(self, checkout_id: str):
        self.checkout_id = checkout_id
        super().__init__(f"Checkout {checkout_id} not found")


class TierUnavailableError(CheckoutError):
    """Price tier is unknown, inactive or sold out."""


class InvalidCheckoutStateError(CheckoutError):
    """Operation is not allowed in the checkout's current state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while checkout is {state}")


class CheckoutBusyError(CheckoutError):
    """A submit is already in flight for this checkout."""

    def __init__(self):
        super().__init__("Checkout is already being processed")


class RedemptionFailedError(CheckoutError):
    """
    Ledger refused or could not process the redemption.

    Recoverable: no points were deducted. status_code is 400 when the ledger
    answered and refused, 502 when it could not be reached.
    """

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class SessionCreationFailedError(CheckoutError):
    """
    Payment session could not be created.

    points_restored tells whether points taken earlier in the attempt were
    given back (always True when nothing was taken).
    """

    def __init__(self, message: str, points_restored: bool = True):
        self.points_restored = points_restored
        super().__init__(message)


class CompensationFailedError(CheckoutError):
    """
    Points were deducted and could not be restored.

    Needs manual follow-up; the failure is dead-lettered for support.
    """

    def __init__(self, points: int, message: str):
        self.points = points
        super().__init__(message)


class ReconciliationError(CheckoutError):
    """Gateway return parameters do not match this checkout."""
