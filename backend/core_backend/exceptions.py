"""
Domain error taxonomy for the ordering and ledger services.

Every error derives from ValueError so callers that already guard service calls
with ``except ValueError`` keep working. Messages are user-facing and are passed
through to API clients verbatim.
"""


class OrderingError(ValueError):
    """Base class for all domain errors raised by the service layer."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(OrderingError):
    """An entity lookup missed."""

    code = "not_found"


class ValidationError(OrderingError):
    """Input or state does not satisfy a business rule."""

    code = "validation_error"


class InvalidTransitionError(ValidationError):
    """An order status change is not allowed by the state machine."""

    code = "invalid_transition"


class InsufficientBalanceError(OrderingError):
    """A points deduction would take a balance below zero."""

    code = "insufficient_balance"


class TrialExpiredError(OrderingError):
    """The cafeteria's trial period is over."""

    code = "trial_expired"


class ForbiddenError(OrderingError):
    """A guard rejected the acting staff member."""

    code = "forbidden"
