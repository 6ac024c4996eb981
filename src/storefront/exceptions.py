"""Storefront error taxonomy.

Every error is a Protean exception so it carries a ``messages`` dict and maps
onto an HTTP status in ``storefront.api.errors``:

    ValidationError and subclasses        400
    NotFoundError                         404
    ForbiddenError                        403
    ConflictError and subclasses          409
    PaymentProcessingFailed               500
    GatewayError                          502

``DependencyFailure`` marks a failed side effect (email, notification). It is
always caught where it is raised and only ever logged.
"""

from protean.exceptions import ObjectNotFoundError, ProteanExceptionWithMessage, ValidationError


class NotFoundError(ObjectNotFoundError, ProteanExceptionWithMessage):
    """A referenced entity does not exist, or is not visible to the caller."""


class ForbiddenError(ProteanExceptionWithMessage):
    """The entity exists but belongs to someone else."""


class ConflictError(ValidationError):
    """The request is well-formed but clashes with the current state."""


class InvalidTransition(ConflictError):
    """A status change not allowed by the transition table."""


class InvalidState(ConflictError):
    """The aggregate is not in a state that allows the operation."""


class DuplicateRefund(ConflictError):
    """An order already has a refund."""


class AlreadyProcessed(ConflictError):
    """The refund has already been approved or rejected."""


class OutOfStock(ValidationError):
    pass


class ProductUnavailable(ValidationError):
    pass


class ReturnWindowExpired(ValidationError):
    pass


class SignatureError(ValidationError):
    """A payload's authenticity could not be established."""


class SignatureMismatch(SignatureError):
    pass


class PaymentProcessingFailed(ProteanExceptionWithMessage):
    """The completion transition aborted; the intent is still Pending."""


class GatewayError(ProteanExceptionWithMessage):
    """The payment gateway rejected or failed a request."""


class DependencyFailure(ProteanExceptionWithMessage):
    """A best-effort side effect failed."""
