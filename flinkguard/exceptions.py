"""Errors raised when a FlinkCluster resource is rejected."""
from typing import Optional


class SpecValidationError(ValueError):
    """Base class for every rejection of a FlinkCluster create or update.

    Args:
        message: Human readable reason, surfaced verbatim to the requester
        field: Dotted path of the offending property, if there is one
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class MalformedResource(SpecValidationError):
    """The document does not have the shape of a FlinkCluster resource."""
    pass


class InvalidIdentity(SpecValidationError):
    pass


class InvalidImageSpec(SpecValidationError):
    pass


class InvalidManagerSpec(SpecValidationError):
    pass


class InvalidWorkerSpec(SpecValidationError):
    pass


class InvalidJobSpec(SpecValidationError):
    pass


class InvalidPort(SpecValidationError):
    pass


class InvalidMemoryConfig(SpecValidationError):
    pass


class InvalidCleanupAction(SpecValidationError):
    pass


class SpecImmutable(SpecValidationError):
    """An update changed properties of a cluster that cannot be updated."""
    pass


class IrreversibleCancel(SpecValidationError):
    """An update tried to clear `cancelRequested` once it was set."""
    pass


class PrematureCancelFlag(SpecValidationError):
    """A new job was submitted with `cancelRequested` already true."""
    pass
