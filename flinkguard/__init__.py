"""
flinkguard - admission validation for FlinkCluster resources.

Rejects invalid FlinkCluster specs on create and enforces that a running
cluster's spec is immutable, except for requesting cancellation of its job.
"""
from .exceptions import SpecValidationError
from .models import FlinkCluster
from .validator import Validator

__all__ = [
    'FlinkCluster',
    'SpecValidationError',
    'Validator',
]

__version__ = "0.1.0"
