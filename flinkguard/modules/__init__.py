"""
Operations behind the flinkguard API and CLI.
"""
from .admission import review
from .validate import run_create, run_live, run_update

__all__ = [
    'review',
    'run_create',
    'run_live',
    'run_update',
]
