"""Restforce models package.

This package contains the Pydantic models used throughout Restforce.
"""

from .base_models import Credential

__all__ = [
    "Credential",
]
