"""Core utilities and configuration for OPR Digital"""
from core.config import settings
from core.exceptions import ExternalAPIError, OPRError, ValidationError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "OPRError",
    "ValidationError",
    "ExternalAPIError",
]
