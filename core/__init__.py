"""Core utilities and configuration for the fund criteria engine"""
from core.config import settings
from core.exceptions import CriteriaEngineError, ValidationError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "CriteriaEngineError",
    "ValidationError",
]
