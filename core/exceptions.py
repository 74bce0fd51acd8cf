"""
Custom exceptions for the fund criteria engine
Provides structured error handling across the criteria modules
"""
from typing import Any, Dict, List, Optional


class CriteriaEngineError(Exception):
    """Base exception for all criteria engine errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(CriteriaEngineError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **details} if field else details,
        )


class UnknownFundTypeError(CriteriaEngineError):
    """Raised when no criteria template exists for a fund type"""

    def __init__(self, fund_type: Any, available: Optional[List[str]] = None):
        super().__init__(
            message=f"Unknown fund type: {fund_type}",
            error_code="UNKNOWN_FUND_TYPE",
            details={"fund_type": str(fund_type), "available": available or []},
        )


class UnknownNodeIdError(CriteriaEngineError):
    """Raised when a category or subcategory id does not exist in the tree"""

    def __init__(self, node_type: str, identifier: Any, parent: Optional[str] = None):
        location = f" in category {parent}" if parent else ""
        super().__init__(
            message=f"{node_type} not found{location}: {identifier}",
            error_code="UNKNOWN_NODE_ID",
            details={"node_type": node_type, "identifier": str(identifier), "parent": parent},
        )


class DuplicateNodeError(CriteriaEngineError):
    """Raised when adding a node whose name or id already exists among its siblings"""

    def __init__(self, node_type: str, identifier: Any, parent: Optional[str] = None):
        super().__init__(
            message=f"{node_type} already exists: {identifier}",
            error_code="DUPLICATE",
            details={"node_type": node_type, "identifier": str(identifier), "parent": parent},
        )


class InvalidWeightsError(CriteriaEngineError):
    """Raised when an operation requires a tree whose weights satisfy the 100% invariant"""

    def __init__(self, message: str, violations: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="INVALID_WEIGHTS",
            details={"violations": violations or []},
        )
        self.violations = violations or []


class ConfigurationError(CriteriaEngineError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else {},
        )
