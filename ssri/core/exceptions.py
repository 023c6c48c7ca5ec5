"""
ssri Exception Hierarchy

Custom exceptions for integrity resolution and verification failures.
"""

from typing import Any, Dict, List, Optional


class SRIError(Exception):
    """Base exception for all ssri errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "ESRI"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NoAlgorithmError(SRIError, ValueError):
    """Raised when priority resolution runs over an aggregate with no entries."""

    def __init__(self, message: str = "No algorithms available"):
        super().__init__(message, code="ENOALGORITHM")


class UnsupportedAlgorithmError(SRIError, ValueError):
    """Raised by a hasher backend that does not know the requested algorithm."""

    def __init__(self, algorithm: str, backend: Optional[str] = None):
        super().__init__(
            f"Unsupported algorithm: {algorithm}",
            code="EUNSUPPORTED",
            details={
                "algorithm": algorithm,
                "backend": backend,
            },
        )
        self.algorithm = algorithm
        self.backend = backend


class IntegrityError(SRIError):
    """Raised when content does not satisfy its integrity metadata."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        sri: Optional[Any] = None,
    ):
        super().__init__(message, code=code or "EINTEGRITY", details=details)
        self.sri = sri


class ChecksumMismatchError(IntegrityError):
    """Raised when no expected digest matches the computed one."""

    def __init__(
        self,
        message: str,
        algorithm: Optional[str] = None,
        expected: Optional[List[Any]] = None,
        found: Optional[Any] = None,
        sri: Optional[Any] = None,
    ):
        super().__init__(
            message,
            code="EINTEGRITY",
            details={
                "algorithm": algorithm,
                "expected": [str(meta) for meta in expected or []],
                "found": None if found is None else str(found),
            },
            sri=sri,
        )
        self.algorithm = algorithm
        self.expected = list(expected or [])
        self.found = found


class SizeMismatchError(IntegrityError):
    """Raised when a stream delivers a different number of bytes than declared."""

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        found: Optional[int] = None,
        sri: Optional[Any] = None,
    ):
        super().__init__(
            message,
            code="EBADSIZE",
            details={
                "expected": expected,
                "found": found,
            },
            sri=sri,
        )
        self.expected = expected
        self.found = found


class ConfigurationError(SRIError):
    """Raised when a configuration file fails validation."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(
            message,
            code="ECONFIG",
            details={
                "errors": errors or [],
            },
        )
        self.errors = errors or []
