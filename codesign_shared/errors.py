"""
Shared error handling for the code-signing thumbprint bundle verifier.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class ThumbprintBundleError(Exception):
    """Base exception for thumbprint bundle verification."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class KeyParseError(ThumbprintBundleError):
    """Malformed or unsupported public key."""

    def __init__(self, message: str = "Invalid RSA public key", details: Optional[Dict[str, Any]] = None):
        super().__init__("KEY_PARSE_ERROR", message, details)


class SignatureError(ThumbprintBundleError):
    """Token signature or structure did not verify.

    Deliberately carries no details: callers only learn that verification
    failed.
    """

    def __init__(self, message: str = "Bundle verification failed"):
        super().__init__("SIGNATURE_ERROR", message)


class ClaimPolicyError(ThumbprintBundleError):
    """Verified token whose claims violate the bundle policy."""

    def __init__(self, message: str = "Claim policy violation", details: Optional[Dict[str, Any]] = None):
        super().__init__("CLAIM_POLICY_ERROR", message, details)


class EncodingError(ThumbprintBundleError, ValueError):
    """Malformed base64url or hex fingerprint input."""

    def __init__(self, message: str = "Invalid fingerprint encoding", details: Optional[Dict[str, Any]] = None):
        super().__init__("ENCODING_ERROR", message, details)


class IOFailure(ThumbprintBundleError):
    """Certificate, bundle or key file could not be read."""

    def __init__(self, path: str, message: str = "File could not be read", details: Optional[Dict[str, Any]] = None):
        self.path = path
        super().__init__("IO_FAILURE", f"{message}: {path}", {"path": path, **(details or {})})
