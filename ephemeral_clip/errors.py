from typing import Optional, Dict, Any


class ClipError(Exception):
    """Base error for Ephemeral Clip.

    Every subclass carries a stable error code and the HTTP status the
    API layer should answer with.
    """
    code: str = "CLIP_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        """Standardized error body: {"error": {"code", "message", "details"?}}."""
        error_body: Dict[str, Any] = {
            "code": self.code,
            "message": self.message
        }
        if self.details:
            error_body["details"] = self.details
        return {"error": error_body}


class ValidationError(ClipError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(ClipError):
    """Absent, expired and deleted secrets all look the same to the caller."""
    code = "SECRET_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Secret not found or expired", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class BackendUnavailable(ClipError):
    code = "BACKEND_UNAVAILABLE"
    status_code = 503
    retryable = True


class DecryptionError(ClipError):
    code = "DECRYPTION_FAILED"
    status_code = 400


class KeyUsageError(ClipError):
    code = "KEY_USAGE_DENIED"
    status_code = 400


class CryptoUnsupportedError(ClipError):
    code = "CRYPTO_UNSUPPORTED"
    status_code = 500
