"""Exception hierarchy for CivicLens."""

from typing import Optional, Dict, Any


class CivicLensError(Exception):
    """Base exception for all CivicLens errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


class ClassifyError(CivicLensError):
    """Remote classification failed (transport, status or malformed output)."""
    
    def __init__(self, message: str, reason: str, response_snippet: Optional[str] = None):
        context = {'reason': reason}
        if response_snippet is not None:
            context['response_snippet'] = response_snippet
        super().__init__(message, context=context)
        self.reason = reason


class StorageError(CivicLensError):
    """Durable local storage could not be read or written."""
    
    def __init__(self, operation: str, key: str, original_error: Exception):
        message = f"Storage {operation} failed for key '{key}'"
        context = {
            'operation': operation,
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class ComplaintStoreError(CivicLensError):
    """Remote document store operation failed."""
    pass


class SubmissionRejected(CivicLensError):
    """A submission was refused before classification."""
    pass
