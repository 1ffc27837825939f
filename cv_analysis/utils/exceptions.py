"""
Custom exceptions for the application
"""


class CVAnalysisException(Exception):
    """Base exception for the CV analysis application"""

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CVAnalysisException):
    """Raised when a required setting is missing or malformed; the service cannot serve until fixed"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details=details)


class StorageError(CVAnalysisException):
    """Raised when storage operation fails"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)


class DocumentNotFoundError(StorageError):
    """Raised when the requested CV file does not exist in storage"""

    def __init__(self, file_path: str):
        super().__init__(f"File not found: {file_path}", details={"file_path": file_path})
        self.status_code = 404


class AITransportError(CVAnalysisException):
    """Raised when the model endpoint cannot be reached or rejects the call"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=502, details=details)


class AIResponseError(CVAnalysisException):
    """Raised when the model replied but the reply is not usable"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=502, details=details)


class InvalidCustomFieldError(CVAnalysisException):
    """Raised when a custom field definition cannot be validated"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class AnalysisFailedError(CVAnalysisException):
    """Raised when every analysis strategy has failed"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)
