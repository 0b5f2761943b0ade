"""
Errors raised by the ingest pipeline, each mapped to an HTTP status
"""


class IngestError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class PayloadError(IngestError):
    """Request body or parameters cannot be processed (client error)"""
    status_code = 400


class AuthenticationError(IngestError):
    status_code = 401


class ConfigurationError(IngestError):
    """Server is missing configuration required to serve the request"""
    status_code = 500


class PersistenceError(IngestError):
    """A chunk insert failed; earlier chunks stay committed"""
    status_code = 500

    def __init__(self, message: str, committed: int, uncommitted: int):
        super().__init__(message)
        self.committed = committed
        self.uncommitted = uncommitted
