"""Exceptions raised by adapters at the external-service boundary."""


class BackendError(Exception):
    """Row store or transport failure."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class IdentityError(Exception):
    """Identity provider rejected a request (bad email, expired link, rate limit...)."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ChatRelayError(Exception):
    """Assistant upstream failed or is not configured."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
