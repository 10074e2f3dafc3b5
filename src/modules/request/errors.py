from typing import Optional


class TransportError(Exception):
    """Base class for failures raised by a transport instead of a response."""
    pass

class ConnectionFailedError(TransportError):
    pass

class RequestTimeoutError(TransportError):
    pass

class SSLVerificationError(TransportError):
    pass

class InvalidUrlError(TransportError):
    pass

class HttpStatusError(TransportError):
    def __init__(self, status: int, body: Optional[object] = None):
        self.status = status
        self.body = body
        super().__init__(f"Request failed with status code {status}")
