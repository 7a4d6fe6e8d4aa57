class ChatError(Exception):
    """Base class for errors the request boundary turns into responses."""

    status_code = 400

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(ChatError):
    status_code = 422


class NotFoundError(ChatError):
    status_code = 404


class AuthError(ChatError):
    status_code = 401


class TransportError(ChatError):
    """Raised by the broadcast layer; never leaves the publisher."""

    status_code = 503
