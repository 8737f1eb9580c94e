from flask import jsonify


class ApiError(Exception):
    """A failure the client can act on, rendered as ``{"error": ...}``."""

    def __init__(self, message: str, status: int = 400, inline_error: str = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.inline_error = inline_error

    def to_response(self):
        body = {"error": self.message}
        if self.inline_error:
            body["inline_error"] = self.inline_error
        return jsonify(body), self.status


class NotFound(ApiError):
    def __init__(self, message: str):
        super().__init__(message, status=404)


class Conflict(ApiError):
    def __init__(self, message: str, inline_error: str = None):
        super().__init__(message, status=409, inline_error=inline_error)
