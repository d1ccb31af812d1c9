"""Error types surfaced to API clients.

Every error carries a stable ``code`` so clients never need to parse the
human-readable message. Unexpected failures are logged server-side and mapped
to :class:`InternalError`; their details never reach the response body.
"""


class ApiError(Exception):
    status_code = 500
    code = "internal_error"
    message = "Internal server error"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.errors = errors

    def to_dict(self):
        body = {"status": "error", "code": self.code, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ApiError):
    status_code = 400
    code = "validation_error"
    message = "Invalid input"


class Unauthorized(ApiError):
    status_code = 401
    code = "unauthorized"
    message = "Unauthorized"


class InvalidCredentials(ApiError):
    status_code = 401
    code = "invalid_credentials"
    message = "Invalid username or password"


class PasswordLoginUnavailable(ApiError):
    status_code = 401
    code = "password_login_unavailable"
    message = "This account was registered with Google. Please sign in with Google."


class Conflict(ApiError):
    status_code = 409
    code = "conflict"
    message = "Username (email) is already registered"


class InternalError(ApiError):
    pass


class OAuthNotConfigured(InternalError):
    code = "oauth_not_configured"
    message = "Google login is not configured"


def marshmallow_errors(messages):
    """Flatten marshmallow's ``{field: [msg, ...]}`` into a list of dicts."""
    errors = []
    for field, field_messages in (messages or {}).items():
        if isinstance(field_messages, dict):
            # list fields report per-index errors
            for nested in field_messages.values():
                for message in nested:
                    errors.append({"field": field, "msg": message})
            continue
        for message in field_messages:
            errors.append({"field": field, "msg": message})
    return errors
