"""Error taxonomy — every failure a request can end in, with its HTTP status."""


class MiniDriveError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MiniDriveError):
    status_code = 400
    default_message = "Invalid request body"


class AuthError(MiniDriveError):
    status_code = 400
    default_message = "Invalid email or password"


class ConflictError(MiniDriveError):
    status_code = 400
    default_message = "Email already exists"


class UnauthorizedError(MiniDriveError):
    status_code = 401
    default_message = "Login required"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token"


class NotFoundError(MiniDriveError):
    status_code = 404
    default_message = "File not found"


class StorageError(MiniDriveError):
    default_message = "Storage failure"


class PersistenceError(MiniDriveError):
    default_message = "Database failure"


class SigningError(MiniDriveError):
    default_message = "Failed to generate token"
