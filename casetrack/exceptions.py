from typing import List, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = 400
    detail = "Validation failed."

    def __init__(self, errors: List[dict], detail: Optional[str] = None):
        self.errors = errors
        super().__init__(detail)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], detail=message)


class Unauthenticated(AppError):
    status_code = 401
    detail = "Authorization token is missing."


class InvalidCredentials(AppError):
    status_code = 401
    detail = "Incorrect username or password."


class Forbidden(AppError):
    status_code = 403
    detail = "Forbidden."


class NotFound(AppError):
    status_code = 404
    detail = "Not found."


# Duplicate unique key; reported as 400 like any other bad registration
class ConflictError(AppError):
    status_code = 400
    detail = "A user with this username already exists."


class SelfRoleChange(AppError):
    status_code = 400
    detail = "You cannot change your own role."


class RateLimited(AppError):
    status_code = 429
    detail = "Too many requests, please try again later."

    def __init__(self, retry_after: int, detail: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(detail)


# Raised by the token verifier for any malformed, forged or expired token
class TokenInvalid(Exception):
    pass
