"""Exceptions raised by the campground core"""

from typing import Optional


class CampError(Exception):
    """Base exception for YelpCamp"""

    status_code = 400
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(CampError):
    """No principal is attached to the request"""
    status_code = 401
    default_message = "You need to be logged in to do that."


class Forbidden(CampError):
    """Principal is neither the author nor an admin"""
    status_code = 403
    default_message = "You don't have permission to do that."


class NotFound(CampError):
    status_code = 404
    default_message = "Not found."


class InvalidToken(CampError):
    """Reset token is unknown, expired or already consumed"""
    status_code = 400
    default_message = "Password reset token is invalid or has expired."


class PasswordMismatch(CampError):
    status_code = 400
    default_message = "Passwords do not match."


class NoSuchAccount(CampError):
    status_code = 404
    default_message = "No account with that email address exists."


class AccountExists(CampError):
    status_code = 409
    default_message = "A user with the given username or email is already registered."


class AuthFailed(CampError):
    status_code = 401
    default_message = "Invalid username or password."


class AddressUnresolvable(CampError):
    status_code = 422
    default_message = "Invalid address"


class StoreUnavailable(CampError):
    """Persistence failure; the message never carries driver detail"""
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(None)


class NotifierFailed(CampError):
    """Email delivery failed. Logged by callers, never shown as an error."""
    status_code = 502
    default_message = "Email could not be sent."
