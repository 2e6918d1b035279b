"""
Authentication and session errors.
"""


class AuthenticationFailure(Exception):
    """
    Login was rejected.

    The public message and code are the same for every cause so callers cannot
    tell a wrong password from an unknown or inactive account. `reason` holds
    the real cause for logs and the audit trail only.
    """
    message = "Invalid credentials"
    code = "INVALID_CREDENTIALS"

    def __init__(self, reason: str, email: str | None = None):
        super().__init__(self.message)
        self.reason = reason
        self.email = email


class SessionCorruption(Exception):
    """A stored session snapshot could not be parsed into a Principal."""
