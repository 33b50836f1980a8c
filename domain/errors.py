# esquadria/domain/errors.py

from typing import Dict


class DashboardError(Exception):
    """Base class for errors raised by the services."""


class FieldValidationError(DashboardError):
    """
    One or more form fields are missing or invalid.

    `errors` maps every violated field to a user-facing message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(self.errors)
        super().__init__(f"Invalid fields: {fields}")


class PersistenceError(DashboardError):
    """A primary write to the record store failed."""


class NotAuthenticatedError(DashboardError):
    """No signed-in user, or sign-in was rejected."""


class DuplicateSubmissionError(DashboardError):
    """A submission with the same request token is still being processed."""
