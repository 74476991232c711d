"""This module defines exceptions related to invalid caller input."""


class QueryValidationError(Exception):
    """Raised when a request is missing required fields or has malformed ones.

    No upstream call is made once this is raised.
    """

    kind = "validation_error"
