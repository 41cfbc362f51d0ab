"""Error taxonomy shared by the store, the suggestion engine and the API."""


class TaskManagerError(Exception):
    """Base exception for task manager errors."""

    status_code = 500


class ValidationError(TaskManagerError):
    """A required field is missing, blank or out of range."""

    status_code = 400


class NotFoundError(TaskManagerError):
    """No record exists for the given id."""

    status_code = 404


class OracleError(TaskManagerError):
    """The external text-generation call failed, timed out or replied garbage.

    Never surfaced past the suggestion engine, which answers with a fallback.
    """

    status_code = 502


class UnexpectedError(TaskManagerError):
    """Anything else that went wrong while serving a request."""

    status_code = 500
