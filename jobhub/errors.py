# jobhub/errors.py


class JobHubError(Exception):
    """ Base class for errors raised by the marketplace services. """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JobHubError):
    """ Input rejected before any database call was made. """


class AuthorizationError(JobHubError):
    """ The acting user is missing or lacks the required role. """


class NotFoundError(JobHubError):
    """ A record the operation depends on does not exist. """


class GatewayError(JobHubError):
    """
    A failed gateway call, tagged with the operation, table and kind of failure.
    kind is one of 'unknown_table', 'not_found' or 'database'.
    """

    def __init__(self, message: str, operation: str, table: str, kind: str = "database"):
        super().__init__(message)
        self.operation = operation
        self.table = table
        self.kind = kind

    def __str__(self):
        return f"{self.operation} {self.table} failed ({self.kind}): {self.message}"


class PostingError(JobHubError):
    """ A load-bearing step of job posting failed; no job was created. """


class RespondError(JobHubError):
    """
    Accepting or declining a job notification failed.
    notification_updated tells whether the status change was already written
    before the failure (the application insert is not compensated).
    """

    def __init__(self, message: str, notification_updated: bool = False):
        super().__init__(message)
        self.notification_updated = notification_updated
