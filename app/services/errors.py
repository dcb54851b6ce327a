class ServiceError(RuntimeError):
    """Recoverable service error; carries the HTTP status the API maps it to."""

    status_code = 500


class ValidationError(ServiceError):
    """A required field is missing, empty or malformed."""

    status_code = 400


class NotFoundError(ServiceError):
    """Unknown session or community post id."""

    status_code = 404


class StorageError(ServiceError):
    """The key-value backend failed; callers only ever see a generic message."""

    status_code = 500
