"""Exceptions raised by the streammatch package."""


class StreamMatchError(Exception):
    """Base class for streammatch errors."""


class TMDBError(StreamMatchError):
    """Exception raised for TMDB configuration errors."""


class CatalogError(StreamMatchError):
    """A request to the video catalog failed."""


class ConcurrentJobError(StreamMatchError):
    """A job of the same type is already running."""

    def __init__(self, job_type: str):
        super().__init__(f"A {job_type} job is already in progress")
        self.job_type = job_type


class PendingRenameNotFound(StreamMatchError):
    """No pending AI rename exists for the given catalog entry id."""

    def __init__(self, entry_id: str):
        super().__init__(f"Pending rename not found: {entry_id}")
        self.entry_id = entry_id
