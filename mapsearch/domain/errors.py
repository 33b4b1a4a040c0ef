"""Error taxonomy for search submission and execution."""


class SearchError(Exception):
    """Base class for all expected search failures."""


class ValidationError(SearchError):
    """Bad or missing input. Raised before a job is created."""


class NotFoundError(SearchError):
    """Requested resource is unknown or not visible to the caller."""


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: int) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found.")


class GeocodingError(SearchError):
    """Place name could not be resolved, or the geocoder is unavailable."""


class ScrapeTimeoutError(SearchError):
    """A single scrape attempt exceeded its deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Scrape attempt timed out after {timeout_seconds:g}s.")


class ScrapeFailure(SearchError):
    """The scrape capability errored on every allowed attempt."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Scrape failed after {attempts} attempt(s): {last_error}")
