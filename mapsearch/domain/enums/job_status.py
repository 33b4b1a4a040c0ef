from enum import Enum


class JobStatus(str, Enum):
    """All possible states of a search job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Terminal states cannot be transitioned out of."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)
