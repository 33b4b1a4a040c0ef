from mapsearch.domain.enums.job_status import JobStatus


# Mapping of valid transitions: from_status -> set of allowed to_statuses
VALID_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    # Terminal states have no outgoing transitions
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class InvalidStateTransitionError(Exception):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, from_status: JobStatus, to_status: JobStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))}"
        )


class JobStateMachine:
    """
    Validates status transitions for the search job lifecycle.

    Stateless: call can_transition() or validate_transition() with explicit statuses.
    """

    def can_transition(self, from_status: JobStatus, to_status: JobStatus) -> bool:
        """Return True if transitioning from_status → to_status is permitted."""
        if from_status.is_terminal:
            return False
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: JobStatus, to_status: JobStatus) -> None:
        """Raise InvalidStateTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: JobStatus) -> frozenset[JobStatus]:
        """Return the set of statuses reachable from from_status."""
        return VALID_TRANSITIONS.get(from_status, frozenset())
