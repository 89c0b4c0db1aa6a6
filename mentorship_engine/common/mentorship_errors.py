class MentorshipEngineError(Exception):
    """Base class for every error raised by the mentorship engine."""


class NotFoundError(MentorshipEngineError):
    """Raised when a cycle, match, mentorship, program, task or profile id is unknown."""

    def __init__(self, entity_name: str, entity_id):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"{entity_name} {entity_id} not found.")


class PreconditionFailedError(MentorshipEngineError):
    """Raised when an operation violates a business rule; the message names the rule."""


class DuplicateError(PreconditionFailedError):
    """Raised when a create-once record (evaluation, certificate) already exists."""


class CapacityExceededError(MentorshipEngineError):
    """Raised when a mentor or cycle has no free slot left."""


class ConflictError(MentorshipEngineError):
    """Raised when a concurrent operation won the race for the same state change."""
