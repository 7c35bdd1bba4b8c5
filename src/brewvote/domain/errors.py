"""Domain-level errors raised by the voting services."""


class VotingError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidArgumentError(VotingError):
    """Raised when required fields are missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT")
        self.field = field


class UnauthorizedError(VotingError):
    """Raised when an identity cannot be established."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(VotingError):
    """Raised when the identity lacks the role for an action."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, code="FORBIDDEN")


class DuplicateVoteError(VotingError):
    """Raised when a user already voted in a session."""

    def __init__(self, session_id: str, user_id: str) -> None:
        super().__init__("User already voted in this session", code="DUPLICATE_VOTE")
        self.session_id = session_id
        self.user_id = user_id


class NotFoundError(VotingError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, identifier: str) -> None:
        super().__init__(f"{entity_type} '{identifier}' not found", code="NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class StorageFailureError(VotingError):
    """Raised when the backing record store fails or is unreachable."""

    def __init__(self, message: str = "Storage failure") -> None:
        super().__init__(message, code="STORAGE_FAILURE")
