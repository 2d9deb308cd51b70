"""Exceptions for the Conversation feature."""
from api.shared.exceptions import (
    CompanionException,
    ConflictError,
    NotFoundError,
)


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation identifier has no record."""

    status_code = 400

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", conversation_id, "CONVERSATION_NOT_FOUND")


class ConversationVersionConflictError(ConflictError):
    """Raised when a conversation changed between read and write."""

    def __init__(self, conversation_id: str, expected_version: int):
        message = (
            f"Conversation '{conversation_id}' was modified concurrently "
            f"(expected version {expected_version}); resubmit the message"
        )
        super().__init__(
            message,
            "CONVERSATION_VERSION_CONFLICT",
            {"conversation_id": conversation_id, "expected_version": expected_version},
        )


class ConversationAlreadyExistsError(CompanionException):
    """Raised when an insert hits an existing conversation identifier."""

    def __init__(self, conversation_id: str):
        message = f"Conversation with ID '{conversation_id}' already exists"
        super().__init__(
            message, "CONVERSATION_ID_COLLISION", {"conversation_id": conversation_id}
        )
