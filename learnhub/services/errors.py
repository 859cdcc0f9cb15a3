"""
Domain errors raised by the gamification services. Routes map them to HTTP
status codes; anything else from the storage layer propagates as a 500.
"""


class EngineError(Exception):
    """Base for errors the caller can act on."""


class ValidationFailed(EngineError):
    """Missing or malformed input, detected before any storage mutation."""


class UserNotFound(EngineError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class InvalidXpInput(ValidationFailed, ValueError):
    """Negative experience, score or time passed to the XP calculator."""


class LearningPathNotFound(EngineError):
    def __init__(self, learning_path_id: int):
        super().__init__(f"Learning path {learning_path_id} not found")
        self.learning_path_id = learning_path_id


class AlreadyEnrolled(EngineError):
    """The user already has an enrollment row for this learning path."""
