"""
Error types raised by the forum core.

- ValidationError: rejected input, nothing changed
- NotFound: target id does not exist (only raised in strict mode)
- InvariantViolation: internal logic bug, never caused by user input
"""


class ForumError(Exception):
    """Base class for forum core errors"""


class ValidationError(ForumError):
    pass


class NotFound(ForumError):
    def __init__(self, kind: str, target_id: str):
        self.kind = kind
        self.target_id = target_id
        super().__init__(f"{kind} not found: {target_id}")


class InvariantViolation(ForumError, AssertionError):
    pass
