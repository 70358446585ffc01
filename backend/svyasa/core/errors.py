from __future__ import annotations

from typing import Literal

RejectedField = Literal["nickname", "content"]


class ForumError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ModerationRejected(ForumError):
    status_code = 422

    def __init__(self, kind: RejectedField, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class NotFoundError(ForumError):
    status_code = 404


class AuthenticationError(ForumError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


REMOTE_FAILURE_MESSAGE = "Something went wrong. Please try again."
