"""Error taxonomy shared by the catalog, persistence and commit layers."""

from __future__ import annotations


class PracticeBuilderError(RuntimeError):
    """Base error; ``code`` is machine-readable, ``user_message`` is shown as-is."""

    code = "error"
    default_message = "Something went wrong while saving the practice."

    def __init__(self, code: str | None = None, user_message: str | None = None) -> None:
        self.code = code or self.code
        self.user_message = user_message or self.default_message
        super().__init__(self.code)

    def __str__(self) -> str:
        return self.user_message


class ValidationError(PracticeBuilderError):
    """Bad title, date or duration. Raised before any remote call."""

    code = "validation_failed"
    default_message = "The practice has invalid fields."

    def __init__(
        self,
        code: str | None = None,
        user_message: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(code, user_message)
        self.errors = list(errors or [])


class Unauthenticated(PracticeBuilderError):
    code = "not_authenticated"
    default_message = "Not authenticated. Please sign in and try again."


class NotFound(PracticeBuilderError):
    code = "not_found"
    default_message = "The requested practice or drill no longer exists."


class ReferentialError(PracticeBuilderError):
    """A drill referenced by the plan was removed from the catalog."""

    code = "drill_missing"
    default_message = "One of the drills in this plan no longer exists."


class TransientIO(PracticeBuilderError):
    """Network or storage failure; retrying the whole commit is safe."""

    code = "storage_unavailable"
    default_message = "Storage is temporarily unavailable. Your plan was kept; please retry."


def user_message(exc: BaseException) -> str:
    """Single human-readable line for any failure surfaced to the coach."""

    if isinstance(exc, PracticeBuilderError):
        return exc.user_message
    return PracticeBuilderError.default_message


__all__ = [
    "NotFound",
    "PracticeBuilderError",
    "ReferentialError",
    "TransientIO",
    "Unauthenticated",
    "ValidationError",
    "user_message",
]
