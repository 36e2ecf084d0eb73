"""Error types raised and reported by the selection engine."""

from __future__ import annotations


class PickerError(RuntimeError):
    """Base error for picker operations."""


class SourceBuildFailure(PickerError):
    """Raised when a single source builder fails.

    The session drops the source and keeps going with the others.
    """

    def __init__(self, builder_name: str, cause: BaseException | str):
        self.builder_name = builder_name
        self.cause = cause
        super().__init__(f"Source '{builder_name}' failed to build: {cause}")


class AllSourcesFailure(PickerError):
    """Raised when no source could be built, so no session can open."""

    def __init__(self, failures: list[SourceBuildFailure]):
        self.failures = failures
        if failures:
            names = ", ".join(f.builder_name for f in failures)
            message = f"No sources available ({len(failures)} failed: {names})"
        else:
            message = "No sources configured"
        super().__init__(message)


class UnknownAction(PickerError):
    """Raised when an action label is not in a source's action menu."""

    def __init__(self, source_name: str, label: str, available: list[str]):
        self.source_name = source_name
        self.label = label
        self.available = available
        super().__init__(
            f"Unknown action '{label}' for source '{source_name}' "
            f"(available: {', '.join(available) or 'none'})"
        )


class ActionFailure(PickerError):
    """Wraps an exception raised by an invoked action."""

    def __init__(self, source_name: str, label: str, cause: BaseException):
        self.source_name = source_name
        self.label = label
        self.cause = cause
        super().__init__(f"{label} failed: {cause}")
