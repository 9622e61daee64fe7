"""Exception taxonomy for Daybook."""

from __future__ import annotations


class DaybookError(Exception):
    """Base class for all Daybook errors."""


class ValidationError(DaybookError, ValueError):
    """Input rejected: empty payload, unknown category, bad checklist index."""

    def __init__(self, errors: list[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(DaybookError, KeyError):
    """Operation referenced a record id that is not in the store."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(record_id)

    def __str__(self) -> str:
        return f"Record not found: {self.record_id}"


class EmptyCandidatesError(DaybookError):
    """Random selection invoked with nothing to choose from."""


class PersistenceError(DaybookError):
    """Writing the collection to local storage failed.

    The in-memory collection already reflects the mutation; ``record`` holds
    the record that mutation produced, when there is a single one, and
    ``changed`` the number of records a bulk mutation touched.
    """

    def __init__(self, message: str, record=None, changed: int | None = None) -> None:
        super().__init__(message)
        self.record = record
        self.changed = changed
