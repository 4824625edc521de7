from __future__ import annotations

from typing import Any, Iterable


class InvalidInput(ValueError):
    """Raised when a matching run is handed input it cannot score.

    ``offending_ids`` lists the respondent identifiers (or question ids) the
    caller has to fix; it is empty when the problem is not tied to one record.
    """

    def __init__(self, message: str, offending_ids: Iterable[Any] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.offending_ids = list(offending_ids)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "offending_ids": self.offending_ids}
