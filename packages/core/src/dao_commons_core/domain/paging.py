"""
Page window for list operations.

A ``PageWindow`` is applied orthogonally to the restriction predicate:
``first_result`` becomes the backend's skip/offset and ``max_results`` its
limit.  ``max_results <= 0`` means "no limit".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    """
    Immutable (first_result, max_results) pair.

    Attributes:
        first_result: Index of the first record to return, numbered from 0.
        max_results: Maximum number of records; ``<= 0`` for no limit.
    """

    first_result: int = 0
    max_results: int = 0

    def __post_init__(self) -> None:
        if self.first_result < 0:
            raise ValueError(
                f"first_result must be >= 0, got {self.first_result}"
            )

    @property
    def offset(self) -> int | None:
        """Rows to skip, or ``None`` when nothing is skipped."""
        return self.first_result or None

    @property
    def limit(self) -> int | None:
        """Row limit, or ``None`` when the window is unbounded."""
        return self.max_results if self.max_results > 0 else None

    @property
    def is_unbounded(self) -> bool:
        return self.offset is None and self.limit is None

    def next(self) -> PageWindow:
        """Return the window immediately following this one."""
        if self.limit is None:
            raise ValueError("An unbounded window has no next page")
        return PageWindow(self.first_result + self.max_results, self.max_results)
