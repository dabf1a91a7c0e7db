"""Page cursor and last-page bookkeeping for paginated fetches."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PaginationTracker:
    page: int | None = None
    last_page_reached: bool = False

    @property
    def enabled(self) -> bool:
        return self.page is not None

    @property
    def exhausted(self) -> bool:
        return self.enabled and self.last_page_reached

    def set_page(self, page: int | None) -> None:
        if page is not None and (isinstance(page, bool) or not isinstance(page, int) or page < 1):
            raise ValueError(f"Page must be a positive integer or None, got {page!r}")
        self.page = page
        self.last_page_reached = False

    def advance(self) -> None:
        if self.page is None:
            raise RuntimeError("Cannot advance a collection that is not paginated")
        self.page += 1

    def mark_last_page(self) -> None:
        self.last_page_reached = True
