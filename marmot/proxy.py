"""A filtered and optionally sorted view over a list model."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable


def _default_key(item: Any) -> str:
    name = getattr(item, "name", None)
    return name if isinstance(name, str) else str(item)


class SortFilterProxyModel:
    """Shows the rows of a source collection whose text matches a filter.

    Matching is a case-insensitive regular-expression search on the text that
    ``key`` gives for each row. Rows keep the source order unless ``sort_key``
    is set.
    """

    def __init__(
        self,
        source: Iterable[Any] = (),
        key: Callable[[Any], str] = _default_key,
        sort_key: Callable[[Any], Any] | None = None,
        reverse: bool = False,
    ) -> None:
        self.source = source
        self.key = key
        self.sort_key = sort_key
        self.reverse = reverse
        self._filter: re.Pattern[str] | None = None

    @property
    def filter(self) -> str:
        return self._filter.pattern if self._filter is not None else ""

    def set_filter(self, pattern: str) -> None:
        """Show only rows matching pattern; an empty pattern shows every row."""
        if not pattern:
            self._filter = None
            return
        try:
            self._filter = re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise ValueError(f"invalid filter {pattern!r}: {exc}") from exc

    def _source_rows(self) -> list[int]:
        items = list(self.source)
        rows = [
            row
            for row, item in enumerate(items)
            if self._filter is None or self._filter.search(self.key(item))
        ]
        if self.sort_key is not None:
            rows.sort(key=lambda row: self.sort_key(items[row]), reverse=self.reverse)
        return rows

    def rows(self) -> list[Any]:
        """The visible items, in view order."""
        items = list(self.source)
        return [items[row] for row in self._source_rows()]

    def __len__(self) -> int:
        return len(self._source_rows())

    def source_index(self, proxy_row: int) -> int:
        """Source row shown at proxy_row, or -1 when there is no such row."""
        rows = self._source_rows()
        if not 0 <= proxy_row < len(rows):
            return -1
        return rows[proxy_row]