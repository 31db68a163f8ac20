import re
from collections.abc import Iterable, Sequence
from typing import TextIO

from fakeg.exceptions import InternalCodeError


class LineCursor:
    """Position-tracked reader over the lines of one log.

    The whole log is held in memory. Every scan moves a single integer
    position, which callers can save with `tell()` and restore with
    `seek()`. A failed `find()` leaves the position where the scan began.
    """

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = list(lines)
        self._pos = 0

    @classmethod
    def from_stream(cls, stream: TextIO) -> "LineCursor":
        return cls(stream.read().splitlines())

    @classmethod
    def from_text(cls, text: str) -> "LineCursor":
        return cls(text.splitlines())

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._lines)

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int) -> None:
        if not 0 <= pos <= len(self._lines):
            raise InternalCodeError(f"Cursor position {pos} outside 0..{len(self._lines)}")
        self._pos = pos

    def reset(self) -> None:
        self._pos = 0

    def readline(self) -> str | None:
        if self.at_end:
            return None
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def peek(self) -> str | None:
        return None if self.at_end else self._lines[self._pos]

    def skip(self, n: int = 1) -> None:
        self._pos = min(self._pos + n, len(self._lines))

    def line_at(self, pos: int) -> str:
        return self._lines[pos]

    def find(
        self,
        marker: str | re.Pattern[str],
        stop: Iterable[str | re.Pattern[str]] = (),
        end: int | None = None,
    ) -> str | None:
        """Advance to the next line containing `marker` and return it.

        The scan gives up at a line matching any `stop` marker, at position
        `end`, or at end of stream. On failure the position is restored.
        """
        start = self._pos
        stop = tuple(stop)
        limit = len(self._lines) if end is None else min(end, len(self._lines))
        while self._pos < limit:
            line = self._lines[self._pos]
            self._pos += 1
            if _contains(line, marker):
                return line
            if any(_contains(line, s) for s in stop):
                break
        self._pos = start
        return None

    def find_all(self, marker: str | re.Pattern[str]) -> list[int]:
        """Positions of every line containing `marker`, independent of the cursor."""
        return [i for i, line in enumerate(self._lines) if _contains(line, marker)]


def _contains(line: str, marker: str | re.Pattern[str]) -> bool:
    if isinstance(marker, str):
        return marker in line
    return marker.search(line) is not None
