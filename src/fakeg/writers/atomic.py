import os
import tempfile
from pathlib import Path
from types import TracebackType
from typing import TextIO


class AtomicWriter:
    """Write a text file through a temporary sibling that replaces the target on success.

    If the block raises, the temporary file is removed and the target is left untouched.
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.final_path = os.fspath(path)
        self.encoding = encoding
        self._tmp_path: str | None = None
        self._file: TextIO | None = None

    def __enter__(self) -> TextIO:
        directory = os.path.dirname(os.path.abspath(self.final_path))
        fd, self._tmp_path = tempfile.mkstemp(dir=directory, prefix=".fakeg-", suffix=".tmp")
        # Fixed newline so the artifact is identical on every platform.
        self._file = os.fdopen(fd, "w", encoding=self.encoding, newline="\n")
        return self._file

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        assert self._file is not None and self._tmp_path is not None
        self._file.close()
        if exc_type is None:
            os.chmod(self._tmp_path, 0o644)
            os.replace(self._tmp_path, self.final_path)
        elif os.path.exists(self._tmp_path):
            os.remove(self._tmp_path)
