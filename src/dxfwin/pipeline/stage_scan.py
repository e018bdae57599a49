"""Tag Scanning Stage - Tokenize a DXF text stream into group code/value tags.

Every tag occupies two lines: a group code line and a value line. This is
the first stage of the pipeline; all later stages consume ``Tag`` objects.
"""

import io
import math
from dataclasses import dataclass
from typing import IO, Iterator, Optional, Union


class ScanError(ValueError):
    """Raised when the tag stream is malformed or truncated."""


@dataclass(frozen=True)
class Tag:
    """One (group code, value) pair."""

    code: int
    value: str

    def as_float(self) -> float:
        """Value as float, 0.0 when not a finite number."""
        text = self.value.strip()
        # float() also takes digit separators and nan/inf spellings
        if "_" in text:
            return 0.0
        try:
            result = float(text)
        except ValueError:
            return 0.0
        return result if math.isfinite(result) else 0.0

    def as_int(self) -> int:
        """Value as int, 0 when not an integer."""
        text = self.value.strip()
        if "_" in text:
            return 0
        try:
            return int(text)
        except ValueError:
            return 0

    def as_string(self) -> str:
        """Value with surrounding whitespace removed."""
        return self.value.strip()

    def is_marker(self, name: str) -> bool:
        """Check for a code-0 structure tag such as SECTION or ENDSEC."""
        return self.code == 0 and self.value.strip().upper() == name


class TagScanner:
    """Reads tags one pair at a time from a DXF stream.

    Usage mirrors a cursor: ``next()`` advances and returns False at the end
    of the stream or on error, ``last_tag`` holds the current tag and ``err``
    the terminal error (None on a clean end of stream).
    """

    def __init__(self, stream: Union[IO[str], IO[bytes]], encoding: str = "utf-8"):
        """Initialize the scanner.

        Args:
            stream: Text or binary stream. Binary streams are decoded with
                ``encoding``.
            encoding: Encoding used for binary streams.
        """
        if isinstance(stream.read(0), str):
            self._reader = stream
        else:
            # Split on \n only, a lone \r stays inside its value line
            self._reader = io.TextIOWrapper(stream, encoding=encoding, errors="replace", newline="")
        self.last_tag: Tag = Tag(code=-1, value="")
        self.line_number = 0
        self._err: Optional[ScanError] = None
        self._done = False

    @property
    def err(self) -> Optional[ScanError]:
        """Terminal error, None after a clean end of stream."""
        return self._err

    @property
    def done(self) -> bool:
        """True once ``next()`` has returned False."""
        return self._done

    def next(self) -> bool:
        """Advance to the next tag."""
        if self._done:
            return False

        # Code line, blank lines are skipped
        while True:
            code_line = self._reader.readline()
            if code_line == "":
                return self._stop()
            self.line_number += 1
            code_text = code_line.strip()
            if code_text:
                break

        try:
            code = int(code_text)
        except ValueError:
            return self._stop(
                ScanError(f"line {self.line_number}: invalid group code {code_text!r}")
            )

        value_line = self._reader.readline()
        if value_line == "":
            return self._stop(
                ScanError(f"line {self.line_number}: group code {code} has no value line")
            )
        self.line_number += 1

        # Leading/trailing spaces inside the value are significant
        self.last_tag = Tag(code=code, value=value_line.rstrip("\r\n"))
        return True

    def _stop(self, error: Optional[ScanError] = None) -> bool:
        self._err = error
        self._done = True
        return False

    def __iter__(self) -> Iterator[Tag]:
        while self.next():
            yield self.last_tag
        if self._err is not None:
            raise self._err


def iter_tags(stream: Union[IO[str], IO[bytes]], encoding: str = "utf-8") -> Iterator[Tag]:
    """Lazily yield tags from a stream, raising ScanError on malformed input."""
    yield from TagScanner(stream, encoding=encoding)
