import re
import unicodedata
from typing import Iterable, Iterator, TextIO

type Word = str

WORD_RE = re.compile(r"\w+")


class FileAccessError(OSError):
    def __init__(self, path: str, cause: Exception) -> None:
        errno = getattr(cause, "errno", None)
        strerror = getattr(cause, "strerror", None) or str(cause)
        super().__init__(errno, strerror, path)
        self.path = path
        self.cause = cause

    @property
    def notice(self) -> str:
        if isinstance(self.cause, FileNotFoundError):
            return f"file not found: {self.path}"
        else:
            return f"error processing {self.path}: {self.cause}"

    def __str__(self) -> str:
        return self.notice


def words_from_lines(lines: Iterable[str]) -> Iterator[Word]:
    for line in lines:
        # Combining marks are not \w; compose them onto their base letters.
        line = unicodedata.normalize("NFC", line)
        for match in WORD_RE.finditer(line):
            yield match.group().lower()


def read_words(path: str, encoding: str | None = None) -> Iterator[Word]:
    """Lazily yield the lower-cased words of a text file, one line at a time.

    The file is opened before this returns, so a missing or unopenable path
    (including one Python rejects outright, such as an embedded NUL) raises
    FileAccessError here rather than on first iteration. Bytes that cannot
    be decoded become U+FFFD, which never matches a word character.
    """
    try:
        file = open(path, encoding=encoding, errors="replace")
    except (OSError, ValueError) as e:
        raise FileAccessError(path, e) from e

    return _iter_file(path, file)


def _iter_file(path: str, file: TextIO) -> Iterator[Word]:
    with file:
        try:
            yield from words_from_lines(file)
        except OSError as e:
            raise FileAccessError(path, e) from e
