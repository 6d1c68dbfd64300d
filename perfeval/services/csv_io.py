"""
CSV framing for catalog import/export.
"""

import csv
import io
from typing import IO, Any, Iterable, List, Sequence, Union

from perfeval.core.exceptions import ValidationError

CsvSource = Union[str, bytes, IO[str], IO[bytes]]


def read_rows(source: CsvSource) -> List[List[str]]:
    """
    Parse CSV text, bytes or a file object into rows of strings.
    A UTF-8 byte order mark (as written by Excel) is dropped.

    Raises:
        ValidationError: If the bytes are not UTF-8
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError(f"CSV file must be UTF-8 encoded (invalid byte at position {e.start})", field="file")
    source = source.lstrip("\ufeff")
    return list(csv.reader(io.StringIO(source)))


def is_blank(row: Sequence[str]) -> bool:
    return all(not (cell or "").strip() for cell in row)


def write_rows(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()
