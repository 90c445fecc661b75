# thumbnail_ingest/services/row_source.py
"""
CSV Row Source

Reads the input file into validated ``InputRow`` objects.

Format: comma separated, first non-blank line is the header, no quoting or
escaping. Header names are trimmed and lower-cased and must include ``id``,
``url`` and ``index`` in any order; extra columns are ignored. Rows that fail
validation are dropped without being reported as errors.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import AnyUrl, TypeAdapter, ValidationError

from ..constants import CSV_DELIMITER, DEFAULT_MAX_FILE_SIZE, REQUIRED_CSV_COLUMNS
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import SourceError
from ..models.image_models import InputRow
from .logger import get_service_logger

logger = get_service_logger(LoggerName.ROW_SOURCE, LogSource.SOURCE)

_URL_ADAPTER = TypeAdapter(AnyUrl)
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def is_valid_url(value: str) -> bool:
    """True when ``value`` parses as an absolute URI."""
    try:
        _URL_ADAPTER.validate_python(value)
        return True
    except ValidationError:
        return False


def parse_index(value: str) -> Optional[int]:
    """Parse a base-10, non-negative integer; None when it is not one."""
    if not value or not _INTEGER_PATTERN.match(value):
        return None
    parsed = int(value, 10)
    return parsed if parsed >= 0 else None


def validate_row(raw: Dict[str, str]) -> Optional[InputRow]:
    """
    Turn a header-mapped raw row into an InputRow.

    Returns:
        InputRow when id, url and index are all usable, None otherwise
    """
    record_id = raw.get("id", "")
    url = raw.get("url", "")
    if not record_id or not url:
        return None

    index = parse_index(raw.get("index", ""))
    if index is None or not is_valid_url(url):
        return None

    return InputRow(id=record_id, index=index, url=url)


def parse_header(line: str) -> List[str]:
    """
    Split and normalise the header line.

    Raises:
        SourceError: If a required column is missing
    """
    headers = [header.strip().lower() for header in line.split(CSV_DELIMITER)]
    missing = [column for column in REQUIRED_CSV_COLUMNS if column not in headers]
    if missing:
        raise SourceError(
            "Invalid CSV structure: missing required headers",
            details={"missing": missing, "headers": headers},
        )
    return headers


def parse_rows(text: str) -> List[InputRow]:
    """
    Parse CSV text into validated rows, preserving input order.

    Raises:
        SourceError: If the text has no header or lacks required columns
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise SourceError("CSV file is empty or has no headers")

    headers = parse_header(lines[0])

    rows: List[InputRow] = []
    dropped = 0
    for line in lines[1:]:
        values = [value.strip() for value in line.split(CSV_DELIMITER)]
        raw = dict(zip(headers, values))
        row = validate_row(raw)
        if row is None:
            dropped += 1
            continue
        rows.append(row)

    if dropped:
        logger.debug(
            f"Dropped {dropped} malformed row(s)",
            extra_context={"dropped": dropped, "kept": len(rows)},
        )
    return rows


class CsvRowSource:
    """Row source backed by a CSV file on disk."""

    def __init__(
        self, path: Union[str, Path], max_file_size: int = DEFAULT_MAX_FILE_SIZE
    ):
        """
        Args:
            path: CSV file location
            max_file_size: Byte ceiling checked before the file is read
        """
        self.path = Path(path)
        self.max_file_size = max_file_size

    def read(self) -> List[InputRow]:
        """
        Read and validate every row of the file.

        Raises:
            SourceError: If the file is missing, too large, unreadable, empty
                or lacks required columns
        """
        try:
            stats = self.path.stat()
        except FileNotFoundError as e:
            raise SourceError("CSV file not found", path=str(self.path)) from e
        except OSError as e:
            raise SourceError(f"Cannot access CSV file: {e}", path=str(self.path)) from e

        if not self.path.is_file():
            raise SourceError("CSV path is not a file", path=str(self.path))

        if stats.st_size > self.max_file_size:
            raise SourceError(
                f"File size exceeds limit of {self.max_file_size} bytes",
                path=str(self.path),
                details={"size": stats.st_size, "limit": self.max_file_size},
            )

        try:
            text = self.path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"Failed to read CSV file: {e}", path=str(self.path)) from e

        try:
            rows = parse_rows(text)
        except SourceError as e:
            e.path = str(self.path)
            raise

        logger.info(
            f"Read {len(rows)} valid row(s) from {self.path.name}",
            emoji=LogEmoji.FILE,
            extra_context={"path": str(self.path), "rows": len(rows)},
        )
        return rows
