"""
CSV import and export for sprint records.

Imported text is untrusted: names and notes are sanitized, points are
floored at zero, availability is clamped to 0-100 and dates are normalized
to ISO format before anything reaches the store.
"""

from typing import Iterable, List, Optional
from datetime import date, datetime
import csv
import io
import math
import re

from ..models.sprint import Sprint
from ..utils.logging import get_logger
from .sprint_service import SprintInput, SprintServiceError

logger = get_logger(__name__)

CSV_COLUMNS = [
    "name",
    "startDate",
    "endDate",
    "plannedPoints",
    "completedPoints",
    "teamAvailability",
    "notes",
]
OPTIONAL_COLUMNS = ["teamCapacity"]

TEMPLATE_ROW = [
    "Sprint 1",
    "2024-01-01",
    "2024-01-14",
    "32",
    "28",
    "90",
    "Good sprint, one story moved to next sprint",
]

MAX_NAME_LENGTH = 120
MAX_NOTES_LENGTH = 1000
MAX_DATE_INPUT_LENGTH = 25

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_HTML_TAGS = re.compile(r"<[^>]*>")
_QUOTES = re.compile(r"[\"`]")

# Tried in order; day-first only matches once month-first has failed
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%m/%d/%y",
    "%m-%d-%y",
)


class CSVImportError(SprintServiceError):
    pass


def sanitize_text(value: Optional[str], max_len: int = 500) -> str:
    """Strip control characters and HTML tags, soften quotes and truncate."""

    text = _CONTROL_CHARS.sub("", str(value or ""))
    text = _HTML_TAGS.sub("", text)
    text = _QUOTES.sub("'", text)
    return text[:max_len].strip()


def normalize_date(value: Optional[str], today: Optional[date] = None) -> date:
    """
    Parse a user supplied date in one of the common formats.

    Accepts ISO dates and datetimes, ``MM/DD/YYYY``, ``DD/MM/YYYY`` (when
    the first field cannot be a month), ``YYYY/MM/DD`` and ``MM/DD/YY``
    (two digit years below 50 map to 20xx). Anything else falls back to
    ``today`` with a warning.
    """

    fallback = today or date.today()
    cleaned = sanitize_text(value, MAX_DATE_INPUT_LENGTH).replace("'", "").strip()
    if not cleaned:
        return fallback

    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
        if fmt.endswith("%y") and parsed.year >= 2050:
            # strptime maps 69-99 to 19xx and 00-68 to 20xx
            parsed = parsed.replace(year=parsed.year - 100)
        return parsed.date()

    # fromisoformat only accepts a trailing Z from Python 3.11
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(cleaned).date()
    except ValueError:
        logger.warning("Unable to parse date %r, using %s", value, fallback.isoformat())
        return fallback


def _parse_points(raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


def _parse_availability(raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 100.0
    if not math.isfinite(value):
        return 100.0
    return min(max(value, 0.0), 100.0)


def _parse_capacity(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return max(0.0, value) if math.isfinite(value) else None


def parse_sprints_csv(text: str) -> List[SprintInput]:
    """
    Parse CSV text into validated sprint inputs.

    Raises:
        CSVImportError: If the header or row structure is invalid
    """

    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise CSVImportError("CSV file must contain at least a header and one data row")

    try:
        rows = list(csv.reader(lines))
    except csv.Error as e:
        raise CSVImportError(f"Failed to parse CSV file: {str(e)}")

    headers = [header.strip() for header in rows[0]]
    missing = [column for column in CSV_COLUMNS if column not in headers]
    if missing:
        raise CSVImportError(f"Missing required columns: {', '.join(missing)}")

    sprints: List[SprintInput] = []
    for line_number, values in enumerate(rows[1:], start=2):
        if len(values) != len(headers):
            raise CSVImportError(f"Row {line_number} has incorrect number of columns")

        row = {header: value.strip() for header, value in zip(headers, values)}
        sprints.append(SprintInput(
            name=sanitize_text(row["name"], MAX_NAME_LENGTH) or f"Sprint {line_number - 1}",
            start_date=normalize_date(row["startDate"]),
            end_date=normalize_date(row["endDate"]),
            planned_points=_parse_points(row["plannedPoints"]),
            completed_points=_parse_points(row["completedPoints"]),
            team_availability=_parse_availability(row["teamAvailability"]),
            team_capacity=_parse_capacity(row.get("teamCapacity")),
            notes=sanitize_text(row["notes"], MAX_NOTES_LENGTH),
        ))

    logger.info("Parsed %d sprints from CSV", len(sprints))
    return sprints


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_csv_template() -> str:
    """Header plus one sample row."""

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerow(TEMPLATE_ROW)
    return output.getvalue()


def export_sprints_to_csv(sprints: Iterable[Sprint]) -> str:
    """Serialize sprints using the import column layout plus team capacity."""

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_COLUMNS + OPTIONAL_COLUMNS)
    for sprint in sprints:
        writer.writerow([
            sprint.name,
            sprint.start_date.isoformat(),
            sprint.end_date.isoformat(),
            _format_number(sprint.planned_points),
            _format_number(sprint.completed_points),
            _format_number(sprint.team_availability),
            sprint.notes or "",
            _format_number(sprint.team_capacity),
        ])
    return output.getvalue()
