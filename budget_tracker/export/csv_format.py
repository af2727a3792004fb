"""
CSV Rendering for the Star-Schema Export

The format is consumed by external analysis tools and must stay
byte-for-byte stable:
- header row first, rows joined with a bare newline, no trailing newline
- an empty table is the header followed by a single newline
- strings containing a comma or a double quote are wrapped in double
  quotes with inner quotes doubled; nothing else is escaped
- numbers are plain decimals (1500, 12.5), never exponent notation
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping


def format_value(value: Any) -> str:
    """Render one cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format_decimal(value)
    if isinstance(value, str):
        if "," in value or '"' in value:
            return '"' + value.replace('"', '""') + '"'
        return value
    return str(value)


def format_decimal(value: Decimal) -> str:
    """Shortest plain rendering: Decimal('1500.00') -> '1500'."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def to_csv(rows: Iterable[Mapping[str, Any]], headers: list[str]) -> str:
    """Render rows (dicts keyed by header) as CSV text."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(format_value(row.get(header)) for header in headers))
    if len(lines) == 1:
        return lines[0] + "\n"
    return "\n".join(lines)
