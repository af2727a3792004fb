"""Star-schema export package."""

from budget_tracker.export.archive import (
    archive_filename,
    build_export_archive,
    read_export_archive,
)
from budget_tracker.export.csv_format import format_decimal, format_value, to_csv
from budget_tracker.export.star_schema import (
    EXPORT_FILES,
    StarSchemaExport,
    build_star_schema,
    export_year,
    month_year_key,
)

__all__ = [
    "EXPORT_FILES",
    "StarSchemaExport",
    "archive_filename",
    "build_export_archive",
    "build_star_schema",
    "export_year",
    "format_decimal",
    "format_value",
    "month_year_key",
    "read_export_archive",
    "to_csv",
]
