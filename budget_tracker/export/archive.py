"""
Export Archive

Bundles the seven CSV files into one zip for download.
"""

import io
import zipfile
from typing import Optional

from budget_tracker.config import get_settings


def archive_filename(year: int, prefix: Optional[str] = None) -> str:
    """e.g. ExportedFinancialData2024.zip"""
    prefix = prefix or get_settings().app.export_filename_prefix
    return f"{prefix}{year}.zip"


def build_export_archive(
    year: int,
    csv_files: dict[str, str],
    prefix: Optional[str] = None,
) -> tuple[str, bytes]:
    """
    Zip the CSV files in memory.
    
    Returns:
        (archive_filename, zip_bytes)
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for filename, content in csv_files.items():
            archive.writestr(filename, content.encode("utf-8"))
    return archive_filename(year, prefix), buffer.getvalue()


def read_export_archive(data: bytes) -> dict[str, str]:
    """Inverse of build_export_archive, for checks and re-imports."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name).decode("utf-8") for name in archive.namelist()}
