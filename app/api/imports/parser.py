"""
Alumni import file parsing. Fixed column schema; full_name and email are required,
everything else optional. Cells are trimmed and rows missing a required value are dropped.
"""

import csv
import io
from typing import Dict, Iterable, List, Optional, Sequence

from openpyxl import load_workbook

IMPORT_COLUMNS = (
    "full_name",
    "email",
    "headline",
    "bio",
    "grad_year",
    "department",
    "company",
    "role",
    "location",
    "father_name",
    "primary_mobile",
    "whatsapp_number",
    "linkedin_url",
    "twitter_url",
    "facebook_url",
    "instagram_url",
    "github_url",
    "website_url",
)
REQUIRED_COLUMNS = ("full_name", "email")

SAMPLE_ROWS = (
    (
        "John Doe",
        "john.doe@example.com",
        "Senior Software Engineer",
        "Full-stack developer with 5+ years of experience",
        "2020",
        "Computer Science",
        "Tech Corp",
        "Software Engineer",
        "Bangalore, India",
        "John Doe Sr.",
        "+91 9876543210",
        "+91 9876543210",
        "https://linkedin.com/in/johndoe",
        "https://twitter.com/johndoe",
        "https://facebook.com/johndoe",
        "https://instagram.com/johndoe",
        "https://github.com/johndoe",
        "https://johndoe.com",
    ),
    (
        "Jane Smith",
        "jane.smith@example.com",
        "Senior Developer",
        "Builds scalable applications",
        "2019",
        "Electronics Engineering",
        "Innovation Labs",
        "Lead Developer",
        "Mumbai, India",
        "Robert Smith",
        "+91 9876543211",
        "",
        "https://linkedin.com/in/janesmith",
        "",
        "",
        "",
        "https://github.com/janesmith",
        "",
    ),
)

ImportRowData = Dict[str, Optional[str]]


def _norm_header(value) -> str:
    return (str(value).strip().lower() if value is not None else "").replace(" ", "_")


def _cell(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _check_headers(headers: Sequence[str]) -> None:
    for column in REQUIRED_COLUMNS:
        if column not in headers:
            raise ValueError(f"Missing required column: {column}. Found: {list(headers)}")


def _rows_from(headers: List[str], records: Iterable[Sequence]) -> List[ImportRowData]:
    index = {name: i for i, name in enumerate(headers) if name in IMPORT_COLUMNS}
    rows: List[ImportRowData] = []
    for record in records:
        if not record:
            continue
        row = {
            column: _cell(record[index[column]]) if column in index and index[column] < len(record) else None
            for column in IMPORT_COLUMNS
        }
        if not row["full_name"] or not row["email"]:
            continue
        rows.append(row)
    return rows


def parse_import_csv(text: str) -> List[ImportRowData]:
    """Parse CSV text with a header row. Raises ValueError when a required column is absent."""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header_row = next(reader, None)
    if not header_row:
        raise ValueError("CSV file has no header row")
    headers = [_norm_header(h) for h in header_row]
    _check_headers(headers)
    return _rows_from(headers, reader)


def parse_import_xlsx(content: bytes) -> List[ImportRowData]:
    """Same as parse_import_csv for the first sheet of an Excel workbook."""
    try:
        wb = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Invalid Excel file: {e}") from e
    try:
        ws = wb.active
        if ws is None:
            raise ValueError("Excel file has no active sheet")
        rows_iter = ws.iter_rows(values_only=True)
        header_row = next(rows_iter, None)
        if not header_row:
            raise ValueError("Excel file has no header row")
        headers = [_norm_header(h) for h in header_row]
        _check_headers(headers)
        return _rows_from(headers, rows_iter)
    finally:
        wb.close()


def sample_csv() -> str:
    """Downloadable template: the header row plus two example rows."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(IMPORT_COLUMNS)
    writer.writerows(SAMPLE_ROWS)
    return out.getvalue()
