from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Sequence

from openpyxl import load_workbook

from .exceptions import IngestError
from .logging import get_logger
from .models import COLUMN_FIELDS, RawPayrollInput

logger = get_logger(__name__)

EXPECTED_COLUMNS: List[str] = list(COLUMN_FIELDS)
DATE_COLUMN = "Date Of Joining"
NAME_COLUMN = "Full Name"


def _column_key(header: str) -> str:
    key = re.sub(r"\s*/\s*", "/", str(header).strip())
    return re.sub(r"\s+", " ", key)


_EXPECTED_BY_KEY = {_column_key(column): column for column in EXPECTED_COLUMNS}


def _cell_text(column: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        if column == DATE_COLUMN:
            return value.strftime("%d/%m/%Y")
        return value.date().isoformat() if isinstance(value, datetime) else value.isoformat()
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _rows_to_inputs(rows: Sequence[Sequence[Any]]) -> List[RawPayrollInput]:
    if len(rows) < 2:
        raise IngestError("Sheet must contain at least a header row and one data row.")

    headers = [_column_key(cell) if cell is not None else "" for cell in rows[0]]
    positions: Dict[str, int] = {}
    for index, header in enumerate(headers):
        column = _EXPECTED_BY_KEY.get(header)
        if column is not None and column not in positions:
            positions[column] = index

    missing = [column for column in EXPECTED_COLUMNS if column not in positions]
    if missing:
        raise IngestError(
            f"Missing expected columns: {', '.join(missing)}. "
            "Please ensure the sheet has all required columns with exact names."
        )

    inputs: List[RawPayrollInput] = []
    for row in rows[1:]:
        values = {
            column: _cell_text(column, row[index] if index < len(row) else None)
            for column, index in positions.items()
        }
        if not values[NAME_COLUMN]:
            continue
        inputs.append(RawPayrollInput.from_row(values))

    if not inputs:
        raise IngestError(f"No valid employee data found. Ensure '{NAME_COLUMN}' is present for all employees.")
    return inputs


def parse_workbook(data: bytes) -> List[RawPayrollInput]:
    """Read payroll rows from the first sheet of an xlsx workbook."""
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise IngestError(f"Error parsing workbook: {exc}") from exc
    try:
        sheet = workbook.worksheets[0]
        rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()
    inputs = _rows_to_inputs(rows)
    logger.info("payroll_file_parsed", format="xlsx", rows=len(inputs))
    return inputs


def parse_csv(text: str) -> List[RawPayrollInput]:
    rows = [row for row in csv.reader(io.StringIO(text))]
    inputs = _rows_to_inputs(rows)
    logger.info("payroll_file_parsed", format="csv", rows=len(inputs))
    return inputs


def load_payroll_file(path: Path) -> List[RawPayrollInput]:
    if not path.exists():
        raise IngestError(f"Payroll file not found at {path}")
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        return parse_workbook(path.read_bytes())
    if suffix == ".csv":
        return parse_csv(path.read_text(encoding="utf-8-sig"))
    raise IngestError("Unsupported payroll file format. Use .xlsx or .csv")
