"""Parse client commercial configuration files (CSV, XLSX) for batch updates.

Expected header (case and spacing are normalized):
client_code, target_margin_percent, minimum_margin_percent, discount_percent,
forced_vacation_days_per_year, target_hourly_rate

Percentages are 0-100 numbers. Blank cells leave the stored value unchanged.
"""
import csv
import io
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from openpyxl import load_workbook
from pydantic import ValidationError

from calculette.engine.types import COMMERCIAL_CONFIG_FIELDS
from calculette.schemas.client import CommercialConfigUpdate
from calculette.schemas.imports import ImportRowError

CODE_COLUMN = "client_code"
COLUMN_ALIASES = {
    "code": CODE_COLUMN,
    "client": CODE_COLUMN,
    "target_margin": "target_margin_percent",
    "minimum_margin": "minimum_margin_percent",
    "discount": "discount_percent",
    "forced_vacation_days": "forced_vacation_days_per_year",
    "target_rate": "target_hourly_rate",
}


@dataclass
class CommercialConfigRow:
    line: int
    client_code: str
    values: dict


@dataclass
class ParsedImport:
    rows: list[CommercialConfigRow] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)


def parse_commercial_config_file(content: bytes, filename: str, max_rows: int | None = None) -> ParsedImport:
    """Read and validate every row. File-level problems raise ValueError, row problems are collected."""
    ext = Path(filename).suffix.lower()
    if ext == ".csv":
        header, rows = _read_csv(content)
    elif ext == ".xlsx":
        header, rows = _read_xlsx(content)
    elif ext == ".xls":
        raise ValueError("Legacy .xls format is not supported. Please save as .xlsx or export as CSV.")
    else:
        raise ValueError(f"Unsupported file type: {ext or filename}. Use CSV or XLSX.")
    records = _to_records(header, rows)
    if max_rows is not None and len(records) > max_rows:
        raise ValueError(f"File has {len(records)} rows; the maximum is {max_rows}")
    parsed = ParsedImport()
    for line, values in records:
        _parse_record(line, values, parsed)
    return parsed


def _read_csv(content: bytes) -> tuple[list, list[tuple[int, list]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel
    reader = csv.reader(io.StringIO(text), dialect)
    header = next(reader, None) or []
    return header, [(line, row) for line, row in enumerate(reader, start=2)]


def _read_xlsx(content: bytes) -> tuple[list, list[tuple[int, list]]]:
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Could not read Excel file: {e}") from e
    try:
        rows = wb.active.iter_rows(values_only=True)
        header = list(next(rows, None) or [])
        return header, [(line, list(row)) for line, row in enumerate(rows, start=2)]
    finally:
        wb.close()


def _normalize_header(value) -> str:
    name = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
    return COLUMN_ALIASES.get(name, name)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_records(header: list, rows: list[tuple[int, list]]) -> list[tuple[int, dict]]:
    columns = [_normalize_header(h) for h in header]
    if CODE_COLUMN not in columns:
        raise ValueError(f"Missing required column: {CODE_COLUMN}")
    records = []
    for line, row in rows:
        values = {col: cell for col, cell in zip(columns, row) if col}
        if all(_is_blank(v) for v in values.values()):
            continue
        records.append((line, values))
    return records


def _code_text(raw) -> str:
    # Excel stores numeric codes as floats: 1001 comes back as 1001.0
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    return str(raw).strip().upper()


def _to_number(name: str, raw) -> Decimal | int:
    if isinstance(raw, bool):
        raise InvalidOperation
    if isinstance(raw, (int, float, Decimal)):
        number = Decimal(str(raw))
    else:
        text = str(raw).strip().replace("%", "").replace("\u00a0", "").replace(" ", "").replace(",", ".")
        number = Decimal(text)
    if not number.is_finite():
        raise InvalidOperation
    if name == "forced_vacation_days_per_year":
        if number != number.to_integral_value():
            raise InvalidOperation
        return int(number)
    return number


def _parse_record(line: int, values: dict, parsed: ParsedImport) -> None:
    code = values.get(CODE_COLUMN)
    if _is_blank(code):
        parsed.errors.append(ImportRowError(line=line, column=CODE_COLUMN, message="Client code is required"))
        return

    provided = {}
    row_errors = []
    for name in COMMERCIAL_CONFIG_FIELDS:
        raw = values.get(name)
        if _is_blank(raw):
            continue
        try:
            provided[name] = _to_number(name, raw)
        except InvalidOperation:
            row_errors.append(ImportRowError(line=line, column=name, message=f"Invalid number: {raw}"))
    if row_errors:
        parsed.errors.extend(row_errors)
        return
    if not provided:
        parsed.errors.append(ImportRowError(line=line, message="No commercial parameter provided"))
        return

    try:
        validated = CommercialConfigUpdate(**provided)
    except ValidationError as e:
        for err in e.errors():
            column = str(err["loc"][0]) if err["loc"] else None
            parsed.errors.append(ImportRowError(line=line, column=column, message=err["msg"]))
        return

    parsed.rows.append(
        CommercialConfigRow(
            line=line,
            client_code=_code_text(code),
            values=validated.model_dump(include=set(provided)),
        )
    )
