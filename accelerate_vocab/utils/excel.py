"""Helper utilities for importing vocabulary from Excel workbooks."""
from __future__ import annotations

from typing import Any, List, Optional, Tuple
import logging

import pandas as pd
from openpyxl import load_workbook

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('word', 'definition')
OPTIONAL_COLUMNS = (
    'example',
    'category',
    'option_a',
    'option_b',
    'option_c',
    'option_d',
    'correct_option',
)
OPTION_COLUMNS = ('option_a', 'option_b', 'option_c', 'option_d')


def read_excel_values(file_path: str, sheet_name: Optional[str] = None) -> pd.DataFrame:
    """
    Read a worksheet into a DataFrame using cached cell values.

    openpyxl's ``data_only`` mode returns the last computed value of formula
    cells instead of the formula text. Columns with an empty header are dropped.

    Args:
        file_path: Path to the .xlsx file
        sheet_name: Sheet to read (default: the active sheet)

    Returns:
        pd.DataFrame: One column per non-empty header
    """
    wb = load_workbook(file_path, data_only=True, read_only=True)
    try:
        if sheet_name is not None and sheet_name not in wb.sheetnames:
            raise ValueError(f"Sheet '{sheet_name}' not found in Excel file")
        ws = wb[sheet_name] if sheet_name is not None else wb.active

        data = [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    if not data:
        return pd.DataFrame()

    raw_headers = data[0]
    valid_indices = [i for i, h in enumerate(raw_headers) if h is not None and str(h).strip()]
    headers = [str(raw_headers[i]).strip().lower() for i in valid_indices]

    rows = []
    for row in data[1:]:
        if all(cell is None for cell in row):
            continue
        rows.append([row[i] if i < len(row) else None for i in valid_indices])

    return pd.DataFrame(rows, columns=headers)


def _clean(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def parse_vocab_rows(
    df: pd.DataFrame, require_options: bool = False
) -> Tuple[List[dict[str, Optional[str]]], List[str]]:
    """Turn a vocabulary sheet into item dictionaries plus human readable warnings.

    Rows missing a word or definition are skipped. When ``require_options`` is
    set (multiple-choice modules) rows also need all four options and a correct
    letter A-D; ``correct_option`` defaults to ``A``.
    """
    warnings: List[str] = []

    if df.empty:
        warnings.append("The sheet is empty. Add a header row with 'word' and 'definition'.")
        return [], warnings

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        warnings.append("The sheet is missing column(s): " + ", ".join(f"'{c}'" for c in missing) + ".")
        return [], warnings

    items: List[dict[str, Optional[str]]] = []
    for index, row in df.iterrows():
        line = index + 2  # header is line 1
        item = {column: _clean(row.get(column)) for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}

        if not item['word'] or not item['definition']:
            warnings.append(f"Row {line}: word and definition are required, skipped.")
            continue

        letter = (item['correct_option'] or 'A').upper()
        item['correct_option'] = letter

        if require_options:
            if not all(item[column] for column in OPTION_COLUMNS):
                warnings.append(f"Row {line}: all four options are required, skipped.")
                continue
            if letter not in ('A', 'B', 'C', 'D'):
                warnings.append(f"Row {line}: correct_option must be A, B, C or D, skipped.")
                continue
        elif not item['option_a']:
            item['correct_option'] = None

        items.append(item)

    if not items and not warnings:
        warnings.append("No valid rows were found.")

    return items, warnings


def format_import_warnings(warnings: List[str]) -> str:
    """Turn a list of warning strings into a short, human friendly sentence."""
    if not warnings:
        return ""
    if len(warnings) == 1:
        return warnings[0]
    return " ".join(f"{index + 1}. {message}" for index, message in enumerate(warnings))
