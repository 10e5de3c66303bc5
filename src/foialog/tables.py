"""Read raw FOIA log spreadsheets and write normalized tables.

- XLSX (Office 2007+): pandas with the openpyxl engine
- XLS (Office 97-2003): pandas with the xlrd engine
- CSV: pandas

Column types are whatever the reader infers; nothing here re-types columns.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def read_log(path: str | Path, *, sheet: str | int | None = None) -> pd.DataFrame:
    """Read a raw log with its header row.

    Parameters:
        path: ``.xlsx``/``.xlsm``/``.xls`` or ``.csv`` file.
        sheet: Sheet name or 0-based index for spreadsheets (default: first).

    Raises:
        ValueError: unsupported file extension.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    sheet_name = 0 if sheet is None else sheet

    if suffix in _EXCEL_SUFFIXES:
        return pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    if suffix == ".xls":
        return pd.read_excel(path, sheet_name=sheet_name, engine="xlrd")
    if suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported log format: {path.suffix or path.name}")


def write_log(df: pd.DataFrame, path: str | Path) -> Path:
    """Write *df* as UTF-8 CSV with a header row and no index.

    Missing values are written as empty cells.  Parent directories are created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".tsv":
        df.to_csv(path, index=False, sep="\t", encoding="utf-8")
    else:
        df.to_csv(path, index=False, encoding="utf-8")
    return path
