"""Header canonicalization for raw FOIA log spreadsheets.

Spreadsheet headers arrive as free-form sentences ("Date Received",
"Was this request referred to another agency? If so, which one?").  They are
collapsed into identifier-safe names and then remapped through an explicit,
static rename table.

Usage::

    from foialog.schema import normalize_headers, normalize_columns

    headers = normalize_headers(["Date Received", "Division "], renames={})
    # ["Date_Received", "Division_"]
    df = normalize_columns(df, contract.renames)
"""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING, Iterable, Mapping

from rapidfuzz import fuzz, process

if TYPE_CHECKING:
    import pandas as pd

_NON_HEADER_CHARS_RE = re.compile(r"[^A-Za-z0-9 ]")

# Minimum rapidfuzz.fuzz.WRatio score for a "did you mean" suggestion
_SUGGESTION_THRESHOLD = 80.0


class ConfigurationMismatch(ValueError):
    """Raised when a declaration references a column absent from the live table.

    Signals that the static configuration is stale relative to the input file.
    Always fatal.
    """

    def __init__(
        self,
        message: str,
        field: str,
        suggestion: str | None = None,
    ):
        if suggestion:
            message = f"{message} (did you mean '{suggestion}'?)"
        super().__init__(message)
        self.field = field
        self.suggestion = suggestion


def suggest_column(name: str, columns: Iterable[str]) -> str | None:
    """Return the present column closest to *name*, or ``None`` if nothing is close."""
    choices = [c for c in columns if isinstance(c, str)]
    if not choices:
        return None
    match = process.extractOne(
        name.lower(),
        choices,
        scorer=fuzz.WRatio,
        processor=str.lower,
        score_cutoff=_SUGGESTION_THRESHOLD,
    )
    return match[0] if match else None


def require_columns(
    names: Iterable[str],
    columns: Iterable[str],
    *,
    context: str,
) -> None:
    """Raise :class:`ConfigurationMismatch` for the first name not in *columns*."""
    present = list(columns)
    present_set = set(present)
    for name in names:
        if name not in present_set:
            raise ConfigurationMismatch(
                f"{context} references column '{name}' which is not in the table",
                field=name,
                suggestion=suggest_column(name, present),
            )


def canonical_header(raw: object) -> str:
    """Collapse one raw header into an identifier-safe name.

    Every character outside ``[A-Za-z0-9 ]`` is dropped, then every remaining
    space becomes an underscore.
    """
    text = _NON_HEADER_CHARS_RE.sub("", str(raw))
    return text.replace(" ", "_")


def normalize_headers(
    raw_headers: Iterable[object],
    renames: Mapping[str, str] | None = None,
) -> list[str]:
    """Canonicalize *raw_headers* and apply the literal *renames* table.

    Parameters:
        raw_headers: Header cells in table order.
        renames: ``{generated_name: canonical_name}``.  Keys are matched
            against the headers *after* character stripping.

    Returns:
        New header list, same length and order as the input.

    Raises:
        ConfigurationMismatch: a rename key is not among the generated headers,
            or two raw headers collapse to the same canonical name.
    """
    headers = [canonical_header(h) for h in raw_headers]
    renames = renames or {}

    require_columns(renames.keys(), headers, context="Rename table")

    headers = [renames.get(h, h) for h in headers]

    dupes = [name for name, count in Counter(headers).items() if count > 1]
    if dupes:
        raise ConfigurationMismatch(
            f"Headers collapse to duplicate name '{dupes[0]}'",
            field=dupes[0],
        )
    return headers


def normalize_columns(
    df: pd.DataFrame,
    renames: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Return a copy of *df* with canonical column names (data and order untouched)."""
    out = df.copy()
    out.columns = normalize_headers(df.columns, renames)
    return out
