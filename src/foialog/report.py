"""Pipeline outcome reporting: per-rule counts, vocabulary checks, summaries.

Nothing in this module is fatal.  Rules that match zero rows and values that a
classification rule turns into missing are recorded here so a stale contract
is visible after a run, but the run itself continues.

Usage::

    from foialog.report import validate_vocabulary, summarize

    vocab_report = validate_vocabulary(df, contract.vocabularies)
    counts = summarize(df, ["Division", "Status_Overall"])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

import pandas as pd


# ─── Rule outcomes ───────────────────────────────────────────────────────────


@dataclass
class RuleOutcome:
    """Counts for one rule (or one alias-collapse step) over one column.

    Attributes:
        field: Column the rule ran on.
        rule: Human-readable rule description.
        matched: Non-missing values the rule's pattern matched.
        changed: Values that differ after the rule ran.
        lost: Values that were present before and missing after.
    """

    field: str
    rule: str
    matched: int = 0
    changed: int = 0
    lost: int = 0

    @property
    def is_noop(self) -> bool:
        return self.matched == 0


@dataclass
class PipelineReport:
    """Everything a pipeline run records besides the table itself.

    Attributes:
        outcomes: One :class:`RuleOutcome` per rule, in execution order.
        pruned: Columns dropped because every value was missing.
        dropped: Columns left out of the configured output order.
        vocabulary: Result of the closed-vocabulary check, when run.
    """

    outcomes: list[RuleOutcome] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    vocabulary: VocabularyReport | None = None

    @property
    def noop_rules(self) -> list[RuleOutcome]:
        return [o for o in self.outcomes if o.is_noop]

    @property
    def total_lost(self) -> int:
        return sum(o.lost for o in self.outcomes)

    def outcomes_for(self, field_name: str) -> list[RuleOutcome]:
        return [o for o in self.outcomes if o.field == field_name]


# ─── Closed-vocabulary validation ────────────────────────────────────────────


@dataclass
class VocabularyFinding:
    """A value outside its field's declared canonical label set."""

    field: str
    value: str
    count: int


@dataclass
class VocabularyReport:
    """Result of :func:`validate_vocabulary`.

    Attributes:
        checked: Fields that were checked (present in the table).
        findings: Out-of-vocabulary values with their row counts.
    """

    checked: list[str] = field(default_factory=list)
    findings: list[VocabularyFinding] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.findings

    def fields_with_violations(self) -> list[str]:
        seen: list[str] = []
        for f in self.findings:
            if f.field not in seen:
                seen.append(f.field)
        return seen


def validate_vocabulary(
    df: pd.DataFrame,
    vocabularies: Mapping[str, Iterable[str]],
) -> VocabularyReport:
    """Check every controlled-vocabulary column against its canonical labels.

    Missing values always pass.  Comparison is exact: a value differing from a
    label only by case is a violation, since canonical labels are exact.
    Fields absent from *df* (for example pruned ones) are skipped.
    """
    report = VocabularyReport()
    for field_name, labels in vocabularies.items():
        if field_name not in df.columns:
            continue
        allowed = set(labels)
        report.checked.append(field_name)

        present = df[field_name].dropna()
        counts = present.astype(str).value_counts(sort=False)
        for value, count in counts.items():
            if value not in allowed:
                report.findings.append(VocabularyFinding(
                    field=field_name,
                    value=value,
                    count=int(count),
                ))
    return report


# ─── Summaries ───────────────────────────────────────────────────────────────


def summarize(df: pd.DataFrame, fields: Iterable[str]) -> pd.DataFrame:
    """Value counts per field as a tidy frame with ``field, value, count`` columns.

    Missing values are counted under the value ``None``.  Fields not in *df*
    are ignored.
    """
    frames: list[pd.DataFrame] = []
    for field_name in fields:
        if field_name not in df.columns:
            continue
        counts = df[field_name].value_counts(dropna=False)
        frames.append(pd.DataFrame({
            "field": field_name,
            "value": pd.Series([None if pd.isna(v) else v for v in counts.index], dtype=object),
            "count": counts.to_numpy(),
        }))
    if not frames:
        return pd.DataFrame(columns=["field", "value", "count"])
    return pd.concat(frames, ignore_index=True)
