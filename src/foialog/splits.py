"""Composite field splits: one noisy source column -> two derived columns.

- :class:`FlagDetailSplit` turns answers like ``"yrd, see attached"`` into a
  flag (``"Yes"``) and the explanatory remainder (``"see attached"``).
- :class:`StatusSplit` turns free-text status lines like
  ``"Closed - records sent via email"`` into an overall state (``"Closed"``)
  and a detail category (``"Sent"``).

Both keep the shared rule contract: ``apply(value)`` is the in-place
normalization of the source value, and missing stays missing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

import pandas as pd

from foialog.report import RuleOutcome
from foialog.rules import _column_counts, _map_values, is_missing

_LEADING_SEPARATOR_RE = re.compile(r"^\s*,\s*")


@dataclass
class PatternLabel:
    """A case-insensitive regex paired with the canonical label it produces."""

    label: str
    pattern: str

    def __post_init__(self) -> None:
        self._regex = re.compile(self.pattern, re.IGNORECASE)

    def match(self, value: str) -> re.Match | None:
        return self._regex.match(value)

    def search(self, value: str) -> re.Match | None:
        return self._regex.search(value)


@dataclass
class KeywordGroup:
    """A detail category and the keyword patterns that select it."""

    label: str
    patterns: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._regexes = [re.compile(p, re.IGNORECASE) for p in self.patterns]

    def matches(self, value: str) -> bool:
        return any(r.search(value) for r in self._regexes)


# ─── Defaults ────────────────────────────────────────────────────────────────

DEFAULT_PREFIX_ALIASES: list[tuple[str, str]] = [
    ("Yes", r"^\s*(?:yes|yrd)\b"),
    ("No", r"^\s*no\b"),
]

DEFAULT_FLAGS: list[tuple[str, str]] = [
    ("No", r"^No\b"),
    ("Yes", r"^Yes\b"),
    ("Partial", r"^Partial(?:ly)?\b"),
]

DEFAULT_OVERALL_LABELS: list[str] = ["Closed", "Open", "Inactive"]

# Order matters: "not" is only tried after "not in possession" has been ruled out.
DEFAULT_STATUS_GROUPS: list[tuple[str, list[str]]] = [
    ("Sent", [r"\bsent\b", r"\be-?mailed\b", r"\bprovided\b", r"\bmailed\b"]),
    ("Partial", [r"\bpartial"]),
    ("No Records", [
        r"\bnot in (?:our |the |agency )?possession\b",
        r"\bno (?:responsive )?records\b",
        r"\bno responsive\b",
    ]),
    ("Denied", [r"\bnot\b", r"\bdenied\b", r"\bdeclined\b"]),
    ("Open", [r"\bopen\b", r"\bpending\b", r"\bin progress\b"]),
    ("Withdrawn", [r"\bwithdr[ae]wn?\b"]),
    ("Referred", [
        r"\breferr?ed\b",
        r"\bweb ?site\b",
        r"\bonline\b",
        r"\b(?:DOJ|OMB|EPA|GSA)\b",
    ]),
    ("No Response", [
        r"\bno response\b",
        r"\bnever responded\b",
        r"\bunresponsive\b",
    ]),
]


# ─── Flag / detail ───────────────────────────────────────────────────────────


@dataclass
class FlagDetailSplit:
    """Split a prefixed yes/no/partial answer into Flag and Detail columns.

    Steps, per value:

    1. Normalize case-variant prefixes in place (``"yes"``, ``"YES"``,
       ``"yrd"`` -> ``"Yes"``; ``"no"``, ``"NO"`` -> ``"No"``).
    2. Flag: the first of ``flags`` whose pattern matches the start of the
       value; ``other_label`` when none does.  This is an explicit four-way
       classification, with "Other" as the fallback branch.
    3. Detail: the value with the matched flag token removed, then a leading
       ``", "`` separator removed.  For "Other" the whole value is the
       detail.  An empty detail is missing.
    """

    kind: ClassVar[str] = "flag_detail"

    source: str
    flag: str
    detail: str
    prefix_aliases: list[PatternLabel] = field(
        default_factory=lambda: [PatternLabel(label, p) for label, p in DEFAULT_PREFIX_ALIASES]
    )
    flags: list[PatternLabel] = field(
        default_factory=lambda: [PatternLabel(label, p) for label, p in DEFAULT_FLAGS]
    )
    other_label: str = "Other"

    @property
    def flag_labels(self) -> list[str]:
        return [f.label for f in self.flags] + [self.other_label]

    def describe(self) -> str:
        return f"{self.kind}({self.source} -> {self.flag}, {self.detail})"

    def apply(self, value: Any) -> Any:
        if is_missing(value) or not isinstance(value, str):
            return value
        for alias in self.prefix_aliases:
            m = alias.match(value)
            if m:
                return alias.label + value[m.end():]
        return value

    def split(self, value: Any) -> tuple[str | None, str | None]:
        """Return ``(flag, detail)`` for one source value."""
        if is_missing(value):
            return None, None
        text = self.apply(value) if isinstance(value, str) else str(value)
        for candidate in self.flags:
            m = candidate.match(text)
            if m:
                rest = _LEADING_SEPARATOR_RE.sub("", text[m.end():], count=1).strip()
                return candidate.label, rest or None
        return self.other_label, text.strip() or None

    def run(self, df: pd.DataFrame) -> tuple[pd.DataFrame, list[RuleOutcome]]:
        source = df[self.source]
        normalized = _map_values(source, self.apply)
        changed, _ = _column_counts(source, normalized)
        pairs = [self.split(v) for v in normalized]

        df[self.source] = normalized
        df[self.flag] = pd.Series([p[0] for p in pairs], index=df.index, dtype=object)
        df[self.detail] = pd.Series([p[1] for p in pairs], index=df.index, dtype=object)

        present = int((~source.isna()).sum())
        other = sum(1 for f, _ in pairs if f == self.other_label)
        return df, [RuleOutcome(
            field=self.source,
            rule=self.describe(),
            matched=present - other,
            changed=changed,
            lost=0,
        )]


# ─── Status ──────────────────────────────────────────────────────────────────


@dataclass
class StatusSplit:
    """Split a free-text status line into Overall and Detail columns.

    Overall is the leading token, anchored at the start of the string and
    matched case-insensitively against ``overall_labels``.  Detail classifies
    the *full* original string against ``groups`` in order; the first group
    with a matching keyword wins.  Either is missing when nothing matches.
    """

    kind: ClassVar[str] = "status"

    source: str
    overall: str
    detail: str
    overall_labels: list[str] = field(default_factory=lambda: list(DEFAULT_OVERALL_LABELS))
    groups: list[KeywordGroup] = field(
        default_factory=lambda: [KeywordGroup(label, p) for label, p in DEFAULT_STATUS_GROUPS]
    )

    def __post_init__(self) -> None:
        self._overall = [
            (label, re.compile(rf"^\s*{re.escape(label)}\b", re.IGNORECASE))
            for label in self.overall_labels
        ]

    @property
    def detail_labels(self) -> list[str]:
        return [g.label for g in self.groups]

    def describe(self) -> str:
        return f"{self.kind}({self.source} -> {self.overall}, {self.detail})"

    def apply(self, value: Any) -> Any:
        return value

    def overall_for(self, value: Any) -> str | None:
        if is_missing(value) or not isinstance(value, str):
            return None
        for label, regex in self._overall:
            if regex.match(value):
                return label
        return None

    def detail_for(self, value: Any) -> str | None:
        if is_missing(value) or not isinstance(value, str):
            return None
        for group in self.groups:
            if group.matches(value):
                return group.label
        return None

    def split(self, value: Any) -> tuple[str | None, str | None]:
        return self.overall_for(value), self.detail_for(value)

    def run(self, df: pd.DataFrame) -> tuple[pd.DataFrame, list[RuleOutcome]]:
        source = df[self.source]
        pairs = [self.split(v) for v in source]
        df[self.overall] = pd.Series([p[0] for p in pairs], index=df.index, dtype=object)
        df[self.detail] = pd.Series([p[1] for p in pairs], index=df.index, dtype=object)

        present = ~source.isna()
        outcomes = []
        for target, idx in ((self.overall, 0), (self.detail, 1)):
            hits = sum(1 for p in pairs if p[idx] is not None)
            outcomes.append(RuleOutcome(
                field=self.source,
                rule=f"{self.kind}:{target}",
                matched=hits,
                changed=hits,
                lost=int(present.sum()) - hits,
            ))
        return df, outcomes
