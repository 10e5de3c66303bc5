"""Per-field normalization rules.

Every rule shares one contract: ``apply(value) -> value | None``.  ``None`` is
the missing marker.  A missing input (anything ``pandas.isna`` accepts) is
returned unchanged, never coerced to a string such as ``"NA"``.  Non-string
inputs are also returned unchanged unless a rule says otherwise.

Rule kinds:

- :class:`StripToAlphanumeric`: character-class filtering for person names.
- :class:`SubstringConsolidation`: ordered ``(marker, label)`` table.
- :class:`BinaryNormalization`: "Yes"/"No", everything else becomes missing.
- :class:`AliasCollapse`: ordered ``(predicate, transform)`` steps applied as
  a left fold over the value.

Each rule also exposes ``run(field, series)``, which applies it to a whole
column and returns :class:`~foialog.report.RuleOutcome` counts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Iterable, Mapping

import pandas as pd

from foialog.report import RuleOutcome


def is_missing(value: Any) -> bool:
    """True for ``None``, NaN, NaT and ``pd.NA``."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-likes are never the missing marker
        return False


def _map_values(series: pd.Series, func: Callable[[Any], Any]) -> pd.Series:
    """Apply *func* to every present value; missing values become ``None``.

    The result is always an object column so ``None`` is not re-inferred as NaN
    under pandas' string dtype.
    """
    return pd.Series(
        [None if is_missing(v) else func(v) for v in series],
        index=series.index,
        name=series.name,
        dtype=object,
    )


def _column_counts(
    before: pd.Series,
    after: pd.Series,
) -> tuple[int, int]:
    """Return ``(changed, lost)`` between two aligned columns."""
    before_na = before.isna()
    after_na = after.isna()
    differs = (before.astype(object) != after.astype(object)) & ~(before_na & after_na)
    lost = ~before_na & after_na
    return int(differs.sum()), int(lost.sum())


# ─── Base ────────────────────────────────────────────────────────────────────


class NormalizationRule:
    """Base class: a pure value -> value function with a match predicate."""

    kind: ClassVar[str] = "rule"

    def matches(self, value: Any) -> bool:
        raise NotImplementedError

    def apply(self, value: Any) -> Any:
        raise NotImplementedError

    def describe(self) -> str:
        return self.kind

    def run(self, field_name: str, series: pd.Series) -> tuple[pd.Series, list[RuleOutcome]]:
        """Apply the rule to every value of *series*."""
        present = series[~series.isna()]
        matched = int(sum(1 for v in present if self.matches(v)))
        result = _map_values(series, self.apply)
        changed, lost = _column_counts(series, result)
        return result, [RuleOutcome(
            field=field_name,
            rule=self.describe(),
            matched=matched,
            changed=changed,
            lost=lost,
        )]


# ─── Strip-to-alphanumeric ───────────────────────────────────────────────────

# Unicode-aware: accented letters and non-Latin scripts are kept
_NON_ALNUM_RE = re.compile(r"[\W_]")


@dataclass
class StripToAlphanumeric(NormalizationRule):
    """Drop every character that is not a letter or digit.

    Case is left alone, so ``"bert"`` and ``"Bert"`` stay distinct.  A value
    made only of decoration becomes missing.
    """

    kind: ClassVar[str] = "strip_alphanumeric"

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and _NON_ALNUM_RE.search(value) is not None

    def apply(self, value: Any) -> Any:
        if is_missing(value) or not isinstance(value, str):
            return value
        stripped = _NON_ALNUM_RE.sub("", value)
        return stripped or None


# ─── Substring consolidation ─────────────────────────────────────────────────


@dataclass(frozen=True)
class MarkerLabel:
    """One row of a consolidation table: values containing *marker* become *label*."""

    marker: str
    label: str


@dataclass
class SubstringConsolidation(NormalizationRule):
    """Replace the whole value with the label of the first marker it contains.

    Markers are tried in table order; several markers may share a label.
    Unmatched values pass through unchanged.
    """

    kind: ClassVar[str] = "substring"

    mappings: list[MarkerLabel] = field(default_factory=list)
    case_sensitive: bool = False

    def label_for(self, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        haystack = value if self.case_sensitive else value.lower()
        for m in self.mappings:
            needle = m.marker if self.case_sensitive else m.marker.lower()
            if needle in haystack:
                return m.label
        return None

    def matches(self, value: Any) -> bool:
        return self.label_for(value) is not None

    def apply(self, value: Any) -> Any:
        if is_missing(value):
            return value
        label = self.label_for(value)
        return value if label is None else label

    @property
    def labels(self) -> list[str]:
        out: list[str] = []
        for m in self.mappings:
            if m.label not in out:
                out.append(m.label)
        return out

    def describe(self) -> str:
        return f"substring({len(self.mappings)} markers)"


# ─── Binary normalization ────────────────────────────────────────────────────


@dataclass
class BinaryNormalization(NormalizationRule):
    """Collapse a yes/no answer to ``yes_label``/``no_label``.

    The "no" pattern is tried first.  Anything matching neither pattern
    becomes missing: free-text elaboration on a yes/no answer is discarded.
    Booleans map directly.
    """

    kind: ClassVar[str] = "binary"

    yes_label: str = "Yes"
    no_label: str = "No"
    # One-letter forms must not start "N/A", "N.A.", "N A" or "Y.E.S".
    yes_pattern: str = r"^\s*(?:yes(?![\w/])|y(?![\w/]|\.\s*\w))"
    no_pattern: str = r"^\s*(?:no(?![\w/])|n(?![\w/]|\.?\s*a\b))"

    def __post_init__(self) -> None:
        self._yes_re = re.compile(self.yes_pattern, re.IGNORECASE)
        self._no_re = re.compile(self.no_pattern, re.IGNORECASE)

    def classify(self, value: Any) -> str | None:
        if isinstance(value, bool):
            return self.yes_label if value else self.no_label
        if not isinstance(value, str):
            return None
        if self._no_re.search(value):
            return self.no_label
        if self._yes_re.search(value):
            return self.yes_label
        return None

    def matches(self, value: Any) -> bool:
        return self.classify(value) is not None

    def apply(self, value: Any) -> Any:
        if is_missing(value):
            return value
        return self.classify(value)

    @property
    def labels(self) -> list[str]:
        return [self.yes_label, self.no_label]


# ─── Alias collapse ──────────────────────────────────────────────────────────


@dataclass
class AliasStep:
    """One ``(predicate, transform)`` pair of an alias-collapse chain."""

    name: str
    predicate: Callable[[str], bool]
    transform: Callable[[str], str | None]


def collapse_step(markers: Iterable[str], label: str) -> AliasStep:
    """Any marker substring (case-insensitive) -> *label*."""
    lowered = [m.lower() for m in markers]

    def predicate(value: str) -> bool:
        v = value.lower()
        return any(m in v for m in lowered)

    return AliasStep(f"collapse->{label}", predicate, lambda _value: label)


def person_step(people: Mapping[str, str]) -> AliasStep:
    """A named individual in the value -> the organization they represent.

    *people* is ``{name: organization}``; the first name present wins.
    """
    lookup = [(name.lower(), org) for name, org in people.items()]

    def _org_for(value: str) -> str | None:
        v = value.lower()
        for name, org in lookup:
            if name in v:
                return org
        return None

    def transform(value: str) -> str | None:
        org = _org_for(value)
        return value if org is None else org

    return AliasStep("person->organization", lambda v: _org_for(v) is not None, transform)


def to_missing_step(patterns: Iterable[str], prefixes: Iterable[str] = ()) -> AliasStep:
    """Whole-value match against any pattern (case-insensitive) -> missing.

    *prefixes* are boilerplate phrases allowed in front of the token, so
    ``"Referred to N/A"`` is caught here and not left as ``"N/A"`` by a later
    prefix-stripping step.
    """
    lead = "|".join(f"(?:{p})" for p in prefixes)
    lead = rf"(?:(?:{lead})\s*)?" if lead else ""
    regexes = [re.compile(rf"^\s*{lead}(?:{p})\s*\.?\s*$", re.IGNORECASE) for p in patterns]

    def predicate(value: str) -> bool:
        return any(r.match(value) for r in regexes)

    return AliasStep("not-applicable->missing", predicate, lambda _value: None)


def strip_prefix_step(patterns: Iterable[str]) -> AliasStep:
    """Remove the first matching boilerplate prefix (case-insensitive)."""
    regexes = [re.compile(rf"^\s*(?:{p})", re.IGNORECASE) for p in patterns]

    def _first(value: str) -> re.Match | None:
        for r in regexes:
            m = r.match(value)
            if m and m.end() > 0:
                return m
        return None

    def transform(value: str) -> str | None:
        m = _first(value)
        if m is None:
            return value
        rest = value[m.end():].strip()
        return rest or None

    return AliasStep("strip-prefix", lambda v: _first(v) is not None, transform)


def replace_step(pattern: str, replacement: str) -> AliasStep:
    """Regex substitution, typically a misspelled abbreviation."""
    regex = re.compile(pattern)
    return AliasStep(
        f"replace->{replacement}",
        lambda v: regex.search(v) is not None,
        lambda v: regex.sub(replacement, v),
    )


@dataclass
class AliasCollapse(NormalizationRule):
    """Ordered alias steps folded left over the value.

    Each step sees the output of the previous one.  This is sequential
    mutation, not first-match-wins: when two steps both match the original
    value only the later step's result survives.  Once a step yields missing,
    later steps are skipped.
    """

    kind: ClassVar[str] = "alias_collapse"

    steps: list[AliasStep] = field(default_factory=list)

    def apply(self, value: Any) -> Any:
        for step in self.steps:
            value = self._apply_step(step, value)
        return value

    @staticmethod
    def _apply_step(step: AliasStep, value: Any) -> Any:
        if is_missing(value) or not isinstance(value, str):
            return value
        if step.predicate(value):
            return step.transform(value)
        return value

    def matches(self, value: Any) -> bool:
        for step in self.steps:
            if isinstance(value, str) and step.predicate(value):
                return True
            value = self._apply_step(step, value)
        return False

    def describe(self) -> str:
        return f"alias_collapse({len(self.steps)} steps)"

    def run(self, field_name: str, series: pd.Series) -> tuple[pd.Series, list[RuleOutcome]]:
        """Fold step by step over the column, one outcome per step."""
        outcomes: list[RuleOutcome] = []
        for step in self.steps:
            matched = int(sum(
                1 for v in series
                if not is_missing(v) and isinstance(v, str) and step.predicate(v)
            ))
            result = _map_values(series, lambda v, s=step: self._apply_step(s, v))
            changed, lost = _column_counts(series, result)
            outcomes.append(RuleOutcome(
                field=field_name,
                rule=f"{self.kind}:{step.name}",
                matched=matched,
                changed=changed,
                lost=lost,
            ))
            series = result
        return series, outcomes
