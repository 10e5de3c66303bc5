"""Contract helpers: load a JSON contract into typed pipeline configuration.

A contract is the whole static configuration for one agency's log: the
header rename table, the ordered per-field rules, the field splits, the prune
set and the output column order.  Nothing here is computed from the data.

Usage::

    from foialog.contracts import load_contract

    contract = load_contract("contracts/foia_log.json")
    df, report = normalize(df, contract.rules, contract.splits)
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from foialog.models import (
    AliasCollapseSpec,
    BinarySpec,
    CollapseStepSpec,
    ContractSpec,
    FlagDetailSpec,
    PersonStepSpec,
    ReplaceStepSpec,
    StripAlphanumericSpec,
    StripPrefixStepSpec,
    SubstringSpec,
    ToMissingStepSpec,
)
from foialog.rules import (
    AliasCollapse,
    AliasStep,
    BinaryNormalization,
    MarkerLabel,
    NormalizationRule,
    StripToAlphanumeric,
    SubstringConsolidation,
    collapse_step,
    person_step,
    replace_step,
    strip_prefix_step,
    to_missing_step,
)
from foialog.splits import FlagDetailSplit, KeywordGroup, PatternLabel, StatusSplit

Split = FlagDetailSplit | StatusSplit


class ContractError(ValueError):
    """Raised when a contract file is malformed or holds an invalid pattern."""


# ─── Data classes ────────────────────────────────────────────────────────────


@dataclass
class FieldConfig:
    """Parsed configuration for one column.

    Attributes:
        name: Canonical column name.
        rules: Rules in application order.
        vocabulary: Declared canonical labels, or ``None`` for open fields.
    """

    name: str
    rules: list[NormalizationRule] = field(default_factory=list)
    vocabulary: list[str] | None = None


@dataclass
class LogContract:
    """Typed representation of a parsed contract.

    Attributes:
        agency: Agency the log belongs to.
        description: Free-text description.
        renames: ``{generated_header: canonical_name}``.
        fields: Column name -> :class:`FieldConfig`, in contract order.
        splits: Field splits, run after all field rules.
        prune_if_all_missing: Columns dropped when entirely missing.
        output_order: Output column order (empty keeps the table's order).
        raw: Original JSON dict.
    """

    agency: str
    description: str = ""
    renames: dict[str, str] = field(default_factory=dict)
    fields: dict[str, FieldConfig] = field(default_factory=dict)
    splits: list[Split] = field(default_factory=list)
    prune_if_all_missing: list[str] = field(default_factory=list)
    output_order: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict)

    @property
    def rules(self) -> dict[str, list[NormalizationRule]]:
        """Ordered ``{field: [rule, ...]}`` mapping for :func:`foialog.pipeline.normalize`."""
        return {name: cfg.rules for name, cfg in self.fields.items() if cfg.rules}

    @property
    def vocabularies(self) -> dict[str, list[str]]:
        """Declared vocabularies plus the ones implied by split outputs."""
        vocab = {
            name: list(cfg.vocabulary)
            for name, cfg in self.fields.items()
            if cfg.vocabulary is not None
        }
        for split in self.splits:
            if isinstance(split, FlagDetailSplit):
                vocab[split.flag] = split.flag_labels
            else:
                vocab[split.overall] = list(split.overall_labels)
                vocab[split.detail] = split.detail_labels
        return vocab


# ─── Builders ────────────────────────────────────────────────────────────────


def _build_step(spec) -> AliasStep:
    if isinstance(spec, CollapseStepSpec):
        return collapse_step(spec.markers, spec.label)
    if isinstance(spec, PersonStepSpec):
        return person_step(spec.people)
    if isinstance(spec, ToMissingStepSpec):
        return to_missing_step(spec.patterns, spec.prefixes)
    if isinstance(spec, StripPrefixStepSpec):
        return strip_prefix_step(spec.patterns)
    if isinstance(spec, ReplaceStepSpec):
        return replace_step(spec.pattern, spec.replacement)
    raise ContractError(f"Unknown alias step: {spec!r}")


def build_rule(spec) -> NormalizationRule:
    """Build a rule object from a validated rule spec."""
    if isinstance(spec, StripAlphanumericSpec):
        return StripToAlphanumeric()
    if isinstance(spec, SubstringSpec):
        return SubstringConsolidation(
            mappings=[MarkerLabel(m.marker, m.label) for m in spec.mappings],
            case_sensitive=spec.case_sensitive,
        )
    if isinstance(spec, BinarySpec):
        kwargs = {"yes_label": spec.yes_label, "no_label": spec.no_label}
        if spec.yes_pattern is not None:
            kwargs["yes_pattern"] = spec.yes_pattern
        if spec.no_pattern is not None:
            kwargs["no_pattern"] = spec.no_pattern
        return BinaryNormalization(**kwargs)
    if isinstance(spec, AliasCollapseSpec):
        return AliasCollapse(steps=[_build_step(s) for s in spec.steps])
    raise ContractError(f"Unknown rule type: {spec!r}")


def build_split(spec) -> Split:
    """Build a split object from a validated split spec."""
    if isinstance(spec, FlagDetailSpec):
        kwargs: dict = {"other_label": spec.other_label}
        if spec.prefix_aliases is not None:
            kwargs["prefix_aliases"] = [PatternLabel(p.label, p.pattern) for p in spec.prefix_aliases]
        if spec.flags is not None:
            kwargs["flags"] = [PatternLabel(p.label, p.pattern) for p in spec.flags]
        return FlagDetailSplit(spec.source, spec.flag, spec.detail, **kwargs)

    kwargs = {}
    if spec.overall_labels is not None:
        kwargs["overall_labels"] = list(spec.overall_labels)
    if spec.groups is not None:
        kwargs["groups"] = [KeywordGroup(g.label, list(g.patterns)) for g in spec.groups]
    return StatusSplit(spec.source, spec.overall, spec.detail, **kwargs)


def contract_from_dict(data: dict) -> LogContract:
    """Validate a contract dict and return a typed :class:`LogContract`.

    Raises:
        ContractError: the dict does not match the contract schema, or one of
            its regex patterns does not compile.
    """
    try:
        spec = ContractSpec.model_validate(data)
    except ValidationError as e:
        raise ContractError(f"Invalid contract: {e}") from e

    try:
        fields = {
            name: FieldConfig(
                name=name,
                rules=[build_rule(r) for r in fs.rules],
                vocabulary=fs.vocabulary,
            )
            for name, fs in spec.fields.items()
        }
        splits = [build_split(s) for s in spec.splits]
    except re.error as e:
        raise ContractError(f"Invalid pattern in contract: {e}") from e

    return LogContract(
        agency=spec.agency,
        description=spec.description,
        renames=dict(spec.renames),
        fields=fields,
        splits=splits,
        prune_if_all_missing=list(spec.prune_if_all_missing),
        output_order=list(spec.output_order),
        raw=data,
    )


def load_contract(path: str | Path) -> LogContract:
    """Load a JSON contract file and return a typed :class:`LogContract`."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ContractError(f"Contract {path} is not valid JSON: {e}") from e
    return contract_from_dict(data)
