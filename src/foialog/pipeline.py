"""Pipeline orchestration: headers -> field rules -> splits -> finalize -> save.

Usage::

    from foialog.contracts import load_contract
    from foialog.pipeline import process_log

    contract = load_contract("contracts/foia_log.json")
    result = process_log("raw/foia_log.xlsx", contract, "clean/foia_log.csv")
    print(result.report.noop_rules)

The lower-level pieces (:func:`normalize`, :func:`finalize`,
:func:`run_pipeline`) take plain configuration objects so each rule set can be
exercised on a small in-memory DataFrame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import pandas as pd

from foialog.contracts import LogContract, Split
from foialog.report import PipelineReport, RuleOutcome, validate_vocabulary
from foialog.rules import NormalizationRule
from foialog.schema import ConfigurationMismatch, normalize_columns, require_columns, suggest_column
from foialog.tables import read_log, write_log

log = logging.getLogger(__name__)


def _log_outcome(outcome: RuleOutcome) -> None:
    if outcome.is_noop:
        log.warning(
            "Rule %s on '%s' matched no rows (stale rule?)",
            outcome.rule, outcome.field,
        )
    else:
        log.debug(
            "Rule %s on '%s': matched=%d changed=%d",
            outcome.rule, outcome.field, outcome.matched, outcome.changed,
        )
    if outcome.lost:
        log.info(
            "Rule %s on '%s' turned %d value(s) into missing",
            outcome.rule, outcome.field, outcome.lost,
        )


# ─── Field rules ─────────────────────────────────────────────────────────────


def apply_rules(
    series: pd.Series,
    rules: Sequence[NormalizationRule],
    *,
    field_name: str | None = None,
) -> tuple[pd.Series, list[RuleOutcome]]:
    """Run *rules* in order over one column."""
    name = field_name if field_name is not None else str(series.name)
    outcomes: list[RuleOutcome] = []
    for rule in rules:
        series, rule_outcomes = rule.run(name, series)
        outcomes.extend(rule_outcomes)
    return series, outcomes


def normalize(
    df: pd.DataFrame,
    rules: Mapping[str, Sequence[NormalizationRule]],
    splits: Iterable[Split] = (),
) -> tuple[pd.DataFrame, PipelineReport]:
    """Apply per-field rules, then field splits, to a copy of *df*.

    Fields not named in *rules* pass through unchanged.  Rules that match no
    rows are logged and recorded, never fatal.

    Parameters:
        df: Table with canonical column names.
        rules: ``{field: [rule, ...]}``, applied field by field in order.
        splits: Split definitions, applied after every field rule.

    Returns:
        ``(normalized_df, report)``.

    Raises:
        ConfigurationMismatch: a rule field or split source is not in *df*.
    """
    splits = list(splits)
    require_columns(rules.keys(), df.columns, context="Field rules")
    require_columns([s.source for s in splits], df.columns, context="Field split")

    out = df.copy()
    report = PipelineReport()

    for field_name, field_rules in rules.items():
        out[field_name], outcomes = apply_rules(out[field_name], field_rules, field_name=field_name)
        report.outcomes.extend(outcomes)

    for split in splits:
        out, outcomes = split.run(out)
        report.outcomes.extend(outcomes)

    for outcome in report.outcomes:
        _log_outcome(outcome)
    return out, report


# ─── Finalize ────────────────────────────────────────────────────────────────


def finalize(
    df: pd.DataFrame,
    prune_if_all_missing: Iterable[str] = (),
    output_order: Sequence[str] = (),
) -> tuple[pd.DataFrame, list[str]]:
    """Prune all-missing columns and reorder for output.

    Parameters:
        df: Normalized table.
        prune_if_all_missing: Columns to drop when every value is missing.
        output_order: Output columns, in order.  Columns not listed are
            dropped.  Entries pruned by this call are skipped.  Empty keeps
            the current order.

    Returns:
        ``(final_df, pruned_columns)``.

    Raises:
        ConfigurationMismatch: a prune-set or output-order entry is not in *df*.
    """
    prune = list(prune_if_all_missing)
    require_columns(prune, df.columns, context="Prune set")

    pruned = [c for c in prune if df[c].isna().all()]
    out = df.drop(columns=pruned)
    for name in pruned:
        log.info("Pruned column '%s' (100%% missing)", name)

    if not output_order:
        return out, pruned

    order = [c for c in output_order if c not in pruned]
    missing = [c for c in order if c not in out.columns]
    if missing:
        raise ConfigurationMismatch(
            f"Output order references column '{missing[0]}' which is not in the table",
            field=missing[0],
            suggestion=suggest_column(missing[0], out.columns),
        )
    dropped = [c for c in out.columns if c not in order]
    if dropped:
        log.info("Columns not in output order, dropped: %s", ", ".join(map(str, dropped)))
    return out[order], pruned


# ─── Orchestration ───────────────────────────────────────────────────────────


def run_pipeline(
    raw: pd.DataFrame,
    contract: LogContract,
) -> tuple[pd.DataFrame, PipelineReport]:
    """Full in-memory transform of a raw log table under *contract*."""
    df = normalize_columns(raw, contract.renames)
    df, report = normalize(df, contract.rules, contract.splits)

    report.vocabulary = validate_vocabulary(df, contract.vocabularies)
    for finding in report.vocabulary.findings:
        log.warning(
            "'%s' holds out-of-vocabulary value %r (%d rows)",
            finding.field, finding.value, finding.count,
        )

    before = list(df.columns)
    df, report.pruned = finalize(df, contract.prune_if_all_missing, contract.output_order)
    report.dropped = [c for c in before if c not in df.columns and c not in report.pruned]
    return df, report


@dataclass
class PipelineResult:
    """Outcome of :func:`process_log`.

    Attributes:
        table: The normalized, finalized table.
        report: Rule outcomes, pruning and vocabulary findings.
        output_path: Where the table was written (``None`` when not saved).
    """

    table: pd.DataFrame
    report: PipelineReport = field(default_factory=PipelineReport)
    output_path: Path | None = None


def process_log(
    input_path: str | Path,
    contract: LogContract,
    output_path: str | Path | None = None,
    *,
    sheet: str | int | None = None,
) -> PipelineResult:
    """Read a raw log, transform it under *contract*, and optionally save it."""
    raw = read_log(input_path, sheet=sheet)
    log.info("Read %d rows x %d columns from %s", len(raw), len(raw.columns), input_path)

    table, report = run_pipeline(raw, contract)

    written = None
    if output_path is not None:
        written = write_log(table, output_path)
        log.info("Wrote %d rows x %d columns to %s", len(table), len(table.columns), written)
    return PipelineResult(table=table, report=report, output_path=written)
