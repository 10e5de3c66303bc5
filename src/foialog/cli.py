"""Click CLI for foialog: normalize, headers, summary."""

from __future__ import annotations

import logging
import sys

import click
import pandas as pd

from foialog.contracts import ContractError, LogContract, load_contract
from foialog.pipeline import process_log, run_pipeline
from foialog.report import summarize
from foialog.schema import ConfigurationMismatch, normalize_headers
from foialog.tables import read_log


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load(contract_path: str) -> LogContract:
    try:
        return load_contract(contract_path)
    except ContractError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG logging")
def main(verbose: int) -> None:
    """foialog: normalize an agency's FOIA request log."""
    _setup_logging(verbose)


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--contract", "-c", "contract_path", required=True, type=click.Path(exists=True),
              help="JSON contract for this log")
@click.option("--output", "-o", required=True, help="Output CSV path")
@click.option("--sheet", default=None, help="Sheet name (default: first sheet)")
def normalize(input_path: str, contract_path: str, output: str, sheet: str | None) -> None:
    """Normalize a raw log and write the result as CSV."""
    contract = _load(contract_path)
    try:
        result = process_log(input_path, contract, output, sheet=sheet)
    except ConfigurationMismatch as e:
        click.echo(f"ERROR: configuration does not match '{input_path}': {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    report = result.report
    click.echo(f"Wrote {len(result.table)} rows x {len(result.table.columns)} columns to {result.output_path}")
    if report.pruned:
        click.echo(f"Pruned (all missing): {', '.join(report.pruned)}")
    for outcome in report.noop_rules:
        click.echo(f"No-op rule: {outcome.rule} on '{outcome.field}'")
    if report.total_lost:
        click.echo(f"Values turned into missing by classification rules: {report.total_lost}")
    if report.vocabulary is not None and not report.vocabulary.ok:
        click.echo("Out-of-vocabulary values:")
        for finding in report.vocabulary.findings:
            click.echo(f"  {finding.field}: {finding.value!r} ({finding.count})")


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--contract", "-c", "contract_path", default=None, type=click.Path(exists=True),
              help="Apply this contract's rename table")
@click.option("--sheet", default=None, help="Sheet name (default: first sheet)")
def headers(input_path: str, contract_path: str | None, sheet: str | None) -> None:
    """Print the canonical header names of a raw log."""
    renames = _load(contract_path).renames if contract_path else {}
    try:
        raw = read_log(input_path, sheet=sheet)
        names = normalize_headers(raw.columns, renames)
    except ValueError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)
    for raw_name, name in zip(raw.columns, names):
        click.echo(f"{name}\t<- {raw_name}")


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--contract", "-c", "contract_path", required=True, type=click.Path(exists=True),
              help="JSON contract for this log")
@click.option("--field", "-f", "fields", multiple=True,
              help="Field to summarize (default: all controlled-vocabulary fields)")
@click.option("--sheet", default=None, help="Sheet name (default: first sheet)")
def summary(input_path: str, contract_path: str, fields: tuple[str, ...], sheet: str | None) -> None:
    """Print value counts of normalized fields."""
    contract = _load(contract_path)
    try:
        raw = read_log(input_path, sheet=sheet)
        table, _report = run_pipeline(raw, contract)
    except ValueError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    wanted = list(fields) or list(contract.vocabularies)
    counts = summarize(table, wanted)
    for field_name, group in counts.groupby("field", sort=False):
        click.echo(f"{field_name}:")
        for value, count in zip(group["value"], group["count"]):
            label = "<missing>" if pd.isna(value) else value
            click.echo(f"  {label}: {count}")
