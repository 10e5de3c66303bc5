"""Tests for foialog.report: rule outcomes, vocabulary checks, summaries."""

from __future__ import annotations

import pandas as pd

from foialog.report import PipelineReport, RuleOutcome, summarize, validate_vocabulary


class TestPipelineReport:
    def test_noop_and_lost(self):
        report = PipelineReport(outcomes=[
            RuleOutcome("Division", "substring(3 markers)", matched=4, changed=4),
            RuleOutcome("Litigation", "binary"),
            RuleOutcome("Fee", "binary", matched=2, changed=3, lost=1),
        ])
        assert [o.field for o in report.noop_rules] == ["Litigation"]
        assert report.total_lost == 1
        assert len(report.outcomes_for("Fee")) == 1

    def test_empty(self):
        report = PipelineReport()
        assert report.noop_rules == []
        assert report.total_lost == 0
        assert report.vocabulary is None


class TestValidateVocabulary:
    def test_all_in_vocabulary(self):
        df = pd.DataFrame({"Flag": ["Yes", "No", None]})
        report = validate_vocabulary(df, {"Flag": ["Yes", "No"]})
        assert report.ok
        assert report.checked == ["Flag"]

    def test_violation_counted(self):
        df = pd.DataFrame({"Flag": ["Yes", "maybe", "maybe", "No"]})
        report = validate_vocabulary(df, {"Flag": ["Yes", "No"]})
        assert not report.ok
        assert len(report.findings) == 1
        finding = report.findings[0]
        assert (finding.field, finding.value, finding.count) == ("Flag", "maybe", 2)

    def test_case_variant_is_violation(self):
        df = pd.DataFrame({"Flag": ["yes"]})
        report = validate_vocabulary(df, {"Flag": ["Yes", "No"]})
        assert report.fields_with_violations() == ["Flag"]

    def test_absent_field_skipped(self):
        df = pd.DataFrame({"Other": ["x"]})
        report = validate_vocabulary(df, {"Flag": ["Yes"]})
        assert report.ok
        assert report.checked == []

    def test_all_missing_column_passes(self):
        df = pd.DataFrame({"Flag": [None, float("nan")]})
        assert validate_vocabulary(df, {"Flag": ["Yes"]}).ok


class TestSummarize:
    def test_counts_with_missing(self):
        df = pd.DataFrame({"Flag": ["Yes", "Yes", None, "No"], "Other": ["a", "b", "c", "d"]})
        counts = summarize(df, ["Flag"])
        assert list(counts.columns) == ["field", "value", "count"]
        by_value = dict(zip(counts["value"], counts["count"]))
        assert by_value["Yes"] == 2
        assert by_value["No"] == 1
        assert by_value[None] == 1
        assert set(counts["field"]) == {"Flag"}

    def test_string_dtype_missing_counted_under_none(self):
        df = pd.DataFrame({"Flag": pd.Series(["Yes", None, None], dtype="string")})
        counts = summarize(df, ["Flag"])
        by_value = dict(zip(counts["value"], counts["count"]))
        assert by_value[None] == 2
        assert counts["value"].dtype == object

    def test_several_fields(self):
        df = pd.DataFrame({"A": ["x"], "B": ["y"]})
        counts = summarize(df, ["A", "B", "Absent"])
        assert counts["field"].tolist() == ["A", "B"]

    def test_no_fields(self):
        counts = summarize(pd.DataFrame({"A": ["x"]}), [])
        assert counts.empty
        assert list(counts.columns) == ["field", "value", "count"]
