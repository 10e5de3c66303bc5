"""Tests for foialog.splits: flag/detail and status splits."""

from __future__ import annotations

import pandas as pd
import pytest

from foialog.splits import FlagDetailSplit, KeywordGroup, PatternLabel, StatusSplit


def _records_split() -> FlagDetailSplit:
    return FlagDetailSplit("All_Requested_Records_Sent", "Records_Sent", "Records_Sent_Detail")


def _status_split() -> StatusSplit:
    return StatusSplit("Current_Status", "Status_Overall", "Status_Detail")


# ─── FlagDetailSplit ─────────────────────────────────────────────────────────


class TestFlagDetailPrefixNormalization:
    @pytest.mark.parametrize("value, expected", [
        ("yrd, see attached", "Yes, see attached"),
        ("yes", "Yes"),
        ("YES - all sent", "Yes - all sent"),
        ("no, none located", "No, none located"),
        ("NO", "No"),
        ("None located", "None located"),
        ("Partially", "Partially"),
    ])
    def test_apply(self, value, expected):
        assert _records_split().apply(value) == expected

    def test_apply_idempotent(self):
        split = _records_split()
        for v in ["yrd, see attached", "no", "Partially", "see notes"]:
            assert split.apply(split.apply(v)) == split.apply(v)

    def test_missing_passes_through(self):
        assert _records_split().apply(None) is None


class TestFlagDetailSplit:
    def test_scenario_yrd(self):
        assert _records_split().split("yrd, see attached") == ("Yes", "see attached")

    @pytest.mark.parametrize("value, expected", [
        ("Yes", ("Yes", None)),
        ("No, none located", ("No", "none located")),
        ("no", ("No", None)),
        ("Partial, some withheld", ("Partial", "some withheld")),
        ("Partially, some withheld", ("Partial", "some withheld")),
        ("Yes see attached", ("Yes", "see attached")),
        ("see notes", ("Other", "see notes")),
        ("Nope", ("Other", "Nope")),
        ("Unknown", ("Other", "Unknown")),
    ])
    def test_four_way_classification(self, value, expected):
        assert _records_split().split(value) == expected

    def test_missing_gives_missing_pair(self):
        assert _records_split().split(None) == (None, None)
        assert _records_split().split(float("nan")) == (None, None)

    def test_detail_never_keeps_flag_token(self):
        split = _records_split()
        values = ["yrd, see attached", "Yes", "YES, emailed", "No, none", "Partial, 3 of 5", "no - denied"]
        for v in values:
            flag, detail = split.split(v)
            assert flag in {"Yes", "No", "Partial"}
            if detail is not None:
                assert not detail.startswith(flag)

    def test_flag_labels(self):
        assert _records_split().flag_labels == ["No", "Yes", "Partial", "Other"]

    def test_custom_flags(self):
        split = FlagDetailSplit(
            "src", "flag", "detail",
            prefix_aliases=[],
            flags=[PatternLabel("Done", r"^done\b")],
            other_label="Misc",
        )
        assert split.split("Done, all") == ("Done", "all")
        assert split.split("yes") == ("Misc", "yes")

    def test_run_adds_columns_and_normalizes_source(self):
        df = pd.DataFrame({
            "All_Requested_Records_Sent": ["yrd, see attached", "no", None, "see notes"],
        })
        out, outcomes = _records_split().run(df)
        assert out["All_Requested_Records_Sent"].tolist()[:2] == ["Yes, see attached", "No"]
        assert out["Records_Sent"].tolist() == ["Yes", "No", None, "Other"]
        assert out["Records_Sent_Detail"].tolist() == ["see attached", None, None, "see notes"]
        assert outcomes[0].matched == 2
        assert outcomes[0].changed == 2

    def test_run_on_string_dtype_keeps_none(self):
        df = pd.DataFrame({"All_Requested_Records_Sent": pd.Series(["no", None], dtype="string")})
        out, _ = _records_split().run(df)
        assert out["All_Requested_Records_Sent"].tolist() == ["No", None]
        assert out["Records_Sent"].tolist() == ["No", None]


# ─── StatusSplit ─────────────────────────────────────────────────────────────


class TestStatusOverall:
    @pytest.mark.parametrize("value, expected", [
        ("Closed - records sent via email", "Closed"),
        ("closed", "Closed"),
        ("OPEN - pending", "Open"),
        ("Inactive - no response from requestor", "Inactive"),
        ("  Closed", "Closed"),
        ("Reopened", None),
        ("Pending - Closed soon", None),
        ("Closedout", None),
    ])
    def test_anchored_at_start(self, value, expected):
        assert _status_split().overall_for(value) == expected


class TestStatusDetail:
    def test_scenario_sent(self):
        assert _status_split().split("Closed - records sent via email") == ("Closed", "Sent")

    @pytest.mark.parametrize("value, expected", [
        ("Closed - records emailed", "Sent"),
        ("Closed - records e-mailed", "Sent"),
        ("Closed - provided on CD", "Sent"),
        ("Closed - partial release", "Partial"),
        ("Closed - not in possession of agency", "No Records"),
        ("Closed - no responsive records", "No Records"),
        ("Closed - no records", "No Records"),
        ("Closed - not an agency record", "Denied"),
        ("Closed - denied, exemption 5", "Denied"),
        ("Open", "Open"),
        ("Open - pending review", "Open"),
        ("Closed - withdrawn by requester", "Withdrawn"),
        ("Closed - requester withdrew", "Withdrawn"),
        ("Closed - referred to another agency", "Referred"),
        ("Closed - available on website", "Referred"),
        ("Closed - sent to DOJ", "Sent"),
        ("Closed - forwarded to DOJ", "Referred"),
        ("Inactive - no response from requestor", "No Response"),
        ("Closed - duplicate request", None),
    ])
    def test_first_group_wins(self, value, expected):
        assert _status_split().detail_for(value) == expected

    def test_specific_negation_before_generic(self):
        """"not in possession" must win over the generic "not" group."""
        split = _status_split()
        assert split.detail_for("not in possession") == "No Records"
        assert split.detail_for("not found") == "Denied"

    def test_classifies_full_string_not_residual(self):
        # "open" appears only in the leading token
        assert _status_split().split("Open") == ("Open", "Open")

    def test_missing(self):
        assert _status_split().split(None) == (None, None)

    def test_apply_is_identity(self):
        assert _status_split().apply("closed - sent") == "closed - sent"

    def test_custom_groups(self):
        split = StatusSplit(
            "s", "o", "d",
            overall_labels=["Done"],
            groups=[KeywordGroup("Fast", [r"\bquick"]), KeywordGroup("Slow", [r"\bslow"])],
        )
        assert split.split("done - quickly") == ("Done", "Fast")
        assert split.detail_labels == ["Fast", "Slow"]

    def test_run(self):
        df = pd.DataFrame({"Current_Status": ["Closed - records sent", None, "mystery"]})
        out, outcomes = _status_split().run(df)
        assert out["Status_Overall"].tolist() == ["Closed", None, None]
        assert out["Status_Detail"].tolist() == ["Sent", None, None]
        assert out["Current_Status"].tolist()[0] == "Closed - records sent"
        overall, detail = outcomes
        assert overall.matched == 1
        assert overall.lost == 1
        assert detail.lost == 1
