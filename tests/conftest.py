"""Shared fixtures: the shipped contract and a small raw FOIA log."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from foialog.contracts import LogContract, load_contract

CONTRACT_PATH = Path(__file__).resolve().parent.parent / "contracts" / "foia_log.json"


def _build_raw_log() -> pd.DataFrame:
    """Six requests with the header spellings and data-entry noise of the real log."""
    return pd.DataFrame({
        "Request ID": ["2019-001", "2019-002", "2019-003", "2019-004", "2019-005", "2019-006"],
        "Date Received": ["2019-01-03", "2019-01-07", "2019-01-15", "2019-02-02", "2019-02-11", "2019-03-01"],
        "Requester Name": ["Jane Roe", "John Doe", "A. Smith", "Press Desk", "R. Lee", "K. Park"],
        "Requester Organization": ["Roe Law", None, "Daily News", "Daily News", None, "Univ."],
        "Description of Records Sought": [
            "Emails re budget",
            "Inspection reports",
            "Travel records",
            "Contracts 2018",
            "Complaint files",
            "Meeting minutes",
        ],
        "Division": [
            "Dir Office",
            "Director office",
            "Director's office",
            "Office of General Counsel",
            "Enforcement Div.",
            "Press office",
        ],
        "Assigned to": ["B.ert", "Bert!", "bert", "M. Chen", None, "Ann-Marie"],
        "Date Acknowledged": [None, None, None, None, None, None],
        "Fee Waiver Requested (Y/N)": ["Y", "Yes - partial", "maybe", None, "NO", None],
        "Expedited Processing?": ["no", "N", None, "yes", "No", None],
        "Fees Charged ($)": [0.0, 25.0, None, 10.0, None, 0.0],
        "Was this request referred to another agency? If so, which one?": [
            "N/A",
            "Referred to the Dept. of Justice",
            "per Whitfield",
            "Referred to the OBM",
            "Referred to EPA per Okafor",
            None,
        ],
        "All Requested Records Sent?": [
            "yrd, see attached",
            "No, none located",
            "Partially, some withheld",
            "see notes",
            None,
            "YES",
        ],
        "Current Status": [
            "Closed - records sent via email",
            "Closed - not in possession of agency",
            "Open - pending review",
            "Inactive - no response from requestor",
            "Closed - withdrawn by requester",
            "closed - records provided",
        ],
        "Date Closed": ["2019-02-01", "2019-01-20", None, None, "2019-02-20", "2019-03-15"],
        "Appeal Filed?": [None, None, "No", None, None, None],
        "Litigation?": [None, None, None, None, None, None],
        "Notes": [None, None, None, None, None, None],
    })


@pytest.fixture
def contract_path() -> Path:
    return CONTRACT_PATH


@pytest.fixture
def contract() -> LogContract:
    return load_contract(CONTRACT_PATH)


@pytest.fixture
def raw_log() -> pd.DataFrame:
    return _build_raw_log()
