"""foialog: Normalize a spreadsheet FOIA request log into an analysis-ready table."""

from foialog.contracts import (
    ContractError,
    FieldConfig,
    LogContract,
    build_rule,
    build_split,
    contract_from_dict,
    load_contract,
)
from foialog.pipeline import (
    PipelineResult,
    apply_rules,
    finalize,
    normalize,
    process_log,
    run_pipeline,
)
from foialog.report import (
    PipelineReport,
    RuleOutcome,
    VocabularyFinding,
    VocabularyReport,
    summarize,
    validate_vocabulary,
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
    is_missing,
    person_step,
    replace_step,
    strip_prefix_step,
    to_missing_step,
)
from foialog.schema import (
    ConfigurationMismatch,
    canonical_header,
    normalize_columns,
    normalize_headers,
)
from foialog.splits import FlagDetailSplit, KeywordGroup, PatternLabel, StatusSplit
from foialog.tables import read_log, write_log

__all__ = [
    # Schema
    "ConfigurationMismatch",
    "canonical_header",
    "normalize_columns",
    "normalize_headers",
    # Rules
    "AliasCollapse",
    "AliasStep",
    "BinaryNormalization",
    "MarkerLabel",
    "NormalizationRule",
    "StripToAlphanumeric",
    "SubstringConsolidation",
    "collapse_step",
    "is_missing",
    "person_step",
    "replace_step",
    "strip_prefix_step",
    "to_missing_step",
    # Splits
    "FlagDetailSplit",
    "KeywordGroup",
    "PatternLabel",
    "StatusSplit",
    # Contracts
    "ContractError",
    "FieldConfig",
    "LogContract",
    "build_rule",
    "build_split",
    "contract_from_dict",
    "load_contract",
    # Pipeline
    "PipelineResult",
    "apply_rules",
    "finalize",
    "normalize",
    "process_log",
    "run_pipeline",
    # Report
    "PipelineReport",
    "RuleOutcome",
    "VocabularyFinding",
    "VocabularyReport",
    "summarize",
    "validate_vocabulary",
    # Tables
    "read_log",
    "write_log",
]
