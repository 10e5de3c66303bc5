"""Pydantic models for the raw JSON contract.

These validate the shape of a contract file before any rule object is built.
:mod:`foialog.contracts` turns them into the typed rule and split objects the
pipeline runs.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Spec(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ─── Field rules ─────────────────────────────────────────────────────────────


class MarkerLabelSpec(_Spec):
    marker: str = Field(min_length=1)
    label: str


class StripAlphanumericSpec(_Spec):
    type: Literal["strip_alphanumeric"]


class SubstringSpec(_Spec):
    type: Literal["substring"]
    mappings: list[MarkerLabelSpec] = Field(min_length=1)
    case_sensitive: bool = False


class BinarySpec(_Spec):
    type: Literal["binary"]
    yes_label: str = "Yes"
    no_label: str = "No"
    yes_pattern: str | None = None
    no_pattern: str | None = None


class CollapseStepSpec(_Spec):
    op: Literal["collapse"]
    markers: list[str] = Field(min_length=1)
    label: str


class PersonStepSpec(_Spec):
    op: Literal["person"]
    people: dict[str, str]


class ToMissingStepSpec(_Spec):
    op: Literal["to_missing"]
    patterns: list[str] = Field(min_length=1)
    prefixes: list[str] = Field(default_factory=list)


class StripPrefixStepSpec(_Spec):
    op: Literal["strip_prefix"]
    patterns: list[str] = Field(min_length=1)


class ReplaceStepSpec(_Spec):
    op: Literal["replace"]
    pattern: str
    replacement: str


AliasStepSpec = Annotated[
    Union[CollapseStepSpec, PersonStepSpec, ToMissingStepSpec, StripPrefixStepSpec, ReplaceStepSpec],
    Field(discriminator="op"),
]


class AliasCollapseSpec(_Spec):
    type: Literal["alias_collapse"]
    steps: list[AliasStepSpec] = Field(min_length=1)


RuleSpec = Annotated[
    Union[StripAlphanumericSpec, SubstringSpec, BinarySpec, AliasCollapseSpec],
    Field(discriminator="type"),
]


class FieldSpec(_Spec):
    """Rules and (optional) controlled vocabulary for one column."""

    vocabulary: list[str] | None = None
    rules: list[RuleSpec] = Field(default_factory=list)


# ─── Splits ──────────────────────────────────────────────────────────────────


class PatternLabelSpec(_Spec):
    label: str
    pattern: str


class KeywordGroupSpec(_Spec):
    label: str
    patterns: list[str] = Field(min_length=1)


class FlagDetailSpec(_Spec):
    type: Literal["flag_detail"]
    source: str
    flag: str
    detail: str
    prefix_aliases: list[PatternLabelSpec] | None = None
    flags: list[PatternLabelSpec] | None = None
    other_label: str = "Other"


class StatusSpec(_Spec):
    type: Literal["status"]
    source: str
    overall: str
    detail: str
    overall_labels: list[str] | None = None
    groups: list[KeywordGroupSpec] | None = None


SplitSpec = Annotated[
    Union[FlagDetailSpec, StatusSpec],
    Field(discriminator="type"),
]


# ─── Contract ────────────────────────────────────────────────────────────────


class ContractSpec(_Spec):
    """Top-level contract document."""

    agency: str
    description: str = ""
    renames: dict[str, str] = Field(default_factory=dict)
    fields: dict[str, FieldSpec] = Field(default_factory=dict)
    splits: list[SplitSpec] = Field(default_factory=list)
    prune_if_all_missing: list[str] = Field(default_factory=list)
    output_order: list[str] = Field(default_factory=list)
