"""Compliance evaluation data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ComplianceStatus(str, Enum):
    COMPLIANT = "Compliant"
    PARTIAL = "Partial"
    NON_COMPLIANT = "Non-Compliant"


class Clause(BaseModel):
    """A single citation in a regulatory framework."""

    model_config = ConfigDict(frozen=True)

    framework: str
    clause: str
    title: str


Crosswalk = Mapping[str, Mapping[str, Sequence[Clause]]]


class EvaluationInput(BaseModel):
    """One control statement submitted for evaluation.

    Accepts the snake_case field names as well as the camelCase keys used by
    upstream workflow tools. Missing or null fields become empty values.
    """

    control_text: str = Field(
        default="",
        validation_alias=AliasChoices("control_text", "controlText"),
    )
    evidence_urls: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("evidence_urls", "evidenceUrls", "evidence"),
    )
    frameworks: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "frameworks", "frameworks_selected", "frameworksSelected"
        ),
    )

    @field_validator("control_text", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("evidence_urls", "frameworks", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a string or a list of strings, got {type(value).__name__}")
        return list(value)

    @field_validator("frameworks")
    @classmethod
    def _drop_blank_frameworks(cls, value: list[str]) -> list[str]:
        return [name for name in value if name.strip()]


class EvaluationResult(BaseModel):
    """Structured result for one evaluated control."""

    input_control_text: str
    categories: list[str]
    evidence: list[str]
    status: ComplianceStatus
    score: int = Field(ge=0, le=100)
    mapped_requirements: list[Clause] = []
    frameworks_selected: list[str] = []
    gaps: list[str] = []
    actions: list[str] = []
    notes: str = ""


class ItemFailure(BaseModel):
    """Placeholder emitted for an item whose evaluation failed."""

    item_index: int
    input: dict = {}
    error: str


class BatchSummary(BaseModel):
    total: int = 0
    compliant: int = 0
    partial: int = 0
    non_compliant: int = 0
    failed: int = 0
    average_score: Optional[float] = None
