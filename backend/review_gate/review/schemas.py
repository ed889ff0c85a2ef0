"""Pydantic schemas for the review-model output and the gate decision."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from review_gate.config import Severity


class GateDecision(str, Enum):
    """Outcome of the gating policy."""
    ALLOW = "allow"
    BLOCK = "block"


class InlineComment(BaseModel):
    """A finding anchored to a line of the new file."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = Field(..., ge=0, description="Line number on the new-file side of the diff")
    comment: str
    severity: Severity
    code: Optional[str] = Field(default=None, description="Quoted offending snippet")


class ReviewResult(BaseModel):
    """Structured review returned by the model.

    A payload must carry at least one of the two lists; a JSON object with
    neither is not a review.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    inline_comments: List[InlineComment] = Field(default_factory=list, alias="inlineComments")
    general_comments: List[str] = Field(default_factory=list, alias="generalComments")

    @model_validator(mode="before")
    @classmethod
    def _require_review_keys(cls, data):
        if isinstance(data, dict) and not (
            {"inlineComments", "generalComments", "inline_comments", "general_comments"} & data.keys()
        ):
            raise ValueError("payload has neither inlineComments nor generalComments")
        return data
