"""
Request and response shapes for HTS classification.

The field names follow the JSON contract shared with the browser client
(camelCase), so the models serialize back to exactly what the model produced.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ErrorCode = Literal["INVALID_IMAGE", "UNCLASSIFIABLE", "LLM_ERROR", "RATE_LIMITED"]

RESULT_COUNT = 5


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    image: str = Field(min_length=1)


class ClassificationCandidate(BaseModel):
    model_config = ConfigDict(strict=True)

    rank: int = Field(ge=1, le=RESULT_COUNT)
    htsCode: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    dutyRate: str
    costEffectivenessNote: str

    @field_validator("rank", mode="before")
    @classmethod
    def _integral_float_rank(cls, value):
        # JSON 1.0 is the integer 1; 1.5 and booleans still fail strict int
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class ClassificationResponse(BaseModel):
    """Exactly five candidates, each rank from 1 to 5 used once."""

    model_config = ConfigDict(strict=True)

    results: list[ClassificationCandidate] = Field(
        min_length=RESULT_COUNT, max_length=RESULT_COUNT
    )

    @model_validator(mode="after")
    def _check_ranks(self) -> "ClassificationResponse":
        ranks = sorted(candidate.rank for candidate in self.results)
        if ranks != list(range(1, RESULT_COUNT + 1)):
            raise ValueError(
                f"ranks must be exactly 1..{RESULT_COUNT} without duplicates, got {ranks}"
            )
        return self


class ClassificationError(BaseModel):
    model_config = ConfigDict(strict=True)

    error: str
    code: ErrorCode
