"""
Verification result schemas.

DiffResult captures the three relations between an available and an
expected object set. VerificationResult wraps it with the outcome and the
rendered diagnostic. Both live for one verification call only.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from verifier.app.schemas.declaration import Declaration
from verifier.app.schemas.objects import StructuredObject


class ObjectMismatch(BaseModel):
    """
    An identity present in both sets whose content differs.
    """

    identity: str
    expected: StructuredObject
    available: StructuredObject

    model_config = ConfigDict(frozen=True)


class DiffResult(BaseModel):
    """
    Outcome of comparing an available set against an expected set.

    Relations are evaluated in priority order (mismatch, missing, extra)
    and evaluation stops at the first non-empty one, so at most one of the
    three lists is non-empty.
    """

    mismatches: List[ObjectMismatch] = Field(default_factory=list)

    missing: List[str] = Field(
        default_factory=list,
        description="Identities expected but absent from storage",
    )

    extra: List[str] = Field(
        default_factory=list,
        description="Identities stored but not expected",
    )

    extra_checked: bool = Field(
        False,
        description="Whether the extra-object pass was enabled",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> bool:
        return not (self.mismatches or self.missing or self.extra)


class VerificationResult(BaseModel):
    """
    Final outcome of one verification call.
    """

    declaration: Declaration
    passed: bool
    diff: DiffResult
    message: Optional[str] = Field(
        None,
        description="Rendered diagnostic; only present on failure",
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def enforce_message_invariant(self):
        if self.passed != self.diff.passed:
            raise ValueError("passed must agree with the diff outcome")
        if self.passed and self.message is not None:
            raise ValueError("a passing verification carries no message")
        if not self.passed and not self.message:
            raise ValueError("a failing verification must carry a message")
        return self
