from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class VerificationEventType(str, Enum):
    """
    Phases reported by `ObjectSetVerifier.verify`, in emission order.

    A call always starts with VERIFICATION_STARTED and ends with exactly
    one of VERIFICATION_COMPLETED or VERIFICATION_FAILED.
    """

    VERIFICATION_STARTED = "verification_started"

    # one per fetched storage object
    SOURCE_FETCHED = "source_fetched"
    OBJECT_SET_BUILT = "object_set_built"

    DIFF_COMPLETED = "diff_completed"

    VERIFICATION_COMPLETED = "verification_completed"
    VERIFICATION_FAILED = "verification_failed"


class VerificationEvent(BaseModel):
    """
    A single progress report of one verification call.

    `details` carries phase-specific counts and names, e.g. the fetched
    source or the number of missing identities.
    """

    event_id: UUID = Field(default_factory=uuid4)
    declaration: str = Field(
        ..., description="namespace/name of the verified declaration"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: VerificationEventType
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
