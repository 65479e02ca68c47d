from .models import VerificationEvent, VerificationEventType
from .emitter import (
    NullEventEmitter,
    RecordingEventEmitter,
    VerificationEventEmitter,
)

__all__ = [
    "NullEventEmitter",
    "RecordingEventEmitter",
    "VerificationEvent",
    "VerificationEventEmitter",
    "VerificationEventType",
]
