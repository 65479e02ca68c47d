from __future__ import annotations

from typing import List, Protocol

from verifier.app.events.models import VerificationEvent, VerificationEventType


class VerificationEventEmitter(Protocol):
    """
    Receiver of progress events for one verification call.

    The verifier awaits `emit` inline, between its phases; an emitter
    never influences the result.
    """

    async def emit(self, event: VerificationEvent) -> None:
        ...


class NullEventEmitter:
    """Discards every event. Used when the caller passes no emitter."""

    async def emit(self, event: VerificationEvent) -> None:
        return


class RecordingEventEmitter:
    """
    Keeps the events of a verification in emission order.

    Matchers attach one per call so the trace of the latest run (which
    sources were fetched, how far the call got) stays inspectable after
    an assertion fails.
    """

    def __init__(self) -> None:
        self.events: List[VerificationEvent] = []

    async def emit(self, event: VerificationEvent) -> None:
        self.events.append(event)

    def event_types(self) -> List[VerificationEventType]:
        return [event.event_type for event in self.events]

    @property
    def failure(self) -> VerificationEvent | None:
        """The terminal failure event, if the call raised."""
        for event in reversed(self.events):
            if event.event_type == VerificationEventType.VERIFICATION_FAILED:
                return event
        return None
