from __future__ import annotations

from typing import Protocol

from verifier.app.schemas.declaration import SourceRef, StoredPayload


class PayloadStore(Protocol):
    """
    Interface of the data-access collaborator.

    Implementations must be:
    - idempotent (fetching the same reference twice yields the same data)
    - read-only
    - explicit about absence: a missing storage object raises
      NotFoundError, never an empty payload

    Timeouts and retries belong to the implementation; the verifier
    never retries a fetch.
    """

    async def fetch(self, ref: SourceRef) -> StoredPayload:
        ...
