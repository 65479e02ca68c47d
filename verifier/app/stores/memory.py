from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

from verifier.app.errors import NotFoundError
from verifier.app.schemas.declaration import SourceRef, StoredPayload
from verifier.app.stores.base import PayloadStore


class InMemoryPayloadStore(PayloadStore):
    """
    Dictionary-backed payload store.

    Used when:
    - payloads are produced in-process (fixtures, dry runs)
    - tests need a deterministic data-access collaborator

    Records every fetched reference in `fetched`, in order.
    """

    def __init__(self) -> None:
        self._payloads: Dict[Tuple[str, str], StoredPayload] = {}
        self.fetched: List[SourceRef] = []

    def put(
        self,
        namespace: str,
        name: str,
        data: Mapping[str, bytes],
    ) -> StoredPayload:
        payload = StoredPayload(
            namespace=namespace,
            name=name,
            data=dict(data),
        )
        self._payloads[(namespace, name)] = payload
        return payload

    def delete(self, namespace: str, name: str) -> None:
        self._payloads.pop((namespace, name), None)

    async def fetch(self, ref: SourceRef) -> StoredPayload:
        self.fetched.append(ref)

        payload = self._payloads.get((ref.namespace, ref.name))
        if payload is None:
            raise NotFoundError(ref.namespace, ref.name)
        return payload
