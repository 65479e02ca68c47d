"""
Declaration and payload source schemas.

A Declaration names the storage objects whose payloads together make up
one logical object set. Each fetched storage object holds one or more
payload sources (data entries), any of which may be compressed.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SourceRef(BaseModel):
    """
    Reference to one stored payload object.
    """

    namespace: str
    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class Declaration(BaseModel):
    """
    The named, namespaced record whose payload sources are verified.

    Payload objects always live in the declaration's own namespace.
    """

    namespace: str = Field(
        ...,
        description="Namespace of the declaration and its payload objects",
    )

    name: str = Field(
        ...,
        description="Name of the declaration",
    )

    secret_refs: List[str] = Field(
        default_factory=list,
        description="Names of the storage objects holding the payloads",
    )

    model_config = ConfigDict(frozen=True)

    def source_refs(self) -> List[SourceRef]:
        return [
            SourceRef(namespace=self.namespace, name=name)
            for name in self.secret_refs
        ]

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class PayloadSource(BaseModel):
    """
    One labeled byte blob contributing zero or more object documents.
    """

    key: str
    raw: bytes

    model_config = ConfigDict(frozen=True)

    def is_compressed(self, suffix: str) -> bool:
        return self.key.endswith(suffix)


class StoredPayload(BaseModel):
    """
    A fetched storage object.

    Every data entry is an independent payload source. Entries are
    yielded in key order so that collision handling is reproducible.
    """

    namespace: str
    name: str
    data: Dict[str, bytes] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def sources(self) -> List[PayloadSource]:
        return [
            PayloadSource(key=key, raw=self.data[key])
            for key in sorted(self.data)
        ]
