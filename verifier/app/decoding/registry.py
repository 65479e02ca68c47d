"""
Object type registry.

Maps a kind/version discriminator (apiVersion + kind) to the model used to
decode and compare objects of that kind. The registry is a plain value
constructed by the caller and passed into the decoder; there is no
process-wide registry.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, Type

from pydantic import BaseModel, ConfigDict

from verifier.app.errors import UnknownKindError
from verifier.app.schemas.objects import (
    ClusterRole,
    ClusterRoleBinding,
    ConfigMap,
    DaemonSet,
    Deployment,
    NetworkPolicy,
    PodDisruptionBudget,
    Role,
    RoleBinding,
    Secret,
    Service,
    ServiceAccount,
    StatefulSet,
    StructuredObject,
)


def kind_version(api_version: str, kind: str) -> str:
    """
    Printable kind/version discriminator, e.g. "apps/v1, Kind=Deployment".
    """
    return f"{api_version}, Kind={kind}"


class KindEntry(BaseModel):
    """
    Declarative description of one registered kind.
    """

    api_version: str
    kind: str
    model: Type[StructuredObject]

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )

    @property
    def kind_version(self) -> str:
        return kind_version(self.api_version, self.kind)


class TypeRegistry:
    """
    Kind/version to model lookup.

    A model class may be registered for several kinds (e.g. a generic
    model for custom resources); resolving the kind of such an instance
    then relies on the apiVersion/kind it carries.
    """

    def __init__(self, entries: Iterable[KindEntry] = ()) -> None:
        self._entries: Dict[Tuple[str, str], KindEntry] = {}
        for entry in entries:
            self._add(entry)

    def register(
        self,
        api_version: str,
        kind: str,
        model: Type[StructuredObject] = StructuredObject,
    ) -> "TypeRegistry":
        self._add(KindEntry(api_version=api_version, kind=kind, model=model))
        return self

    def _add(self, entry: KindEntry) -> None:
        self._entries[(entry.api_version, entry.kind)] = entry

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, api_version: str, kind: str) -> KindEntry:
        entry = self._entries.get((api_version, kind))
        if entry is None:
            raise UnknownKindError(
                f"no kind registered for {kind_version(api_version, kind)}"
            )
        return entry

    def kind_version_for(self, obj: StructuredObject) -> str:
        """
        Resolve the kind/version of an object.

        The apiVersion/kind carried by the object wins when registered.
        Otherwise the object's type must map to exactly one registered
        kind.
        """
        if obj.api_version and obj.kind:
            entry = self._entries.get((obj.api_version, obj.kind))
            if entry is not None and isinstance(obj, entry.model):
                return entry.kind_version

        candidates = [
            entry
            for entry in self._entries.values()
            if type(obj) is entry.model
        ]
        if len(candidates) == 1:
            return candidates[0].kind_version

        if not candidates:
            raise UnknownKindError(
                f"no kind registered for object type {type(obj).__name__} "
                f"(apiVersion={obj.api_version!r}, kind={obj.kind!r})"
            )
        raise UnknownKindError(
            f"object type {type(obj).__name__} is registered for "
            f"{len(candidates)} kinds and carries no registered "
            f"apiVersion/kind"
        )

    def identity(self, obj: StructuredObject) -> str:
        """
        Canonical object identity: kind/version, namespace and name.
        """
        return (
            f"{self.kind_version_for(obj)}__"
            f"{obj.metadata.namespace}__{obj.metadata.name}"
        )

    def entries(self) -> List[KindEntry]:
        return list(self._entries.values())

    def __contains__(self, item: Tuple[str, str]) -> bool:
        return item in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_BUILTIN_MODELS: List[Type[StructuredObject]] = [
    ConfigMap,
    Secret,
    Service,
    ServiceAccount,
    Deployment,
    StatefulSet,
    DaemonSet,
    Role,
    ClusterRole,
    RoleBinding,
    ClusterRoleBinding,
    PodDisruptionBudget,
    NetworkPolicy,
]


def default_registry() -> TypeRegistry:
    """
    Build a fresh registry holding the built-in kinds.

    Each call returns an independent registry; registering custom kinds
    on it does not affect other callers.
    """
    entries = []
    for model in _BUILTIN_MODELS:
        api_version = model.model_fields["api_version"].default
        kind = model.model_fields["kind"].default
        entries.append(
            KindEntry(api_version=api_version, kind=kind, model=model)
        )
    return TypeRegistry(entries)
