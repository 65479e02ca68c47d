"""
Structured object schemas.

Defines the identity-bearing resource objects compared by the verifier.
Every object carries a kind/version discriminator, metadata (namespace and
name) and an opaque content payload. Typed models exist for common kinds;
their content beyond the declared fields is preserved as extra fields.

Objects are compared by semantic equality (see `semantic_form`), never by
identity.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Null containers
# ---------------------------------------------------------------------------


def _drop_null_containers(model: type, data: Any) -> Any:
    """
    Remove explicit nulls given for map and list fields.

    Manifests commonly carry `labels:` or `data: null`; both mean an empty
    container, so the field falls back to its empty default. Empty-string
    defaults such as `namespace` are treated the same way.
    """
    if not isinstance(data, dict):
        return data

    cleaned = dict(data)
    for name, field in model.model_fields.items():
        if field.default_factory is None and field.default != "":
            continue
        for key in {name, field.alias or name}:
            if key in cleaned and cleaned[key] is None:
                del cleaned[key]
    return cleaned


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class ObjectMeta(BaseModel):
    """
    Identifying metadata of a structured object.

    Only the fields the verifier needs are declared. Everything else
    (ownerReferences, finalizers, ...) is kept as extra fields and takes
    part in semantic comparison.
    """

    name: str = Field(
        ...,
        description="Object name, unique per kind within a namespace",
    )

    namespace: str = Field(
        "",
        description="Owning namespace; empty for cluster-scoped objects",
    )

    labels: Dict[str, str] = Field(default_factory=dict)

    annotations: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _null_means_empty(cls, data: Any) -> Any:
        return _drop_null_containers(cls, data)


# ---------------------------------------------------------------------------
# Base object
# ---------------------------------------------------------------------------


class StructuredObject(BaseModel):
    """
    Base model of every object held in an object set.

    Subclasses pin `api_version` and `kind` defaults so that objects built
    in code resolve to the same identity as decoded ones.
    """

    api_version: Optional[str] = Field(None, alias="apiVersion")

    kind: Optional[str] = None

    metadata: ObjectMeta

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _null_means_empty(cls, data: Any) -> Any:
        return _drop_null_containers(cls, data)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace


# ---------------------------------------------------------------------------
# Core (v1)
# ---------------------------------------------------------------------------


class ConfigMap(StructuredObject):
    api_version: Optional[str] = Field("v1", alias="apiVersion")
    kind: Optional[str] = "ConfigMap"

    data: Dict[str, str] = Field(default_factory=dict)
    binary_data: Dict[str, str] = Field(
        default_factory=dict, alias="binaryData"
    )
    immutable: Optional[bool] = None


class Secret(StructuredObject):
    api_version: Optional[str] = Field("v1", alias="apiVersion")
    kind: Optional[str] = "Secret"

    type: str = "Opaque"
    data: Dict[str, str] = Field(default_factory=dict)
    string_data: Dict[str, str] = Field(
        default_factory=dict, alias="stringData"
    )
    immutable: Optional[bool] = None


class Service(StructuredObject):
    api_version: Optional[str] = Field("v1", alias="apiVersion")
    kind: Optional[str] = "Service"

    spec: Dict[str, Any] = Field(default_factory=dict)


class ServiceAccount(StructuredObject):
    api_version: Optional[str] = Field("v1", alias="apiVersion")
    kind: Optional[str] = "ServiceAccount"

    automount_service_account_token: Optional[bool] = Field(
        None, alias="automountServiceAccountToken"
    )


# ---------------------------------------------------------------------------
# Workloads (apps/v1)
# ---------------------------------------------------------------------------


class Deployment(StructuredObject):
    api_version: Optional[str] = Field("apps/v1", alias="apiVersion")
    kind: Optional[str] = "Deployment"

    spec: Dict[str, Any] = Field(default_factory=dict)


class StatefulSet(StructuredObject):
    api_version: Optional[str] = Field("apps/v1", alias="apiVersion")
    kind: Optional[str] = "StatefulSet"

    spec: Dict[str, Any] = Field(default_factory=dict)


class DaemonSet(StructuredObject):
    api_version: Optional[str] = Field("apps/v1", alias="apiVersion")
    kind: Optional[str] = "DaemonSet"

    spec: Dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# RBAC (rbac.authorization.k8s.io/v1)
# ---------------------------------------------------------------------------

_RBAC = "rbac.authorization.k8s.io/v1"


class Role(StructuredObject):
    api_version: Optional[str] = Field(_RBAC, alias="apiVersion")
    kind: Optional[str] = "Role"

    rules: List[Dict[str, Any]] = Field(default_factory=list)


class ClusterRole(StructuredObject):
    api_version: Optional[str] = Field(_RBAC, alias="apiVersion")
    kind: Optional[str] = "ClusterRole"

    rules: List[Dict[str, Any]] = Field(default_factory=list)
    aggregation_rule: Optional[Dict[str, Any]] = Field(
        None, alias="aggregationRule"
    )


class RoleBinding(StructuredObject):
    api_version: Optional[str] = Field(_RBAC, alias="apiVersion")
    kind: Optional[str] = "RoleBinding"

    role_ref: Dict[str, Any] = Field(default_factory=dict, alias="roleRef")
    subjects: List[Dict[str, Any]] = Field(default_factory=list)


class ClusterRoleBinding(StructuredObject):
    api_version: Optional[str] = Field(_RBAC, alias="apiVersion")
    kind: Optional[str] = "ClusterRoleBinding"

    role_ref: Dict[str, Any] = Field(default_factory=dict, alias="roleRef")
    subjects: List[Dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Policy / networking
# ---------------------------------------------------------------------------


class PodDisruptionBudget(StructuredObject):
    api_version: Optional[str] = Field("policy/v1", alias="apiVersion")
    kind: Optional[str] = "PodDisruptionBudget"

    spec: Dict[str, Any] = Field(default_factory=dict)


class NetworkPolicy(StructuredObject):
    api_version: Optional[str] = Field(
        "networking.k8s.io/v1", alias="apiVersion"
    )
    kind: Optional[str] = "NetworkPolicy"

    spec: Dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Semantic equality
# ---------------------------------------------------------------------------


# Maps whose entries are user data: an empty-string value is content there,
# not an elided field.
_STRING_MAPS = frozenset(
    {"labels", "annotations", "data", "binaryData", "stringData"}
)


def _is_empty(value: Any, *, keep_empty_strings: bool) -> bool:
    if value is None or value == {} or value == []:
        return True
    return value == "" and not keep_empty_strings


def _prune(value: Any, *, keep_empty_strings: bool = False) -> Any:
    """
    Drop representation-only artifacts from a dumped object.

    None values, empty strings, empty mappings and empty sequences are
    treated as absent, so an elided field and an explicitly empty one
    compare equal.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, child in value.items():
            child = _prune(child, keep_empty_strings=key in _STRING_MAPS)
            if _is_empty(child, keep_empty_strings=keep_empty_strings):
                continue
            pruned[key] = child
        return pruned
    if isinstance(value, (list, tuple)):
        return [_prune(child) for child in value]
    return value


def semantic_form(obj: StructuredObject) -> Dict[str, Any]:
    """
    Canonical comparison form of an object.

    Wire-alias JSON dump with default values excluded. Fields holding None,
    an empty string, an empty mapping or an empty list are pruned, matching
    how an omitted field decodes to its zero value. Entries of label,
    annotation and data maps keep empty-string values. Mapping order never
    matters for equality.
    """
    dumped = obj.model_dump(
        mode="json",
        by_alias=True,
        exclude_defaults=True,
    )
    # Pinned kind/version defaults are elided above; restore them so the
    # form always states what the object is.
    dumped["apiVersion"] = obj.api_version
    dumped["kind"] = obj.kind
    return _prune(dumped)


def semantic_equal(left: StructuredObject, right: StructuredObject) -> bool:
    return semantic_form(left) == semantic_form(right)


ObjectSet = Dict[str, StructuredObject]
