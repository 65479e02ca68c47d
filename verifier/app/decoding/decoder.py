"""
Object document decoding.

Turns one serialized document (YAML, or JSON as a YAML subset) into a
StructuredObject using the model registered for its kind/version, and
resolves the object's identity through the same registry.
"""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import ValidationError

from verifier.app.decoding.registry import TypeRegistry
from verifier.app.errors import DecodeError
from verifier.app.schemas.objects import StructuredObject


class ObjectDecoder:
    """
    Registry-driven document decoder.

    The decoder owns no type knowledge of its own: every kind it can
    decode comes from the injected registry.
    """

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def decode(self, document: str) -> StructuredObject:
        """
        Decode a single document into its registered model.

        Raises DecodeError for malformed documents, documents without a
        kind/version, unregistered kinds, and content the model rejects.
        """
        raw = self._load(document)

        api_version = raw.get("apiVersion")
        kind = raw.get("kind")
        if not isinstance(api_version, str) or not api_version:
            raise DecodeError("document has no apiVersion")
        if not isinstance(kind, str) or not kind:
            raise DecodeError("document has no kind")

        entry = self._registry.lookup(api_version, kind)

        try:
            return entry.model.model_validate(raw)
        except ValidationError as exc:
            raise DecodeError(
                f"invalid {entry.kind_version} document: "
                f"{exc.error_count()} validation error(s): "
                f"{exc.errors(include_url=False)}"
            ) from exc

    def identity(self, obj: StructuredObject) -> str:
        return self._registry.identity(obj)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load(document: str) -> dict:
        try:
            raw: Any = yaml.safe_load(document)
        except yaml.YAMLError as exc:
            raise DecodeError(f"malformed document: {exc}") from exc

        if not isinstance(raw, dict):
            raise DecodeError(
                f"document is not a mapping (got {type(raw).__name__})"
            )
        return raw
