"""
Verifier error taxonomy.

Collaborator-layer failures (fetching, decoding) are exceptions and are
fatal to the current verification call. Object set mismatches are NOT
exceptions: they are reported through a non-passing VerificationResult.
"""

from __future__ import annotations

from typing import Optional


class VerifierError(RuntimeError):
    """Base class for all verifier failures."""


class NotFoundError(VerifierError):
    """
    A referenced storage object does not exist.

    Raised by data-access collaborators and never retried.
    """

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"storage object {namespace}/{name} not found")


class FetchError(VerifierError):
    """A storage object could not be retrieved or is malformed."""


class DecodeError(VerifierError):
    """
    A payload could not be turned into structured objects.

    Covers malformed documents, unknown kinds, corrupted compression
    streams and oversize payloads. The offending payload key and document
    position are attached when known.
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        document_index: Optional[int] = None,
    ) -> None:
        self.reason = message
        self.source = source
        self.document_index = document_index
        super().__init__(self._format())

    def with_context(
        self,
        *,
        source: Optional[str] = None,
        document_index: Optional[int] = None,
    ) -> "DecodeError":
        """
        Return a copy of this error carrying additional location context.

        Context already present on the error is kept.
        """
        return type(self)(
            self.reason,
            source=self.source if self.source is not None else source,
            document_index=(
                self.document_index
                if self.document_index is not None
                else document_index
            ),
        )

    def _format(self) -> str:
        location = []
        if self.source is not None:
            location.append(f"source '{self.source}'")
        if self.document_index is not None:
            location.append(f"document #{self.document_index}")
        if not location:
            return self.reason
        return f"{self.reason} ({', '.join(location)})"

    def __str__(self) -> str:
        return self._format()


class UnknownKindError(DecodeError):
    """A kind/version (or object type) is not present in the type registry."""
