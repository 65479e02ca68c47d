"""
Object set verification coordinator.

IMPORTANT:
The verifier is a ONE-SHOT, READ-ONLY check.

It MUST NOT:
- mutate storage
- resolve conflicts between objects
- retry failed fetches
- keep state between calls

Its sole responsibilities are:
- fetching every payload source of a declaration (sequentially)
- materializing the available object set
- diffing it against the expected set
- rendering a diagnostic when the diff is not empty
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

import anyio

from verifier.app.config import VerifierConfig
from verifier.app.coordinator.object_set_builder import build_object_set
from verifier.app.coordinator.reporter import render_message, render_type_error
from verifier.app.coordinator.set_differ import diff_object_sets
from verifier.app.decoding.decoder import ObjectDecoder
from verifier.app.decoding.registry import TypeRegistry, default_registry
from verifier.app.schemas.declaration import (
    Declaration,
    PayloadSource,
    StoredPayload,
)
from verifier.app.schemas.objects import ObjectSet, StructuredObject
from verifier.app.schemas.verification_result import (
    DiffResult,
    VerificationResult,
)
from verifier.app.stores.base import PayloadStore

# Events (observational only)
from verifier.app.events import (
    VerificationEvent,
    VerificationEventType,
    VerificationEventEmitter,
    NullEventEmitter,
    RecordingEventEmitter,
)

logger = logging.getLogger(__name__)

ExpectedObjects = Union[ObjectSet, Iterable[StructuredObject]]


def build_expected_set(
    objects: Iterable[StructuredObject],
    registry: TypeRegistry,
) -> ObjectSet:
    """
    Key caller-supplied objects by identity.

    Same policy as the available set: a repeated identity keeps the last
    object.
    """
    expected: ObjectSet = {}
    for obj in objects:
        expected[registry.identity(obj)] = obj
    return expected


class ObjectSetVerifier:
    """
    Verifies the objects stored for a declaration against an expected set.

    The store and registry are injected; the verifier never opens a
    connection of its own. Every call builds its own sets, so one
    instance may serve concurrent callers as long as the store allows it.
    """

    def __init__(
        self,
        store: PayloadStore,
        *,
        registry: Optional[TypeRegistry] = None,
        config: Optional[VerifierConfig] = None,
    ) -> None:
        self._store = store
        self._registry = registry if registry is not None else default_registry()
        self._config = config if config is not None else VerifierConfig()
        self._decoder = ObjectDecoder(self._registry)

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def config(self) -> VerifierConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def expected_set(self, expected: ExpectedObjects) -> ObjectSet:
        if isinstance(expected, Mapping):
            return dict(expected)
        return build_expected_set(expected, self._registry)

    async def load_available(
        self,
        declaration: Declaration,
        *,
        emitter: Optional[VerificationEventEmitter] = None,
    ) -> ObjectSet:
        """
        Fetch all payload sources of a declaration and decode them.

        Fetching happens first and in declaration order; decoding starts
        only once every source has been retrieved. Any failure aborts the
        call without a partial object set.
        """
        emitter = emitter or NullEventEmitter()

        payloads: List[StoredPayload] = []
        with anyio.fail_after(self._config.FETCH_TIMEOUT_SECONDS):
            for ref in declaration.source_refs():
                payload = await self._store.fetch(ref)
                payloads.append(payload)

                logger.debug(
                    "fetched payload object %s with %d data key(s)",
                    ref,
                    len(payload.data),
                )
                await emitter.emit(
                    VerificationEvent(
                        declaration=str(declaration),
                        event_type=VerificationEventType.SOURCE_FETCHED,
                        details={
                            "source": str(ref),
                            "keys": sorted(payload.data),
                        },
                    )
                )

        sources: List[PayloadSource] = [
            source for payload in payloads for source in payload.sources()
        ]
        available = build_object_set(
            sources,
            self._decoder,
            config=self._config,
        )

        await emitter.emit(
            VerificationEvent(
                declaration=str(declaration),
                event_type=VerificationEventType.OBJECT_SET_BUILT,
                details={
                    "sources_count": len(sources),
                    "objects_count": len(available),
                },
            )
        )
        return available

    async def verify(
        self,
        declaration: Declaration,
        expected: ExpectedObjects,
        *,
        check_extra: Optional[bool] = None,
        emitter: Optional[VerificationEventEmitter] = None,
    ) -> VerificationResult:
        """
        Run one verification.

        `check_extra` overrides the configured extra-object policy for
        this call. The emitter is strictly observational.
        """
        emitter = emitter or NullEventEmitter()
        if check_extra is None:
            check_extra = self._config.CHECK_EXTRA_OBJECTS

        await emitter.emit(
            VerificationEvent(
                declaration=str(declaration),
                event_type=VerificationEventType.VERIFICATION_STARTED,
                details={"check_extra": check_extra},
            )
        )

        try:
            expected_objects = self.expected_set(expected)
            available = await self.load_available(declaration, emitter=emitter)

            diff = diff_object_sets(
                available,
                expected_objects,
                check_extra=check_extra,
            )

            await emitter.emit(
                VerificationEvent(
                    declaration=str(declaration),
                    event_type=VerificationEventType.DIFF_COMPLETED,
                    details={
                        "mismatches": len(diff.mismatches),
                        "missing": len(diff.missing),
                        "extra": len(diff.extra),
                    },
                )
            )

            result = self._finalize_result(declaration, diff)

            logger.info(
                "verification of declaration %s %s",
                declaration,
                "passed" if result.passed else "failed",
            )

            await emitter.emit(
                VerificationEvent(
                    declaration=str(declaration),
                    event_type=VerificationEventType.VERIFICATION_COMPLETED,
                    details={"passed": result.passed},
                )
            )
            return result

        except Exception as exc:
            await emitter.emit(
                VerificationEvent(
                    declaration=str(declaration),
                    event_type=VerificationEventType.VERIFICATION_FAILED,
                    details={
                        "error": str(exc),
                        "exception_type": type(exc).__name__,
                    },
                )
            )
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _finalize_result(
        declaration: Declaration,
        diff: DiffResult,
    ) -> VerificationResult:
        return VerificationResult(
            declaration=declaration,
            passed=diff.passed,
            diff=diff,
            message=None if diff.passed else render_message(declaration, diff),
        )


# ----------------------------------------------------------------------
# Assertion helpers
# ----------------------------------------------------------------------


class ObjectSetMatcher:
    """
    Assertion-style matcher over a declaration.

    `match` answers whether the stored objects satisfy the expectation;
    the failure messages explain the last `match` call. `last_events`
    holds the progress events of that call, including the failure event
    when it raised.
    """

    def __init__(
        self,
        verifier: ObjectSetVerifier,
        expected: ExpectedObjects,
        *,
        check_extra: bool,
    ) -> None:
        self._verifier = verifier
        self._expected = verifier.expected_set(expected)
        self._check_extra = check_extra
        self.last_diff: Optional[DiffResult] = None
        self.last_events: Optional[RecordingEventEmitter] = None

    async def match(self, actual: Any) -> bool:
        """
        Return True when the declaration's stored objects match.

        None never matches. Anything other than a Declaration is a usage
        error and raises TypeError.
        """
        # Cleared first so a raising call never reports the previous diff.
        self.last_diff = None
        self.last_events = None

        if actual is None:
            return False
        if not isinstance(actual, Declaration):
            raise TypeError(render_type_error(actual))

        self.last_events = RecordingEventEmitter()
        result = await self._verifier.verify(
            actual,
            self._expected,
            check_extra=self._check_extra,
            emitter=self.last_events,
        )
        self.last_diff = result.diff
        return result.passed

    def failure_message(self, actual: Any) -> str:
        return self._message(actual, negate=False)

    def negated_failure_message(self, actual: Any) -> str:
        return self._message(actual, negate=True)

    def _message(self, actual: Any, *, negate: bool) -> str:
        if not isinstance(actual, Declaration):
            return render_type_error(actual)
        if self.last_diff is None:
            return ""
        return render_message(actual, self.last_diff, negate=negate)


def contains_objects(
    store: PayloadStore,
    *objects: StructuredObject,
    registry: Optional[TypeRegistry] = None,
    config: Optional[VerifierConfig] = None,
) -> ObjectSetMatcher:
    """
    Matcher succeeding when every object is stored as expected.

    Additional stored objects are ignored.
    """
    verifier = ObjectSetVerifier(store, registry=registry, config=config)
    return ObjectSetMatcher(verifier, objects, check_extra=False)


def consists_of_objects(
    store: PayloadStore,
    *objects: StructuredObject,
    registry: Optional[TypeRegistry] = None,
    config: Optional[VerifierConfig] = None,
) -> ObjectSetMatcher:
    """
    Matcher succeeding when exactly the given objects are stored.
    """
    verifier = ObjectSetVerifier(store, registry=registry, config=config)
    return ObjectSetMatcher(verifier, objects, check_extra=True)


async def assert_objects(
    verifier: ObjectSetVerifier,
    declaration: Declaration,
    expected: ExpectedObjects,
    *,
    check_extra: Optional[bool] = None,
) -> VerificationResult:
    """
    Verify and raise AssertionError with the rendered diagnostic on failure.
    """
    result = await verifier.verify(
        declaration,
        expected,
        check_extra=check_extra,
    )
    if not result.passed:
        raise AssertionError(result.message)
    return result
