"""
Verifier integration tests.

These tests drive the full fetch → decode → diff → report path against an
in-memory store. No network access is involved.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import anyio
import pytest

from verifier.app.config import VerifierConfig
from verifier.app.coordinator.verifier import ObjectSetVerifier, assert_objects
from verifier.app.errors import DecodeError, NotFoundError
from verifier.app.events import RecordingEventEmitter, VerificationEventType
from verifier.app.schemas.declaration import Declaration, SourceRef
from verifier.app.stores.memory import InMemoryPayloadStore
from verifier.tests.fixtures.payload_factory import (
    compressed,
    config_map,
    corrupted_brotli,
    serialize,
    service,
    store_with,
)

pytestmark = pytest.mark.anyio

DECLARATION = Declaration(
    namespace="ns",
    name="test",
    secret_refs=["managedresource-test"],
)
SVC = "v1, Kind=Service__ns__a"
CM = "v1, Kind=ConfigMap__ns__b"


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

async def test_matching_objects_pass():
    verifier = ObjectSetVerifier(store_with(service()))

    result = await verifier.verify(DECLARATION, [service()])

    assert result.passed is True
    assert result.message is None
    assert result.diff.passed


async def test_missing_object_fails_with_missing_message():
    verifier = ObjectSetVerifier(store_with())

    result = await verifier.verify(DECLARATION, [service()])

    assert result.passed is False
    assert result.diff.missing == [SVC]
    assert "not to be absent" in result.message
    assert SVC in result.message


async def test_content_mismatch_fails_with_mismatch_message():
    verifier = ObjectSetVerifier(store_with(service(port=80)))

    result = await verifier.verify(DECLARATION, [service(port=81)])

    assert result.passed is False
    assert [m.identity for m in result.diff.mismatches] == [SVC]
    assert "object mismatches" in result.message


async def test_extra_objects_follow_call_and_config_policy():
    store = store_with(service(), config_map())

    lenient = ObjectSetVerifier(store)
    strict = ObjectSetVerifier(
        store, config=VerifierConfig(CHECK_EXTRA_OBJECTS=True)
    )

    assert (await lenient.verify(DECLARATION, [service()])).passed
    assert not (
        await lenient.verify(DECLARATION, [service()], check_extra=True)
    ).passed

    result = await strict.verify(DECLARATION, [service()])
    assert result.diff.extra == [CM]
    assert "extra and unexpected" in result.message

    assert (
        await strict.verify(DECLARATION, [service()], check_extra=False)
    ).passed


async def test_expected_set_may_be_passed_pre_keyed():
    verifier = ObjectSetVerifier(store_with(service()))

    result = await verifier.verify(DECLARATION, {SVC: service()})

    assert result.passed


async def test_objects_are_collected_across_sharded_sources():
    store = InMemoryPayloadStore()
    store.put("ns", "shard-0", {"objects.yaml": serialize(service())})
    store.put("ns", "shard-1", {"objects.yaml.br": compressed(config_map())})
    declaration = Declaration(
        namespace="ns", name="test", secret_refs=["shard-0", "shard-1"]
    )

    result = await ObjectSetVerifier(store).verify(
        declaration, [service(), config_map()], check_extra=True
    )

    assert result.passed
    assert store.fetched == [
        SourceRef(namespace="ns", name="shard-0"),
        SourceRef(namespace="ns", name="shard-1"),
    ]


async def test_declaration_without_sources_has_empty_available_set():
    declaration = Declaration(namespace="ns", name="empty")
    verifier = ObjectSetVerifier(InMemoryPayloadStore())

    assert (await verifier.verify(declaration, [])).passed
    assert (await verifier.verify(declaration, [service()])).diff.missing == [SVC]


async def test_each_call_rebuilds_the_available_set():
    store = store_with(service(port=80))
    verifier = ObjectSetVerifier(store)

    assert (await verifier.verify(DECLARATION, [service(port=80)])).passed

    store.put("ns", "managedresource-test", {"objects.yaml": serialize(service(port=81))})

    assert not (await verifier.verify(DECLARATION, [service(port=80)])).passed


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

async def test_missing_storage_object_raises_not_found():
    verifier = ObjectSetVerifier(InMemoryPayloadStore())

    with pytest.raises(NotFoundError) as excinfo:
        await verifier.verify(DECLARATION, [service()])

    assert excinfo.value.name == "managedresource-test"


async def test_corrupted_compressed_payload_fails_the_call():
    store = InMemoryPayloadStore()
    store.put("ns", "managedresource-test", {"objects.yaml.br": corrupted_brotli()})

    with pytest.raises(DecodeError):
        await ObjectSetVerifier(store).verify(DECLARATION, [])


async def test_fetch_errors_are_not_retried():
    store = AsyncMock()
    store.fetch.side_effect = NotFoundError("ns", "managedresource-test")

    with pytest.raises(NotFoundError):
        await ObjectSetVerifier(store).verify(DECLARATION, [service()])

    assert store.fetch.await_count == 1


async def test_slow_fetch_hits_configured_deadline():
    class SlowStore:
        async def fetch(self, ref):
            await anyio.sleep(5)

    verifier = ObjectSetVerifier(
        SlowStore(), config=VerifierConfig(FETCH_TIMEOUT_SECONDS=0.05)
    )

    with pytest.raises(TimeoutError):
        await verifier.verify(DECLARATION, [service()])


async def test_caller_cancellation_propagates_without_result():
    class SlowStore:
        async def fetch(self, ref):
            await anyio.sleep(5)

    verifier = ObjectSetVerifier(SlowStore())
    results = []

    with anyio.move_on_after(0.05) as scope:
        results.append(await verifier.verify(DECLARATION, [service()]))

    assert scope.cancelled_caught
    assert results == []


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

async def test_events_trace_a_successful_verification():
    emitter = RecordingEventEmitter()
    verifier = ObjectSetVerifier(store_with(service()))

    await verifier.verify(DECLARATION, [service()], emitter=emitter)

    assert [e.event_type for e in emitter.events] == [
        VerificationEventType.VERIFICATION_STARTED,
        VerificationEventType.SOURCE_FETCHED,
        VerificationEventType.OBJECT_SET_BUILT,
        VerificationEventType.DIFF_COMPLETED,
        VerificationEventType.VERIFICATION_COMPLETED,
    ]
    assert all(e.declaration == "ns/test" for e in emitter.events)
    assert emitter.events[2].details == {"sources_count": 1, "objects_count": 1}


async def test_failed_verification_emits_failure_event():
    emitter = RecordingEventEmitter()
    verifier = ObjectSetVerifier(InMemoryPayloadStore())

    with pytest.raises(NotFoundError):
        await verifier.verify(DECLARATION, [service()], emitter=emitter)

    last = emitter.events[-1]
    assert last.event_type == VerificationEventType.VERIFICATION_FAILED
    assert last.details["exception_type"] == "NotFoundError"


# ---------------------------------------------------------------------------
# Assertion helper
# ---------------------------------------------------------------------------

async def test_assert_objects_raises_assertion_error_with_diagnostic():
    verifier = ObjectSetVerifier(store_with())

    with pytest.raises(AssertionError, match="not to be absent"):
        await assert_objects(verifier, DECLARATION, [service()])


async def test_assert_objects_returns_passing_result():
    verifier = ObjectSetVerifier(store_with(service()))

    result = await assert_objects(verifier, DECLARATION, [service()])

    assert result.passed
