"""
Object set comparison.

Three relations between an available and an expected object set:

    mismatch  identity in both sets, content not semantically equal
    missing   expected - available
    extra     available - expected (opt-in)

`diff_object_sets` evaluates them in that priority order and stops at the
first non-empty relation to keep diagnostics focused. The order is part
of the contract: callers rely on which message shape a fixture produces.
"""

from __future__ import annotations

from typing import List

from verifier.app.schemas.objects import ObjectSet, semantic_equal
from verifier.app.schemas.verification_result import DiffResult, ObjectMismatch


def find_mismatches(
    available: ObjectSet,
    expected: ObjectSet,
) -> List[ObjectMismatch]:
    mismatches: List[ObjectMismatch] = []

    for identity in sorted(expected):
        actual = available.get(identity)
        if actual is None:
            continue
        if not semantic_equal(actual, expected[identity]):
            mismatches.append(
                ObjectMismatch(
                    identity=identity,
                    expected=expected[identity],
                    available=actual,
                )
            )

    return mismatches


def find_missing(available: ObjectSet, expected: ObjectSet) -> List[str]:
    return sorted(set(expected) - set(available))


def find_extra(available: ObjectSet, expected: ObjectSet) -> List[str]:
    return sorted(set(available) - set(expected))


def diff_object_sets(
    available: ObjectSet,
    expected: ObjectSet,
    *,
    check_extra: bool = False,
) -> DiffResult:
    """
    Compare two object sets with early return at the first failing pass.
    """
    mismatches = find_mismatches(available, expected)
    if mismatches:
        return DiffResult(mismatches=mismatches, extra_checked=check_extra)

    missing = find_missing(available, expected)
    if missing:
        return DiffResult(missing=missing, extra_checked=check_extra)

    if check_extra:
        extra = find_extra(available, expected)
        if extra:
            return DiffResult(extra=extra, extra_checked=True)

    return DiffResult(extra_checked=check_extra)
