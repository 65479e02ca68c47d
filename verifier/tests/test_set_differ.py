"""
Set differ tests.

Scenarios:

  A  identical sets                     → empty diff
  B  expected object absent             → missing
  C  same identity, different content   → mismatch only (short-circuit)
  D  unexpected stored object           → ignored unless extra check enabled
"""

import pytest

from verifier.app.coordinator.set_differ import (
    diff_object_sets,
    find_extra,
    find_mismatches,
    find_missing,
)
from verifier.tests.fixtures.payload_factory import config_map, service

SVC = "v1, Kind=Service__ns__a"
CM = "v1, Kind=ConfigMap__ns__b"


@pytest.mark.parametrize("check_extra", [False, True])
def test_scenario_a_identical_sets_have_empty_diff(check_extra):
    objects = {SVC: service(port=80), CM: config_map()}

    diff = diff_object_sets(objects, dict(objects), check_extra=check_extra)

    assert diff.passed
    assert diff.mismatches == []
    assert diff.missing == []
    assert diff.extra == []
    assert diff.extra_checked is check_extra


def test_scenario_b_absent_object_is_missing():
    diff = diff_object_sets({}, {SVC: service()})

    assert not diff.passed
    assert diff.missing == [SVC]
    assert diff.mismatches == []


def test_scenario_c_content_difference_is_a_mismatch():
    available = {SVC: service(port=80)}
    expected = {SVC: service(port=81), CM: config_map()}

    diff = diff_object_sets(available, expected, check_extra=True)

    assert len(diff.mismatches) == 1
    mismatch = diff.mismatches[0]
    assert mismatch.identity == SVC
    assert mismatch.expected.spec == {"ports": [{"port": 81}]}
    assert mismatch.available.spec == {"ports": [{"port": 80}]}

    # Missing and extra passes are never evaluated after a mismatch.
    assert diff.missing == []
    assert diff.extra == []


def test_scenario_d_extra_objects_ignored_by_default():
    available = {SVC: service(), CM: config_map()}
    expected = {SVC: service()}

    assert diff_object_sets(available, expected).passed


def test_scenario_d_extra_objects_flagged_when_enabled():
    available = {SVC: service(), CM: config_map()}
    expected = {SVC: service()}

    diff = diff_object_sets(available, expected, check_extra=True)

    assert not diff.passed
    assert diff.extra == [CM]


def test_missing_takes_priority_over_extra():
    available = {CM: config_map()}
    expected = {SVC: service()}

    diff = diff_object_sets(available, expected, check_extra=True)

    assert diff.missing == [SVC]
    assert diff.extra == []


def test_mismatches_only_cover_the_identity_intersection():
    available = {SVC: service(port=80), CM: config_map()}
    expected = {SVC: service(port=80)}

    assert find_mismatches(available, expected) == []
    assert find_mismatches(expected, available) == []


def test_set_subtractions_are_sorted():
    available = {"c": service(), "a": service()}
    expected = {"b": service(), "d": service()}

    assert find_missing(available, expected) == ["b", "d"]
    assert find_extra(available, expected) == ["a", "c"]
