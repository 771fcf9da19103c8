import pytest

from scalemesh.core.entities import CapacityProfile, PoolState, PoolStatus, ReconcileOutcome, ReconciliationResult
from scalemesh.core.errors import InvalidProfileError


def test_profile_accepts_ordered_sizes():
    profile = CapacityProfile(pool="workers", min_size=0, max_size=10, desired_size=0)
    assert profile.as_tuple() == (0, 10, 0)
    assert str(profile) == "workers(min=0, max=10, desired=0)"


@pytest.mark.parametrize(
    "sizes",
    [
        (3, 10, 2),  # min > desired
        (0, 4, 5),  # desired > max
        (-1, 4, 2),  # negative
        (5, 4, 4),  # min > max
    ],
)
def test_profile_rejects_invariant_violations(sizes):
    min_size, max_size, desired_size = sizes
    with pytest.raises(InvalidProfileError):
        CapacityProfile(pool="workers", min_size=min_size, max_size=max_size, desired_size=desired_size)


def test_profile_requires_pool():
    with pytest.raises(InvalidProfileError):
        CapacityProfile(pool="  ", min_size=0, max_size=1, desired_size=0)


def test_profile_is_immutable():
    profile = CapacityProfile(pool="workers", min_size=0, max_size=1, desired_size=1)
    with pytest.raises(AttributeError):
        profile.desired_size = 0  # type: ignore[misc]


def test_from_dict_accepts_short_aliases_and_default_pool():
    profile = CapacityProfile.from_dict({"min": 1, "max": "4", "desired": 2}, default_pool="gpu")
    assert profile == CapacityProfile(pool="gpu", min_size=1, max_size=4, desired_size=2)


def test_from_dict_rejects_fractional_and_missing_values():
    with pytest.raises(InvalidProfileError):
        CapacityProfile.from_dict({"pool": "p", "min_size": 1.5, "max_size": 2, "desired_size": 2})
    with pytest.raises(InvalidProfileError):
        CapacityProfile.from_dict({"pool": "p", "min_size": 1, "max_size": 2})
    with pytest.raises(InvalidProfileError):
        CapacityProfile.from_dict({"min_size": 1, "max_size": 2, "desired_size": 1})


def test_result_payload_is_json_friendly():
    profile = CapacityProfile(pool="workers", min_size=0, max_size=10, desired_size=0)
    observed = PoolState("workers", 2, 10, 6, PoolStatus.ACTIVE, version="3")
    result = ReconciliationResult(
        requested_profile=profile,
        outcome=ReconcileOutcome.APPLIED,
        observed_before=observed,
        schedule="down",
        update_id="abc",
        timestamp=100.0,
    )
    payload = result.to_dict()
    assert payload["outcome"] == "APPLIED"
    assert payload["observed_before"]["status"] == "ACTIVE"
    assert payload["requested_profile"]["desired_size"] == 0
    assert payload["timestamp"] == 100.0
    assert result.succeeded
    assert not ReconcileOutcome.APPLIED.is_skip
    assert ReconcileOutcome.SKIPPED_BUSY.is_skip
