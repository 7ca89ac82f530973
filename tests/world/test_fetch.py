"""Tests for fetch guards, typed and dynamic.

Critical Invariants:
- A guard's borrow is counted while it lives and released exactly once
- Exclusive guards only accept replacements of the resource's type
- Dynamic fetches reach the same value as typed fetches
"""

import gc
from dataclasses import dataclass

import pytest

from borrowkit import (
    BorrowConflictError,
    Fetch,
    FetchId,
    FetchIdMut,
    FetchMut,
    ReleasedBorrowError,
    ResourceId,
    Resources,
    ResourceSettings,
)


class Res:
    pass


@dataclass
class Score:
    points: int


# Typed guard specialization


def test_subscript_returns_cached_subclass():
    specialized = Fetch[Res]

    assert specialized is Fetch[Res]
    assert issubclass(specialized, Fetch)
    assert specialized.resource_type is Res
    assert FetchMut[Res] is not specialized


def test_cannot_specialize_twice():
    with pytest.raises(TypeError, match="already specialized"):
        Fetch[Res][Score]  # type: ignore[index]


def test_unspecialized_declaration_fails():
    with pytest.raises(TypeError, match="needs a resource type"):
        Fetch.reads(0)


def test_fetch_declarations():
    assert Fetch[Res].reads(4) == [ResourceId(Res, 4)]
    assert Fetch[Res].writes(8) == []


def test_fetch_mut_declarations():
    assert FetchMut[Res].reads(4) == []
    assert FetchMut[Res].writes(8) == [ResourceId(Res, 8)]


def test_construct_fetches_from_container(resources):
    resources.register(Res(), 56)

    shared = Fetch[Res].construct(resources, 56)
    assert isinstance(shared, Fetch[Res])
    assert shared.id == ResourceId(Res, 56)
    shared.release()

    exclusive = FetchMut[Res].construct(resources, 56)
    assert isinstance(exclusive, FetchMut[Res])
    exclusive.release()


# Guard lifecycle


def test_context_manager_releases_on_error(resources):
    resources.register(Score(1))

    with pytest.raises(RuntimeError, match="boom"):
        with resources.fetch_exclusive(Score):
            raise RuntimeError("boom")

    resources.fetch_exclusive(Score).release()


def test_release_is_idempotent(resources):
    resources.register(Score(1))
    guard = resources.fetch_shared(Score)
    other = resources.fetch_shared(Score)

    guard.release()
    guard.release()

    assert guard.released
    with pytest.raises(BorrowConflictError):
        resources.fetch_exclusive(Score)
    other.release()


def test_guard_unusable_after_release(resources):
    resources.register(Score(1))
    guard = resources.fetch_exclusive(Score)
    guard.release()

    with pytest.raises(ReleasedBorrowError):
        _ = guard.value
    with pytest.raises(ReleasedBorrowError):
        guard.value = Score(2)


def test_dropped_guard_releases(resources):
    """Losing the last reference to a guard ends its borrow."""
    resources.register(Score(1))
    guard = resources.fetch_exclusive(Score)
    del guard
    gc.collect()

    resources.fetch_exclusive(Score).release()


def test_repr_names_guard_and_identity(resources):
    resources.register(Score(1), 2)
    guard = resources.fetch_shared(Score, 2)

    assert repr(guard) == "Fetch[Score](Score#2, released=False)"
    guard.release()


# Replacement through exclusive guards


def test_replace_value(resources):
    resources.register(Score(1))

    with resources.fetch_exclusive(Score) as score:
        score.value = Score(score.value.points + 41)

    assert resources.fetch_shared(Score).value == Score(42)


def test_replace_with_wrong_type_fails(resources):
    """CRITICAL: Replacements keep the stored type matching the identity.

    Why: Typed fetches trust the identity's type without checking the value.
    """
    resources.register(Score(1))

    with resources.fetch_exclusive(Score) as score:
        with pytest.raises(TypeError, match="expected an instance of Score"):
            score.value = "not a score"  # type: ignore[assignment]

    assert resources.fetch_shared(Score).value == Score(1)


# Dynamic fetch


def test_dynamic_fetch_matches_static(resources):
    resources.register(Score(7), 3)

    static = resources.fetch_shared(Score, 3)
    dynamic = resources.fetch_shared_dynamic(Score, 3)

    assert isinstance(dynamic, FetchId)
    assert dynamic.value is static.value
    assert dynamic.id == static.id
    static.release()
    dynamic.release()


def test_dynamic_fetch_by_type_name(resources):
    resources.register(Score(7))

    with resources.fetch_shared_dynamic(f"{__name__}.Score") as score:
        assert score.value == Score(7)


def test_dynamic_fetch_unknown_name(resources):
    from borrowkit import MissingResourceError

    with pytest.raises(MissingResourceError, match="nowhere.Thing#0") as excinfo:
        resources.fetch_shared_dynamic("nowhere.Thing")
    assert excinfo.value.res_id is None


def test_dynamic_exclusive_replace_seen_by_static(resources):
    resources.register(Score(7))

    with resources.fetch_exclusive_dynamic(Score) as score:
        assert isinstance(score, FetchIdMut)
        score.value = Score(8)
        with pytest.raises(TypeError):
            score.value = 8

    assert resources.fetch_shared(Score).value == Score(8)


def test_dynamic_fetch_follows_borrow_rules(resources):
    resources.register(Score(7))

    writer = resources.fetch_exclusive(Score)
    with pytest.raises(BorrowConflictError, match="Already borrowed mutably"):
        resources.fetch_shared_dynamic(Score)
    writer.release()


def test_dynamic_verification_rejects_mismatch(resources):
    res_id = resources.register(Score(7))
    # Corrupt the slot behind the container's back
    resources._cells[res_id]._value = "corrupt"

    with pytest.raises(TypeError, match="holds str"):
        resources.fetch_shared_dynamic(Score)

    # The failed fetch left no borrow behind
    resources.fetch_exclusive(Score).release()


def test_dynamic_verification_can_be_disabled():
    resources = Resources(settings=ResourceSettings(verify_dynamic_types=False))
    res_id = resources.register(Score(7))
    resources._cells[res_id]._value = "corrupt"

    with resources.fetch_shared_dynamic(Score) as guard:
        assert guard.value == "corrupt"


# Borrow site tracking


def test_conflict_message_names_holder(tracking_resources):
    tracking_resources.register(Score(1))
    holder = tracking_resources.fetch_shared(Score)

    with pytest.raises(BorrowConflictError, match=r"^Already borrowed \(held at: .*test_fetch\.py"):
        tracking_resources.fetch_exclusive(Score)

    holder.release()
