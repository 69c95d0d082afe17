import pytest

from graph import (
    UNREACHABLE,
    DegreeCache,
    build_relation_index,
    compute_degrees,
    members_within_degree,
)
from models import RelationType


def test_reverse_edges_are_synthesized(make_person):
    dad = make_person("dad")
    kid = make_person("kid")
    dad.add_relation("Son", kid)

    index = build_relation_index([dad, kid])

    assert index.children("dad") == ["kid"]
    assert index.parents("kid") == ["dad"]
    assert index.relation_between("kid", "dad") is RelationType.PARENT
    assert index.declared_labels("dad", "kid") == ["Son"]
    assert index.declared_labels("kid", "dad") == []


def test_spouse_sibling_and_other_edges_are_symmetric(make_person):
    a, b, c, d = (make_person(pid) for pid in "abcd")
    a.add_relation("Wife", b)
    a.add_relation("Brother", c)
    a.add_relation("Friend", d)

    index = build_relation_index([a, b, c, d])

    assert index.spouses("b") == ["a"]
    assert index.siblings("c") == ["a"]
    assert index.relation_between("d", "a") is RelationType.OTHER
    assert index.neighbors("a") == ["b", "c", "d"]


def test_outside_targets_and_self_relations_are_ignored(make_person):
    a = make_person("a")
    outsider = make_person("outsider")
    a.add_relation("Mother", outsider)
    a.add_relation("Brother", a)

    index = build_relation_index([a])

    assert index.neighbors("a") == []
    assert "outsider" not in index


def test_input_is_not_mutated(nuclear_family):
    before = {p.id: list(p.relations) for p in nuclear_family}
    build_relation_index(nuclear_family)
    assert {p.id: list(p.relations) for p in nuclear_family} == before


def test_neighbor_queries_are_sorted_whatever_the_input_order(nuclear_family):
    forward = build_relation_index(nuclear_family)
    backward = build_relation_index(list(reversed(nuclear_family)))
    for pid in forward.people:
        assert forward.typed_neighbors(pid) == backward.typed_neighbors(pid)
    assert forward.children("dad") == ["kid-a", "kid-b", "kid-c"]


def test_all_siblings_includes_shared_parents(extended_family):
    index = build_relation_index(extended_family)
    assert index.all_siblings("me") == ["sis"]
    assert index.all_siblings("c1") == ["c2"]
    assert index.all_siblings("cousin") == []


def test_degrees_and_generations(extended_family):
    index = build_relation_index(extended_family)
    degrees = compute_degrees(index, "me")

    assert degrees.degree("me") == 0
    assert degrees.degree("wife") == 1
    assert degrees.degree("gpa") == 2
    assert degrees.degree("uncle") == 3
    assert degrees.degree("cousin") == 4
    assert degrees.degree("stranger") == UNREACHABLE
    assert not degrees.is_reachable("stranger")

    assert degrees.generation("me") == 0
    assert degrees.generation("dad") == 1
    assert degrees.generation("gma") == 2
    assert degrees.generation("gc") == -2
    assert degrees.generation("cousin") == 0
    assert degrees.generation("stranger") is None


def test_path_to_follows_id_ordered_traversal(extended_family):
    degrees = compute_degrees(build_relation_index(extended_family), "me")
    assert degrees.path_to("me") == ["me"]
    assert degrees.path_to("uncle") == ["me", "dad", "gma", "uncle"]
    assert degrees.path_to("stranger") == []


def test_within_and_members_within_degree(extended_family):
    degrees = compute_degrees(build_relation_index(extended_family), "me")
    assert degrees.within(0) == {"me"}
    assert degrees.within(1) == {"me", "wife", "c1", "c2", "dad", "mom", "sis"}

    kept = members_within_degree(extended_family, "me", 1)
    assert sorted(p.id for p in kept) == ["c1", "c2", "dad", "me", "mom", "sis", "wife"]


def test_compute_degrees_rejects_unknown_root(nuclear_family):
    with pytest.raises(ValueError):
        compute_degrees(build_relation_index(nuclear_family), "nobody")


def test_degree_cache(nuclear_family):
    index = build_relation_index(nuclear_family)
    cache = DegreeCache()

    first = cache.get_or_compute(index, "dad")
    second = cache.get_or_compute(index, "dad")
    assert first is second
    assert (cache.hits, cache.misses) == (1, 1)
    assert "dad" in cache and len(cache) == 1

    cache.get_or_compute(index, "mom")
    cache.invalidate("dad")
    assert "dad" not in cache and "mom" in cache

    cache.invalidate()
    assert len(cache) == 0
    assert cache.hit_rate == 1.0
