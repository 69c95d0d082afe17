from graph import build_relation_index, compute_degrees
from priority import INDIRECT_RANK, connection_rank, placement_order


def test_direct_relations_outrank_indirect_ones(make_person):
    me, wife, kid, sis, friend, zed = (
        make_person(pid) for pid in ["me", "wife", "kid", "sis", "friend", "zed"]
    )
    me.add_relation("Wife", wife)
    me.add_relation("Son", kid)
    me.add_relation("Sister", sis)
    me.add_relation("Friend", friend)
    people = [zed, sis, kid, wife, friend, me]

    index = build_relation_index(people)
    degrees = compute_degrees(index, "me")

    order = placement_order(["zed", "sis", "kid", "wife", "friend"], index, degrees)
    assert order == ["wife", "kid", "sis", "friend", "zed"]
    assert connection_rank(index, degrees, "me") == 0
    assert connection_rank(index, degrees, "zed") == INDIRECT_RANK


def test_lower_degree_always_first(extended_family):
    index = build_relation_index(extended_family)
    degrees = compute_degrees(index, "me")
    ids = [p.id for p in extended_family if p.id != "me"]

    order = placement_order(ids, index, degrees)

    assert order[:6] == ["wife", "c1", "c2", "dad", "mom", "sis"]
    # Spouses of degree-1 relatives come first within degree 2
    assert order[6:8] == ["bil", "c1-wife"]
    assert order[-3:] == ["uncle", "cousin", "stranger"]
    assert placement_order(list(reversed(ids)), index, degrees) == order
