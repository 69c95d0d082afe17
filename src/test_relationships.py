import pytest

from graph import build_relation_index, compute_degrees
from models import FamilySide, Gender, RelationshipInfo, RelationshipKind, RelationType
from relationships import (
    classify_chain,
    describe_relationship,
    infer_gender,
    relationship_label,
)


@pytest.fixture
def described(extended_family):
    index = build_relation_index(extended_family)
    degrees = compute_degrees(index, "me")
    return lambda pid: describe_relationship(index, degrees, pid)


def test_infer_gender_from_labels_pointing_at_the_person(extended_family):
    index = build_relation_index(extended_family)
    assert infer_gender(index, "dad") is Gender.MALE
    assert infer_gender(index, "mom") is Gender.FEMALE
    assert infer_gender(index, "gc") is Gender.FEMALE
    assert infer_gender(index, "c2") is Gender.UNKNOWN


@pytest.mark.parametrize(
    "pid, kind, side",
    [
        ("me", RelationshipKind.ME, FamilySide.OWN),
        ("wife", RelationshipKind.WIFE, FamilySide.OWN),
        ("dad", RelationshipKind.FATHER, FamilySide.PATERNAL),
        ("mom", RelationshipKind.MOTHER, FamilySide.MATERNAL),
        ("gpa", RelationshipKind.PATERNAL_GRANDFATHER, FamilySide.PATERNAL),
        ("gma", RelationshipKind.PATERNAL_GRANDMOTHER, FamilySide.PATERNAL),
        ("sis", RelationshipKind.SISTER, FamilySide.UNKNOWN),
        ("c1", RelationshipKind.SON, FamilySide.UNKNOWN),
        ("c2", RelationshipKind.CHILD, FamilySide.UNKNOWN),
        ("gc", RelationshipKind.GRANDDAUGHTER, FamilySide.UNKNOWN),
        ("c1-wife", RelationshipKind.DAUGHTER_IN_LAW, FamilySide.UNKNOWN),
        ("fil", RelationshipKind.FATHER_IN_LAW, FamilySide.OWN),
        ("mil", RelationshipKind.MOTHER_IN_LAW, FamilySide.OWN),
        ("cousin", RelationshipKind.PATERNAL_COUSIN, FamilySide.PATERNAL),
        ("stranger", RelationshipKind.RELATIVE, FamilySide.UNKNOWN),
    ],
)
def test_describe_relationship(described, pid, kind, side):
    info = described(pid)
    assert info.kind is kind
    assert info.family_side is side


def test_path_runs_from_root_to_person(described):
    assert described("uncle").path_ids == ["me", "dad", "gma", "uncle"]
    assert described("stranger").path_ids == []


def test_classify_chain_by_side():
    P, C, B = RelationType.PARENT, RelationType.CHILD, RelationType.SIBLING
    assert (
        classify_chain((P, B), Gender.FEMALE, FamilySide.MATERNAL)
        is RelationshipKind.MATERNAL_AUNT
    )
    assert (
        classify_chain((P, P, P), Gender.MALE, FamilySide.UNKNOWN)
        is RelationshipKind.GREAT_GRANDPARENT
    )
    assert classify_chain((B, C), Gender.MALE, FamilySide.UNKNOWN) is RelationshipKind.NEPHEW
    assert classify_chain((C, C, C), Gender.UNKNOWN, FamilySide.UNKNOWN) is (
        RelationshipKind.GREAT_GRANDCHILD
    )
    assert classify_chain((C, B, P, C, C), Gender.MALE, FamilySide.UNKNOWN) is (
        RelationshipKind.RELATIVE
    )


@pytest.mark.parametrize("language", ["en", "en-US", "en_GB", "fr", "", "zz"])
def test_labels_fall_back_to_english(language):
    info = RelationshipInfo(RelationshipKind.PATERNAL_GRANDFATHER, FamilySide.PATERNAL)
    assert relationship_label(info, language) == "Paternal Grandfather"


def test_every_kind_has_an_english_label():
    for kind in RelationshipKind:
        assert relationship_label(RelationshipInfo(kind, FamilySide.UNKNOWN))
