"""Relationship descriptors of each person relative to the root, and their labels."""

from graph import DegreeMap, RelationIndex
from models import FamilySide, Gender, RelationshipInfo, RelationshipKind, RelationType

P = RelationType.PARENT
S = RelationType.SPOUSE

# Words in a label pointing at a person that reveal their gender. Female words
# are checked first since "grandmother" must not hit a male word.
FEMALE_WORDS = ("mother", "wife", "daughter", "sister", "aunt", "niece", "grandma", "mom")
MALE_WORDS = ("father", "husband", "son", "brother", "uncle", "nephew", "grandpa", "dad")


def infer_gender(index: RelationIndex, person_id: str) -> Gender:
    """Gender implied by the labels other people declared toward `person_id`."""
    labels = []
    for neighbor in index.neighbors(person_id):
        labels.extend(label.lower() for label in index.declared_labels(neighbor, person_id))

    for label in labels:
        if any(word in label for word in FEMALE_WORDS):
            return Gender.FEMALE
    for label in labels:
        if any(word in label for word in MALE_WORDS):
            return Gender.MALE
    return Gender.UNKNOWN


def _gendered(gender: Gender, male, female, neutral):
    if gender is Gender.MALE:
        return male
    if gender is Gender.FEMALE:
        return female
    return neutral


def _sided(side: FamilySide, paternal, maternal, neutral):
    if side is FamilySide.PATERNAL:
        return paternal
    if side is FamilySide.MATERNAL:
        return maternal
    return neutral


def classify_chain(
    chain: tuple[RelationType, ...], gender: Gender, side: FamilySide
) -> RelationshipKind:
    """Map a root-to-person chain of relation steps to a relationship kind."""
    K = RelationshipKind
    match chain:
        case ():
            return K.ME
        case (RelationType.SPOUSE,):
            return _gendered(gender, K.HUSBAND, K.WIFE, K.SPOUSE)
        case (RelationType.PARENT,):
            return _gendered(gender, K.FATHER, K.MOTHER, K.PARENT)
        case (RelationType.CHILD,):
            return _gendered(gender, K.SON, K.DAUGHTER, K.CHILD)
        case (RelationType.SIBLING,) | (RelationType.PARENT, RelationType.CHILD):
            return _gendered(gender, K.BROTHER, K.SISTER, K.SIBLING)
        case (RelationType.PARENT, RelationType.PARENT):
            grandfather = _sided(side, K.PATERNAL_GRANDFATHER, K.MATERNAL_GRANDFATHER, K.GRANDPARENT)
            grandmother = _sided(side, K.PATERNAL_GRANDMOTHER, K.MATERNAL_GRANDMOTHER, K.GRANDPARENT)
            return _gendered(gender, grandfather, grandmother, K.GRANDPARENT)
        case (RelationType.CHILD, RelationType.CHILD):
            return _gendered(gender, K.GRANDSON, K.GRANDDAUGHTER, K.GRANDCHILD)
        case (RelationType.PARENT, RelationType.SIBLING) | (
            RelationType.PARENT,
            RelationType.PARENT,
            RelationType.CHILD,
        ):
            uncle = _sided(side, K.PATERNAL_UNCLE, K.MATERNAL_UNCLE, K.RELATIVE)
            aunt = _sided(side, K.PATERNAL_AUNT, K.MATERNAL_AUNT, K.RELATIVE)
            return _gendered(gender, uncle, aunt, K.RELATIVE)
        case (RelationType.SIBLING, RelationType.CHILD):
            return _gendered(gender, K.NEPHEW, K.NIECE, K.RELATIVE)
        case (RelationType.SPOUSE, RelationType.PARENT):
            return _gendered(gender, K.FATHER_IN_LAW, K.MOTHER_IN_LAW, K.RELATIVE)
        case (RelationType.CHILD, RelationType.SPOUSE):
            return _gendered(gender, K.SON_IN_LAW, K.DAUGHTER_IN_LAW, K.RELATIVE)
        case (RelationType.PARENT, RelationType.SIBLING, RelationType.CHILD) | (
            RelationType.PARENT,
            RelationType.PARENT,
            RelationType.CHILD,
            RelationType.CHILD,
        ):
            return _sided(side, K.PATERNAL_COUSIN, K.MATERNAL_COUSIN, K.COUSIN)
        case (RelationType.PARENT, RelationType.PARENT, RelationType.PARENT):
            return _sided(
                side,
                K.PATERNAL_GREAT_GRANDPARENT,
                K.MATERNAL_GREAT_GRANDPARENT,
                K.GREAT_GRANDPARENT,
            )
        case (RelationType.CHILD, RelationType.CHILD, RelationType.CHILD):
            return K.GREAT_GRANDCHILD
    return K.RELATIVE


def describe_relationship(
    index: RelationIndex, degrees: DegreeMap, person_id: str
) -> RelationshipInfo:
    """
    Describe how `person_id` relates to the root of `degrees`.

    The description follows the breadth-first path from the root. The family
    side is read from the gender of the first parent on that path.
    """
    path_ids = degrees.path_to(person_id)
    if not path_ids:
        return RelationshipInfo(RelationshipKind.RELATIVE, FamilySide.UNKNOWN)

    chain = tuple(index.relation_between(a, b) for a, b in zip(path_ids, path_ids[1:]))
    if not chain or chain[0] is S:
        side = FamilySide.OWN
    elif chain[0] is P:
        side = _gendered(
            infer_gender(index, path_ids[1]),
            FamilySide.PATERNAL,
            FamilySide.MATERNAL,
            FamilySide.UNKNOWN,
        )
    else:
        side = FamilySide.UNKNOWN

    kind = classify_chain(chain, infer_gender(index, person_id), side)
    return RelationshipInfo(kind, side, tuple(index.people[pid] for pid in path_ids))


LABELS: dict[str, dict[RelationshipKind, str]] = {
    "en": {
        RelationshipKind.ME: "Me",
        RelationshipKind.HUSBAND: "Husband",
        RelationshipKind.WIFE: "Wife",
        RelationshipKind.SPOUSE: "Spouse",
        RelationshipKind.FATHER: "Father",
        RelationshipKind.MOTHER: "Mother",
        RelationshipKind.PARENT: "Parent",
        RelationshipKind.SON: "Son",
        RelationshipKind.DAUGHTER: "Daughter",
        RelationshipKind.CHILD: "Child",
        RelationshipKind.BROTHER: "Brother",
        RelationshipKind.SISTER: "Sister",
        RelationshipKind.SIBLING: "Sibling",
        RelationshipKind.PATERNAL_GRANDFATHER: "Paternal Grandfather",
        RelationshipKind.PATERNAL_GRANDMOTHER: "Paternal Grandmother",
        RelationshipKind.MATERNAL_GRANDFATHER: "Maternal Grandfather",
        RelationshipKind.MATERNAL_GRANDMOTHER: "Maternal Grandmother",
        RelationshipKind.GRANDPARENT: "Grandparent",
        RelationshipKind.GRANDSON: "Grandson",
        RelationshipKind.GRANDDAUGHTER: "Granddaughter",
        RelationshipKind.GRANDCHILD: "Grandchild",
        RelationshipKind.PATERNAL_UNCLE: "Paternal Uncle",
        RelationshipKind.PATERNAL_AUNT: "Paternal Aunt",
        RelationshipKind.MATERNAL_UNCLE: "Maternal Uncle",
        RelationshipKind.MATERNAL_AUNT: "Maternal Aunt",
        RelationshipKind.NEPHEW: "Nephew",
        RelationshipKind.NIECE: "Niece",
        RelationshipKind.FATHER_IN_LAW: "Father-in-law",
        RelationshipKind.MOTHER_IN_LAW: "Mother-in-law",
        RelationshipKind.SON_IN_LAW: "Son-in-law",
        RelationshipKind.DAUGHTER_IN_LAW: "Daughter-in-law",
        RelationshipKind.PATERNAL_COUSIN: "Paternal Cousin",
        RelationshipKind.MATERNAL_COUSIN: "Maternal Cousin",
        RelationshipKind.COUSIN: "Cousin",
        RelationshipKind.PATERNAL_GREAT_GRANDPARENT: "Paternal Great-grandparent",
        RelationshipKind.MATERNAL_GREAT_GRANDPARENT: "Maternal Great-grandparent",
        RelationshipKind.GREAT_GRANDPARENT: "Great-grandparent",
        RelationshipKind.GREAT_GRANDCHILD: "Great-grandchild",
        RelationshipKind.RELATIVE: "Relative",
    },
}

DEFAULT_LANGUAGE = "en"


def relationship_label(info: RelationshipInfo, language: str = DEFAULT_LANGUAGE) -> str:
    """Human-readable label for `info`; unknown languages fall back to English."""
    code = (language or DEFAULT_LANGUAGE).replace("_", "-").split("-")[0].lower()
    table = LABELS.get(code, LABELS[DEFAULT_LANGUAGE])
    return table.get(info.kind, LABELS[DEFAULT_LANGUAGE][info.kind])
