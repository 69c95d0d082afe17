"""Data classes for family members, relations and laid-out nodes."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class RelationType(Enum):
    PARENT = "parent"
    CHILD = "child"
    SPOUSE = "spouse"
    SIBLING = "sibling"
    OTHER = "other"


# Complementary type used when synthesizing the reverse of a relation edge
INVERSE_RELATION = {
    RelationType.PARENT: RelationType.CHILD,
    RelationType.CHILD: RelationType.PARENT,
    RelationType.SPOUSE: RelationType.SPOUSE,
    RelationType.SIBLING: RelationType.SIBLING,
    RelationType.OTHER: RelationType.OTHER,
}

# Label keywords, checked in order. Extended-family words come first so that
# "Grandmother" or "Mother-in-law" do not classify as a parent.
RELATION_KEYWORDS: dict[RelationType, tuple[str, ...]] = {
    RelationType.OTHER: (
        "grand",
        "in-law",
        "in law",
        "step",
        "uncle",
        "aunt",
        "cousin",
        "niece",
        "nephew",
    ),
    RelationType.SPOUSE: ("spouse", "partner", "wife", "husband"),
    RelationType.CHILD: ("child", "son", "daughter"),
    RelationType.PARENT: ("parent", "mother", "father"),
    RelationType.SIBLING: ("sibling", "brother", "sister"),
}


def classify_label(
    label: str, keywords: dict[RelationType, tuple[str, ...]] = RELATION_KEYWORDS
) -> RelationType:
    """Map a free-text relation label (e.g. "_$!<Mother>!$_") to a RelationType."""
    lowered = label.lower()
    for relation_type, words in keywords.items():
        if any(word in lowered for word in words):
            return relation_type
    return RelationType.OTHER


# Age words in a label, checked in order: -1 means the labelled person is older, +1 younger
AGE_KEYWORDS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (-1, ("older", "elder", "eldest", "first", "1st", "big")),
    (1, ("younger", "little", "small")),
)


def age_hint(label: str) -> int:
    """-1 if `label` (e.g. "Older Brother") marks its target as older, 1 if younger, else 0."""
    lowered = label.lower()
    for hint, words in AGE_KEYWORDS:
        if any(word in lowered for word in words):
            return hint
    return 0


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class FamilySide(Enum):
    PATERNAL = "paternal"
    MATERNAL = "maternal"
    OWN = "own"
    UNKNOWN = "unknown"


class RelationshipKind(Enum):
    ME = "me"
    HUSBAND = "husband"
    WIFE = "wife"
    SPOUSE = "spouse"
    FATHER = "father"
    MOTHER = "mother"
    PARENT = "parent"
    SON = "son"
    DAUGHTER = "daughter"
    CHILD = "child"
    BROTHER = "brother"
    SISTER = "sister"
    SIBLING = "sibling"
    PATERNAL_GRANDFATHER = "paternalGrandfather"
    PATERNAL_GRANDMOTHER = "paternalGrandmother"
    MATERNAL_GRANDFATHER = "maternalGrandfather"
    MATERNAL_GRANDMOTHER = "maternalGrandmother"
    GRANDPARENT = "grandparent"
    GRANDSON = "grandson"
    GRANDDAUGHTER = "granddaughter"
    GRANDCHILD = "grandchild"
    PATERNAL_UNCLE = "paternalUncle"
    PATERNAL_AUNT = "paternalAunt"
    MATERNAL_UNCLE = "maternalUncle"
    MATERNAL_AUNT = "maternalAunt"
    NEPHEW = "nephew"
    NIECE = "niece"
    FATHER_IN_LAW = "fatherInLaw"
    MOTHER_IN_LAW = "motherInLaw"
    SON_IN_LAW = "sonInLaw"
    DAUGHTER_IN_LAW = "daughterInLaw"
    PATERNAL_COUSIN = "paternalCousin"
    MATERNAL_COUSIN = "maternalCousin"
    COUSIN = "cousin"
    PATERNAL_GREAT_GRANDPARENT = "paternalGreatGrandparent"
    MATERNAL_GREAT_GRANDPARENT = "maternalGreatGrandparent"
    GREAT_GRANDPARENT = "greatGrandparent"
    GREAT_GRANDCHILD = "greatGrandchild"
    RELATIVE = "relative"


@dataclass(frozen=True)
class Relation:
    label: str
    target: "Person" = field(repr=False)

    @property
    def target_id(self) -> str:
        return self.target.id

    @property
    def relation_type(self) -> RelationType:
        return classify_label(self.label)


@dataclass(eq=False)
class Person:
    id: str
    name: str
    birth_date: date | None = None
    marriage_date: date | None = None
    relations: list[Relation] = field(default_factory=list, repr=False)
    is_virtual: bool = False

    def add_relation(self, label: str, target: "Person") -> Relation:
        """Append a relation from this person to `target` and return it."""
        relation = Relation(label=label, target=target)
        self.relations.append(relation)
        return relation

    def __eq__(self, other):
        if not isinstance(other, Person):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class RelationshipInfo:
    kind: RelationshipKind
    family_side: FamilySide
    path: tuple[Person, ...] = field(default=(), repr=False)

    @property
    def path_ids(self) -> list[str]:
        return [p.id for p in self.path]


@dataclass
class NodePosition:
    person: Person
    x: float
    y: float
    generation: int  # 0 = root, positive = ancestors, negative = descendants
    relationship: RelationshipInfo | None = None
    label: str = ""

    @property
    def id(self) -> str:
        return self.person.id

    def key(self) -> tuple[str, float, float, int]:
        """Geometry-only identity used to compare layouts."""
        return (self.person.id, self.x, self.y, self.generation)
