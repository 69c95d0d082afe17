"""Shared builders for family fixtures."""

from datetime import date

import pytest

from models import Person


def person(pid: str, born: int | None = None, married: int | None = None) -> Person:
    return Person(
        id=pid,
        name=pid.replace("-", " ").title(),
        birth_date=date(born, 1, 1) if born else None,
        marriage_date=date(married, 6, 1) if married else None,
    )


def marry(a: Person, b: Person, a_label: str = "Wife", b_label: str = "Husband"):
    """a declares b as `a_label`, b declares a as `b_label`."""
    a.add_relation(a_label, b)
    b.add_relation(b_label, a)


@pytest.fixture
def make_person():
    return person


@pytest.fixture
def nuclear_family() -> list[Person]:
    """dad (root) + mom + three children; kid-c is the oldest, kid-b the youngest."""
    dad = person("dad", 1970, married=1995)
    mom = person("mom", 1972, married=1995)
    kids = [person("kid-a", 2002), person("kid-b", 2004), person("kid-c", 2000)]
    marry(dad, mom)
    for kid in kids:
        dad.add_relation("Son", kid)
        mom.add_relation("Son", kid)
        kid.add_relation("Father", dad)
        kid.add_relation("Mother", mom)
    return [dad, mom] + kids


@pytest.fixture
def extended_family() -> list[Person]:
    """
    Four generations around "me", with in-laws, a cousin and one stranger.

        gpa = gma            fil = mil
           |                     |
       uncle   dad = mom         |
         |          |            |
       cousin  sis = bil   me = wife
                   |          |
                 niece    c1 = c1-wife   c2
                            |
                            gc
    """
    p = {
        pid: person(pid, born)
        for pid, born in [
            ("gpa", 1920),
            ("gma", 1922),
            ("fil", 1948),
            ("mil", 1950),
            ("uncle", 1946),
            ("dad", 1950),
            ("mom", 1952),
            ("cousin", 1975),
            ("sis", 1978),
            ("bil", 1976),
            ("me", 1980),
            ("wife", 1982),
            ("niece", 2010),
            ("c1", 2005),
            ("c1-wife", 2006),
            ("c2", 2008),
            ("gc", 2030),
            ("stranger", None),
        ]
    }

    marry(p["gma"], p["gpa"], "Husband", "Wife")
    marry(p["mom"], p["dad"], "Husband", "Wife")
    marry(p["mil"], p["fil"], "Husband", "Wife")
    marry(p["me"], p["wife"], "Wife", "Husband")
    marry(p["sis"], p["bil"], "Husband", "Wife")
    marry(p["c1"], p["c1-wife"], "Wife", "Husband")

    def parents(child: str, father: str, mother: str | None = None):
        p[child].add_relation("Father", p[father])
        if mother:
            p[child].add_relation("Mother", p[mother])

    parents("dad", "gpa", "gma")
    parents("uncle", "gpa", "gma")
    parents("me", "dad", "mom")
    parents("sis", "dad", "mom")
    parents("wife", "fil", "mil")
    parents("niece", "bil", "sis")
    parents("c2", "me", "wife")

    # Only the parents know about these children
    p["uncle"].add_relation("Son", p["cousin"])
    p["me"].add_relation("Son", p["c1"])
    p["wife"].add_relation("Son", p["c1"])
    p["c1"].add_relation("Daughter", p["gc"])
    p["c1-wife"].add_relation("Daughter", p["gc"])

    p["me"].add_relation("Sister", p["sis"])

    return list(p.values())
