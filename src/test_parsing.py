from datetime import date, datetime

import pytest

from errors import InvalidTreeData
from parsing import parse_date, people_from_records


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1954-11-25", date(1954, 11, 25)),
        (" 1954-11-25 ", date(1954, 11, 25)),
        ("1746-00-00", date(1746, 1, 1)),
        ("1746-05-00", date(1746, 5, 1)),
        ("2001-02-03T10:00:00", date(2001, 2, 3)),
        ("2001-02-03 10:00", date(2001, 2, 3)),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value", [None, "", "unknown", "25 NOV 1954", "1698", "1900-02-31", "2000-13-01"]
)
def test_parse_date_rejects_garbage(value):
    assert parse_date(value) is None


def test_parse_date_passes_dates_through():
    assert parse_date(date(2000, 1, 2)) == date(2000, 1, 2)
    assert parse_date(datetime(2000, 1, 2, 15, 30)) == date(2000, 1, 2)


def test_people_from_records_links_relations():
    people = people_from_records(
        [
            {
                "id": "me",
                "name": "Me",
                "birthDate": "1980-05-01",
                "relations": [{"label": "Wife", "target": "wife"}],
            },
            {"id": "wife", "name": "Wife", "marriage_date": "2005-06-01"},
        ]
    )
    by_id = {p.id: p for p in people}

    assert by_id["me"].birth_date == date(1980, 5, 1)
    assert by_id["wife"].marriage_date == date(2005, 6, 1)
    assert by_id["me"].relations[0].target is by_id["wife"]
    assert not any(p.is_virtual for p in people)


def test_unresolved_targets_become_virtual_placeholders():
    people = people_from_records(
        [
            {
                "id": 1,
                "name": "Kid",
                "relations": [
                    {"label": "Mother", "target": "m"},
                    {"label": "Father", "target": "f", "name": "Dad"},
                ],
            },
            {"id": 2, "name": "Sibling", "relations": [{"label": "Mother", "target": "m"}]},
        ]
    )

    assert [p.id for p in people] == ["1", "2", "f", "m"]
    f, m = people[2], people[3]
    assert f.is_virtual and m.is_virtual
    assert f.name == "Dad"
    assert people[0].relations[0].target is people[1].relations[0].target


def test_bad_records_raise_invalid_tree_data():
    with pytest.raises(InvalidTreeData):
        people_from_records([{"name": "No id"}])
    with pytest.raises(InvalidTreeData):
        people_from_records([{"id": "a"}, {"id": "a"}])
