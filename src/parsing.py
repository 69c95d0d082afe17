"""Date handling and linking of plain person records into Person objects."""

from datetime import date, datetime
import logging
import re
from typing import Any, Iterable, Mapping

from errors import InvalidTreeData
from models import Person

logger = logging.getLogger(__name__)

# "1954-11-25", "1746-00-00", "2001-02-03T10:00:00"
ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")


def parse_date(value: date | datetime | str | None) -> date | None:
    """
    Normalise a birth or marriage date to a `datetime.date`.
    Returns None if the value cannot be parsed.

    Accepts dates, datetimes and ISO strings; a "00" month or day becomes 1.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    match = ISO_DATE_PATTERN.match(str(value).strip())
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month or 1, day or 1)
    except ValueError:
        return None


def _field(record: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in record:
            return record[name]
    return None


def people_from_records(records: Iterable[Mapping[str, Any]]) -> list[Person]:
    """
    Link plain dict records into Person objects.

    Each record carries `id`, `name`, optional `birth_date` / `marriage_date`
    (camelCase accepted) and `relations`, a list of `{"label", "target"}`
    mappings. Relation targets with no record of their own become virtual
    placeholder persons, appended after the real ones in id order.

    Raises:
        InvalidTreeData: a record has no id, or two records share one
    """
    records = list(records)
    people: dict[str, Person] = {}

    # First pass: one Person per record
    for record in records:
        raw_id = record.get("id")
        if raw_id is None or str(raw_id) == "":
            raise InvalidTreeData("person record without an id")
        person_id = str(raw_id)
        if person_id in people:
            raise InvalidTreeData(f"duplicate person ids: {person_id}")

        people[person_id] = Person(
            id=person_id,
            name=record.get("name") or "Unknown",
            birth_date=parse_date(_field(record, "birth_date", "birthDate")),
            marriage_date=parse_date(_field(record, "marriage_date", "marriageDate")),
            is_virtual=bool(record.get("is_virtual", False)),
        )

    # Second pass: link relations, creating placeholders for unknown targets
    virtual: dict[str, Person] = {}
    for record in records:
        person = people[str(record["id"])]
        for relation in record.get("relations") or ():
            target_id = str(relation["target"])
            target = people.get(target_id) or virtual.get(target_id)
            if target is None:
                target = Person(
                    id=target_id,
                    name=relation.get("name") or "Unknown",
                    is_virtual=True,
                )
                virtual[target_id] = target
            person.add_relation(relation.get("label") or "", target)

    if virtual:
        logger.debug("Created %d virtual placeholder persons", len(virtual))

    return list(people.values()) + [virtual[pid] for pid in sorted(virtual)]
