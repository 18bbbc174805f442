"""
demo.py – One-shot showcase of staticrecord.

Run with the package installed:  python src/examples/demo.py
"""

import datetime as dt
from pprint import pprint

from staticrecord import Record, RecordNotFound, Rollback


# ────────────────────────────────── 1. Concrete Records ────────────────────────────────
class Country(Record):
    data = [
        {"id": 1, "name": "United States", "code": "US", "continent": "North America"},
        {"id": 2, "name": "Canada", "code": "CA", "continent": "North America"},
        {"id": 3, "name": "France", "code": "FR", "continent": "Europe"},
        {
            "id": 4,
            "name": "Germany",
            "code": "DE",
            "continent": "Europe",
            "updated_at": dt.datetime(2024, 5, 1, 12, 30),
        },
    ]

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


Country.field("active", default=True)
Country.scope("on", lambda rel, continent: rel.where(continent=continent))


# ────────────────────────────────── 2. Queries ─────────────────────────────────────────
def main() -> None:
    print("\n→ Every name, load order")
    pprint(Country.pluck("name"))

    print("\n→ Europe, ordered by name descending")
    pprint(Country.where(continent="Europe").order("-name").pluck("id", "name"))

    print("\n→ Dynamic finders")
    print(Country.find_by_code("CA"))
    print(Country.find_all_by_continent("North America"))
    try:
        Country.find_by_code_or_raise("XX")
    except RecordNotFound as exc:
        print(f"   {exc}")

    print("\n→ Scope (chainable because it returns a relation)")
    print(Country.on("Europe").order("name").first().label)

    print("\n→ Create, then cache keys")
    mexico = Country.create(name="Mexico", code="MX", continent="North America")
    print(f"   new id={mexico.id} active={mexico.active}")
    print(f"   {Country.find(4).cache_key()}")
    print(f"   {Country(name='Atlantis').cache_key()}")

    with Country.transaction():
        raise Rollback

    Country.reload()
    print(f"\n→ After reload: {Country.count()} countries\n")


if __name__ == "__main__":
    main()
