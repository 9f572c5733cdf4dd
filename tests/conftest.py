"""Shared fixtures: sample catalogs, a scripted fake client, a SQLite database."""

from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, text

from rel2doc.schema.models import Catalog, ForeignKeyInfo, TableInfo


# ------------------------------------------------------------------
# Catalogs
# ------------------------------------------------------------------


def state_city_catalog() -> Catalog:
    """STATE(code PK, name), CITY(id PK, name, state_code FK -> STATE)."""
    return Catalog.from_tables(
        [
            TableInfo(name="STATE", columns=["code", "name"], primary_key=["code"]),
            TableInfo(
                name="CITY",
                columns=["id", "name", "state_code"],
                primary_key=["id"],
                foreign_keys={
                    "STATE": ForeignKeyInfo(columns=["state_code"], foreign_columns=["code"])
                },
            ),
        ]
    )


def school_catalog() -> Catalog:
    """A schema with embedding, references and an N:N link table.

    - ADDRESS(id PK, street, zip)
    - TEACHER(id PK, name, address_id FK -> ADDRESS)
    - STUDENT(id PK, name, email UNIQUE, address_id FK -> ADDRESS)
    - COURSE(code PK, title, teacher_id FK -> TEACHER)
    - ENROLLMENT(student_id FK -> STUDENT, course_code FK -> COURSE, grade)
    """
    return Catalog.from_tables(
        [
            TableInfo(name="ADDRESS", columns=["id", "street", "zip"], primary_key=["id"]),
            TableInfo(
                name="TEACHER",
                columns=["id", "name", "address_id"],
                primary_key=["id"],
                foreign_keys={
                    "ADDRESS": ForeignKeyInfo(columns=["address_id"], foreign_columns=["id"])
                },
            ),
            TableInfo(
                name="STUDENT",
                columns=["id", "name", "email", "address_id"],
                primary_key=["id"],
                foreign_keys={
                    "ADDRESS": ForeignKeyInfo(columns=["address_id"], foreign_columns=["id"])
                },
                unique_keys=[["email"]],
            ),
            TableInfo(
                name="COURSE",
                columns=["code", "title", "teacher_id"],
                primary_key=["code"],
                foreign_keys={
                    "TEACHER": ForeignKeyInfo(columns=["teacher_id"], foreign_columns=["id"])
                },
            ),
            TableInfo(
                name="ENROLLMENT",
                columns=["student_id", "course_code", "grade"],
                primary_key=["student_id", "course_code"],
                foreign_keys={
                    "STUDENT": ForeignKeyInfo(columns=["student_id"], foreign_columns=["id"]),
                    "COURSE": ForeignKeyInfo(columns=["course_code"], foreign_columns=["code"]),
                },
            ),
        ]
    )


@pytest.fixture
def state_city() -> Catalog:
    return state_city_catalog()


@pytest.fixture
def state_city_street() -> Catalog:
    """STATE and CITY plus STREET(id PK, name, city_id FK -> CITY)."""
    return Catalog.from_tables(
        list(state_city_catalog().tables.values())
        + [
            TableInfo(
                name="STREET",
                columns=["id", "name", "city_id"],
                primary_key=["id"],
                foreign_keys={"CITY": ForeignKeyInfo(columns=["city_id"], foreign_columns=["id"])},
            )
        ]
    )


@pytest.fixture
def person_catalog() -> Catalog:
    """PERSON(address_id FK -> ADDRESS), ADDRESS(country_code FK -> COUNTRY), COUNTRY."""
    return Catalog.from_tables(
        [
            TableInfo(
                name="PERSON",
                columns=["id", "name", "address_id"],
                primary_key=["id"],
                foreign_keys={
                    "ADDRESS": ForeignKeyInfo(columns=["address_id"], foreign_columns=["id"])
                },
            ),
            TableInfo(
                name="ADDRESS",
                columns=["id", "street", "country_code"],
                primary_key=["id"],
                foreign_keys={
                    "COUNTRY": ForeignKeyInfo(columns=["country_code"], foreign_columns=["code"])
                },
            ),
            TableInfo(name="COUNTRY", columns=["code", "name"], primary_key=["code"]),
        ]
    )


@pytest.fixture
def school() -> Catalog:
    return school_catalog()


# ------------------------------------------------------------------
# Fake client
# ------------------------------------------------------------------


class FakeClient:
    """``DatabaseClient`` returning rows from a handler function.

    The handler receives ``(sql, params)`` and returns a list of row dicts,
    or raises to simulate a failing query.  Every call is recorded.
    """

    def __init__(self, handler: Callable[[str, dict[str, Any]], list[dict[str, Any]]]):
        self._handler = handler
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def stream(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> Iterator[Mapping[str, Any]]:
        params = params or {}
        self.calls.append((sql, params))
        return iter(self._handler(sql, params))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_client() -> Callable[..., FakeClient]:
    return FakeClient


# ------------------------------------------------------------------
# SQLite database
# ------------------------------------------------------------------


SCHOOL_DDL = [
    'CREATE TABLE "ADDRESS" ("id" INTEGER PRIMARY KEY, "street" TEXT, "zip" TEXT)',
    'CREATE TABLE "TEACHER" ("id" INTEGER PRIMARY KEY, "name" TEXT, "address_id" INTEGER)',
    'CREATE TABLE "STUDENT" ("id" INTEGER PRIMARY KEY, "name" TEXT, "email" TEXT, "address_id" INTEGER)',
    'CREATE TABLE "COURSE" ("code" TEXT PRIMARY KEY, "title" TEXT, "teacher_id" INTEGER)',
    'CREATE TABLE "ENROLLMENT" ("student_id" INTEGER, "course_code" TEXT, "grade" REAL)',
    'CREATE TABLE "STATE" ("code" TEXT PRIMARY KEY, "name" TEXT)',
    'CREATE TABLE "CITY" ("id" INTEGER PRIMARY KEY, "name" TEXT, "state_code" TEXT)',
]

SCHOOL_ROWS = [
    """INSERT INTO "ADDRESS" VALUES (1, 'Main St', '13560'), (2, 'Side St', '')""",
    """INSERT INTO "TEACHER" VALUES (10, 'Ada', 1), (11, 'Alan', NULL)""",
    """INSERT INTO "STUDENT" VALUES (100, 'Bob', 'bob@example.com', 2), (101, 'Eve', '', NULL)""",
    """INSERT INTO "COURSE" VALUES ('DB1', 'Databases', 10), ('AI1', 'Artificial Intelligence', 11)""",
    """INSERT INTO "ENROLLMENT" VALUES (100, 'DB1', 9.5), (100, 'AI1', 7.0)""",
    """INSERT INTO "STATE" VALUES ('SP', 'Sao Paulo'), ('RJ', 'Rio de Janeiro')""",
    """INSERT INTO "CITY" VALUES (1, 'Campinas', 'SP'), (2, 'Santos', 'SP'), (3, 'Niteroi', 'RJ')""",
]


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """On-disk SQLite database holding the school and state/city tables."""
    url = f"sqlite:///{tmp_path / 'source.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in SCHOOL_DDL + SCHOOL_ROWS:
            conn.execute(text(statement))
    engine.dispose()
    return url
