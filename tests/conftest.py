# ruff: noqa: E402
# File: /tests/conftest.py
import pathlib
import sys

# Make repo root importable as "datatable"
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from datatable.db.base_class import Base
from datatable.main import app
from datatable.schemas.columns import ColumnDescriptor, DataKind, RelationConfig

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def _create_schema():
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    connection = engine.connect()
    trans = connection.begin()
    try:
        session = TestingSessionLocal(bind=connection)
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def client(db_session):
    from datatable.db.session import get_db  # late import to avoid circulars

    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ----------------------------
# Table data
# ----------------------------
@pytest.fixture()
def columns():
    return [
        ColumnDescriptor(id="name", display_name="Name"),
        ColumnDescriptor(id="age", data_kind=DataKind.number),
        ColumnDescriptor(id="status"),
        ColumnDescriptor(id="joined", data_kind=DataKind.date),
        ColumnDescriptor(id="active", data_kind=DataKind.boolean),
        ColumnDescriptor(id="notes", sortable=False, filterable=False),
        ColumnDescriptor(
            id="team",
            relation=RelationConfig(target_table="teams", relation_field="team_ids", multiple=True),
        ),
    ]


@pytest.fixture()
def column_map(columns):
    return {c.id: c for c in columns}


@pytest.fixture()
def rows():
    return [
        {
            "id": "r1",
            "name": "Alice",
            "age": 34,
            "status": "open",
            "joined": "2023-01-15",
            "active": True,
            "notes": "vip",
            "team_ids": ["t1", "t2"],
        },
        {
            "id": "r2",
            "name": "bob",
            "age": "27",
            "status": "closed",
            "joined": "2022-06-01T10:00:00Z",
            "active": False,
            "notes": None,
            "team_ids": ["t2"],
        },
        {
            "id": "r3",
            "name": "Carol",
            "age": None,
            "status": "open",
            "joined": None,
            "active": "yes",
            "notes": "",
            "team_ids": [],
        },
        {
            "id": "r4",
            "name": "dave",
            "age": 41,
            "status": None,
            "joined": "2024-03-09",
            "active": None,
            "notes": "late",
            "team_ids": [{"id": "t3", "name": "Ops"}],
        },
        {
            "id": "r5",
            "name": "Eve",
            "age": 27,
            "status": "blocked",
            "joined": "not a date",
            "active": "false",
            "notes": None,
        },
    ]