"""Shared fixtures: an in-memory schema/row source."""

from collections.abc import Iterable, Mapping
from typing import Any

import pytest


class FakeSource:
    """In-memory ``SchemaSource`` + ``RowSource`` for tests."""

    def __init__(
        self,
        tables: Iterable[str],
        foreign_keys: Iterable[tuple[str, str]] = (),
        rows: dict[str, list[Mapping[str, Any]]] | None = None,
        ddl: dict[str, str] | None = None,
    ) -> None:
        self.tables = list(tables)
        self.foreign_keys = list(foreign_keys)
        self.rows = rows or {}
        self.ddl = ddl or {}
        self.row_requests: list[str] = []

    def list_tables(self, schema: str) -> list[str]:
        return list(self.tables)

    def list_foreign_keys(self, schema: str) -> list[tuple[str, str]]:
        return list(self.foreign_keys)

    def get_create_statement(self, table: str) -> str:
        return self.ddl.get(table, f"CREATE TABLE `{table}` (`id` int NOT NULL)")

    def get_all_rows(self, table: str) -> list[Mapping[str, Any]]:
        self.row_requests.append(table)
        return list(self.rows.get(table, []))


@pytest.fixture
def make_source():
    """Factory for ``FakeSource`` instances."""
    return FakeSource


@pytest.fixture
def app_source() -> FakeSource:
    """users <- projects <- issues (issues also -> users), with a few rows."""
    return FakeSource(
        tables=["issues", "projects", "users"],
        foreign_keys=[
            ("issues", "projects"),
            ("issues", "users"),
            ("issues", "users"),  # reporter_id and assignee_id
            ("projects", "users"),
        ],
        rows={
            "users": [
                {"id": 1, "name": "O'Brien", "active": True},
                {"id": 2, "name": "Ada", "active": False},
            ],
            "projects": [{"id": 10, "owner_id": 1, "key": "PRJ"}],
            "issues": [],
        },
    )
