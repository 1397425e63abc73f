"""SQLite storage of dataclass models."""

from __future__ import annotations

import dataclasses
import inspect
import logging
import sqlite3
import types
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar, Union, get_args, get_origin

logger = logging.getLogger(__name__)

DB_FILENAME = "traderepublic.db"

M = TypeVar("M")

_NAMED_TYPES: dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "datetime": datetime,
    "date": date,
}


def open_sqlite(path: str | Path = DB_FILENAME) -> sqlite3.Connection:
    """Open (creating if needed) the SQLite database file at *path*."""
    return sqlite3.connect(str(path))


def open_sqlite_in_memory() -> sqlite3.Connection:
    """Open a fresh in-memory SQLite database with foreign keys enforced."""
    connection = sqlite3.connect(":memory:")
    connection.execute("PRAGMA foreign_keys = ON")
    return connection


def _resolve_annotation(annotation: Any, namespace: dict[str, Any]) -> Any:
    """Turn a field annotation, possibly written as text, into a type."""
    if not isinstance(annotation, str):
        return annotation

    text = annotation.strip()
    if text.startswith("Optional[") and text.endswith("]"):
        text = text[len("Optional[") : -1]

    parts = [part.strip() for part in text.split("|")]
    parts = [part for part in parts if part not in ("None", "NoneType")]
    if len(parts) != 1:
        return None

    name = parts[0]
    if "[" in name:
        return None
    if name in _NAMED_TYPES:
        return _NAMED_TYPES[name]

    head, *rest = name.split(".")
    resolved = namespace.get(head)
    for attribute in rest:
        resolved = getattr(resolved, attribute, None)
    return resolved


def _column_type(hint: Any) -> str | None:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) != 1:
            return None
        hint = args[0]
    if not isinstance(hint, type):
        return None
    if issubclass(hint, bool):
        return "INTEGER"
    if issubclass(hint, str):
        return "TEXT"
    if issubclass(hint, Enum):
        return "TEXT"
    if issubclass(hint, int):
        return "INTEGER"
    if issubclass(hint, float):
        return "REAL"
    if issubclass(hint, (datetime, date)):
        return "TEXT"
    return None


def _to_sql(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class Repository(Generic[M]):
    """Saves dataclass models of one type into a table of their own.

    The table is named by the model's ``table_name`` class attribute (default:
    lower-cased class name plus ``s``) and keyed by ``primary_key`` (default
    ``id``). Fields of scalar types become columns; other fields, and fields
    whose metadata holds ``{"db": False}``, are not stored.
    """

    def __init__(self, connection: sqlite3.Connection, model_type: type[M]) -> None:
        if not dataclasses.is_dataclass(model_type):
            raise TypeError(f"{model_type!r} is not a dataclass")
        self._connection = connection
        self._table = getattr(model_type, "table_name", model_type.__name__.lower() + "s")
        self._primary_key = getattr(model_type, "primary_key", "id")

        module = inspect.getmodule(model_type)
        namespace = dict(vars(module)) if module is not None else {}

        self._columns: dict[str, str] = {}
        for model_field in dataclasses.fields(model_type):
            if model_field.metadata.get("db", True) is False:
                continue
            hint = _resolve_annotation(model_field.type, namespace)
            column_type = _column_type(hint)
            if column_type is not None:
                self._columns[model_field.name] = column_type

        if self._primary_key not in self._columns:
            raise ValueError(
                f"primary key {self._primary_key!r} is not a column of {model_type.__name__}"
            )

        self._migrate()
        logger.debug("initialized repository for model %s", model_type.__name__)

    def _migrate(self) -> None:
        table = _quote(self._table)
        existing = {
            row[1] for row in self._connection.execute(f"PRAGMA table_info({table})")
        }
        with self._connection:
            if not existing:
                definitions = ", ".join(
                    f"{_quote(name)} {kind}"
                    + (" PRIMARY KEY" if name == self._primary_key else "")
                    for name, kind in self._columns.items()
                )
                self._connection.execute(f"CREATE TABLE {table} ({definitions})")
                return
            for name, kind in self._columns.items():
                if name not in existing:
                    self._connection.execute(
                        f"ALTER TABLE {table} ADD COLUMN {_quote(name)} {kind}"
                    )

    def create(self, model: M) -> None:
        """Insert *model*, or update the row sharing its primary key."""
        names = list(self._columns)
        values = [_to_sql(getattr(model, name)) for name in names]
        placeholders = ", ".join("?" for _ in names)
        updates = ", ".join(
            f"{_quote(name)} = excluded.{_quote(name)}"
            for name in names
            if name != self._primary_key
        )
        conflict = f"DO UPDATE SET {updates}" if updates else "DO NOTHING"
        statement = (
            f"INSERT INTO {_quote(self._table)} ({', '.join(map(_quote, names))}) "
            f"VALUES ({placeholders}) ON CONFLICT({_quote(self._primary_key)}) {conflict}"
        )
        with self._connection:
            cursor = self._connection.execute(statement, values)
        logger.debug("saved entry to db, rows affected: %d", cursor.rowcount)