"""
SQLite backend.

Generated storage persists through the standard library ``sqlite3`` module:

- One table per entity, named by the pluralized entity name
- Root tables own the AUTOINCREMENT id; sub-entity rows share their root's id
- Reads join the inheritance chain and decode rows positionally: the id,
  then the stored fields parent first, exactly as ``Model.stored_fields``
  orders them
"""

from __future__ import annotations

import logging

from ..core import ir
from ..core.errors import BackendError
from ..core.strings import pluralize
from . import Backend, BackendCapabilities
from .base.utils import create_method, find_method, kind_param, plural_snake, snake
from .base.writer import CodeWriter

logger = logging.getLogger(__name__)

SQL_TYPES = {
    "String": "TEXT",
    "bool": "INTEGER",
    "bytes": "BLOB",
    "Decimal": "TEXT",
    "Int16": "INTEGER",
    "UInt16": "INTEGER",
    "Int32": "INTEGER",
    "UInt32": "INTEGER",
    "Int64": "INTEGER",
    "UInt64": "INTEGER",
}


def quote(name: str) -> str:
    return f'"{name}"'


def table_name(entity: ir.Entity) -> str:
    return pluralize(entity.name)


def column(entity: ir.Entity, name: str) -> str:
    """Qualified column reference: ``"Stamps"."rarity"``."""
    return f"{quote(table_name(entity))}.{quote(name)}"


def params_tuple(items: list[str]) -> str:
    """Python tuple expression for SQL parameters."""
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class SQLiteBackend(Backend):
    """Relational storage through sqlite3, one table per entity."""

    name = "sqlite"

    def get_capabilities(self) -> BackendCapabilities:
        return BackendCapabilities(
            name=self.name,
            description="SQLite storage through the sqlite3 module, one table per entity",
            persistent=True,
        )

    # Type mapping

    def sql_type(self, model: ir.Model, decl: ir.FieldDecl) -> str:
        if model.is_enum(decl.type):
            return "INTEGER"
        return SQL_TYPES[decl.type]

    def to_sql(self, model: ir.Model, decl: ir.FieldDecl, expression: str) -> str:
        """Expression converting a Python value to its column value."""
        if model.is_enum(decl.type) or decl.type == "bool":
            return f"int({expression})"
        if decl.type == "Decimal":
            return f"str({expression})"
        return expression

    def from_sql(self, model: ir.Model, decl: ir.FieldDecl, expression: str) -> str:
        """Expression converting a column value back to the Python value."""
        if model.is_enum(decl.type):
            return f"{decl.type}({expression})"
        if decl.type == "bool":
            return f"bool({expression})"
        if decl.type == "Decimal":
            return f"Decimal({expression})"
        return expression

    def _own_columns(self, entity: ir.Entity) -> list[ir.Field]:
        return [f for f in entity.fields if not f.is_dynamic]

    def _layout(self, model: ir.Model, entity: ir.Entity) -> list[tuple[ir.Entity, ir.Field | None]]:
        """Positional read layout: root id, then stored fields parent first."""
        layout: list[tuple[ir.Entity, ir.Field | None]] = [(model.root_of(entity), None)]
        for f in model.stored_fields(entity):
            layout.append((model.get_entity(f.owner), f))
        return layout

    def _select(self, model: ir.Model, entity: ir.Entity) -> str:
        columns = []
        for owner, f in self._layout(model, entity):
            columns.append(column(owner, f.decl.name if f else ir.ID_FIELD))

        sql = f"SELECT {', '.join(columns)} FROM {quote(table_name(entity))}"
        for ancestor in model.ancestors(entity):
            sql += (
                f" JOIN {quote(table_name(ancestor))} ON "
                f"{column(ancestor, ir.ID_FIELD)} = {column(entity, ir.ID_FIELD)}"
            )
        return sql

    def _execute(self, sql: str, params: list[str] | None = None) -> str:
        if params:
            return f"self._connection.execute({sql!r}, {params_tuple(params)})"
        return f"self._connection.execute({sql!r})"

    # Generator contract

    def namespaces(self, model: ir.Model, writer: CodeWriter) -> None:
        writer.line("import sqlite3")

    def declarations(self, model: ir.Model, writer: CodeWriter, entities: list[ir.Entity]) -> None:
        tables: dict[str, str] = {}
        for entity in entities:
            table = table_name(entity)
            if table.lower() in tables:
                raise BackendError(
                    f"entities {tables[table.lower()]} and {entity.name} share table {table}"
                )
            tables[table.lower()] = entity.name
            logger.debug("entity %s stored in table %s", entity.name, table)

        with writer.block('def __init__(self, path: str = ":memory:") -> None:'):
            writer.line("self._connection = sqlite3.connect(path, isolation_level=None)")
            writer.line("self._create_tables()")
        writer.blank()
        with writer.block("def close(self) -> None:"):
            writer.line("self._connection.close()")
        writer.blank()
        with writer.block("def _create_tables(self) -> None:"):
            for entity in entities:
                writer.line(f"{self._execute(self._create_table(model, entity))}")
            if not entities:
                writer.line("pass")

        for entity in entities:
            if entity.is_abstract:
                continue
            self._reader(model, writer, entity)

    def _create_table(self, model: ir.Model, entity: ir.Entity) -> str:
        if entity.is_sub_entity:
            root = model.root_of(entity)
            columns = [
                f"{quote(ir.ID_FIELD)} INTEGER PRIMARY KEY REFERENCES "
                f"{quote(table_name(root))}({quote(ir.ID_FIELD)})"
            ]
        else:
            columns = [f"{quote(ir.ID_FIELD)} INTEGER PRIMARY KEY AUTOINCREMENT"]
        for f in self._own_columns(entity):
            columns.append(f"{quote(f.decl.name)} {self.sql_type(model, f.decl)}")
        return f"CREATE TABLE IF NOT EXISTS {quote(table_name(entity))} ({', '.join(columns)})"

    def _reader(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        """Emit ``_select_<plural>`` and ``_read_<name>`` for a concrete entity."""
        select = self._select(model, entity)
        name = snake(entity.name)

        writer.blank()
        header = (
            f"def _select_{plural_snake(entity.name)}(self, clause: str, "
            f"params: tuple = ()) -> list[{entity.name}]:"
        )
        with writer.block(header):
            writer.line(f'cursor = self._connection.execute({select!r} + " " + clause, params)')
            writer.line(f"return [self._read_{name}(row) for row in cursor.fetchall()]")

        writer.blank()
        with writer.block(f"def _read_{name}(self, row: tuple) -> {entity.name}:"):
            writer.line(f"instance = {entity.name}()")
            for position, (_owner, f) in enumerate(self._layout(model, entity)):
                if f is None:
                    writer.line(f"instance.{ir.ID_FIELD} = row[{position}]")
                else:
                    value = self.from_sql(model, f.decl, f"row[{position}]")
                    writer.line(f"instance.{f.decl.name} = {value}")
            writer.line("return instance")

    def create(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        parent = model.parent_of(entity)
        if parent is not None:
            args = [instance, f"{parent.kind_enum}.{entity.discriminator}"]
            args.extend(f.decl.name for f in model.constructor_fields(parent))
            writer.line(f"self.{create_method(parent)}({', '.join(args)})")

        values: dict[str, str] = {}
        for f in self._own_columns(entity):
            if f.synthetic:
                values[f.decl.name] = kind_param(entity)
            elif f.is_internal:
                values[f.decl.name] = f"{instance}.{f.decl.name}"
            else:
                values[f.decl.name] = f.decl.name

        table = quote(table_name(entity))
        if parent is not None:
            names = [quote(ir.ID_FIELD)] + [quote(name) for name in values]
            params = [f"{instance}.{ir.ID_FIELD}"]
        else:
            names = [quote(name) for name in values]
            params = []
        decls = entity.output_decls
        params.extend(self.to_sql(model, decls[name], value) for name, value in values.items())

        if names:
            placeholders = ", ".join("?" for _ in names)
            sql = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"

        if parent is None:
            writer.line(f"cursor = {self._execute(sql, params)}")
            writer.line(f"{instance}.{ir.ID_FIELD} = cursor.lastrowid")
        else:
            writer.line(self._execute(sql, params))

        for name, value in values.items():
            if value != f"{instance}.{name}":
                writer.line(f"{instance}.{name} = {value}")
        writer.line(f"return {instance}")

    def delete(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        sql = f"DELETE FROM {quote(table_name(entity))} WHERE {quote(ir.ID_FIELD)} = ?"
        writer.line(f"cursor = {self._execute(sql, [ir.ID_FIELD])}")
        writer.line("return cursor.rowcount > 0")

    def guard(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        sql = f"SELECT 1 FROM {quote(table_name(entity))} WHERE {quote(ir.ID_FIELD)} = ?"
        with writer.block(f"if {self._execute(sql, [ir.ID_FIELD])}.fetchone() is None:"):
            writer.line("return False")

    def find(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, field_name: str) -> None:
        table = quote(table_name(entity))

        if entity.is_abstract:
            if field_name == ir.ID_FIELD:
                sql = f"SELECT {quote(entity.kind_enum)} FROM {table} WHERE {quote(ir.ID_FIELD)} = ?"
                writer.line(f"row = {self._execute(sql, [ir.ID_FIELD])}.fetchone()")
                with writer.block("if row is None:"):
                    writer.line("return None")
                self.emit_dispatch(model, writer, entity, "row[0]", ir.ID_FIELD)
                return

            decl = entity.output_decls[field_name]
            sql = (
                f"SELECT {quote(ir.ID_FIELD)} FROM {table} WHERE {quote(field_name)} = ? "
                f"ORDER BY {quote(ir.ID_FIELD)} LIMIT 1"
            )
            param = self.to_sql(model, decl, field_name)
            writer.line(f"row = {self._execute(sql, [param])}.fetchone()")
            with writer.block("if row is None:"):
                writer.line("return None")
            writer.line(f"return self.{find_method(entity, ir.ID_FIELD)}(row[0])")
            return

        root = model.root_of(entity)
        if field_name == ir.ID_FIELD:
            clause = f"WHERE {column(root, ir.ID_FIELD)} = ?"
            param = ir.ID_FIELD
        else:
            decl = entity.output_decls[field_name]
            clause = (
                f"WHERE {column(entity, field_name)} = ? "
                f"ORDER BY {column(root, ir.ID_FIELD)} LIMIT 1"
            )
            param = self.to_sql(model, decl, field_name)
        writer.line(
            f"rows = self._select_{plural_snake(entity.name)}({clause!r}, {params_tuple([param])})"
        )
        writer.line("return rows[0] if rows else None")

    def list(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        root = model.root_of(entity)
        clause = f"ORDER BY {column(root, ir.ID_FIELD)} LIMIT ? OFFSET ?"
        writer.line(f"return self._select_{plural_snake(entity.name)}({clause!r}, (count, offset))")

    def count(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        sql = f"SELECT COUNT(*) FROM {quote(table_name(entity))}"
        writer.line(f"return {self._execute(sql)}.fetchone()[0]")

    def aggregate(
        self,
        model: ir.Model,
        writer: CodeWriter,
        source: ir.Entity,
        target: ir.Entity,
        field_name: str,
        unique: bool,
    ) -> None:
        sql = (
            f"SELECT {quote(ir.ID_FIELD)} FROM {quote(table_name(source))} "
            f"WHERE {quote(field_name)} = ? ORDER BY {quote(ir.ID_FIELD)}"
        )
        find = find_method(source, ir.ID_FIELD)
        if unique:
            writer.line(f"row = {self._execute(sql + ' LIMIT 1', [field_name])}.fetchone()")
            writer.line(f"return self.{find}(row[0]) if row else None")
        else:
            writer.line(f"rows = {self._execute(sql, [field_name])}.fetchall()")
            writer.line(f"return [self.{find}(row[0]) for row in rows]")

    def edit(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        def persist(writer: CodeWriter, f: ir.Field, instance: str, value: str) -> None:
            owner = model.get_entity(f.owner)
            sql = (
                f"UPDATE {quote(table_name(owner))} SET {quote(f.decl.name)} = ? "
                f"WHERE {quote(ir.ID_FIELD)} = ?"
            )
            params = [self.to_sql(model, f.decl, value), f"{instance}.{ir.ID_FIELD}"]
            writer.line(self._execute(sql, params))
            writer.line(f"{instance}.{f.decl.name} = {value}")

        self.emit_edit(model, writer, entity, instance, persist)
