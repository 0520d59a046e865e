# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Table and column introspection through the database catalog."""

from collections import namedtuple

import structlog
from sqlalchemy import MetaData, Table
from sqlalchemy.types import Boolean, Date, DateTime, Float, Integer, Numeric, String, Time


__all__ = ['ColumnInfo', 'ColumnRegistry', 'column_kind']


log = structlog.get_logger()


# Checked in order, so subclasses must come before their bases. Float is
# listed on its own since it no longer derives from Numeric in SQLAlchemy 2.1.
type_map_defaults = (
    (Boolean, 'boolean'),
    (Integer, 'int'),
    (Float, 'float'),
    (Numeric, 'float'),
    (DateTime, 'datetime'),
    (Date, 'date'),
    (Time, 'time'),
    (String, 'string'),
)

NUMERIC_KINDS = frozenset(['int', 'float'])
TEMPORAL_KINDS = frozenset(['date', 'datetime', 'time'])


def column_kind(sql_type):
    """
    Returns the comparison kind for a SQLAlchemy type instance.

    Args:
        sql_type (sqlalchemy.types.TypeEngine): A column type, usually as
            reflected from the database.

    Returns:
        str: One of "int", "float", "string", "boolean", "date", "datetime",
            "time", or "auto" if the type is not recognized.
    """
    for type_class, kind in type_map_defaults:
        if isinstance(sql_type, type_class):
            return kind
    return 'auto'


class ColumnInfo(namedtuple('ColumnInfo', ['name', 'sql_type', 'kind', 'column'])):
    """
    Name, SQL type and comparison kind of a single table column.

    The `column` attribute is the reflected SQLAlchemy column, which is the
    only thing used to render identifiers into statements.
    """
    __slots__ = ()

    @classmethod
    def from_column(cls, column):
        return cls(column.name, column.type, column_kind(column.type), column)

    @property
    def is_numeric(self):
        return self.kind in NUMERIC_KINDS

    @property
    def is_text(self):
        return self.kind == 'string'

    @property
    def is_temporal(self):
        return self.kind in TEMPORAL_KINDS

    @property
    def nullable(self):
        return self.column.nullable

    @property
    def primary_key(self):
        return self.column.primary_key


class ColumnRegistry(object):
    """
    Reflected tables and their column metadata, keyed by table name.

    Tables are reflected lazily on first access and then kept for the
    lifetime of the registry; schema changes require a new registry. A
    registry is normally built once at startup and shared by every companion
    through the owning `Database`.

    Args:
        engine (sqlalchemy.engine.Engine): Engine used for reflection.
        tables (collections.Iterable): Names of tables to reflect right away.
    """

    def __init__(self, engine, tables=()):
        self.engine = engine
        self.metadata = MetaData()
        self._tables = {}
        self._columns = {}
        self.preload(*tables)

    def preload(self, *table_names):
        for table_name in table_names:
            self.table(table_name)
        return self

    def table(self, table_name):
        """
        Returns the reflected `Table` for `table_name`.

        Raises:
            sqlalchemy.exc.NoSuchTableError: If the table does not exist.
        """
        table = self._tables.get(table_name)
        if table is None:
            table = Table(table_name, self.metadata, autoload_with=self.engine)
            self._columns[table_name] = [ColumnInfo.from_column(c) for c in table.columns]
            self._tables[table_name] = table
            log.info('reflected table', table=table_name, columns=[c.name for c in table.columns])
        return table

    def columns(self, table_name):
        self.table(table_name)
        return self._columns[table_name]

    def column(self, table_name, name):
        """
        Looks up a column by name, ignoring case.

        Returns:
            ColumnInfo: The matching column, or None if there is no such
                column.
        """
        lowered = name.lower()
        for info in self.columns(table_name):
            if info.name.lower() == lowered:
                return info
        return None

    def __contains__(self, table_name):
        return table_name in self._tables
