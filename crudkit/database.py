# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Engine, column registry and connection scopes."""

import sqlalchemy
import structlog

from crudkit.columns import ColumnRegistry


__all__ = ['ConnectionManager', 'Database']


log = structlog.get_logger()


class ConnectionManager(object):
    """
    Scoped database connection, to be used as a context manager::

        with ConnectionManager(engine) as connection:
            connection.execute(statement)

    The work done inside the block is committed when the block exits
    cleanly, and the connection is always returned to the pool.
    """

    def __init__(self, engine):
        self.engine = engine
        self.connection = None

    def __enter__(self):
        self.connection = self.engine.connect()
        return self.connection

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            if exc_type is None:
                self.connection.commit()
        finally:
            self.connection.close()
            self.connection = None


class Database(object):
    """
    Everything a companion needs to reach storage.

    Build one at startup and pass it to each companion::

        db = Database.from_url('sqlite:///wines.db', tables=['wine'])
        wines = WineCompanion(db)

    Args:
        engine (sqlalchemy.engine.Engine): The engine, which owns the
            connection pool.
        registry (ColumnRegistry): Column metadata shared by companions.
            Defaults to a new registry on `engine`.
    """

    def __init__(self, engine, registry=None):
        self.engine = engine
        self.registry = registry if registry is not None else ColumnRegistry(engine)

    @classmethod
    def from_url(cls, url, tables=(), **engine_kwargs):
        """
        Args:
            url (str): SQLAlchemy database URL.
            tables (collections.Iterable): Table names to reflect immediately.
            **engine_kwargs: Passed to `sqlalchemy.create_engine`.
        """
        engine = sqlalchemy.create_engine(url, **engine_kwargs)
        log.info('created engine', url=engine.url.render_as_string(hide_password=True))
        return cls(engine, ColumnRegistry(engine, tables))

    def session(self):
        return ConnectionManager(self.engine)

    def dispose(self):
        self.engine.dispose()
