# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""
Generic data access for entities stored in a single table.

A companion is declared once per entity type and constructed with the
`Database` it should use::

    class WineCompanion(EntityCompanion):
        entity_class = Wine
        table_name = 'wine'
        default_order = 'name'
        filter_fields = ('name', 'grapes', 'country', 'region')

    wines = WineCompanion(db)
    wines.find(page=2, filter='merlot')
    wines.count(q='country:france year>=2005')

Every operation runs on its own scoped connection. `save` and `update` issue
the change, commit it, and then read the row back in a separate step.
"""

from collections import namedtuple
from functools import cached_property

import structlog
from sqlalchemy import and_, delete, func, insert, select, update

from crudkit.conditions import ConditionBuilder
from crudkit.entity import Entity, ValidationError
from crudkit.exceptions import ConfigurationError, log_exceptions
from crudkit.http import DEFAULT_PAGE_LEN, parse_query
from crudkit.query import constrain_query_by_filter, filter_condition, limit_query, normalize_condition, \
    normalize_order, order_query
from crudkit.utils import entity_name_for, fingerprint_sql


__all__ = ['EntityCompanion', 'SaveResult']


log = structlog.get_logger()


class SaveResult(namedtuple('SaveResult', ['entity', 'errors'])):
    """
    Outcome of `EntityCompanion.save` and `EntityCompanion.update`: either the
    entity as re-read from storage, or a non-empty list of `ValidationError`.
    """
    __slots__ = ()

    @property
    def ok(self):
        return not self.errors


class EntityCompanion(object):
    entity_class = Entity
    table_name = None
    default_order = ''
    filter_fields = ()

    def __init__(self, db):
        if not self.table_name:
            raise ConfigurationError('{} must define a table_name'.format(self.__class__.__name__))
        self.db = db

    def __repr__(self):
        return '<%s table=%r>' % (self.__class__.__name__, self.table_name)

    @property
    def entity_name(self):
        return entity_name_for(self.table_name)

    @cached_property
    def table(self):
        return self.db.registry.table(self.table_name)

    @property
    def columns_info(self):
        return self.db.registry.columns(self.table_name)

    def parse_row(self, row):
        return self.entity_class.from_row(row._mapping)

    def validate(self, entity):
        return list(entity.validate())

    def _execute(self, connection, statement):
        log.debug('executing statement', table=self.table_name, fingerprint=fingerprint_sql(str(statement)))
        return connection.execute(statement)

    def _values(self, entity):
        values = dict(entity.as_seq())
        unknown = [name for name in values if name not in self.table.columns]
        if unknown:
            raise ConfigurationError("There's no column(s) {} in table '{}'.".format(
                ', '.join(repr(name) for name in unknown), self.table_name))
        values.pop('id', None)
        return values

    def _conditions(self, q='', filter='', filter_by='', condition=None):
        conditions = []
        if filter:
            conditions.append(filter_condition(self.table, filter, filter_by or self.filter_fields))
        if q:
            query = ConditionBuilder.build(q, self.columns_info)
            log.info('translated free-text query', table=self.table_name, q=q,
                     query=None if query is None else str(query))
            conditions.append(query)
        conditions.append(normalize_condition(condition))
        return conditions

    @log_exceptions
    def is_duplicate(self, entity, field):
        """
        Checks whether another row holds the same value in `field`.

        Args:
            entity (Entity): The entity to check. When it already has an
                identity, its own row is not considered a duplicate.
            field (str): One of the entity's projected fields.

        Returns:
            bool: True if a duplicate exists. Always False when the entity's
                value is None.

        Raises:
            ConfigurationError: If `field` is not one of the entity's fields.
        """
        fields = dict(entity.as_seq())
        if field not in fields:
            raise ConfigurationError(
                "Cannot check for duplicate record. There's no field '{}' in table '{}'.".format(
                    field, self.table_name))

        # NULL never equals NULL, as with unique constraints
        if fields[field] is None:
            return False

        condition = self.table.columns[field] == fields[field]
        if entity.id is not None:
            condition = and_(self.table.columns.id != entity.id, condition)
        return self.count(condition=condition) > 0

    @log_exceptions
    def find_by_id(self, id):
        query = select(self.table).where(self.table.columns.id == id)
        with self.db.session() as connection:
            row = self._execute(connection, query).first()
        return None if row is None else self.parse_row(row)

    def find_with_condition(self, query, condition=None):
        """
        Like `find`, with the parameters decoded from an HTTP query map.

        Args:
            query (collections.Mapping): See `crudkit.http.parse_query`.
            condition: An additional condition, see `find`.
        """
        params = parse_query(query)
        return self.find(params.page, params.length, params.order, params.q, params.filter, params.filter_by,
                         condition)

    @log_exceptions
    def find(self, page=1, length=DEFAULT_PAGE_LEN, order=None, q='', filter='', filter_by='', condition=None):
        """
        Returns one page of entities.

        Args:
            page (int): Page number, starting at 1.
            length (int): Number of entities per page.
            order: Column list like "name desc, year", see
                `crudkit.query.normalize_order`. None uses `default_order`
                and an empty string leaves the rows unordered.
            q (str): Free-text query, see `crudkit.conditions`.
            filter (str): Text that at least one filterable column must
                contain, ignoring case.
            filter_by: Comma separated column names (or a list) to filter on
                instead of `filter_fields`.
            condition: An additional SQLAlchemy condition, or a trusted SQL
                string.

        Returns:
            list: The matching entities. Pages past the end are empty.
        """
        if order is None:
            order = self.default_order

        query = constrain_query_by_filter(select(self.table), *self._conditions(q, filter, filter_by, condition))
        query = order_query(query, self.table, order)
        query = limit_query(query, page, length)
        with self.db.session() as connection:
            rows = self._execute(connection, query).all()
        return [self.parse_row(row) for row in rows]

    def count_with_condition(self, query, condition=None):
        params = parse_query(query)
        return self.count(params.q, params.filter, params.filter_by, condition)

    @log_exceptions
    def count(self, q='', filter='', filter_by='', condition=None):
        """
        Counts the entities matching the same conditions as `find`.

        Returns:
            int: The number of matching rows.
        """
        query = select(func.count()).select_from(self.table)
        query = constrain_query_by_filter(query, *self._conditions(q, filter, filter_by, condition))
        with self.db.session() as connection:
            return self._execute(connection, query).scalar_one()

    @log_exceptions
    def save(self, entity):
        """
        Validates and inserts `entity`, then reads it back.

        Returns:
            SaveResult: The stored entity with its new identity, or the
                validation errors. Nothing is written if validation fails.
        """
        errors = self.validate(entity)
        if errors:
            return SaveResult(None, errors)

        with self.db.session() as connection:
            result = self._execute(connection, insert(self.table).values(**self._values(entity)))
            primary_key = result.inserted_primary_key
            new_id = primary_key[0] if primary_key else None

        saved = None if new_id is None else self.find_by_id(new_id)
        if saved is None:
            log.warning('unable to read back created record', table=self.table_name, id=new_id)
            return SaveResult(None, [ValidationError('Could not create {}'.format(self.entity_name))])
        return SaveResult(saved, [])

    @log_exceptions
    def update(self, entity):
        """
        Validates `entity` and writes its fields to the row with its identity.

        Returns:
            SaveResult: The entity as read back after the update, or the
                validation errors. An entity without identity, or whose row
                can't be read back, yields a generic "Could not update" error.
        """
        errors = self.validate(entity)
        if errors:
            return SaveResult(None, errors)

        updated = None
        if entity.id is not None:
            statement = update(self.table).where(self.table.columns.id == entity.id).values(**self._values(entity))
            with self.db.session() as connection:
                self._execute(connection, statement)
            updated = self.find_by_id(entity.id)

        if updated is None:
            log.warning('unable to read back updated record', table=self.table_name, id=entity.id)
            return SaveResult(None, [ValidationError('Could not update {}'.format(self.entity_name))])
        return SaveResult(updated, [])

    @log_exceptions
    def delete(self, entity_or_id):
        """
        Deletes by identity. Does nothing if there is no identity, and does
        not report whether a row was actually removed.

        Args:
            entity_or_id: An `Entity`, or the identity itself.
        """
        id = entity_or_id.id if isinstance(entity_or_id, Entity) else entity_or_id
        if id is None:
            return
        with self.db.session() as connection:
            self._execute(connection, delete(self.table).where(self.table.columns.id == id))

    def crud_spec(self):
        """
        Describes the entity for configuration driven clients::

            {
                'entity': 'Wine',
                'table': 'wine',
                'defaultOrder': [{'field': 'name', 'dir': 'asc'}],
                'filterFields': ['name', 'country'],
                'fields': {
                    'name': {
                        'name': 'name',
                        'type': 'string',
                        'nullable': False,
                        'validators': {'maxLength': 50}
                    }
                }
            }
        """
        fields = {}
        for name in self.entity_class.fields:
            info = self.db.registry.column(self.table_name, name)
            field = {'name': name, 'type': 'auto' if info is None else info.kind}
            if info is not None:
                field['nullable'] = info.nullable
            validators = self.entity_class.validator_spec(name)
            if validators:
                field['validators'] = validators
            fields[name] = field

        return {
            'entity': self.entity_name,
            'table': self.table_name,
            'defaultOrder': normalize_order(self.table, self.default_order),
            'filterFields': list(self.filter_fields),
            'fields': fields,
        }
