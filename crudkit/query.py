# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""SQLAlchemy clause helpers used to build find and count statements."""

import json

from sqlalchemy.sql import ClauseElement, and_, asc, cast, desc, func, or_, text
from sqlalchemy.types import String

from crudkit.exceptions import ConfigurationError
from crudkit.utils import split_names


__all__ = [
    'combine_conditions', 'constrain_query_by_filter', 'filter_condition', 'limit_query',
    'normalize_condition', 'normalize_order', 'order_query', 'page_offset']


def _get_column(table, name):
    column = table.columns.get(name.strip())
    if column is None:
        raise ConfigurationError("There's no column '{}' in table '{}'.".format(name, table.name))
    return column


def page_offset(page, length):
    """
    Returns the number of rows to skip to reach the start of `page`.

    Pages are numbered from 1. Neither argument is validated.
    """
    return (page - 1) * length


def normalize_order(table, order):
    """
    Normalizes an ordering specification into a list of sorters.

    `order` may be a column list string like "name desc, year", a JSON
    encoded list, a list of strings, or a list of dicts like::

        [{'field': 'name', 'dir': 'desc'}, {'field': 'year'}]

    Args:
        table (sqlalchemy.sql.schema.Table): The table being ordered.
        order: The ordering specification. Empty values mean no ordering.

    Returns:
        list: Dicts with "field" and "dir" keys, where "dir" is "asc" or
            "desc".

    Raises:
        ConfigurationError: If a field is not a column of `table` or the
            direction is neither "asc" nor "desc".
    """
    if not order:
        return []

    if isinstance(order, str):
        first_char = order.lstrip()[:1]
        if first_char == '[' or first_char == '{':
            order = json.loads(order)
        else:
            order = split_names(order)

    if isinstance(order, dict):
        order = [order]

    sorters = []
    for sorter in order:
        if isinstance(sorter, dict):
            field = sorter.get('property', sorter.get('field'))
            direction = sorter.get('direction', sorter.get('dir', 'asc'))
        else:
            parts = sorter.split()
            if not parts:
                continue
            field = parts[0]
            direction = parts[1] if len(parts) > 1 else 'asc'
            if len(parts) > 2:
                raise ConfigurationError('Unrecognized ordering: {!r}'.format(sorter))

        direction = direction.lower()
        if direction not in ('asc', 'desc'):
            raise ConfigurationError('Unrecognized ordering direction: {!r}'.format(direction))
        sorters.append({'field': _get_column(table, field).name, 'dir': direction})
    return sorters


def order_query(query, table, order):
    for sorter in normalize_order(table, order):
        dir = {'asc': asc, 'desc': desc}[sorter['dir']]
        query = query.order_by(dir(table.columns[sorter['field']]))
    return query


def limit_query(query, page, length):
    return query.limit(length).offset(page_offset(page, length))


def filter_condition(table, filter, fields):
    """
    Builds a case insensitive "contains" condition over several columns.

    The result looks something like this::

        lower(wine.name) LIKE '%merlot%' OR lower(wine.country) LIKE '%merlot%'

    Non text columns are cast to strings before being lowered.

    Args:
        table (sqlalchemy.sql.schema.Table): The table being filtered.
        filter (str): The text to look for.
        fields (list): The names of the columns to look in.

    Returns:
        sqlalchemy.sql.ClauseElement: The condition, or None if `filter` is
            empty.

    Raises:
        ConfigurationError: If `fields` is empty or refers to an unknown
            column.
    """
    if not filter:
        return None

    fields = split_names(fields)
    if not fields:
        raise ConfigurationError('Cannot filter table {!r}: no filterable fields were given.'.format(table.name))

    pattern = '%' + filter.lower() + '%'
    clauses = []
    for name in fields:
        column = _get_column(table, name)
        if not isinstance(column.type, String):
            column = cast(column, String)
        clauses.append(func.lower(column).like(pattern))
    return or_(*clauses)


def normalize_condition(condition):
    """
    Returns `condition` as a SQLAlchemy clause.

    Strings are trusted SQL supplied by application code and are wrapped in
    `text()` as they are. Empty values yield None.
    """
    if condition is None:
        return None
    elif isinstance(condition, ClauseElement):
        return condition
    elif isinstance(condition, str):
        return text(condition) if condition.strip() else None
    raise TypeError('Conditions must be SQLAlchemy clauses or strings, given {}'.format(type(condition)))


def combine_conditions(*conditions):
    """
    Combines every condition which is not None with AND.

    Returns:
        sqlalchemy.sql.ClauseElement: The combined condition, or None if
            there was nothing to combine.
    """
    clauses = [c for c in conditions if c is not None]
    if not clauses:
        return None
    elif len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)


def constrain_query_by_filter(query, *conditions):
    """
    Applies a WHERE clause made of all the given conditions to `query`.

    If every condition is None the query is returned unmodified.
    """
    condition = combine_conditions(*conditions)
    if condition is None:
        return query
    return query.where(condition)
