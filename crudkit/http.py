# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Decoding of HTTP style query maps into find and count parameters."""

from collections import namedtuple


__all__ = ['DEFAULT_PAGE_LEN', 'QueryParams', 'parse_query']


DEFAULT_PAGE_LEN = 10


QueryParams = namedtuple('QueryParams', ['page', 'length', 'order', 'q', 'filter', 'filter_by'])


def _first(query, *keys):
    for key in keys:
        if key in query:
            value = query[key]
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            return value
    return None


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def parse_query(query):
    """
    Extracts paging, ordering and filtering parameters from a query map.

    Recognized keys are "page", "length" (or "len"), "order", "search" (or
    "q"), "filter" and "filterBy". Values may be strings or lists of strings,
    as produced by most query string parsers, in which case the first one is
    used::

        >>> parse_query({'page': ['2'], 'filter': ['merlot']})
        QueryParams(page=2, length=10, order=None, q='', filter='merlot', filter_by='')

    Args:
        query (collections.Mapping): The decoded query string.

    Returns:
        QueryParams: Page and length default to 1 and `DEFAULT_PAGE_LEN` when
            missing or not positive integers. A missing order is None, which
            asks for the entity's default order.
    """
    query = query or {}
    return QueryParams(
        page=_positive_int(_first(query, 'page'), 1),
        length=_positive_int(_first(query, 'length', 'len'), DEFAULT_PAGE_LEN),
        order=_first(query, 'order'),
        q=_first(query, 'search', 'q') or '',
        filter=_first(query, 'filter') or '',
        filter_by=_first(query, 'filterBy') or '')
