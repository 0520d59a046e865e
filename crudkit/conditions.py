# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""
Translation of free-text search expressions into SQL conditions.

A search expression is a list of terms separated by whitespace or commas.
Double quotes group several words into a single term. Each term is either a
bare word, which matches any text column containing it, or a comparison
against a named column::

    merlot year>=2005 country:"new zealand" price:10..25

The following operators are understood:

- ':' - contains (text columns, case insensitive), equality otherwise, or an
    inclusive range when the value looks like "low..high"
- '=' - equality (case insensitive for text columns)
- '!=' or '<>' - inequality (case insensitive for text columns)
- '>', '>=', '<', '<=' - ordering comparisons

Terms that cannot be used, such as unknown columns or values that cannot be
converted to the column's type, are dropped. All remaining terms must match.
Values are always sent to the database as bound parameters.
"""

import re
from datetime import date, datetime, time

import structlog
from sqlalchemy import and_, func, or_


__all__ = ['ConditionBuilder']


log = structlog.get_logger()


OPERATORS = r'>=|<=|<>|!=|=|:|>|<'

RE_WORD = re.compile(r'(?:"[^"]*"|[^\s,"])+')
RE_FIELD = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
RE_LEADING_OPERATOR = re.compile(r'^(?:' + OPERATORS + ')')
RE_TRAILING_OPERATOR = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(?:' + OPERATORS + ')$')
RE_TERM = re.compile(r'^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?P<op>' + OPERATORS + ')(?P<value>.*)$', re.S)
RE_RANGE = re.compile(r'^(?P<low>.*?)\.\.(?P<high>.*)$', re.S)

TRUE_VALUES = frozenset(['true', 't', 'yes', 'y', '1'])
FALSE_VALUES = frozenset(['false', 'f', 'no', 'n', '0'])


def _to_number(value):
    try:
        return int(value)
    except ValueError:
        return float(value)


def _to_boolean(value):
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    elif lowered in FALSE_VALUES:
        return False
    raise ValueError('Not a boolean: {!r}'.format(value))


converters = {
    'int': _to_number,
    'float': float,
    'string': lambda value: value,
    'boolean': _to_boolean,
    'date': lambda value: date.fromisoformat(value),
    'datetime': lambda value: datetime.fromisoformat(value),
    'time': lambda value: time.fromisoformat(value),
}


class ConditionBuilder(object):

    @classmethod
    def tokenize(cls, q):
        """
        Splits a search expression into terms.

        Spaces around an operator outside of quotes are dropped, so that
        "year >= 2009" is the single term "year>=2009". Quoted text is kept
        exactly as typed, without its quotes.

        Raises:
            ValueError: If the expression has an unterminated quote.
        """
        if q.count('"') % 2:
            raise ValueError('No closing quotation in {!r}'.format(q))

        words = RE_WORD.findall(q)
        terms = []
        i = 0
        while i < len(words):
            term = words[i]
            if RE_FIELD.match(term) and i + 1 < len(words) and RE_LEADING_OPERATOR.match(words[i + 1]):
                i += 1
                term += words[i]
            if RE_TRAILING_OPERATOR.match(term) and i + 1 < len(words):
                i += 1
                term += words[i]
            term = term.replace('"', '')
            if term:
                terms.append(term)
            i += 1
        return terms

    @classmethod
    def build(cls, q, columns):
        """
        Translates the search expression `q` into a SQL condition.

        Args:
            q (str): The free-text search expression entered by a user.
            columns (list): The `ColumnInfo` of each column of the table being
                searched.

        Returns:
            sqlalchemy.sql.ClauseElement: The condition, or None if nothing
                usable could be found in `q`.
        """
        if not q or not q.strip():
            return None

        try:
            terms = cls.tokenize(q)
        except ValueError:
            log.warning('ignoring malformed search expression', q=q, exc_info=True)
            return None

        clauses = []
        for term in terms:
            clause = cls._build_term(term, columns)
            if clause is None:
                log.debug('dropping unusable search term', term=term)
            else:
                clauses.append(clause)

        if not clauses:
            return None
        elif len(clauses) == 1:
            return clauses[0]
        return and_(*clauses)

    @classmethod
    def _build_term(cls, term, columns):
        match = RE_TERM.match(term)
        if not match:
            if RE_LEADING_OPERATOR.match(term):
                return None
            return cls._build_bare_term(term, columns)

        info = cls._find_column(match.group('field'), columns)
        if info is None:
            return None

        value = match.group('value').strip()
        if not value:
            return None
        return cls._build_comparison(info, match.group('op'), value)

    @classmethod
    def _find_column(cls, name, columns):
        lowered = name.lower()
        for info in columns:
            if info.name.lower() == lowered:
                return info
        return None

    @classmethod
    def _build_bare_term(cls, term, columns):
        clauses = [func.lower(info.column).like('%' + term.lower() + '%') for info in columns if info.is_text]
        try:
            number = _to_number(term)
        except ValueError:
            pass
        else:
            clauses.extend(info.column == number for info in columns if info.is_numeric)

        if not clauses:
            return None
        elif len(clauses) == 1:
            return clauses[0]
        return or_(*clauses)

    @classmethod
    def _convert(cls, info, value):
        converter = converters.get(info.kind)
        if converter is None:
            return None
        try:
            return converter(value)
        except ValueError:
            return None

    @classmethod
    def _build_comparison(cls, info, op, value):
        column = info.column

        if op == ':':
            if info.is_text:
                return func.lower(column).like('%' + value.lower() + '%')
            match = RE_RANGE.match(value)
            if match and (info.is_numeric or info.is_temporal):
                return cls._build_range(info, match.group('low').strip(), match.group('high').strip())
            op = '='

        if op in ('=', '!=', '<>'):
            if info.is_text:
                column, value = func.lower(column), value.lower()
            else:
                value = cls._convert(info, value)
                if value is None:
                    return None
            return column == value if op == '=' else column != value

        if info.kind == 'boolean':
            return None
        if not info.is_text:
            value = cls._convert(info, value)
            if value is None:
                return None

        return {
            '>': lambda field, val: field > val,
            '>=': lambda field, val: field >= val,
            '<': lambda field, val: field < val,
            '<=': lambda field, val: field <= val,
        }[op](column, value)

    @classmethod
    def _build_range(cls, info, low, high):
        clauses = []
        if low:
            low = cls._convert(info, low)
            if low is None:
                return None
            clauses.append(info.column >= low)
        if high:
            high = cls._convert(info, high)
            if high is None:
                return None
            clauses.append(info.column <= high)

        if not clauses:
            return None
        elif len(clauses) == 1:
            return clauses[0]
        return and_(*clauses)
