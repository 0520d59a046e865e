# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""SQL and naming related utilities."""

import re
import uuid


__all__ = ['entity_name_for', 'fingerprint_sql', 'split_names', 'NAMESPACE_SQL']


NAMESPACE_SQL = uuid.UUID('75c7e3be-a5c7-414d-bc66-d64ae5d03f3d')
_single_quote_whitespace = re.compile(r"\s+(?=([^']*'[^']*')*[^']*$)")
_name_separator = re.compile(r'\s*,\s*')


def fingerprint_sql(sqltext):
    """
    Identifies a statement independently of its layout, for logging.

    Runs of whitespace outside single quotes collapse to one space before
    hashing, so the same statement gets the same fingerprint however it was
    formatted. Whitespace inside quoted literals is significant.

    Returns:
        str: A 32 character hex uuid5 in the `NAMESPACE_SQL` namespace.
    """
    sqltext = _single_quote_whitespace.sub(' ', sqltext).strip()
    return uuid.uuid5(NAMESPACE_SQL, sqltext).hex


def split_names(names):
    """
    Splits a comma separated list of names, as found in query strings.

    >>> split_names('name, country ,region')
    ['name', 'country', 'region']

    Lists and tuples are returned as lists, and empty values yield an empty
    list.
    """
    if not names:
        return []
    if isinstance(names, str):
        names = _name_separator.split(names.strip())
    return [name for name in names if name]


def entity_name_for(table_name):
    """
    >>> entity_name_for('wine')
    'Wine'
    """
    return table_name[:1].upper() + table_name[1:]
