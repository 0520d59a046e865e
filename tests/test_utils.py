# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Tests for :mod:`crudkit.utils` module."""

import pytest

from crudkit.utils import entity_name_for, fingerprint_sql, split_names


def test_fingerprint_sql():
    assert fingerprint_sql("select * from user where name = 'Foo    Bar'") == \
        'b23bfc4cc7ad535ba6463473669f6597'

    assert fingerprint_sql('''
        select *
        from user
        where name = 'Foo    Bar'
        ''') == \
        'b23bfc4cc7ad535ba6463473669f6597'


@pytest.mark.parametrize('names,expected', [
    (None, []),
    ('', []),
    ('name', ['name']),
    ('name, country ,region', ['name', 'country', 'region']),
    (' name,,country ', ['name', 'country']),
    (('name', 'country'), ['name', 'country']),
])
def test_split_names(names, expected):
    assert expected == split_names(names)


@pytest.mark.parametrize('table_name,expected', [
    ('wine', 'Wine'),
    ('grape_variety', 'Grape_variety'),
    ('', ''),
])
def test_entity_name_for(table_name, expected):
    assert expected == entity_name_for(table_name)
