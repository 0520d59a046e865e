# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

import pytest

from crudkit import ColumnRegistry, Database
from tests import CELLAR, Wine, WineCompanion, create_engine


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(tmp_path / 'crudkit.db')
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    return Database(engine, ColumnRegistry(engine, tables=['wine']))


@pytest.fixture
def wines(db):
    return WineCompanion(db)


@pytest.fixture
def cellar(wines):
    saved = {}
    for attrs in CELLAR:
        result = wines.save(Wine(**attrs))
        assert result.ok, result.errors
        saved[result.entity.name] = result.entity
    return saved
