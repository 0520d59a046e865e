# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

import sqlalchemy
from sqlalchemy import event
from sqlalchemy.schema import Column, MetaData, Table
from sqlalchemy.types import Boolean, Date, Float, Integer, String, Text

from crudkit import EntityCompanion, Entity, regex_validation, required_validation, text_length_validation


metadata = MetaData()

wine_table = Table(
    'wine', metadata,
    Column('id', Integer(), primary_key=True),
    Column('name', String(50), nullable=False, unique=True),
    Column('grapes', String(50)),
    Column('country', String(50)),
    Column('region', String(50)),
    Column('year', Integer()),
    Column('price', Float()),
    Column('organic', Boolean()),
    Column('bottled', Date()),
    Column('description', Text()))


@required_validation('name')
@text_length_validation('name', 1, 50)
@regex_validation('country', r'^[A-Za-z ]+$', 'Country names may only contain letters and spaces')
class Wine(Entity):
    fields = ('name', 'grapes', 'country', 'region', 'year', 'price', 'organic', 'bottled', 'description')


class WineCompanion(EntityCompanion):
    entity_class = Wine
    table_name = 'wine'
    default_order = 'name'
    filter_fields = ('name', 'grapes', 'country', 'region')


CELLAR = [
    dict(name='CHATEAU DE SAINT COSME', grapes='Grenache / Syrah', country='France', region='Southern Rhone',
         year=2009, price=25.5, organic=False),
    dict(name='LAN RIOJA CRIANZA', grapes='Tempranillo', country='Spain', region='Rioja',
         year=2006, price=12.0, organic=False),
    dict(name='MARGERUM SYBARITE', grapes='Sauvignon Blanc', country='USA', region='California Central Coast',
         year=2010, price=18.0, organic=True),
    dict(name='OWEN ROE EX UMBRIS', grapes='Syrah', country='USA', region='Washington',
         year=2009, price=29.0, organic=False),
    dict(name='REX HILL', grapes='Pinot Noir', country='USA', region='Oregon',
         year=2009, price=22.0, organic=True),
    dict(name='VITICCIO CLASSICO RISERVA', grapes='Sangiovese Merlot', country='Italy', region='Tuscany',
         year=2007, price=31.0, organic=False),
    dict(name='CHATEAU LE DOYENNE', grapes='Merlot', country='France', region='Bordeaux',
         year=2005, price=27.0, organic=False),
    dict(name='DOMAINE DU BOUSCAT', grapes='Merlot', country='France', region='Bordeaux',
         year=2009, price=15.0, organic=True),
    dict(name='BLOCK NINE', grapes='Pinot Noir', country='USA', region='California',
         year=2009, price=24.0, organic=False),
    dict(name='DOMAINE SERENE', grapes='Pinot Noir', country='USA', region='Oregon',
         year=2007, price=45.0, organic=False),
    dict(name='BODEGA LURTON', grapes='Pinot Gris', country='Argentina', region='Mendoza',
         year=2011, price=9.5, organic=False),
    dict(name='LES MORIZOTTES', grapes='Chardonnay', country='France', region='Burgundy',
         year=2009, price=35.0, organic=True),
]


def create_engine(db_path):
    engine = sqlalchemy.create_engine('sqlite+pysqlite:///' + str(db_path))
    event.listen(engine, 'connect', lambda conn, record: conn.execute('pragma foreign_keys=ON'))
    metadata.create_all(engine)
    return engine
