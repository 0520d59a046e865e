# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Generic CRUD data access over SQLAlchemy Core."""

from crudkit._version import __version__  # noqa: F401

from crudkit.columns import *  # noqa: F401,F403
from crudkit.companion import *  # noqa: F401,F403
from crudkit.conditions import *  # noqa: F401,F403
from crudkit.database import *  # noqa: F401,F403
from crudkit.entity import *  # noqa: F401,F403
from crudkit.exceptions import *  # noqa: F401,F403
from crudkit.http import *  # noqa: F401,F403
from crudkit.query import *  # noqa: F401,F403
