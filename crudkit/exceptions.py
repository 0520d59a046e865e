# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Exceptions raised by crudkit."""

from functools import wraps

import structlog


__all__ = ['CrudException', 'ConfigurationError', 'log_exceptions']


log = structlog.get_logger()


class CrudException(Exception):
    pass


class ConfigurationError(CrudException):
    """
    Raised for programmer mistakes, such as referring to a column that the
    underlying table does not have. Not meant to be recovered from.
    """
    pass


def log_exceptions(fn):
    """
    A decorator that logs exceptions escaping the companion api methods.

    The original exception is re-raised unchanged, so storage errors reach
    the caller exactly as the database driver reported them.
    """
    @wraps(fn)
    def wrapped(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception:
            a = [x for x in (args or [])]
            kw = {k: v for k, v in (kwargs or {}).items()}
            log.error('Error calling {}.{} {!r} {!r}'.format(fn.__module__, fn.__qualname__, a, kw), exc_info=True)
            raise
    return wrapped
