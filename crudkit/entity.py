# -*- coding: utf-8 -*-
# Copyright (c) 2017 the Crudkit team, see AUTHORS.
# Licensed under the BSD License, see LICENSE for details.

"""Entities: identity plus an ordered projection of persistable fields."""

import re
import uuid
from collections import defaultdict, namedtuple
from copy import deepcopy
from datetime import date, datetime, time
from decimal import Decimal

from pytz import UTC


__all__ = [
    'Entity', 'Validatable', 'ValidationError', 'crud_validation', 'required_validation',
    'text_length_validation', 'regex_validation']


def _to_utc_isoformat(value):
    if value.tzinfo is None:
        value = UTC.localize(value)
    return value.astimezone(UTC).isoformat()


class ValidationError(namedtuple('ValidationError', ['message', 'field'])):
    """
    A validation failure for a single field, or for the whole entity when
    `field` is None. These are returned, never raised.
    """
    __slots__ = ()

    def __new__(cls, message, field=None):
        return super(ValidationError, cls).__new__(cls, message, field)

    def to_dict(self):
        return {'message': self.message, 'field': self.field}


class Validatable(object):
    """Capability of checking one's own state before it is persisted."""

    def validate(self):
        """
        Returns:
            list: A `ValidationError` for each problem found, or an empty
                list if the object can be persisted.
        """
        raise NotImplementedError


class Entity(Validatable):
    """
    Base class for persistable records.

    Subclasses list their persistable columns, in order, in `fields`. The
    identity lives in `id`, which is None until the record is saved::

        @text_length_validation('name', 1, 50)
        class Wine(Entity):
            fields = ('name', 'country', 'year')

        wine = Wine(name='Merlot', year=2009)
        wine.as_seq()  # [('name', 'Merlot'), ('country', None), ('year', 2009)]

    Validation rules are attached with the validation decorators defined in
    this module; override `validate` to add rules spanning several fields.
    """
    fields = ()
    type_casts = {
        uuid.UUID: str,
        Decimal: str,
        datetime: _to_utc_isoformat,
        date: lambda value: value.isoformat(),
        time: lambda value: value.isoformat(),
    }

    def __init__(self, id=None, **kwargs):
        unknown = set(kwargs).difference(self.fields)
        if unknown:
            raise TypeError('{} has no field(s): {}'.format(self.__class__.__name__, ', '.join(sorted(unknown))))
        self.id = id
        for name in self.fields:
            setattr(self, name, kwargs.get(name))

    @classmethod
    def from_row(cls, row):
        """
        Builds an entity from a result row, ignoring undeclared columns.

        Args:
            row (collections.Mapping): Column name and value pairs, such as
                `sqlalchemy.engine.Row._mapping`.
        """
        return cls(id=row.get('id'), **{name: row[name] for name in cls.fields if name in row})

    def as_seq(self):
        return [(name, getattr(self, name)) for name in self.fields]

    def validate(self):
        errors = []
        for name, validators in getattr(self, '_validators', {}).items():
            value = getattr(self, name, None)
            for val_dict in validators:
                if not val_dict['model_validator'](self, value):
                    errors.append(ValidationError(val_dict['validator_message'], name))
        return errors

    @classmethod
    def validator_spec(cls, name):
        """
        Returns the client side validation hints registered for `name`, e.g.
        ``{'maxLength': 50}``.
        """
        return {
            spec_key_name: spec_value
            for val_dict in getattr(cls, '_validators', {}).get(name, [])
            for spec_key_name, spec_value in val_dict.get('spec_kwargs', {}).items()
        }

    @property
    def _type_casts_for_to_dict(self):
        return defaultdict(lambda: lambda x: x, self.type_casts)

    def to_dict(self):
        def cast_type(value):
            return self._type_casts_for_to_dict[value.__class__](value)

        obj = {'_model': self.__class__.__name__, 'id': self.id}
        for name, value in self.as_seq():
            obj[name] = cast_type(value)
        return obj

    def from_dict(self, attrs):
        """
        Updates the fields named in `attrs`, skipping the identity and keys
        starting with an underscore.

        Raises:
            TypeError: If `attrs` names something that isn't a field.
        """
        for name, value in attrs.items():
            if name.startswith('_') or name == 'id':
                continue
            if name not in self.fields:
                raise TypeError('{} has no field: {}'.format(self.__class__.__name__, name))
            setattr(self, name, value)
        return self

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.id == other.id and self.as_seq() == other.as_seq()

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None

    def __repr__(self):
        """
        Useful string representation for logging.
        """
        # specifically using the string interpolation operator and the repr of
        # getattr so as to avoid any encode errors for non-ascii characters
        attr_names = ('id',) + tuple(self.fields)
        _kwarg_list = ' '.join('%s=%s' % (name, repr(getattr(self, name, 'undefined'))) for name in attr_names)
        return '<%s %s>' % (self.__class__.__name__, _kwarg_list)


class crud_validation(object):
    """
    Base class for adding validators to an entity.

    Validators are run by `Entity.validate`, and the optional spec keyword
    arguments are exposed to clients through `EntityCompanion.crud_spec`.
    """

    def __init__(self, attribute_name, model_validator, validator_message, **spec_kwargs):
        """

        Args:
            attribute_name (str): The attribute to which this validator applies.
            model_validator (callable): A callable that accepts the entity and
                the attribute value and returns False or None if invalid, or
                True if the value is valid.
            validator_message (str): Failure message if the validation fails.
            **spec_kwargs: The key/value pairs that should be added to the
                the crud spec for this attribute name. This generally supports
                making the same sorts of validations in a client (e.g.
                javascript).

        """
        self.attribute_name = attribute_name
        self.model_validator = model_validator
        self.validator_message = validator_message
        self.spec_kwargs = spec_kwargs

    def __call__(self, cls):
        if '_validators' not in cls.__dict__:
            # in case we subclass something with a _validators attribute
            cls._validators = deepcopy(getattr(cls, '_validators', {}))

        cls._validators.setdefault(self.attribute_name, []).append({
            'model_validator': self.model_validator,
            'validator_message': self.validator_message,
            'spec_kwargs': self.spec_kwargs
        })
        return cls


class required_validation(crud_validation):
    def __init__(self, attribute_name, message='This field is required.'):

        def model_validator(instance, value):
            if isinstance(value, str):
                return bool(value.strip())
            return value is not None

        crud_validation.__init__(self, attribute_name, model_validator, message, required=True)


class text_length_validation(crud_validation):
    def __init__(self, attribute_name, min_length=None, max_length=None,
                 min_text='The minimum length of this field is {0}.',
                 max_text='The maximum length of this field is {0}.',
                 allow_none=True):

        def model_validator(instance, text):
            if text is None:
                return allow_none
            text_length = len(str(text))
            return all([min_length is None or text_length >= min_length,
                        max_length is None or text_length <= max_length])

        kwargs = {}
        if min_length is not None:
            kwargs['minLength'] = min_length
            if min_text is not None:
                kwargs['minLengthText'] = min_text
        if max_length is not None:
            kwargs['maxLength'] = max_length
            if max_text is not None:
                kwargs['maxLengthText'] = max_text

        message = 'Length of value should be between {} and {} (inclusive; None means no min/max).'.format(
            min_length, max_length)
        crud_validation.__init__(self, attribute_name, model_validator, message, **kwargs)


class regex_validation(crud_validation):
    def __init__(self, attribute_name, regex, message):

        def regex_validator(instance, text):
            # a missing value is the business of required_validation
            if text is None:
                return True
            return re.search(regex, str(text)) is not None

        crud_validation.__init__(self, attribute_name, regex_validator, message,
                                 regexText=message, regexString=regex)
