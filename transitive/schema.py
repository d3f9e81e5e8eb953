"""
This library provides a small JSON-schema style builder and the validator that
checks project file content against schemas built with it.
"""
import inspect
import re
from enum import Enum, auto
from typing import Any, Optional, Union

import stringcase


class SchemaType(Enum):
    OBJECT = auto()
    ARRAY = auto()
    STRING = auto()
    INTEGER = auto()
    BOOLEAN = auto()
    NONE = auto()


def _is_object(thing: Any) -> bool:
    return isinstance(thing, dict)


def _is_array(thing: Any) -> bool:
    return isinstance(thing, list)


def _is_string(thing: Any) -> bool:
    return isinstance(thing, str)


def _is_integer(thing: Any) -> bool:
    # ``True`` is an int to Python but not to a schema.
    return isinstance(thing, int) and not isinstance(thing, bool)


def _is_boolean(thing: Any) -> bool:
    return isinstance(thing, bool)


class Schema(object):
    def __init__(self, of_type: SchemaType, default_value=None):
        self._spec = {}
        if of_type is not SchemaType.NONE:
            self._spec['type'] = of_type.name.lower()
        if default_value is not None:
            self.default(default_value)

    def enum(self, *values):
        return self._set(values)

    def default(self, value):
        return self._set(value)

    def description(self, description: str):
        return self._set(description)

    def spec(self):
        return self._spec

    def _set(self, value, name=None):
        if name is None:
            name = stringcase.camelcase(inspect.stack()[1].function)
        self._spec[name] = Schema._to_spec(value)
        return self

    @staticmethod
    def _to_spec(value: Any) -> Any:
        if isinstance(value, Schema):
            value = value.spec()
        if isinstance(value, (list, tuple)):
            value = [Schema._to_spec(value) for value in value]
        if isinstance(value, dict):
            value = {key: Schema._to_spec(value) for key, value in value.items()}
        return value


class StringSchema(Schema):
    def __init__(self, min_length: Optional[int] = None, pattern: Optional[str] = None,
                 default_value: str = None):
        super().__init__(of_type=SchemaType.STRING, default_value=default_value)
        if min_length is not None:
            self.min_length(min_length)
        if pattern is not None:
            self.pattern(pattern)

    def min_length(self, value: int):
        return self._set(value)

    def pattern(self, value: str):
        return self._set(value)


class IntegerSchema(Schema):
    def __init__(self, minimum: Optional[int] = None, default_value: int = None):
        super().__init__(of_type=SchemaType.INTEGER, default_value=default_value)
        if minimum is not None:
            self.minimum(minimum)

    def minimum(self, value: int):
        return self._set(value)


class BooleanSchema(Schema):
    def __init__(self, default_value: bool = None):
        super().__init__(of_type=SchemaType.BOOLEAN, default_value=default_value)


class ObjectSchema(Schema):
    def __init__(self, additional_properties: Union[bool, dict, Schema, None] = None, default_value=None):
        super().__init__(of_type=SchemaType.OBJECT, default_value=default_value)
        if additional_properties is not None:
            self.additional_properties(additional_properties)

    def properties(self, **kwargs):
        return self._set(kwargs)

    def required(self, *names: str):
        return self._set(names)

    def additional_properties(self, value: Union[bool, dict, Schema]):
        return self._set(value)


class ArraySchema(Schema):
    def __init__(self, items: Union[dict, Schema, None] = None, default_value=None):
        super().__init__(of_type=SchemaType.ARRAY, default_value=default_value)
        if items is not None:
            self.items(items)

    def items(self, value: Union[dict, Schema]):
        return self._set(value)


class OneOfSchema(Schema):
    def __init__(self, *schemas: Union[dict, Schema]):
        super().__init__(of_type=SchemaType.NONE)
        self._set(schemas, name='oneOf')


_empty_schema = {}


class SchemaValidator(object):
    """
    This class represents an object that wraps a schema definition and uses it to validate
    values.  After a call to ``validate()``, the ``error`` attribute carries the reason
    for any failure.
    """
    def __init__(self, schema: Union[Schema, dict]):
        """
        This function creates a new schema validator around a schema which may be specified
        as either a ``Schema`` object or a raw dictionary.

        :param schema: the schema to wrap.
        """
        if isinstance(schema, Schema):
            schema = schema.spec()

        self.error = None
        self._schema = schema

    def validate(self, value, path: str = '') -> bool:
        """
        A function that validates the given value against our schema.

        :param value: the value to validate.
        :param path: an optional path to the value, used in error messages.
        :return: ``True`` if the value is valid or ``False`` if not.
        """
        path = '#' if path == '' else f'#/{path}'
        self.error = self._validate(value, schema=self._schema, path=path)

        return self.error is None

    def _validate(self, value, schema, path):
        for key in schema.keys():
            call = getattr(self, f'_validate_{stringcase.snakecase(key)}')
            error = call(value, schema, schema[key], path)

            if error is not None:
                if ' constraint: ' not in error:
                    error = f'{"#/" if path == "#" else path} violates the "{key}" constraint: {error}'

                return error

        return None

    # noinspection PyUnusedLocal
    def _validate_type(self, value, schema, constraint, path):
        checks = {
            'object': (_is_object, 'an object'),
            'array': (_is_array, 'an array'),
            'string': (_is_string, 'a string'),
            'integer': (_is_integer, 'an integer'),
            'boolean': (_is_boolean, 'a boolean')
        }
        check, text = checks[constraint]

        return None if check(value) else f'it is not {text}.'

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_enum(self, value, schema, constraint, path):
        if value not in constraint:
            return f'it is not one of [{", ".join(map(str, constraint))}].'

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_min_length(self, value, schema, constraint, path):
        if _is_string(value) and len(value) < constraint:
            return f'the string is shorter than {constraint}.'

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_pattern(self, value, schema, constraint, path):
        if _is_string(value) and not re.match(constraint, value):
            return f'it does not match the \'{constraint}\' pattern.'

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_minimum(self, value, schema, constraint, path):
        if _is_integer(value) and value < constraint:
            return f'{value} is less than the minimum of {constraint}.'

    def _validate_properties(self, value, schema, constraint, path):
        return self._handle_property_validation(
            value, constraint, self._get_additional_schema(schema), path
        )

    # noinspection PyUnusedLocal
    def _validate_additional_properties(self, value, schema, constraint, path):
        # if present, the properties constraint will do the real validation.
        if 'properties' in schema:
            return None

        return self._handle_property_validation(value, _empty_schema, self._get_additional_schema(schema), path)

    @staticmethod
    def _get_additional_schema(schema):
        additional = schema['additionalProperties'] if 'additionalProperties' in schema else True

        if _is_boolean(additional):
            additional = _empty_schema if additional else None

        return additional

    def _handle_property_validation(self, value, specific_props, additional_props, path):
        if not _is_object(value):
            return None

        for name, child in value.items():
            name = str(name)
            schema = specific_props[name] if name in specific_props else additional_props

            if schema is None:
                return f'the {name} property is not allowed here.'

            error = self._validate(child, schema, f'{path}/{name}')

            if error is not None:
                return error

        return None

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_required(self, value, schema, constraint, path):
        if _is_object(value):
            for required in constraint:
                if required not in value:
                    return f'it is missing the {required} property.'

    # noinspection PyUnusedLocal
    def _validate_items(self, value, schema, constraint, path):
        if _is_array(value):
            for index, item in enumerate(value):
                error = self._validate(item, constraint, f'{path}[{index}]')

                if error is not None:
                    return error

    # noinspection PyUnusedLocal
    def _validate_one_of(self, value, schema, constraint, path):
        first = None
        errors = []

        for index, child_schema in enumerate(constraint):
            error = self._validate(value, child_schema, path)

            if error is None:
                if first is not None:
                    return f'the value was accepted by schemas {first} and {index}.'

                first = index
            else:
                errors.append('\n    ' + error)

        if first is None:
            path = '#/' if path == '#' else path
            return f'{path} violates the "oneOf" constraint: the value was not accepted by any of the child' \
                   f' schemas:{"".join(errors)}'

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_default(self, value, schema, constraint, path):
        # default values are info-only
        pass

    # noinspection PyMethodMayBeStatic,PyUnusedLocal
    def _validate_description(self, value, schema, constraint, path):
        # descriptions are info-only
        pass
