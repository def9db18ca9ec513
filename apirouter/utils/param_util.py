"""
Parameter spec parsing and value coercion.

A parameter is declared either with the compact string grammar

    TYPE            required scalar
    TYPE()          optional scalar without default
    TYPE(default)   optional scalar with a typed default
    TYPE[]          required array
    TYPE[](a,b,c)   optional array with a typed default list

or with a mapping holding the ParamDef fields. Request values always arrive
as strings (or lists of strings), so every type owns a coercer that turns a
raw value into the typed value or None.
"""

import re
from collections.abc import Mapping
from typing import Any, Callable, Dict

from pydantic import ValidationError

from apirouter.models.param_def_model import ParamDef, ParamType
from apirouter.utils.error_codes import ErrorCode, ErrorMessages
from apirouter.utils.error_util import ConfigurationError
from apirouter.utils.version_util import parse_integer, parse_number

_SPEC_GRAMMAR = re.compile(r'^\s*(\w+)\s*(\[\])?\s*(\((.*)\))?\s*$', re.DOTALL)

TYPE_ALIASES: Dict[str, ParamType] = {
    'string': ParamType.STRING,
    'number': ParamType.NUMBER,
    'float': ParamType.NUMBER,
    'double': ParamType.NUMBER,
    'integer': ParamType.INTEGER,
    'short': ParamType.INTEGER,
    'bool': ParamType.BOOLEAN,
    'boolean': ParamType.BOOLEAN,
}

_TRUE = ('true', 't', 'yes', 'y', '1')
_FALSE = ('false', 'f', 'no', 'n', '0')


def _coerce_string(value: Any) -> str | None:
    value = '' if value is None else str(value)
    return value if len(value) else None


def _coerce_boolean(value: Any) -> bool | None:
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


COERCERS: Dict[ParamType, Callable[[Any], Any]] = {
    ParamType.STRING: _coerce_string,
    ParamType.NUMBER: parse_number,
    ParamType.INTEGER: parse_integer,
    ParamType.BOOLEAN: _coerce_boolean,
}


def resolve_type(type_name: Any) -> ParamType:
    """Map a declared type name or alias onto ParamType."""
    if isinstance(type_name, ParamType):
        return type_name
    resolved = TYPE_ALIASES.get(str(type_name or '').strip().lower())
    if resolved is None:
        raise ConfigurationError(
            f'Invalid type defined for parameter: {type_name}', ErrorCode.PRM_INVALID_TYPE
        )
    return resolved


def parse_value(type_name: Any, value: Any, array: bool = False) -> Any:
    """Coerce a raw request value to the declared type.

    Lists are coerced element by element; for arrays a string is split on
    commas first. Values that do not parse come back as None.
    """
    param_type = resolve_type(type_name)
    if isinstance(value, (list, tuple)):
        return [parse_value(param_type, entry, False) for entry in value]
    if array and isinstance(value, str) and value:
        return [parse_value(param_type, entry.strip(), False) for entry in value.split(',')]
    return COERCERS[param_type](value)


def parse_required(value: Any) -> bool:
    """Normalize the textual and numeric spellings accepted for `required`."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f'Invalid required flag: {value!r}', ErrorCode.PRM_INVALID_SPEC)


def _parse_string_spec(spec: str) -> ParamDef:
    match = _SPEC_GRAMMAR.match(spec)
    if not match:
        raise ConfigurationError(f'Invalid parameter spec: {spec!r}', ErrorCode.PRM_INVALID_SPEC)
    param_type = resolve_type(match.group(1))
    array = bool(match.group(2))
    required = match.group(3) is None
    default = None
    if not required and match.group(4) is not None and match.group(4).strip():
        default = parse_value(param_type, match.group(4), array)
    return ParamDef(type=param_type, array=array, default=default, required=required)


def _parse_mapping_spec(spec: Mapping) -> ParamDef:
    data = dict(spec)
    param_type = resolve_type(data.pop('type', None))
    array = bool(data.pop('array', False))
    default = data.pop('default', None)
    if default is not None and (isinstance(default, str) or array):
        default = parse_value(param_type, default, array)
    if 'required' in data and data['required'] is not None:
        required = parse_required(data.pop('required'))
    else:
        data.pop('required', None)
        required = default is None
    try:
        return ParamDef(type=param_type, array=array, default=default, required=required, **data)
    except ValidationError as e:
        raise ConfigurationError(
            f'{ErrorMessages.INCOMPATIBLE_PARAM}: {e}', ErrorCode.PRM_INVALID_SPEC
        ) from e


def parse_param(spec: Any) -> ParamDef:
    """Convert a string or mapping parameter spec into a ParamDef."""
    if isinstance(spec, ParamDef):
        return spec.model_copy()
    if isinstance(spec, str):
        return _parse_string_spec(spec)
    if isinstance(spec, Mapping):
        return _parse_mapping_spec(spec)
    raise ConfigurationError(ErrorMessages.INCOMPATIBLE_PARAM, ErrorCode.PRM_INVALID_SPEC)


def is_empty(value: Any) -> bool:
    """None and empty lists count as "not set"; 0, False and '' do not."""
    if value is None:
        return True
    return isinstance(value, list) and not value
