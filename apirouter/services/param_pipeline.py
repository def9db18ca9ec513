"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from fastapi.responses import Response

from apirouter.models.endpoint_config_model import EndpointConfig
from apirouter.models.param_def_model import ParamDef, ParamType
from apirouter.utils.error_codes import ErrorCode, ErrorMessages
from apirouter.utils.error_util import ConfigurationError, ParamExtractionError
from apirouter.utils.hook_util import call_hook
from apirouter.utils.param_util import is_empty, parse_value
from apirouter.utils.response_util import (
    extraction_error_payload,
    missing_params_payload,
    respond_invalid_params,
)

logger = logging.getLogger('apirouter.verifier')


def _multi_to_dict(multi) -> Dict[str, Any]:
    """Flatten a MultiDict, keeping repeated keys as lists."""
    out: Dict[str, Any] = {}
    for key in multi.keys():
        values = multi.getlist(key)
        out[key] = values[0] if len(values) == 1 else list(values)
    return out


async def _read_body(request: Request) -> Mapping:
    content_type = request.headers.get('content-type', '').lower()
    body = await request.body()
    if 'application/x-www-form-urlencoded' in content_type or 'multipart/form-data' in content_type:
        try:
            form = await request.form()
        except Exception as e:
            raise ParamExtractionError(f'{ErrorMessages.INVALID_BODY}: {e}', 'body') from e
        return _multi_to_dict(form)
    if not body:
        return {}
    if 'json' not in content_type:
        return {}
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ParamExtractionError(f'{ErrorMessages.INVALID_BODY}: {e}', 'body') from e
    return data if isinstance(data, dict) else {}


async def collect_sources(request: Request, order: Iterable[str]) -> Dict[str, Mapping]:
    """Read every configured request location once, in priority order."""
    sources: Dict[str, Mapping] = {}
    for source in order:
        if source == 'params':
            sources[source] = dict(request.path_params)
        elif source == 'query':
            sources[source] = _multi_to_dict(request.query_params)
        elif source == 'cookie':
            sources[source] = dict(request.cookies)
        elif source == 'body':
            sources[source] = await _read_body(request)
        elif source == 'header':
            sources[source] = request.headers
        else:
            raise ConfigurationError(f'Unknown parameter source: {source}')
    return sources


def get_params(config: EndpointConfig, sources: Mapping[str, Mapping]) -> Dict[str, Any]:
    """Coerce declared parameters from the request, first source found wins."""
    params: Dict[str, Any] = {}
    for source in config.param_order:
        values = sources.get(source)
        if not values:
            continue
        for name, param in config.params.items():
            if params.get(name) is not None or name not in values:
                continue
            params[name] = parse_value(param.type, values[name], param.array)
    return params


def _out_of_bounds(param: ParamDef, value: Any, limit: float, above: bool) -> bool:
    items = value if isinstance(value, list) else [value]
    for item in items:
        if item is None:
            continue
        if param.type == ParamType.STRING:
            measured = len(item)
        elif param.type in (ParamType.NUMBER, ParamType.INTEGER):
            measured = item
        else:
            return False
        if (measured > limit) if above else (measured < limit):
            return True
    return False


async def check_params(config: EndpointConfig, params: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Verify required, min and max constraints, or the custom validator.

    Returns a map of parameter name to {type, error[, max|min]}; empty when
    every parameter passed.
    """
    errors: Dict[str, Dict[str, Any]] = {}
    for name, param in config.params.items():
        value = params.get(name)
        if param.validate_hook is not None:
            error = await call_hook(param.validate_hook, value, name, param)
            if error:
                errors[name] = {'type': param.type.value, 'error': error}
            continue
        if param.required and is_empty(value):
            errors[name] = {'type': param.type.value, 'error': ErrorMessages.NOT_SET}
        if is_empty(value):
            continue
        if param.max is not None and _out_of_bounds(param, value, param.max, above=True):
            errors[name] = {'type': param.type.value, 'error': ErrorMessages.EXCEEDS_MAX, 'max': param.max}
        if param.min is not None and _out_of_bounds(param, value, param.min, above=False):
            errors[name] = {'type': param.type.value, 'error': ErrorMessages.BELOW_MIN, 'min': param.min}
    return errors


def fill_params(config: EndpointConfig, params: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults to every declared parameter that is still unset."""
    for name, param in config.params.items():
        if params.get(name) is None:
            default = param.default
            params[name] = list(default) if isinstance(default, list) else default
    return params


class ParamPipeline:
    """Extract, check and fill the declared parameters of one endpoint."""

    async def verify(self, request: Request, config: EndpointConfig) -> tuple[bool, Optional[Response]]:
        """Run the pipeline for a request.

        Returns (passed, response). A response means the request was answered
        (422 or a hook's response) and the handler chain must not run.
        """
        try:
            sources = await collect_sources(request, config.param_order)
            params = get_params(config, sources)
        except (ParamExtractionError, ConfigurationError) as e:
            logger.warning(
                f'[{e.error_code}] Parameter extraction failed for {request.method} {request.url.path}: {e}'
            )
            if config.error is not None:
                return False, await call_hook(config.error, e, request)
            return False, respond_invalid_params(extraction_error_payload(e))

        errors = await check_params(config, params)
        if errors:
            logger.info(
                f'[{ErrorCode.PRM_VALIDATION_FAILED}] Rejected {request.method} {request.url.path}: '
                f'invalid parameters {sorted(errors)}'
            )
            if config.error is not None:
                return False, await call_hook(config.error, errors, request)
            return False, respond_invalid_params(missing_params_payload(errors))

        setattr(request.state, config.param_map, fill_params(config, params))
        if config.success is not None:
            return True, await call_hook(config.success, request)
        return True, None
