"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apirouter.utils.env_config import env_config

PARAM_SOURCES = ('params', 'query', 'cookie', 'body', 'header')
VERSION_SOURCES = ('params', 'query', 'cookie', 'header')

DEFAULT_PARAM_ORDER = ['params', 'query', 'cookie', 'body', 'header']
DEFAULT_VERSION_ORDER = ['params', 'query', 'cookie', 'header']


def _check_sources(value: list[str], allowed: tuple) -> list[str]:
    unknown = [source for source in value if source not in allowed]
    if unknown:
        raise ValueError(f'Unknown request source(s) {unknown}, expected any of {list(allowed)}')
    return value


class RouterConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid', populate_by_name=True)

    param: str = Field(
        default_factory=lambda: env_config.get_str('API_VERSION_PARAM', 'v'),
        description='Name of the version parameter in path, query and cookie',
    )
    header: str | None = Field(
        default_factory=lambda: env_config.get_str('API_VERSION_HEADER', 'X-ApiVersion'),
        description='Request header carrying the version, None to skip headers',
    )
    response_header: str | None = Field(
        default_factory=lambda: env_config.get_str('API_VERSION_RESPONSE_HEADER', 'X-ApiVersion'),
        description='Response header set to the accepted version, None to disable',
    )
    pass_version: bool = Field(
        default_factory=lambda: env_config.get_bool('API_PASS_VERSION', True),
        description='Stamp incoming_version/accepted_version on request.state',
    )
    prefix: str | None = Field(
        default_factory=lambda: env_config.get_str('API_PREFIX', None),
        description='Path prefix used in the API map instead of the mount path',
    )
    param_order: list[str] = Field(
        default_factory=lambda: env_config.get_list('API_PARAM_ORDER', DEFAULT_PARAM_ORDER)
    )
    version_order: list[str] = Field(
        default_factory=lambda: env_config.get_list('API_VERSION_ORDER', DEFAULT_VERSION_ORDER)
    )
    param_map: str = Field(default_factory=lambda: env_config.get_str('API_PARAM_MAP', 'args'))
    version_validator: Callable | None = Field(
        None, description='Replaces the built-in version matcher: (incoming, accepted, request) -> bool'
    )
    validate_hook: Callable | None = Field(
        None, alias='validate', description='Fallback parameter validator for every endpoint'
    )
    error: Callable | None = Field(None, description='Fallback error hook for every endpoint')
    success: Callable | None = Field(None, description='Fallback success hook for every endpoint')
    redirect_slashes: bool = Field(True, description='Starlette trailing slash redirects')
    log_requests: bool = Field(False, description='Log every request handled by the router')

    @field_validator('param_order')
    @classmethod
    def _known_param_sources(cls, value: list[str]) -> list[str]:
        return _check_sources(value, PARAM_SOURCES)

    @field_validator('version_order')
    @classmethod
    def _known_version_sources(cls, value: list[str]) -> list[str]:
        return _check_sources(value, VERSION_SOURCES)

    @field_validator('param')
    @classmethod
    def _identifier_param(cls, value: str) -> str:
        if not value or not value.isidentifier():
            raise ValueError('Version parameter must be a valid identifier')
        return value
