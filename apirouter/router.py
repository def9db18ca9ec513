"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import partialmethod
from typing import Any, Callable, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.routing import BaseRoute, Match, NoMatchFound, Route, Router, compile_path

from apirouter.middleware.request_logging_middleware import RequestLoggingMiddleware
from apirouter.models.endpoint_config_model import EndpointConfig, EndpointInput
from apirouter.models.registration_model import RegistrationRequest
from apirouter.models.router_config_model import PARAM_SOURCES, RouterConfig
from apirouter.models.version_spec_model import VersionSpec
from apirouter.services.endpoint_registry import EndpointRegistry
from apirouter.services.param_pipeline import ParamPipeline
from apirouter.services.version_resolver import VersionResolver
from apirouter.utils.error_codes import ErrorCode, ErrorMessages
from apirouter.utils.error_util import ConfigurationError
from apirouter.utils.hook_util import call_handler
from apirouter.utils.logging_util import ensure_logging
from apirouter.utils.param_util import parse_param
from apirouter.utils.response_util import respond_api_map
from apirouter.utils.version_util import parse_version_specs

logger = logging.getLogger('apirouter.router')

METHODS = ('GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS', 'TRACE', 'ALL')

_UNSET = object()


def _is_version_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, str, re.Pattern, VersionSpec)):
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_version_value(item) for item in value)
    return False


def _to_endpoint_input(api: Any) -> EndpointInput:
    if isinstance(api, EndpointInput):
        return api
    try:
        return EndpointInput.model_validate(dict(api))
    except ValidationError as e:
        raise ConfigurationError(f'Invalid endpoint configuration: {e}', ErrorCode.RTR_INVALID_CONFIG) from e


def classify_registration(path: Any, args: tuple, version: Any = _UNSET, api: Any = None) -> RegistrationRequest:
    """Sort the arguments of a registration call into path, versions, config and handlers.

    Versions and the endpoint config have to come before the first handler.
    Anything that fits none of the four slots is a configuration error.
    """
    if isinstance(path, bool) or not isinstance(path, (str, re.Pattern)):
        raise ConfigurationError(
            f'A path string or pattern is required, got {type(path).__name__}', ErrorCode.RTR_MISSING_PATH
        )
    raw_versions = _UNSET
    handlers: List[Callable] = []
    for arg in args:
        if callable(arg) and not isinstance(arg, (Mapping, EndpointInput)):
            handlers.append(arg)
            continue
        if handlers:
            raise ConfigurationError(
                f'Versions and endpoint configs must precede handlers, got {arg!r}',
                ErrorCode.RTR_MISPLACED_VERSION,
            )
        if isinstance(arg, (Mapping, EndpointInput)):
            if api is not None:
                raise ConfigurationError('Only one endpoint config per registration', ErrorCode.RTR_DUPLICATE_CONFIG)
            api = arg
        elif _is_version_value(arg):
            if raw_versions is not _UNSET:
                raise ConfigurationError(
                    'Pass several versions as one list, not as separate arguments',
                    ErrorCode.RTR_UNSUPPORTED_ARGUMENT,
                )
            raw_versions = arg
        else:
            raise ConfigurationError(
                f'Unsupported registration argument: {arg!r}', ErrorCode.RTR_UNSUPPORTED_ARGUMENT
            )
    if version is not _UNSET:
        if raw_versions is not _UNSET:
            raise ConfigurationError('Version given twice', ErrorCode.RTR_UNSUPPORTED_ARGUMENT)
        raw_versions = version
    return RegistrationRequest(
        path=path,
        versions=parse_version_specs(None if raw_versions is _UNSET else raw_versions),
        api=_to_endpoint_input(api) if api is not None else None,
        handlers=handlers,
    )


_EXHAUSTED = 'apirouter.exhausted'
_PARENT_PARAMS = 'apirouter.parent_path_params'


def _route_path(scope: dict) -> str:
    path = scope['path']
    root_path = scope.get('root_path', '')
    if not root_path or not path.startswith(root_path) or path == root_path:
        return path
    if path[len(root_path)] == '/':
        return path[len(root_path):]
    return path


def _skip(scope: dict, entry: Any) -> bool:
    return any(entry is tried for tried in scope.get(_EXHAUSTED, ()))


class EntryRoute(Route):
    """Starlette route bound to a RouteEntry.

    Stops matching once the entry had its turn on a request, so a fall-through
    reaches the routes registered after it.
    """

    def __init__(self, path: str, entry: 'RouteEntry'):
        super().__init__(path, entry, name=entry.key)
        self.entry = entry

    def matches(self, scope):
        if _skip(scope, self.entry):
            return Match.NONE, {}
        match, child_scope = super().matches(scope)
        if match != Match.NONE:
            child_scope[_PARENT_PARAMS] = scope.get('path_params', {})
        return match, child_scope


class PatternRoute(BaseRoute):
    """Route matching the request path against a regular expression.

    Named groups become path params, which is how the version segment of a
    versioned pattern reaches the resolver.
    """

    def __init__(self, pattern: re.Pattern, entry: 'RouteEntry'):
        self.pattern = pattern
        self.path = pattern.pattern
        self.entry = entry
        self.app = entry
        self.name = entry.key

    def matches(self, scope):
        if scope['type'] != 'http' or _skip(scope, self.entry):
            return Match.NONE, {}
        match = self.pattern.search(_route_path(scope))
        if not match:
            return Match.NONE, {}
        parent = scope.get('path_params', {})
        path_params = dict(parent)
        path_params.update({k: v for k, v in match.groupdict().items() if v is not None})
        return Match.FULL, {'endpoint': self.app, 'path_params': path_params, _PARENT_PARAMS: parent}

    def url_path_for(self, name: str, **path_params: Any):
        raise NoMatchFound(name, path_params)

    async def handle(self, scope, receive, send):
        await self.app(scope, receive, send)


@dataclass
class Candidate:
    """One registration on a path: its method, versions, config and handler chain."""

    method: str
    versions: List[VersionSpec]
    config: Optional[EndpointConfig]
    handlers: List[Callable]

    def accepts_method(self, method: str) -> bool:
        return self.method in (method, 'ALL') or (method == 'HEAD' and self.method == 'GET')


@dataclass(eq=False)
class RouteEntry:
    """Routing table entry of one logical path.

    Both the literal path and its version-prefixed twin dispatch here; the
    candidates are tried in registration order. When none of them answers,
    routing resumes with the routes after this entry.
    """

    router: 'VersionRouter'
    key: str
    path: Any
    versioned_path: Any
    candidates: List[Candidate] = field(default_factory=list)

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive=receive)
        response = await self.router.dispatch(request, self)
        if response is None:
            await self.router.fall_through(request, self, send)
            return
        await response(scope, receive, send)


def _as_response(result: Any) -> Optional[Response]:
    if result is None or isinstance(result, Response):
        return result
    if isinstance(result, (dict, list)):
        return JSONResponse(content=result)
    if isinstance(result, bytes):
        return Response(content=result)
    return PlainTextResponse(str(result))


class VersionRouter:
    """Router adding version resolution and parameter verification to Starlette routing.

    Every registration creates the literal path and a `/v{version}` prefixed
    twin. A request on either is offered to the registrations of that path in
    order; the first one whose versions accept the request and whose handler
    chain returns a response answers it.

        router = VersionRouter()

        @router.get('/users', 1, {'params': {'limit': 'integer(20)'}})
        async def list_users(request):
            return {'limit': request.state.args['limit']}

        app.mount('/', router)
    """

    def __init__(self, config: Optional[RouterConfig] = None, **overrides: Any):
        try:
            if config is None:
                config = RouterConfig(**overrides)
            elif overrides:
                config = RouterConfig(**{**config.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f'Invalid router configuration: {e}', ErrorCode.RTR_INVALID_CONFIG) from e
        ensure_logging()
        self.config = config
        self.registry = EndpointRegistry(param=config.param, prefix=config.prefix)
        self.resolver = VersionResolver(config)
        self.pipeline = ParamPipeline()
        self._entries: Dict[str, RouteEntry] = {}
        self._router = Router(redirect_slashes=config.redirect_slashes)
        self._app = RequestLoggingMiddleware(self._router) if config.log_requests else self._router

    @property
    def routes(self) -> List[BaseRoute]:
        return self._router.routes

    @property
    def endpoints(self) -> Dict[str, Dict[str, EndpointConfig]]:
        """Unversioned endpoint configs keyed by prefixed path."""
        return self.registry.list(self.config.prefix)

    async def __call__(self, scope, receive, send):
        await self._app(scope, receive, send)

    async def fall_through(self, request: Request, entry: RouteEntry, send) -> None:
        """Resume routing after `entry`, ending in Starlette's not-found handling."""
        body = await request.body()
        scope = dict(request.scope)
        scope['path_params'] = scope.pop(_PARENT_PARAMS, {})
        scope.pop('endpoint', None)
        scope[_EXHAUSTED] = scope.get(_EXHAUSTED, ()) + (entry,)

        replayed = False

        async def receive():
            nonlocal replayed
            if replayed:
                return await request.receive()
            replayed = True
            return {'type': 'http.request', 'body': body, 'more_body': False}

        await self._router(scope, receive, send)

    def route(self, method: str, path: Any, *args: Any, version: Any = _UNSET, api: Any = None):
        """Register handlers for a method and path.

        Positional arguments after the path may be a version (number, range
        string, pattern or a list of those), an endpoint config mapping and
        one or more handlers, in that order. Without handlers a decorator is
        returned.
        """
        registration = classify_registration(path, args, version=version, api=api)
        if registration.handlers:
            self._register(method, registration)
            return None

        def decorator(func: Callable) -> Callable:
            self._register(method, registration.model_copy(update={'handlers': [func]}))
            return func

        return decorator

    get = partialmethod(route, 'GET')
    post = partialmethod(route, 'POST')
    put = partialmethod(route, 'PUT')
    patch = partialmethod(route, 'PATCH')
    delete = partialmethod(route, 'DELETE')
    head = partialmethod(route, 'HEAD')
    options = partialmethod(route, 'OPTIONS')
    trace = partialmethod(route, 'TRACE')
    all = partialmethod(route, 'ALL')

    def _register(self, method: str, registration: RegistrationRequest) -> None:
        method = method.upper()
        if method not in METHODS:
            raise ConfigurationError(f'Unsupported method: {method}', ErrorCode.RTR_UNSUPPORTED_METHOD)
        config = self._configure(registration.api) if registration.api is not None else None
        entry = self._entry_for(registration)
        if config is not None:
            self.registry.add(entry.key, method, registration.versions, config)
        entry.candidates.append(Candidate(method, registration.versions, config, list(registration.handlers)))
        logger.info(
            f'Registered {method} {entry.key} '
            f'versions={[spec.label() for spec in registration.versions] or "any"}'
        )

    def _entry_for(self, registration: RegistrationRequest) -> RouteEntry:
        key = registration.path_key()
        if key in self._entries:
            return self._entries[key]
        if any(key.startswith(prefix) for prefix in self.registry.version_prefixes):
            raise ConfigurationError(ErrorMessages.VERSIONED_PATH, ErrorCode.RTR_VERSIONED_PATH)
        param = self.config.param
        path = registration.path
        if isinstance(path, re.Pattern):
            if param in path.groupindex:
                raise ConfigurationError(f'{ErrorMessages.PARAM_CONFLICT}: {param!r}', ErrorCode.RTR_PARAM_CONFLICT)
            body = path.pattern[1:] if path.pattern.startswith('^') else path.pattern
            versioned = re.compile('^/v(?P<' + param + '>[^/]+)' + body, path.flags)
            entry = RouteEntry(self, key, path, versioned)
            routes = [PatternRoute(versioned, entry), PatternRoute(path, entry)]
        else:
            if not path.startswith('/'):
                raise ConfigurationError(f'Paths must start with "/": {path!r}', ErrorCode.RTR_MISSING_PATH)
            try:
                _, _, convertors = compile_path(path)
            except (ValueError, AssertionError, KeyError) as e:
                raise ConfigurationError(f'Invalid path {path!r}: {e}', ErrorCode.RTR_INVALID_CONFIG) from e
            if param in convertors:
                raise ConfigurationError(f'{ErrorMessages.PARAM_CONFLICT}: {param!r}', ErrorCode.RTR_PARAM_CONFLICT)
            versioned = '/v{' + param + '}' + ('' if path == '/' else path)
            entry = RouteEntry(self, key, path, versioned)
            routes = [EntryRoute(versioned, entry), EntryRoute(path, entry)]
        self._router.routes.extend(routes)
        self._entries[key] = entry
        return entry

    def _configure(self, api: EndpointInput) -> EndpointConfig:
        """Normalize an endpoint config; hooks fall back to the router's here, once."""
        param_order = list(api.param_order or self.config.param_order)
        unknown = [source for source in param_order if source not in PARAM_SOURCES]
        if unknown:
            raise ConfigurationError(f'Unknown parameter source(s): {unknown}', ErrorCode.PRM_INVALID_SOURCE)
        error = api.error or self.config.error
        validate = api.validate_hook or self.config.validate_hook
        success = api.success or self.config.success
        params = {}
        for name, spec in api.params.items():
            parsed = parse_param(spec)
            parsed.error = parsed.error or error
            parsed.validate_hook = parsed.validate_hook or validate
            parsed.success = parsed.success or success
            params[name] = parsed
        return EndpointConfig(
            description=api.description,
            param_order=param_order,
            param_map=api.param_map or self.config.param_map,
            params=params,
            error=error,
            validate=validate,
            success=success,
        )

    async def dispatch(self, request: Request, entry: RouteEntry) -> Optional[Response]:
        """Offer the request to every candidate of the entry until one answers."""
        for candidate in entry.candidates:
            if not candidate.accepts_method(request.method):
                continue
            matched, spec = await self.resolver.resolve(request, candidate.versions)
            if not matched:
                continue
            response = await self._run(request, candidate)
            if response is not None:
                return self._stamp(response, spec)
        logger.debug(f'No registration answered {request.method} {request.url.path}')
        return None

    async def _run(self, request: Request, candidate: Candidate) -> Optional[Response]:
        if candidate.config is not None:
            _, response = await self.pipeline.verify(request, candidate.config)
            if response is not None:
                return _as_response(response)
        for handler in candidate.handlers:
            response = _as_response(await call_handler(handler, request))
            if response is not None:
                return response
        return None

    def _stamp(self, response: Response, spec: Optional[VersionSpec]) -> Response:
        header = self.config.response_header
        if spec is not None and header and header not in response.headers:
            response.headers[header] = spec.label()
        return response

    async def api(self, request: Request) -> Response:
        """Endpoint serving the API map, prefixed by the config or the mount path."""
        prefix = self.config.prefix
        if prefix is None:
            prefix = request.scope.get('root_path', '') or ''
        return respond_api_map(self.registry.describe(prefix))
