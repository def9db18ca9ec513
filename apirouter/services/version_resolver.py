"""
Request-time version resolution.

Reads the version a client asked for from the configured request locations
and decides whether a registration accepts it.
"""

import logging
from typing import Any, Iterable, Optional

from fastapi import Request

from apirouter.models.router_config_model import RouterConfig
from apirouter.models.version_spec_model import VersionSpec
from apirouter.utils.hook_util import call_hook
from apirouter.utils.version_util import matches

logger = logging.getLogger('apirouter.router')


def _source_value(request: Request, source: str, param: str, header: Optional[str]) -> Any:
    if source == 'params':
        return request.path_params.get(param)
    if source == 'query':
        return request.query_params.get(param)
    if source == 'cookie':
        return request.cookies.get(param)
    if source == 'header':
        return request.headers.get(header) if header else None
    return None


def extract_version(
    request: Request, order: Iterable[str], param: str, header: Optional[str] = None
) -> Optional[str]:
    """First non-empty version found scanning `order`, None when absent."""
    for source in order:
        value = _source_value(request, source, param, header)
        if value is not None and str(value) != '':
            return str(value)
    return None


class VersionResolver:
    def __init__(self, config: RouterConfig):
        self.config = config

    def extract(self, request: Request) -> Optional[str]:
        return extract_version(request, self.config.version_order, self.config.param, self.config.header)

    async def accepts(self, request: Request, incoming: Optional[str], accepted: list[VersionSpec]) -> bool:
        """Run the configured version validator, or the built-in matcher."""
        validator = self.config.version_validator
        if validator is None:
            return matches(incoming, accepted)
        raw = [spec.raw for spec in accepted]
        return bool(await call_hook(validator, incoming, raw, request))

    async def resolve(self, request: Request, accepted: list[VersionSpec]) -> tuple[bool, Optional[VersionSpec]]:
        """Match the request against one registration's version specs.

        Returns whether it matched and, for versioned registrations, the
        first accepted spec responsible for the match.
        """
        incoming = self.extract(request)
        if not await self.accepts(request, incoming, accepted):
            logger.debug(
                f'Version {incoming!r} rejected for {request.method} {request.url.path} '
                f'(accepts {[spec.label() for spec in accepted]})'
            )
            return False, None
        matched = self._matched_spec(incoming, accepted)
        if self.config.pass_version:
            request.state.incoming_version = incoming
            request.state.accepted_version = matched.raw if matched is not None else None
        return True, matched

    def _matched_spec(self, incoming: Optional[str], accepted: list[VersionSpec]) -> Optional[VersionSpec]:
        if not accepted:
            return None
        for spec in accepted:
            if matches(incoming, spec):
                return spec
        # a custom validator accepted something the built-in matcher would not
        return accepted[0]
