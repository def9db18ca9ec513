"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from apirouter.models.endpoint_config_model import EndpointConfig
from apirouter.models.version_spec_model import VersionSpec
from apirouter.utils.version_util import (
    NO_VERSION,
    parse_version_spec,
    parse_version_specs,
    spec_matches,
    specs_overlap,
)

logger = logging.getLogger('apirouter.router')


def join_path(prefix: Optional[str], path: str) -> str:
    if not prefix:
        return path
    return prefix.rstrip('/') + '/' + path.lstrip('/')


class EndpointRegistry:
    """In-memory index of endpoint configs keyed by version bucket, path and method.

    Owned by one router. Filled while routes are registered and only read
    afterwards, so no locking is done.
    """

    def __init__(self, param: str = 'v', prefix: Optional[str] = None):
        self._param = param
        self._prefix = prefix
        self._mapping: Dict[Any, Dict[str, Dict[str, EndpointConfig]]] = {}
        self._specs: Dict[Any, VersionSpec] = {}
        self._order: Dict[Tuple[str, str], List[Any]] = {}

    @property
    def version_prefixes(self) -> Tuple[str, ...]:
        return ('/v{' + self._param + '}', '/v:' + self._param)

    def unversion(self, path: str) -> str:
        """Remove the generated version prefix from a path, if there is one."""
        for prefix in self.version_prefixes:
            if path.startswith(prefix):
                return path[len(prefix):] or '/'
        return path

    def add(self, path: str, method: str, versions: Any, config: EndpointConfig) -> EndpointConfig:
        """Store a config under every version bucket it accepts."""
        if versions and all(isinstance(v, VersionSpec) for v in versions):
            specs = list(versions)
        else:
            specs = parse_version_specs(versions)
        path = self.unversion(path)
        method = method.upper()
        config.versions = specs
        order = self._order.setdefault((path, method), [])
        for spec in specs or [NO_VERSION]:
            bucket = spec.bucket()
            if bucket in order:
                logger.debug(f'Replacing endpoint config for {method} {path} version {spec.label() or 0}')
            else:
                for existing in order:
                    if specs_overlap(self._specs[existing], spec):
                        logger.warning(
                            f'Version {spec.label()} of {method} {path} overlaps with '
                            f'{self._specs[existing].label()}, the earlier registration wins on lookup'
                        )
                order.append(bucket)
            self._specs.setdefault(bucket, spec)
            self._mapping.setdefault(bucket, {}).setdefault(path, {})[method] = config
        return config

    def _methods(self, method: str) -> List[str]:
        method = method.upper()
        candidates = [method]
        if method == 'HEAD':
            candidates.append('GET')
        candidates.append('ALL')
        return candidates

    def get(self, path: str, method: str, incoming_version: Any = None) -> Optional[EndpointConfig]:
        """Return the config whose version bucket accepts the incoming version.

        When several buckets accept it the one registered first wins. None
        means nothing is registered for this path and method, or no bucket
        accepts the version.
        """
        path = self.unversion(path)
        for candidate in self._methods(method):
            for bucket in self._order.get((path, candidate), []):
                if spec_matches(incoming_version, self._specs[bucket]):
                    return self._mapping[bucket][path][candidate]
        return None

    def list(self, prefix: Optional[str] = None, version: Any = 0) -> Dict[str, Dict[str, EndpointConfig]]:
        """Configs of one version bucket keyed by prefixed path, for documentation."""
        prefix = self._prefix if prefix is None else prefix
        bucket = parse_version_spec(version).bucket()
        return {
            join_path(prefix, path): dict(methods)
            for path, methods in self._mapping.get(bucket, {}).items()
        }

    def describe(self, prefix: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
        """JSON-ready map of every registered endpoint across all versions.

        A path and method with a single config maps to its summary; one with
        several configs (one per version set) maps to a list of summaries in
        registration order.
        """
        prefix = self._prefix if prefix is None else prefix
        api_map: Dict[str, Dict[str, Any]] = {}
        for (path, method), buckets in self._order.items():
            configs: List[EndpointConfig] = []
            for bucket in buckets:
                config = self._mapping[bucket][path][method]
                if not any(config is seen for seen in configs):
                    configs.append(config)
            summaries = [config.summary() for config in configs]
            methods = api_map.setdefault(join_path(prefix, path), {})
            methods[method] = summaries[0] if len(summaries) == 1 else summaries
        return api_map

    def __len__(self) -> int:
        return len(self._order)
