"""
Version matching.

An endpoint accepts a version through one or more specs: an exact number, a
semver range string ("^1", ">=2.0.0"), a regular expression (compiled, or a
"/pattern/" string) or nothing at all, which accepts every request. Range
evaluation is delegated to semantic_version's npm range grammar; incoming
versions are only padded to major.minor.patch before that.
"""

import math
import re
from typing import Any, Iterable

from semantic_version import NpmSpec, Version

from apirouter.models.version_spec_model import VersionKind, VersionSpec
from apirouter.utils.error_codes import ErrorCode
from apirouter.utils.error_util import ConfigurationError

_NUMBER_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_INTEGER_PREFIX = re.compile(r'^\s*([+-]?\d+)')

NO_VERSION = VersionSpec(kind=VersionKind.NONE, raw=None)


def parse_number(value: Any) -> float | None:
    """Lenient float parse: reads the leading numeric part, None if there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        raw = value
    else:
        match = _NUMBER_PREFIX.match(str(value))
        if not match:
            return None
        raw = match.group(1)
    try:
        number = float(raw)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_integer(value: Any) -> int | None:
    """Lenient integer parse: reads the leading digits, None if there are none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _INTEGER_PREFIX.match(str(value))
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def semverize_version(version: Any) -> str:
    """Pad a bare major or major.minor version to major.minor.patch."""
    version = '' if version is None else str(version)
    parts = version.split('.')
    if len(parts) == 1:
        return version + '.0.0'
    if len(parts) == 2:
        return '.'.join(parts) + '.0'
    return version


def _is_pattern_string(value: str) -> bool:
    return len(value) >= 2 and value.startswith('/') and value.endswith('/')


def parse_version_spec(raw: Any) -> VersionSpec:
    """Turn one registered version value into a VersionSpec.

    Raises ConfigurationError for values that can never match anything, so
    a bad range fails the registration instead of every request.
    """
    if isinstance(raw, VersionSpec):
        return raw
    if raw is None or raw == '' or (isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw == 0):
        return NO_VERSION
    if isinstance(raw, bool):
        raise ConfigurationError(f'Unsupported version spec: {raw!r}', ErrorCode.VER_UNSUPPORTED_SPEC)
    if isinstance(raw, (int, float)):
        return VersionSpec(kind=VersionKind.NUMBER, raw=raw, number=float(raw))
    if isinstance(raw, re.Pattern):
        return VersionSpec(kind=VersionKind.PATTERN, raw=raw, pattern=raw)
    if isinstance(raw, str):
        value = raw.strip()
        if _is_pattern_string(value):
            try:
                pattern = re.compile(value[1:-1])
            except re.error as e:
                raise ConfigurationError(
                    f'Invalid version pattern {raw!r}: {e}', ErrorCode.VER_INVALID_PATTERN
                ) from e
            return VersionSpec(kind=VersionKind.PATTERN, raw=raw, pattern=pattern)
        try:
            compiled = NpmSpec(value)
        except ValueError as e:
            raise ConfigurationError(
                f'Invalid version range {raw!r}: {e}', ErrorCode.VER_INVALID_RANGE
            ) from e
        return VersionSpec(kind=VersionKind.RANGE, raw=raw, range=compiled)
    raise ConfigurationError(f'Unsupported version spec: {raw!r}', ErrorCode.VER_UNSUPPORTED_SPEC)


def parse_version_specs(raw: Any) -> list[VersionSpec]:
    """Normalize a single value or a list of values; unversioned yields []."""
    if raw is None:
        return []
    items: Iterable[Any] = raw if isinstance(raw, (list, tuple, set, frozenset)) else [raw]
    specs = [parse_version_spec(item) for item in items]
    if any(spec.kind == VersionKind.NONE for spec in specs):
        return []
    return specs


def spec_matches(incoming: Any, spec: VersionSpec) -> bool:
    if spec.kind == VersionKind.NONE:
        return True
    if spec.kind == VersionKind.NUMBER:
        number = parse_number(incoming)
        return number is not None and number == spec.number
    if incoming is None:
        return False
    if spec.kind == VersionKind.PATTERN:
        return spec.pattern.search(str(incoming)) is not None
    try:
        version = Version(semverize_version(str(incoming).strip()))
    except ValueError:
        return False
    return spec.range.match(version)


def matches(incoming: Any, accepted: Any) -> bool:
    """Whether an incoming version satisfies any of the accepted specs.

    `accepted` may be raw registration values or VersionSpec objects, alone
    or in a list. Empty means unversioned and accepts everything.
    """
    if accepted is None or accepted == [] or accepted == ():
        return True
    if isinstance(accepted, (list, tuple)):
        specs = [parse_version_spec(item) for item in accepted]
    else:
        specs = [parse_version_spec(accepted)]
    for spec in specs:
        if spec_matches(incoming, spec):
            return True
    return False


def probe_versions(spec: VersionSpec) -> list[str]:
    """Concrete versions a spec is known to accept, used for overlap warnings."""
    if spec.kind == VersionKind.NUMBER:
        number = spec.number
        return [str(int(number)) if number.is_integer() else str(number)]
    if spec.kind == VersionKind.RANGE:
        found = re.findall(r'\d+(?:\.\d+){0,2}', str(spec.raw))
        return [semverize_version(v) for v in found if spec_matches(v, spec)]
    return []


def specs_overlap(left: VersionSpec, right: VersionSpec) -> bool:
    if left.kind == VersionKind.NONE or right.kind == VersionKind.NONE:
        return False
    if left.label() == right.label():
        return True
    return any(spec_matches(v, right) for v in probe_versions(left)) or any(
        spec_matches(v, left) for v in probe_versions(right)
    )
