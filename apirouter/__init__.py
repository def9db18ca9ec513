"""
Versioned routing with declarative parameter verification for Starlette and FastAPI.
"""

from apirouter.models.endpoint_config_model import EndpointConfig, EndpointInput
from apirouter.models.param_def_model import ParamDef, ParamType
from apirouter.models.router_config_model import RouterConfig
from apirouter.models.version_spec_model import VersionKind, VersionSpec
from apirouter.router import VersionRouter, classify_registration
from apirouter.services.endpoint_registry import EndpointRegistry
from apirouter.services.param_pipeline import ParamPipeline, check_params, fill_params, get_params
from apirouter.services.version_resolver import VersionResolver, extract_version
from apirouter.utils.error_codes import ErrorCode, ErrorMessages
from apirouter.utils.error_util import ConfigurationError, ParamExtractionError
from apirouter.utils.logging_util import configure_logging
from apirouter.utils.param_util import parse_param, parse_value
from apirouter.utils.version_util import matches, parse_version_spec, parse_version_specs, semverize_version

__version__ = '1.0.0'

__all__ = [
    'ConfigurationError',
    'EndpointConfig',
    'EndpointInput',
    'EndpointRegistry',
    'ErrorCode',
    'ErrorMessages',
    'ParamDef',
    'ParamExtractionError',
    'ParamPipeline',
    'ParamType',
    'RouterConfig',
    'VersionKind',
    'VersionResolver',
    'VersionRouter',
    'VersionSpec',
    'check_params',
    'classify_registration',
    'configure_logging',
    'extract_version',
    'fill_params',
    'get_params',
    'matches',
    'parse_param',
    'parse_value',
    'parse_version_spec',
    'parse_version_specs',
    'semverize_version',
]
