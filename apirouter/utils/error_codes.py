"""
Centralized Error Code Registry

Single source of truth for the error codes raised or reported by apirouter.

Usage:
    from apirouter.utils.error_codes import ErrorCode

    raise ConfigurationError(
        'Versioned paths will be generated automatically, please avoid prefixing paths',
        ErrorCode.RTR_VERSIONED_PATH,
    )
"""


class ErrorCode:
    """
    Centralized error code constants.

    Naming Convention:
        - Format: CATEGORY_DESCRIPTION = 'PREFIX###'
        - Categories: RTR (router registration), VER (version specs), PRM (parameters)
        - Numbers: Sequential within category
    """

    # ========================================================================
    # Router Registration Errors (RTR001-RTR999)
    # ========================================================================
    RTR_VERSIONED_PATH = 'RTR001'  # Path already carries the version prefix
    RTR_MISSING_PATH = 'RTR002'  # Registration call without a path
    RTR_UNSUPPORTED_ARGUMENT = 'RTR003'  # Argument that is no path, version, config or handler
    RTR_MISPLACED_VERSION = 'RTR004'  # Version given after the first handler
    RTR_DUPLICATE_CONFIG = 'RTR005'  # More than one endpoint config for one registration
    RTR_INVALID_CONFIG = 'RTR006'  # Router configuration rejected
    RTR_UNSUPPORTED_METHOD = 'RTR007'  # Unknown HTTP method
    RTR_PARAM_CONFLICT = 'RTR008'  # Path declares a parameter named like the version parameter

    # ========================================================================
    # Version Spec Errors (VER001-VER999)
    # ========================================================================
    VER_INVALID_RANGE = 'VER001'  # Range string is not a valid semver range
    VER_INVALID_PATTERN = 'VER002'  # /pattern/ string does not compile
    VER_UNSUPPORTED_SPEC = 'VER003'  # Value cannot be used as a version spec

    # ========================================================================
    # Parameter Errors (PRM001-PRM999)
    # ========================================================================
    PRM_INVALID_SPEC = 'PRM001'  # Parameter spec does not follow the grammar
    PRM_INVALID_TYPE = 'PRM002'  # Unknown parameter type
    PRM_INVALID_SOURCE = 'PRM003'  # Unknown parameter source in param order
    PRM_EXTRACTION_FAILED = 'PRM004'  # Request body or source could not be read
    PRM_VALIDATION_FAILED = 'PRM005'  # Parameters failed verification


class ErrorMessages:
    """Human readable messages paired with the codes above."""

    MISSING_PARAMETERS = 'Required parameters are missing'
    NOT_SET = 'not set'
    EXCEEDS_MAX = 'value exceeds max value'
    BELOW_MIN = 'value below min value'
    VERSIONED_PATH = 'Versioned paths will be generated automatically, please avoid prefixing paths'
    PARAM_CONFLICT = 'Path parameter clashes with the version parameter'
    INCOMPATIBLE_PARAM = 'Given parameter is incompatible'
    INVALID_BODY = 'Request body could not be parsed'
