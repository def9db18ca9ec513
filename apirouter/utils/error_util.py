"""
Exceptions raised by apirouter.

Registration problems surface as ConfigurationError and are meant to abort
startup. Problems reading a concrete request surface as ParamExtractionError
and never leave the parameter pipeline.
"""

from apirouter.utils.error_codes import ErrorCode


class ConfigurationError(Exception):
    def __init__(self, message: str, error_code: str = ErrorCode.RTR_INVALID_CONFIG):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ParamExtractionError(Exception):
    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        self.error_code = ErrorCode.PRM_EXTRACTION_FAILED
        super().__init__(self.message)
