"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from semantic_version import NpmSpec


class VersionKind(str, Enum):
    NONE = 'none'
    NUMBER = 'number'
    RANGE = 'range'
    PATTERN = 'pattern'


class VersionSpec(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: VersionKind = Field(..., description='Which matching rule applies')
    raw: Any = Field(None, description='The value exactly as it was registered')
    number: float | None = Field(None, description='Accepted version for numeric specs')
    range: NpmSpec | None = Field(None, description='Compiled semver range for range specs')
    pattern: re.Pattern | None = Field(None, description='Compiled expression for pattern specs')

    def label(self) -> str:
        """String form used in response headers and the API map."""
        if self.kind == VersionKind.PATTERN:
            return f'/{self.pattern.pattern}/'
        if self.kind == VersionKind.NONE:
            return ''
        return str(self.raw)

    def bucket(self) -> Any:
        """Key of the registry partition holding configs for this spec."""
        if self.kind == VersionKind.NONE:
            return 0
        if self.kind == VersionKind.PATTERN:
            return self.label()
        return self.raw

    def summary(self) -> Any:
        if self.kind == VersionKind.NUMBER:
            return self.raw
        return self.bucket()
