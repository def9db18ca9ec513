"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import re
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from apirouter.models.endpoint_config_model import EndpointInput
from apirouter.models.version_spec_model import VersionSpec


class RegistrationRequest(BaseModel):
    """One route registration call, with every argument sorted into place."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str | re.Pattern = Field(..., description='Literal path template or compiled pattern')
    versions: list[VersionSpec] = Field(default_factory=list, description='Empty for unversioned')
    api: EndpointInput | None = Field(None, description='Endpoint configuration, if any')
    handlers: list[Callable] = Field(default_factory=list)

    def path_key(self) -> str:
        return self.path.pattern if isinstance(self.path, re.Pattern) else self.path
