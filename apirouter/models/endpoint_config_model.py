"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from apirouter.models.param_def_model import ParamDef
from apirouter.models.version_spec_model import VersionSpec


class EndpointInput(BaseModel):
    """Endpoint configuration as written by the user at registration time."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True, extra='forbid')

    description: str | None = Field(None, description='Description printed in the API map')
    params: dict[str, Any] = Field(
        default_factory=dict, description='Parameter name to spec string, mapping or ParamDef'
    )
    param_order: list[str] | None = Field(
        None, alias='paramOrder', description='Request locations searched for parameters'
    )
    param_map: str | None = Field(
        None, alias='paramMap', description='request.state attribute receiving the parsed arguments'
    )
    validate_hook: Callable | None = Field(None, alias='validate')
    error: Callable | None = Field(None)
    success: Callable | None = Field(None)


class EndpointConfig(BaseModel):
    """Normalized configuration of one (path, method, version set) registration."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    description: str | None = Field(None)
    param_order: list[str] = Field(..., description='Request locations searched, first found wins')
    param_map: str = Field('args', description='request.state attribute receiving the parsed arguments')
    params: dict[str, ParamDef] = Field(default_factory=dict)
    versions: list[VersionSpec] = Field(default_factory=list)
    validate_hook: Callable | None = Field(None, alias='validate')
    error: Callable | None = Field(None)
    success: Callable | None = Field(None)

    def version_labels(self) -> list[Any]:
        if not self.versions:
            return [0]
        return [spec.summary() for spec in self.versions]

    def summary(self) -> dict:
        """JSON-ready view used by the API map."""
        out = {
            'param_map': self.param_map,
            'param_order': list(self.param_order),
            'params': {name: param.summary() for name, param in self.params.items()},
            'versions': self.version_labels(),
        }
        if self.description:
            out = {'description': self.description, **out}
        return out
