"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field


class ParamType(str, Enum):
    STRING = 'string'
    NUMBER = 'number'
    INTEGER = 'integer'
    BOOLEAN = 'boolean'


class ParamDef(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    type: ParamType = Field(..., description='Expected data type (string, number, integer, boolean)')
    array: bool = Field(False, description='Whether the incoming value is a comma separated list')
    default: Any = Field(None, description='Value used when the request does not carry the parameter')
    required: bool = Field(False, description='Whether the request is rejected if the parameter is missing')
    min: int | float | None = Field(
        None, description='Minimum value for numbers or minimum length for strings'
    )
    max: int | float | None = Field(
        None, description='Maximum value for numbers or maximum length for strings'
    )
    description: str | None = Field(None, description='Printed with the endpoint in the API map')
    validate_hook: Callable | None = Field(
        None, alias='validate', description='Custom validator replacing the built-in checks'
    )
    error: Callable | None = Field(None, description='Error hook inherited from the endpoint')
    success: Callable | None = Field(None, description='Success hook inherited from the endpoint')

    def summary(self) -> dict:
        """JSON-ready view without hooks or unset values."""
        out = {'type': self.type.value, 'array': self.array, 'required': self.required}
        if self.default is not None:
            out['default'] = self.default
        if self.min is not None:
            out['min'] = self.min
        if self.max is not None:
            out['max'] = self.max
        if self.description:
            out['description'] = self.description
        return out
