"""Common Pydantic schemas shared across the API."""

from typing import Any, Generic, Literal, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts camelCase (wire format) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(BaseModel, Generic[T]):
    """Success envelope."""

    status: Literal["success"] = "success"
    data: T


class ErrorResponse(BaseModel):
    """Error envelope."""

    status: Literal["error"] = "error"
    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human readable error message")
    details: Optional[Any] = Field(None, description="Field-level validation errors")


def success(data: Any) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"status": "success", "data": data}
