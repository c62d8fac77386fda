from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint: ``{success, message, data?}``."""

    model_config = ConfigDict(extra="forbid")

    success: bool = True
    message: str
    data: T | None = None
