from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

SemanticType = Literal["string", "integer", "float", "boolean", "array", "map", "unknown"]


class FieldSchema(BaseModel):
    declared_name: str
    semantic_type: SemanticType = "unknown"
    wire_name: str = ""
    required: bool = False
    description: str = ""
    tags: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _default_wire_name(self) -> "FieldSchema":
        if not self.wire_name:
            self.wire_name = self.declared_name
        return self


class BodySchema(BaseModel):
    type_name: str
    fields: list[FieldSchema] = Field(default_factory=list)
    file_path: str = ""  # where the type was found


class Route(BaseModel):
    method: str  # GET, POST, ...
    path: str  # /users/:id
    handler_name: str = ""
    name: Optional[str] = None
    description: str = ""
    body_type_name: str = ""
    request_body: Optional[BodySchema] = None
    tags: dict[str, str] = Field(default_factory=dict)

    file_path: str = ""
    line: int = 0

    @property
    def display_name(self) -> str:
        return self.name or f"{self.method} {self.path}"


class RequestDescriptor(BaseModel):
    """Everything the Bruno renderer needs for one request file."""

    name: str
    method: str
    url: str
    has_body: bool = False
    body_default_values: Optional[dict[str, Any]] = None
    description: str = ""
