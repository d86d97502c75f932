from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TypeTag(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    UUID = "uuid"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    OBJECT = "object"  # opaque / custom types


class ParameterDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_tag: TypeTag = TypeTag.OBJECT
    nullable: bool = False
    type_name: str = ""  # original type spelling, only shown for opaque objects


class MethodDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    # insertion order is the schema property order
    parameters: dict[str, ParameterDescriptor] = Field(default_factory=dict)


class EndpointDescriptor(BaseModel):
    """
    One registry entry. Method-name uniqueness is enforced by
    EndpointRegistry, not here.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    requires_authentication: bool = False
    methods: tuple[MethodDescriptor, ...] = ()


class DocumentMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = "API Documentation"
    version: str = "1.0.0"
    description: Optional[str] = None
    server_url: Optional[str] = None
