"""Typed representation of the documentation model rendered by the default theme."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_SLUG_PATTERN = re.compile(r"[^a-z0-9_-]+")


class DocumentKind(str, Enum):
    """Kind of a documented declaration."""

    MODULE = "module"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    FUNCTION = "function"
    VARIABLE = "variable"

    @property
    def has_own_page(self) -> bool:
        return self in {DocumentKind.MODULE, DocumentKind.CLASS, DocumentKind.INTERFACE, DocumentKind.ENUM}

    @property
    def directory(self) -> str:
        if self is DocumentKind.CLASS:
            return "classes"
        return f"{self.value}s"


class Document(BaseModel):
    """One documented declaration and its members."""

    name: str = Field(...)
    kind: DocumentKind = Field(default=DocumentKind.MODULE)
    comment: Optional[str] = Field(default=None, description="Markdown description.")
    signature: Optional[str] = Field(default=None)
    children: list["Document"] = Field(default_factory=list)

    @field_validator("name")
    def _require_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Document names must not be empty.")
        return text

    @property
    def slug(self) -> str:
        return _SLUG_PATTERN.sub("_", self.name.lower()).strip("_") or "_"


class Project(BaseModel):
    """Root of the documentation model."""

    name: str = Field(default="Documentation")
    readme: Optional[str] = Field(default=None, description="Markdown shown on the index page.")
    documents: list[Document] = Field(default_factory=list)


Document.model_rebuild()
