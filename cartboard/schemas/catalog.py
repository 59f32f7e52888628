# cartboard/schemas/catalog.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ProductTemplate(BaseModel):
    id: str
    name: str
    specs: List[str] = Field(default_factory=list)
    sortOrder: int = 0


class ProductTemplateOut(ProductTemplate):
    # display labels, same order as specs
    specLabels: List[str] = Field(default_factory=list)


class TemplateIn(BaseModel):
    name: Optional[str] = None


class SpecIn(BaseModel):
    name: str


class MoveIn(BaseModel):
    position: int = Field(..., ge=0)


class SpecNameOut(BaseModel):
    raw: str
    key: str
    label: str
