# cartboard/routes/catalog.py
from __future__ import annotations
from typing import List
from fastapi import APIRouter, Depends, Query

from ..errors import CartboardError, to_http
from ..schemas.catalog import MoveIn, ProductTemplateOut, SpecIn, SpecNameOut, TemplateIn
from ..services.catalog import format_spec_name, normalize_spec_name, template_out
from ..state import WorkshopState, get_state

router = APIRouter(prefix="/catalog", tags=["catalog"])


# ---- Routes ------------------------------------------------------------------
# GET /catalog   (sorted by sortOrder)
@router.get("", response_model=List[ProductTemplateOut])
def list_templates(state: WorkshopState = Depends(get_state)):
    return [template_out(t) for t in state.catalog.ordered()]


# GET /catalog/spec-names?raw=Base%20Color
@router.get("/spec-names", response_model=SpecNameOut)
def preview_spec_name(raw: str = Query(...)):
    key = normalize_spec_name(raw)
    return SpecNameOut(raw=raw, key=key, label=format_spec_name(key))


@router.post("", response_model=ProductTemplateOut)
def add_template(payload: TemplateIn, state: WorkshopState = Depends(get_state)):
    try:
        return template_out(state.catalog.add(payload.name))
    except CartboardError as e:
        raise to_http(e)


@router.patch("/{template_id}", response_model=ProductTemplateOut)
def rename_template(template_id: str, payload: TemplateIn,
                    state: WorkshopState = Depends(get_state)):
    try:
        return template_out(state.catalog.rename(template_id, payload.name or ""))
    except CartboardError as e:
        raise to_http(e)


@router.delete("/{template_id}")
def delete_template(template_id: str, state: WorkshopState = Depends(get_state)):
    try:
        state.catalog.delete(template_id)
    except CartboardError as e:
        raise to_http(e)
    return {"ok": True}


@router.post("/{template_id}/specs", response_model=ProductTemplateOut)
def add_spec(template_id: str, payload: SpecIn, state: WorkshopState = Depends(get_state)):
    try:
        return template_out(state.catalog.add_spec(template_id, payload.name))
    except CartboardError as e:
        raise to_http(e)


@router.delete("/{template_id}/specs/{spec}", response_model=ProductTemplateOut)
def remove_spec(template_id: str, spec: str, state: WorkshopState = Depends(get_state)):
    try:
        return template_out(state.catalog.remove_spec(template_id, spec))
    except CartboardError as e:
        raise to_http(e)


@router.post("/{template_id}/move", response_model=List[ProductTemplateOut])
def move_template(template_id: str, payload: MoveIn,
                  state: WorkshopState = Depends(get_state)):
    try:
        return [template_out(t) for t in state.catalog.move(template_id, payload.position)]
    except CartboardError as e:
        raise to_http(e)
