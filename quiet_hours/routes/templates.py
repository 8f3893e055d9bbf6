from fastapi import APIRouter, Depends, HTTPException
from typing import List
from ..schemas import SessionRequest, TemplateOut
from ..scheduling import SchedulingEngine
from ..scheduling.core.errors import SchedulingError
from .deps import get_engine, to_http_exception

router = APIRouter(tags=["templates"])


def _template_out(name: str, payload: dict) -> TemplateOut:
    data = dict(payload)
    created_at = data.pop("created_at", None)
    return TemplateOut(name=name, data=data, created_at=created_at)


@router.put("/{name}", response_model=TemplateOut)
def save_template(name: str, request: SessionRequest, engine: SchedulingEngine = Depends(get_engine)):
    try:
        engine.save_template(name, request)
        return _template_out(name.strip(), engine.load_template(name.strip()))
    except SchedulingError as e:
        raise to_http_exception(e)


@router.get("/{name}", response_model=TemplateOut)
def get_template(name: str, engine: SchedulingEngine = Depends(get_engine)):
    try:
        payload = engine.load_template(name)
    except SchedulingError as e:
        raise to_http_exception(e)
    if payload is None:
        raise HTTPException(status_code=404, detail=f"Template '{name}' not found")
    return _template_out(name, payload)


@router.get("/", response_model=List[TemplateOut])
def list_templates(engine: SchedulingEngine = Depends(get_engine)):
    try:
        templates = engine.get_templates()
    except SchedulingError as e:
        raise to_http_exception(e)
    return [_template_out(name, payload) for name, payload in templates.items()]
