"""
Templates feature: API routes.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.templates.schemas import CATEGORIES, TemplateCreate, TemplateUpdate, TemplateUse
from notesapp.features.templates.service import TemplatesService

router = APIRouter()


@router.get("/")
async def list_templates(
    category: str | None = None,
    search: str | None = None,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Own and public templates."""
    service = TemplatesService(db, user_id)
    return {"data": service.list_templates(category, search)}


@router.get("/categories")
async def list_categories(user_id: str = Depends(get_current_user_id)):
    return {"data": CATEGORIES}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_template(
    data: TemplateCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TemplatesService(db, user_id)
    return {"data": service.create_template(data)}


@router.get("/{template_id}")
async def get_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TemplatesService(db, user_id)
    return {"data": service.get_template(template_id)}


@router.put("/{template_id}")
async def update_template(
    template_id: str,
    data: TemplateUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TemplatesService(db, user_id)
    return {"data": service.update_template(template_id, data)}


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TemplatesService(db, user_id)
    service.delete_template(template_id)
    return {"message": "Template deleted successfully"}


@router.post("/{template_id}/use")
async def use_template(
    template_id: str,
    data: TemplateUse | None = None,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Fill in a template's placeholders and count the use."""
    service = TemplatesService(db, user_id)
    values = data.variable_values if data else {}
    return {"data": service.use_template(template_id, values)}


@router.post("/{template_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TemplatesService(db, user_id)
    return {"data": service.duplicate_template(template_id)}
