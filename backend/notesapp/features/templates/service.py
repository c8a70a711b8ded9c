"""
Templates feature: Service layer.

A template is visible to its owner and, when `is_public`, to everyone.
Only the owner may change or delete it.
"""

import logging

from supabase import Client

from notesapp.core.exceptions import NotFoundError, ValidationError
from notesapp.core.repository import OwnedTable, is_uuid, now_iso
from notesapp.features.templates.schemas import TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)


def fill_placeholders(content: str, variables: list[dict], values: dict[str, str]) -> str:
    """Replace each `{{name}}` with the supplied value, else the variable's default."""
    for variable in variables:
        name = variable["name"]
        value = values.get(name) or variable.get("default_value") or ""
        content = content.replace("{{" + name + "}}", value)
    return content


class TemplatesService:

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.templates = OwnedTable(db, "templates", user_id)

    def _visible(self):
        return (
            self.db.table("templates")
            .select("*")
            .or_(f"user_id.eq.{self.user_id},is_public.eq.true")
        )

    def _get_visible(self, template_id: str) -> dict:
        if not is_uuid(template_id):
            raise NotFoundError("Template not found")
        result = self._visible().eq("id", template_id).limit(1).execute()
        if not result.data:
            raise NotFoundError("Template not found")
        return result.data[0]

    def _get_owned(self, template_id: str) -> dict:
        template = self.templates.get(template_id)
        if template is None:
            raise NotFoundError("Template not found or you do not have permission")
        return template

    def list_templates(self, category: str | None = None, search: str | None = None) -> list[dict]:
        """Own and public templates, most used first."""
        query = self._visible()
        if category and category != "all":
            query = query.eq("category", category)
        rows = (
            query.order("usage_count", desc=True)
            .order("created_at", desc=True)
            .execute()
        ).data or []

        if search and search.strip():
            needle = search.strip().lower()
            rows = [
                r for r in rows
                if needle in r["name"].lower() or needle in (r.get("description") or "").lower()
            ]
        return rows

    def get_template(self, template_id: str) -> dict:
        return self._get_visible(template_id)

    def create_template(self, data: TemplateCreate) -> dict:
        result = self.templates.insert({
            **data.model_dump(mode="json"),
            "usage_count": 0,
        }).execute()
        template = result.data[0]
        logger.info(f"Template created: {template['id']} by user {self.user_id}")
        return template

    def update_template(self, template_id: str, data: TemplateUpdate) -> dict:
        self._get_owned(template_id)
        changes = {
            k: v
            for k, v in data.model_dump(mode="json", exclude_unset=True).items()
            if v is not None
        }
        if not changes:
            raise ValidationError("Please provide at least one field to update")
        changes["updated_at"] = now_iso()
        result = self.templates.update(changes).eq("id", template_id).execute()
        return result.data[0]

    def delete_template(self, template_id: str) -> None:
        self._get_owned(template_id)
        self.templates.delete().eq("id", template_id).execute()

    def use_template(self, template_id: str, values: dict[str, str]) -> dict:
        """Count a use and return the template with its placeholders filled in."""
        template = self._get_visible(template_id)
        usage_count = (template.get("usage_count") or 0) + 1
        self.db.table("templates").update({"usage_count": usage_count}).eq("id", template_id).execute()

        processed = fill_placeholders(template["content"], template.get("variables") or [], values)
        return {**template, "usage_count": usage_count, "processed_content": processed}

    def duplicate_template(self, template_id: str) -> dict:
        """Private copy for the caller, whoever owns the original."""
        original = self._get_visible(template_id)
        result = self.templates.insert({
            "name": f"{original['name']} (Copy)"[:100],
            "description": original.get("description") or "",
            "content": original["content"],
            "category": original["category"],
            "is_public": False,
            "variables": original.get("variables") or [],
            "color": original.get("color") or "#ffffff",
            "icon": original.get("icon") or "📝",
            "usage_count": 0,
        }).execute()
        return result.data[0]
