"""
Template persistence boundary.

The designer only needs create/update; the catalogue lists, deletes and
duplicates previously saved templates. Storage lives outside this package, the in-memory repository is
used for local sessions and tests.
"""

import logging
from typing import Any, Protocol
from uuid import uuid4

from label_designer.exceptions import PersistenceError
from label_designer.models.template import COPY_SUFFIX, Template

logger = logging.getLogger(__name__)


class TemplateRepository(Protocol):
    """Saves templates; errors are raised to the caller as-is."""

    async def create_template(self, template_data: dict[str, Any]) -> Template: ...

    async def update_template(self, template_id: str, template_data: dict[str, Any]) -> Template: ...


class TemplateCatalogue(Protocol):
    """Previously saved templates: list, delete, duplicate."""

    async def list_templates(self) -> list[Template]: ...

    async def delete_template(self, template_id: str) -> None: ...

    async def duplicate_template(self, template_id: str) -> Template: ...


class InMemoryTemplateRepository:
    """Repository and catalogue backed by a dict."""

    def __init__(self):
        self._templates: dict[str, Template] = {}

    async def create_template(self, template_data: dict[str, Any]) -> Template:
        """
        Stores a new template under a fresh id.

        Args:
            template_data: Template payload (camelCase JSON form)

        Returns:
            Stored template with its id
        """
        template = Template.from_payload({**template_data, "id": str(uuid4())})
        self._templates[template.id] = template
        logger.info(f"Template created: {template.name!r} ({template.id})")
        return template

    async def update_template(self, template_id: str, template_data: dict[str, Any]) -> Template:
        """
        Replaces a stored template.

        Raises:
            PersistenceError: Unknown template id
        """
        if template_id not in self._templates:
            raise PersistenceError(f"Template {template_id} does not exist")

        template = Template.from_payload({**template_data, "id": template_id})
        self._templates[template_id] = template
        logger.info(f"Template updated: {template.name!r} ({template_id})")
        return template

    async def get_template(self, template_id: str) -> Template | None:
        return self._templates.get(template_id)

    async def list_templates(self) -> list[Template]:
        return list(self._templates.values())

    async def delete_template(self, template_id: str) -> None:
        """
        Removes a stored template.

        Raises:
            PersistenceError: Unknown template id
        """
        template = self._templates.pop(template_id, None)
        if template is None:
            raise PersistenceError(f"Template {template_id} does not exist")
        logger.info(f"Template deleted: {template.name!r} ({template_id})")

    async def duplicate_template(self, template_id: str) -> Template:
        """
        Stores a copy of a template under a fresh id, named with a copy suffix.
        Fields keep their ids so bindings and layout are unchanged.

        Raises:
            PersistenceError: Unknown template id
        """
        source = self._templates.get(template_id)
        if source is None:
            raise PersistenceError(f"Template {template_id} does not exist")

        payload = source.to_payload()
        return await self.create_template({**payload, "name": f"{source.name}{COPY_SUFFIX}"})
