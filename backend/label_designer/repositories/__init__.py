"""
Template repositories.

Repository Pattern keeps persistence out of the designer session:
the session saves through a protocol, storage is plugged in from outside.
"""

from label_designer.repositories.template_repository import (
    InMemoryTemplateRepository,
    TemplateCatalogue,
    TemplateRepository,
)

__all__ = [
    "TemplateRepository",
    "TemplateCatalogue",
    "InMemoryTemplateRepository",
]
