# backend/app/services/template_service.py
"""
Template rendering service for the booking platform.

Renders the Jinja2 email templates under app/templates with a common
context (brand name, frontend URL, year) merged in.
"""

from datetime import date, datetime
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import settings
from ..core.constants import BRAND_NAME
from .base import BaseService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService(BaseService):
    """Centralized Jinja2 rendering. Needs no database session."""

    def __init__(self, template_dir: Optional[Path] = None):
        super().__init__(None)

        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._register_custom_filters()

    def _register_custom_filters(self) -> None:
        def format_date(value: Any, format_str: str = "%A, %B %d, %Y") -> str:
            if isinstance(value, (date, datetime)):
                return value.strftime(format_str)
            return str(value)

        def format_time(value: str) -> str:
            """'14:30' -> '2:30 PM'"""
            try:
                return datetime.strptime(value, "%H:%M").strftime("%I:%M %p").lstrip("0")
            except (TypeError, ValueError):
                return str(value)

        self.env.filters["format_date"] = format_date
        self.env.filters["format_time"] = format_time

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": settings.frontend_url,
        }

    @BaseService.measure_operation("render_template")
    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        """
        Render a template with the given context.

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            self.logger.error(f"Template not found: {template_name}")
            raise

        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)
