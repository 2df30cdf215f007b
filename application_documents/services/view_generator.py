"""
HTML view generation from Jinja2 templates addressed by URI.
"""

import logging
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from jinja2 import BaseLoader, Environment, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment
from pydantic import BaseModel

logger = logging.getLogger(__name__)

TEMPLATE_FETCH_TIMEOUT = float(os.getenv("TEMPLATE_FETCH_TIMEOUT", "10"))


class UriLoader(BaseLoader):
    """
    Loads a template whose name is a full reference.

    Accepts http(s):// URLs, file:// URIs and plain filesystem paths.
    """

    def __init__(self, timeout: float = TEMPLATE_FETCH_TIMEOUT, encoding: str = "utf-8"):
        self.timeout = timeout
        self.encoding = encoding

    def get_source(
        self, environment: Environment, template: str
    ) -> Tuple[str, Optional[str], Optional[Callable[[], bool]]]:
        parsed = urlparse(template)
        if parsed.scheme in ("http", "https"):
            return self._fetch(template)
        if parsed.scheme == "file":
            path = Path(url2pathname(parsed.path))
        elif parsed.scheme == "":
            path = Path(template)
        else:
            raise TemplateNotFound(template)

        if not path.is_file():
            raise TemplateNotFound(template)
        mtime = path.stat().st_mtime
        source = path.read_text(encoding=self.encoding)
        return source, str(path), lambda: path.is_file() and path.stat().st_mtime == mtime

    def _fetch(self, url: str):
        logger.debug("Fetching template", extra={"template_url": url})
        response = requests.get(url, timeout=self.timeout)
        if response.status_code == 404:
            raise TemplateNotFound(url)
        response.raise_for_status()
        # Remote templates are always fetched again on the next load.
        return response.text, None, lambda: False


def format_money(value: Union[Decimal, float, int, None]) -> str:
    if value is None:
        return ""
    return f"{Decimal(value):,.2f}"


def format_date(value: Optional[date], fmt: str = "%d %B %Y") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


class ViewGenerator:
    """Renders view models to HTML strings."""

    def __init__(self, loader: Optional[BaseLoader] = None):
        # Templates are treated as untrusted input.
        self.env = SandboxedEnvironment(loader=loader or UriLoader(), autoescape=True)
        self.env.filters["money"] = format_money
        self.env.filters["format_date"] = format_date

    def generate_from_path(self, template_ref: str, view_model: Any) -> str:
        """
        Render the template at `template_ref` with `view_model`.

        The model is available as `model` and, for Pydantic models, each of its
        fields is also passed as a top-level variable.
        """
        template = self.env.get_template(template_ref)
        context = {"model": view_model}
        if isinstance(view_model, BaseModel):
            context.update(dict(view_model))
        logger.debug("Rendering view", extra={"template_ref": template_ref})
        return template.render(**context)
