"""
Template lookup by document key.
"""

from pathlib import Path
from typing import Dict, Optional


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

DEFAULT_TEMPLATE_PATHS: Dict[str, str] = {
    "PendingApplication": "/PendingApplication.html",
    "ActivatedApplication": "/ActivatedApplication.html",
    "InReviewApplication": "/InReviewApplication.html",
}


class TemplateNotFoundError(KeyError):
    """No template path is registered for a key."""


def default_base_uri() -> str:
    """file:// URI of the templates shipped with the package."""
    return TEMPLATE_DIR.as_uri()


class TemplatePathProvider:
    """Maps a template key to a path fragment, appended to a base URI by the caller."""

    def __init__(self, paths: Optional[Dict[str, str]] = None):
        self.paths = dict(DEFAULT_TEMPLATE_PATHS if paths is None else paths)

    def get(self, key: str) -> str:
        try:
            return self.paths[key]
        except KeyError:
            raise TemplateNotFoundError(key) from None
