"""
PDF generation from rendered HTML views.
"""

import logging
import re
from typing import Optional

from application_documents.schemas import HeaderRepeat, PageNumbers, PdfOptions

logger = logging.getLogger(__name__)

PDF_HEADER_HTML = (
    '<header class="document-header">'
    '<div class="document-header__title">Application Summary</div>'
    '<div class="document-header__note">Private and confidential</div>'
    "</header>"
)

_RUNNING_HEADER_CLASS = "pdf-running-header"
_BODY_OPEN = re.compile(r"<body[^>]*>", re.IGNORECASE)

_PAGE_COUNTER_STYLES = {
    PageNumbers.NUMERIC: "decimal",
    PageNumbers.ROMAN: "lower-roman",
}


def build_page_css(options: PdfOptions) -> str:
    """@page rules for page numbering and a repeating header."""
    margin_boxes = []
    style = _PAGE_COUNTER_STYLES.get(options.page_numbers)
    if style:
        margin_boxes.append(f"@bottom-center {{ content: counter(page, {style}); }}")

    rules = []
    header = options.header_options
    if header and header.header_html and header.header_repeat == HeaderRepeat.ALL_PAGES:
        margin_boxes.append("@top-center { content: element(pdf-header); }")
        rules.append(f".{_RUNNING_HEADER_CLASS} {{ position: running(pdf-header); }}")

    if margin_boxes:
        rules.insert(0, "@page { " + " ".join(margin_boxes) + " }")
    return "\n".join(rules)


def insert_header(html: str, options: PdfOptions) -> str:
    """
    Place the header markup at the start of the body.

    A first-page-only header is laid out in normal flow, so it appears once.
    An all-pages header is wrapped as a running element for the page margin.
    """
    header = options.header_options
    if not header or not header.header_html:
        return html

    markup = header.header_html
    if header.header_repeat == HeaderRepeat.ALL_PAGES:
        markup = f'<div class="{_RUNNING_HEADER_CLASS}">{markup}</div>'

    match = _BODY_OPEN.search(html)
    if not match:
        return markup + html
    return html[: match.end()] + markup + html[match.end():]


class PdfDocument:
    """A laid-out PDF, serialized on demand."""

    def __init__(self, document):
        self._document = document

    @property
    def page_count(self) -> int:
        return len(self._document.pages)

    def to_bytes(self) -> bytes:
        return self._document.write_pdf()


class PDFGenerator:
    """Generates PDF documents from HTML views."""

    def __init__(self, base_url: Optional[str] = None):
        """
        Initialize PDF generator.

        Args:
            base_url: Base for resolving relative stylesheet and image links in the HTML
        """
        self.base_url = base_url

    def generate_from_html(self, html: str, options: PdfOptions) -> PdfDocument:
        # Lazy import to avoid loading WeasyPrint until a PDF is actually needed
        from weasyprint import CSS, HTML

        stylesheets = []
        page_css = build_page_css(options)
        if page_css:
            stylesheets.append(CSS(string=page_css))

        document = HTML(string=insert_header(html, options), base_url=self.base_url).render(
            stylesheets=stylesheets
        )
        logger.debug("Rendered PDF", extra={"pages": len(document.pages)})
        return PdfDocument(document)
