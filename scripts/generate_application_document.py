#!/usr/bin/env python3
"""
Script to render an application's summary document to a PDF file.
Usage: python scripts/generate_application_document.py <application_id> <output_pdf> [base_uri]
"""

import os
import sys
from pathlib import Path

from application_documents.config import load_configuration
from application_documents.database import SessionLocal
from application_documents.services.data_context import DataContext
from application_documents.services.document_generator import ApplicationDocumentGenerator
from application_documents.services.pdf_generator import PDFGenerator
from application_documents.services.template_paths import TemplatePathProvider, default_base_uri
from application_documents.services.view_generator import ViewGenerator


def generate_document(application_id: str, output_path: str, base_uri: str) -> bool:
    """Generate the document and write it to output_path."""
    db = SessionLocal()
    try:
        generator = ApplicationDocumentGenerator(
            data_context=DataContext(db),
            template_path_provider=TemplatePathProvider(),
            view_generator=ViewGenerator(),
            configuration=load_configuration(),
            pdf_generator=PDFGenerator(),
        )
        pdf_bytes = generator.generate(application_id, base_uri)
    finally:
        db.close()

    if pdf_bytes is None:
        print(f"✗ No document generated for application {application_id} (see log for the reason)")
        return False

    Path(output_path).write_bytes(pdf_bytes)
    print(f"✓ Wrote {len(pdf_bytes)} bytes to {output_path}")
    return True


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python scripts/generate_application_document.py <application_id> <output_pdf> [base_uri]")
        sys.exit(1)

    application_id = sys.argv[1]
    output_path = sys.argv[2]
    base_uri = sys.argv[3] if len(sys.argv) > 3 else os.getenv("TEMPLATE_BASE_URI") or default_base_uri()

    success = generate_document(application_id, output_path, base_uri)
    sys.exit(0 if success else 1)
