"""
FastAPI application serving application summary documents.
"""

from fastapi import FastAPI, HTTPException, Depends
from fastapi.responses import Response
import os
import logging
from sqlalchemy.orm import Session

from application_documents.config import load_configuration
from application_documents.database import get_db, init_db
from application_documents.services.data_context import DataContext
from application_documents.services.document_generator import ApplicationDocumentGenerator
from application_documents.services.pdf_generator import PDFGenerator
from application_documents.services.template_paths import TemplatePathProvider, default_base_uri
from application_documents.services.view_generator import ViewGenerator

logger = logging.getLogger("application_documents.api")

app = FastAPI(
    title="Application Documents",
    description="State-specific PDF summaries of financial applications",
    version="1.0.0"
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


def get_document_generator(db: Session = Depends(get_db)) -> ApplicationDocumentGenerator:
    """Dependency building a generator bound to the request's session."""
    return ApplicationDocumentGenerator(
        data_context=DataContext(db),
        template_path_provider=TemplatePathProvider(),
        view_generator=ViewGenerator(),
        configuration=load_configuration(),
        pdf_generator=PDFGenerator(),
        logger=logging.getLogger("application_documents.document_generator"),
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/applications/{application_id}/document")
def get_application_document(
    application_id: str,
    generator: ApplicationDocumentGenerator = Depends(get_document_generator),
):
    """
    Render the application's summary document as a PDF.

    Templates always come from the configured base; callers cannot choose it.
    """
    base_uri = os.getenv("TEMPLATE_BASE_URI") or default_base_uri()

    pdf_bytes = generator.generate(application_id, base_uri)
    if pdf_bytes is None:
        raise HTTPException(status_code=404, detail="No document available for this application")

    logger.info("document", extra={"application_id": application_id, "size_bytes": len(pdf_bytes)})
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="application_{application_id}.pdf"'},
    )
