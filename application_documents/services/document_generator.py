"""
PDF summary documents for applications.

The template, and the fields computed for it, depend on the application's
lifecycle state. Only pending, activated and in-review applications get a
document.
"""

import logging
from decimal import Decimal
from itertools import chain
from typing import List, Optional

from application_documents.models import Application, ApplicationState, Fund
from application_documents.schemas import (
    ActivatedApplicationViewModel,
    DocumentViewModel,
    FundView,
    HeaderOptions,
    HeaderRepeat,
    InReviewApplicationViewModel,
    LegalEntityView,
    PageNumbers,
    PdfOptions,
    PendingApplicationViewModel,
    ReviewView,
)
from application_documents.services.pdf_generator import PDF_HEADER_HTML


DOCUMENT_STATES = frozenset(
    {ApplicationState.PENDING, ApplicationState.ACTIVATED, ApplicationState.IN_REVIEW}
)

IN_REVIEW_PREFIX = "Your application has been placed in review"
ADDRESS_REVIEW_SUFFIX = " pending outstanding address verification for FICA purposes."
BANK_REVIEW_SUFFIX = " pending outstanding bank account verification."
DEFAULT_REVIEW_SUFFIX = " because of suspicious account behaviour. Please contact support ASAP."

DOCUMENT_PDF_OPTIONS = PdfOptions(
    page_numbers=PageNumbers.NUMERIC,
    header_options=HeaderOptions(
        header_repeat=HeaderRepeat.FIRST_PAGE_ONLY,
        header_html=PDF_HEADER_HTML,
    ),
)


def normalize_base_uri(base_uri: str) -> str:
    """Drop one trailing '/' so template paths can be appended directly."""
    if base_uri.endswith("/"):
        return base_uri[:-1]
    return base_uri


def full_name(application: Application) -> str:
    return f"{application.person.first_name} {application.person.surname}"


def portfolio_funds(application: Application) -> List[Fund]:
    """All funds across all products, in product order."""
    return list(chain.from_iterable(product.funds for product in application.products))


def portfolio_total(funds: List[Fund], tax_rate: Decimal) -> Decimal:
    """Sum of (amount - fees) * tax_rate over the funds."""
    return sum(
        ((Decimal(fund.amount) - Decimal(fund.fees)) * tax_rate for fund in funds),
        Decimal("0"),
    )


def in_review_message(reason: Optional[str]) -> str:
    reason = reason or ""
    if "address" in reason:
        return IN_REVIEW_PREFIX + ADDRESS_REVIEW_SUFFIX
    if "bank" in reason:
        return IN_REVIEW_PREFIX + BANK_REVIEW_SUFFIX
    return IN_REVIEW_PREFIX + DEFAULT_REVIEW_SUFFIX


def build_view_model(application: Application, configuration) -> DocumentViewModel:
    """
    Assemble the view model for the application's state.

    Values are copied into new frozen models; the application is only read.
    Raises ValueError for a state that has no document.
    """
    common = dict(
        reference_number=application.reference_number,
        state=application.state.description,
        full_name=full_name(application),
        applied_on=application.date,
        support_email=configuration.support_email,
        signature=configuration.signature,
    )

    if application.state == ApplicationState.PENDING:
        return PendingApplicationViewModel(**common)

    if application.state not in (ApplicationState.ACTIVATED, ApplicationState.IN_REVIEW):
        raise ValueError(f"No document is defined for state '{application.state.description}'")

    funds = portfolio_funds(application)
    legal_entity = None
    if application.is_legal_entity and application.legal_entity is not None:
        legal_entity = LegalEntityView.model_validate(application.legal_entity)
    portfolio = dict(
        legal_entity=legal_entity,
        portfolio_funds=[FundView.model_validate(fund) for fund in funds],
        portfolio_total_amount=portfolio_total(funds, configuration.tax_rate),
    )

    if application.state == ApplicationState.ACTIVATED:
        return ActivatedApplicationViewModel(**common, **portfolio)

    review = application.current_review
    return InReviewApplicationViewModel(
        **common,
        **portfolio,
        in_review_message=in_review_message(review.reason if review is not None else None),
        in_review_information=ReviewView.model_validate(review) if review is not None else None,
    )


class ApplicationDocumentGenerator:
    """Produces the PDF summary for one application."""

    def __init__(
        self,
        data_context,
        template_path_provider,
        view_generator,
        configuration,
        pdf_generator,
        logger: Optional[logging.Logger] = None,
    ):
        collaborators = {
            "data_context": data_context,
            "template_path_provider": template_path_provider,
            "view_generator": view_generator,
            "configuration": configuration,
            "pdf_generator": pdf_generator,
        }
        for name, value in collaborators.items():
            if value is None:
                raise ValueError(f"{name} is required")

        self.data_context = data_context
        self.template_path_provider = template_path_provider
        self.view_generator = view_generator
        self.configuration = configuration
        self.pdf_generator = pdf_generator
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, application_id: str, base_uri: str) -> Optional[bytes]:
        """
        Render the application's document as PDF bytes.

        Returns None, with a warning logged, when the application does not exist
        or is in a state without a document. Lookup, template and rendering
        errors propagate.
        """
        application = self.data_context.get_application(application_id)
        if application is None:
            self.logger.warning(
                f"No application found for id '{application_id}'",
                extra={"application_id": str(application_id)},
            )
            return None

        base_uri = normalize_base_uri(base_uri)

        if application.state not in DOCUMENT_STATES:
            self.logger.warning(
                f"The application is in state '{application.state.description}' "
                "and no valid document can be generated for it.",
                extra={"application_id": str(application_id), "state": application.state.value},
            )
            return None

        view_model = build_view_model(application, self.configuration)
        path = self.template_path_provider.get(view_model.template_key)
        html = self.view_generator.generate_from_path(f"{base_uri}{path}", view_model)

        pdf = self.pdf_generator.generate_from_html(html, DOCUMENT_PDF_OPTIONS)
        return pdf.to_bytes()
