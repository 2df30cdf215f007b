import logging
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import MultipleResultsFound

from application_documents.config import Configuration
from application_documents.models import (
    Application,
    ApplicationState,
    Fund,
    LegalEntity,
    Person,
    Product,
    Review,
)
from application_documents.schemas import (
    ActivatedApplicationViewModel,
    HeaderRepeat,
    InReviewApplicationViewModel,
    PageNumbers,
    PendingApplicationViewModel,
)
from application_documents.services.document_generator import (
    ApplicationDocumentGenerator,
    build_view_model,
    in_review_message,
    normalize_base_uri,
    portfolio_total,
)
from application_documents.services.pdf_generator import PDF_HEADER_HTML


class _DataContext:
    def __init__(self, applications=None, error=None):
        self.applications = applications or {}
        self.error = error
        self.calls = []

    def get_application(self, application_id):
        self.calls.append(application_id)
        if self.error is not None:
            raise self.error
        return self.applications.get(application_id)


class _PathProvider:
    def __init__(self):
        self.keys = []

    def get(self, key):
        self.keys.append(key)
        return f"/{key}.html"


class _ViewGenerator:
    def __init__(self):
        self.calls = []

    def generate_from_path(self, template_ref, view_model):
        self.calls.append((template_ref, view_model))
        return f"<html><body>{view_model.full_name}</body></html>"


class _Pdf:
    def __init__(self, html):
        self.html = html

    def to_bytes(self):
        return b"%PDF-" + self.html.encode()


class _PdfGenerator:
    def __init__(self):
        self.calls = []

    def generate_from_html(self, html, options):
        self.calls.append((html, options))
        return _Pdf(html)


CONFIG = Configuration(support_email="help@bank.test", signature="Client Services", tax_rate=Decimal("0.5"))


def _application(state=ApplicationState.PENDING, **overrides):
    fields = dict(
        id="app-1",
        reference_number="REF1",
        state=state,
        date=date(2024, 3, 1),
        person=Person(first_name="Jane", surname="Doe"),
        is_legal_entity=False,
        products=[
            Product(name="Savings", funds=[Fund(name="Growth", amount=Decimal("100"), fees=Decimal("10"))]),
            Product(name="Retirement", funds=[Fund(name="Income", amount=Decimal("100"), fees=Decimal("10"))]),
        ],
    )
    fields.update(overrides)
    return Application(**fields)


def _generator(application=None, data_context=None):
    data_context = data_context or _DataContext({application.id: application} if application else {})
    parts = SimpleNamespace(
        data_context=data_context,
        paths=_PathProvider(),
        views=_ViewGenerator(),
        pdfs=_PdfGenerator(),
    )
    parts.generator = ApplicationDocumentGenerator(
        data_context=parts.data_context,
        template_path_provider=parts.paths,
        view_generator=parts.views,
        configuration=CONFIG,
        pdf_generator=parts.pdfs,
    )
    return parts


def _warnings(caplog):
    return [r for r in caplog.records if r.levelno == logging.WARNING]


def test_unknown_application_returns_none_and_warns_once(caplog):
    caplog.set_level(logging.WARNING)
    parts = _generator()

    assert parts.generator.generate("missing-id", "http://x/") is None

    warnings = _warnings(caplog)
    assert len(warnings) == 1
    assert "missing-id" in warnings[0].getMessage()
    assert parts.views.calls == []
    assert parts.pdfs.calls == []


@pytest.mark.parametrize("state", [ApplicationState.CLOSED, ApplicationState.DECLINED])
def test_states_without_document_return_none_and_warn_once(caplog, state):
    caplog.set_level(logging.WARNING)
    parts = _generator(_application(state=state))

    assert parts.generator.generate("app-1", "http://x") is None

    warnings = _warnings(caplog)
    assert len(warnings) == 1
    assert state.description in warnings[0].getMessage()
    assert parts.paths.keys == []
    assert parts.pdfs.calls == []


def test_multiple_matches_propagate(caplog):
    caplog.set_level(logging.DEBUG)
    parts = _generator(data_context=_DataContext(error=MultipleResultsFound("Multiple rows were found")))

    with pytest.raises(MultipleResultsFound):
        parts.generator.generate("app-1", "http://x")
    assert parts.pdfs.calls == []
    assert _warnings(caplog) == []
    assert not [r for r in caplog.records if r.name.startswith("application_documents")]


def test_pending_document_uses_pending_template_and_full_name():
    parts = _generator(_application())

    pdf = parts.generator.generate("app-1", "http://x/")

    assert parts.paths.keys == ["PendingApplication"]
    template_ref, view_model = parts.views.calls[0]
    assert template_ref == "http://x/PendingApplication.html"
    assert isinstance(view_model, PendingApplicationViewModel)
    assert view_model.full_name == "Jane Doe"
    assert view_model.reference_number == "REF1"
    assert view_model.state == "Pending"
    assert view_model.applied_on == date(2024, 3, 1)
    assert view_model.support_email == "help@bank.test"
    assert view_model.signature == "Client Services"
    assert pdf == b"%PDF-<html><body>Jane Doe</body></html>"


def test_output_is_pdf_serialization_of_rendered_view():
    parts = _generator(_application(state=ApplicationState.ACTIVATED))

    pdf = parts.generator.generate("app-1", "http://x")

    html, options = parts.pdfs.calls[0]
    assert html == "<html><body>Jane Doe</body></html>"
    assert pdf == _Pdf(html).to_bytes()
    assert options.page_numbers == PageNumbers.NUMERIC
    assert options.header_options.header_repeat == HeaderRepeat.FIRST_PAGE_ONLY
    assert options.header_options.header_html == PDF_HEADER_HTML


def test_activated_view_model_totals_portfolio():
    parts = _generator(_application(state=ApplicationState.ACTIVATED))

    parts.generator.generate("app-1", "http://x")

    assert parts.paths.keys == ["ActivatedApplication"]
    _, view_model = parts.views.calls[0]
    assert isinstance(view_model, ActivatedApplicationViewModel)
    assert [f.name for f in view_model.portfolio_funds] == ["Growth", "Income"]
    assert view_model.portfolio_total_amount == Decimal("90")
    assert view_model.legal_entity is None


def test_in_review_view_model_for_legal_entity():
    application = _application(
        state=ApplicationState.IN_REVIEW,
        is_legal_entity=True,
        legal_entity=LegalEntity(company_name="Acme Holdings", registration_number="2020/123456/07"),
        current_review=Review(reason="bank account mismatch"),
    )
    parts = _generator(application)

    parts.generator.generate("app-1", "http://x")

    assert parts.paths.keys == ["InReviewApplication"]
    _, view_model = parts.views.calls[0]
    assert isinstance(view_model, InReviewApplicationViewModel)
    assert view_model.state == "In Review"
    assert view_model.in_review_message == (
        "Your application has been placed in review pending outstanding bank account verification."
    )
    assert view_model.in_review_information.reason == "bank account mismatch"
    assert view_model.legal_entity.company_name == "Acme Holdings"
    assert view_model.portfolio_total_amount == Decimal("90")


def test_legal_entity_omitted_when_flag_is_false():
    application = _application(
        state=ApplicationState.ACTIVATED,
        is_legal_entity=False,
        legal_entity=LegalEntity(company_name="Acme Holdings"),
    )

    view_model = build_view_model(application, CONFIG)

    assert view_model.legal_entity is None


def test_view_model_does_not_mutate_application():
    application = _application(state=ApplicationState.ACTIVATED)
    before = [[(f.name, f.amount, f.fees) for f in p.funds] for p in application.products]

    build_view_model(application, CONFIG)

    after = [[(f.name, f.amount, f.fees) for f in p.funds] for p in application.products]
    assert after == before
    assert application.state == ApplicationState.ACTIVATED


def test_portfolio_total():
    funds = [
        SimpleNamespace(amount=Decimal("100"), fees=Decimal("10")),
        SimpleNamespace(amount=Decimal("100"), fees=Decimal("10")),
    ]
    assert portfolio_total(funds, Decimal("0.5")) == Decimal("90")
    assert portfolio_total([], Decimal("0.5")) == Decimal("0")


@pytest.mark.parametrize(
    "reason,suffix",
    [
        ("unverified address on file", " pending outstanding address verification for FICA purposes."),
        ("bank account mismatch", " pending outstanding bank account verification."),
        ("address and bank details", " pending outstanding address verification for FICA purposes."),
        ("unusual deposits", " because of suspicious account behaviour. Please contact support ASAP."),
        (None, " because of suspicious account behaviour. Please contact support ASAP."),
    ],
)
def test_in_review_message(reason, suffix):
    assert in_review_message(reason) == "Your application has been placed in review" + suffix


def test_normalize_base_uri_strips_only_the_trailing_separator():
    assert normalize_base_uri("http://x/") == "http://x"
    assert normalize_base_uri("http://x") == "http://x"
    assert normalize_base_uri("http://x//") == "http://x/"


def test_constructor_requires_collaborators():
    with pytest.raises(ValueError, match="data_context"):
        ApplicationDocumentGenerator(None, _PathProvider(), _ViewGenerator(), CONFIG, _PdfGenerator())
    with pytest.raises(ValueError, match="pdf_generator"):
        ApplicationDocumentGenerator(_DataContext(), _PathProvider(), _ViewGenerator(), CONFIG, None)


def test_injected_logger_receives_warnings(caplog):
    caplog.set_level(logging.WARNING)
    custom = logging.getLogger("tests.document_generator")
    generator = ApplicationDocumentGenerator(
        _DataContext(), _PathProvider(), _ViewGenerator(), CONFIG, _PdfGenerator(), logger=custom
    )

    generator.generate("nope", "http://x")

    assert [r.name for r in _warnings(caplog)] == ["tests.document_generator"]
