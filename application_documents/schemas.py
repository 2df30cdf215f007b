"""
View models handed to document templates, and PDF rendering options.

Each document variant is its own model, discriminated by `template_key`, so a
view model always identifies exactly one template.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class FundView(BaseModel):
    """A fund as listed in the portfolio section."""
    model_config = {"frozen": True, "from_attributes": True}

    name: str
    amount: Decimal
    fees: Decimal


class LegalEntityView(BaseModel):
    model_config = {"frozen": True, "from_attributes": True}

    company_name: str
    registration_number: Optional[str] = None
    company_type: Optional[str] = None


class ReviewView(BaseModel):
    model_config = {"frozen": True, "from_attributes": True}

    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class ApplicationViewModel(BaseModel):
    """Fields shared by every application document."""
    model_config = {"frozen": True}

    reference_number: str
    state: str = Field(..., description="Human-readable lifecycle state")
    full_name: str
    applied_on: date
    support_email: str
    signature: str


class PendingApplicationViewModel(ApplicationViewModel):
    template_key: Literal["PendingApplication"] = "PendingApplication"


class ActivatedApplicationViewModel(ApplicationViewModel):
    template_key: Literal["ActivatedApplication"] = "ActivatedApplication"

    legal_entity: Optional[LegalEntityView] = None
    portfolio_funds: List[FundView] = Field(default_factory=list)
    portfolio_total_amount: Decimal = Decimal("0")


class InReviewApplicationViewModel(ApplicationViewModel):
    template_key: Literal["InReviewApplication"] = "InReviewApplication"

    legal_entity: Optional[LegalEntityView] = None
    portfolio_funds: List[FundView] = Field(default_factory=list)
    portfolio_total_amount: Decimal = Decimal("0")
    in_review_message: str
    in_review_information: Optional[ReviewView] = None


DocumentViewModel = Annotated[
    Union[PendingApplicationViewModel, ActivatedApplicationViewModel, InReviewApplicationViewModel],
    Field(discriminator="template_key"),
]


class PageNumbers(Enum):
    NONE = "none"
    NUMERIC = "numeric"
    ROMAN = "roman"


class HeaderRepeat(Enum):
    FIRST_PAGE_ONLY = "first_page_only"
    ALL_PAGES = "all_pages"


class HeaderOptions(BaseModel):
    model_config = {"frozen": True}

    header_repeat: HeaderRepeat = HeaderRepeat.FIRST_PAGE_ONLY
    header_html: str = ""


class PdfOptions(BaseModel):
    """How the HTML view is laid out as a PDF."""
    model_config = {"frozen": True}

    page_numbers: PageNumbers = PageNumbers.NONE
    header_options: Optional[HeaderOptions] = None
