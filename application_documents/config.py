"""
Process-wide document configuration, read from the environment.
"""

from decimal import Decimal
import os

from pydantic import BaseModel, Field


DEFAULT_SUPPORT_EMAIL = "support@example.com"
DEFAULT_SIGNATURE = "The Client Services Team"
DEFAULT_TAX_RATE = "1"


class Configuration(BaseModel):
    """Read-only settings shared by every generated document."""
    model_config = {"frozen": True}

    support_email: str = Field(..., description="Address clients are asked to contact")
    signature: str = Field(..., description="Closing signature text or image reference")
    tax_rate: Decimal = Field(..., ge=0, description="Multiplier applied to each fund's net amount")


def load_configuration() -> Configuration:
    """Build the configuration from SUPPORT_EMAIL, DOCUMENT_SIGNATURE and TAX_RATE."""
    return Configuration(
        support_email=os.getenv("SUPPORT_EMAIL", DEFAULT_SUPPORT_EMAIL),
        signature=os.getenv("DOCUMENT_SIGNATURE", DEFAULT_SIGNATURE),
        tax_rate=Decimal(os.getenv("TAX_RATE", DEFAULT_TAX_RATE)),
    )
