"""Payment-related Pydantic schemas.

Field names follow the payment API's camelCase JSON.
"""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting camelCase JSON and snake_case kwargs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentItem(CamelModel):
    """Item being purchased."""

    item_identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    image_url: str | None = None
    price: Decimal = Field(..., gt=0)
    currency_code: str | None = None


class PaymentCreate(CamelModel):
    """Schema for creating a payment."""

    buyer_dapp_portal_address: str = Field(..., min_length=1)
    items: list[PaymentItem] = Field(..., min_length=1)
    pg_type: Literal["CRYPTO", "STRIPE"] = "CRYPTO"
    currency_code: str = "KAIA"
    price: Decimal = Field(..., gt=0)
    # true = Kairos testnet, false = Kaia mainnet
    test_mode: bool = True


class PaymentStatusCallback(CamelModel):
    """Status-change notification posted by the payment API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    payment_id: str | None = None
    status: str | None = None

    @field_validator("payment_id", "status", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str | None:
        """Accept non-string IDs and statuses in their string form."""
        if v is None:
            return None
        return str(v)


class PaymentFinalizeRequest(CamelModel):
    """Schema for finalizing a payment."""

    payment_id: str = Field(..., min_length=1)


class ItemLockRequest(BaseModel):
    """Lock/unlock callback body for limited-stock items."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)


class CallbackAck(BaseModel):
    """Acknowledgement returned to every payment API callback."""

    success: bool = True
