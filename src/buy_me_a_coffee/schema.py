from __future__ import annotations

from enum import Enum
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


T = TypeVar("T")

RecordId = Union[int, str]


def _wire(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class MemberStatus(str, Enum):
    """Membership filter accepted by the subscriptions endpoint."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ALL = "all"

    def __str__(self) -> str:
        return self.value


class _Record(BaseModel):
    """
    Immutable base for everything the API returns.

    Wire names are declared per field through ``validation_alias``; the
    Python attribute name is accepted as well. Unknown keys are ignored so
    new upstream fields do not break parsing.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _price_to_str(v):
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return v


def _null_to_false(v):
    return False if v is None else v


class Page(_Record, Generic[T]):
    """
    One page of a paginated list response.

    Pages are 1-indexed. Asking past the last page yields an empty ``data``
    list, not an error.
    """

    data: List[T]
    current_page: int = Field(
        ..., ge=1, validation_alias=_wire("current_page", "page")
    )
    last_page: Optional[int] = Field(
        None, validation_alias=_wire("last_page", "total_pages")
    )
    per_page: Optional[int] = None
    from_: Optional[int] = Field(None, validation_alias=_wire("from", "from_"))
    to: Optional[int] = None
    total: Optional[int] = None

    @property
    def total_pages(self) -> Optional[int]:
        return self.last_page

    @property
    def is_empty(self) -> bool:
        return not self.data

    @property
    def has_next_page(self) -> bool:
        if self.last_page is not None:
            return self.current_page < self.last_page
        # Without metadata the only hint is whether this page had anything.
        return not self.is_empty


class Membership(_Record):
    """A recurring membership (the API calls these subscriptions)."""

    id: RecordId = Field(..., validation_alias=_wire("subscription_id", "id"))
    payer_email: str
    payer_name: str

    status: Optional[str] = None
    cancelled_on: Optional[str] = Field(
        None, validation_alias=_wire("subscription_cancelled_on", "cancelled_on")
    )
    created_on: Optional[str] = Field(
        None, validation_alias=_wire("subscription_created_on", "created_on")
    )
    updated_on: Optional[str] = Field(
        None, validation_alias=_wire("subscription_updated_on", "updated_on")
    )
    current_period_start: Optional[str] = Field(
        None,
        validation_alias=_wire(
            "subscription_current_period_start", "current_period_start"
        ),
    )
    current_period_end: Optional[str] = Field(
        None,
        validation_alias=_wire("subscription_current_period_end", "current_period_end"),
    )
    coffee_price: Optional[str] = Field(
        None, validation_alias=_wire("subscription_coffee_price", "coffee_price")
    )
    coffee_num: Optional[int] = Field(
        None, validation_alias=_wire("subscription_coffee_num", "coffee_num")
    )
    is_cancelled: bool = Field(
        False, validation_alias=_wire("subscription_is_cancelled", "is_cancelled")
    )
    is_cancelled_at_period_end: bool = Field(
        False,
        validation_alias=_wire(
            "subscription_is_cancelled_at_period_end", "is_cancelled_at_period_end"
        ),
    )
    currency: Optional[str] = Field(
        None, validation_alias=_wire("subscription_currency", "currency")
    )
    message: Optional[str] = Field(
        None, validation_alias=_wire("subscription_message", "message")
    )
    message_visibility: Optional[int] = None
    duration_type: Optional[str] = Field(
        None, validation_alias=_wire("subscription_duration_type", "duration_type")
    )
    referer: Optional[str] = None
    country: Optional[str] = None
    transaction_id: Optional[str] = None

    @field_validator("coffee_price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _price_to_str(v)

    @field_validator("is_cancelled", "is_cancelled_at_period_end", mode="before")
    @classmethod
    def validate_flags(cls, v):
        return _null_to_false(v)


class Support(_Record):
    """A one-time support ("buy me a coffee") payment."""

    id: RecordId = Field(..., validation_alias=_wire("support_id", "id"))
    payer_email: str
    payer_name: str

    note: Optional[str] = Field(None, validation_alias=_wire("support_note", "note"))
    coffee_num: Optional[int] = Field(
        None, validation_alias=_wire("support_coffees", "coffee_num")
    )
    transaction_id: Optional[str] = None
    visibility: Optional[int] = Field(
        None, validation_alias=_wire("support_visibility", "visibility")
    )
    created_on: Optional[str] = Field(
        None, validation_alias=_wire("support_created_on", "created_on")
    )
    updated_on: Optional[str] = Field(
        None, validation_alias=_wire("support_updated_on", "updated_on")
    )
    transfer_id: Optional[str] = None
    supporter_name: Optional[str] = None
    coffee_price: Optional[str] = Field(
        None, validation_alias=_wire("support_coffee_price", "coffee_price")
    )
    email: Optional[str] = Field(None, validation_alias=_wire("support_email", "email"))
    is_refunded: bool = False
    currency: Optional[str] = Field(
        None, validation_alias=_wire("support_currency", "currency")
    )
    note_pinned: Optional[int] = Field(
        None, validation_alias=_wire("support_note_pinned", "note_pinned")
    )
    referer: Optional[str] = None
    country: Optional[str] = None
    payment_platform: Optional[str] = None

    @field_validator("coffee_price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _price_to_str(v)

    @field_validator("is_refunded", mode="before")
    @classmethod
    def validate_flags(cls, v):
        return _null_to_false(v)


class Extra(_Record):
    """The reward item an extra purchase was made for."""

    id: RecordId = Field(..., validation_alias=_wire("reward_id", "id"))
    title: Optional[str] = Field(None, validation_alias=_wire("reward_title", "title"))
    description: Optional[str] = Field(
        None, validation_alias=_wire("reward_description", "description")
    )
    confirmation_message: Optional[str] = Field(
        None,
        validation_alias=_wire("reward_confirmation_message", "confirmation_message"),
    )
    question: Optional[str] = Field(
        None, validation_alias=_wire("reward_question", "question")
    )
    used: Optional[int] = Field(None, validation_alias=_wire("reward_used", "used"))
    created_on: Optional[str] = Field(
        None, validation_alias=_wire("reward_created_on", "created_on")
    )
    updated_on: Optional[str] = Field(
        None, validation_alias=_wire("reward_updated_on", "updated_on")
    )
    deleted_on: Optional[str] = Field(
        None, validation_alias=_wire("reward_deleted_on", "deleted_on")
    )
    is_active: bool = Field(False, validation_alias=_wire("reward_is_active", "is_active"))
    image: Optional[str] = Field(None, validation_alias=_wire("reward_image", "image"))
    slots: Optional[int] = Field(None, validation_alias=_wire("reward_slots", "slots"))
    coffee_price: Optional[str] = Field(
        None, validation_alias=_wire("reward_coffee_price", "coffee_price")
    )
    order: Optional[int] = Field(None, validation_alias=_wire("reward_order", "order"))

    @field_validator("coffee_price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _price_to_str(v)

    @field_validator("is_active", mode="before")
    @classmethod
    def validate_flags(cls, v):
        return _null_to_false(v)


class Purchase(_Record):
    """An extra purchase. ``id`` is the purchase id, not ``extra.id``."""

    id: RecordId = Field(..., validation_alias=_wire("purchase_id", "id"))
    payer_email: str
    payer_name: str

    created_on: Optional[str] = Field(
        None, validation_alias=_wire("purchased_on", "created_on")
    )
    updated_on: Optional[str] = Field(
        None, validation_alias=_wire("purchase_updated_on", "updated_on")
    )
    is_revoked: bool = Field(
        False, validation_alias=_wire("purchase_is_revoked", "is_revoked")
    )
    amount: Optional[str] = Field(
        None, validation_alias=_wire("purchase_amount", "amount")
    )
    currency: Optional[str] = Field(
        None, validation_alias=_wire("purchase_currency", "currency")
    )
    question: Optional[str] = Field(
        None, validation_alias=_wire("purchase_question", "question")
    )
    extra: Optional[Extra] = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return _price_to_str(v)

    @field_validator("is_revoked", mode="before")
    @classmethod
    def validate_flags(cls, v):
        return _null_to_false(v)
