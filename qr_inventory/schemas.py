"""
Pydantic schemas for request/response validation in the QR Inventory service.

Request bodies accept both the current field names (``code``,
``imageReference``) and the ones older clients send (``qr_code``,
``image_url``). Responses always use ``code`` and ``imageReference``.
"""
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field, StrictInt, field_validator, model_validator

CODE_MAX_LENGTH = 255
NAME_MAX_LENGTH = 255
# Largest value the INTEGER column holds
QUANTITY_MAX = 2**31 - 1
# Codes are path segments in /items/{code}
CODE_PATTERN = r"^[^/]*$"

IMAGE_REFERENCE_ALIASES = AliasChoices("imageReference", "image_reference", "image_url")


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class InventoryItemBase(BaseModel):
    """Base schema with the mutable inventory item attributes."""
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    quantity: StrictInt = Field(..., ge=0, le=QUANTITY_MAX)
    description: Optional[str] = None
    image_reference: Optional[str] = Field(None, validation_alias=IMAGE_REFERENCE_ALIASES)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return _strip(value)


class InventoryItemCreate(InventoryItemBase):
    """Schema for creating an item. A blank or missing code is generated by the server."""
    code: Optional[str] = Field(
        None,
        max_length=CODE_MAX_LENGTH,
        pattern=CODE_PATTERN,
        validation_alias=AliasChoices("code", "qr_code"),
    )


class InventoryItemUpdate(BaseModel):
    """
    Schema for updating an existing item. All fields are optional.

    Only the fields present in the request body are written; an omitted field
    keeps its stored value. ``description`` and ``imageReference`` may be
    cleared with an explicit null, ``name`` and ``quantity`` may not.
    The code itself is immutable and is ignored if sent.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    quantity: Optional[StrictInt] = Field(None, ge=0, le=QUANTITY_MAX)
    description: Optional[str] = None
    image_reference: Optional[str] = Field(None, validation_alias=IMAGE_REFERENCE_ALIASES)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return _strip(value)

    @model_validator(mode="after")
    def check_required_not_null(self) -> "InventoryItemUpdate":
        for field in ("name", "quantity"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class InventoryQuantityUpdate(BaseModel):
    """Schema for the quantity-only update."""
    quantity: StrictInt = Field(..., ge=0, le=QUANTITY_MAX)


class InventoryItem(BaseModel):
    """
    Schema for inventory item responses, includes all database fields.

    Attributes:
        id (int): Store-assigned primary key
        name (str): Display name
        quantity (int): Units in stock
        code (str): Unique QR code
        description (str): Optional free text
        image_reference (str): Optional image reference, serialized as ``imageReference``
    """
    id: int
    name: str
    quantity: int
    code: str
    description: Optional[str] = None
    image_reference: Optional[str] = Field(
        None,
        validation_alias=IMAGE_REFERENCE_ALIASES,
        serialization_alias="imageReference",
    )

    class Config:
        from_attributes = True


class Message(BaseModel):
    """Schema for plain confirmation and error bodies."""
    message: str
