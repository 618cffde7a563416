"""Pydantic models for API payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class InventoryItemCreate(BaseModel):
    """Request body for adding a leftover."""

    name: str
    days_until_expiry: int | None = None
    date_added: datetime | None = None
    category: str | None = None
    notes: str | None = None
    image_ref: str | None = None


class InventoryItemUpdate(BaseModel):
    """Request body for updating a leftover; only sent fields change."""

    name: str | None = None
    days_until_expiry: int | None = None
    date_added: datetime | None = None
    category: str | None = None
    notes: str | None = None
    image_ref: str | None = None


class RecipeRatingRequest(BaseModel):
    """Request body for rating a recipe."""

    rating: int = Field(ge=1, le=5)
    leftover_items: list[str] | None = None


class TelegramUser(BaseModel):
    """Telegram user payload."""

    id: int
    is_bot: bool | None = None
    first_name: str | None = None
    username: str | None = None


class TelegramChat(BaseModel):
    """Telegram chat payload."""

    id: int
    type: str


class TelegramMessage(BaseModel):
    """Telegram message payload."""

    message_id: int
    date: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramUpdate(BaseModel):
    """Telegram update payload."""

    update_id: int
    message: TelegramMessage | None = None
