# findmyhome/schemas/models.py

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNTITLED_CHAT = "Untitled chat"


def _none_to_list(v: Any) -> Any:
    # Server payloads sometimes carry null (or a non-list) where an array is expected.
    if v is None or not isinstance(v, list | tuple):
        return []
    return v


def _loose_text(v: Any) -> Any:
    # Scalars (numeric city codes, ids) become text; containers are dropped.
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, int | float):
        return str(v)
    return None


_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}


def _loose_bool(v: Any) -> bool | None:
    if isinstance(v, bool) or v is None:
        return v
    if isinstance(v, int | float):
        return bool(v) if v in (0, 1) else None
    if isinstance(v, str):
        text = v.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    return None


# =========================
# Recommendations
# =========================


class Property(BaseModel):
    """
    One recommended home as returned by the backend.

    Every field is optional. Numeric fields are typed loosely (``Any``): a value
    the server sends as a string is preserved; numeric strings are parsed by
    sorting/formatting and anything else counts as missing. Text and flag
    fields are coerced the same way: a scalar becomes text, an unreadable
    balcony flag becomes None.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = Field("", description="Listing title.")
    cityName: str | None = Field(None, description="City the property is located in.")
    beds: Any = Field(None, description="Bedroom count.")
    baths: Any = Field(None, description="Bathroom count.")
    price: Any = Field(None, description="List price (INR).")
    totalArea: Any = Field(None, description="Total area in square feet.")
    pricePerSqft: Any = Field(None, description="Price per square foot (INR).")
    room_type: str | None = Field(None, alias="roomType", description="Room layout, e.g. '2 BHK'.")
    property_type: str | None = Field(None, alias="propertyType", description="Apartment, villa, ...")
    hasBalcony: bool | None = Field(None, description="Balcony flag; None when unknown.")
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_never_none(cls, v: Any) -> Any:
        v = _loose_text(v)
        return "" if v is None else v

    @field_validator("cityName", "room_type", "property_type", "description", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _loose_text(v)

    @field_validator("hasBalcony", mode="before")
    @classmethod
    def _coerce_balcony(cls, v: Any) -> bool | None:
        return _loose_bool(v)


class Turn(BaseModel):
    """One question/answer exchange plus the recommendations it produced."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    question: str | None = None
    answer: str | None = None
    query_used: str | None = None
    recommended_properties: list[Property] = Field(default_factory=list)

    @field_validator("question", "answer", "query_used", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _loose_text(v)

    @field_validator("recommended_properties", mode="before")
    @classmethod
    def _coerce_recs(cls, v: Any) -> Any:
        return _none_to_list(v)

    def display_question(self) -> str:
        return self.question or self.query_used or ""


# =========================
# Conversations
# =========================


class ChatSession(BaseModel):
    """A conversation thread as listed by ``/my-chats``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    thread_id: str
    title: str | None = None
    created_at: str = ""
    last_active: str = ""

    @field_validator("thread_id", "title", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _loose_text(v)

    @field_validator("created_at", "last_active", mode="before")
    @classmethod
    def _timestamp_never_none(cls, v: Any) -> Any:
        v = _loose_text(v)
        return "" if v is None else v

    def display_title(self, fallback: str = UNTITLED_CHAT) -> str:
        return (self.title or "").strip() or fallback


class ConversationResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    thread_id: str = ""
    conversation_history: list[Turn] = Field(default_factory=list)
    user_queries: list[str] = Field(default_factory=list)

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _coerce_history(cls, v: Any) -> Any:
        return _none_to_list(v)

    @field_validator("user_queries", mode="before")
    @classmethod
    def _coerce_queries(cls, v: Any) -> Any:
        return [q for q in map(_loose_text, _none_to_list(v)) if q is not None]

    @field_validator("thread_id", mode="before")
    @classmethod
    def _coerce_thread(cls, v: Any) -> Any:
        v = _loose_text(v)
        return "" if v is None else v


class ChatState(BaseModel):
    """
    Server-computed conversation state. Only ``turn_log`` is interpreted by the
    client; any other keys the backend sends are kept so the cached snapshot
    mirrors the response.
    """

    model_config = ConfigDict(extra="allow")

    turn_log: list[Turn] = Field(default_factory=list)

    @field_validator("turn_log", mode="before")
    @classmethod
    def _coerce_turn_log(cls, v: Any) -> Any:
        return _none_to_list(v)


class InvokeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    state: ChatState = Field(default_factory=ChatState)

    @field_validator("state", mode="before")
    @classmethod
    def _state_never_none(cls, v: Any) -> Any:
        return {} if v is None else v


class BootstrapResponse(InvokeResponse):
    thread_id: str


# =========================
# Preferences
# =========================


class Preferences(BaseModel):
    """Saved search preferences, as stored by the backend."""

    model_config = ConfigDict(extra="ignore")

    min_price: Any = None
    max_price: Any = None
    min_area: Any = None
    max_area: Any = None
    preferred_cities: list[str] = Field(default_factory=list)

    @field_validator("preferred_cities", mode="before")
    @classmethod
    def _coerce_cities(cls, v: Any) -> Any:
        return _none_to_list(v)


class PreferencesForm(BaseModel):
    """
    Raw, user-editable preference form. Numeric fields hold the text exactly as
    typed (digits only); parsing happens in the validator.
    """

    minPrice: str = "55000"
    maxPrice: str = "2000000"
    minArea: str = "200"
    maxArea: str = "1000"
    preferredCities: list[str] = Field(default_factory=list)


# =========================
# Client-side view state
# =========================


class ConversationView(BaseModel):
    """Immutable snapshot of the synchronizer, handed to listeners after each change."""

    model_config = ConfigDict(frozen=True)

    thread_id: str = ""
    title: str = UNTITLED_CHAT
    turn_log: tuple[Turn, ...] = ()
    recommendations: tuple[Property, ...] = ()
    status: str | None = None
    pending_reply: bool = False


# =========================
# Settings
# =========================


class ClientSettings(BaseModel):
    """
    Connection and storage settings for the client.

    Loaded by ``findmyhome.inputs.settings.SettingsLoader`` from an optional JSON
    file plus ``FINDMYHOME_*`` environment overrides.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="ignore")

    api_base: str = Field("http://localhost:8000", description="Backend base URL, without trailing slash.")
    timeout_s: float = Field(15.0, gt=0, description="HTTP timeout in seconds.")
    state_dir: Path = Field(
        default=Path(".findmyhome"),
        description="Directory holding the durable session file (token, active thread).",
    )
    user_agent: str = Field("findmyhome-client/0.1", description="User-Agent sent with every request.")

    @field_validator("api_base")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("api_base must not be empty")
        return v.rstrip("/")
