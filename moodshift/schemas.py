"""Request/response models for the HTTP surface."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_GENDERS = ("male", "female")


class ProcessRequest(BaseModel):
    """Body of ``POST /processUserInput``.

    Parsing is lenient and required-field checks happen in
    ``is_complete``, so an incomplete body maps to the service's own 400
    rather than a framework 422. An unrecognized ``voiceGender`` is read as
    ``female``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    device_id: str = Field(default="", alias="deviceId")
    text: str | None = None
    language: str = "en"
    locale: str = "en-US"
    voice_gender: Literal["male", "female"] = Field(default="female", alias="voiceGender")
    crystal_voice: bool = Field(default=False, alias="crystalVoice")
    stronger_mode: bool = Field(default=False, alias="strongerMode")
    original_response: str | None = Field(default=None, alias="originalResponse")

    @field_validator("voice_gender", mode="before")
    @classmethod
    def _normalize_gender(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in _GENDERS:
            return value.strip().lower()
        return "female"

    @field_validator("language", "locale", mode="before")
    @classmethod
    def _blank_to_default(cls, value: object, info) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "en" if info.field_name == "language" else "en-US"
        return value

    @field_validator("crystal_voice", "stronger_mode", mode="before")
    @classmethod
    def _none_is_false(cls, value: object) -> object:
        return False if value is None else value

    def is_complete(self) -> bool:
        if not self.device_id.strip():
            return False
        if self.stronger_mode:
            return bool(self.original_response and self.original_response.strip())
        return bool(self.text and self.text.strip())


class ProcessResponse(BaseModel):
    success: bool = True
    response: str
    audio_url: str = Field(serialization_alias="audioUrl")
    voice_id: str = Field(serialization_alias="voiceId")
    engine: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    response: str | None = None
