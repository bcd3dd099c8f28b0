from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


PageSize = Literal["A3", "A4", "A5", "Letter", "Legal", "Tabloid"]
Orientation = Literal["portrait", "landscape"]
Theme = Literal["light", "dark", "print"]
Template = Literal["minimal", "professional"]
Action = Literal["download", "view", "share"]

_PAGE_SIZES = {name.lower(): name for name in ("A3", "A4", "A5", "Letter", "Legal", "Tabloid")}

# Named margins offered by the UI, in millimetres.
MARGIN_PRESETS = {"none": 0, "small": 10, "medium": 20, "large": 30}

THEME_ALIASES = {"print-friendly": "print"}


class ConversionOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    page_size: PageSize = "A4"
    orientation: Orientation = "portrait"
    margin: int = Field(default=20, ge=0, le=100)
    theme: Theme = "light"
    template: Template = "minimal"

    @field_validator("page_size", mode="before")
    @classmethod
    def _canonical_page_size(cls, value):
        if isinstance(value, str):
            return _PAGE_SIZES.get(value.strip().lower(), value)
        return value

    @field_validator("orientation", "template", mode="before")
    @classmethod
    def _lowercase(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("margin", mode="before")
    @classmethod
    def _margin_preset(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().removesuffix("mm")
            if key in MARGIN_PRESETS:
                return MARGIN_PRESETS[key]
            return key
        return value

    @field_validator("theme", mode="before")
    @classmethod
    def _theme_alias(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return THEME_ALIASES.get(key, key)
        return value


class ConvertRequest(BaseModel):
    markdown: str = Field(min_length=1)
    filename: Optional[str] = "document"
    options: Optional[ConversionOptions] = None
    action: Action = "download"

    def resolved_options(self) -> ConversionOptions:
        return self.options or ConversionOptions()


class PreviewRequest(BaseModel):
    markdown: str = ""


class FeedbackRequest(BaseModel):
    # Validated by FeedbackStore.add so every bad value gets the same error.
    message: Any = None
