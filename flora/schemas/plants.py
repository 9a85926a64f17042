"""
Plant Schemas
=============

Pydantic models for the structured plant record returned by the generative
model, plus request schemas for the plant endpoints.
"""

from __future__ import annotations

import base64
import binascii
import re

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from flora.domain.plant_info import PlantInfo

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


class PlantCareGuideSchema(BaseModel):
    """Six required care fields."""

    model_config = ConfigDict(extra="ignore")

    watering: StrictStr = Field(..., min_length=1, description="Detailed watering instructions")
    sunlight: StrictStr = Field(..., min_length=1, description="Light requirement details")
    temperature: StrictStr = Field(..., min_length=1, description="Ideal temperature range")
    humidity: StrictStr = Field(..., min_length=1, description="Humidity needs")
    soil: StrictStr = Field(..., min_length=1, description="Soil type recommendation")
    fertilizer: StrictStr = Field(..., min_length=1, description="Fertilization schedule and type")


class PlantInfoSchema(BaseModel):
    """Validation model for a PlantInfo JSON document (camelCase keys)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: StrictStr = Field(..., min_length=1, description="Common name of the plant")
    scientific_name: StrictStr = Field(
        ..., min_length=1, alias="scientificName", description="Botanical/Scientific name"
    )
    description: StrictStr = Field(..., min_length=1, description="A brief, engaging overview of the plant")
    care_guide: PlantCareGuideSchema = Field(..., alias="careGuide")
    toxicity: StrictStr = Field(..., min_length=1, description="Toxicity to pets or humans")
    common_issues: list[StrictStr] = Field(
        ..., alias="commonIssues", description="List of common problems or pests"
    )

    def to_domain(self) -> PlantInfo:
        return PlantInfo.from_dict(self.model_dump(by_alias=True))


def split_data_url(value: str) -> tuple[str | None, str]:
    """Split ``data:<mime>;base64,<data>`` into ``(mime, data)``.

    Plain base64 strings come back as ``(None, value)``.
    """
    match = _DATA_URL_RE.match(value.strip())
    if not match:
        return None, value.strip()
    return match.group("mime"), match.group("data")


class IdentifyPlantRequest(BaseModel):
    """Request schema for identifying a plant from an inline image."""

    image_data: str = Field(..., min_length=1, description="Base64 image bytes or a data: URL")
    mime_type: str | None = Field(default=None, description="Image MIME type, e.g. image/jpeg")

    @field_validator("image_data")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        _, data = split_data_url(v)
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("image_data must be valid base64") from None
        return v

    def resolved(self) -> tuple[str, str]:
        """Return ``(base64_data, mime_type)``, preferring the explicit mime type."""
        url_mime, data = split_data_url(self.image_data)
        mime_type = self.mime_type or url_mime
        if not mime_type or not mime_type.startswith("image/"):
            raise ValueError("mime_type must be an image/* type")
        return data, mime_type


class ChatMessageRequest(BaseModel):
    """Request schema for sending a chat message to the assistant."""

    message: str = Field(..., description="Free-text question")

    @field_validator("message")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be empty")
        return v


class AdviceRequest(BaseModel):
    """Request schema for a stateless advice call."""

    question: str = Field(..., description="Free-text question")
    plant: PlantInfoSchema | None = Field(default=None, description="Optional plant context")

    @field_validator("question")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question must not be empty")
        return v
