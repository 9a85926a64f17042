"""
Schemas Package
===============

Pydantic models for request/response validation and for the structured
output of the generative model.
"""

from flora.schemas.plants import (
    AdviceRequest,
    ChatMessageRequest,
    IdentifyPlantRequest,
    PlantCareGuideSchema,
    PlantInfoSchema,
    split_data_url,
)

__all__ = [
    "AdviceRequest",
    "ChatMessageRequest",
    "IdentifyPlantRequest",
    "PlantCareGuideSchema",
    "PlantInfoSchema",
    "split_data_url",
]
