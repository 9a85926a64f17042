"""
Plant Identification Records
============================

Immutable value objects produced by a successful image analysis.

``PlantInfo`` is created exactly once per analysis and replaced wholesale when
another photo is identified; nothing mutates it in place. The wire form keeps
the camelCase keys the generative model is asked to produce
(``scientificName``, ``careGuide``, ``commonIssues``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CARE_GUIDE_FIELDS: tuple[str, ...] = (
    "watering",
    "sunlight",
    "temperature",
    "humidity",
    "soil",
    "fertilizer",
)


@dataclass(frozen=True)
class PlantCareGuide:
    """Six free-text cultivation requirements."""

    watering: str
    sunlight: str
    temperature: str
    humidity: str
    soil: str
    fertilizer: str

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in CARE_GUIDE_FIELDS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlantCareGuide:
        return cls(**{name: data[name] for name in CARE_GUIDE_FIELDS})


@dataclass(frozen=True)
class PlantInfo:
    """Structured identification and care record for one plant."""

    name: str
    scientific_name: str
    description: str
    care_guide: PlantCareGuide
    toxicity: str
    common_issues: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Render in the camelCase wire shape."""
        return {
            "name": self.name,
            "scientificName": self.scientific_name,
            "description": self.description,
            "careGuide": self.care_guide.to_dict(),
            "toxicity": self.toxicity,
            "commonIssues": list(self.common_issues),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlantInfo:
        """Build from the camelCase wire shape.

        Assumes *data* was already validated (see
        :class:`flora.schemas.plants.PlantInfoSchema`); missing keys raise
        ``KeyError``.
        """
        return cls(
            name=data["name"],
            scientific_name=data["scientificName"],
            description=data["description"],
            care_guide=PlantCareGuide.from_dict(data["careGuide"]),
            toxicity=data["toxicity"],
            common_issues=tuple(data["commonIssues"]),
        )
