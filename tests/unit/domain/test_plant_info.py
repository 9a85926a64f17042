from __future__ import annotations

import dataclasses

import pytest

from flora.domain.plant_info import CARE_GUIDE_FIELDS, PlantInfo


def test_from_dict_reads_camel_case_keys(monstera):
    assert monstera.name == "Monstera"
    assert monstera.scientific_name == "Monstera deliciosa"
    assert monstera.care_guide.humidity == "60% or higher"
    assert monstera.common_issues == ("Yellow leaves from overwatering", "Spider mites")


def test_to_dict_restores_wire_shape(monstera, samples):
    assert monstera.to_dict() == samples.plant_payload()


def test_care_guide_has_all_six_fields(monstera):
    assert tuple(monstera.care_guide.to_dict()) == CARE_GUIDE_FIELDS


def test_plant_info_is_immutable(monstera):
    with pytest.raises(dataclasses.FrozenInstanceError):
        monstera.name = "Philodendron"  # type: ignore[misc]


def test_empty_common_issues_is_allowed(samples):
    plant = PlantInfo.from_dict(samples.plant_payload(commonIssues=[]))
    assert plant.common_issues == ()
