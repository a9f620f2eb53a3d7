from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.models import reference
from app.models.enums import CropEnum, GrowthStageEnum, SoilEnum, SymptomEnum, UrgencyEnum
from app.schemas.knowledge import BilingualText, CropProfile, HealthRule, SoilProfile, StageProfile
from app.services.knowledge_base import KnowledgeBase, KnowledgeNotFoundError


def _text() -> BilingualText:
    return BilingualText(en="x", hi="x")


@pytest.mark.parametrize(
    ("days", "expected"),
    [
        (0, GrowthStageEnum.initial),
        (19, GrowthStageEnum.initial),
        (20, GrowthStageEnum.development),
        (50, GrowthStageEnum.mid),
        (89, GrowthStageEnum.mid),
        (90, GrowthStageEnum.late),
        (119, GrowthStageEnum.late),
    ],
)
def test_wheat_stage_windows_are_contiguous(knowledge: KnowledgeBase, days: int, expected: GrowthStageEnum) -> None:
    assert knowledge.get_stage(CropEnum.wheat, days).stage == expected


def test_stage_past_season_is_final_stage(knowledge: KnowledgeBase) -> None:
    stage = knowledge.get_stage("wheat", 400)
    assert stage.stage == GrowthStageEnum.late
    assert knowledge.is_past_season("wheat", 121) is True
    assert knowledge.is_past_season("wheat", 120) is False


def test_negative_days_rejected(knowledge: KnowledgeBase) -> None:
    with pytest.raises(ValueError):
        knowledge.get_stage("rice", -1)


def test_mid_season_wheat_values(knowledge: KnowledgeBase) -> None:
    stage = knowledge.get_stage_by_name("wheat", "mid")
    assert stage.kc == pytest.approx(1.15)
    assert stage.mad == pytest.approx(0.5)

    clay = knowledge.get_soil("clay")
    assert clay.field_capacity_pct == 40
    assert clay.wilting_point_pct == 20


def test_aliases_resolve_and_unknown_keys_fail(knowledge: KnowledgeBase) -> None:
    assert knowledge.get_crop("Gehun").crop == CropEnum.wheat
    assert knowledge.get_soil("clayey").soil == SoilEnum.clay

    with pytest.raises(KnowledgeNotFoundError):
        knowledge.get_crop("mango")
    with pytest.raises(LookupError):
        knowledge.get_soil("lava")
    with pytest.raises(KnowledgeNotFoundError):
        knowledge.get_stage_by_name("wheat", "flowering")


def test_monthly_eto_lookup(knowledge: KnowledgeBase) -> None:
    assert knowledge.get_monthly_eto(4) == pytest.approx(5.8)
    assert len(reference.MONTHLY_ETO) == 12
    with pytest.raises(KnowledgeNotFoundError):
        knowledge.get_monthly_eto(13)


def test_nearest_monthly_eto_wraps_around_the_year() -> None:
    sparse = KnowledgeBase(monthly_eto={1: 2.0, 6: 6.0})
    assert sparse.nearest_monthly_eto(4) == 6.0
    assert sparse.nearest_monthly_eto(11) == 2.0
    assert sparse.nearest_monthly_eto(6) == 6.0


def test_fertilizer_schedule_by_stage(knowledge: KnowledgeBase) -> None:
    entries = knowledge.get_fertilizer_schedule("wheat", "development")
    assert [entry.due_day for entry in entries] == [21]
    assert entries[0].dose.n == 30
    assert knowledge.get_fertilizer_schedule("wheat", "late") == ()


def test_duplicate_symptom_sets_rejected() -> None:
    rule = reference.HEALTH_RULES[0]
    twin = rule.model_copy(update={"rule_id": "twin"})
    with pytest.raises(ValueError, match="same symptom set"):
        KnowledgeBase(health_rules=(rule, twin))


def test_crop_profile_requires_stage_durations_to_sum() -> None:
    stage = StageProfile(
        stage=GrowthStageEnum.initial,
        duration_days=10,
        kc=0.5,
        root_depth_m=0.2,
        mad=0.5,
        description=_text(),
    )
    with pytest.raises(ValidationError):
        CropProfile(
            crop=CropEnum.wheat,
            name=_text(),
            scientific_name="Triticum aestivum",
            total_duration_days=30,
            stages=(stage,),
        )


def test_soil_profile_requires_field_capacity_above_wilting_point() -> None:
    with pytest.raises(ValidationError):
        SoilProfile(
            soil=SoilEnum.sandy,
            name=_text(),
            field_capacity_pct=10,
            wilting_point_pct=12,
            infiltration_class="fast",
            saturation_bound_pct=70,
        )


def test_rule_specificity_defaults_to_tag_count() -> None:
    rule = HealthRule(
        rule_id="r",
        symptoms=frozenset({SymptomEnum.aphids, SymptomEnum.wilting}),
        disease="d",
        prior=0.5,
        urgency=UrgencyEnum.monitor,
        advice=_text(),
    )
    assert rule.specificity == 2
    assert rule.model_copy(update={"weight": 7}).specificity == 7


def test_listings(knowledge: KnowledgeBase) -> None:
    assert {item.crop for item in knowledge.list_crops()} == set(CropEnum)
    assert {item.soil for item in knowledge.list_soils()} == set(SoilEnum)
    assert set(knowledge.list_symptoms()) == set(SymptomEnum)
