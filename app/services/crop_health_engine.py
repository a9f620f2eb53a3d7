"""Rule-based crop diagnosis from observed symptom tags.

A rule qualifies only when every one of its symptoms was observed. Qualifying
rules are ranked by specificity, then by their position in the rule table, and
the best rule per disease becomes a candidate. Scoring is a pure function of
the inputs, so the same symptoms always give the same answer.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from app.models.enums import DiagnosisStatusEnum, OverallHealthEnum, SymptomEnum
from app.schemas.crop_health import DiagnosisCandidate, DiagnosisResult, FieldConditions, SymptomInfo
from app.schemas.knowledge import BilingualText, HealthRule
from app.services.knowledge_base import KnowledgeBase, get_knowledge_base

CONDITION_BOOSTS = {
	"high_moisture": 0.15,
	"low_moisture": 0.15,
	"high_temperature": 0.10,
	"recent_rain": 0.10,
}

SYMPTOM_LABELS = {
	SymptomEnum.yellow_leaves: BilingualText(en="Yellow leaves", hi="Peeli pattiyan"),
	SymptomEnum.brown_spots: BilingualText(en="Brown spots on leaves", hi="Pattiyon par bhure dhabbe"),
	SymptomEnum.wilting: BilingualText(en="Wilting", hi="Murjhana"),
	SymptomEnum.curling_leaves: BilingualText(en="Curling leaves", hi="Pattiyon ka mudna"),
	SymptomEnum.white_powder: BilingualText(en="White powder on leaves", hi="Pattiyon par safed powder"),
	SymptomEnum.holes_in_leaves: BilingualText(en="Holes in leaves", hi="Pattiyon mein chhed"),
	SymptomEnum.stunted_growth: BilingualText(en="Stunted growth", hi="Ruka hua vikas"),
	SymptomEnum.root_rot: BilingualText(en="Root rot", hi="Jad sadna"),
	SymptomEnum.stem_borer: BilingualText(en="Stem borer damage", hi="Tana chhedak"),
	SymptomEnum.aphids: BilingualText(en="Aphids", hi="Maahu / chepa"),
}

GENERAL_CARE_ADVICE = BilingualText(
	en=(
		"The symptoms do not point to a specific problem. Inspect the field weekly, "
		"keep irrigation regular and consult the local agriculture officer if it spreads."
	),
	hi=(
		"Lakshan se koi khaas bimari samajh nahi aayi. Har hafte khet dekhein, "
		"sinchai niyamit rakhein aur failne par krishi adhikari se milein."
	),
)

HEALTHY_ADVICE = BilingualText(
	en="No disease symptoms reported. Continue regular monitoring.",
	hi="Koi bimari ke lakshan nahi bataye gaye. Niyamit nigrani karte rahein.",
)

_logger = structlog.get_logger("agriguard.crop_health")


def parse_symptoms(symptoms: Iterable[str | SymptomEnum]) -> tuple[frozenset[SymptomEnum], list[str]]:
	"""Split raw tags into known symptoms and the tags that were not recognised."""
	known: set[SymptomEnum] = set()
	ignored: list[str] = []
	for raw in symptoms:
		token = str(raw).strip().lower()
		try:
			known.add(SymptomEnum(token))
		except ValueError:
			if token and token not in ignored:
				ignored.append(token)
	return frozenset(known), ignored


def score_rule(rule: HealthRule, observed: frozenset[SymptomEnum], condition_tags: frozenset[str]) -> float:
	coverage = len(rule.symptoms) / len(observed)
	confidence = rule.prior * (0.6 + 0.4 * coverage)
	for tag in rule.boosted_by & condition_tags:
		confidence += CONDITION_BOOSTS.get(tag, 0.0)
	return round(max(0.0, min(1.0, confidence)), 3)


def overall_health(observed_count: int, top_confidence: float) -> OverallHealthEnum:
	if observed_count >= 3 or top_confidence > 0.8:
		return OverallHealthEnum.critical if top_confidence > 0.85 else OverallHealthEnum.poor
	return OverallHealthEnum.moderate


class CropHealthEngine:
	def __init__(self, knowledge: KnowledgeBase | None = None):
		self.knowledge = knowledge or get_knowledge_base()

	def diagnose_crop_health(
		self,
		symptoms: Iterable[str | SymptomEnum],
		conditions: FieldConditions | None = None,
	) -> DiagnosisResult:
		observed, ignored = parse_symptoms(symptoms)
		if not observed:
			status_health = OverallHealthEnum.healthy if not ignored else OverallHealthEnum.moderate
			return DiagnosisResult(
				status=DiagnosisStatusEnum.insufficient_signal,
				overall_health=status_health,
				advice=HEALTHY_ADVICE if not ignored else GENERAL_CARE_ADVICE,
				ignored_symptoms=ignored,
			)

		condition_tags = conditions.tags() if conditions is not None else frozenset()
		rules = self.knowledge.get_health_rules()
		qualifying = [(index, rule) for index, rule in enumerate(rules) if rule.symptoms <= observed]
		qualifying.sort(key=lambda item: (-item[1].specificity, item[0]))

		candidates: list[DiagnosisCandidate] = []
		seen_diseases: set[str] = set()
		for _, rule in qualifying:
			if rule.disease in seen_diseases:
				continue
			seen_diseases.add(rule.disease)
			candidates.append(
				DiagnosisCandidate(
					disease=rule.disease,
					rule_id=rule.rule_id,
					confidence=score_rule(rule, observed, condition_tags),
					matched_symptoms=sorted(rule.symptoms, key=list(SymptomEnum).index),
					urgency=rule.urgency,
					advice=rule.advice,
				)
			)

		if not candidates:
			_logger.info("diagnosis_insufficient_signal", symptoms=sorted(observed))
			return DiagnosisResult(
				status=DiagnosisStatusEnum.insufficient_signal,
				overall_health=OverallHealthEnum.moderate,
				advice=GENERAL_CARE_ADVICE,
				ignored_symptoms=ignored,
			)

		primary = candidates[0]
		_logger.info(
			"diagnosis_made",
			disease=primary.disease,
			rule_id=primary.rule_id,
			confidence=primary.confidence,
			candidates=len(candidates),
		)
		return DiagnosisResult(
			status=DiagnosisStatusEnum.diagnosed,
			overall_health=overall_health(len(observed), primary.confidence),
			primary=primary,
			candidates=candidates,
			advice=primary.advice,
			ignored_symptoms=ignored,
		)

	def list_symptoms(self) -> list[SymptomInfo]:
		return [SymptomInfo(symptom=symptom, label=SYMPTOM_LABELS[symptom]) for symptom in self.knowledge.list_symptoms()]
