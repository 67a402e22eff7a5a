from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Union
from uuid import uuid4

from src.ambient_sim.domain.models.utterance import Utterance
from src.ambient_sim.domain.nlp.models import ClinicalEntity, EntityType, TextSpan


class EntityTagger(Protocol):
    """Protocol for components that tag clinical entities in utterance text."""

    def tag(self, source: Union[Utterance, str]) -> List[ClinicalEntity]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class EntityPattern:
    """Maps a text pattern to the type and codes of the entity it produces.

    The entity value is the matched text, lower-cased.
    """

    pattern: "re.Pattern[str]"
    type: EntityType
    icd10: Optional[str] = None
    snomed_ct: Optional[str] = None

    def search(self, text: str) -> Optional["re.Match[str]"]:
        return self.pattern.search(text)

    def build(self, match: "re.Match[str]", context: str, confidence: float) -> ClinicalEntity:
        start, end = match.span()
        return ClinicalEntity(
            id=f"entity_{uuid4().hex}",
            type=self.type,
            value=match.group(0).lower(),
            confidence=confidence,
            context=context,
            icd10=self.icd10,
            snomed_ct=self.snomed_ct,
            location=TextSpan(start=start, end=end),
        )


def keyword_pattern(
    regex: str,
    entity_type: EntityType,
    *,
    icd10: Optional[str] = None,
    snomed_ct: Optional[str] = None,
) -> EntityPattern:
    return EntityPattern(
        pattern=re.compile(regex, re.IGNORECASE),
        type=entity_type,
        icd10=icd10,
        snomed_ct=snomed_ct,
    )


DEFAULT_ENTITY_PATTERNS: Sequence[EntityPattern] = (
    keyword_pattern(r"chest pain", EntityType.SYMPTOM, icd10="R06.02"),
    keyword_pattern(r"nausea", EntityType.SYMPTOM, icd10="R11.0"),
    keyword_pattern(r"blood pressure.*(\d+).*(over|/).*(\d+)", EntityType.VITAL, snomed_ct="75367002"),
    keyword_pattern(r"lisinopril", EntityType.MEDICATION, snomed_ct="29046004"),
    keyword_pattern(r"blood sugar.*(\d+)", EntityType.VITAL, snomed_ct="33747000"),
)


class KeywordEntityTagger:
    """Deterministic keyword tagger driven by an ordered pattern table.

    Every pattern is tested independently, in table order, so a single
    utterance may yield several entities. Confidence scores are synthetic.
    """

    def __init__(
        self,
        patterns: Optional[Sequence[EntityPattern]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._patterns: Sequence[EntityPattern] = tuple(patterns if patterns is not None else DEFAULT_ENTITY_PATTERNS)
        self._rng = rng or random.Random()

    @property
    def patterns(self) -> Sequence[EntityPattern]:
        return self._patterns

    def tag(self, source: Union[Utterance, str]) -> List[ClinicalEntity]:
        text = source.text if isinstance(source, Utterance) else source
        entities: List[ClinicalEntity] = []
        if not text:
            return entities

        for entity_pattern in self._patterns:
            match = entity_pattern.search(text)
            if match is None:
                continue
            confidence = 0.8 + self._rng.random() * 0.2
            entities.append(entity_pattern.build(match, context=text, confidence=confidence))
        return entities
