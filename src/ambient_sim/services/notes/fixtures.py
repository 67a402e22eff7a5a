from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from src.ambient_sim.domain.models.clinical_note import NoteNarrative, NoteStatus, StructuredNote
from src.ambient_sim.domain.models.review import (
    ReviewSuggestion,
    SuggestionLocation,
    SuggestionSeverity,
    SuggestionType,
)
from src.ambient_sim.domain.nlp.models import ClinicalEntity, EntityType, TextSpan

DEFAULT_PATIENT_ID = "patient_123"
DEFAULT_PROVIDER_ID = "provider_456"


def _entity(
    entity_id: str,
    entity_type: EntityType,
    value: str,
    confidence: float,
    context: str,
    *,
    icd10: Optional[str] = None,
    snomed_ct: Optional[str] = None,
    span: Optional[tuple] = None,
) -> ClinicalEntity:
    return ClinicalEntity(
        id=entity_id,
        type=entity_type,
        value=value,
        confidence=confidence,
        context=context,
        icd10=icd10,
        snomed_ct=snomed_ct,
        location=TextSpan(start=span[0], end=span[1]) if span else None,
    )


def generated_note_entities() -> List[ClinicalEntity]:
    """Entities attached to every note synthesized at the end of a session."""

    return [
        _entity("entity_1", EntityType.SYMPTOM, "chest pain", 0.95, "chest pain for the past 2 hours",
                icd10="R06.02", snomed_ct="29857009", span=(18, 28)),
        _entity("entity_2", EntityType.SYMPTOM, "nausea", 0.88, "I do feel a bit nauseous",
                icd10="R11.0", snomed_ct="422587007", span=(34, 40)),
        _entity("entity_3", EntityType.VITAL, "blood pressure 145/92", 0.92, "blood pressure. It's 145 over 92",
                snomed_ct="75367002", span=(25, 45)),
        _entity("entity_4", EntityType.VITAL, "heart rate 88 bpm", 0.91, "Heart rate is 88 beats per minute",
                snomed_ct="364075005", span=(50, 67)),
        _entity("entity_5", EntityType.MEDICATION, "Lisinopril", 0.89, "patient medications",
                snomed_ct="29046004", span=(0, 10)),
    ]


def generated_note_narrative() -> NoteNarrative:
    return NoteNarrative(
        chief_complaint="Chest pain",
        history_of_present_illness=(
            "Patient reports chest pain for the past 2 hours. Pain is described as sharp and "
            "radiates to the left arm. Patient rates pain 7/10."
        ),
        physical_exam="Vital signs: Blood pressure 145/92 mmHg. Patient appears in mild distress.",
        assessment="Chest pain, rule out acute coronary syndrome.",
        plan="Order ECG, cardiac enzymes, chest X-ray. Monitor vital signs.",
    )


def review_suggestions() -> List[ReviewSuggestion]:
    return [
        ReviewSuggestion(
            id="suggestion_1",
            type=SuggestionType.COMPLETENESS,
            severity=SuggestionSeverity.WARNING,
            message="Review of systems section is missing",
            location=SuggestionLocation(section="review_of_systems"),
            suggestion="Add review of systems to enhance documentation completeness",
            auto_fixable=False,
        ),
        ReviewSuggestion(
            id="suggestion_2",
            type=SuggestionType.MEDICAL,
            severity=SuggestionSeverity.ERROR,
            message="Consider ordering troponin levels for chest pain evaluation",
            location=SuggestionLocation(section="plan"),
            suggestion="Add troponin levels to cardiac enzyme panel",
            auto_fixable=True,
        ),
        ReviewSuggestion(
            id="suggestion_3",
            type=SuggestionType.CODING,
            severity=SuggestionSeverity.WARNING,
            message="Chest pain needs ICD-10 code specification",
            location=SuggestionLocation(section="assessment"),
            suggestion="Specify ICD-10 code: R06.02 for chest pain",
            auto_fixable=True,
        ),
        ReviewSuggestion(
            id="suggestion_4",
            type=SuggestionType.GRAMMAR,
            severity=SuggestionSeverity.INFO,
            message="Consider using consistent tense throughout the note",
            location=SuggestionLocation(section="history_of_present_illness", start_index=0, end_index=20),
            suggestion="Use past tense consistently",
            auto_fixable=True,
        ),
    ]


def seed_notes(now: Optional[datetime] = None) -> List[StructuredNote]:
    """Sample notes the collection starts with, spaced an hour apart."""

    now = now or datetime.now(timezone.utc)
    return [
        StructuredNote(
            id="note_001",
            patient_id="patient_123",
            provider_id=DEFAULT_PROVIDER_ID,
            session_id="session_001",
            timestamp=now - timedelta(hours=1),
            raw_transcription="Patient presents with chest pain...",
            entities=[
                _entity("entity_001_1", EntityType.SYMPTOM, "chest pain", 0.95, "chest pain for the past 2 hours",
                        icd10="R06.02", snomed_ct="29857009"),
                _entity("entity_001_2", EntityType.SYMPTOM, "nausea", 0.88, "Associated with nausea",
                        icd10="R11.0", snomed_ct="422587007"),
                _entity("entity_001_3", EntityType.VITAL, "blood pressure 145/92", 0.92, "blood pressure 145/92 mmHg",
                        snomed_ct="75367002"),
                _entity("entity_001_4", EntityType.VITAL, "heart rate 88 bpm", 0.91, "Heart rate 88 bpm",
                        snomed_ct="364075005"),
                _entity("entity_001_5", EntityType.DIAGNOSIS, "acute coronary syndrome", 0.78,
                        "rule out acute coronary syndrome", icd10="I24.9", snomed_ct="394659003"),
            ],
            narrative=NoteNarrative(
                chief_complaint="Chest pain",
                history_of_present_illness=(
                    "Patient reports chest pain for the past 2 hours. Pain is described as sharp and radiates "
                    "to the left arm. Patient rates pain 7/10. Associated with nausea but no shortness of breath."
                ),
                physical_exam=(
                    "Vital signs: Blood pressure 145/92 mmHg, Heart rate 88 bpm. Patient appears in mild distress."
                ),
                assessment="Chest pain, rule out acute coronary syndrome. Hypertension.",
                plan=(
                    "Order ECG, cardiac enzymes, chest X-ray. Monitor vital signs. Consider cardiology "
                    "consultation if abnormal findings."
                ),
            ),
            status=NoteStatus.DRAFT,
        ),
        StructuredNote(
            id="note_002",
            patient_id="patient_124",
            provider_id=DEFAULT_PROVIDER_ID,
            session_id="session_002",
            timestamp=now - timedelta(hours=2),
            raw_transcription="Follow-up visit for diabetes management...",
            entities=[
                _entity("entity_002_1", EntityType.DIAGNOSIS, "type 2 diabetes mellitus", 0.96,
                        "type 2 diabetes mellitus presents for routine follow-up", icd10="E11.9", snomed_ct="44054006"),
                _entity("entity_002_2", EntityType.MEDICATION, "metformin", 0.94, "good adherence to metformin",
                        snomed_ct="387562000"),
                _entity("entity_002_3", EntityType.VITAL, "blood glucose 120-140 mg/dL", 0.92,
                        "Blood glucose readings at home averaging 120-140 mg/dL", snomed_ct="33747000"),
                _entity("entity_002_4", EntityType.VITAL, "weight 180 lbs", 0.90, "Weight 180 lbs",
                        snomed_ct="27113001"),
            ],
            narrative=NoteNarrative(
                chief_complaint="Diabetes follow-up",
                history_of_present_illness=(
                    "Patient with type 2 diabetes mellitus presents for routine follow-up. Reports good adherence "
                    "to metformin. Blood glucose readings at home averaging 120-140 mg/dL."
                ),
                physical_exam=(
                    "Vital signs stable. Weight 180 lbs. No acute distress. Feet examination shows no ulcers "
                    "or deformities."
                ),
                assessment="Type 2 diabetes mellitus, well controlled.",
                plan=(
                    "Continue metformin 500mg twice daily. Recheck HbA1c in 3 months. Diabetic foot care "
                    "education provided."
                ),
            ),
            status=NoteStatus.UNDER_REVIEW,
        ),
        StructuredNote(
            id="note_003",
            patient_id="patient_125",
            provider_id=DEFAULT_PROVIDER_ID,
            session_id="session_003",
            timestamp=now - timedelta(hours=3),
            raw_transcription="Hypertension management visit...",
            entities=[
                _entity("entity_003_1", EntityType.DIAGNOSIS, "essential hypertension", 0.93,
                        "essential hypertension presents for routine follow-up", icd10="I10", snomed_ct="59621000"),
                _entity("entity_003_2", EntityType.MEDICATION, "lisinopril", 0.95, "taking lisinopril as prescribed",
                        snomed_ct="29046004"),
                _entity("entity_003_3", EntityType.SYMPTOM, "dizziness", 0.87, "Occasional dizziness when standing up",
                        icd10="R42", snomed_ct="404640003"),
                _entity("entity_003_4", EntityType.VITAL, "blood pressure 135/85", 0.94, "Blood pressure 135/85 mmHg",
                        snomed_ct="75367002"),
            ],
            narrative=NoteNarrative(
                chief_complaint="Hypertension follow-up",
                history_of_present_illness=(
                    "Patient with essential hypertension presents for routine follow-up. Reports taking "
                    "lisinopril as prescribed. Occasional dizziness when standing up."
                ),
                physical_exam=(
                    "Blood pressure 135/85 mmHg. Heart rate 72 bpm. No orthostatic changes. Cardiac exam normal."
                ),
                assessment="Essential hypertension, adequately controlled.",
                plan=(
                    "Continue lisinopril 10mg daily. Lifestyle modifications counseling provided. "
                    "Follow-up in 6 months."
                ),
            ),
            status=NoteStatus.FINALIZED,
        ),
        StructuredNote(
            id="note_004",
            patient_id="patient_126",
            provider_id=DEFAULT_PROVIDER_ID,
            session_id="session_004",
            timestamp=now - timedelta(hours=4),
            raw_transcription="Annual physical examination...",
            entities=[
                _entity("entity_004_1", EntityType.VITAL, "blood pressure 125/80", 0.96, "BP 125/80",
                        snomed_ct="75367002"),
                _entity("entity_004_2", EntityType.VITAL, "heart rate 68", 0.94, "HR 68", snomed_ct="364075005"),
                _entity("entity_004_3", EntityType.VITAL, "temperature 98.6°F", 0.93, "Temp 98.6°F",
                        snomed_ct="276885007"),
                _entity("entity_004_4", EntityType.PROCEDURE, "annual physical examination", 0.91,
                        "routine annual physical examination", snomed_ct="185349003"),
            ],
            narrative=NoteNarrative(
                chief_complaint="Annual physical examination",
                history_of_present_illness=(
                    "Patient presents for routine annual physical examination. No acute complaints. "
                    "Feels well overall."
                ),
                physical_exam=(
                    "Vital signs: BP 125/80, HR 68, Temp 98.6°F. General appearance well. Heart regular rate "
                    "and rhythm. Lungs clear bilaterally."
                ),
                assessment="Healthy adult, no acute issues.",
                plan=(
                    "Routine screening labs ordered. Continue current medications. Follow-up in 1 year or as needed."
                ),
            ),
            status=NoteStatus.DRAFT,
        ),
        StructuredNote(
            id="note_005",
            patient_id="patient_127",
            provider_id=DEFAULT_PROVIDER_ID,
            session_id="session_005",
            timestamp=now - timedelta(hours=5),
            raw_transcription="Patient with shortness of breath...",
            entities=[
                _entity("entity_005_1", EntityType.SYMPTOM, "shortness of breath", 0.97,
                        "progressive shortness of breath over the past week", icd10="R06.00", snomed_ct="267036007"),
                _entity("entity_005_2", EntityType.SYMPTOM, "fatigue", 0.89, "Some fatigue",
                        icd10="R53.1", snomed_ct="84229001"),
                _entity("entity_005_3", EntityType.VITAL, "oxygen saturation 94%", 0.95, "O2 sat 94% on room air",
                        snomed_ct="442476006"),
                _entity("entity_005_4", EntityType.SYMPTOM, "bilateral lower extremity edema", 0.92,
                        "Bilateral lower extremity edema", icd10="R60.0", snomed_ct="102491009"),
                _entity("entity_005_5", EntityType.DIAGNOSIS, "congestive heart failure", 0.88,
                        "Congestive heart failure, acute exacerbation", icd10="I50.9", snomed_ct="42343007"),
                _entity("entity_005_6", EntityType.MEDICATION, "furosemide", 0.90, "Increase furosemide",
                        snomed_ct="387475002"),
            ],
            narrative=NoteNarrative(
                chief_complaint="Shortness of breath",
                history_of_present_illness=(
                    "Patient reports progressive shortness of breath over the past week. Worse with exertion. "
                    "No chest pain. Some fatigue."
                ),
                physical_exam=(
                    "Vital signs: BP 140/90, HR 95, O2 sat 94% on room air. Bilateral lower extremity edema. "
                    "Crackles at lung bases."
                ),
                assessment="Congestive heart failure, acute exacerbation.",
                plan="Chest X-ray, BNP, echo. Increase furosemide. Strict I/O monitoring. Cardiology consultation.",
            ),
            status=NoteStatus.UNDER_REVIEW,
        ),
    ]
