"""
Oncotrack Questionnaire Engine

Pure, synchronous generation over immutable catalog snapshots:
- Drug resolution (canonical name / alias)
- Item aggregation and deduplication
- Nadir annotation
- Questionnaire assembly
"""

from oncotrack.engine.models import (
    GenerationStatus,
    GenerationWarning,
    QuestionnaireItem,
    QuestionnaireMetadata,
    QuestionnaireSpecification,
    UnresolvedDrugWarning,
    WarningKind,
)
from oncotrack.engine.resolver import ResolutionResult, resolve
from oncotrack.engine.aggregator import (
    AggregationResult,
    aggregate,
    group_by_symptom_root,
    symptom_root,
)
from oncotrack.engine.nadir import (
    CyclePhase,
    InfectionRisk,
    NadirAnalysis,
    NadirPhase,
    analyze_nadir,
    annotate,
    cycle_phase,
    infection_risk_level,
    is_nadir_active,
    nadir_dates,
    nadir_guidance,
    nadir_priority_symptoms,
    should_show_nadir_warnings,
)
from oncotrack.engine.assembler import assemble

__all__ = [
    "GenerationStatus",
    "GenerationWarning",
    "QuestionnaireItem",
    "QuestionnaireMetadata",
    "QuestionnaireSpecification",
    "UnresolvedDrugWarning",
    "WarningKind",
    "ResolutionResult",
    "resolve",
    "AggregationResult",
    "aggregate",
    "group_by_symptom_root",
    "symptom_root",
    "CyclePhase",
    "InfectionRisk",
    "NadirAnalysis",
    "NadirPhase",
    "analyze_nadir",
    "annotate",
    "cycle_phase",
    "infection_risk_level",
    "is_nadir_active",
    "nadir_dates",
    "nadir_guidance",
    "nadir_priority_symptoms",
    "should_show_nadir_warnings",
    "assemble",
]
