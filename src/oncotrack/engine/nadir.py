"""
Nadir Annotator

Cycle-relative timing for questionnaire generation:
- Whether the current day falls in the regimen's nadir window
- Position within the window (early / peak / late)
- Infection risk, priority symptoms and patient guidance derived from it
- Cycle phase classification for a day in cycle
"""

from typing import List, Optional, Sequence, Tuple
from datetime import date, datetime, timedelta
from enum import Enum
import math

from pydantic import BaseModel

from oncotrack.catalog.models import NadirWindow
from oncotrack.engine.models import QuestionnaireItem


class NadirPhase(str, Enum):
    """Position within the nadir window."""
    NONE = "none"
    EARLY = "early"
    PEAK = "peak"
    LATE = "late"


class InfectionRisk(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class CyclePhase(str, Enum):
    """Treatment cycle phase for a day relative to infusion."""
    PRE_SESSION = "pre_session"    # day <= 0 or around the next infusion
    POST_SESSION = "post_session"  # day 1-3
    RECOVERY = "recovery"          # day 4-6
    NADIR = "nadir"                # regimen-specific window
    INTER_CYCLE = "inter_cycle"


# Symptoms prioritized throughout the nadir window
NADIR_CORE_SYMPTOMS = ("infection_signs", "fever", "bleeding", "bruising")

NADIR_PHASE_SYMPTOMS = {
    NadirPhase.EARLY: ("fatigue", "weakness"),
    NadirPhase.PEAK: ("shortness_of_breath", "dizziness", "chills"),
    NadirPhase.LATE: ("mouth_sores", "skin_changes"),
}

_RISK_BY_PHASE = {
    NadirPhase.EARLY: InfectionRisk.MODERATE,
    NadirPhase.PEAK: InfectionRisk.VERY_HIGH,
    NadirPhase.LATE: InfectionRisk.HIGH,
}

_GUIDANCE = {
    InfectionRisk.LOW: "Your infection risk is currently low. Continue normal precautions.",
    InfectionRisk.MODERATE: "You are entering the nadir period. Be extra vigilant about infection signs.",
    InfectionRisk.HIGH: "Your white blood cell counts are likely low. Avoid crowds and practice good hygiene.",
    InfectionRisk.VERY_HIGH: (
        "PEAK NADIR PERIOD: Your infection risk is at its highest. Monitor for fever "
        "(>100.4°F), chills, or any signs of infection. Contact your care team "
        "immediately if symptoms develop."
    ),
}


class NadirAnalysis(BaseModel):
    """Where a day in cycle sits relative to the nadir window."""
    in_nadir_window: bool = False
    phase: NadirPhase = NadirPhase.NONE
    days_into_nadir: Optional[int] = None
    days_until_nadir_end: Optional[int] = None


def is_nadir_active(nadir_window: NadirWindow, day_in_cycle: int) -> bool:
    """True iff the day lies in the inclusive window; {0, 0} is never active."""
    if not nadir_window.is_applicable:
        return False
    return nadir_window.start <= day_in_cycle <= nadir_window.end


def analyze_nadir(day_in_cycle: int, nadir_window: NadirWindow) -> NadirAnalysis:
    """
    Locate a day within the nadir window.
    
    The first third of the window is early, the last third late, and the
    middle peak.
    """
    if not is_nadir_active(nadir_window, day_in_cycle):
        return NadirAnalysis()
    
    days_into = day_in_cycle - nadir_window.start
    length = nadir_window.length
    early_threshold = math.ceil(length * 0.33)
    late_threshold = math.floor(length * 0.67)
    
    if days_into < early_threshold:
        phase = NadirPhase.EARLY
    elif days_into >= late_threshold:
        phase = NadirPhase.LATE
    else:
        phase = NadirPhase.PEAK
    
    return NadirAnalysis(
        in_nadir_window=True,
        phase=phase,
        days_into_nadir=days_into,
        days_until_nadir_end=nadir_window.end - day_in_cycle,
    )


def infection_risk_level(analysis: NadirAnalysis) -> InfectionRisk:
    if not analysis.in_nadir_window:
        return InfectionRisk.LOW
    return _RISK_BY_PHASE.get(analysis.phase, InfectionRisk.LOW)


def nadir_priority_symptoms(analysis: NadirAnalysis) -> List[str]:
    """Symptom terms to prioritize for the current nadir phase."""
    if not analysis.in_nadir_window:
        return []
    return [*NADIR_CORE_SYMPTOMS, *NADIR_PHASE_SYMPTOMS.get(analysis.phase, ())]


def should_show_nadir_warnings(analysis: NadirAnalysis) -> bool:
    return analysis.in_nadir_window and analysis.phase in (NadirPhase.EARLY, NadirPhase.PEAK)


def nadir_guidance(analysis: NadirAnalysis) -> str:
    """Patient-facing message for the current nadir status."""
    if not analysis.in_nadir_window:
        return ""
    return _GUIDANCE[infection_risk_level(analysis)]


def nadir_dates(infusion_date: date | datetime, nadir_window: NadirWindow) -> Optional[Tuple[date, date]]:
    """Calendar dates of the nadir window for a cycle starting on infusion_date (day 1)."""
    if not nadir_window.is_applicable:
        return None
    return (
        infusion_date + timedelta(days=nadir_window.start - 1),
        infusion_date + timedelta(days=nadir_window.end - 1),
    )


def cycle_phase(day_in_cycle: int, nadir_window: NadirWindow, cycle_length_days: int = 21) -> CyclePhase:
    """Classify a day relative to infusion into a cycle phase."""
    if day_in_cycle <= 0 or cycle_length_days - 1 <= day_in_cycle <= cycle_length_days + 1:
        return CyclePhase.PRE_SESSION
    if 1 <= day_in_cycle <= 3:
        return CyclePhase.POST_SESSION
    if 4 <= day_in_cycle <= 6:
        return CyclePhase.RECOVERY
    if is_nadir_active(nadir_window, day_in_cycle):
        return CyclePhase.NADIR
    return CyclePhase.INTER_CYCLE


def annotate(
    items: Sequence[QuestionnaireItem],
    nadir_window: NadirWindow,
    day_in_cycle: int,
) -> Tuple[List[QuestionnaireItem], bool]:
    """
    Annotate items with nadir relevance.
    
    Never adds, removes or reorders items. When the nadir is active, items
    whose symptom root is a nadir priority symptom are flagged.
    
    Returns:
        (annotated items, nadir_active)
    """
    nadir_active = is_nadir_active(nadir_window, day_in_cycle)
    if not nadir_active:
        return [item.model_copy(deep=True) for item in items], False

    priority = set(nadir_priority_symptoms(analyze_nadir(day_in_cycle, nadir_window)))
    annotated = [
        item.model_copy(deep=True, update={"heightened_in_nadir": item.symptom_root.lower() in priority})
        for item in items
    ]
    return annotated, True
