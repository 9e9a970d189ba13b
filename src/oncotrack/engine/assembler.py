"""
Questionnaire Assembler

Composes resolution, aggregation and nadir annotation into a
QuestionnaireSpecification for one treatment context.

Algorithm: Regimen -> active composition for the cycle -> resolve drugs ->
union items -> annotate nadir -> specification + metadata.
"""

import structlog

from oncotrack.catalog.models import TreatmentContext
from oncotrack.catalog.registry import DrugModuleCatalog, RegimenCatalog
from oncotrack.engine.aggregator import aggregate, group_by_symptom_root
from oncotrack.engine.models import (
    GenerationStatus,
    GenerationWarning,
    QuestionnaireMetadata,
    QuestionnaireSpecification,
    UnresolvedDrugWarning,
    WarningKind,
)
from oncotrack.engine.nadir import analyze_nadir, annotate, cycle_phase
from oncotrack.engine.resolver import resolve
from oncotrack.errors import (
    AmbiguousAliasError,
    EmptyQuestionnaireError,
    UnknownRegimenError,
    UnresolvedDrugError,
)

logger = structlog.get_logger(__name__)


def assemble(
    context: TreatmentContext,
    regimens: RegimenCatalog,
    drugs: DrugModuleCatalog,
    reject_unresolved: bool = False,
    reject_empty: bool = False,
) -> QuestionnaireSpecification:
    """
    Build the questionnaire specification for a treatment context.
    
    Args:
        context: Patient's regimen, cycle and day in cycle
        regimens: Regimen catalog snapshot
        drugs: Drug module catalog snapshot
        reject_unresolved: Raise instead of returning a partial questionnaire
        reject_empty: Raise instead of returning a zero-item questionnaire
        
    Raises:
        UnknownRegimenError: regimen code not in the catalog
        AmbiguousAliasError: a composition entry matches several modules
        UnresolvedDrugError: strict mode and some entries did not resolve
        EmptyQuestionnaireError: reject_empty and no items were produced
    """
    log = logger.bind(
        patient_id=context.patient_id,
        regimen_code=context.regimen_code,
        cycle=context.current_cycle_number,
        day=context.day_in_cycle,
    )
    
    regimen = regimens.find_by_code(context.regimen_code)
    if regimen is None:
        log.error("Unknown regimen code", known_codes=regimens.codes)
        raise UnknownRegimenError(context.regimen_code)
    
    step_name, entries, step_matched = regimen.composition_for_cycle(context.current_cycle_number)
    resolution = resolve(entries, drugs)
    
    if resolution.ambiguous:
        entry, candidates = next(iter(resolution.ambiguous.items()))
        log.error("Ambiguous drug entry halts generation", ambiguous=dict(resolution.ambiguous))
        raise AmbiguousAliasError(entry, list(candidates), regimen_code=regimen.regimen_code)
    
    if resolution.unresolved and reject_unresolved:
        raise UnresolvedDrugError(regimen.regimen_code, list(resolution.unresolved))
    
    aggregated = aggregate(resolution.modules)
    items, nadir_active = annotate(aggregated.items, regimen.nadir_window, context.day_in_cycle)
    
    warnings: list[GenerationWarning] = []
    if not step_matched:
        warnings.append(
            GenerationWarning(
                kind=WarningKind.NO_ACTIVE_STEP,
                message=(
                    f"Regimen {regimen.regimen_code} defines no step for cycle "
                    f"{context.current_cycle_number}"
                ),
            )
        )
    if resolution.unresolved:
        warnings.append(
            UnresolvedDrugWarning(
                message=f"{len(resolution.unresolved)} drug(s) matched no catalog module",
                drugs=list(resolution.unresolved),
            )
        )
    if not items:
        if resolution.modules:
            reason = "Resolved drugs carry no symptom items"
        elif resolution.unresolved:
            reason = "No drugs resolved; questionnaire is empty"
        else:
            reason = "No drugs are active for this cycle"
        warnings.append(
            GenerationWarning(
                kind=WarningKind.NO_ITEMS,
                message=reason,
                drugs=list(resolution.resolved),
            )
        )
    
    if not items:
        status = GenerationStatus.DEGRADED
    elif resolution.unresolved:
        status = GenerationStatus.PARTIAL
    else:
        status = GenerationStatus.COMPLETE
    
    if status == GenerationStatus.DEGRADED and reject_empty:
        raise EmptyQuestionnaireError(regimen.regimen_code, [w.message for w in warnings])
    
    metadata = QuestionnaireMetadata(
        active_drugs=list(resolution.resolved),
        unresolved_drugs=list(resolution.unresolved),
        total_items=len(items),
        nadir_active=nadir_active,
        regimen_code=regimen.regimen_code,
        regimen_step=step_name,
        cycle_number=context.current_cycle_number,
        day_in_cycle=context.day_in_cycle,
        nadir_phase=analyze_nadir(context.day_in_cycle, regimen.nadir_window).phase.value,
        cycle_phase=cycle_phase(
            context.day_in_cycle, regimen.nadir_window, regimen.cycle_length_days
        ).value,
        total_items_before_dedup=aggregated.total_before_dedup,
        symptom_sources=aggregated.sources,
        symptom_groups=group_by_symptom_root(items),
        status=status,
        warnings=warnings,
    )
    
    if status == GenerationStatus.COMPLETE:
        log.info(
            "Questionnaire assembled",
            active_drugs=metadata.active_drugs,
            total_items=metadata.total_items,
            nadir_active=nadir_active,
        )
    else:
        log.warning(
            "Questionnaire assembled in degraded state",
            status=status.value,
            active_drugs=metadata.active_drugs,
            unresolved_drugs=metadata.unresolved_drugs,
            total_items=metadata.total_items,
        )
    
    return QuestionnaireSpecification(
        patient_id=context.patient_id,
        items=items,
        metadata=metadata,
    )
