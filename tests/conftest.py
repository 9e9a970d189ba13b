import pytest

from oncotrack.catalog.loader import load_catalogs
from oncotrack.catalog.models import DrugModule, NadirWindow, Regimen, TreatmentContext
from oncotrack.catalog.registry import DrugModuleCatalog, RegimenCatalog


def make_module(name, items=(), aliases=()):
    return DrugModule(
        canonical_name=name,
        alternative_names=tuple(aliases),
        items=[{"item_code": code, "attribute": code.replace("_", " ").lower()} for code in items],
    )


def make_regimen(code, composition, nadir=(7, 12), **kwargs):
    return Regimen(
        regimen_code=code,
        regimen_name=kwargs.pop("regimen_name", code),
        drug_composition=tuple(composition),
        nadir_window=NadirWindow(start=nadir[0], end=nadir[1]),
        **kwargs,
    )


def make_context(regimen_code, cycle=1, day=1, patient_id="P001"):
    return TreatmentContext(
        patient_id=patient_id,
        regimen_code=regimen_code,
        current_cycle_number=cycle,
        day_in_cycle=day,
    )


@pytest.fixture
def tdm1_module():
    return make_module(
        "T-DM1",
        items=["FATIGUE_SEV", "NAUSEA_FREQ"],
        aliases=["Trastuzumab Emtansine", "Kadcyla"],
    )


@pytest.fixture
def drug_catalog(tdm1_module):
    return DrugModuleCatalog([
        tdm1_module,
        make_module("Doxorubicin", ["NAUSEA_FREQ", "VOMITING_FREQ", "FEVER_PRESENT"], ["Adriamycin"]),
        make_module("Cyclophosphamide", ["NAUSEA_FREQ", "HAIR_LOSS_AMOUNT"], ["Cytoxan"]),
    ])


@pytest.fixture
def regimen_catalog():
    return RegimenCatalog([
        make_regimen("T-DM1", ["T-DM1"], nadir=(7, 14)),
        make_regimen("AC", ["Doxorubicin", "Cyclophosphamide"]),
        make_regimen("KADCYLA", ["kadcyla"], nadir=(0, 0)),
    ])


@pytest.fixture(scope="session")
def bundled_catalogs():
    return load_catalogs()
