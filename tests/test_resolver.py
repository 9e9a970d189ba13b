from oncotrack.catalog.registry import DrugModuleCatalog, normalize_name
from oncotrack.engine.resolver import resolve

from conftest import make_module


def test_exact_canonical_names_leave_nothing_unresolved(drug_catalog):
    result = resolve(["T-DM1", "Doxorubicin", "Cyclophosphamide"], drug_catalog)

    assert result.unresolved == ()
    assert result.ambiguous == {}
    assert result.resolved == ("T-DM1", "Doxorubicin", "Cyclophosphamide")
    assert result.is_complete


def test_alias_resolves_case_insensitively(drug_catalog):
    for entry in ["Trastuzumab Emtansine", "trastuzumab emtansine", "  KADCYLA ", "Trastuzumab   Emtansine"]:
        result = resolve([entry], drug_catalog)
        assert result.resolved == ("T-DM1",), entry
        assert result.unresolved == ()


def test_unmatched_entries_are_reported_not_dropped(drug_catalog):
    result = resolve(["Adriamycin", "Paclitaxel"], drug_catalog)

    assert result.resolved == ("Doxorubicin",)
    assert result.unresolved == ("Paclitaxel",)
    assert not result.is_complete


def test_missing_alias_regression():
    catalog = DrugModuleCatalog([make_module("T-DM1", ["FATIGUE_SEV", "NAUSEA_FREQ"], aliases=[])])

    result = resolve(["Trastuzumab Emtansine"], catalog)

    assert result.resolved == ()
    assert result.unresolved == ("Trastuzumab Emtansine",)


def test_module_named_twice_contributes_once(drug_catalog):
    result = resolve(["Doxorubicin", "Adriamycin", "doxorubicin"], drug_catalog)

    assert result.resolved == ("Doxorubicin",)


def test_resolution_follows_composition_order(drug_catalog):
    result = resolve(["Cytoxan", "Kadcyla", "Adriamycin"], drug_catalog)

    assert result.resolved == ("Cyclophosphamide", "T-DM1", "Doxorubicin")


def test_shared_alias_is_reported_as_ambiguous():
    catalog = DrugModuleCatalog([
        make_module("Paclitaxel", ["NUMBNESS_TINGLING_SEV"], aliases=["Taxane"]),
        make_module("Docetaxel", ["SWELLING_FREQ"], aliases=["taxane "]),
    ])

    result = resolve(["TAXANE", "Docetaxel"], catalog)

    assert result.ambiguous == {"TAXANE": ("Paclitaxel", "Docetaxel")}
    assert result.resolved == ("Docetaxel",)
    assert result.unresolved == ()


def test_empty_composition():
    result = resolve([], DrugModuleCatalog([]))

    assert result.resolved == ()
    assert result.unresolved == ()


def test_normalize_name():
    assert normalize_name("  Trastuzumab\tEmtansine ") == "trastuzumab emtansine"
    assert normalize_name("T-DM1") == "t-dm1"
