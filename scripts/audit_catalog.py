#!/usr/bin/env python3
"""
Oncotrack Catalog Audit

Resolves every regimen composition (and every sequential step) against the
drug module catalog and reports entries that would produce missing or empty
questionnaires.

Usage:
    python scripts/audit_catalog.py
    
    # Or against another catalog file
    python scripts/audit_catalog.py --catalog data/drug-modules.json --json
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from oncotrack.catalog.audit import audit_catalogs
from oncotrack.catalog.loader import load_catalogs
from oncotrack.errors import CatalogIntegrityError
from oncotrack.observability.logging import configure_logging


def print_report(report) -> None:
    for composition in report.compositions:
        label = composition.regimen_code
        if composition.step_name:
            label = f"{label} [{composition.step_name}]"
        
        icon = "✅" if composition.ok else "❌"
        print(f"{icon} {label}: {', '.join(composition.entries) or '(no drugs)'}")
        if composition.resolved:
            print(f"     resolved:   {', '.join(composition.resolved)}")
        if composition.unresolved:
            print(f"     unresolved: {', '.join(composition.unresolved)}")
        for entry, candidates in composition.ambiguous.items():
            print(f"     ambiguous:  {entry} -> {', '.join(candidates)}")
    
    if report.shared_aliases:
        print("\nAliases claimed by several modules:")
        for alias, owners in report.shared_aliases.items():
            print(f"  {alias}: {', '.join(owners)}")
    
    print()
    print(f"{len(report.problems)} problem composition(s) of {len(report.compositions)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Audit regimen compositions against the drug catalog")
    parser.add_argument("--catalog", type=Path, default=None, help="Catalog JSON (defaults to bundled catalog)")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    
    configure_logging(args.log_level)
    
    try:
        regimens, drugs = load_catalogs(args.catalog)
    except CatalogIntegrityError as e:
        print(f"❌ {e}")
        for problem in e.problems:
            print(f"   - {problem}")
        return 2
    
    report = audit_catalogs(regimens, drugs)
    
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_report(report)
    
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
