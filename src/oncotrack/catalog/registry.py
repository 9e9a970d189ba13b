"""
Catalog Registry

Immutable catalog snapshots for drug modules and regimens.

The drug module catalog builds a normalized name/alias index once, so a
resolution call is a dictionary lookup rather than a scan over every
module's alias list. Snapshots are passed explicitly to the engine; nothing
here is process-global.
"""

import re
from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping

import structlog

from oncotrack.catalog.models import DrugModule, Regimen
from oncotrack.errors import AmbiguousAliasError, CatalogIntegrityError

logger = structlog.get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Case-fold, trim and collapse inner whitespace of a drug name."""
    return _WHITESPACE.sub(" ", name.strip()).casefold()


class DrugModuleCatalog:
    """
    Read-only registry of drug modules keyed by canonical name and alias.
    
    Usage:
        catalog = DrugModuleCatalog(modules)
        module = catalog.find_by_name_or_alias("Kadcyla")
        candidates = catalog.candidates("trastuzumab emtansine")
    """
    
    def __init__(self, modules: Iterable[DrugModule]):
        modules = list(modules)
        problems: list[str] = []
        
        by_name: dict[str, DrugModule] = {}
        canonical_index: dict[str, str] = {}
        for module in modules:
            key = normalize_name(module.canonical_name)
            if key in canonical_index:
                problems.append(
                    f"duplicate canonical name {module.canonical_name!r} "
                    f"(already defined as {canonical_index[key]!r})"
                )
                continue
            canonical_index[key] = module.canonical_name
            by_name[module.canonical_name] = module
            
            seen_codes: set[str] = set()
            for code in module.item_codes:
                if code in seen_codes:
                    problems.append(f"{module.canonical_name}: duplicate item code {code}")
                seen_codes.add(code)
        
        alias_index: dict[str, list[str]] = defaultdict(list)
        for module in by_name.values():
            own_key = normalize_name(module.canonical_name)
            for alias in module.alternative_names:
                key = normalize_name(alias)
                if not key or key == own_key:
                    continue
                owner = canonical_index.get(key)
                if owner is not None:
                    problems.append(
                        f"{module.canonical_name}: alias {alias!r} is the canonical name of {owner!r}"
                    )
                    continue
                if module.canonical_name not in alias_index[key]:
                    alias_index[key].append(module.canonical_name)
        
        if problems:
            raise CatalogIntegrityError(
                f"Drug module catalog has {len(problems)} integrity problem(s)",
                problems=problems,
            )
        
        self._modules: Mapping[str, DrugModule] = MappingProxyType(by_name)
        self._canonical_index: Mapping[str, str] = MappingProxyType(canonical_index)
        self._alias_index: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {key: tuple(names) for key, names in alias_index.items()}
        )
        
        reverse: dict[str, list[str]] = {name: [name] for name in by_name}
        for module in by_name.values():
            reverse[module.canonical_name].extend(module.alternative_names)
        self._names_by_module: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {name: tuple(names) for name, names in reverse.items()}
        )
        
        ambiguous = self.ambiguous_aliases
        if ambiguous:
            logger.warning(
                "Drug catalog has aliases shared by several modules",
                aliases={key: list(names) for key, names in ambiguous.items()},
            )
    
    def __len__(self) -> int:
        return len(self._modules)
    
    def __iter__(self):
        return iter(self._modules.values())
    
    def __contains__(self, canonical_name: str) -> bool:
        return canonical_name in self._modules
    
    @property
    def canonical_names(self) -> list[str]:
        return list(self._modules.keys())
    
    @property
    def ambiguous_aliases(self) -> dict[str, tuple[str, ...]]:
        """Normalized aliases claimed by more than one module."""
        return {key: names for key, names in self._alias_index.items() if len(names) > 1}
    
    def get(self, canonical_name: str) -> DrugModule | None:
        """Get a module by its exact canonical name."""
        return self._modules.get(canonical_name)
    
    def names_for(self, canonical_name: str) -> tuple[str, ...]:
        """All names (canonical first, then aliases) a module answers to."""
        return self._names_by_module.get(canonical_name, ())
    
    def candidates(self, name: str) -> list[DrugModule]:
        """
        Modules a name could refer to.
        
        Canonical names win over aliases. More than one candidate means the
        name is ambiguous in this catalog.
        """
        key = normalize_name(name)
        if not key:
            return []
        
        canonical = self._canonical_index.get(key)
        if canonical is not None:
            return [self._modules[canonical]]
        
        return [self._modules[owner] for owner in self._alias_index.get(key, ())]
    
    def find_by_name_or_alias(self, name: str) -> DrugModule | None:
        """
        Find the single module a name refers to.
        
        Raises:
            AmbiguousAliasError: if the name matches several modules
        """
        matches = self.candidates(name)
        if len(matches) > 1:
            raise AmbiguousAliasError(name, [m.canonical_name for m in matches])
        return matches[0] if matches else None


class RegimenCatalog:
    """Read-only registry of regimens keyed by regimen code."""
    
    def __init__(self, regimens: Iterable[Regimen]):
        by_code: dict[str, Regimen] = {}
        duplicates = []
        for regimen in regimens:
            if regimen.regimen_code in by_code:
                duplicates.append(f"duplicate regimen code {regimen.regimen_code!r}")
                continue
            by_code[regimen.regimen_code] = regimen
        
        if duplicates:
            raise CatalogIntegrityError("Regimen catalog has duplicate codes", problems=duplicates)
        
        self._regimens: Mapping[str, Regimen] = MappingProxyType(by_code)
    
    def __len__(self) -> int:
        return len(self._regimens)
    
    def __iter__(self):
        return iter(self._regimens.values())
    
    @property
    def codes(self) -> list[str]:
        return list(self._regimens.keys())
    
    def find_by_code(self, code: str) -> Regimen | None:
        """Find a regimen by its exact code."""
        return self._regimens.get(code)
