"""
Oncotrack Errors

Exception taxonomy for questionnaire generation and lifecycle handling.
Every error carries structured attributes so callers can surface them
without parsing messages.
"""

from typing import Any


class OncotrackError(Exception):
    """Base error for the package."""

    code = "oncotrack_error"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": str(self)}


class CatalogIntegrityError(OncotrackError):
    """Catalog data violates a structural invariant."""

    code = "catalog_integrity"

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "problems": list(self.problems)}


class UnknownRegimenError(OncotrackError):
    """Treatment context references a regimen code absent from the catalog."""

    code = "unknown_regimen"

    def __init__(self, regimen_code: str):
        super().__init__(f"Unknown regimen code: {regimen_code!r}")
        self.regimen_code = regimen_code

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "regimen_code": self.regimen_code}


class AmbiguousAliasError(OncotrackError):
    """A composition entry matches more than one drug module."""

    code = "ambiguous_alias"

    def __init__(self, entry: str, candidates: list[str], regimen_code: str | None = None):
        super().__init__(
            f"Drug entry {entry!r} matches multiple modules: {', '.join(candidates)}"
        )
        self.entry = entry
        self.candidates = list(candidates)
        self.regimen_code = regimen_code

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "entry": self.entry,
            "candidates": self.candidates,
            "regimen_code": self.regimen_code,
        }


class UnresolvedDrugError(OncotrackError):
    """Raised in strict mode when a generation would leave drugs unresolved."""

    code = "unresolved_drugs"

    def __init__(self, regimen_code: str, unresolved: list[str]):
        super().__init__(
            f"Regimen {regimen_code!r} has unresolved drugs: {', '.join(unresolved)}"
        )
        self.regimen_code = regimen_code
        self.unresolved = list(unresolved)

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "regimen_code": self.regimen_code,
            "unresolved": self.unresolved,
        }


class EmptyQuestionnaireError(OncotrackError):
    """Raised when empty generations are configured to be rejected."""

    code = "empty_questionnaire"

    def __init__(self, regimen_code: str, reasons: list[str]):
        super().__init__(f"Questionnaire for regimen {regimen_code!r} has no items")
        self.regimen_code = regimen_code
        self.reasons = list(reasons)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "regimen_code": self.regimen_code, "reasons": self.reasons}


class QuestionnaireNotFoundError(OncotrackError):
    """Questionnaire id is unknown to the store."""

    code = "questionnaire_not_found"

    def __init__(self, questionnaire_id: str):
        super().__init__(f"Questionnaire not found: {questionnaire_id}")
        self.questionnaire_id = questionnaire_id


class TriageStateError(OncotrackError):
    """Lifecycle transition not allowed from the questionnaire's current state."""

    code = "invalid_triage_state"

    def __init__(self, questionnaire_id: str, message: str):
        super().__init__(message)
        self.questionnaire_id = questionnaire_id

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "questionnaire_id": self.questionnaire_id}


class DuplicateResponseConflict(OncotrackError):
    """A strict insert would create a second response for the same item."""

    code = "duplicate_response"

    def __init__(self, questionnaire_id: str, item_code: str):
        super().__init__(
            f"Response already exists for questionnaire {questionnaire_id} item {item_code}"
        )
        self.questionnaire_id = questionnaire_id
        self.item_code = item_code

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "questionnaire_id": self.questionnaire_id,
            "item_code": self.item_code,
        }


class InvalidResponseError(OncotrackError):
    """A response references an item that is not part of the questionnaire."""

    code = "invalid_response"

    def __init__(self, questionnaire_id: str, item_codes: list[str]):
        super().__init__(
            f"Questionnaire {questionnaire_id} has no items: {', '.join(item_codes)}"
        )
        self.questionnaire_id = questionnaire_id
        self.item_codes = list(item_codes)

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "questionnaire_id": self.questionnaire_id,
            "item_codes": self.item_codes,
        }
