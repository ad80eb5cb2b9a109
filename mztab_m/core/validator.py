from abc import ABC, abstractmethod
from typing import Any, List, Optional

from mztab_m.core.errors import LogicalErrorType, MZTabError, MZTabErrorType


def _is_missing(value: Any) -> bool:
    return value is None or value is False or value == "" or value == []


class Validator(ABC):
    def __init__(self, field: str, error_type: MZTabErrorType = LogicalErrorType.NotDefineInMetadata,
                 label: Optional[str] = None):
        self.field = field
        self.error_type = error_type
        self.label = label or field

    def _make_error(self, line_number: int, label: str, *values) -> MZTabError:
        return MZTabError(self.error_type, line_number, label, *values)

    @abstractmethod
    def validate(self, metadata: Any, line_number: int = -1) -> List[MZTabError]:
        raise NotImplementedError


class RequiredValidator(Validator):
    """A document level metadata field must be set."""

    def validate(self, metadata: Any, line_number: int = -1) -> List[MZTabError]:
        if _is_missing(getattr(metadata, self.field, None)):
            return [self._make_error(line_number, self.label, getattr(metadata, "mz_tab_version", None))]
        return []


class IndexedRequiredValidator(Validator):
    """Every entity of one indexed kind must have a property set.

    *label* is formatted with the entity id, e.g. ``assay[{}]-ms_run_ref``.
    When *when_entity* is given the check only applies if that kind of
    entity is present in the metadata too.
    """

    def __init__(self, entity: str, field: str, label: str,
                 error_type: MZTabErrorType = LogicalErrorType.NotDefineInMetadata,
                 when_entity: Optional[str] = None):
        super().__init__(field, error_type, label)
        self.entity = entity
        self.when_entity = when_entity

    def _condition_met(self, metadata: Any) -> bool:
        if self.when_entity is None:
            return True
        return bool(getattr(metadata, self.when_entity, None))

    def validate(self, metadata: Any, line_number: int = -1) -> List[MZTabError]:
        entities = getattr(metadata, self.entity, None) or {}
        if not entities or not self._condition_met(metadata):
            return []
        errors = []
        for id, item in entities.items():
            if _is_missing(getattr(item, self.field, None)):
                errors.append(self._make_error(line_number, self.label.format(id)))
        return errors


# Checked in this order once the metadata section is complete.
COMPLETENESS_VALIDATORS: List[Validator] = [
    RequiredValidator("quantification_method"),
    IndexedRequiredValidator("assay", "ms_run_ref", "assay[{}]-ms_run_ref"),
    IndexedRequiredValidator("study_variable", "assay_refs", "study_variable[{}]-assay_refs",
                             error_type=LogicalErrorType.AssayRefs, when_entity="assay"),
    RequiredValidator("description"),
    IndexedRequiredValidator("ms_run", "has_location", "ms_run[{}]-location"),
]
