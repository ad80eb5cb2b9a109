"""Parser for ``MTD`` lines.

A metadata line is ``MTD<TAB>define label<TAB>value``.  The define label has
the shape ``element([id])(-sub([sub id]))(-property)`` and is matched case
insensitively.  Each element has one handler; handlers resolve ids and
references through the ``MZTabParserContext`` and either record recoverable
problems in the error list or raise ``MZTabException``.
"""

import logging
import re
from collections import Counter
from typing import Dict, List, Optional

from mztab_m.constants import TAB
from mztab_m.core.errors import (FormatErrorType, LogicalErrorType, MZTabError, MZTabErrorList,
                                 MZTabErrorType, MZTabException)
from mztab_m.core.validator import COMPLETENESS_VALIDATORS
from mztab_m.models.metadata import Metadata, Parameter
from mztab_m.parsers import mztab_utils as utils
from mztab_m.parsers.metadata_elements import (AssayProperty, ContactProperty,
                                               CVProperty, DatabaseProperty, InstrumentProperty,
                                               MetadataElement, MsRunProperty, MzTabProperty,
                                               SampleProperty, SmallMoleculeProperty,
                                               SoftwareProperty, StudyVariableProperty,
                                               find_element, find_property)
from mztab_m.parsers.parser_context import MZTabParserContext

logger = logging.getLogger(__name__)

NORMAL_METADATA_PATTERN = re.compile(r"(\w+)(\[([^\]]*)\])?(-(\w+)(\[([^\]]*)\])?)?(-(\w+))?")

_QUANTIFICATION_UNIT_FIELDS = {
    MetadataElement.SMALL_MOLECULE: "small_molecule_quantification_unit",
    MetadataElement.SMALL_MOLECULE_FEATURE: "small_molecule_feature_quantification_unit",
    MetadataElement.SMALL_MOLECULE_EVIDENCE: "small_molecule_evidence_quantification_unit",
}


class MTDLineParser:

    def __init__(self, context: MZTabParserContext, error_list: MZTabErrorList):
        self.context = context
        self.error_list = error_list
        self.line_number = 0
        # singleton metadata fields seen so far, whether or not their value parsed
        self._defined = set()
        self._handlers = {
            MetadataElement.MZTAB: self._handle_mztab,
            MetadataElement.TITLE: self._handle_title,
            MetadataElement.DESCRIPTION: self._handle_description,
            MetadataElement.SAMPLE_PROCESSING: self._handle_sample_processing,
            MetadataElement.INSTRUMENT: self._handle_instrument,
            MetadataElement.SOFTWARE: self._handle_software,
            MetadataElement.PUBLICATION: self._handle_publication,
            MetadataElement.CONTACT: self._handle_contact,
            MetadataElement.URI: self._handle_uri,
            MetadataElement.EXTERNAL_STUDY_URI: self._handle_uri,
            MetadataElement.QUANTIFICATION_METHOD: self._handle_quantification_method,
            MetadataElement.SMALL_MOLECULE: self._handle_quantification_unit,
            MetadataElement.SMALL_MOLECULE_FEATURE: self._handle_quantification_unit,
            MetadataElement.SMALL_MOLECULE_EVIDENCE: self._handle_quantification_unit,
            MetadataElement.MS_RUN: self._handle_ms_run,
            MetadataElement.CUSTOM: self._handle_custom,
            MetadataElement.SAMPLE: self._handle_sample,
            MetadataElement.ASSAY: self._handle_assay,
            MetadataElement.STUDY_VARIABLE: self._handle_study_variable,
            MetadataElement.CV: self._handle_cv,
            MetadataElement.DATABASE: self._handle_database,
            MetadataElement.COLUNIT: self._handle_colunit,
            MetadataElement.ID_CONFIDENCE_MEASURE: self._handle_id_confidence_measure,
        }

    @property
    def metadata(self) -> Metadata:
        return self.context.metadata

    # ------------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------------

    def parse(self, line_number: int, line: str):
        self.line_number = line_number
        items = line.rstrip("\r\n").split(TAB)
        if len(items) != 3:
            raise self._exception(FormatErrorType.MTDLine, line.rstrip("\r\n"))

        define_label = items[1].strip().lower()
        value = items[2].strip()
        logger.debug(f"Line {line_number}: {define_label} = {value}")

        match = NORMAL_METADATA_PATTERN.fullmatch(define_label)
        element = find_element(match.group(1)) if match else None
        if element is None:
            raise self._exception(FormatErrorType.MTDDefineLabel, define_label)
        if match.group(9):
            raise self._exception(FormatErrorType.MTDDefineLabel, define_label)
        self._handlers[element](element, match, define_label, value)

    def refine_normal_metadata(self):
        """Check the completed metadata section; raise on the first omission."""
        for validator in COMPLETENESS_VALIDATORS:
            errors = validator.validate(self.metadata, self.line_number)
            if errors:
                raise MZTabException(errors[0])

    # ------------------------------------------------------------------
    # checks shared by the handlers
    # ------------------------------------------------------------------

    def _error(self, error_type: MZTabErrorType, *values) -> MZTabError:
        return MZTabError(error_type, self.line_number, *values)

    def _exception(self, error_type: MZTabErrorType, *values) -> MZTabException:
        return MZTabException(self._error(error_type, *values))

    def _add_error(self, error_type: MZTabErrorType, *values):
        self.error_list.add(self._error(error_type, *values))

    def _check_index(self, define_label: str, id: Optional[str]) -> int:
        if id is None or not id.isdigit() or int(id) < 1:
            raise self._exception(LogicalErrorType.IdNumber, define_label, id)
        return int(id)

    def _check_not_indexed(self, match, define_label: str):
        if match.group(3) is not None or match.group(4) is not None:
            raise self._exception(FormatErrorType.MTDDefineLabel, define_label)

    def _check_property(self, element: MetadataElement, match, required: bool = False):
        name = match.group(5)
        if name is None:
            if required:
                raise self._exception(FormatErrorType.MTDDefineLabel, match.group(0))
            return None
        prop = find_property(element, name)
        if prop is None:
            raise self._exception(FormatErrorType.MTDDefineLabel, f"{element}-{name}")
        if match.group(7) is not None:
            self._check_index(match.group(0), match.group(7))
        return prop

    def _check_singleton(self, attribute: str, define_label: str):
        if attribute in self._defined or getattr(self.metadata, attribute) is not None:
            raise self._exception(LogicalErrorType.DuplicationDefine, define_label)
        self._defined.add(attribute)

    def _check_parameter(self, define_label: str, value: str) -> Optional[Parameter]:
        param = utils.parse_param(value)
        if param is None:
            self._add_error(FormatErrorType.Param, define_label, value)
        return param

    def _check_parameter_list(self, define_label: str, value: str) -> Optional[List[Parameter]]:
        params = utils.parse_param_list(value)
        if not params:
            self._add_error(FormatErrorType.ParamList, define_label, value)
            return None
        return params

    def _check_email(self, define_label: str, value: str) -> Optional[str]:
        email = utils.parse_email(value)
        if email is None:
            self._add_error(FormatErrorType.Email, define_label, value)
        return email

    def _check_uri(self, define_label: str, value: str) -> Optional[str]:
        uri = utils.parse_uri(value)
        if uri is None:
            self._add_error(FormatErrorType.URI, define_label, value)
        return uri

    def _check_url(self, define_label: str, value: str) -> Optional[str]:
        if utils.parse_string(value) is None:
            self._add_error(LogicalErrorType.NotNULL, define_label, value)
            return None
        url = utils.parse_url(value)
        if url is None:
            self._add_error(FormatErrorType.URL, define_label, value)
        return url

    def _check_stored(self, entity, define_label: str):
        if entity is None:
            raise self._exception(LogicalErrorType.NULL, define_label)

    def _resolve_refs(self, define_label: str, value: str, element: MetadataElement,
                      entities: Dict[int, object]) -> list:
        """Resolve a reference list such as ``assay[1]|assay[2]``.

        Each duplicated id is reported once as a warning.  Any id that is not
        declared yet aborts the document.
        """
        refs = utils.parse_ref_list(value, str(element))
        if not refs:
            raise self._exception(FormatErrorType.IndexedElement, define_label, value)

        counts = Counter(ref.id for ref in refs)
        for ref in dict.fromkeys(refs):
            if counts[ref.id] > 1:
                self._add_error(LogicalErrorType.DuplicationID, define_label, str(ref))

        resolved = []
        for ref in refs:
            entity = entities.get(ref.id)
            if entity is None:
                raise self._exception(LogicalErrorType.NotDefineInMetadata, str(ref), define_label)
            resolved.append(entity)
        return resolved

    # ------------------------------------------------------------------
    # document level elements
    # ------------------------------------------------------------------

    def _handle_mztab(self, element, match, define_label, value):
        if match.group(3) is not None:
            raise self._exception(FormatErrorType.MTDDefineLabel, define_label)
        prop = self._check_property(element, match, required=True)
        if prop == MzTabProperty.VERSION:
            self._check_singleton("mz_tab_version", define_label)
            if utils.parse_mztab_version(value) is None:
                raise self._exception(FormatErrorType.MZTabVersion, define_label, value)
            self.metadata.mz_tab_version = value
        elif prop == MzTabProperty.ID:
            self._check_singleton("mz_tab_id", define_label)
            self.metadata.mz_tab_id = value

    def _handle_title(self, element, match, define_label, value):
        self._check_not_indexed(match, define_label)
        self._check_singleton("title", define_label)
        self.metadata.title = value

    def _handle_description(self, element, match, define_label, value):
        self._check_not_indexed(match, define_label)
        self._check_singleton("description", define_label)
        self.metadata.description = value

    def _handle_quantification_method(self, element, match, define_label, value):
        self._check_not_indexed(match, define_label)
        self._check_singleton("quantification_method", define_label)
        self.metadata.quantification_method = self._check_parameter(define_label, value)

    def _handle_quantification_unit(self, element, match, define_label, value):
        if match.group(3) is not None:
            raise self._exception(FormatErrorType.MTDDefineLabel, define_label)
        prop = self._check_property(element, match, required=True)
        if prop == SmallMoleculeProperty.IDENTIFICATION_RELIABILITY:
            attribute = "small_molecule_identification_reliability"
        else:
            attribute = _QUANTIFICATION_UNIT_FIELDS[element]
        self._check_singleton(attribute, define_label)
        setattr(self.metadata, attribute, self._check_parameter(define_label, value))

    def _handle_colunit(self, element, match, define_label, value):
        prop = find_property(element, match.group(5))
        if prop is None or match.group(3) is not None or match.group(7) is not None:
            self._add_error(FormatErrorType.MTDDefineLabel, define_label)
            return
        self.context.col_unit_map.setdefault(f"{element}-{prop}", []).append(value)

    # ------------------------------------------------------------------
    # indexed elements
    # ------------------------------------------------------------------

    def _handle_sample_processing(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        self._check_property(element, match)
        params = self._check_parameter_list(define_label, value)
        self._check_stored(self.context.add_sample_processing(id, params), f"{element}[{id}]")

    def _handle_instrument(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match, required=True)
        param = self._check_parameter(define_label, value)
        add = {
            InstrumentProperty.NAME: self.context.add_instrument_name,
            InstrumentProperty.SOURCE: self.context.add_instrument_source,
            InstrumentProperty.ANALYZER: self.context.add_instrument_analyzer,
            InstrumentProperty.DETECTOR: self.context.add_instrument_detector,
        }[prop]
        self._check_stored(add(id, param), f"{element}[{id}]")

    def _handle_software(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        if prop == SoftwareProperty.SETTING:
            software = self.context.add_software_setting(id, utils.parse_string(value))
        else:
            param = self._check_parameter(define_label, value)
            if param is not None and utils.is_empty(param.value):
                self._add_error(LogicalErrorType.SoftwareVersion, value)
            software = self.context.add_software(id, param)
        self._check_stored(software, f"{element}[{id}]")

    def _handle_publication(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        self._check_property(element, match)
        items = utils.parse_publication_items(value)
        if not items:
            self._add_error(FormatErrorType.Publication, define_label, value)
            items = None
        self.context.add_publication(id, items)

    def _handle_contact(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match, required=True)
        if prop == ContactProperty.EMAIL:
            self._check_email(define_label, value)
            contact = self.context.add_contact_email(id, utils.parse_string(value))
        elif prop == ContactProperty.AFFILIATION:
            contact = self.context.add_contact_affiliation(id, utils.parse_string(value))
        else:
            contact = self.context.add_contact_name(id, utils.parse_string(value))
        self._check_stored(contact, f"{element}[{id}]")

    def _handle_uri(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        self._check_property(element, match)
        uri = self._check_uri(define_label, value)
        if element == MetadataElement.URI:
            self.context.add_uri(id, uri)
        else:
            self.context.add_external_study_uri(id, uri)

    def _handle_ms_run(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        context = self.context
        if prop is None:
            ms_run = context.add_ms_run(id, utils.parse_string(value))
        elif prop == MsRunProperty.LOCATION:
            ms_run = context.add_ms_run_location(id, self._check_url(define_label, value))
        elif prop == MsRunProperty.INSTRUMENT_REF:
            instruments = self._resolve_refs(define_label, value, MetadataElement.INSTRUMENT,
                                             context.instrument_map)
            if len(instruments) != 1:
                raise self._exception(FormatErrorType.IndexedElement, define_label, value)
            ms_run = context.add_ms_run_instrument_ref(id, instruments[0])
        elif prop == MsRunProperty.HASH:
            ms_run = context.add_ms_run_hash(id, utils.parse_string(value))
        else:
            param = self._check_parameter(define_label, value)
            add = {
                MsRunProperty.FORMAT: context.add_ms_run_format,
                MsRunProperty.ID_FORMAT: context.add_ms_run_id_format,
                MsRunProperty.FRAGMENTATION_METHOD: context.add_ms_run_fragmentation_method,
                MsRunProperty.SCAN_POLARITY: context.add_ms_run_scan_polarity,
                MsRunProperty.HASH_METHOD: context.add_ms_run_hash_method,
            }[prop]
            ms_run = add(id, param)
        self._check_stored(ms_run, f"{element}[{id}]")

    def _handle_custom(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        self._check_property(element, match)
        self.context.add_custom(id, self._check_parameter(define_label, value))

    def _handle_id_confidence_measure(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        self._check_property(element, match)
        self.context.add_id_confidence_measure(id, self._check_parameter(define_label, value))

    def _handle_sample(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        context = self.context
        if prop is None:
            context.add_sample(id, utils.parse_string(value))
        elif prop == SampleProperty.DESCRIPTION:
            context.add_sample_description(id, utils.parse_string(value))
        else:
            add = {
                SampleProperty.SPECIES: context.add_sample_species,
                SampleProperty.TISSUE: context.add_sample_tissue,
                SampleProperty.CELL_TYPE: context.add_sample_cell_type,
                SampleProperty.DISEASE: context.add_sample_disease,
                SampleProperty.CUSTOM: context.add_sample_custom,
            }[prop]
            add(id, self._check_parameter(define_label, value))

    def _handle_assay(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        context = self.context
        if prop is None:
            context.add_assay(id, utils.parse_string(value))
        elif prop == AssayProperty.CUSTOM:
            context.add_assay_custom(id, self._check_parameter(define_label, value))
        elif prop == AssayProperty.EXTERNAL_URI:
            context.add_assay_external_uri(id, self._check_uri(define_label, value))
        elif prop == AssayProperty.SAMPLE_REF:
            ref = utils.parse_indexed_element(value, str(MetadataElement.SAMPLE))
            if ref is None:
                raise self._exception(FormatErrorType.IndexedElement, define_label, value)
            sample = context.sample_map.get(ref.id)
            if sample is None:
                raise self._exception(LogicalErrorType.NotDefineInMetadata, str(ref), define_label)
            context.add_assay_sample(id, sample)
        elif prop == AssayProperty.MS_RUN_REF:
            for ms_run in self._resolve_refs(define_label, value, MetadataElement.MS_RUN, context.ms_run_map):
                context.add_assay_ms_run(id, ms_run)

    def _handle_study_variable(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        context = self.context
        if prop is None:
            context.add_study_variable(id, utils.parse_string(value))
        elif prop == StudyVariableProperty.ASSAY_REFS:
            for assay in self._resolve_refs(define_label, value, MetadataElement.ASSAY, context.assay_map):
                context.add_study_variable_assay(id, assay)
        elif prop == StudyVariableProperty.SAMPLE_REFS:
            for sample in self._resolve_refs(define_label, value, MetadataElement.SAMPLE, context.sample_map):
                context.add_study_variable_sample(id, sample)
        elif prop == StudyVariableProperty.DESCRIPTION:
            context.add_study_variable_description(id, utils.parse_string(value))
        elif prop == StudyVariableProperty.AVERAGE_FUNCTION:
            context.add_study_variable_average_function(id, self._check_parameter(define_label, value))
        elif prop == StudyVariableProperty.VARIATION_FUNCTION:
            context.add_study_variable_variation_function(id, self._check_parameter(define_label, value))

    def _handle_cv(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        if prop is None:
            self.context.add_cv(id)
        elif prop in (CVProperty.URI, CVProperty.URL):
            self.context.add_cv_property(id, "uri", self._check_url(define_label, value))
        else:
            self.context.add_cv_property(id, str(prop), utils.parse_string(value))

    def _handle_database(self, element, match, define_label, value):
        id = self._check_index(define_label, match.group(3))
        prop = self._check_property(element, match)
        if prop is None:
            self.context.add_database(id, self._check_parameter(define_label, value))
        elif prop in (DatabaseProperty.URI, DatabaseProperty.URL):
            self.context.add_database_property(id, "uri", self._check_url(define_label, value))
        else:
            self.context.add_database_property(id, str(prop), utils.parse_string(value))
