"""Parser for the table header lines (``SMH``, ``SFH``, ``SEH``).

Builds the ``MZTabColumnFactory`` and ``PositionMapping`` for one table and
applies the deferred ``colunit-*`` declarations of that table.
"""

import logging
import re
from typing import Dict, Optional, Tuple

from mztab_m.constants import OPT_PREFIX, TAB, Section
from mztab_m.core.errors import (FormatErrorType, LogicalErrorType, MZTabError, MZTabErrorList,
                                 MZTabErrorType, MZTabException)
from mztab_m.models.metadata import ColumnParameterMapping, IndexedElement, Metadata
from mztab_m.parsers import mztab_utils as utils
from mztab_m.parsers.columns import (ID_CONFIDENCE_MEASURE, OPT_HEADER_PATTERN, OPT_SCOPES,
                                     ColumnType, MZTabColumnFactory, PositionMapping)
from mztab_m.parsers.parser_context import MZTabParserContext

logger = logging.getLogger(__name__)

INDEXED_HEADER_PATTERN = re.compile(r"(\w+)\[(\d+)\]")

_COLUNIT_LABELS = {
    Section.Small_Molecule: ("colunit-small_molecule", "colunit_small_molecule"),
    Section.Small_Molecule_Feature: ("colunit-small_molecule_feature", "colunit_small_molecule_feature"),
    Section.Small_Molecule_Evidence: ("colunit-small_molecule_evidence", "colunit_small_molecule_evidence"),
}


class MZTabHeaderLineParser:

    def __init__(self, context: MZTabParserContext, error_list: MZTabErrorList):
        self.context = context
        self.error_list = error_list
        self.line_number = 0

    @property
    def metadata(self) -> Metadata:
        return self.context.metadata

    def _exception(self, error_type: MZTabErrorType, *values) -> MZTabException:
        return MZTabException(MZTabError(error_type, self.line_number, *values))

    def parse(self, line_number: int, line: str,
              opt_column_types: Optional[Dict[str, ColumnType]] = None) -> Tuple[MZTabColumnFactory, PositionMapping]:
        """Parse one header line.

        *opt_column_types* maps ``opt_`` headers to their value type; columns
        not listed are read as strings.
        """
        self.line_number = line_number
        items = [item.strip() for item in line.rstrip("\r\n").split(TAB)]
        section = Section.parse(items[0])
        if section is None or not section.is_header:
            raise self._exception(FormatErrorType.LinePrefix, items[0])

        factory = MZTabColumnFactory(section)
        headers = items[1:]
        seen = set()
        for header in headers:
            if header in seen:
                raise self._exception(FormatErrorType.DuplicatedColumn, header)
            seen.add(header)

        missing = [c.header for c in factory.stable_columns if c.header not in seen]
        if missing:
            raise self._exception(FormatErrorType.StableColumn, ", ".join(missing))

        opt_column_types = opt_column_types or {}
        for header in headers:
            if factory.find_column(header) is not None:
                continue
            if header.startswith(OPT_PREFIX):
                self._add_optional_column(factory, header, opt_column_types.get(header, ColumnType.STRING))
            else:
                self._add_indexed_column(factory, header)

        mapping = PositionMapping(factory, items)
        logger.debug(f"{section} header: {len(mapping)} columns, {mapping}")
        self._apply_col_units(factory)
        return factory, mapping

    def _require_declared(self, element: str, id: int, header: str) -> IndexedElement:
        entities = getattr(self.metadata, element)
        if id not in entities:
            raise self._exception(LogicalErrorType.NotDefineInMetadata, f"{element}[{id}]", header)
        return IndexedElement(element=element, id=id)

    def _add_indexed_column(self, factory: MZTabColumnFactory, header: str):
        match = INDEXED_HEADER_PATTERN.fullmatch(header)
        if match is None:
            raise self._exception(FormatErrorType.ColumnHeader, header, factory.section)
        attribute, id = match.group(1), int(match.group(2))

        if attribute == ID_CONFIDENCE_MEASURE and factory.supports_confidence_columns:
            self._require_declared(ID_CONFIDENCE_MEASURE, id, header)
            factory.add_id_confidence_measure_column(id)
            return

        element = dict(factory.abundance_attributes).get(attribute)
        if element is None:
            if attribute.startswith("abundance_"):
                raise self._exception(FormatErrorType.AbundanceColumn, header)
            raise self._exception(FormatErrorType.ColumnHeader, header, factory.section)
        factory.add_abundance_column(attribute, self._require_declared(element, id, header))

    def _add_optional_column(self, factory: MZTabColumnFactory, header: str, data_type: ColumnType):
        match = OPT_HEADER_PATTERN.fullmatch(header)
        if match is None:
            raise self._exception(FormatErrorType.OptionalColumn, header)
        element = None
        if match.group(2) is not None:
            if match.group(2) not in OPT_SCOPES:
                raise self._exception(FormatErrorType.OptionalColumn, header)
            element = self._require_declared(match.group(2), int(match.group(3)), header)
        factory.add_optional_column(element, match.group(4), data_type)

    def _apply_col_units(self, factory: MZTabColumnFactory):
        define_label, attribute = _COLUNIT_LABELS[factory.section]
        units = getattr(self.metadata, attribute)
        for value in self.context.col_unit_map.get(define_label, []):
            column_name, sep, param_text = value.partition("=")
            param = utils.parse_param(param_text) if sep else None
            if param is None:
                self.error_list.add(MZTabError(FormatErrorType.ColUnit, self.line_number, define_label, value))
                continue
            if factory.find_column(column_name.strip()) is None:
                self.error_list.add(MZTabError(LogicalErrorType.ColUnit, self.line_number, define_label, value))
                continue
            units.append(ColumnParameterMapping(column_name=column_name.strip(), param=param))
