"""Parsers for the data lines of the small molecule tables.

Each cell is looked up through the ``PositionMapping`` of its table, checked
against the column's parse strategy and written into a typed record.  Bad
cells are recorded in the error list and leave ``None`` behind; only a line
prefix that does not belong to the table aborts.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from mztab_m.constants import TAB, Section
from mztab_m.core.errors import (FormatErrorType, LogicalErrorType, MZTabError, MZTabErrorList,
                                 MZTabErrorType, MZTabException)
from mztab_m.models.metadata import Parameter, SpectraRef
from mztab_m.models.records import OptColumnMapping
from mztab_m.parsers import mztab_utils as utils
from mztab_m.parsers.columns import ColumnKind, ColumnType, MZTabColumn, MZTabColumnFactory, PositionMapping
from mztab_m.parsers.parser_context import MZTabParserContext

logger = logging.getLogger(__name__)


class MZTabDataLineParser:
    section: Section = None

    def __init__(self, context: MZTabParserContext, factory: MZTabColumnFactory,
                 position_mapping: PositionMapping, error_list: MZTabErrorList):
        if factory.section != self.section:
            raise ValueError(f"{type(self).__name__} can not read {factory.section} columns")
        self.context = context
        self.factory = factory
        self.position_mapping = position_mapping
        self.error_list = error_list
        self.line_number = 0
        self._columns: List[MZTabColumn] = factory.columns

    @property
    def record_type(self) -> Type:
        return self.factory.record_type

    def parse(self, line_number: int, line: str):
        """Parse one data line into a record of the table's record type."""
        self.line_number = line_number
        items = line.rstrip("\r\n").split(TAB)
        if items[0].strip() != str(self.section):
            raise MZTabException(MZTabError(FormatErrorType.LinePrefix, line_number, items[0]))

        data_count = len(items) - 1
        header_count = len(self.position_mapping)
        if data_count != header_count:
            logger.warning(f"Line {line_number}: expected {header_count} cells after the "
                           f"{self.section} prefix but found {data_count}")
            self._add_error(FormatErrorType.CountMatch, data_count, header_count)

        record = self.record_type()
        for logical, column in enumerate(self._columns, start=1):
            physical = self.position_mapping.get_physical(logical)
            target = items[physical] if physical is not None and physical < len(items) else None
            self._fill(record, column, target)
        return record

    def _fill(self, record, column: MZTabColumn, target: Optional[str]):
        if column.kind == ColumnKind.STABLE:
            setattr(record, column.field_name, self._check_cell(column, target))
        elif column.kind in (ColumnKind.ABUNDANCE, ColumnKind.CONFIDENCE):
            getattr(record, column.field_name).append(self._check_double(column, target))
        elif column.kind == ColumnKind.OPTIONAL:
            record.opt.append(self._check_opt(column, target))

    # ------------------------------------------------------------------
    # cell checks
    # ------------------------------------------------------------------

    def _add_error(self, error_type: MZTabErrorType, *values):
        self.error_list.add(MZTabError(error_type, self.line_number, *values))

    def _check_cell(self, column: MZTabColumn, target: Optional[str]) -> Any:
        """Read a single cell using the column's parse strategy."""
        parse_type = column.parse
        if parse_type == "string":
            return self._check_string(column, target)
        if parse_type == "string_list":
            return self._check_string_list(column, target)
        if parse_type == "integer":
            return self._check_integer(column, target)
        if parse_type == "double":
            return self._check_double(column, target)
        if parse_type == "double_list":
            return self._check_double_list(column, target)
        if parse_type == "boolean":
            return self._check_mz_boolean(column, target)
        if parse_type == "param":
            return self._check_parameter(column, target, allow_null=True)
        if parse_type == "param_required":
            return self._check_parameter(column, target, allow_null=False)
        if parse_type == "param_list":
            return self._check_param_list(column, target)
        if parse_type == "uri":
            return self._check_uri(column, target)
        if parse_type == "spectra_ref":
            return self._check_spectra_ref(column, target)
        return self._check_string(column, target)

    def _check_string(self, column: MZTabColumn, target: Optional[str]) -> Optional[str]:
        return utils.parse_string(target)

    def _check_integer(self, column: MZTabColumn, target: Optional[str]) -> Optional[int]:
        if utils.parse_string(target) is None:
            return None
        value = utils.parse_integer(target)
        if value is None:
            self._add_error(FormatErrorType.Integer, column.header, target)
        return value

    def _check_double(self, column: MZTabColumn, target: Optional[str]) -> Optional[float]:
        if utils.parse_string(target) is None:
            return None
        value = utils.parse_double(target)
        if value is None:
            self._add_error(FormatErrorType.Double, column.header, target)
        return value

    def _check_mz_boolean(self, column: MZTabColumn, target: Optional[str]) -> Optional[bool]:
        if utils.parse_string(target) is None:
            return None
        value = utils.parse_mz_boolean(target)
        if value is None:
            self._add_error(FormatErrorType.MZBoolean, column.header, target)
        return value

    def _check_string_list(self, column: MZTabColumn, target: Optional[str]) -> Optional[List[str]]:
        values = utils.parse_string_list(column.split_char, target)
        if values is None:
            self._add_error(FormatErrorType.StringList, column.header, target, column.split_char)
        return values

    def _check_double_list(self, column: MZTabColumn, target: Optional[str]) -> Optional[List[float]]:
        values = utils.parse_double_list(target, column.split_char)
        if values is None:
            self._add_error(FormatErrorType.DoubleList, column.header, target, column.split_char)
        return values

    def _check_parameter(self, column: MZTabColumn, target: Optional[str], allow_null: bool) -> Optional[Parameter]:
        if utils.parse_string(target) is None:
            if not allow_null:
                self._add_error(LogicalErrorType.NULL, f"Column {column.header}")
            return None
        param = utils.parse_param(target)
        if param is None:
            self._add_error(FormatErrorType.Param, f"Column {column.header}", target)
        return param

    def _check_param_list(self, column: MZTabColumn, target: Optional[str]) -> Optional[List[Parameter]]:
        params = utils.parse_param_list(target)
        if params is None:
            self._add_error(FormatErrorType.ParamList, f"Column {column.header}", target)
        return params

    def _check_uri(self, column: MZTabColumn, target: Optional[str]) -> Optional[str]:
        if utils.parse_string(target) is None:
            return None
        uri = utils.parse_uri(target)
        if uri is None:
            self._add_error(FormatErrorType.URI, column.header, target)
        return uri

    def _check_spectra_ref(self, column: MZTabColumn, target: Optional[str]) -> Optional[List[SpectraRef]]:
        refs = utils.parse_spectra_ref_list(self.context.ms_run_map, target)
        if refs is None:
            self._add_error(FormatErrorType.SpectraRef, column.header, target)
            return None
        for ms_run in dict.fromkeys(ref.ms_run for ref in refs):
            if ms_run.location is None:
                self._add_error(LogicalErrorType.SpectraRef, column.header, target, f"{ms_run}-location")
        return refs

    def _check_opt(self, column: MZTabColumn, target: Optional[str]) -> OptColumnMapping:
        if column.data_type == ColumnType.DOUBLE:
            number = self._check_double(column, target)
            value = None if number is None else utils.print_double(number)
        elif column.data_type == ColumnType.INTEGER:
            integer = self._check_integer(column, target)
            value = None if integer is None else str(integer)
        elif column.data_type == ColumnType.BOOLEAN:
            flag = self._check_mz_boolean(column, target)
            value = None if flag is None else utils.print_mz_boolean(flag)
        elif column.data_type == ColumnType.PARAMETER:
            param = self._check_parameter(column, target, allow_null=True)
            value = None if param is None else str(param)
        else:
            value = self._check_string(column, target)
        return OptColumnMapping(identifier=column.identifier, value=value)


class SMLLineParser(MZTabDataLineParser):
    section = Section.Small_Molecule


class SMFLineParser(MZTabDataLineParser):
    section = Section.Small_Molecule_Feature


class SMELineParser(MZTabDataLineParser):
    section = Section.Small_Molecule_Evidence


DATA_LINE_PARSERS: Dict[Section, Type[MZTabDataLineParser]] = {
    Section.Small_Molecule: SMLLineParser,
    Section.Small_Molecule_Feature: SMFLineParser,
    Section.Small_Molecule_Evidence: SMELineParser,
}


def create_data_line_parser(context: MZTabParserContext, factory: MZTabColumnFactory,
                            position_mapping: PositionMapping, error_list: MZTabErrorList) -> MZTabDataLineParser:
    return DATA_LINE_PARSERS[factory.section](context, factory, position_mapping, error_list)
