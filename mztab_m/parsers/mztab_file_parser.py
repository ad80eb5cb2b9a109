"""Reads a whole mzTab document line by line.

Sections must follow the order MTD, SMH/SML, SFH/SMF, SEH/SME; comment lines
may appear anywhere.  The metadata completeness check runs once, when the
first non-metadata line arrives or at the end of input.  Table lines are not
read when the metadata section produced errors.
"""

import logging
from typing import Dict, Iterable, Optional

from mztab_m.constants import SECTION_ORDER, TAB, Section
from mztab_m.core.config import MZTAB_EXCEPTION_MESSAGE, MZTabProperties, load_properties
from mztab_m.core.errors import (FormatErrorType, Level, LogicalErrorType, MZTabError, MZTabErrorList,
                                 MZTabErrorOverflowException, MZTabException)
from mztab_m.models.parsed_mztab_data import ParsedMZTabData
from mztab_m.parsers.columns import ColumnType
from mztab_m.parsers.data_line_parser import MZTabDataLineParser, create_data_line_parser
from mztab_m.parsers.header_line_parser import MZTabHeaderLineParser
from mztab_m.parsers.mtd_line_parser import MTDLineParser
from mztab_m.parsers.parser_context import MZTabParserContext

logger = logging.getLogger(__name__)

_PREFIXES = {section.value: section for section in Section}


class MZTabFileParser:
    """Parses one mzTab document; create one instance per document."""

    def __init__(self, properties: Optional[MZTabProperties] = None,
                 opt_column_types: Optional[Dict[str, ColumnType]] = None):
        self.properties = properties or load_properties()
        self.opt_column_types = opt_column_types or {}

    def parse_file(self, file_path: str) -> ParsedMZTabData:
        logger.info(f"Parsing {file_path}")
        with open(file_path, "r", encoding=self.properties.encoding) as file:
            return self.parse_lines(file)

    def parse_lines(self, lines: Iterable[str]) -> ParsedMZTabData:
        context = MZTabParserContext()
        error_list = MZTabErrorList.from_properties(self.properties)
        result = ParsedMZTabData(metadata=context.metadata, error_list=error_list)
        try:
            self._parse(lines, context, error_list, result)
        except MZTabException as e:
            logger.error(str(e))
            result.fatal_error = e.error
            if e.error is not None:
                try:
                    error_list.add(e.error)
                except MZTabErrorOverflowException:
                    result.overflow = True
        except MZTabErrorOverflowException as e:
            logger.error(f"{e} Stopped after {e.max_error_count} errors")
            result.overflow = True
        return result

    def _parse(self, lines: Iterable[str], context: MZTabParserContext,
               error_list: MZTabErrorList, result: ParsedMZTabData):
        mtd_parser = MTDLineParser(context, error_list)
        header_parser = MZTabHeaderLineParser(context, error_list)
        data_parser: Optional[MZTabDataLineParser] = None
        stage = 0
        refined = False
        line_number = 0

        for line_number, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            prefix = line.split(TAB, 1)[0].strip()
            section = _PREFIXES.get(prefix)
            if section is None:
                raise MZTabException(MZTabError(FormatErrorType.LinePrefix, line_number, prefix))
            if section == Section.Comment:
                continue

            if section == Section.Metadata:
                if stage > 0:
                    raise MZTabException(MZTabError(
                        LogicalErrorType.SectionOrder, line_number, section, SECTION_ORDER[stage]))
                mtd_parser.parse(line_number, line)
                continue

            if not refined:
                mtd_parser.refine_normal_metadata()
                refined = True
                if error_list.has_errors(Level.Error):
                    logger.error(MZTAB_EXCEPTION_MESSAGE)
                    return

            index = SECTION_ORDER.index(section)
            if index < stage:
                raise MZTabException(MZTabError(
                    LogicalErrorType.SectionOrder, line_number, section, SECTION_ORDER[stage]))

            if section.is_header:
                if index == stage:
                    raise MZTabException(MZTabError(LogicalErrorType.HeaderLine, line_number, section))
                factory, mapping = header_parser.parse(line_number, line, self.opt_column_types)
                data_parser = create_data_line_parser(context, factory, mapping, error_list)
                stage = index
                continue

            if stage not in (index, index - 1) or data_parser is None or data_parser.section != section:
                raise MZTabException(MZTabError(
                    LogicalErrorType.NoHeaderLine, line_number, section, section.header_section))
            stage = index
            result.add_record(section, data_parser.parse(line_number, line))

        if not refined:
            mtd_parser.line_number = line_number
            mtd_parser.refine_normal_metadata()
