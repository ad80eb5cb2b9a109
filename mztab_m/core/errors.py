"""Error model for mzTab parsing.

Every problem found while reading a document becomes an ``MZTabError``.  Its
``MZTabErrorType`` fixes the category, numeric code and severity level.  The
caller decides per problem whether it is recoverable (collected into the
bounded ``MZTabErrorList``) or not (raised as ``MZTabException``).  A full
error list raises ``MZTabErrorOverflowException`` which is deliberately not a
subclass of ``MZTabException``: it means validation is incomplete, not that
the document is invalid.
"""

import io
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union

from mztab_m.constants import NEW_LINE
from mztab_m.core.config import DEFAULT_PROPERTIES, MZTAB_ERROR_OVERFLOW_MESSAGE
from mztab_m.interfaces.simple_enum import OrderedEnum, SimpleEnum

logger = logging.getLogger(__name__)


class Level(OrderedEnum):
    Info = "Info"
    Warn = "Warn"
    Error = "Error"


class Category(SimpleEnum):
    Format = "Format"
    Logical = "Logical"
    CrossCheck = "CrossCheck"


_KNOWN_TYPES: Dict[int, "MZTabErrorType"] = {}


@dataclass(frozen=True)
class MZTabErrorType:
    category: Category
    code: int
    level: Level
    name: str
    template: str

    @classmethod
    def create(cls, category: Category, code: int, level: Level, name: str, template: str) -> "MZTabErrorType":
        if code in _KNOWN_TYPES:
            raise ValueError(f"Error code {code} is already registered to {_KNOWN_TYPES[code].name}")
        error_type = cls(category=category, code=code, level=level, name=name, template=template)
        _KNOWN_TYPES[code] = error_type
        return error_type

    @classmethod
    def create_error(cls, category: Category, code: int, name: str, template: str) -> "MZTabErrorType":
        return cls.create(category, code, Level.Error, name, template)

    @classmethod
    def create_warn(cls, category: Category, code: int, name: str, template: str) -> "MZTabErrorType":
        return cls.create(category, code, Level.Warn, name, template)

    @classmethod
    def create_info(cls, category: Category, code: int, name: str, template: str) -> "MZTabErrorType":
        return cls.create(category, code, Level.Info, name, template)

    def __str__(self):
        return f"{self.level}-{self.category}-{self.code}"


def find_error_type(code: int) -> Optional[MZTabErrorType]:
    return _KNOWN_TYPES.get(code)


class FormatErrorType:
    _F = Category.Format

    LinePrefix = MZTabErrorType.create_error(
        _F, 1001, "LinePrefix",
        "Line prefix '{0}' is not one of MTD, COM, SMH, SML, SFH, SMF, SEH, SME.")
    CountMatch = MZTabErrorType.create_error(
        _F, 1002, "CountMatch",
        "Data line has {0} cells but its header declares {1} columns.")
    IndexedElement = MZTabErrorType.create_error(
        _F, 1003, "IndexedElement",
        "'{1}' in {0} is not a valid indexed element reference.")
    AbundanceColumn = MZTabErrorType.create_error(
        _F, 1004, "AbundanceColumn",
        "Abundance column header '{0}' is not recognized.")

    MTDLine = MZTabErrorType.create_error(
        _F, 1101, "MTDLine",
        "Metadata line '{0}' must have exactly three tab separated fields: MTD, define label and value.")
    MTDDefineLabel = MZTabErrorType.create_error(
        _F, 1102, "MTDDefineLabel",
        "Define label '{0}' is not recognized.")
    MZTabVersion = MZTabErrorType.create_error(
        _F, 1103, "MZTabVersion",
        "'{1}' in {0} is not a supported mzTab version, expected 2.<minor>.<micro>-M.")
    Param = MZTabErrorType.create_error(
        _F, 1104, "Param",
        "'{1}' in {0} is not a valid parameter; expected [cv label, accession, name, value].")
    ParamList = MZTabErrorType.create_error(
        _F, 1105, "ParamList",
        "'{1}' in {0} is not a valid '|' separated parameter list.")
    Publication = MZTabErrorType.create_error(
        _F, 1106, "Publication",
        "'{1}' in {0} is not a valid '|' separated list of pubmed:, doi: or uri: items.")
    URI = MZTabErrorType.create_error(
        _F, 1107, "URI",
        "'{1}' in {0} is not a valid URI.")
    URL = MZTabErrorType.create_error(
        _F, 1108, "URL",
        "'{1}' in {0} is not a valid URL.")
    Email = MZTabErrorType.create_error(
        _F, 1109, "Email",
        "'{1}' in {0} is not a valid email address.")

    StableColumn = MZTabErrorType.create_error(
        _F, 1201, "StableColumn",
        "Header line is missing the mandatory column(s): {0}.")
    ColumnHeader = MZTabErrorType.create_error(
        _F, 1202, "ColumnHeader",
        "Column header '{0}' is not defined for section {1}.")
    DuplicatedColumn = MZTabErrorType.create_error(
        _F, 1203, "DuplicatedColumn",
        "Column header '{0}' is declared more than once.")
    OptionalColumn = MZTabErrorType.create_error(
        _F, 1204, "OptionalColumn",
        "Optional column header '{0}' must look like opt_{{global|element[id]}}_{{name}}.")
    ColUnit = MZTabErrorType.create_error(
        _F, 1205, "ColUnit",
        "'{1}' in {0} must look like <column name>=<parameter>.")

    Integer = MZTabErrorType.create_error(
        _F, 1301, "Integer",
        "Column {0}: '{1}' is not an integer.")
    Double = MZTabErrorType.create_error(
        _F, 1302, "Double",
        "Column {0}: '{1}' is not a number; use NaN for calculation errors and INF for infinity.")
    MZBoolean = MZTabErrorType.create_error(
        _F, 1303, "MZBoolean",
        "Column {0}: '{1}' is not a boolean; only 0 (false) and 1 (true) are allowed.")
    StringList = MZTabErrorType.create_error(
        _F, 1304, "StringList",
        "Column {0}: '{1}' is not a valid '{2}' separated list.")
    DoubleList = MZTabErrorType.create_error(
        _F, 1305, "DoubleList",
        "Column {0}: '{1}' is not a valid '{2}' separated number list.")
    SpectraRef = MZTabErrorType.create_error(
        _F, 1306, "SpectraRef",
        "Column {0}: '{1}' is not a valid ms_run[n]:reference list or refers to an undeclared ms_run.")


class LogicalErrorType:
    _L = Category.Logical

    NULL = MZTabErrorType.create_error(
        _L, 2001, "NULL",
        "{0} could not be stored; its value is empty or invalid.")
    NotNULL = MZTabErrorType.create_warn(
        _L, 2002, "NotNULL",
        "{0} is 'null'; a real value is expected.")
    IdNumber = MZTabErrorType.create_error(
        _L, 2003, "IdNumber",
        "Id '{1}' in {0} must be an integer of at least 1.")
    DuplicationDefine = MZTabErrorType.create_error(
        _L, 2004, "DuplicationDefine",
        "{0} is defined more than once.")
    DuplicationID = MZTabErrorType.create_warn(
        _L, 2005, "DuplicationID",
        "Reference {1} appears more than once in '{0}'.")
    NotDefineInMetadata = MZTabErrorType.create_error(
        _L, 2006, "NotDefineInMetadata",
        "{0} is referenced or required but not defined in the metadata section.")
    AssayRefs = MZTabErrorType.create_error(
        _L, 2007, "AssayRefs",
        "{0} must reference at least one assay.")
    SoftwareVersion = MZTabErrorType.create_warn(
        _L, 2008, "SoftwareVersion",
        "Software parameter '{0}' does not declare a version in its value field.")
    SpectraRef = MZTabErrorType.create_warn(
        _L, 2009, "SpectraRef",
        "Column {0}: '{1}' refers to {2} which has no known location.")
    ColUnit = MZTabErrorType.create_error(
        _L, 2010, "ColUnit",
        "Column unit '{1}' in {0} refers to a column that is not part of the table.")
    NoHeaderLine = MZTabErrorType.create_error(
        _L, 2011, "NoHeaderLine",
        "{0} data line appears before its {1} header line.")
    SectionOrder = MZTabErrorType.create_error(
        _L, 2012, "SectionOrder",
        "{0} line appears after the {1} section has started.")
    HeaderLine = MZTabErrorType.create_error(
        _L, 2013, "HeaderLine",
        "{0} header line is defined more than once.")


@dataclass(frozen=True)
class MZTabError:
    type: MZTabErrorType
    line_number: int
    values: Tuple[str, ...] = ()

    def __init__(self, type: MZTabErrorType, line_number: int, *values):
        object.__setattr__(self, "type", type)
        object.__setattr__(self, "line_number", line_number)
        object.__setattr__(self, "values", tuple("" if v is None else str(v) for v in values))

    @property
    def level(self) -> Level:
        return self.type.level

    @property
    def category(self) -> Category:
        return self.type.category

    @property
    def message(self) -> str:
        padding = ("",) * self.type.template.count("{")
        return self.type.template.format(*self.values, *padding)

    def __str__(self):
        return f"[{self.type}] Line {self.line_number}: {self.message}"


class MZTabException(Exception):
    """Unrecoverable problem: parsing of the document stops."""

    def __init__(self, error: Union[MZTabError, str]):
        self.error = error if isinstance(error, MZTabError) else None
        super().__init__(str(error))


class MZTabErrorOverflowException(Exception):
    """The error list reached its capacity; validation is incomplete."""

    def __init__(self, max_error_count: int = 0):
        self.max_error_count = max_error_count
        super().__init__(MZTAB_ERROR_OVERFLOW_MESSAGE)


class MZTabErrorList:
    """Bounded, severity-filtered collection of ``MZTabError``.

    Errors below ``level`` are dropped and not counted.  Once
    ``max_error_count`` errors have been stored the next admitted error
    raises ``MZTabErrorOverflowException``.
    """

    def __init__(self, level: Union[Level, str, None] = None, max_error_count: Optional[int] = None):
        self.level = level
        self.max_error_count = DEFAULT_PROPERTIES.max_error_count if max_error_count is None else max_error_count
        self._errors: List[MZTabError] = []

    @classmethod
    def from_properties(cls, properties) -> "MZTabErrorList":
        return cls(level=properties.level, max_error_count=properties.max_error_count)

    @property
    def level(self) -> Level:
        return self._level

    @level.setter
    def level(self, level: Union[Level, str, None]):
        parsed = Level.find(level) if not isinstance(level, Level) else level
        self._level = parsed if parsed is not None else Level.parse(DEFAULT_PROPERTIES.level)

    @property
    def max_error_count(self) -> int:
        return self._max_error_count

    @max_error_count.setter
    def max_error_count(self, max_error_count: int):
        self._max_error_count = max_error_count if max_error_count >= 0 else 0

    @property
    def errors(self) -> Tuple[MZTabError, ...]:
        return tuple(self._errors)

    def add(self, error: MZTabError) -> bool:
        if error is None:
            raise ValueError("Can not add a null error into list.")
        if error.level < self._level:
            return False
        if len(self._errors) >= self._max_error_count:
            raise MZTabErrorOverflowException(self._max_error_count)
        logger.debug(str(error))
        self._errors.append(error)
        return True

    def clear(self):
        self._errors.clear()

    def is_empty(self) -> bool:
        return not self._errors

    def has_errors(self, level: Level = Level.Error) -> bool:
        return any(e.level >= level for e in self._errors)

    def __len__(self):
        return len(self._errors)

    def __iter__(self) -> Iterator[MZTabError]:
        return iter(self._errors)

    def __getitem__(self, index: int) -> MZTabError:
        return self._errors[index]

    def print(self, out: TextIO):
        if out is None:
            raise ValueError("Output stream should be set first.")
        for error in self._errors:
            out.write(str(error) + NEW_LINE)

    def __str__(self):
        buffer = io.StringIO()
        self.print(buffer)
        return buffer.getvalue()
