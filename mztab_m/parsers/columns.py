"""Column model of the small molecule tables.

``MZTabColumnFactory`` knows the columns of one table in logical order:
stable columns first (record field order), then abundance and confidence
columns (by kind, then id), then ``opt_`` columns in the order they were
added.  ``PositionMapping`` relates the physical position of each header
cell to that logical order.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Tuple, Type, Union

from mztab_m.constants import BAR, CV_PREFIX, GLOBAL, OPT_PREFIX, Section
from mztab_m.interfaces.simple_enum import SimpleEnum
from mztab_m.models.column_field import get_column_fields
from mztab_m.models.metadata import IndexedElement, Parameter
from mztab_m.models.records import SmallMoleculeEvidence, SmallMoleculeFeature, SmallMoleculeSummary


class ColumnType(SimpleEnum):
    STRING = "String"
    INTEGER = "Integer"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    PARAMETER = "Parameter"


class ColumnKind(SimpleEnum):
    STABLE = "stable"
    ABUNDANCE = "abundance"
    CONFIDENCE = "confidence"
    OPTIONAL = "optional"


_PARSE_TYPES = {
    "string": ColumnType.STRING,
    "string_list": ColumnType.STRING,
    "uri": ColumnType.STRING,
    "spectra_ref": ColumnType.STRING,
    "integer": ColumnType.INTEGER,
    "double": ColumnType.DOUBLE,
    "double_list": ColumnType.DOUBLE,
    "boolean": ColumnType.BOOLEAN,
    "param": ColumnType.PARAMETER,
    "param_required": ColumnType.PARAMETER,
    "param_list": ColumnType.PARAMETER,
}

_OPT_PARSE = {
    ColumnType.STRING: "string",
    ColumnType.INTEGER: "integer",
    ColumnType.DOUBLE: "double",
    ColumnType.BOOLEAN: "boolean",
    ColumnType.PARAMETER: "param",
}

SECTION_RECORDS: Dict[Section, Type] = {
    Section.Small_Molecule: SmallMoleculeSummary,
    Section.Small_Molecule_Feature: SmallMoleculeFeature,
    Section.Small_Molecule_Evidence: SmallMoleculeEvidence,
}

# attribute -> metadata element it references, in logical order
ABUNDANCE_COLUMNS: Dict[Section, Tuple[Tuple[str, str], ...]] = {
    Section.Small_Molecule: (
        ("abundance_assay", "assay"),
        ("abundance_study_variable", "study_variable"),
        ("abundance_variation_study_variable", "study_variable"),
    ),
    Section.Small_Molecule_Feature: (
        ("abundance_assay", "assay"),
    ),
    Section.Small_Molecule_Evidence: (),
}

ID_CONFIDENCE_MEASURE = "id_confidence_measure"
CONFIDENCE_SECTIONS = (Section.Small_Molecule_Evidence,)

OPT_SCOPES = ("assay", "study_variable", "ms_run")
OPT_HEADER_PATTERN = re.compile(r"opt_(global|(\w+?)\[(\d+)\])_(.+)")
CV_OPT_NAME_PATTERN = re.compile(r"cv_([^_]+)_(.+)")


@dataclass(frozen=True)
class MZTabColumn:
    header: str
    kind: ColumnKind
    data_type: ColumnType
    parse: str = "string"
    field_name: Optional[str] = None
    element: Optional[IndexedElement] = None
    param: Optional[Parameter] = None
    split_char: str = BAR

    @property
    def identifier(self) -> str:
        if self.header.startswith(OPT_PREFIX):
            return self.header[len(OPT_PREFIX):]
        return self.header


def optional_column_header(element: Optional[IndexedElement], name: Union[str, Parameter]) -> str:
    """Header of an ``opt_`` column; parameter columns use ``cv_<accession>_<name>``."""
    scope = GLOBAL if element is None else str(element)
    if isinstance(name, Parameter):
        name = f"{CV_PREFIX}{name.cv_accession}_{(name.name or '').replace(' ', '_')}"
    return f"{OPT_PREFIX}{scope}_{name}"


class MZTabColumnFactory:

    def __init__(self, section: Section):
        section = section.data_section
        if section not in SECTION_RECORDS:
            raise ValueError(f"{section} is not a table section")
        self.section = section
        self.record_type = SECTION_RECORDS[section]
        self._stable: List[MZTabColumn] = [
            MZTabColumn(
                header=meta["header"],
                kind=ColumnKind.STABLE,
                data_type=_PARSE_TYPES[meta["parse"]],
                parse=meta["parse"],
                field_name=f.name,
                split_char=meta["split_char"],
            )
            for f, meta in get_column_fields(self.record_type)
        ]
        self._abundance: List[MZTabColumn] = []
        self._optional: List[MZTabColumn] = []
        self._by_header: Dict[str, MZTabColumn] = {c.header: c for c in self._stable}

    @property
    def stable_columns(self) -> Tuple[MZTabColumn, ...]:
        return tuple(self._stable)

    @property
    def optional_columns(self) -> Tuple[MZTabColumn, ...]:
        return tuple(self._optional)

    @property
    def abundance_attributes(self) -> Tuple[Tuple[str, str], ...]:
        return ABUNDANCE_COLUMNS[self.section]

    @property
    def supports_confidence_columns(self) -> bool:
        return self.section in CONFIDENCE_SECTIONS

    def _register(self, column: MZTabColumn) -> MZTabColumn:
        if column.header in self._by_header:
            raise ValueError(f"Column {column.header} is already defined for {self.section}")
        self._by_header[column.header] = column
        return column

    def add_abundance_column(self, attribute: str, element: IndexedElement) -> MZTabColumn:
        if attribute not in dict(self.abundance_attributes):
            raise ValueError(f"{attribute} columns are not defined for {self.section}")
        column = self._register(MZTabColumn(
            header=f"{attribute}[{element.id}]",
            kind=ColumnKind.ABUNDANCE,
            data_type=ColumnType.DOUBLE,
            parse="double",
            field_name=attribute,
            element=element,
        ))
        self._abundance.append(column)
        return column

    def add_id_confidence_measure_column(self, id: int) -> MZTabColumn:
        if not self.supports_confidence_columns:
            raise ValueError(f"{ID_CONFIDENCE_MEASURE} columns are not defined for {self.section}")
        column = self._register(MZTabColumn(
            header=f"{ID_CONFIDENCE_MEASURE}[{id}]",
            kind=ColumnKind.CONFIDENCE,
            data_type=ColumnType.DOUBLE,
            parse="double",
            field_name=ID_CONFIDENCE_MEASURE,
            element=IndexedElement(element=ID_CONFIDENCE_MEASURE, id=id),
        ))
        self._abundance.append(column)
        return column

    def add_optional_column(self, element: Optional[IndexedElement], name: Union[str, Parameter],
                            data_type: ColumnType = ColumnType.STRING) -> MZTabColumn:
        header = optional_column_header(element, name)
        param = name if isinstance(name, Parameter) else None
        if param is None:
            param = self._cv_param_from_name(name)
        column = self._register(MZTabColumn(
            header=header,
            kind=ColumnKind.OPTIONAL,
            data_type=data_type,
            parse=_OPT_PARSE[data_type],
            field_name="opt",
            element=element,
            param=param,
        ))
        self._optional.append(column)
        return column

    @staticmethod
    def _cv_param_from_name(name: str) -> Optional[Parameter]:
        match = CV_OPT_NAME_PATTERN.fullmatch(name)
        if match is None:
            return None
        accession = match.group(1)
        return Parameter(cv_label=accession.split(":")[0], cv_accession=accession,
                         name=match.group(2).replace("_", " "))

    def _sort_key(self, column: MZTabColumn):
        order = [attribute for attribute, _ in self.abundance_attributes] + [ID_CONFIDENCE_MEASURE]
        return order.index(column.field_name), column.element.id

    @property
    def columns(self) -> List[MZTabColumn]:
        """All columns in logical order."""
        return self._stable + sorted(self._abundance, key=self._sort_key) + self._optional

    def find_column(self, header: str) -> Optional[MZTabColumn]:
        return self._by_header.get(header)

    def logical_index(self, column: MZTabColumn) -> int:
        """1-based logical position of *column*."""
        return self.columns.index(column) + 1

    def __len__(self):
        return len(self._by_header)


class PositionMapping:
    """Immutable physical (1-based header cell) to logical column position map."""

    def __init__(self, factory: MZTabColumnFactory, header_items: Sequence[str]):
        logical = {column.header: index for index, column in enumerate(factory.columns, start=1)}
        mappings = {}
        for physical, header in enumerate(header_items[1:], start=1):
            header = header.strip()
            if header not in logical:
                raise ValueError(f"Column {header} is not known to the {factory.section} column factory")
            mappings[physical] = logical[header]
        self._mappings = MappingProxyType(mappings)
        self._reverse = MappingProxyType({v: k for k, v in mappings.items()})

    def get_logical(self, physical: int) -> Optional[int]:
        return self._mappings.get(physical)

    def get_physical(self, logical: int) -> Optional[int]:
        return self._reverse.get(logical)

    def reverse(self) -> Dict[int, int]:
        return dict(self._reverse)

    def items(self):
        return self._mappings.items()

    def __len__(self):
        return len(self._mappings)

    def __repr__(self):
        return f"PositionMapping({dict(self._mappings)})"
