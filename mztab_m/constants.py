from mztab_m.interfaces.simple_enum import SimpleEnum

NULL = "null"
CALCULATE_ERROR = "NaN"
INFINITY = "INF"

TAB = "\t"
BAR = "|"
COMMA = ","
COLON = ":"
NEW_LINE = "\n"

OPT_PREFIX = "opt_"
GLOBAL = "global"
CV_PREFIX = "cv_"


class Section(SimpleEnum):
    Metadata = "MTD"
    Comment = "COM"
    Small_Molecule_Header = "SMH"
    Small_Molecule = "SML"
    Small_Molecule_Feature_Header = "SFH"
    Small_Molecule_Feature = "SMF"
    Small_Molecule_Evidence_Header = "SEH"
    Small_Molecule_Evidence = "SME"

    @property
    def is_header(self) -> bool:
        return self in _HEADER_TO_DATA

    @property
    def data_section(self) -> "Section":
        return _HEADER_TO_DATA.get(self, self)

    @property
    def header_section(self) -> "Section":
        for header, data in _HEADER_TO_DATA.items():
            if data is self:
                return header
        return self


_HEADER_TO_DATA = {
    Section.Small_Molecule_Header: Section.Small_Molecule,
    Section.Small_Molecule_Feature_Header: Section.Small_Molecule_Feature,
    Section.Small_Molecule_Evidence_Header: Section.Small_Molecule_Evidence,
}

# Sections must appear in this order; comments may appear anywhere.
SECTION_ORDER = [
    Section.Metadata,
    Section.Small_Molecule_Header,
    Section.Small_Molecule,
    Section.Small_Molecule_Feature_Header,
    Section.Small_Molecule_Feature,
    Section.Small_Molecule_Evidence_Header,
    Section.Small_Molecule_Evidence,
]
