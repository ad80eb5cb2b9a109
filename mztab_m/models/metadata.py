"""In-memory model of the metadata (MTD) section.

Indexed entities are plain dataclasses compared by identity: the same
object is reachable from the parser context, from ``Metadata`` and from
every entity that references it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mztab_m.constants import BAR, COLON
from mztab_m.interfaces.simple_enum import SimpleEnum


@dataclass(frozen=True)
class Parameter:
    """A controlled vocabulary parameter ``[cv label, accession, name, value]``."""
    cv_label: Optional[str] = None
    cv_accession: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None

    @staticmethod
    def _quote(text: Optional[str]) -> str:
        if text is None:
            return ""
        if "," in text and not (text.startswith('"') and text.endswith('"')):
            return f'"{text}"'
        return text

    def __str__(self):
        return (f"[{self.cv_label or ''}, {self.cv_accession or ''}, "
                f"{self._quote(self.name)}, {self._quote(self.value)}]")


@dataclass(frozen=True)
class IndexedElement:
    element: str
    id: int

    def __str__(self):
        return f"{self.element}[{self.id}]"


@dataclass(frozen=True)
class ColumnParameterMapping:
    column_name: str
    param: Parameter


class PublicationType(SimpleEnum):
    pubmed = "pubmed"
    doi = "doi"
    uri = "uri"


@dataclass(frozen=True)
class PublicationItem:
    type: PublicationType
    accession: str

    def __str__(self):
        return f"{self.type}{COLON}{self.accession}"


@dataclass(eq=False)
class Instrument:
    id: int
    name: Optional[Parameter] = None
    source: Optional[Parameter] = None
    analyzer: List[Parameter] = field(default_factory=list)
    detector: Optional[Parameter] = None


@dataclass(eq=False)
class Software:
    id: int
    parameter: Optional[Parameter] = None
    setting: List[str] = field(default_factory=list)


@dataclass(eq=False)
class SampleProcessing:
    id: int
    sample_processing: List[Parameter] = field(default_factory=list)


@dataclass(eq=False)
class Publication:
    id: int
    publication_items: List[PublicationItem] = field(default_factory=list)

    def __str__(self):
        return BAR.join(str(item) for item in self.publication_items)


@dataclass(eq=False)
class Contact:
    id: int
    name: Optional[str] = None
    affiliation: Optional[str] = None
    email: Optional[str] = None


@dataclass(eq=False)
class Uri:
    id: int
    value: Optional[str] = None


@dataclass(eq=False)
class MsRun:
    id: int
    name: Optional[str] = None
    location: Optional[str] = None
    # True once ms_run[n]-location was declared, even as 'null'
    has_location: bool = False
    instrument_ref: Optional[Instrument] = None
    format: Optional[Parameter] = None
    id_format: Optional[Parameter] = None
    fragmentation_method: List[Parameter] = field(default_factory=list)
    scan_polarity: List[Parameter] = field(default_factory=list)
    hash: Optional[str] = None
    hash_method: Optional[Parameter] = None

    def __str__(self):
        return f"ms_run[{self.id}]"


@dataclass(eq=False)
class Sample:
    id: int
    name: Optional[str] = None
    species: List[Parameter] = field(default_factory=list)
    tissue: List[Parameter] = field(default_factory=list)
    cell_type: List[Parameter] = field(default_factory=list)
    disease: List[Parameter] = field(default_factory=list)
    description: Optional[str] = None
    custom: List[Parameter] = field(default_factory=list)


@dataclass(eq=False)
class Assay:
    id: int
    name: Optional[str] = None
    custom: List[Parameter] = field(default_factory=list)
    external_uri: Optional[str] = None
    sample_ref: Optional[Sample] = None
    ms_run_ref: List[MsRun] = field(default_factory=list)


@dataclass(eq=False)
class StudyVariable:
    id: int
    name: Optional[str] = None
    assay_refs: List[Assay] = field(default_factory=list)
    sample_refs: List[Sample] = field(default_factory=list)
    description: Optional[str] = None
    average_function: Optional[Parameter] = None
    variation_function: Optional[Parameter] = None


@dataclass(eq=False)
class CV:
    id: int
    label: Optional[str] = None
    full_name: Optional[str] = None
    version: Optional[str] = None
    uri: Optional[str] = None


@dataclass(eq=False)
class Database:
    id: int
    param: Optional[Parameter] = None
    prefix: Optional[str] = None
    version: Optional[str] = None
    uri: Optional[str] = None


@dataclass(eq=False)
class SpectraRef:
    ms_run: MsRun
    reference: str

    def __str__(self):
        return f"{self.ms_run}{COLON}{self.reference}"


@dataclass(eq=False)
class Metadata:
    """Root of the metadata section.

    The id keyed dicts are shared with ``MZTabParserContext``; they are kept
    in ascending id order.
    """
    mz_tab_version: Optional[str] = None
    mz_tab_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    quantification_method: Optional[Parameter] = None
    small_molecule_quantification_unit: Optional[Parameter] = None
    small_molecule_feature_quantification_unit: Optional[Parameter] = None
    small_molecule_evidence_quantification_unit: Optional[Parameter] = None
    small_molecule_identification_reliability: Optional[Parameter] = None

    sample_processing: Dict[int, SampleProcessing] = field(default_factory=dict)
    instrument: Dict[int, Instrument] = field(default_factory=dict)
    software: Dict[int, Software] = field(default_factory=dict)
    publication: Dict[int, Publication] = field(default_factory=dict)
    contact: Dict[int, Contact] = field(default_factory=dict)
    uri: Dict[int, Uri] = field(default_factory=dict)
    external_study_uri: Dict[int, Uri] = field(default_factory=dict)
    ms_run: Dict[int, MsRun] = field(default_factory=dict)
    custom: Dict[int, Parameter] = field(default_factory=dict)
    sample: Dict[int, Sample] = field(default_factory=dict)
    assay: Dict[int, Assay] = field(default_factory=dict)
    study_variable: Dict[int, StudyVariable] = field(default_factory=dict)
    cv: Dict[int, CV] = field(default_factory=dict)
    database: Dict[int, Database] = field(default_factory=dict)
    id_confidence_measure: Dict[int, Parameter] = field(default_factory=dict)

    colunit_small_molecule: List[ColumnParameterMapping] = field(default_factory=list)
    colunit_small_molecule_feature: List[ColumnParameterMapping] = field(default_factory=list)
    colunit_small_molecule_evidence: List[ColumnParameterMapping] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "ms_run": len(self.ms_run),
            "sample": len(self.sample),
            "assay": len(self.assay),
            "study_variable": len(self.study_variable),
            "database": len(self.database),
            "cv": len(self.cv),
        }
