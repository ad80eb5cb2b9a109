"""Closed set of metadata elements and the properties each one accepts.

Element and property names are matched case-insensitively; a name that is
not listed here is an unknown define label.
"""

from typing import Dict, Optional, Type

from mztab_m.interfaces.simple_enum import SimpleEnum


class MetadataElement(SimpleEnum):
    MZTAB = "mzTab"
    TITLE = "title"
    DESCRIPTION = "description"
    SAMPLE_PROCESSING = "sample_processing"
    INSTRUMENT = "instrument"
    SOFTWARE = "software"
    PUBLICATION = "publication"
    CONTACT = "contact"
    URI = "uri"
    EXTERNAL_STUDY_URI = "external_study_uri"
    QUANTIFICATION_METHOD = "quantification_method"
    SMALL_MOLECULE = "small_molecule"
    SMALL_MOLECULE_FEATURE = "small_molecule_feature"
    SMALL_MOLECULE_EVIDENCE = "small_molecule_evidence"
    MS_RUN = "ms_run"
    CUSTOM = "custom"
    SAMPLE = "sample"
    ASSAY = "assay"
    STUDY_VARIABLE = "study_variable"
    CV = "cv"
    DATABASE = "database"
    COLUNIT = "colunit"
    ID_CONFIDENCE_MEASURE = "id_confidence_measure"


class MzTabProperty(SimpleEnum):
    VERSION = "version"
    ID = "id"


class SmallMoleculeProperty(SimpleEnum):
    QUANTIFICATION_UNIT = "quantification_unit"
    IDENTIFICATION_RELIABILITY = "identification_reliability"


class SmallMoleculeFeatureProperty(SimpleEnum):
    QUANTIFICATION_UNIT = "quantification_unit"


class SmallMoleculeEvidenceProperty(SimpleEnum):
    QUANTIFICATION_UNIT = "quantification_unit"


class InstrumentProperty(SimpleEnum):
    NAME = "name"
    SOURCE = "source"
    ANALYZER = "analyzer"
    DETECTOR = "detector"


class SoftwareProperty(SimpleEnum):
    SETTING = "setting"


class ContactProperty(SimpleEnum):
    NAME = "name"
    AFFILIATION = "affiliation"
    EMAIL = "email"


class MsRunProperty(SimpleEnum):
    FORMAT = "format"
    LOCATION = "location"
    INSTRUMENT_REF = "instrument_ref"
    ID_FORMAT = "id_format"
    FRAGMENTATION_METHOD = "fragmentation_method"
    SCAN_POLARITY = "scan_polarity"
    HASH = "hash"
    HASH_METHOD = "hash_method"


class SampleProperty(SimpleEnum):
    SPECIES = "species"
    TISSUE = "tissue"
    CELL_TYPE = "cell_type"
    DISEASE = "disease"
    DESCRIPTION = "description"
    CUSTOM = "custom"


class AssayProperty(SimpleEnum):
    CUSTOM = "custom"
    EXTERNAL_URI = "external_uri"
    SAMPLE_REF = "sample_ref"
    MS_RUN_REF = "ms_run_ref"


class StudyVariableProperty(SimpleEnum):
    ASSAY_REFS = "assay_refs"
    SAMPLE_REFS = "sample_refs"
    DESCRIPTION = "description"
    AVERAGE_FUNCTION = "average_function"
    VARIATION_FUNCTION = "variation_function"


class CVProperty(SimpleEnum):
    LABEL = "label"
    FULL_NAME = "full_name"
    VERSION = "version"
    URI = "uri"
    URL = "url"


class DatabaseProperty(SimpleEnum):
    PREFIX = "prefix"
    VERSION = "version"
    URI = "uri"
    URL = "url"


class ColunitProperty(SimpleEnum):
    SMALL_MOLECULE = "small_molecule"
    SMALL_MOLECULE_FEATURE = "small_molecule_feature"
    SMALL_MOLECULE_EVIDENCE = "small_molecule_evidence"


ELEMENT_PROPERTIES: Dict[MetadataElement, Type[SimpleEnum]] = {
    MetadataElement.MZTAB: MzTabProperty,
    MetadataElement.SMALL_MOLECULE: SmallMoleculeProperty,
    MetadataElement.SMALL_MOLECULE_FEATURE: SmallMoleculeFeatureProperty,
    MetadataElement.SMALL_MOLECULE_EVIDENCE: SmallMoleculeEvidenceProperty,
    MetadataElement.INSTRUMENT: InstrumentProperty,
    MetadataElement.SOFTWARE: SoftwareProperty,
    MetadataElement.CONTACT: ContactProperty,
    MetadataElement.MS_RUN: MsRunProperty,
    MetadataElement.SAMPLE: SampleProperty,
    MetadataElement.ASSAY: AssayProperty,
    MetadataElement.STUDY_VARIABLE: StudyVariableProperty,
    MetadataElement.CV: CVProperty,
    MetadataElement.DATABASE: DatabaseProperty,
    MetadataElement.COLUNIT: ColunitProperty,
}


def find_element(name: Optional[str]) -> Optional[MetadataElement]:
    if name is None:
        return None
    return MetadataElement.parse(name)


def find_property(element: MetadataElement, name: Optional[str]) -> Optional[SimpleEnum]:
    """Resolve *name* against the properties of *element*; ``None`` if unknown."""
    if not name:
        return None
    properties = ELEMENT_PROPERTIES.get(element)
    if properties is None:
        return None
    return properties.parse(name)
