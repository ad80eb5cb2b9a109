"""Tests for metadata line parsing and the completeness check."""

import pytest

from mztab_m.core.errors import (FormatErrorType, Level, LogicalErrorType, MZTabErrorList,
                                 MZTabException)
from mztab_m.parsers.mtd_line_parser import MTDLineParser
from mztab_m.parsers.parser_context import MZTabParserContext

MINIMAL_HEADER = [
    "MTD\tmzTab-version\t2.0.0-M",
    "MTD\tmzTab-ID\tISAS-2018-1234",
    "MTD\tdescription\tMinimal proposed sample file for identification and quantification data",
    "MTD\tms_run[1]-location\tfile:///C:/path/to/my/file.mzML",
    "MTD\tsample[1]\tindividual number 1",
    "MTD\tassay[1]-sample_ref\tsample[1]",
    "MTD\tassay[1]-ms_run_ref\tms_run[1]",
    "MTD\tquantification_method\t[MS, MS:1001834, LC-MS label-free quantitation analysis, ]",
]


def _make_parser(level=Level.Warn):
    return MTDLineParser(MZTabParserContext(), MZTabErrorList(level=level))


def _feed(parser, lines):
    for number, line in enumerate(lines, start=1):
        parser.parse(number, line)
    return parser


# ---------------------------------------------------------------------------
# line structure and define labels
# ---------------------------------------------------------------------------

class TestLineStructure:

    def test_wrong_field_count_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\ttitle")
        assert exc.value.error.type is FormatErrorType.MTDLine

    def test_unknown_element_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tfoo[1]\tbar")
        assert exc.value.error.type is FormatErrorType.MTDDefineLabel

    def test_unknown_property_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tsample[1]-colour\tred")
        assert exc.value.error.type is FormatErrorType.MTDDefineLabel
        assert "sample-colour" in exc.value.error.message

    @pytest.mark.parametrize("label", ["sample[0]", "sample[x]", "sample[-1]", "sample[]", "sample"])
    def test_bad_id_aborts(self, label):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, f"MTD\t{label}\tliver")
        assert exc.value.error.type is LogicalErrorType.IdNumber

    def test_bad_sub_index_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tsample[1]-species[-1]\t[NCBITaxon, NCBITaxon:9606, Homo sapiens (Human), ]")
        assert exc.value.error.type is LogicalErrorType.IdNumber

    def test_define_label_is_case_insensitive(self):
        parser = _feed(_make_parser(), ["MTD\tMZTAB-VERSION\t2.0.0-M", "MTD\tMzTab-ID\tX"])
        assert parser.metadata.mz_tab_version == "2.0.0-M"
        assert parser.metadata.mz_tab_id == "X"

    def test_bad_version_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tmzTab-version\t1.0.0")
        assert exc.value.error.type is FormatErrorType.MZTabVersion


# ---------------------------------------------------------------------------
# singletons
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("first, second", [
    ("MTD\ttitle\tA", "MTD\ttitle\tB"),
    ("MTD\tdescription\tA", "MTD\tdescription\tB"),
    ("MTD\tmzTab-version\t2.0.0-M", "MTD\tmzTab-version\t2.0.0-M"),
    ("MTD\tquantification_method\t[MS, MS:1001834, LC-MS label-free quantitation analysis, ]",
     "MTD\tquantification_method\t[MS, MS:1002038, unlabeled sample, ]"),
    ("MTD\tsmall_molecule-quantification_unit\t[PRIDE, PRIDE:0000330, Arbitrary quantification unit, ]",
     "MTD\tsmall_molecule-quantification_unit\t[PRIDE, PRIDE:0000330, Arbitrary quantification unit, ]"),
])
def test_singleton_redefinition_aborts(first, second):
    parser = _make_parser()
    parser.parse(1, first)
    with pytest.raises(MZTabException) as exc:
        parser.parse(2, second)
    assert exc.value.error.type is LogicalErrorType.DuplicationDefine


def test_unparseable_singleton_still_counts_as_defined():
    parser = _make_parser()
    parser.parse(1, "MTD\tquantification_method\tlabel free")
    assert parser.metadata.quantification_method is None
    assert [e.type for e in parser.error_list] == [FormatErrorType.Param]
    with pytest.raises(MZTabException) as exc:
        parser.parse(2, "MTD\tquantification_method\t[MS, MS:1001834, LC-MS label-free quantitation analysis, ]")
    assert exc.value.error.type is LogicalErrorType.DuplicationDefine


def test_quantification_units_and_reliability():
    parser = _feed(_make_parser(), [
        "MTD\tsmall_molecule-quantification_unit\t[PRIDE, PRIDE:0000330, Arbitrary quantification unit, ]",
        "MTD\tsmall_molecule_feature-quantification_unit\t[PRIDE, PRIDE:0000330, Arbitrary quantification unit, ]",
        "MTD\tsmall_molecule-identification_reliability\t[MS, MS:1002955, hr-ms compound identification confidence level, ]",
    ])
    metadata = parser.metadata
    assert metadata.small_molecule_quantification_unit.cv_accession == "PRIDE:0000330"
    assert metadata.small_molecule_feature_quantification_unit is not None
    assert metadata.small_molecule_identification_reliability.cv_accession == "MS:1002955"


# ---------------------------------------------------------------------------
# indexed entities
# ---------------------------------------------------------------------------

class TestIndexedEntities:

    def test_instrument_and_ms_run_instrument_ref(self):
        parser = _feed(_make_parser(), [
            "MTD\tinstrument[1]-name\t[MS, MS:1000449, LTQ Orbitrap, ]",
            "MTD\tinstrument[1]-analyzer[1]\t[MS, MS:1000291, linear ion trap, ]",
            "MTD\tms_run[1]-instrument_ref\tinstrument[1]",
        ])
        instrument = parser.metadata.instrument[1]
        assert instrument.name.name == "LTQ Orbitrap"
        assert parser.metadata.ms_run[1].instrument_ref is instrument

    def test_undeclared_instrument_ref_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tms_run[1]-instrument_ref\tinstrument[1]")
        assert exc.value.error.type is LogicalErrorType.NotDefineInMetadata

    def test_ms_run_properties(self):
        parser = _feed(_make_parser(), [
            "MTD\tms_run[1]-format\t[MS, MS:1000584, mzML file, ]",
            "MTD\tms_run[1]-id_format\t[MS, MS:1000530, mzML unique identifier, ]",
            "MTD\tms_run[1]-fragmentation_method[1]\t[MS, MS:1000133, CID, ]",
            "MTD\tms_run[1]-scan_polarity[1]\t[MS, MS:1000130, positive scan, ]",
            "MTD\tms_run[1]-hash\tde9f2c7fd25e1b3afad3e85a0bd17d9b100db4b3",
            "MTD\tms_run[1]-hash_method\t[MS, MS:1000569, SHA-1, ]",
        ])
        run = parser.metadata.ms_run[1]
        assert run.format.name == "mzML file"
        assert run.fragmentation_method[0].name == "CID"
        assert run.scan_polarity[0].cv_accession == "MS:1000130"
        assert run.hash.startswith("de9f")
        assert not run.has_location

    def test_null_location_warns_but_is_declared(self):
        parser = _make_parser()
        parser.parse(1, "MTD\tms_run[1]-location\tnull")
        assert parser.metadata.ms_run[1].has_location
        assert [e.type for e in parser.error_list] == [LogicalErrorType.NotNULL]

    def test_bad_location_is_recoverable(self):
        parser = _make_parser()
        parser.parse(1, "MTD\tms_run[1]-location\tnot a url")
        assert [e.type for e in parser.error_list] == [FormatErrorType.URL]

    def test_software_without_version_warns(self):
        parser = _feed(_make_parser(), [
            "MTD\tsoftware[1]\t[MS, MS:1002879, Progenesis QI, ]",
            "MTD\tsoftware[1]-setting[1]\tTolerance = 0.5 Da",
        ])
        software = parser.metadata.software[1]
        assert software.setting == ["Tolerance = 0.5 Da"]
        assert [e.type for e in parser.error_list] == [LogicalErrorType.SoftwareVersion]

    def test_software_with_version(self):
        parser = _feed(_make_parser(), ["MTD\tsoftware[1]\t[MS, MS:1002879, Progenesis QI, 3.0]"])
        assert parser.error_list.is_empty()

    def test_bad_parameter_is_recoverable_but_instrument_not_stored(self):
        parser = _make_parser()
        with pytest.raises(MZTabException) as exc:
            parser.parse(1, "MTD\tinstrument[1]-name\tLTQ Orbitrap")
        assert exc.value.error.type is LogicalErrorType.NULL
        assert [e.type for e in parser.error_list] == [FormatErrorType.Param]

    def test_contact_with_bad_email(self):
        parser = _feed(_make_parser(), [
            "MTD\tcontact[1]-name\tNils Hoffmann",
            "MTD\tcontact[1]-affiliation\tISAS",
            "MTD\tcontact[1]-email\tnot-an-email",
        ])
        contact = parser.metadata.contact[1]
        assert contact.affiliation == "ISAS"
        assert contact.email == "not-an-email"
        assert [e.type for e in parser.error_list] == [FormatErrorType.Email]

    def test_publication(self):
        parser = _feed(_make_parser(), ["MTD\tpublication[1]\tpubmed:21063943|doi:10.1007/978-1-60761-987-1_6"])
        assert len(parser.metadata.publication[1].publication_items) == 2

    def test_bad_publication_is_recoverable(self):
        parser = _feed(_make_parser(), ["MTD\tpublication[1]\tpubmed:21063943|isbn:12"])
        assert parser.metadata.publication[1].publication_items == []
        assert [e.type for e in parser.error_list] == [FormatErrorType.Publication]

    def test_sample_properties(self):
        parser = _feed(_make_parser(), [
            "MTD\tsample[1]\tindividual number 1",
            "MTD\tsample[1]-species[1]\t[NCBITaxon, NCBITaxon:9606, Homo sapiens (Human), ]",
            "MTD\tsample[1]-tissue[1]\t[BTO, BTO:0000759, liver, ]",
            "MTD\tsample[1]-description\tHepatocellular carcinoma sample",
            "MTD\tsample[1]-custom[1]\t[,,Extraction date, 2011-12-21]",
        ])
        sample = parser.metadata.sample[1]
        assert sample.name == "individual number 1"
        assert sample.species[0].cv_accession == "NCBITaxon:9606"
        assert sample.custom[0].value == "2011-12-21"

    def test_cv_and_database(self):
        parser = _feed(_make_parser(), [
            "MTD\tcv[1]-label\tMS",
            "MTD\tcv[1]-full_name\tPSI-MS controlled vocabulary",
            "MTD\tcv[1]-version\t4.1.138",
            "MTD\tcv[1]-uri\thttps://raw.githubusercontent.com/HUPO-PSI/psi-ms-CV/master/psi-ms.obo",
            "MTD\tdatabase[1]\t[MIRIAM, MIR:00100079, HMDB, ]",
            "MTD\tdatabase[1]-prefix\thmdb",
            "MTD\tdatabase[1]-version\t3.6",
            "MTD\tdatabase[1]-uri\thttp://www.hmdb.ca/",
        ])
        assert parser.metadata.cv[1].full_name == "PSI-MS controlled vocabulary"
        assert parser.metadata.cv[1].uri.startswith("https://")
        database = parser.metadata.database[1]
        assert (database.param.name, database.prefix, database.version) == ("HMDB", "hmdb", "3.6")

    def test_id_confidence_measure_and_custom(self):
        parser = _feed(_make_parser(), [
            "MTD\tid_confidence_measure[1]\t[MS, MS:1002888, small molecule confidence measure, ]",
            "MTD\tcustom[1]\t[,,MS operator, Florian]",
        ])
        assert parser.metadata.id_confidence_measure[1].cv_accession == "MS:1002888"
        assert parser.metadata.custom[1].value == "Florian"

    def test_colunit_is_deferred(self):
        parser = _feed(_make_parser(), [
            "MTD\tcolunit-small_molecule\tretention_time=[UO, UO:0000010, second, ]",
            "MTD\tcolunit-protein\tx=[UO, UO:0000010, second, ]",
        ])
        assert parser.context.col_unit_map == {
            "colunit-small_molecule": ["retention_time=[UO, UO:0000010, second, ]"],
        }
        assert [e.type for e in parser.error_list] == [FormatErrorType.MTDDefineLabel]


# ---------------------------------------------------------------------------
# references
# ---------------------------------------------------------------------------

class TestReferences:

    def test_assay_refs_resolve_to_same_objects(self):
        parser = _feed(_make_parser(), MINIMAL_HEADER + [
            "MTD\tstudy_variable[1]\tcontrol",
            "MTD\tstudy_variable[1]-assay_refs\tassay[1]",
        ])
        metadata = parser.metadata
        assert metadata.assay[1].sample_ref is metadata.sample[1]
        assert metadata.assay[1].ms_run_ref == [metadata.ms_run[1]]
        assert metadata.study_variable[1].assay_refs[0] is metadata.assay[1]

    def test_duplicate_refs_warn_once_per_id(self):
        parser = _feed(_make_parser(), [
            "MTD\tassay[1]\ta1",
            "MTD\tassay[2]\ta2",
            "MTD\tstudy_variable[1]-assay_refs\tassay[1]|assay[1]|assay[2]|assay[1]|assay[2]",
        ])
        duplicates = [e for e in parser.error_list if e.type is LogicalErrorType.DuplicationID]
        assert len(duplicates) == 2
        assert parser.metadata.study_variable[1].assay_refs == [parser.metadata.assay[1], parser.metadata.assay[2]]

    def test_undeclared_ref_aborts_even_with_valid_ones(self):
        parser = _feed(_make_parser(), ["MTD\tassay[1]\ta1"])
        with pytest.raises(MZTabException) as exc:
            parser.parse(2, "MTD\tstudy_variable[1]-assay_refs\tassay[1]|assay[5]")
        assert exc.value.error.type is LogicalErrorType.NotDefineInMetadata
        assert "assay[5]" in exc.value.error.message

    def test_undeclared_sample_ref_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tassay[1]-sample_ref\tsample[1]")
        assert exc.value.error.type is LogicalErrorType.NotDefineInMetadata

    def test_malformed_ref_aborts(self):
        with pytest.raises(MZTabException) as exc:
            _make_parser().parse(1, "MTD\tassay[1]-ms_run_ref\trun1")
        assert exc.value.error.type is FormatErrorType.IndexedElement


# ---------------------------------------------------------------------------
# completeness check
# ---------------------------------------------------------------------------

class TestRefineNormalMetadata:

    def test_minimal_header_passes(self):
        parser = _feed(_make_parser(), MINIMAL_HEADER)
        parser.refine_normal_metadata()
        assert parser.error_list.is_empty()

    def test_missing_ms_run_ref_is_named(self):
        lines = [line for line in MINIMAL_HEADER if "ms_run_ref" not in line]
        parser = _feed(_make_parser(), lines)
        with pytest.raises(MZTabException) as exc:
            parser.refine_normal_metadata()
        assert exc.value.error.type is LogicalErrorType.NotDefineInMetadata
        assert "assay[1]-ms_run_ref" in exc.value.error.message

    def test_missing_quantification_method(self):
        lines = [line for line in MINIMAL_HEADER if "quantification_method" not in line]
        with pytest.raises(MZTabException) as exc:
            _feed(_make_parser(), lines).refine_normal_metadata()
        assert "quantification_method" in exc.value.error.message

    def test_missing_description(self):
        lines = [line for line in MINIMAL_HEADER if "description" not in line]
        with pytest.raises(MZTabException) as exc:
            _feed(_make_parser(), lines).refine_normal_metadata()
        assert "description" in exc.value.error.message

    def test_missing_location(self):
        lines = [line for line in MINIMAL_HEADER if "location" not in line]
        lines.insert(0, "MTD\tms_run[1]\trun one")
        with pytest.raises(MZTabException) as exc:
            _feed(_make_parser(), lines).refine_normal_metadata()
        assert "ms_run[1]-location" in exc.value.error.message

    def test_study_variable_without_assays(self):
        parser = _feed(_make_parser(), MINIMAL_HEADER + ["MTD\tstudy_variable[1]\tcontrol"])
        with pytest.raises(MZTabException) as exc:
            parser.refine_normal_metadata()
        assert exc.value.error.type is LogicalErrorType.AssayRefs
        assert "study_variable[1]-assay_refs" in exc.value.error.message
