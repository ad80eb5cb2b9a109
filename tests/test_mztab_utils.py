"""Tests for the primitive value codecs."""

import math

import pytest

from mztab_m.models.metadata import MsRun, Parameter, PublicationType
from mztab_m.parsers import mztab_utils as utils


# ---------------------------------------------------------------------------
# strings and numbers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", [None, "", "   ", "null", "NULL", " Null "])
def test_parse_string_absent(text):
    assert utils.parse_string(text) is None


def test_parse_string_trims():
    assert utils.parse_string("  caffeine ") == "caffeine"


@pytest.mark.parametrize("text, expected", [
    ("1", 1), ("-3", -3), ("+7", 7), (" 42 ", 42),
])
def test_parse_integer(text, expected):
    assert utils.parse_integer(text) == expected


@pytest.mark.parametrize("text", ["1.5", "abc", "1e3", "null"])
def test_parse_integer_rejects(text):
    assert utils.parse_integer(text) is None


@pytest.mark.parametrize("text, expected", [
    ("1.5", 1.5), ("-2", -2.0), ("3e-2", 0.03), (".5", 0.5), ("10.", 10.0),
])
def test_parse_double(text, expected):
    assert utils.parse_double(text) == pytest.approx(expected)


def test_parse_double_special_values():
    assert math.isnan(utils.parse_double("NaN"))
    assert utils.parse_double("INF") == math.inf
    assert utils.parse_double("Infinity") == math.inf


@pytest.mark.parametrize("text", ["-INF", "-Infinity", "-1e400", "nan", "inf", "1,5", "abc", "1_000"])
def test_parse_double_rejects(text):
    assert utils.parse_double(text) is None


def test_print_double():
    assert utils.print_double(None) == "null"
    assert utils.print_double(math.nan) == "NaN"
    assert utils.print_double(math.inf) == "INF"
    assert utils.print_double(1.5) == "1.5"


@pytest.mark.parametrize("value", [0.0, 1.5, -2.25, 1e-12, 123456789.125, math.inf])
def test_double_round_trip(value):
    assert utils.parse_double(utils.print_double(value)) == value


def test_double_round_trip_nan():
    assert math.isnan(utils.parse_double(utils.print_double(math.nan)))


# ---------------------------------------------------------------------------
# parameters
# ---------------------------------------------------------------------------

class TestParseParam:

    def test_cv_parameter(self):
        param = utils.parse_param("[MS, MS:1001477, SpectraST, ]")
        assert param == Parameter("MS", "MS:1001477", "SpectraST", None)

    def test_value_is_kept(self):
        param = utils.parse_param("[MS, MS:1000747, completion time, 2011-12-22]")
        assert param.value == "2011-12-22"

    def test_user_parameter(self):
        param = utils.parse_param("[,,Progenesis QI normalised abundance, ]")
        assert param.cv_label is None
        assert param.cv_accession is None
        assert param.name == "Progenesis QI normalised abundance"

    def test_quoted_name_with_comma(self):
        param = utils.parse_param('[MOD, MOD:00648, "N,O-diacetylated L-serine", ]')
        assert param.name == "N,O-diacetylated L-serine"

    def test_value_only(self):
        param = utils.parse_param("[,,,some value]")
        assert param.name is None
        assert param.value == "some value"

    @pytest.mark.parametrize("text", [
        "null", "", "[MS, MS:1001477, SpectraST]", "[MS, MS:1, a, b, c]", "[,,,]", "no brackets",
    ])
    def test_invalid(self, text):
        assert utils.parse_param(text) is None

    def test_nested_quotes_are_removed_with_warning(self, caplog):
        param = utils.parse_param('[,,"a "quoted" name", ]')
        assert param.name == "a quoted name"
        assert "Nested double quotes" in caplog.text

    def test_str_renders_four_fields(self):
        assert str(Parameter("MS", "MS:1001477", "SpectraST", None)) == "[MS, MS:1001477, SpectraST, ]"


# ---------------------------------------------------------------------------
# lists: all or nothing
# ---------------------------------------------------------------------------

def test_parse_string_list():
    assert utils.parse_string_list("|", "a|b| c") == ["a", "b", "c"]
    assert utils.parse_string_list("|", "null") == []


def test_parse_string_list_other_delimiter():
    assert utils.parse_string_list(",", "a,b") == ["a", "b"]


def test_parse_double_list_all_or_nothing():
    assert utils.parse_double_list("1.0|2|NaN")[:2] == [1.0, 2.0]
    assert utils.parse_double_list("1.0|x|3") is None
    assert utils.parse_double_list(None) == []


def test_parse_param_list_all_or_nothing():
    params = utils.parse_param_list("[MS, MS:1, a, ]|[MS, MS:2, b, ]")
    assert [p.name for p in params] == ["a", "b"]
    assert utils.parse_param_list("[MS, MS:1, a, ]|broken") is None


def test_parse_indexed_element():
    element = utils.parse_indexed_element("assay[12]", "assay")
    assert element.id == 12
    assert str(element) == "assay[12]"
    assert utils.parse_indexed_element("sample[1]", "assay") is None
    assert utils.parse_indexed_element("assay[x]", "assay") is None


def test_parse_ref_list():
    refs = utils.parse_ref_list("assay[1]|assay[2], assay[3]", "assay")
    assert [r.id for r in refs] == [1, 2, 3]


def test_parse_ref_list_any_bad_item_fails_whole_list():
    assert utils.parse_ref_list("assay[1]|sample[2]", "assay") is None


# ---------------------------------------------------------------------------
# spectra refs, publications, emails, versions, urls
# ---------------------------------------------------------------------------

class TestParseSpectraRefList:

    def test_resolves_against_known_runs(self):
        runs = {1: MsRun(id=1), 2: MsRun(id=2)}
        refs = utils.parse_spectra_ref_list(runs, "ms_run[1]:index=5|ms_run[2]:scan=7")
        assert refs[0].ms_run is runs[1]
        assert refs[1].reference == "scan=7"
        assert str(refs[0]) == "ms_run[1]:index=5"

    def test_unknown_run_invalidates_list(self):
        runs = {1: MsRun(id=1)}
        assert utils.parse_spectra_ref_list(runs, "ms_run[1]:index=5|ms_run[3]:index=1") is None

    def test_lookup_is_live(self):
        runs = {}
        assert utils.parse_spectra_ref_list(runs, "ms_run[1]:index=5") is None
        runs[1] = MsRun(id=1)
        assert len(utils.parse_spectra_ref_list(runs, "ms_run[1]:index=5")) == 1

    def test_items_without_run_are_skipped(self):
        runs = {1: MsRun(id=1)}
        refs = utils.parse_spectra_ref_list(runs, "index=5|ms_run[1]:index=6")
        assert [r.reference for r in refs] == ["index=6"]


def test_parse_publication_items():
    items = utils.parse_publication_items("pubmed:21063943|doi:10.1007/978-1-60761-987-1_6")
    assert [i.type for i in items] == [PublicationType.pubmed, PublicationType.doi]
    assert items[1].accession == "10.1007/978-1-60761-987-1_6"
    assert utils.parse_publication_items("pubmed:1|isbn:2") is None


def test_parse_email():
    assert utils.parse_email("jane.doe@example.org") == "jane.doe@example.org"
    assert utils.parse_email("not an email") is None


@pytest.mark.parametrize("text, ok", [
    ("2.0.0-M", True), ("2.1.0-M", True), ("1.0.0", False), ("2.0.0-P", False), ("2.0-M", False),
])
def test_parse_mztab_version(text, ok):
    assert (utils.parse_mztab_version(text) is not None) == ok


def test_parse_url():
    assert utils.parse_url("file:///data/run1.mzML") == "file:///data/run1.mzML"
    assert utils.parse_url("http://example.org/a.raw") is not None
    assert utils.parse_url("run1.mzML") is None
    assert utils.parse_url("http://exa mple.org") is None


def test_parse_uri():
    assert utils.parse_uri("http://www.ebi.ac.uk/metabolights/MTBLS1") is not None
    assert utils.parse_uri("urn:lsid:example") is not None
    assert utils.parse_uri("has space") is None


def test_mz_boolean():
    assert utils.parse_mz_boolean("1") is True
    assert utils.parse_mz_boolean(" 0 ") is False
    assert utils.parse_mz_boolean("yes") is None
    assert utils.parse_mz_boolean("true") is None
    assert utils.print_mz_boolean(True) == "1"
