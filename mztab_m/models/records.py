"""Typed rows of the three small molecule tables.

Stable columns carry ``column_field`` metadata in the order the columns are
defined for their table.  Abundance, confidence and ``opt_`` columns depend on
the metadata and the header line, so they are collected into lists.
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional

from mztab_m.constants import OPT_PREFIX
from mztab_m.models.column_field import column_field
from mztab_m.models.metadata import Parameter, SpectraRef


@dataclass
class OptColumnMapping:
    identifier: str
    value: Optional[str] = None


# ---------------------------------------------------------------------------
# SML: small molecule summary
# ---------------------------------------------------------------------------

@dataclass
class SmallMoleculeSummary:
    sml_id: Optional[str] = column_field(header="SML_ID")
    smf_id_refs: Optional[List[str]] = column_field(
        header="SMF_ID_REFS", parse="string_list")
    database_identifier: Optional[List[str]] = column_field(
        header="database_identifier", parse="string_list")
    chemical_formula: Optional[List[str]] = column_field(
        header="chemical_formula", parse="string_list")
    smiles: Optional[List[str]] = column_field(
        header="smiles", parse="string_list")
    inchi: Optional[List[str]] = column_field(
        header="inchi", parse="string_list")
    chemical_name: Optional[List[str]] = column_field(
        header="chemical_name", parse="string_list")
    uri: Optional[List[str]] = column_field(
        header="uri", parse="string_list")
    theoretical_neutral_mass: Optional[List[float]] = column_field(
        header="theoretical_neutral_mass", parse="double_list")
    adduct_ions: Optional[List[str]] = column_field(
        header="adduct_ions", parse="string_list")
    reliability: Optional[str] = column_field(header="reliability")
    best_id_confidence_measure: Optional[Parameter] = column_field(
        header="best_id_confidence_measure", parse="param")
    best_id_confidence_value: Optional[float] = column_field(
        header="best_id_confidence_value", parse="double")

    abundance_assay: List[Optional[float]] = field(default_factory=list)
    abundance_study_variable: List[Optional[float]] = field(default_factory=list)
    abundance_variation_study_variable: List[Optional[float]] = field(default_factory=list)
    opt: List[OptColumnMapping] = field(default_factory=list)


# ---------------------------------------------------------------------------
# SMF: small molecule feature
# ---------------------------------------------------------------------------

@dataclass
class SmallMoleculeFeature:
    smf_id: Optional[str] = column_field(header="SMF_ID")
    sme_id_refs: Optional[List[str]] = column_field(
        header="SME_ID_REFS", parse="string_list")
    sme_id_ref_ambiguity_code: Optional[int] = column_field(
        header="SME_ID_REF_ambiguity_code", parse="integer")
    adduct_ion: Optional[str] = column_field(header="adduct_ion")
    isotopomer: Optional[Parameter] = column_field(
        header="isotopomer", parse="param")
    exp_mass_to_charge: Optional[float] = column_field(
        header="exp_mass_to_charge", parse="double")
    charge: Optional[int] = column_field(header="charge", parse="integer")
    retention_time_in_seconds: Optional[float] = column_field(
        header="retention_time_in_seconds", parse="double")
    retention_time_in_seconds_start: Optional[float] = column_field(
        header="retention_time_in_seconds_start", parse="double")
    retention_time_in_seconds_end: Optional[float] = column_field(
        header="retention_time_in_seconds_end", parse="double")

    abundance_assay: List[Optional[float]] = field(default_factory=list)
    opt: List[OptColumnMapping] = field(default_factory=list)


# ---------------------------------------------------------------------------
# SME: small molecule evidence
# ---------------------------------------------------------------------------

@dataclass
class SmallMoleculeEvidence:
    sme_id: Optional[str] = column_field(header="SME_ID")
    evidence_input_id: Optional[str] = column_field(header="evidence_input_id")
    database_identifier: Optional[str] = column_field(header="database_identifier")
    chemical_formula: Optional[str] = column_field(header="chemical_formula")
    smiles: Optional[str] = column_field(header="smiles")
    inchi: Optional[str] = column_field(header="inchi")
    chemical_name: Optional[str] = column_field(header="chemical_name")
    uri: Optional[str] = column_field(header="uri", parse="uri")
    derivatized_form: Optional[Parameter] = column_field(
        header="derivatized_form", parse="param")
    adduct_ion: Optional[str] = column_field(header="adduct_ion")
    exp_mass_to_charge: Optional[float] = column_field(
        header="exp_mass_to_charge", parse="double")
    charge: Optional[int] = column_field(header="charge", parse="integer")
    theoretical_mass_to_charge: Optional[float] = column_field(
        header="theoretical_mass_to_charge", parse="double")
    spectra_ref: Optional[List[SpectraRef]] = column_field(
        header="spectra_ref", parse="spectra_ref")
    identification_method: Optional[Parameter] = column_field(
        header="identification_method", parse="param_required")
    ms_level: Optional[Parameter] = column_field(
        header="ms_level", parse="param_required")
    rank: Optional[int] = column_field(header="rank", parse="integer")

    id_confidence_measure: List[Optional[float]] = field(default_factory=list)
    opt: List[OptColumnMapping] = field(default_factory=list)


def record_to_dict(record) -> dict:
    """Flatten a record for tabular display; list values are kept as lists."""
    row = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if f.name == "opt":
            for item in value:
                row[OPT_PREFIX + item.identifier] = item.value
        elif isinstance(value, Parameter):
            row[f.name] = str(value)
        elif isinstance(value, list) and value and isinstance(value[0], SpectraRef):
            row[f.name] = [str(ref) for ref in value]
        else:
            row[f.name] = value
    return row
