"""Container for everything read from one mzTab document."""

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from mztab_m.constants import Section
from mztab_m.core.errors import Level, MZTabError, MZTabErrorList
from mztab_m.models.metadata import Metadata
from mztab_m.models.records import (SmallMoleculeEvidence, SmallMoleculeFeature, SmallMoleculeSummary,
                                    record_to_dict)


@dataclass
class ParsedMZTabData:
    metadata: Optional[Metadata] = None
    small_molecule_summaries: List[SmallMoleculeSummary] = field(default_factory=list)
    small_molecule_features: List[SmallMoleculeFeature] = field(default_factory=list)
    small_molecule_evidences: List[SmallMoleculeEvidence] = field(default_factory=list)
    error_list: MZTabErrorList = field(default_factory=MZTabErrorList)
    # the unrecoverable error that stopped parsing, if any
    fatal_error: Optional[MZTabError] = None
    overflow: bool = False

    def records(self, section: Section) -> list:
        section = section.data_section
        if section == Section.Small_Molecule:
            return self.small_molecule_summaries
        if section == Section.Small_Molecule_Feature:
            return self.small_molecule_features
        if section == Section.Small_Molecule_Evidence:
            return self.small_molecule_evidences
        raise ValueError(f"{section} has no records")

    def add_record(self, section: Section, record):
        self.records(section).append(record)

    @property
    def is_valid(self) -> bool:
        return self.fatal_error is None and not self.overflow and not self.error_list.has_errors(Level.Error)

    def to_dataframe(self, section: Section) -> pd.DataFrame:
        """Render the records of one table as a DataFrame, one row per record."""
        return pd.DataFrame([record_to_dict(record) for record in self.records(section)])
