"""Registry of every indexed metadata entity seen while parsing one document.

``MZTabParserContext`` owns one id keyed dict per entity kind.  The
``Metadata`` it creates holds the very same dict objects, so an entity
updated through the context is visible through the metadata and through any
entity referencing it.  ``add_*`` methods create the entity on first sight
of its id and mutate it afterwards; they return the entity, or ``None`` when
the input can not be stored.
"""

import logging
from typing import Dict, List, Optional, TypeVar

from mztab_m.models.metadata import (CV, Assay, Contact, Database, Instrument, Metadata, MsRun,
                                     Parameter, Publication, PublicationItem, Sample,
                                     SampleProcessing, Software, StudyVariable, Uri)

logger = logging.getLogger(__name__)

E = TypeVar("E")


def put_sorted(entities: Dict[int, E], id: int, entity: E) -> E:
    """Insert *entity* keeping the dict in ascending id order, in place."""
    if not entities or id in entities or id > next(reversed(entities)):
        entities[id] = entity
        return entity
    items = sorted([*entities.items(), (id, entity)], key=lambda item: item[0])
    entities.clear()
    entities.update(items)
    return entity


class MZTabParserContext:

    def __init__(self):
        self.sample_processing_map: Dict[int, SampleProcessing] = {}
        self.instrument_map: Dict[int, Instrument] = {}
        self.software_map: Dict[int, Software] = {}
        self.publication_map: Dict[int, Publication] = {}
        self.contact_map: Dict[int, Contact] = {}
        self.uri_map: Dict[int, Uri] = {}
        self.external_study_uri_map: Dict[int, Uri] = {}
        self.ms_run_map: Dict[int, MsRun] = {}
        self.custom_map: Dict[int, Parameter] = {}
        self.sample_map: Dict[int, Sample] = {}
        self.assay_map: Dict[int, Assay] = {}
        self.study_variable_map: Dict[int, StudyVariable] = {}
        self.cv_map: Dict[int, CV] = {}
        self.database_map: Dict[int, Database] = {}
        self.id_confidence_measure_map: Dict[int, Parameter] = {}
        # raw 'colunit-*' values keyed by define label, applied with the table header
        self.col_unit_map: Dict[str, List[str]] = {}

        self.metadata = Metadata(
            sample_processing=self.sample_processing_map,
            instrument=self.instrument_map,
            software=self.software_map,
            publication=self.publication_map,
            contact=self.contact_map,
            uri=self.uri_map,
            external_study_uri=self.external_study_uri_map,
            ms_run=self.ms_run_map,
            custom=self.custom_map,
            sample=self.sample_map,
            assay=self.assay_map,
            study_variable=self.study_variable_map,
            cv=self.cv_map,
            database=self.database_map,
            id_confidence_measure=self.id_confidence_measure_map,
        )

    @staticmethod
    def _get_or_create(entities: Dict[int, E], id: int, entity_type) -> E:
        entity = entities.get(id)
        if entity is None:
            entity = put_sorted(entities, id, entity_type(id=id))
            logger.debug(f"Registered {entity_type.__name__}[{id}]")
        return entity

    # ------------------------------------------------------------------
    # sample_processing, instrument, software
    # ------------------------------------------------------------------

    def add_sample_processing(self, id: int, params: Optional[List[Parameter]]) -> Optional[SampleProcessing]:
        if params is None:
            return None
        sample_processing = self._get_or_create(self.sample_processing_map, id, SampleProcessing)
        sample_processing.sample_processing = list(params)
        return sample_processing

    def add_instrument(self, id: int) -> Instrument:
        return self._get_or_create(self.instrument_map, id, Instrument)

    def add_instrument_name(self, id: int, name: Optional[Parameter]) -> Optional[Instrument]:
        if name is None:
            return None
        instrument = self.add_instrument(id)
        instrument.name = name
        return instrument

    def add_instrument_source(self, id: int, source: Optional[Parameter]) -> Optional[Instrument]:
        if source is None:
            return None
        instrument = self.add_instrument(id)
        instrument.source = source
        return instrument

    def add_instrument_analyzer(self, id: int, analyzer: Optional[Parameter]) -> Optional[Instrument]:
        if analyzer is None:
            return None
        instrument = self.add_instrument(id)
        instrument.analyzer.append(analyzer)
        return instrument

    def add_instrument_detector(self, id: int, detector: Optional[Parameter]) -> Optional[Instrument]:
        if detector is None:
            return None
        instrument = self.add_instrument(id)
        instrument.detector = detector
        return instrument

    def add_software(self, id: int, parameter: Optional[Parameter]) -> Optional[Software]:
        if parameter is None:
            return None
        software = self._get_or_create(self.software_map, id, Software)
        software.parameter = parameter
        return software

    def add_software_setting(self, id: int, setting: Optional[str]) -> Optional[Software]:
        if not setting:
            return None
        software = self._get_or_create(self.software_map, id, Software)
        software.setting.append(setting)
        return software

    # ------------------------------------------------------------------
    # publication, contact, uri
    # ------------------------------------------------------------------

    def add_publication(self, id: int, items: Optional[List[PublicationItem]]) -> Publication:
        publication = self._get_or_create(self.publication_map, id, Publication)
        if items is None:
            publication.publication_items.clear()
        else:
            publication.publication_items.extend(items)
        return publication

    def add_contact_name(self, id: int, name: Optional[str]) -> Optional[Contact]:
        if not name:
            return None
        contact = self._get_or_create(self.contact_map, id, Contact)
        contact.name = name
        return contact

    def add_contact_affiliation(self, id: int, affiliation: Optional[str]) -> Optional[Contact]:
        if not affiliation:
            return None
        contact = self._get_or_create(self.contact_map, id, Contact)
        contact.affiliation = affiliation
        return contact

    def add_contact_email(self, id: int, email: Optional[str]) -> Optional[Contact]:
        if not email:
            return None
        contact = self._get_or_create(self.contact_map, id, Contact)
        contact.email = email
        return contact

    def add_uri(self, id: int, value: Optional[str]) -> Optional[Uri]:
        if value is None:
            return None
        return put_sorted(self.uri_map, id, Uri(id=id, value=value))

    def add_external_study_uri(self, id: int, value: Optional[str]) -> Optional[Uri]:
        if value is None:
            return None
        return put_sorted(self.external_study_uri_map, id, Uri(id=id, value=value))

    # ------------------------------------------------------------------
    # ms_run
    # ------------------------------------------------------------------

    def add_ms_run(self, id: int, name: Optional[str] = None) -> MsRun:
        ms_run = self._get_or_create(self.ms_run_map, id, MsRun)
        if name is not None:
            ms_run.name = name
        return ms_run

    def add_ms_run_location(self, id: int, location: Optional[str]) -> MsRun:
        """Declare the location of ``ms_run[id]``; ``None`` stands for an unknown location."""
        ms_run = self.add_ms_run(id)
        ms_run.location = location
        ms_run.has_location = True
        return ms_run

    def add_ms_run_format(self, id: int, format: Optional[Parameter]) -> Optional[MsRun]:
        if format is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.format = format
        return ms_run

    def add_ms_run_id_format(self, id: int, id_format: Optional[Parameter]) -> Optional[MsRun]:
        if id_format is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.id_format = id_format
        return ms_run

    def add_ms_run_instrument_ref(self, id: int, instrument: Optional[Instrument]) -> Optional[MsRun]:
        if instrument is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.instrument_ref = instrument
        return ms_run

    def add_ms_run_fragmentation_method(self, id: int, method: Optional[Parameter]) -> Optional[MsRun]:
        if method is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.fragmentation_method.append(method)
        return ms_run

    def add_ms_run_scan_polarity(self, id: int, polarity: Optional[Parameter]) -> Optional[MsRun]:
        if polarity is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.scan_polarity.append(polarity)
        return ms_run

    def add_ms_run_hash(self, id: int, hash: Optional[str]) -> Optional[MsRun]:
        if not hash:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.hash = hash
        return ms_run

    def add_ms_run_hash_method(self, id: int, hash_method: Optional[Parameter]) -> Optional[MsRun]:
        if hash_method is None:
            return None
        ms_run = self.add_ms_run(id)
        ms_run.hash_method = hash_method
        return ms_run

    # ------------------------------------------------------------------
    # custom, id_confidence_measure
    # ------------------------------------------------------------------

    def add_custom(self, id: int, custom: Optional[Parameter]) -> Optional[Parameter]:
        if custom is None:
            return None
        return put_sorted(self.custom_map, id, custom)

    def add_id_confidence_measure(self, id: int, measure: Optional[Parameter]) -> Optional[Parameter]:
        if measure is None:
            return None
        return put_sorted(self.id_confidence_measure_map, id, measure)

    # ------------------------------------------------------------------
    # sample
    # ------------------------------------------------------------------

    def add_sample(self, id: int, name: Optional[str] = None) -> Sample:
        sample = self._get_or_create(self.sample_map, id, Sample)
        if name is not None:
            sample.name = name
        return sample

    def _add_sample_param(self, id: int, attribute: str, param: Optional[Parameter]) -> Optional[Sample]:
        if param is None:
            return None
        sample = self.add_sample(id)
        getattr(sample, attribute).append(param)
        return sample

    def add_sample_species(self, id: int, species: Optional[Parameter]) -> Optional[Sample]:
        return self._add_sample_param(id, "species", species)

    def add_sample_tissue(self, id: int, tissue: Optional[Parameter]) -> Optional[Sample]:
        return self._add_sample_param(id, "tissue", tissue)

    def add_sample_cell_type(self, id: int, cell_type: Optional[Parameter]) -> Optional[Sample]:
        return self._add_sample_param(id, "cell_type", cell_type)

    def add_sample_disease(self, id: int, disease: Optional[Parameter]) -> Optional[Sample]:
        return self._add_sample_param(id, "disease", disease)

    def add_sample_custom(self, id: int, custom: Optional[Parameter]) -> Optional[Sample]:
        return self._add_sample_param(id, "custom", custom)

    def add_sample_description(self, id: int, description: Optional[str]) -> Optional[Sample]:
        if not description:
            return None
        sample = self.add_sample(id)
        sample.description = description
        return sample

    # ------------------------------------------------------------------
    # assay
    # ------------------------------------------------------------------

    def add_assay(self, id: int, name: Optional[str] = None) -> Assay:
        assay = self._get_or_create(self.assay_map, id, Assay)
        if name is not None:
            assay.name = name
        return assay

    def add_assay_custom(self, id: int, custom: Optional[Parameter]) -> Optional[Assay]:
        if custom is None:
            return None
        assay = self.add_assay(id)
        assay.custom.append(custom)
        return assay

    def add_assay_external_uri(self, id: int, uri: Optional[str]) -> Optional[Assay]:
        if uri is None:
            return None
        assay = self.add_assay(id)
        assay.external_uri = uri
        return assay

    def add_assay_sample(self, id: int, sample: Optional[Sample]) -> Optional[Assay]:
        if sample is None:
            return None
        assay = self.add_assay(id)
        assay.sample_ref = sample
        return assay

    def add_assay_ms_run(self, id: int, ms_run: Optional[MsRun]) -> Optional[Assay]:
        if ms_run is None:
            return None
        assay = self.add_assay(id)
        if ms_run not in assay.ms_run_ref:
            assay.ms_run_ref.append(ms_run)
        return assay

    # ------------------------------------------------------------------
    # study_variable
    # ------------------------------------------------------------------

    def add_study_variable(self, id: int, name: Optional[str] = None) -> StudyVariable:
        study_variable = self._get_or_create(self.study_variable_map, id, StudyVariable)
        if name is not None:
            study_variable.name = name
        return study_variable

    def add_study_variable_assay(self, id: int, assay: Optional[Assay]) -> Optional[StudyVariable]:
        if assay is None:
            return None
        study_variable = self.add_study_variable(id)
        if assay not in study_variable.assay_refs:
            study_variable.assay_refs.append(assay)
        return study_variable

    def add_study_variable_sample(self, id: int, sample: Optional[Sample]) -> Optional[StudyVariable]:
        if sample is None:
            return None
        study_variable = self.add_study_variable(id)
        if sample not in study_variable.sample_refs:
            study_variable.sample_refs.append(sample)
        return study_variable

    def add_study_variable_description(self, id: int, description: Optional[str]) -> Optional[StudyVariable]:
        if not description:
            return None
        study_variable = self.add_study_variable(id)
        study_variable.description = description
        return study_variable

    def add_study_variable_average_function(self, id: int, function: Optional[Parameter]) -> Optional[StudyVariable]:
        if function is None:
            return None
        study_variable = self.add_study_variable(id)
        study_variable.average_function = function
        return study_variable

    def add_study_variable_variation_function(self, id: int, function: Optional[Parameter]) -> Optional[StudyVariable]:
        if function is None:
            return None
        study_variable = self.add_study_variable(id)
        study_variable.variation_function = function
        return study_variable

    # ------------------------------------------------------------------
    # cv, database
    # ------------------------------------------------------------------

    def add_cv(self, id: int) -> CV:
        return self._get_or_create(self.cv_map, id, CV)

    def add_cv_property(self, id: int, attribute: str, value: Optional[str]) -> Optional[CV]:
        if value is None or not hasattr(CV, attribute):
            return None
        cv = self.add_cv(id)
        setattr(cv, attribute, value)
        return cv

    def add_database(self, id: int, param: Optional[Parameter] = None) -> Database:
        database = self._get_or_create(self.database_map, id, Database)
        if param is not None:
            database.param = param
        return database

    def add_database_property(self, id: int, attribute: str, value: Optional[str]) -> Optional[Database]:
        if value is None or not hasattr(Database, attribute):
            return None
        database = self.add_database(id)
        setattr(database, attribute, value)
        return database
