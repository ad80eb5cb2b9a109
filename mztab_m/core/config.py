"""Process-wide parser settings.

Defaults are compiled in and can be overridden from a YAML file (or an
already-loaded dict) once at start-up.  Nothing here is read from the
environment; callers pass the values explicitly into ``MZTabErrorList``.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Union

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MZTabProperties:
    level: str = "Error"          # "Info" | "Warn" | "Error"
    max_error_count: int = 300
    encoding: str = "UTF-8"


MZTAB_EXCEPTION_MESSAGE = (
    "There exist errors in the metadata section or small_molecule/small_molecule_feature/"
    "small_molecule_evidence header section! Validation will stop, and ignore data table check!"
)
MZTAB_ERROR_OVERFLOW_MESSAGE = "System error queue overflow!"

DEFAULT_PROPERTIES = MZTabProperties()


def load_one_yaml(yaml_file) -> dict:
    with open(yaml_file, "r") as file:
        return yaml.safe_load(file) or {}


def load_properties(yaml_file_or_dict: Union[str, dict, None] = None) -> MZTabProperties:
    """Return ``MZTabProperties`` with the given overrides applied.

    *yaml_file_or_dict* may be a path to a YAML file or a dict.  Keys may be
    nested under a top-level ``mztab`` node.
    """
    if yaml_file_or_dict is None:
        return DEFAULT_PROPERTIES
    if not isinstance(yaml_file_or_dict, dict):
        yaml_file_or_dict = load_one_yaml(yaml_file_or_dict)
    config = yaml_file_or_dict.get("mztab", yaml_file_or_dict)

    known = {f.name for f in fields(MZTabProperties)}
    unknown = set(config.keys()) - known
    if unknown:
        raise ValueError(f"Unknown mzTab properties: {sorted(unknown)}")

    overrides = dict(config)
    if "max_error_count" in overrides:
        overrides["max_error_count"] = int(overrides["max_error_count"])
    properties = replace(DEFAULT_PROPERTIES, **overrides)
    logger.debug(f"Loaded {properties}")
    return properties
