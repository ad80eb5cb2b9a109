"""Stateless codecs between mzTab cell text and typed values.

Scalar parsers return ``None`` when the text is absent or unparseable.
List parsers return ``[]`` for absent text and ``None`` when any item fails,
so that a declared empty list is never confused with a failed one.
"""

import logging
import math
import re
from typing import Callable, Dict, List, Optional, TypeVar
from urllib.parse import urlparse

from mztab_m.constants import BAR, CALCULATE_ERROR, COLON, INFINITY, NULL
from mztab_m.models.metadata import (IndexedElement, MsRun, Parameter, PublicationItem,
                                     PublicationType, SpectraRef)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DECIMAL = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?\d+")
_PARAM_SPLIT = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')
_SPECTRA_REF = re.compile(r"ms_run\[(\d+)\]:(.*)")
_MZTAB_VERSION = re.compile(r"(?P<major>2)\.(?P<minor>\d)\.(?P<micro>\d)-(?P<profile>M)")
_EMAIL = re.compile(r"[_A-Za-z0-9-]+(\.[_A-Za-z0-9-']+)*@[A-Za-z0-9]+(?:[-.][A-Za-z0-9]+)*(\.[A-Za-z]{2,})")
_REF_SPLIT = re.compile(r"[|,]")

POSITIVE_INFINITY_TOKENS = (INFINITY, "Infinity", "+Infinity")


def is_empty(text: Optional[str]) -> bool:
    return text is None or text.strip() == ""


def parse_string(target: Optional[str]) -> Optional[str]:
    if target is None:
        return None
    target = target.strip()
    if target == "" or target.lower() == NULL:
        return None
    return target


def remove_double_quotes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    stripped = value.replace('"', "")
    count = len(value) - len(stripped)
    if count > 2:
        logger.warning(f"Nested double quotes in value, {count} occurrences have been removed.")
    return stripped.strip() or None


def parse_integer(target: Optional[str]) -> Optional[int]:
    target = parse_string(target)
    if target is None or not _INTEGER.fullmatch(target):
        return None
    return int(target)


def parse_double(target: Optional[str]) -> Optional[float]:
    """Parse a number; ``NaN`` and ``INF`` map to IEEE NaN and +inf.

    Negative infinity has no token and is rejected.
    """
    target = parse_string(target)
    if target is None:
        return None
    if target == CALCULATE_ERROR:
        return math.nan
    if target in POSITIVE_INFINITY_TOKENS:
        return math.inf
    if not _DECIMAL.fullmatch(target):
        return None
    value = float(target)
    if value == -math.inf:
        return None
    return value


def print_double(value: Optional[float]) -> str:
    if value is None:
        return NULL
    if math.isnan(value):
        return CALCULATE_ERROR
    if value == math.inf:
        return INFINITY
    return repr(float(value))


def split_list(split_char: str, target: Optional[str]) -> List[str]:
    target = parse_string(target)
    if target is None:
        return []
    return [item.strip() for item in re.split(re.escape(split_char), target)]


def _parse_all(items: List[str], parse_item: Callable[[str], Optional[T]]) -> Optional[List[T]]:
    result = []
    for item in items:
        value = parse_item(item)
        if value is None:
            return None
        result.append(value)
    return result


def parse_string_list(split_char: str, target: Optional[str]) -> Optional[List[str]]:
    return _parse_all(split_list(split_char, target), parse_string)


def parse_double_list(target: Optional[str], split_char: str = BAR) -> Optional[List[float]]:
    return _parse_all(split_list(split_char, target), parse_double)


def parse_param(target: Optional[str]) -> Optional[Parameter]:
    """Parse ``[cv label, accession, name, value]``.

    Label and accession may both be empty for a user parameter.  The name may
    only be empty when a value is given.
    """
    target = parse_string(target)
    if target is None:
        return None
    start, end = target.find("["), target.rfind("]")
    if start < 0 or end < start:
        return None
    tokens = _PARAM_SPLIT.split(target[start + 1:end])
    if len(tokens) != 4:
        return None

    cv_label = tokens[0].strip() or None
    cv_accession = tokens[1].strip() or None
    name = tokens[2].strip()
    if '"' in name:
        name = remove_double_quotes(name)
    value = tokens[3].strip()
    if '"' in value:
        value = remove_double_quotes(value)
    name = name or None
    value = value or None

    if name is None and value is None:
        return None
    return Parameter(cv_label=cv_label, cv_accession=cv_accession, name=name, value=value)


def parse_param_list(target: Optional[str]) -> Optional[List[Parameter]]:
    return _parse_all(split_list(BAR, target), parse_param)


def parse_indexed_element(target: Optional[str], element: str) -> Optional[IndexedElement]:
    target = parse_string(target)
    if target is None:
        return None
    match = re.fullmatch(re.escape(str(element)) + r"\[(\d+)\]", target)
    if match is None:
        return None
    return IndexedElement(element=str(element), id=int(match.group(1)))


def parse_ref_list(target: Optional[str], element: str) -> Optional[List[IndexedElement]]:
    target = parse_string(target)
    if target is None:
        return []
    items = [item.strip() for item in _REF_SPLIT.split(target)]
    return _parse_all(items, lambda item: parse_indexed_element(item, element))


def parse_spectra_ref_list(ms_runs: Dict[int, MsRun], target: Optional[str]) -> Optional[List[SpectraRef]]:
    """Parse ``ms_run[n]:reference`` items against the currently known ms runs.

    Items without the ``ms_run[n]:`` form are skipped; an unknown ms run
    invalidates the whole list.
    """
    refs = []
    for item in split_list(BAR, target):
        match = _SPECTRA_REF.fullmatch(item)
        if match is None:
            continue
        ms_run = ms_runs.get(int(match.group(1)))
        if ms_run is None:
            return None
        refs.append(SpectraRef(ms_run=ms_run, reference=match.group(2)))
    return refs


def parse_publication_items(target: Optional[str]) -> Optional[List[PublicationItem]]:
    def parse_item(item: str) -> Optional[PublicationItem]:
        item = parse_string(item)
        if item is None or COLON not in item:
            return None
        prefix, accession = item.split(COLON, 1)
        pub_type = PublicationType.parse(prefix.strip())
        accession = accession.strip()
        if pub_type is None or not accession:
            return None
        return PublicationItem(type=pub_type, accession=accession)

    return _parse_all(split_list(BAR, target), parse_item)


def parse_email(target: Optional[str]) -> Optional[str]:
    target = parse_string(target)
    if target is None or not _EMAIL.search(target):
        return None
    return target


def parse_mztab_version(target: Optional[str]) -> Optional[str]:
    target = parse_string(target)
    if target is None or not _MZTAB_VERSION.fullmatch(target):
        return None
    return target


def parse_url(target: Optional[str]) -> Optional[str]:
    target = parse_string(target)
    if target is None or any(c.isspace() for c in target):
        return None
    parsed = urlparse(target)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        return None
    return target


def parse_uri(target: Optional[str]) -> Optional[str]:
    target = parse_string(target)
    if target is None or any(c.isspace() for c in target):
        return None
    try:
        urlparse(target)
    except ValueError:
        return None
    return target


def parse_mz_boolean(target: Optional[str]) -> Optional[bool]:
    target = parse_string(target)
    if target == "1":
        return True
    if target == "0":
        return False
    return None


def print_mz_boolean(value: Optional[bool]) -> str:
    if value is None:
        return NULL
    return "1" if value else "0"


def print_list(values: Optional[List], split_char: str = BAR) -> str:
    if not values:
        return NULL
    return split_char.join(print_double(v) if isinstance(v, float) else str(v) for v in values)
