"""Stable column descriptors for the table records.

A record field declared with ``column_field`` knows the header it is read
from and how its cell is parsed; ``MZTabColumnFactory`` builds the stable
columns of a table from these declarations, in field order.
"""

from dataclasses import Field, field, fields
from typing import Dict, List, Tuple

from mztab_m.constants import BAR

COLUMN_META = "column_field"


def column_field(header: str, parse: str = "string", split_char: str = BAR):
    """Declare a stable column; the value is ``None`` until a cell is read.

    *parse* names the cell check used by the data line parsers, one of
    ``string``, ``string_list``, ``integer``, ``double``, ``double_list``,
    ``boolean``, ``param``, ``param_required``, ``param_list``, ``uri`` or
    ``spectra_ref``.  *split_char* only matters for the list strategies.
    """
    return field(default=None, metadata={
        COLUMN_META: {"header": header, "parse": parse, "split_char": split_char},
    })


def get_column_fields(record_type) -> List[Tuple[Field, Dict[str, str]]]:
    return [(f, f.metadata[COLUMN_META]) for f in fields(record_type) if COLUMN_META in f.metadata]
