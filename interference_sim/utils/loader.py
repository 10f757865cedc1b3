import json
import os
from typing import Dict, Union

from interference_sim.core.errors import (
    DirectoryUnreadableError,
    EmptyTableError,
    MalformedRecordError,
)
from interference_sim.models.interference import (
    InterferenceRecord,
    InterferenceTable,
    ResourceKind,
)
from interference_sim.utils.logger import logger

# mounted config volumes link their current payload through this entry
RESERVED_ENTRY = "..data"


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are not valid JSON numbers
    raise ValueError(f"invalid number {name}")


def read_interference_record(file_path: str) -> InterferenceRecord:
    with open(file_path, "rb") as f:
        content = f.read()
    return InterferenceRecord.from_dict(json.loads(content, parse_constant=_reject_constant))


def load_interference_table(dir_path: str, resource_kind: Union[ResourceKind, str]) -> InterferenceTable:
    """Build the coefficient table for one resource kind from a metrics directory.

    Every regular file in ``dir_path`` is one task type: the file name is the
    (already sanitized) task key and the content a JSON interference record.
    Any unreadable or malformed file aborts the whole load, so callers never
    see a partially populated table.
    """
    kind = ResourceKind.parse(resource_kind)

    try:
        with os.scandir(dir_path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryUnreadableError(dir_path, exc) from exc

    coefficients: Dict[str, float] = {}
    for entry in entries:
        # is_file() follows symlinks: linked files count, linked directories don't
        if entry.name == RESERVED_ENTRY or not entry.is_file():
            continue
        try:
            record = read_interference_record(entry.path)
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise MalformedRecordError(entry.name, exc) from exc

        coefficients[entry.name] = record.value_for(kind)
        logger.debug(f"[{kind.plugin_name}] loaded {entry.name}: {coefficients[entry.name]}")

    if not coefficients:
        raise EmptyTableError(dir_path)

    logger.info(f"[{kind.plugin_name}] loaded {len(coefficients)} interference records from {dir_path}")
    return InterferenceTable(kind, coefficients)
