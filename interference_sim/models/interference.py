import math
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Iterator, Optional, Union

from interference_sim.core.errors import UnsupportedResourceKindError


def sanitize_task_name(task_name: str) -> str:
    """Map a free-form task name onto the file-name-safe key space of the metrics directory."""
    key = task_name.replace(" ", "")
    key = key.replace(":", ".")
    key = key.replace("(", ".")
    key = key.replace(")", ".")
    return key


def round_half_away_from_zero(x: float) -> int:
    # round() would give banker's rounding: 2.5 -> 2
    if x < 0:
        return -math.floor(-x + 0.5)
    return math.floor(x + 0.5)


class ResourceKind(str, Enum):
    CPU = "cpu"
    BIO = "bio"

    @property
    def record_field(self) -> str:
        # field of InterferenceRecord holding the coefficient for this kind
        return _RECORD_FIELDS[self]

    @property
    def plugin_name(self) -> str:
        return "Interference" + self.value.upper()

    @classmethod
    def parse(cls, value: Union["ResourceKind", str]) -> "ResourceKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedResourceKindError(value) from None


_RECORD_FIELDS = {
    ResourceKind.CPU: "cpu",
    ResourceKind.BIO: "blk",
}


@dataclass(frozen=True)
class InterferenceRecord:
    """Measured interference profile of one task type, one value per resource dimension."""
    cpu: float = 0.0
    llc: float = 0.0
    mem: float = 0.0
    blk: float = 0.0
    netpr: float = 0.0
    netbw: float = 0.0

    @classmethod
    def from_dict(cls, data) -> "InterferenceRecord":
        """Build a record from a decoded JSON document.

        Unknown keys are ignored and ``null`` counts as 0.0, for a field as well
        as for the whole document. Anything else that is not a JSON object, or
        a recognized field that is not a finite number, raises ValueError.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        values: Dict[str, float] = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if raw is None:
                continue
            # bool is an int subclass, but true/false is not a measurement
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"field {f.name!r}: expected a number, got {raw!r}")
            try:
                value = float(raw)
            except OverflowError:
                raise ValueError(f"field {f.name!r}: number out of range") from None
            if not math.isfinite(value):
                raise ValueError(f"field {f.name!r}: expected a finite number, got {raw!r}")
            values[f.name] = value
        return cls(**values)

    def value_for(self, kind: ResourceKind) -> float:
        return getattr(self, ResourceKind.parse(kind).record_field)


class InterferenceTable(Mapping):
    """Read-only task key -> interference coefficient map for one resource kind.

    The table is built once and never changes afterwards, so concurrent
    lookups from scoring threads need no locking.
    """

    def __init__(self, resource_kind: ResourceKind, coefficients: Dict[str, float]):
        self.resource_kind = ResourceKind.parse(resource_kind)
        self._coefficients = dict(coefficients)

    def __getitem__(self, key: str) -> float:
        return self._coefficients[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._coefficients)

    def __len__(self) -> int:
        return len(self._coefficients)

    def coefficient(self, key: str) -> Optional[float]:
        return self._coefficients.get(key)

    def __repr__(self) -> str:
        return f"InterferenceTable({self.resource_kind.value}, {len(self)} entries)"
