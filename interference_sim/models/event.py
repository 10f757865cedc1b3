
from enum import Enum, auto
from dataclasses import dataclass, field
from interference_sim.models.pod import Pod

class EventType(Enum):
    ARRIVAL = auto()
    COMPLETION = auto()

# events at the same time pop in insertion order
@dataclass(order=True)
class Event:
    time: int
    order: int
    type: EventType = field(compare=False)
    pod: Pod = field(compare=False)
