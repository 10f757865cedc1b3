from dataclasses import dataclass, field
from typing import Dict, Optional

from enum import Enum
class PodStatus(str, Enum):
    Pending = "Pending"
    Running = "Running"
    Completed = "Completed"

@dataclass
class Pod:
    name: str
    cpu_milli: int
    memory_mib: int
    # workload identity, e.g. {"nextflow.io/taskName": "RNASEQ:ALIGN (1)"}
    labels: Dict[str, str] = field(default_factory=dict)

    bound_node: Optional[str] = None

    creation_time: Optional[int] = None
    duration: Optional[int] = None
    scheduled_time: Optional[int] = None
    completion_time: Optional[int] = None

    status: PodStatus = PodStatus.Pending
