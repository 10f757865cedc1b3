"""Runtime configuration of the interference-aware score plugin."""

import os
from dataclasses import dataclass

DEFAULT_METRICS_DIR = "/etc/interferencemetrics"
DEFAULT_TASK_LABEL = "nextflow.io/taskName"
DEFAULT_RESOURCE_KIND = "cpu"

# upper bound of the host's node score range
MAX_NODE_SCORE = 100


@dataclass
class InterferenceConfig:
    # directory holding one JSON measurement file per task type
    metrics_dir: str = DEFAULT_METRICS_DIR
    # "cpu" or "bio"
    resource_kind: str = DEFAULT_RESOURCE_KIND
    # pod label carrying the workload task identity
    task_label: str = DEFAULT_TASK_LABEL
    max_node_score: int = MAX_NODE_SCORE

    @classmethod
    def from_env(cls) -> "InterferenceConfig":
        return cls(
            metrics_dir=os.getenv("INTERFERENCE_METRICS_DIR", DEFAULT_METRICS_DIR),
            resource_kind=os.getenv("INTERFERENCE_RESOURCE", DEFAULT_RESOURCE_KIND),
            task_label=os.getenv("INTERFERENCE_TASK_LABEL", DEFAULT_TASK_LABEL),
        )
