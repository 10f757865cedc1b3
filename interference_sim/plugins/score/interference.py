from interference_sim.plugins.interface import ScorePlugin, NodeScore
from interference_sim.models.pod import Pod
from interference_sim.models.cluster import ClusterState
from interference_sim.models.interference import (
    InterferenceTable,
    ResourceKind,
    round_half_away_from_zero,
    sanitize_task_name,
)
from interference_sim.core.errors import UnsupportedResourceKindError
from interference_sim.config import InterferenceConfig
from interference_sim.utils.loader import load_interference_table
from interference_sim.utils.logger import logger
import numpy as np
from typing import List, Optional, Union


class ScoreInterference(ScorePlugin):
    """Favors nodes whose co-resident tasks are known to interfere the least.

    Per node the interference coefficients of all running tasks (identified
    by the task label) are summed; after all nodes are scored the sums are
    inverted and rescaled so that the least interfering node gets
    ``max_node_score`` and the most interfering one gets 0.
    """

    def __init__(
        self,
        resource_kind: Union[ResourceKind, str, None] = None,
        metrics_dir: Optional[str] = None,
        task_label: Optional[str] = None,
        table: Optional[InterferenceTable] = None,
        max_node_score: Optional[int] = None,
        config: Optional[InterferenceConfig] = None,
    ):
        config = config or InterferenceConfig.from_env()
        self.resource_kind = ResourceKind.parse(resource_kind or config.resource_kind)
        self.task_label = task_label or config.task_label
        self.max_node_score = max_node_score if max_node_score is not None else config.max_node_score

        if table is None:
            # LoadError propagates: a plugin without a table must not be registered
            table = load_interference_table(metrics_dir or config.metrics_dir, self.resource_kind)
        elif table.resource_kind != self.resource_kind:
            raise UnsupportedResourceKindError(table.resource_kind.value)
        self.table = table

    def name(self) -> str:
        return self.resource_kind.plugin_name

    def score(self, pod: Pod, node_name: str, e: ClusterState) -> int:
        # NodeNotFoundError propagates to the caller
        workloads = e.lookup_node(node_name)

        iscore = 0.0
        logger.debug(f"[{self.name()}] collecting scores on node {node_name}")
        for labels in workloads:
            task_name = labels.get(self.task_label)
            if task_name is None:
                logger.debug(f"[{self.name()}] skipping...")
                continue
            key = sanitize_task_name(task_name)
            metric = self.table.coefficient(key)
            logger.debug(f"[{self.name()}] interference map key {key}: {metric}")
            if metric is not None:
                iscore += metric

        score = round_half_away_from_zero(iscore)
        logger.debug(f"[{self.name()}] score for node {node_name} when scheduling {pod.name}: {score}")
        return score

    def normalize_score(self, pod: Pod, scores: List[NodeScore]) -> None:
        if not scores:
            return
        # object dtype keeps Python ints: raw scores are unbounded, int64 would wrap
        raw = np.array([int(s.score) for s in scores], dtype=object)
        higher_score = raw.max()
        if higher_score > 0:
            scaled = raw * self.max_node_score
            # integer division truncating toward zero; floor division alone
            # would round negative coefficients the other way
            quotient = np.abs(scaled) // higher_score
            truncated = np.where(scaled < 0, -quotient, quotient)
            final = self.max_node_score - truncated
            for s, value in zip(scores, final.tolist()):
                s.score = value

        logger.debug(f"[{self.name()}] Nodes final score: {[(s.name, s.score) for s in scores]}")
