from interference_sim.models.pod import Pod
from interference_sim.models.node import Node
from interference_sim.models.cluster import ClusterState
from interference_sim.core.errors import ScoreError
from interference_sim.utils.logger import logger
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional
import random


@dataclass
class NodeScore:
    name: str
    score: int


class QueueSortPlugin:
    def sort(self, e: ClusterState) -> List[Pod]:
        raise NotImplementedError

class FilterPlugin:
    def filter(self, pod: Pod, e: ClusterState) -> List[Node]:
        raise NotImplementedError

class ScorePlugin:
    def name(self) -> str:
        return type(self).__name__

    def score(self, pod: Pod, node_name: str, e: ClusterState) -> int:
        raise NotImplementedError

    def normalize_score(self, pod: Pod, scores: List[NodeScore]) -> None:
        """在所有节点打分完成后调用一次，原地修改分数；默认不做归一化"""
        return None

    def pick(self, pod: Pod, feasible_nodes: List[Node], e: ClusterState) -> Optional[Node]:
        """一个调度周期：并行打分 -> 归一化 -> 选最高分节点（平局随机）"""
        if not feasible_nodes:
            return None

        def _score_single_node(node: Node) -> Optional[int]:
            """
            对单个节点打分，打分失败返回 None，该节点本周期不参与选择
            """
            try:
                return self.score(pod, node.name, e)
            except ScoreError as exc:
                logger.error(f"[{self.name()}] node lookup failed for {node.name}: {exc}")
            except Exception as exc:
                logger.error(f"[{self.name()}] scoring node {node.name} failed: {exc!r}")
            return None

        raw: Dict[str, Optional[int]] = {}
        max_workers = min(10, len(feasible_nodes))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(_score_single_node, node): node
                for node in feasible_nodes
            }
            for future in as_completed(future_map):
                raw[future_map[future].name] = future.result()

        # executor 退出即所有打分完成，此后才允许归一化
        scores = [NodeScore(node.name, raw[node.name])
                  for node in feasible_nodes if raw[node.name] is not None]
        if not scores:
            return None

        self.normalize_score(pod, scores)

        best_score = max(s.score for s in scores)
        best_names = [s.name for s in scores if s.score == best_score]
        best_name = random.choice(best_names)
        return next(node for node in feasible_nodes if node.name == best_name)
