from interference_sim.plugins.interface import FilterPlugin
from interference_sim.models.pod import Pod
from interference_sim.models.node import Node
from interference_sim.models.cluster import ClusterState
from interference_sim.utils.logger import logger
from typing import List, Optional
from concurrent.futures import ThreadPoolExecutor, as_completed

class FilterResourceFit(FilterPlugin):
    def filter(self, pod: Pod, e: ClusterState) -> List[Node]:
        # 单节点检查：CPU / 内存是否足够
        def check_node(node_name: str, node: Node) -> Optional[Node]:
            if e.check_bindable(pod.name, node_name):
                return node
            return None

        if not e.nodes:
            return []

        max_workers = min(10, len(e.nodes))
        results = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_node = {
                executor.submit(check_node, node_name, node): node_name
                for node_name, node in e.nodes.items()
            }
            for future in as_completed(future_to_node):
                node_name = future_to_node[future]
                try:
                    results[node_name] = future.result()
                except Exception as exc:
                    logger.error(f"检查节点 {node_name} 时发生异常: {exc}")

        # 保持节点注册顺序，结果与线程完成顺序无关
        return [results[name] for name in e.nodes if results.get(name) is not None]
