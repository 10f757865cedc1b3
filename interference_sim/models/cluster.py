from typing import Dict, List, Optional, Set

from interference_sim.core.errors import NodeNotFoundError
from interference_sim.models.node import Node
from interference_sim.models.pod import Pod, PodStatus


class ClusterState:
    """In-memory store of nodes, pods and bindings, standing in for the scheduler's snapshot."""

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.pods: Dict[str, Pod] = {}
        self.node_pods: Dict[str, Set[str]] = {}
        self.pod_node: Dict[str, str] = {}

        # pod status indices
        self.pending_pods: Set[str] = set()
        self.running_pods: Set[str] = set()
        self.completed_pods: Set[str] = set()

    # --- basic CRUD ---
    def add_node(self, node: Node) -> None:
        self.nodes[node.name] = node
        self.node_pods.setdefault(node.name, set())

    def add_nodes(self, nodes: List[Node]) -> None:
        for node in nodes:
            self.add_node(node)

    def remove_node(self, node_name: str) -> None:
        if node_name not in self.nodes:
            raise NodeNotFoundError(node_name)
        if self.node_pods[node_name]:
            raise ValueError(f"node {node_name} still has pods bound")
        del self.nodes[node_name]
        del self.node_pods[node_name]

    def add_pod(self, pod: Pod) -> None:
        self.pods[pod.name] = pod
        self.pending_pods.add(pod.name)

    def add_pods(self, pods: List[Pod]) -> None:
        for pod in pods:
            self.add_pod(pod)

    # --- queries ---
    def get_node(self, node_name: str) -> Node:
        return self.nodes[node_name]

    def get_pod(self, pod_name: str) -> Pod:
        return self.pods[pod_name]

    def pods_on_node(self, node_name: str) -> Set[str]:
        return self.node_pods[node_name]

    def node_of_pod(self, pod_name: str) -> Optional[str]:
        return self.pod_node.get(pod_name)

    def lookup_node(self, node_name: str) -> List[Dict[str, str]]:
        """Label sets of the pods currently bound to ``node_name``.

        Raises NodeNotFoundError when the node is not (or no longer) part of
        the cluster. The returned dicts are copies.
        """
        pod_names = self.node_pods.get(node_name)
        if pod_names is None:
            raise NodeNotFoundError(node_name)
        return [dict(self.pods[name].labels) for name in sorted(pod_names)]

    def check_bindable(self, pod_name: str, node_name: str) -> bool:
        pod = self.pods[pod_name]
        node = self.nodes[node_name]
        return node.cpu_milli_free >= pod.cpu_milli and node.memory_mib_free >= pod.memory_mib

    # --- bind / unbind ---
    def bind(self, pod_name: str, node_name: str, current_time: Optional[int] = None) -> None:
        pod = self.pods[pod_name]
        node = self.nodes[node_name]

        if pod.bound_node is not None:
            raise ValueError("pod already bound")

        if not self.check_bindable(pod_name, node_name):
            raise ValueError("insufficient cpu/mem")

        node.cpu_milli_free -= pod.cpu_milli
        node.memory_mib_free -= pod.memory_mib

        pod.bound_node = node_name
        pod.status = PodStatus.Running
        pod.scheduled_time = current_time

        self.node_pods[node_name].add(pod_name)
        self.pod_node[pod_name] = node_name

        self.pending_pods.discard(pod_name)
        self.running_pods.add(pod_name)

    def unbind(self, pod_name: str, current_time: Optional[int] = None) -> None:
        pod = self.pods[pod_name]
        node_name = pod.bound_node
        if node_name is None:
            return

        node = self.nodes[node_name]
        node.cpu_milli_free += pod.cpu_milli
        node.memory_mib_free += pod.memory_mib

        self.node_pods[node_name].remove(pod_name)
        self.pod_node.pop(pod_name, None)

        pod.bound_node = None
        pod.status = PodStatus.Completed
        pod.completion_time = current_time

        self.running_pods.discard(pod_name)
        self.completed_pods.add(pod_name)

    def get_total_cpu_milli(self) -> int:
        return sum(node.cpu_milli_total for node in self.nodes.values())

    def get_total_memory_mib(self) -> int:
        return sum(node.memory_mib_total for node in self.nodes.values())
