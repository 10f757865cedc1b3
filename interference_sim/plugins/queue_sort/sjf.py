from interference_sim.plugins.interface import QueueSortPlugin
from interference_sim.models.cluster import ClusterState
from interference_sim.models.pod import Pod
from typing import List

class QueueSortShortJobFirst(QueueSortPlugin):
    def sort(self, e: ClusterState) -> List[Pod]:
        pending_pods = [e.pods[pod_name] for pod_name in e.pending_pods]
        return sorted(pending_pods, key=lambda p: (p.duration or 0, p.creation_time or 0, p.name))
