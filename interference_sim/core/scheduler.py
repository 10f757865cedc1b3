from interference_sim.models.cluster import ClusterState
from interference_sim.models.pod import Pod, PodStatus
from interference_sim.models.node import Node
from interference_sim.models.event import Event, EventType
from interference_sim.plugins.interface import QueueSortPlugin, FilterPlugin, ScorePlugin
from interference_sim.utils.logger import logger
from collections import Counter
import heapq
from typing import Dict, List

class Scheduler:
    def __init__(
        self,
        nodes: List[Node],
        pods: List[Pod],
        queue_sorter: QueueSortPlugin,
        filter_plugin: FilterPlugin,
        score_plugin: ScorePlugin,
    ):
        self.nodes = nodes
        self.all_pods = pods
        self.queue_sorter = queue_sorter
        self.filter_plugin = filter_plugin
        self.score_plugin = score_plugin

        self.cluster = ClusterState()
        self.cluster.add_nodes(nodes)

        self.current_time: int = 0
        self.placements: Dict[str, str] = {}
        self._event_heap: List[Event] = []
        self._event_seq: int = 0  # stable order for events at the same time

    def _push_event(self, time: int, etype: EventType, pod: Pod):
        self._event_seq += 1
        heapq.heappush(self._event_heap, Event(time=time, order=self._event_seq, type=etype, pod=pod))

    def initialize_events(self):
        for p in self.all_pods:
            self._push_event(p.creation_time or 0, EventType.ARRIVAL, p)
        self.current_time = 0

    def _try_schedule_loop(self) -> bool:
        """Try to place every pending pod once.

        Returns whether at least one pod was bound in this pass.
        """
        scheduled_any = False

        queue = self.queue_sorter.sort(self.cluster)

        for pod in queue:
            feas = self.filter_plugin.filter(pod, e=self.cluster)
            if not feas:
                continue

            # one scheduling cycle: score + normalize over the feasible nodes
            target = self.score_plugin.pick(pod, feas, self.cluster)
            if target is None:
                continue

            self.cluster.bind(pod.name, target.name, self.current_time)
            self.placements[pod.name] = target.name
            self._push_event(pod.scheduled_time + (pod.duration or 0), EventType.COMPLETION, pod)
            logger.debug(f'Time {self.current_time}: Pod {pod.name} scheduled to Node {target.name}.')
            scheduled_any = True

        return scheduled_any

    def run(self):
        self.initialize_events()

        while self._event_heap:
            ev = heapq.heappop(self._event_heap)
            self.current_time = ev.time

            if ev.type == EventType.ARRIVAL:
                assert ev.pod.status == PodStatus.Pending
                self.cluster.add_pod(ev.pod)
            elif ev.type == EventType.COMPLETION:
                assert ev.pod.status == PodStatus.Running
                self.cluster.unbind(ev.pod.name, self.current_time)

            scheduled = True
            while scheduled:
                scheduled = self._try_schedule_loop()

        self.report()

    def report(self):
        makespan = self.current_time
        completed_pods_count = len(self.cluster.completed_pods)
        cpu_used_time = 0
        mem_used_time = 0
        for pod_name in self.cluster.completed_pods:
            pod = self.cluster.get_pod(pod_name)
            cpu_used_time += pod.cpu_milli * (pod.duration or 0)
            mem_used_time += pod.memory_mib * (pod.duration or 0)
        total_cpu_time = makespan * self.cluster.get_total_cpu_milli()
        total_mem_time = makespan * self.cluster.get_total_memory_mib()
        cpu_utilization = cpu_used_time / total_cpu_time if total_cpu_time > 0 else 0
        mem_utilization = mem_used_time / total_mem_time if total_mem_time > 0 else 0
        print(f"Score plugin: {self.score_plugin.name()}")
        print(f"Total makespan: {makespan} seconds")
        print(f"Scheduling {len(self.all_pods)} pods in {len(self.nodes)} nodes")
        print(f"Total completed pods: {completed_pods_count} / {len(self.all_pods)}")
        print(f"CPU Utilization: {cpu_utilization*100:.2f}%")
        print(f"Memory Utilization: {mem_utilization*100:.2f}%")
        for node_name, count in sorted(Counter(self.placements.values()).items()):
            print(f"  {node_name}: {count} pods")
        print()
