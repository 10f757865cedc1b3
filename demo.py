import argparse
from interference_sim.core.scheduler import Scheduler
from interference_sim.models.interference import ResourceKind
from interference_sim.plugins.queue_sort.fifo import QueueSortFIFO
from interference_sim.plugins.filter.resource_fit import FilterResourceFit
from interference_sim.plugins.score.interference import ScoreInterference
from interference_sim.utils.reader import get_nodes, get_pods, nodes_csv_path, pods_csv_path
from interference_sim.utils.logger import set_debug
from interference_sim.config import DEFAULT_TASK_LABEL

metrics_dir_path = "./data/metrics"

def build_interference_scheduler(kind: ResourceKind, args) -> Scheduler:
    nodes = get_nodes(args.nodes_csv)
    pods = get_pods(args.pods_csv, task_label=DEFAULT_TASK_LABEL)
    queue_sorter = QueueSortFIFO()
    filter_plugin = FilterResourceFit()
    score_plugin = ScoreInterference(resource_kind=kind, metrics_dir=args.metrics_dir)
    return Scheduler(nodes, pods, queue_sorter, filter_plugin, score_plugin)

def parse_args():
    parser = argparse.ArgumentParser(description="Interference-aware scheduling demo")
    parser.add_argument("--metrics-dir", default=metrics_dir_path)
    parser.add_argument("--nodes-csv", default=nodes_csv_path)
    parser.add_argument("--pods-csv", default=pods_csv_path)
    parser.add_argument("--resource", choices=["cpu", "bio", "all"], default="all")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args()

if __name__ == "__main__":
    args = parse_args()
    if args.debug:
        set_debug(True)

    kinds = list(ResourceKind) if args.resource == "all" else [ResourceKind(args.resource)]
    for kind in kinds:
        print(f"=== {kind.plugin_name} Scheduler ===")
        build_interference_scheduler(kind, args).run()
