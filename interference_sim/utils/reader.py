from interference_sim.config import DEFAULT_TASK_LABEL
from interference_sim.models.node import Node
from interference_sim.models.pod import Pod
from typing import List, Optional
import pandas as pd

nodes_csv_path = "./data/csv/nodes.csv"
pods_csv_path = "./data/csv/pods.csv"

# nodes csv:
# sn,cpu_milli,memory_mib
# node-0,32000,65536
def get_nodes(path: str = nodes_csv_path, count: Optional[int] = None) -> List[Node]:
    df_nodes = pd.read_csv(path)
    if count is not None:
        df_nodes = df_nodes.head(count)
    nodes: List[Node] = []
    for row in df_nodes.itertuples(index=False):
        nodes.append(Node(
            name=str(row.sn),
            cpu_milli_total=int(row.cpu_milli),
            memory_mib_total=int(row.memory_mib),
        ))
    return nodes

# pods csv (empty task_name -> pod without the task label):
# name,cpu_milli,memory_mib,task_name,creation_time,duration
# pod-00,4000,8192,RNASEQ:FASTQC (1),0,600
def get_pods(path: str = pods_csv_path, count: Optional[int] = None,
             task_label: str = DEFAULT_TASK_LABEL) -> List[Pod]:
    df_pods = pd.read_csv(path, dtype={"task_name": str}, keep_default_na=False)
    if count is not None:
        df_pods = df_pods.head(count)
    pods: List[Pod] = []
    for row in df_pods.itertuples(index=False):
        labels = {task_label: row.task_name} if row.task_name else {}
        pods.append(Pod(
            name=str(row.name),
            cpu_milli=int(row.cpu_milli),
            memory_mib=int(row.memory_mib),
            labels=labels,
            creation_time=int(row.creation_time),
            duration=int(row.duration),
        ))
    return pods
