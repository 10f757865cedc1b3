import json
import random

import pytest

from interference_sim.config import InterferenceConfig
from interference_sim.core.errors import (
    DirectoryUnreadableError,
    EmptyTableError,
    MalformedRecordError,
    NodeNotFoundError,
    UnsupportedResourceKindError,
)
from interference_sim.models.cluster import ClusterState
from interference_sim.models.interference import InterferenceTable, ResourceKind
from interference_sim.models.node import Node
from interference_sim.models.pod import Pod
from interference_sim.plugins.interface import NodeScore, ScorePlugin
from interference_sim.plugins.score.interference import ScoreInterference

TASK = "nextflow.io/taskName"


def make_table(kind=ResourceKind.CPU, **coefficients):
    return InterferenceTable(kind, coefficients)


def example_table():
    return InterferenceTable(ResourceKind.CPU, {"wf.step.A.": 10.0, "wf.step.B.": 4.0})


def example_cluster() -> ClusterState:
    e = ClusterState()
    for name in ["X", "Y", "Z"]:
        e.add_node(Node(name=name, cpu_milli_total=16000, memory_mib_total=32768))
    e.add_pods([
        Pod(name="x1", cpu_milli=100, memory_mib=64, labels={TASK: "wf:step (A)"}),
        Pod(name="x2", cpu_milli=100, memory_mib=64, labels={TASK: "wf:step (B)"}),
        Pod(name="y1", cpu_milli=100, memory_mib=64, labels={TASK: "wf:step (A)"}),
        Pod(name="z1", cpu_milli=100, memory_mib=64, labels={"app": "web"}),
    ])
    e.bind("x1", "X")
    e.bind("x2", "X")
    e.bind("y1", "Y")
    e.bind("z1", "Z")
    return e


def incoming_pod() -> Pod:
    return Pod(name="incoming", cpu_milli=100, memory_mib=64, labels={TASK: "wf:step (A)"})


def test_name_follows_resource_kind():
    assert ScoreInterference("cpu", table=make_table()).name() == "InterferenceCPU"
    assert ScoreInterference("bio", table=make_table(ResourceKind.BIO)).name() == "InterferenceBIO"


def test_score_sums_coefficients_of_co_resident_tasks():
    e = example_cluster()
    scorer = ScoreInterference("cpu", table=example_table())
    pod = incoming_pod()

    assert scorer.score(pod, "X", e) == 14
    assert scorer.score(pod, "Y", e) == 10
    assert scorer.score(pod, "Z", e) == 0


def test_score_is_idempotent_for_unchanged_node():
    e = example_cluster()
    scorer = ScoreInterference("cpu", table=example_table())
    pod = incoming_pod()
    assert [scorer.score(pod, "X", e) for _ in range(3)] == [14, 14, 14]


def test_score_skips_unlabeled_and_unknown_tasks():
    e = ClusterState()
    e.add_node(Node(name="n1", cpu_milli_total=16000, memory_mib_total=32768))
    e.add_pods([
        Pod(name="p1", cpu_milli=100, memory_mib=64),
        Pod(name="p2", cpu_milli=100, memory_mib=64, labels={TASK: "unknown:task"}),
        Pod(name="p3", cpu_milli=100, memory_mib=64, labels={"taskName": "wf:step (A)"}),
    ])
    for name in ["p1", "p2", "p3"]:
        e.bind(name, "n1")

    scorer = ScoreInterference("cpu", table=example_table())
    assert scorer.score(incoming_pod(), "n1", e) == 0


def test_score_uses_configured_task_label():
    e = ClusterState()
    e.add_node(Node(name="n1", cpu_milli_total=16000, memory_mib_total=32768))
    e.add_pod(Pod(name="p1", cpu_milli=100, memory_mib=64, labels={"task": "wf:step (B)"}))
    e.bind("p1", "n1")

    scorer = ScoreInterference("cpu", table=example_table(), task_label="task")
    assert scorer.score(incoming_pod(), "n1", e) == 4


def test_score_rounds_half_away_from_zero():
    e = ClusterState()
    e.add_node(Node(name="n1", cpu_milli_total=16000, memory_mib_total=32768))
    e.add_node(Node(name="n2", cpu_milli_total=16000, memory_mib_total=32768))
    e.add_pod(Pod(name="p1", cpu_milli=100, memory_mib=64, labels={TASK: "half"}))
    e.add_pod(Pod(name="p2", cpu_milli=100, memory_mib=64, labels={TASK: "negative"}))
    e.bind("p1", "n1")
    e.bind("p2", "n2")

    scorer = ScoreInterference("cpu", table=make_table(half=2.5, negative=-2.5))
    assert scorer.score(incoming_pod(), "n1", e) == 3
    assert scorer.score(incoming_pod(), "n2", e) == -3


def test_score_unknown_node_raises_node_not_found():
    scorer = ScoreInterference("cpu", table=example_table())
    with pytest.raises(NodeNotFoundError):
        scorer.score(incoming_pod(), "ghost", example_cluster())


def test_normalize_inverts_and_rescales():
    scorer = ScoreInterference("cpu", table=example_table())
    scores = [NodeScore("X", 14), NodeScore("Y", 10), NodeScore("Z", 0)]
    scorer.normalize_score(incoming_pod(), scores)
    assert [(s.name, s.score) for s in scores] == [("X", 0), ("Y", 29), ("Z", 100)]


def test_normalize_leaves_scores_without_interference_unchanged():
    scorer = ScoreInterference("cpu", table=example_table())
    scores = [NodeScore("a", 0), NodeScore("b", 0)]
    scorer.normalize_score(incoming_pod(), scores)
    assert [s.score for s in scores] == [0, 0]

    negative = [NodeScore("a", -3), NodeScore("b", -7), NodeScore("c", 0)]
    scorer.normalize_score(incoming_pod(), negative)
    assert [s.score for s in negative] == [-3, -7, 0]


def test_normalize_empty_list_is_noop():
    scorer = ScoreInterference("cpu", table=example_table())
    scores = []
    scorer.normalize_score(incoming_pod(), scores)
    assert scores == []


def test_normalize_uses_true_maximum_with_negative_scores():
    scorer = ScoreInterference("cpu", table=example_table())
    scores = [NodeScore("a", -3), NodeScore("b", 7), NodeScore("c", 0)]
    scorer.normalize_score(incoming_pod(), scores)
    # -300 / 7 truncates toward zero to -42
    assert [s.score for s in scores] == [142, 0, 100]


def test_normalize_respects_max_node_score():
    scorer = ScoreInterference("cpu", table=example_table(), max_node_score=10)
    scores = [NodeScore("a", 3), NodeScore("b", 1), NodeScore("c", 0)]
    scorer.normalize_score(incoming_pod(), scores)
    assert [s.score for s in scores] == [0, 7, 10]


def test_normalize_is_order_independent():
    scorer = ScoreInterference("cpu", table=example_table())
    raw = {"a": 14, "b": 10, "c": 0, "d": 3, "e": 14}
    expected = {}
    ordered = [NodeScore(name, score) for name, score in raw.items()]
    scorer.normalize_score(incoming_pod(), ordered)
    for s in ordered:
        expected[s.name] = s.score

    rng = random.Random(7)
    for _ in range(5):
        names = list(raw)
        rng.shuffle(names)
        shuffled = [NodeScore(name, raw[name]) for name in names]
        scorer.normalize_score(incoming_pod(), shuffled)
        assert {s.name: s.score for s in shuffled} == expected
    assert expected["a"] == 0 and expected["e"] == 0 and expected["c"] == 100


def test_pick_prefers_least_interference():
    e = example_cluster()
    scorer = ScoreInterference("cpu", table=example_table())
    nodes = [e.get_node(name) for name in ["X", "Y", "Z"]]
    assert scorer.pick(incoming_pod(), nodes, e).name == "Z"


def test_pick_excludes_nodes_that_failed_lookup():
    e = example_cluster()
    scorer = ScoreInterference("cpu", table=example_table())
    ghost = Node(name="ghost", cpu_milli_total=16000, memory_mib_total=32768)
    nodes = [e.get_node("X"), ghost, e.get_node("Y")]
    assert scorer.pick(incoming_pod(), nodes, e).name == "Y"
    assert scorer.pick(incoming_pod(), [ghost], e) is None
    assert scorer.pick(incoming_pod(), [], e) is None


def test_pick_normalizes_once_after_all_nodes_scored():
    class RecordingScore(ScorePlugin):
        def __init__(self):
            self.scored = []
            self.normalized = []

        def score(self, pod, node_name, e):
            self.scored.append(node_name)
            return {"n1": 5, "n2": 1}[node_name]

        def normalize_score(self, pod, scores):
            self.normalized.append((sorted(self.scored), [(s.name, s.score) for s in scores]))
            for s in scores:
                s.score = -s.score

    e = ClusterState()
    nodes = [Node(name="n1", cpu_milli_total=1, memory_mib_total=1),
             Node(name="n2", cpu_milli_total=1, memory_mib_total=1)]
    e.add_nodes(nodes)

    plugin = RecordingScore()
    assert plugin.pick(incoming_pod(), nodes, e).name == "n2"
    assert plugin.normalized == [(["n1", "n2"], [("n1", 5), ("n2", 1)])]


def test_load_from_metrics_dir(tmp_path):
    (tmp_path / "wf.step.A.").write_text(json.dumps({"cpu": 10.0, "blk": 2.0}))
    (tmp_path / "wf.step.B.").write_text(json.dumps({"cpu": 4.0, "blk": 5.0}))
    e = example_cluster()

    cpu = ScoreInterference("cpu", metrics_dir=str(tmp_path))
    bio = ScoreInterference("bio", metrics_dir=str(tmp_path))
    assert cpu.score(incoming_pod(), "X", e) == 14
    assert bio.score(incoming_pod(), "X", e) == 7


def test_defaults_come_from_config(tmp_path):
    (tmp_path / "wf.step.A.").write_text(json.dumps({"blk": 3.0}))
    config = InterferenceConfig(metrics_dir=str(tmp_path), resource_kind="bio", task_label="task")
    scorer = ScoreInterference(config=config)
    assert scorer.resource_kind is ResourceKind.BIO
    assert scorer.task_label == "task"
    assert scorer.max_node_score == 100
    assert dict(scorer.table) == {"wf.step.A.": 3.0}


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("INTERFERENCE_METRICS_DIR", str(tmp_path))
    monkeypatch.setenv("INTERFERENCE_RESOURCE", "bio")
    monkeypatch.delenv("INTERFERENCE_TASK_LABEL", raising=False)
    config = InterferenceConfig.from_env()
    assert config.metrics_dir == str(tmp_path)
    assert config.resource_kind == "bio"
    assert config.task_label == TASK


def test_construction_fails_when_table_cannot_load(tmp_path):
    with pytest.raises(DirectoryUnreadableError):
        ScoreInterference("cpu", metrics_dir=str(tmp_path / "missing"))
    with pytest.raises(EmptyTableError):
        ScoreInterference("cpu", metrics_dir=str(tmp_path))
    (tmp_path / "broken").write_text("{")
    with pytest.raises(MalformedRecordError):
        ScoreInterference("cpu", metrics_dir=str(tmp_path))
    with pytest.raises(UnsupportedResourceKindError):
        ScoreInterference("llc", metrics_dir=str(tmp_path))


def test_injected_table_must_match_resource_kind():
    with pytest.raises(UnsupportedResourceKindError):
        ScoreInterference("bio", table=make_table(ResourceKind.CPU))


def test_normalize_handles_unbounded_raw_scores():
    scorer = ScoreInterference("cpu", table=example_table())
    scores = [NodeScore("a", 10 ** 17), NodeScore("b", 10 ** 17 // 2), NodeScore("c", 0)]
    scorer.normalize_score(incoming_pod(), scores)
    assert [s.score for s in scores] == [0, 50, 100]

    huge = [NodeScore("a", 10 ** 19), NodeScore("b", 0), NodeScore("c", -(10 ** 19))]
    scorer.normalize_score(incoming_pod(), huge)
    assert [s.score for s in huge] == [0, 100, 200]
    assert all(type(s.score) is int for s in huge)
