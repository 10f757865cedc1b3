from dataclasses import dataclass, field


@dataclass
class Node:
    name: str
    cpu_milli_total: int
    memory_mib_total: int

    cpu_milli_free: int = field(init=False)
    memory_mib_free: int = field(init=False)

    def __post_init__(self):
        self.cpu_milli_free = self.cpu_milli_total
        self.memory_mib_free = self.memory_mib_total

    def get_cpu_utilization(self) -> float:
        used = self.cpu_milli_total - self.cpu_milli_free
        return used / self.cpu_milli_total if self.cpu_milli_total > 0 else 0.0

    def get_memory_utilization(self) -> float:
        used = self.memory_mib_total - self.memory_mib_free
        return used / self.memory_mib_total if self.memory_mib_total > 0 else 0.0
