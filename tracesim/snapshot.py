"""
Snapshot imutável entregue ao renderizador a cada tick.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .config import AgentState


@dataclass(frozen=True)
class AgentSnapshot:
    """Estado visível de um agente."""
    id: int
    position: Tuple[float, float]
    state: AgentState
    opacity: float
    quarantine_fraction: Optional[float]
    is_index_case: bool
    tested_positive: bool
    contacts: Tuple[int, ...]


@dataclass(frozen=True)
class SimulationSnapshot:
    """Fotografia completa de um tick."""
    tick: int
    time_ms: float
    agents: Tuple[AgentSnapshot, ...]
    edges: Tuple[Tuple[int, int], ...]
    active_spreaders: int
    pandemic_ended: bool
    index_case_id: Optional[int] = None

    def by_id(self, agent_id: int) -> Optional[AgentSnapshot]:
        return next((agent for agent in self.agents if agent.id == agent_id), None)
