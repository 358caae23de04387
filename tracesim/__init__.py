"""
Pacote principal do Simulador de Rastreamento de Contatos.

Este pacote contém o motor epidemiológico baseado em agentes: movimento,
transmissão por proximidade, testagem, quarentena e notificação de contatos.

Módulos:
    - config: Parâmetros ajustáveis e perfis de execução.
    - geometry: Vetores 2D e interseção de círculos.
    - agents: Máquina de estados de cada agente (CellAgent).
    - contacts: Detecção espacial de contatos.
    - population: Coleção de agentes, respawn e remoção.
    - clock: Temporizadores da execução.
    - model: Orquestrador da simulação (EpidemicModel).
    - controller: Interface start/stop/tick para o host.
"""

# Expõe as classes principais para acesso direto
from .config import (
    AgentState,
    QuarantineLifetime,
    TestingPolicy,
    SimulationConfig,
    create_finite_scenario,
    create_infinite_scenario,
)

from .geometry import Vector2, circle_intersection, distance
from .agents import CellAgent, make_cell
from .clock import ManualTimeSource, SimulationClock
from .model import EpidemicModel
from .controller import SimulationController
from .snapshot import AgentSnapshot, SimulationSnapshot

__all__ = [
    "EpidemicModel",
    "SimulationController",
    "CellAgent",
    "make_cell",
    "SimulationConfig",
    "AgentState",
    "QuarantineLifetime",
    "TestingPolicy",
    "SimulationClock",
    "ManualTimeSource",
    "Vector2",
    "circle_intersection",
    "distance",
    "AgentSnapshot",
    "SimulationSnapshot",
    "create_finite_scenario",
    "create_infinite_scenario",
]

__version__ = "1.0.0"
