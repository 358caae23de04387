"""
Fixtures compartilhadas.

Os testes usam uma configuração "silenciosa": sem coorte inicial, sem respawn
e sem testagem espontânea, para que cada cenário posicione seus próprios agentes.
O tempo é controlado por uma ManualTimeSource.
"""

from typing import Optional

import pytest

from tracesim.agents import CellAgent
from tracesim.clock import ManualTimeSource
from tracesim.config import (
    DiseaseConfig,
    PopulationConfig,
    QuarantineConfig,
    QuarantineLifetime,
    SimulationConfig,
    TestingConfig,
    TestingPolicy,
)
from tracesim.geometry import Vector2
from tracesim.model import EpidemicModel

NEVER = 1e12


def build_quiet_config(lifetime: QuarantineLifetime = QuarantineLifetime.FINITE,
                       policy: TestingPolicy = TestingPolicy.PER_AGENT_PROBABILISTIC,
                       notify_infector: bool = False,
                       max_population: int = 50) -> SimulationConfig:
    return SimulationConfig(
        name="teste",
        population=PopulationConfig(
            initial_cells=0,
            initial_infections=0,
            max_population=max_population,
            respawn_rate_ms=NEVER,
            respawn_infection_rate=0.0,
        ),
        disease=DiseaseConfig(infection_radius=0.02, infection_delay_ms=500.0),
        testing=TestingConfig(policy=policy, frequency_ms=NEVER, chance=1.0, global_interval_ms=NEVER),
        quarantine=QuarantineConfig(
            lifetime=lifetime,
            life_ms=3000.0,
            notification_delay_ms=1000.0,
            notify_infector=notify_infector,
        ),
    )


@pytest.fixture
def time_source():
    return ManualTimeSource(0.0)


@pytest.fixture
def quiet_config():
    return build_quiet_config()


@pytest.fixture
def make_model(time_source):
    """Fábrica de modelos ligados à fonte de tempo manual do teste."""
    def _make(config: Optional[SimulationConfig] = None, seed: int = 1) -> EpidemicModel:
        return EpidemicModel(config or build_quiet_config(), time_source=time_source, seed=seed)
    return _make


@pytest.fixture
def model(make_model):
    return make_model()


@pytest.fixture
def place():
    """Posiciona um agente parado no modelo, opcionalmente já infectado."""
    def _place(model: EpidemicModel, x: float, y: float,
               infected_at: Optional[float] = None) -> CellAgent:
        cell = CellAgent(model, position=Vector2(x, y), now=model.now)
        model.population.add(cell)
        if infected_at is not None:
            cell.infect(infected_at)
        return cell
    return _place
