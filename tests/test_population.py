"""
Testes do Gerenciador de População.

Objetivo:
    Validar a coorte inicial, o respawn limitado pela capacidade e a remoção
    de agentes ao fim da quarentena (perfil finito), incluindo a tolerância
    a referências para agentes já removidos.
"""

import pytest

import tracesim.config as cfg
from tracesim.agents import CellAgent
from tracesim.geometry import Vector2
from tracesim.model import EpidemicModel

from .conftest import NEVER, build_quiet_config

# ============================================================================
# COORTE INICIAL
# ============================================================================

def test_initial_cohort(make_model):
    config = build_quiet_config()
    config.population = cfg.PopulationConfig(
        initial_cells=30, initial_infections=4, max_population=50, respawn_rate_ms=NEVER
    )
    model = make_model(config)

    infected = [cell for cell in model.population if cell.is_infected]
    assert len(model.population) == 30
    assert len(infected) == 4, "Infectados iniciais devem ser agentes distintos"
    assert model.population.total_infections == 4
    assert len(set(model.population.ids())) == 30

def test_same_seed_same_cohort(time_source):
    config = cfg.create_finite_scenario(initial_cells=10, initial_infections=2)
    first = EpidemicModel(config, time_source=time_source, seed=11)
    second = EpidemicModel(config, time_source=time_source, seed=11)

    assert [c.position for c in first.population] == [c.position for c in second.population]
    assert [c.is_infected for c in first.population] == [c.is_infected for c in second.population]

# ============================================================================
# RESPAWN
# ============================================================================

def _respawn_config(max_population: int = 5, infection_rate: float = 0.0):
    config = build_quiet_config(max_population=max_population)
    config.population.respawn_rate_ms = 200.0
    config.population.respawn_infection_rate = infection_rate
    return config

def test_respawn_after_interval(make_model, time_source):
    model = make_model(_respawn_config())

    time_source.set(200.0)
    model.clock.advance()
    assert model.population.maybe_respawn(model.clock) is None

    time_source.set(201.0)
    model.clock.advance()
    cell = model.population.maybe_respawn(model.clock)

    assert cell is not None
    assert model.clock.last_respawn == 201.0
    assert cell.travel_target is not None
    assert not (0.0 <= cell.position.x < 1.0), "Respawn nasce fora do quadrado visível"
    assert not (0.0 <= cell.position.y < 1.0)
    assert model.population.total_respawned == 1

def test_respawn_seeds_infection(make_model, time_source):
    model = make_model(_respawn_config(infection_rate=1.0))

    time_source.set(300.0)
    model.clock.advance()
    cell = model.population.maybe_respawn(model.clock)

    assert cell.infected_at == 300.0

def test_population_never_exceeds_cap(make_model, time_source):
    model = make_model(_respawn_config(max_population=5))

    for t in range(1, 60):
        time_source.set(t * 250.0)
        model.step()
        assert len(model.population) <= 5

    assert len(model.population) == 5
    assert model.population.maybe_respawn(model.clock) is None

def test_add_at_capacity_raises(make_model):
    model = make_model(build_quiet_config(max_population=1))
    model.population.add(CellAgent(model, position=Vector2(0.1, 0.1), now=0.0))

    with pytest.raises(ValueError):
        model.population.add(CellAgent(model, position=Vector2(0.2, 0.2), now=0.0))

# ============================================================================
# REMOÇÃO
# ============================================================================

def test_non_quarantined_agent_is_never_removed(model, place):
    cell = place(model, 0.5, 0.5, infected_at=0.0)

    assert not model.population.remove(cell)
    assert not model.population.remove_if_expired(cell, 1e9)
    assert cell.unique_id in model.population

def test_scenario_removed_after_quarantine_life(model, place, time_source):
    cell = place(model, 0.5, 0.5, infected_at=0.0)
    place(model, 0.9, 0.9)
    cell.quarantine(1000.0)

    time_source.set(4000.0)
    model.step()
    assert len(model.population) == 2, "Vida de quarentena ainda não excedida"

    time_source.set(4001.0)
    model.step()

    assert len(model.population) == 1
    assert model.population.get(cell.unique_id) is None
    assert model.population.total_removed == 1

def test_infinite_quarantine_keeps_agents(make_model, place, time_source):
    model = make_model(build_quiet_config(lifetime=cfg.QuarantineLifetime.INFINITE))
    cell = place(model, 0.5, 0.5, infected_at=0.0)
    cell.quarantine(0.0)

    time_source.set(1e6)
    model.step()

    assert model.population.get(cell.unique_id) is cell

def test_removal_flushes_pending_notification(make_model, place, time_source):
    config = build_quiet_config()
    config.quarantine.notification_delay_ms = 5000.0
    model = make_model(config)

    infector = place(model, 0.1, 0.1, infected_at=0.0)
    contact = place(model, 0.9, 0.9, infected_at=0.0)
    infector.add_contact(contact.unique_id)
    infector.quarantine(0.0)

    time_source.set(3001.0)
    model.step()

    assert infector.unique_id not in model.population
    assert infector.has_notified_contacts
    assert contact.quarantined_by == infector.unique_id

def test_stale_contact_after_removal_is_tolerated(model, place, time_source):
    removed = place(model, 0.1, 0.1, infected_at=0.0)
    removed.quarantine(0.0)
    survivor = place(model, 0.9, 0.9, infected_at=0.0)
    survivor.add_contact(removed.unique_id)

    time_source.set(3001.0)
    model.step()
    assert removed.unique_id not in model.population

    survivor.quarantine(3001.0)
    assert survivor.notify_contacts(5000.0) == []
    snapshot = model.snapshot()
    assert snapshot.edges == ()

if __name__ == "__main__":
    pytest.main(["-v", __file__])
