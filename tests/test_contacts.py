"""
Testes do Detector Espacial de Contatos.

Objetivo:
    Validar a busca por suscetíveis dentro do raio de infecção e a
    transmissão resultante (infector registrado, contatos sem duplicatas).
"""

import pytest

# ============================================================================
# BUSCA POR PROXIMIDADE
# ============================================================================

def test_finds_only_susceptible_agents_in_range(model, place):
    infector = place(model, 0.5, 0.5, infected_at=0.0)
    near = place(model, 0.51, 0.5)
    near_infected = place(model, 0.5, 0.51, infected_at=0.0)
    near_quarantined = place(model, 0.49, 0.5)
    near_quarantined.quarantine(0.0)
    far = place(model, 0.9, 0.9)

    exposed = model.contact_detector.find_exposed(infector)

    assert exposed == [near]
    assert near_infected not in exposed
    assert far not in exposed

def test_exact_radius_sum_is_not_a_contact(model, place):
    """Agente exatamente a 2 * infection_radius não é exposto."""
    infector = place(model, 0.0, 0.0, infected_at=0.0)
    boundary = place(model, 0.04, 0.0)
    inside = place(model, 0.0, 0.039)

    exposed = model.contact_detector.find_exposed(infector)

    assert boundary not in exposed
    assert inside in exposed

def test_no_candidates(model, place):
    infector = place(model, 0.5, 0.5, infected_at=0.0)
    assert model.contact_detector.find_exposed(infector) == []

# ============================================================================
# TRANSMISSÃO
# ============================================================================

def test_spread_records_infector_and_contacts(model, place):
    infector = place(model, 0.5, 0.5, infected_at=0.0)
    a = place(model, 0.51, 0.5)
    b = place(model, 0.5, 0.52)

    infected = model.contact_detector.spread_from(infector, 600.0)

    assert infected == [a.unique_id, b.unique_id]
    assert a.infected_at == 600.0 and b.infected_at == 600.0
    assert a.infected_by == infector.unique_id
    assert infector.contacts == [a.unique_id, b.unique_id]

    # Nova chamada: ninguém mais é suscetível, contatos inalterados
    assert model.contact_detector.spread_from(infector, 700.0) == []
    assert infector.contacts == [a.unique_id, b.unique_id]
    assert model.population.total_infections == 2

def test_scenario_two_susceptibles_infected_after_incubation(model, place, time_source):
    """Dois suscetíveis próximos de um infectado incubado são infectados em um tick."""
    infector = place(model, 0.5, 0.5, infected_at=0.0)
    a = place(model, 0.51, 0.5)
    b = place(model, 0.5, 0.52)
    far = place(model, 0.6, 0.6)

    time_source.set(400.0)
    model.step()
    assert not a.is_infected, "Ainda em incubação"

    time_source.set(600.0)
    model.step()

    assert a.is_infected and b.is_infected
    assert set(infector.contacts) == {a.unique_id, b.unique_id}
    assert infector.infected_at == 0.0
    assert not infector.is_quarantined
    assert far.is_susceptible

def test_newly_infected_do_not_spread_in_same_tick(model, place, time_source):
    infector = place(model, 0.5, 0.5, infected_at=0.0)
    a = place(model, 0.53, 0.5)
    chain = place(model, 0.56, 0.5)  # fora do alcance do infector, dentro do de `a`

    time_source.set(600.0)
    model.step()

    assert a.is_infected
    assert chain.is_susceptible

    time_source.set(1101.0)
    model.step()
    assert chain.infected_by == a.unique_id
    assert a.contacts == [chain.unique_id]

if __name__ == "__main__":
    pytest.main(["-v", __file__])
