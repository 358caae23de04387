"""
Detector Espacial de Contatos.

Responsabilidade:
- Dado um agente contagioso, encontrar todos os suscetíveis cujo círculo de
  infecção intercepta o dele (mesmo raio para ambos, desigualdade estrita).
- Aplicar a transmissão: infectar, registrar o infector e atualizar os contatos.

Complexidade O(n) por infector (O(n²) por tick); a população é limitada
por PopulationConfig.max_population. As distâncias são calculadas em lote com numpy.
"""

import logging
from typing import TYPE_CHECKING, List

import numpy as np

if TYPE_CHECKING:
    from .agents import CellAgent
    from .population import PopulationManager

logger = logging.getLogger(__name__)


class ContactDetector:
    """Busca por proximidade sobre a população viva."""

    def __init__(self, population: 'PopulationManager', infection_radius: float):
        self.population = population
        self.infection_radius = infection_radius

    def find_exposed(self, infector: 'CellAgent') -> List['CellAgent']:
        """Suscetíveis dentro do raio de infecção do infector, em ordem de população."""
        candidates = [
            agent for agent in self.population
            if agent is not infector and agent.is_susceptible
        ]
        if not candidates:
            return []

        coords = np.array([(agent.position.x, agent.position.y) for agent in candidates], dtype=np.float64)
        distances = np.hypot(coords[:, 0] - infector.position.x, coords[:, 1] - infector.position.y)

        # Interseção de dois círculos de raio infection_radius
        within = distances < self.infection_radius + self.infection_radius

        return [agent for agent, hit in zip(candidates, within) if hit]

    def spread_from(self, infector: 'CellAgent', now: float) -> List[int]:
        """
        Transmite a infecção para todos os suscetíveis expostos.

        Returns:
            List[int]: IDs recém-infectados neste chamado.
        """
        newly_infected = []
        for agent in self.find_exposed(infector):
            if agent.infect(now, infected_by=infector.unique_id):
                infector.add_contact(agent.unique_id)
                newly_infected.append(agent.unique_id)

        if newly_infected:
            self.population.total_infections += len(newly_infected)
            logger.debug(f"Agente {infector.unique_id} infectou {newly_infected}")
        return newly_infected
