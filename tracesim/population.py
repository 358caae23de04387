"""
Gerenciador de População.

Responsabilidade:
- Ser o dono da coleção de agentes, indexada por ID (lookup O(1), remoção
  sem deslocar índices).
- Criar a coorte inicial e admitir novos agentes (respawn) abaixo do limite.
- Remover agentes cuja quarentena expirou (perfil de quarentena finita).

Referências a agentes removidos continuam existindo nos contatos de outros
agentes; `get` devolve None para elas e quem consulta apenas as ignora.
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from .agents import CellAgent, make_cell
from .config import PopulationConfig, QuarantineConfig
from .geometry import Vector2

if TYPE_CHECKING:
    from .clock import SimulationClock

logger = logging.getLogger(__name__)


class PopulationManager:
    """Coleção viva de agentes com crescimento e remoção limitados."""

    def __init__(self, model, population_config: PopulationConfig, quarantine_config: QuarantineConfig):
        self.model = model
        self.config = population_config
        self.quarantine_config = quarantine_config
        self._cells: Dict[int, CellAgent] = {}

        # Contadores cumulativos da execução
        self.total_infections = 0
        self.total_removed = 0
        self.total_respawned = 0

    # ========================================================================
    # ACESSO
    # ========================================================================

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[CellAgent]:
        return iter(list(self._cells.values()))

    def __contains__(self, agent_id: int) -> bool:
        return agent_id in self._cells

    def get(self, agent_id: int) -> Optional[CellAgent]:
        return self._cells.get(agent_id)

    def ids(self) -> List[int]:
        """Cópia estável dos IDs na ordem de inserção."""
        return list(self._cells.keys())

    def has_capacity(self) -> bool:
        return len(self._cells) < self.config.max_population

    def add(self, cell: CellAgent) -> Optional[CellAgent]:
        """Admite um agente. Após o encerramento do modelo é um no-op (retorna None)."""
        if not self.model.running:
            cell.remove()
            return None
        if not self.has_capacity():
            raise ValueError(
                f"População no limite ({self.config.max_population}); agente {cell.unique_id} rejeitado"
            )
        self._cells[cell.unique_id] = cell
        return cell

    # ========================================================================
    # CRESCIMENTO
    # ========================================================================

    def seed_initial_cohort(self, now: float) -> List[CellAgent]:
        """Cria a coorte inicial e infecta `initial_infections` agentes distintos."""
        cohort = [self.add(make_cell(self.model, now)) for _ in range(self.config.initial_cells)]

        for cell in self.model.random.sample(cohort, self.config.initial_infections):
            cell.infect(now)
            self.total_infections += 1

        logger.info(
            f"Coorte inicial: {len(cohort)} agentes, {self.config.initial_infections} infectados"
        )
        return cohort

    def maybe_respawn(self, clock: 'SimulationClock') -> Optional[CellAgent]:
        """
        Admite um novo agente se houver vaga e o intervalo de respawn tiver passado.

        O agente nasce fora do quadrado visível e já com um destino, entrando em cena.
        """
        now = clock.now
        if not self.model.running or not self.has_capacity():
            return None
        if now - clock.last_respawn <= self.config.respawn_rate_ms:
            return None

        rng = self.model.random
        position = Vector2(
            rng.random() + (round(rng.random()) or -1),
            rng.random() + (round(rng.random()) or -1),
        )
        cell = self.add(make_cell(self.model, now, position=position, always_travel=True))

        if rng.random() < self.config.respawn_infection_rate:
            cell.infect(now)
            self.total_infections += 1

        clock.last_respawn = now
        self.total_respawned += 1
        logger.debug(f"Respawn do agente {cell.unique_id} (infectado={cell.is_infected})")
        return cell

    # ========================================================================
    # REMOÇÃO
    # ========================================================================

    def remove(self, cell: CellAgent) -> bool:
        """Retira um agente em quarentena da população. No-op para os demais."""
        if not cell.is_quarantined or cell.unique_id not in self._cells:
            return False
        del self._cells[cell.unique_id]
        cell.remove()
        self.total_removed += 1
        logger.debug(f"Agente {cell.unique_id} removido após a quarentena")
        return True

    def remove_if_expired(self, cell: CellAgent, now: float) -> bool:
        """
        Remove o agente se a quarentena excedeu `life_ms` (perfil finito).

        Uma notificação ainda pendente é enviada antes da remoção.
        """
        if not self.quarantine_config.is_finite or not cell.is_quarantined:
            return False
        if now - cell.quarantined_at <= self.quarantine_config.life_ms:
            return False
        if not cell.has_notified_contacts:
            cell.notify_contacts(now)
        return self.remove(cell)

    def clear(self):
        """Libera todos os agentes (fim da execução)."""
        for cell in list(self._cells.values()):
            cell.remove()
        self._cells.clear()
