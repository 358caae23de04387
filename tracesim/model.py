"""
Orquestrador da Simulação (EpidemicModel).

Responsabilidade:
- Avançar o relógio uma vez por tick e reutilizar esse instante em todas as decisões.
- Sincronizar o ciclo: Respawn -> Teste global -> Agentes (movimento, transmissão,
  testagem, notificação, remoção) -> Métricas -> Fim da pandemia.
- Produzir o snapshot imutável consumido pelo renderizador.
- Coletar métricas globais para análise.

Arquitetura:
- Herda de mesa.Model.
- Possui instâncias de SimulationClock, PopulationManager e ContactDetector.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from mesa import Model

from .agents import CellAgent
from .clock import SimulationClock, TimeSource
from .config import AgentState, SimulationConfig, TestingPolicy
from .contacts import ContactDetector
from .population import PopulationManager
from .snapshot import AgentSnapshot, SimulationSnapshot

# Logger setup
logger = logging.getLogger(__name__)

PandemicEndListener = Callable[['EpidemicModel'], None]


class EpidemicModel(Model):
    """
    Modelo de transmissão por proximidade com testagem e quarentena de contatos.
    Uma instância corresponde a uma única execução (população + temporizadores).
    """

    def __init__(self, config: SimulationConfig, time_source: Optional[TimeSource] = None,
                 seed: Optional[int] = None):
        """
        Inicializa o modelo e semeia a coorte inicial.

        Args:
            config: Configuração completa (ver tracesim.config).
            time_source: Função que retorna o tempo atual em ms (padrão: relógio monotônico).
            seed: Semente da fonte aleatória compartilhada.
        """
        super().__init__(seed=seed)
        self.config = config
        self.clock = SimulationClock(time_source)
        self.tick_count = 0

        self.population = PopulationManager(self, config.population, config.quarantine)
        self.contact_detector = ContactDetector(self.population, config.disease.infection_radius)

        self.index_case_id: Optional[int] = None
        self.pandemic_ended = False
        self.pandemic_ended_at: Optional[float] = None
        self.pandemic_ended_tick: Optional[int] = None
        self._had_active_spreader = False
        self._pandemic_end_listeners: List[PandemicEndListener] = []

        self.metrics_history: List[Dict[str, Any]] = []

        self.population.seed_initial_cohort(self.now)
        self._had_active_spreader = self.count_active_spreaders() > 0

        logger.info(f"Modelo inicializado: {config.name}. Agentes: {len(self.population)}")

    @property
    def now(self) -> float:
        return self.clock.now

    # ========================================================================
    # LAÇO PRINCIPAL
    # ========================================================================

    def step(self):
        """Executa um tick completo. No-op após `shutdown()`."""
        if not self.running:
            return

        self.clock.advance()
        self.tick_count += 1

        # 1. Crescimento da população
        self.population.maybe_respawn(self.clock)

        # 2. Teste global (perfil de teste único)
        if self.config.testing.policy == TestingPolicy.GLOBAL_RANDOM_SINGLE:
            self.run_global_test()

        # 3. Agentes, sobre uma cópia estável dos IDs do início do tick
        for agent_id in self.population.ids():
            agent = self.population.get(agent_id)
            if agent is None:
                continue
            agent.step()

        # 4. Métricas e critério de fim
        self._update_metrics()
        self._check_pandemic_end()

    def run_global_test(self) -> Optional[CellAgent]:
        """Testa um único agente sorteado, no máximo uma vez por `global_interval_ms`."""
        if self.now - self.clock.last_test <= self.config.testing.global_interval_ms:
            return None
        self.clock.last_test = self.now

        ids = self.population.ids()
        if not ids:
            return None

        agent = self.population.get(self.random.choice(ids))
        if agent.take_test(self.now):
            self.register_positive_test(agent)
        return agent

    def register_positive_test(self, agent: CellAgent):
        """Marca caso índice para uma quarentena disparada por teste."""
        if self.config.testing.policy == TestingPolicy.PER_AGENT_PROBABILISTIC:
            agent.is_index_case = True

        if self.index_case_id is None:
            self.index_case_id = agent.unique_id
            agent.is_index_case = True
            logger.info(f"Caso índice identificado: agente {agent.unique_id} (t={self.now:.0f} ms)")

    # ========================================================================
    # FIM DA PANDEMIA
    # ========================================================================

    def add_pandemic_end_listener(self, listener: PandemicEndListener):
        self._pandemic_end_listeners.append(listener)

    def count_active_spreaders(self) -> int:
        return sum(1 for agent in self.population if agent.is_active_spreader)

    def _check_pandemic_end(self):
        """Sinaliza uma única vez por execução a transição para 'nenhum transmissor ativo'."""
        if self.count_active_spreaders() > 0:
            self._had_active_spreader = True
            return

        if not self._had_active_spreader or self.pandemic_ended:
            return

        self.pandemic_ended = True
        self.pandemic_ended_at = self.now
        self.pandemic_ended_tick = self.tick_count
        logger.info(f"Fim da pandemia no tick {self.tick_count} (t={self.now:.0f} ms)")
        for listener in self._pandemic_end_listeners:
            listener(self)

    # ========================================================================
    # SNAPSHOT
    # ========================================================================

    def _opacity(self, agent: CellAgent) -> float:
        if not agent.is_quarantined:
            return 1.0
        if not self.config.quarantine.is_finite:
            return self.config.quarantine.dimmed_opacity
        return 1.0 - agent.quarantine_fraction(self.now)

    def snapshot(self) -> SimulationSnapshot:
        """Fotografia imutável da população para o renderizador."""
        agents = []
        edges = []
        for agent in self.population:
            agents.append(AgentSnapshot(
                id=agent.unique_id,
                position=agent.position.as_tuple(),
                state=agent.visual_state,
                opacity=self._opacity(agent),
                quarantine_fraction=agent.quarantine_fraction(self.now),
                is_index_case=agent.is_index_case,
                tested_positive=agent.tested_positive,
                contacts=tuple(agent.contacts),
            ))
            if agent.is_infected:
                edges.extend(
                    (agent.unique_id, contact_id)
                    for contact_id in agent.contacts
                    if contact_id in self.population
                )

        return SimulationSnapshot(
            tick=self.tick_count,
            time_ms=self.now - self.clock.started_at,
            agents=tuple(agents),
            edges=tuple(edges),
            active_spreaders=sum(1 for agent in agents if agent.state == AgentState.INFECTIOUS),
            pandemic_ended=self.pandemic_ended,
            index_case_id=self.index_case_id,
        )

    # ========================================================================
    # CICLO DE VIDA E MÉTRICAS
    # ========================================================================

    def shutdown(self):
        """Interrompe a execução e libera a população. Chamadas repetidas são seguras."""
        if not self.running and not len(self.population):
            return
        self.running = False
        self.population.clear()
        self._pandemic_end_listeners.clear()
        logger.info(f"Modelo encerrado: {self.config.name} (tick {self.tick_count})")

    def get_state_counts(self) -> Dict[str, int]:
        """Retorna contagem de agentes por categoria visual."""
        s = 0
        i = 0
        q = 0
        for agent in self.population:
            state = agent.visual_state
            if state == AgentState.SUSCEPTIBLE: s += 1
            elif state == AgentState.INFECTIOUS: i += 1
            elif state == AgentState.QUARANTINED: q += 1

        return {"SUSCEPTIBLE": s, "INFECTIOUS": i, "QUARANTINED": q}

    def _update_metrics(self):
        """Calcula estatísticas do tick atual e salva no histórico."""
        counts = self.get_state_counts()
        population = self.population

        metric = {
            "tick": self.tick_count,
            "time_ms": self.now - self.clock.started_at,
            "S": counts["SUSCEPTIBLE"],
            "I": counts["INFECTIOUS"],
            "Q": counts["QUARANTINED"],
            "population": len(population),
            "active_spreaders": counts["INFECTIOUS"],
            "total_infections": population.total_infections,
            "total_quarantines": counts["QUARANTINED"] + population.total_removed,
            "total_removed": population.total_removed,
            "total_respawned": population.total_respawned,
        }
        self.metrics_history.append(metric)

    def get_metrics_dataframe(self) -> pd.DataFrame:
        """Exporta o histórico de métricas como DataFrame do Pandas."""
        return pd.DataFrame(self.metrics_history)
