"""
Módulo de Agentes Epidemiológicos (CellAgent).

Implementa a máquina de estados de cada indivíduo:
suscetível -> infectado -> em quarentena -> removido (perfil finito),
incluindo movimentação por viagens, testagem individual e notificação
de contatos.

Dependências:
- mesa: Framework de ABM.
- tracesim.config: Constantes ajustáveis e enums.
"""

import logging
from typing import Any, List, Optional

from mesa import Agent

from .config import AgentState, TestingPolicy
from .geometry import Vector2, circle_intersection, wrap_position

# Configuração de Logger
logger = logging.getLogger(__name__)


class CellAgent(Agent):
    """
    Indivíduo móvel com estado de infecção e quarentena.

    Atributos:
        unique_id (int): Identificador opaco, estável durante a vida do agente.
        position (Vector2): Posição em coordenadas normalizadas.
        travel_target (Vector2 | None): Destino atual; None = parado.
        travel_frequency (float): Propensão a iniciar nova viagem, em [0, 1).
        infected_at (float | None): Instante da infecção (imutável depois de definido).
        quarantined_at (float | None): Instante do início da quarentena (imutável).
        contacts (List[int]): IDs dos agentes que este agente infectou.
    """

    def __init__(
        self,
        model: Any,
        position: Vector2,
        now: float,
        travel_target: Optional[Vector2] = None,
        travel_frequency: float = 0.0,
    ):
        """
        Inicializa o agente.

        Args:
            model: Referência ao modelo Mesa (EpidemicModel).
            position: Posição inicial.
            now: Instante de criação (ms), usado como último teste e última chegada.
            travel_target: Destino inicial opcional.
            travel_frequency: Propensão a viajar após a pausa.
        """
        super().__init__(model)

        # --- Movimento ---
        self.position = position
        self.travel_target = travel_target
        self.travel_frequency = travel_frequency
        self.last_traveled = now

        # --- Infecção ---
        self.infected_at: Optional[float] = None
        self.infected_by: Optional[int] = None
        self.contacts: List[int] = []

        # --- Testagem e Quarentena ---
        self.last_tested = now
        self.quarantined_at: Optional[float] = None
        self.quarantined_by: Optional[int] = None
        self.has_notified_contacts = False
        self.tested_positive = False
        self.is_index_case = False

    # ========================================================================
    # ESTADO
    # ========================================================================

    @property
    def is_infected(self) -> bool:
        return self.infected_at is not None

    @property
    def is_quarantined(self) -> bool:
        return self.quarantined_at is not None

    @property
    def is_susceptible(self) -> bool:
        return not self.is_infected and not self.is_quarantined

    @property
    def is_active_spreader(self) -> bool:
        """Infectado e ainda circulando (fora de quarentena)."""
        return self.is_infected and not self.is_quarantined

    @property
    def visual_state(self) -> AgentState:
        if self.is_quarantined:
            return AgentState.QUARANTINED
        if self.is_infected:
            return AgentState.INFECTIOUS
        return AgentState.SUSCEPTIBLE

    def is_contagious(self, now: float) -> bool:
        """Passou da incubação e ainda não está isolado."""
        if not self.is_active_spreader:
            return False
        return now - self.infected_at > self.model.config.disease.infection_delay_ms

    def quarantine_fraction(self, now: float) -> Optional[float]:
        """Fração da vida de quarentena já decorrida (None fora de quarentena ou no perfil infinito)."""
        quarantine = self.model.config.quarantine
        if not self.is_quarantined or not quarantine.is_finite:
            return None
        if quarantine.life_ms == 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.quarantined_at) / quarantine.life_ms))

    # ========================================================================
    # TRANSIÇÕES
    # ========================================================================

    def infect(self, now: float, infected_by: Optional[int] = None) -> bool:
        """Torna o agente infectado. No-op se já infectado ou em quarentena."""
        if not self.is_susceptible:
            return False
        self.infected_at = now
        self.infected_by = infected_by
        logger.debug(f"Agente {self.unique_id} infectado por {infected_by} em t={now:.0f}")
        return True

    def add_contact(self, agent_id: int) -> bool:
        """Registra um agente infectado por este. Idempotente; nunca inclui o próprio ID."""
        if agent_id == self.unique_id or agent_id in self.contacts:
            return False
        self.contacts.append(agent_id)
        return True

    def quarantine(self, now: float, quarantined_by: Optional[int] = None) -> bool:
        """Inicia a quarentena. No-op se já estiver em quarentena."""
        if self.is_quarantined:
            return False
        self.quarantined_at = now
        self.quarantined_by = quarantined_by
        logger.debug(f"Agente {self.unique_id} em quarentena (origem: {quarantined_by or 'teste'})")
        return True

    def take_test(self, now: float) -> bool:
        """
        Aplica um teste ao agente.

        Só resulta em quarentena quem está infectado, fora de quarentena
        e já infectou alguém (a testagem encontra a propagação).

        Returns:
            bool: True se o teste disparou a quarentena.
        """
        self.last_tested = now
        if not self.is_active_spreader or not self.contacts:
            return False
        self.quarantine(now)
        self.tested_positive = True
        return True

    def notify_contacts(self, now: float) -> List[int]:
        """
        Coloca em quarentena todos os contatos (e o infector, se configurado).

        Executa no máximo uma vez por agente. IDs de agentes já removidos são ignorados.

        Returns:
            List[int]: IDs que entraram em quarentena por esta notificação.
        """
        if self.has_notified_contacts:
            return []
        self.has_notified_contacts = True

        targets = list(self.contacts)
        if self.model.config.quarantine.notify_infector and self.infected_by is not None:
            if self.infected_by not in targets:
                targets.append(self.infected_by)

        notified = []
        for contact_id in targets:
            contact = self.model.population.get(contact_id)
            if contact is None:
                logger.debug(f"Contato {contact_id} de {self.unique_id} já removido; ignorado")
                continue
            if contact.quarantine(now, quarantined_by=self.unique_id):
                notified.append(contact_id)
        return notified

    # ========================================================================
    # CICLO POR TICK
    # ========================================================================

    def step(self):
        """
        Executa um tick do agente.
        Ordem:
        1. Movimento (se fora de quarentena).
        2. Transmissão para suscetíveis próximos.
        3. Testagem individual (perfil probabilístico).
        4. Notificação de contatos.
        5. Remoção ao fim da vida de quarentena (perfil finito).
        """
        now = self.model.now
        was_infected = self.is_infected
        was_quarantined = self.is_quarantined

        if not was_quarantined:
            self.move(now, self.model.clock.elapsed)

        if was_infected and not was_quarantined and self.is_contagious(now):
            self.model.contact_detector.spread_from(self, now)

        if self.model.config.testing.policy == TestingPolicy.PER_AGENT_PROBABILISTIC:
            self.maybe_test(now)

        if was_quarantined:
            self.maybe_notify_contacts(now)
            self.model.population.remove_if_expired(self, now)

    def move(self, now: float, elapsed: float):
        """Avança em direção ao destino ou decide iniciar uma nova viagem."""
        movement = self.model.config.movement

        if self.travel_target is not None:
            velocity = self.travel_target.subtract(self.position).normalize().scale(movement.speed * elapsed)
            self.position = self.position.add(velocity)

            if circle_intersection(self.position, movement.cell_radius, self.travel_target, movement.goal_radius):
                self.travel_target = None
                self.last_traveled = now

            self.position = wrap_position(self.position, movement.wrap_lower, movement.wrap_upper)
        elif now - self.last_traveled > movement.pause_ms and self.travel_frequency > self.random.random():
            self.travel_target = Vector2.random_in_unit_square(self.random)

    def maybe_test(self, now: float) -> bool:
        """Teste individual: elegível após `frequency_ms`, sorteado com `chance`."""
        testing = self.model.config.testing
        if now - self.last_tested <= testing.frequency_ms:
            return False
        if self.random.random() >= testing.chance:
            return False
        if self.take_test(now):
            self.model.register_positive_test(self)
            return True
        return False

    def maybe_notify_contacts(self, now: float) -> List[int]:
        if self.has_notified_contacts or not self.is_quarantined:
            return []
        if now - self.quarantined_at <= self.model.config.quarantine.notification_delay_ms:
            return []
        return self.notify_contacts(now)


def make_cell(model: Any, now: float, position: Optional[Vector2] = None,
              always_travel: bool = False) -> CellAgent:
    """
    Fábrica de agentes a partir da fonte aleatória compartilhada do modelo.

    Args:
        model: Modelo dono do agente (fornece `random` e `config`).
        now: Instante de criação.
        position: Posição inicial; sorteada no quadrado unitário se omitida.
        always_travel: Força um destino inicial (respawn).
    """
    rng = model.random
    movement = model.config.movement

    if position is None:
        position = Vector2.random_in_unit_square(rng)

    travel_target = None
    if always_travel or rng.random() < movement.initial_travel_probability:
        travel_target = Vector2.random_in_unit_square(rng)

    return CellAgent(
        model,
        position=position,
        now=now,
        travel_target=travel_target,
        travel_frequency=rng.random(),
    )
