"""
Relógio da Simulação.

Concentra os temporizadores que o laço usa para decisões baseadas em tempo
decorrido (último tick, último respawn, último teste global). O tempo é lido
uma única vez por tick e reutilizado por todas as decisões desse tick.
"""

import time
from typing import Callable, Optional

TimeSource = Callable[[], float]


def monotonic_millis() -> float:
    """Fonte de tempo padrão (relógio monotônico em ms)."""
    return time.monotonic() * 1000.0


class ManualTimeSource:
    """
    Fonte de tempo controlada manualmente.

    Usada em execuções headless (CLI) e nos testes para tornar o laço determinístico.
    """

    def __init__(self, start_ms: float = 0.0):
        self.current_ms = float(start_ms)

    def __call__(self) -> float:
        return self.current_ms

    def advance(self, delta_ms: float) -> float:
        if delta_ms < 0:
            raise ValueError(f"O tempo não pode retroceder (delta={delta_ms})")
        self.current_ms += delta_ms
        return self.current_ms

    def set(self, value_ms: float) -> float:
        if value_ms < self.current_ms:
            raise ValueError(f"O tempo não pode retroceder ({value_ms} < {self.current_ms})")
        self.current_ms = float(value_ms)
        return self.current_ms


class SimulationClock:
    """Temporizadores explícitos de uma execução."""

    def __init__(self, time_source: Optional[TimeSource] = None):
        self._time_source = time_source or monotonic_millis
        self.started_at: float = self._time_source()
        self.now: float = self.started_at
        self.last_tick: float = self.started_at
        self.last_respawn: float = self.started_at
        self.last_test: float = self.started_at
        self.elapsed: float = 0.0

    def advance(self) -> float:
        """Lê a fonte de tempo uma vez e retorna o tempo decorrido desde o último tick."""
        current = self._time_source()
        self.elapsed = current - self.last_tick
        self.last_tick = current
        self.now = current
        return self.elapsed

    def since(self, timestamp: float) -> float:
        return self.now - timestamp
