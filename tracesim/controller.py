"""
Controlador de Execução (Host -> Engine).

Responsabilidade:
- `start()`: encerra a execução anterior (se houver) e cria uma população nova.
- `stop()`: interrompe os ticks e libera a instância. Idempotente.
- `tick()`: avança a execução corrente um tick e publica o snapshot.
- `run()`: laço cooperativo headless (ou em tempo real) até um limite de ticks.

Duas execuções nunca compartilham estado: cada `start()` cria um
EpidemicModel novo e o anterior é desligado antes.
"""

import logging
import time
from typing import Callable, List, Optional

from .clock import ManualTimeSource, TimeSource
from .config import SimulationConfig, get_default_finite_config
from .model import EpidemicModel
from .snapshot import SimulationSnapshot

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SimulationSnapshot], None]
PandemicEndCallback = Callable[[EpidemicModel], None]


class SimulationController:
    """Ponto de entrada do host para iniciar, avançar e parar execuções."""

    def __init__(self, config: Optional[SimulationConfig] = None,
                 time_source: Optional[TimeSource] = None, seed: Optional[int] = None):
        self.config = config or get_default_finite_config()
        self.time_source = time_source
        self.seed = seed
        self.model: Optional[EpidemicModel] = None
        self.runs_started = 0
        self._snapshot_listeners: List[SnapshotListener] = []
        self._pandemic_end_callbacks: List[PandemicEndCallback] = []

    @property
    def is_running(self) -> bool:
        return self.model is not None and self.model.running

    def on_snapshot(self, listener: SnapshotListener):
        self._snapshot_listeners.append(listener)

    def on_pandemic_end(self, callback: PandemicEndCallback):
        self._pandemic_end_callbacks.append(callback)

    def start(self) -> EpidemicModel:
        """Inicia uma nova execução, descartando a anterior."""
        self.stop()

        seed = None if self.seed is None else self.seed + self.runs_started
        self.model = EpidemicModel(self.config, time_source=self.time_source, seed=seed)
        for callback in self._pandemic_end_callbacks:
            self.model.add_pandemic_end_listener(callback)

        self.runs_started += 1
        logger.info(f"Execução {self.runs_started} iniciada")
        return self.model

    def stop(self):
        """Para a execução corrente. Seguro sem execução ativa."""
        if self.model is None:
            return
        self.model.shutdown()
        self.model = None

    def tick(self) -> Optional[SimulationSnapshot]:
        """Avança um tick. Retorna None se não houver execução ativa."""
        if not self.is_running:
            return None

        self.model.step()
        snapshot = self.model.snapshot()
        for listener in self._snapshot_listeners:
            listener(snapshot)
        return snapshot

    def run(self, max_ticks: int, frame_ms: float = 16.0, stop_on_end: bool = True,
            realtime: bool = False) -> Optional[EpidemicModel]:
        """
        Laço cooperativo: um tick por quadro.

        Com uma ManualTimeSource o relógio avança `frame_ms` por tick (execução
        headless determinística); com `realtime` o laço dorme entre quadros.

        Returns:
            EpidemicModel: O modelo da execução (ainda acessível para análise).
        """
        model = self.model if self.is_running else self.start()

        for _ in range(max_ticks):
            if isinstance(self.time_source, ManualTimeSource):
                self.time_source.advance(frame_ms)
            elif realtime:
                time.sleep(frame_ms / 1000.0)

            if self.tick() is None:
                break
            if stop_on_end and model.pandemic_ended:
                break

        return model
