"""
Módulo de Configuração e Definição de Tipos do Simulador de Rastreamento.

ARQUITETURA:
Este módulo atua como o 'Schema Definition' do projeto.
Define as constantes do motor epidemiológico e as estruturas de dados (Dataclasses),
convertendo dicionários/JSONs brutos em objetos Python tipados e validados.

Responsabilidade:
- Definir Enums para os domínios discretos (estado visual, perfis de quarentena e teste).
- Centralizar as constantes ajustáveis (raios, taxas, atrasos, limites de população).
- Serialização e Deserialização (JSON <-> Python Object).
- Factories para os dois perfis de execução (quarentena finita / infinita).

Nota: todos os tempos estão em milissegundos e todas as distâncias em
coordenadas normalizadas do mundo (quadrado unitário visível).
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, Union
from pathlib import Path

logger = logging.getLogger(__name__)

# ============================================================================
# 1. ENUMS (Domínio Discreto)
# ============================================================================

class AgentState(str, Enum):
    """Categoria visual de um agente no snapshot."""
    SUSCEPTIBLE = "susceptible"
    INFECTIOUS = "infectious"
    QUARANTINED = "quarantined"

class QuarantineLifetime(str, Enum):
    """Destino de um agente em quarentena."""
    FINITE = "finite"        # Removido após QuarantineConfig.life_ms
    INFINITE = "infinite"    # Permanece para sempre (apenas esmaecido)

class TestingPolicy(str, Enum):
    """Política de testagem da população."""
    PER_AGENT_PROBABILISTIC = "per_agent_probabilistic"
    GLOBAL_RANDOM_SINGLE = "global_random_single"

# ============================================================================
# 2. DATA STRUCTURES (O Schema da Simulação)
# ============================================================================

def _check_probability(name: str, value: float):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} deve estar em [0, 1], obteve {value}")

def _check_non_negative(name: str, value: float):
    if value < 0:
        raise ValueError(f"{name} não pode ser negativo, obteve {value}")

@dataclass
class MovementConfig:
    """Geometria e cinemática das células."""
    cell_radius: float = 0.005
    goal_radius: float = 0.005
    speed: float = 0.0001             # unidades de mundo por ms
    pause_ms: float = 1000.0          # pausa mínima após chegar ao destino
    initial_travel_probability: float = 0.75
    wrap_lower: float = -2.1
    wrap_upper: float = 2.1

    def __post_init__(self):
        _check_non_negative("cell_radius", self.cell_radius)
        _check_non_negative("goal_radius", self.goal_radius)
        _check_non_negative("speed", self.speed)
        _check_non_negative("pause_ms", self.pause_ms)
        _check_probability("initial_travel_probability", self.initial_travel_probability)
        if self.wrap_lower >= self.wrap_upper:
            raise ValueError(
                f"wrap_lower ({self.wrap_lower}) deve ser menor que wrap_upper ({self.wrap_upper})"
            )

@dataclass
class PopulationConfig:
    """Coorte inicial e limites de crescimento."""
    initial_cells: int = 50
    initial_infections: int = 2
    max_population: int = 200
    respawn_rate_ms: float = 200.0
    respawn_infection_rate: float = 0.1

    def __post_init__(self):
        _check_non_negative("initial_cells", self.initial_cells)
        _check_non_negative("initial_infections", self.initial_infections)
        _check_non_negative("respawn_rate_ms", self.respawn_rate_ms)
        _check_probability("respawn_infection_rate", self.respawn_infection_rate)
        if self.initial_infections > self.initial_cells:
            raise ValueError(
                f"initial_infections ({self.initial_infections}) excede initial_cells ({self.initial_cells})"
            )
        if self.initial_cells > self.max_population:
            raise ValueError(
                f"initial_cells ({self.initial_cells}) excede max_population ({self.max_population})"
            )

@dataclass
class DiseaseConfig:
    """Transmissão por proximidade."""
    infection_radius: float = 0.02
    infection_delay_ms: float = 500.0   # incubação antes de transmitir

    def __post_init__(self):
        _check_non_negative("infection_radius", self.infection_radius)
        _check_non_negative("infection_delay_ms", self.infection_delay_ms)

@dataclass
class TestingConfig:
    """Política de testagem."""
    policy: TestingPolicy = TestingPolicy.PER_AGENT_PROBABILISTIC
    frequency_ms: float = 3500.0        # elegibilidade por agente
    chance: float = 0.55                # probabilidade de testar quando elegível
    global_interval_ms: float = 1000.0  # intervalo do teste global único

    def __post_init__(self):
        self.policy = TestingPolicy(self.policy)
        _check_non_negative("frequency_ms", self.frequency_ms)
        _check_non_negative("global_interval_ms", self.global_interval_ms)
        _check_probability("chance", self.chance)

@dataclass
class QuarantineConfig:
    """Quarentena e notificação de contatos."""
    lifetime: QuarantineLifetime = QuarantineLifetime.FINITE
    life_ms: float = 3000.0
    notification_delay_ms: float = 1000.0
    notify_infector: bool = False
    dimmed_opacity: float = 0.35        # opacidade no perfil infinito

    def __post_init__(self):
        self.lifetime = QuarantineLifetime(self.lifetime)
        _check_non_negative("life_ms", self.life_ms)
        _check_non_negative("notification_delay_ms", self.notification_delay_ms)
        _check_probability("dimmed_opacity", self.dimmed_opacity)

    @property
    def is_finite(self) -> bool:
        return self.lifetime == QuarantineLifetime.FINITE

@dataclass
class SimulationConfig:
    """
    Objeto Raiz de Configuração.
    Representa o conteúdo completo de um arquivo .json de cenário.
    """
    name: str
    description: str = ""
    movement: MovementConfig = field(default_factory=MovementConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    disease: DiseaseConfig = field(default_factory=DiseaseConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)
    quarantine: QuarantineConfig = field(default_factory=QuarantineConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """
        Factory method que hidrata um dicionário (do JSON) em objetos tipados.
        Seções ausentes assumem os valores padrão.
        """
        try:
            return cls(
                name=data['name'],
                description=data.get('description', ''),
                movement=MovementConfig(**data.get('movement', {})),
                population=PopulationConfig(**data.get('population', {})),
                disease=DiseaseConfig(**data.get('disease', {})),
                testing=TestingConfig(**data.get('testing', {})),
                quarantine=QuarantineConfig(**data.get('quarantine', {})),
            )
        except KeyError as e:
            raise ValueError(f"JSON de cenário inválido. Campo faltando: {e}")
        except TypeError as e:
            raise ValueError(f"Campo desconhecido no JSON: {e}")

    @classmethod
    def load_from_json(cls, filepath: Union[str, Path]) -> 'SimulationConfig':
        """Carrega e valida um arquivo JSON do disco."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Arquivo de cenário não encontrado: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['testing']['policy'] = self.testing.policy.value
        data['quarantine']['lifetime'] = self.quarantine.lifetime.value
        return data

    def save_to_json(self, filepath: Union[str, Path]):
        """Salva a configuração atual em JSON (útil para criar templates)."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)

# ============================================================================
# 3. PRESETS (Perfis de execução)
# ============================================================================

def get_default_finite_config() -> SimulationConfig:
    """Perfil com remoção após a quarentena e testagem individual."""
    return SimulationConfig(
        name="Quarentena Finita",
        description="Agentes em quarentena saem da população; cada agente é testado periodicamente",
        quarantine=QuarantineConfig(lifetime=QuarantineLifetime.FINITE, notify_infector=False),
        testing=TestingConfig(policy=TestingPolicy.PER_AGENT_PROBABILISTIC),
    )

def get_default_infinite_config() -> SimulationConfig:
    """Perfil com quarentena permanente e um teste global por intervalo."""
    return SimulationConfig(
        name="Quarentena Infinita",
        description="Agentes em quarentena permanecem esmaecidos; um agente aleatório é testado por intervalo",
        quarantine=QuarantineConfig(lifetime=QuarantineLifetime.INFINITE, notify_infector=True),
        testing=TestingConfig(policy=TestingPolicy.GLOBAL_RANDOM_SINGLE),
    )

# ============================================================================
# 4. DYNAMIC FACTORIES (Para compatibilidade com Testes e CLI)
# ============================================================================

def create_finite_scenario(initial_cells: int = 50, initial_infections: int = 2,
                           max_population: int = 200) -> SimulationConfig:
    """Cria o perfil finito com parâmetros de população customizáveis."""
    config = get_default_finite_config()
    config.population = PopulationConfig(
        initial_cells=initial_cells,
        initial_infections=initial_infections,
        max_population=max_population,
    )
    return config

def create_infinite_scenario(initial_cells: int = 50, initial_infections: int = 2,
                             max_population: int = 200) -> SimulationConfig:
    """Cria o perfil infinito com parâmetros de população customizáveis."""
    config = get_default_infinite_config()
    config.population = PopulationConfig(
        initial_cells=initial_cells,
        initial_infections=initial_infections,
        max_population=max_population,
    )
    return config
