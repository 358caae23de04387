"""
Utilitários de Geometria 2D.

Operações vetoriais puras (sem mutação do chamador) e o teste de
interseção de círculos usado tanto na chegada ao destino quanto na
detecção de contatos.
"""

import math
from random import Random
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    """Ponto/vetor imutável em coordenadas normalizadas do mundo."""
    x: float
    y: float

    def add(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def subtract(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> 'Vector2':
        return Vector2(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> 'Vector2':
        """Vetor unitário na mesma direção. O vetor nulo permanece nulo."""
        norm = self.length()
        if norm == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / norm, self.y / norm)

    def as_tuple(self):
        return (self.x, self.y)

    @classmethod
    def random_in_unit_square(cls, rng: Random) -> 'Vector2':
        """Ponto uniforme no quadrado unitário."""
        return cls(rng.random(), rng.random())


def distance(a: Vector2, b: Vector2) -> float:
    """Distância euclidiana entre dois pontos."""
    return math.hypot(a.x - b.x, a.y - b.y)


def circle_intersection(position_a: Vector2, radius_a: float,
                        position_b: Vector2, radius_b: float) -> bool:
    """
    Verdadeiro se os círculos se sobrepõem.

    Desigualdade estrita: círculos apenas tangentes não contam.
    """
    return distance(position_a, position_b) < radius_a + radius_b


def wrap_position(position: Vector2, lower: float, upper: float) -> Vector2:
    """
    Reposiciona coordenadas que saíram dos limites do mundo.

    Reset unilateral: acima de `upper` volta para 0, abaixo de `lower` vai para 1.
    """
    def _wrap(value: float) -> float:
        if value > upper:
            return 0.0
        if value < lower:
            return 1.0
        return value

    return Vector2(_wrap(position.x), _wrap(position.y))
