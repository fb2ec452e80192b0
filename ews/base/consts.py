import numpy as np
from typing import Callable, Union
from enum import Enum

## ---------- Constants ----------
# Number of unknowns per angular mode: (phi, psi) x (regular, outgoing)
NUM_MODE_UNKNOWNS = 4

# Column-scaled condition number above which a per-mode
# boundary system is treated as singular
SINGULAR_TOLERANCE = 1.0 / np.finfo(float).eps

## ---------- Custom types ----------
Coordinates = tuple[float, float]
Vector = np.ndarray[(int,), complex]
Matrix = np.ndarray[(int, int), complex]
ModeIndices = np.ndarray[(int,), int]
AmplitudeFunction = Callable[[float], complex]
Amplitude = Union[float, complex, AmplitudeFunction]

## ---------- Enums ----------
class WaveType(Enum):
    """The two scalar Helmholtz potentials of a 2D elastic wave"""
    PRESSURE = 1
    SHEAR = 2

class BoundaryKind(Enum):
    """The two traction-free boundaries of a roller bearing"""
    INNER = 1
    OUTER = 2

class ParallelMode(Enum):
    """How independent per-mode/per-frequency solves are evaluated"""
    SERIAL = 1
    THREAD = 2
    PROCESS = 3

    @classmethod
    def from_string(cls, written: str) -> "ParallelMode":
        """Parse a parallel mode from its (case-insensitive) name."""
        try:
            return cls[written.upper().strip()]
        except KeyError:
            raise ValueError(f"Cannot parse parallel_mode = \"{written}\"") from None
