import numpy as np


class ScatteringError(Exception):
    """Base class for all errors raised by the scattering core."""


class ModeCountError(ScatteringError, ValueError):
    """An exception raised when more Fourier modes are requested
    than there are sampled field values to determine them.
    """


class ShapeMismatchError(ScatteringError, ValueError):
    """An exception raised when field or coefficient arrays do not
    match the declared number of angles or modes.
    """


class SingularModeSystemError(ScatteringError, np.linalg.LinAlgError):
    """An exception raised when the boundary-condition system of a
    single angular mode is numerically singular (a resonance).

    Attributes:
        omega (float): The angular frequency of the failed solve
        mode (int): The angular mode of the failed solve
        condition_number (float): The (column-scaled) condition
            number of the system, if it could be computed
    """
    def __init__(self, omega: float, mode: int, condition_number: float = np.inf):
        self.omega = omega
        self.mode = mode
        self.condition_number = condition_number
        super().__init__(
            f"Boundary system is singular at omega = {omega:.6g}, mode n = {mode} "
            f"(condition number {condition_number:.3e})"
        )

    def __reduce__(self):
        return (type(self), (self.omega, self.mode, self.condition_number))
