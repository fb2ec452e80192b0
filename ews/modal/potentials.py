from typing import Self
import numpy as np

from ..base.consts import Coordinates, ModeIndices, WaveType
from ..base.exceptions import ShapeMismatchError
from ..base.medium import LinearElasticMedium
from .boundary_conditions import traction_mode_matrix
from .fourier import validate_modes
from .special import cartesian_to_polar, radial_basis


class HelmholtzPotential:
    """A scalar potential solving the Helmholtz equation at a fixed
    frequency, stored by its cylindrical-wave coefficients:

        sum_{n in modes} (c[0,n] J_n(k r) + c[1,n] H_n(k r)) exp(i n theta)

    Instances are immutable once built.

    Attributes:
        wave_type (WaveType): Whether this is a pressure (phi) or
            shear (psi) potential
        wavespeed (float): The wave speed of this wave type
        wavenumber (float): The wavenumber at the working frequency
        coefficients (np.ndarray): A shape (2, M) read-only array;
            row 0 holds regular (Bessel) and row 1 outgoing (Hankel)
            coefficients
        modes (np.ndarray): A shape (M,) read-only array of modes
    """
    def __init__(
        self,
        wave_type: WaveType,
        wavespeed: float,
        wavenumber: float,
        coefficients: np.ndarray,
        modes: ModeIndices
    ):
        modes = np.array(validate_modes(modes), copy=True)
        coefficients = np.array(coefficients, dtype=complex, copy=True)
        if coefficients.shape != (2, len(modes)):
            raise ShapeMismatchError(
                f"Error: Potential coefficients should have shape (2, {len(modes)}). Has shape {coefficients.shape} instead."
            )
        modes.setflags(write=False)
        coefficients.setflags(write=False)

        self.wave_type = wave_type
        self.wavespeed = wavespeed
        self.wavenumber = wavenumber
        self.coefficients = coefficients
        self.modes = modes

    @property
    def omega(self) -> float:
        """The angular frequency this potential was built for"""
        return self.wavenumber * self.wavespeed

    @property
    def basis_order(self) -> int:
        return int(np.max(np.abs(self.modes))) if len(self.modes) else 0

    def radial_coefficients(self, r: float, derivative: int = 0) -> np.ndarray:
        """The radial factor of every mode (or its r-derivative) at
        radius r.

        Returns:
            np.ndarray: A shape (M,) array whose [n] entry is
                d^j/dr^j (c[0,n] J_n(k r) + c[1,n] H_n(k r))
        """
        k = self.wavenumber
        scale = k**derivative
        regular = radial_basis(self.modes, k * r, regular=True, derivative=derivative)
        if np.any(self.coefficients[1] != 0):
            outgoing = radial_basis(self.modes, k * r, regular=False, derivative=derivative)
        else:
            outgoing = np.zeros_like(regular)
        return scale * (self.coefficients[0] * regular + self.coefficients[1] * outgoing)

    def field(self, x: Coordinates) -> complex:
        """The value of the potential at the point x."""
        r, theta = cartesian_to_polar(x)
        return complex(np.sum(self.radial_coefficients(r) * np.exp(1j * self.modes * theta)))

    def __add__(self, other: Self) -> Self:
        if (
            other.wave_type is not self.wave_type
            or not np.array_equal(other.modes, self.modes)
            or not np.isclose(other.wavenumber, self.wavenumber)
        ):
            raise ShapeMismatchError("Error: Can only add potentials of the same wave type, wavenumber and modes")
        return type(self)(
            self.wave_type, self.wavespeed, self.wavenumber,
            self.coefficients + other.coefficients, self.modes
        )

    def __repr__(self) -> str:
        return (
            f"HelmholtzPotential({self.wave_type.name}, wavespeed={self.wavespeed}, "
            f"wavenumber={self.wavenumber}, basis_order={self.basis_order})"
        )


def _check_pair(pressure: HelmholtzPotential, shear: HelmholtzPotential) -> None:
    if not np.array_equal(pressure.modes, shear.modes):
        raise ShapeMismatchError(
            f"Error: Pressure and shear potentials must share modes (got {pressure.modes} and {shear.modes})"
        )


def displacement(
    pressure: HelmholtzPotential,
    shear: HelmholtzPotential,
    x: Coordinates
) -> np.ndarray:
    """The displacement u = grad(phi) + curl(psi e_z) at the point x.

    Returns:
        np.ndarray: A shape (2,) array (u_r, u_theta) in polar
            components at x
    """
    _check_pair(pressure, shear)
    r, theta = cartesian_to_polar(x)
    modes = pressure.modes
    exps = np.exp(1j * modes * theta)

    phi = pressure.radial_coefficients(r)
    dr_phi = pressure.radial_coefficients(r, derivative=1)
    psi = shear.radial_coefficients(r)
    dr_psi = shear.radial_coefficients(r, derivative=1)

    u_r = np.sum((dr_phi + 1j * modes * psi / r) * exps)
    u_theta = np.sum((1j * modes * phi / r - dr_psi) * exps)
    return np.array([u_r, u_theta])


def traction(
    pressure: HelmholtzPotential,
    shear: HelmholtzPotential,
    medium: LinearElasticMedium,
    x: Coordinates
) -> np.ndarray:
    """The traction on the circle through x (centred at the origin).

    Returns:
        np.ndarray: A shape (2,) array (sigma_rr, sigma_rtheta) at x
    """
    _check_pair(pressure, shear)
    r, theta = cartesian_to_polar(x)
    omega = pressure.omega

    total = np.zeros(2, dtype=complex)
    for i, n in enumerate(pressure.modes):
        mode_coefficients = np.concatenate([pressure.coefficients[:, i], shear.coefficients[:, i]])
        total += traction_mode_matrix(omega, medium, r, n) @ mode_coefficients * np.exp(1j * n * theta)
    return total
