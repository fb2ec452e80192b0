"""Incident wave sources.

A source is a pair of functions sharing an amplitude and a medium:
the field at a point, and the coefficients of its expansion in
regular waves about an arbitrary centre.
"""
from typing import Callable, Self
import numpy as np

from ..base.consts import Amplitude, AmplitudeFunction, Coordinates, WaveType
from ..base.medium import LinearElasticMedium
from .potentials import HelmholtzPotential, displacement, traction
from .special import cartesian_to_polar, hankel


def amplitude_function(amplitude: Amplitude) -> AmplitudeFunction:
    """Wrap a constant amplitude into a function of frequency.
    Functions of frequency are returned unchanged."""
    if callable(amplitude):
        return amplitude
    constant = amplitude
    return lambda omega: constant


def _medium_parameters(medium: LinearElasticMedium) -> tuple[float, float, float]:
    return (medium.density, medium.cp, medium.cs)


class RegularSource:
    """An incident wave which is finite at the centres it is
    expanded about.

    Attributes:
        medium (LinearElasticMedium): The medium the source radiates in
        field (Callable): (x, omega) -> the incident field at x
        coefficients (Callable): (order, centre, omega) -> the
            coefficients of the regular-wave expansion about centre
        dimension (int): The number of spatial dimensions
    """
    def __init__(
        self,
        medium: LinearElasticMedium,
        field: Callable,
        coefficients: Callable,
        dimension: int = 2
    ):
        self.medium = medium
        self.field = field
        self.coefficients = coefficients
        self.dimension = dimension

    def __add__(self, other: Self) -> Self:
        """Superpose two sources radiating in the same medium."""
        if _medium_parameters(other.medium) != _medium_parameters(self.medium) or other.dimension != self.dimension:
            raise ValueError("Error: Can only add sources sharing a medium and dimension")

        def field(x, omega):
            return self.field(x, omega) + other.field(x, omega)

        def coefficients(order, centre, omega):
            return self.coefficients(order, centre, omega) + other.coefficients(order, centre, omega)

        return type(self)(self.medium, field, coefficients, self.dimension)

    def __mul__(self, scalar: complex) -> Self:
        def field(x, omega):
            return scalar * self.field(x, omega)

        def coefficients(order, centre, omega):
            return scalar * self.coefficients(order, centre, omega)

        return type(self)(self.medium, field, coefficients, self.dimension)

    __rmul__ = __mul__


def point_source(
    medium: LinearElasticMedium,
    source_position: Coordinates,
    amplitude: Amplitude = 1.0,
    wave_type: WaveType = WaveType.PRESSURE
) -> RegularSource:
    """A 2D point source of a single wave type,
    (A(omega) i / 4) H_0(k |x - source_position|).

    Args:
        medium (LinearElasticMedium): The medium the source radiates in
        source_position (Coordinates): The location of the source
        amplitude (Amplitude): A constant or a function of frequency
        wave_type (WaveType): Whether this is a pressure or shear source
    """
    source_position = np.asarray(source_position, dtype=float)
    amp = amplitude_function(amplitude)
    wavespeed = medium.wavespeed(wave_type)

    def source_field(x, omega):
        k = omega / wavespeed
        return (amp(omega) * 1j) / 4 * hankel(0, k * np.linalg.norm(np.asarray(x) - source_position))

    def source_coefficients(order, centre, omega):
        k = omega / wavespeed
        r, theta = cartesian_to_polar(np.asarray(centre) - source_position)
        ns = np.arange(-order, order + 1)

        # Graf's addition theorem
        return (amp(omega) * 1j) / 4 * hankel(-ns, k * r) * np.exp(-1j * ns * theta)

    return RegularSource(medium, source_field, source_coefficients)


def pressure_point_source(
    medium: LinearElasticMedium,
    source_position: Coordinates,
    amplitude: Amplitude = 1.0
) -> RegularSource:
    return point_source(medium, source_position, amplitude, WaveType.PRESSURE)


def shear_point_source(
    medium: LinearElasticMedium,
    source_position: Coordinates,
    amplitude: Amplitude = 1.0
) -> RegularSource:
    return point_source(medium, source_position, amplitude, WaveType.SHEAR)


def spherical_indices(order: int) -> tuple[np.ndarray, np.ndarray]:
    """Degrees l and orders m of a spherical expansion, listed as
    l = 0..order, m = -l..l."""
    ls = np.array([l for l in range(order + 1) for m in range(-l, l + 1)])
    ms = np.array([m for l in range(order + 1) for m in range(-l, l + 1)])
    return ls, ms


def plane_z_shear_source(
    medium: LinearElasticMedium,
    position: np.ndarray = None,
    amplitude: Amplitude = 1.0
) -> RegularSource:
    """A 3D shear plane wave A exp(i ks (x - position).e_z) e_x,
    travelling along z and polarised along x.

    The Debye potential coefficients of the expansion follow
    "Resonance theory of elastic waves ultrasonically scattered from
    an elastic sphere" (1987). Only the |m| = 1 terms are non-zero.
    """
    position = np.zeros(3) if position is None else np.asarray(position, dtype=float)
    amp = amplitude_function(amplitude)

    direction = np.array([0.0, 0.0, 1.0])
    polarisation = np.array([1.0, 0.0, 0.0])

    def source_field(x, omega):
        return amp(omega) * np.exp(1j * omega / medium.cs * np.dot(np.asarray(x) - position, direction)) * polarisation

    def spherical_expansion(order, centre, omega):
        ks = omega / medium.cs
        ls, ms = spherical_indices(order)
        projected = np.sum(source_field(centre, omega) * polarisation)

        # Selection rule: only |m| = 1 couples to an x-polarised wave along z
        selected = np.abs(ms) == 1
        weights = np.zeros(len(ls), dtype=complex)
        l_sel = ls[selected]
        weights[selected] = (1j)**l_sel * np.sqrt((2 * l_sel + 1) / (l_sel * (l_sel + 1)))

        pcoefs = np.zeros(len(ls), dtype=complex)
        phi_coefs = np.sqrt(np.pi) * projected * ms * weights
        chi_coefs = np.sqrt(np.pi) * projected * weights

        return np.vstack([pcoefs, phi_coefs, chi_coefs]) / (-1j * ks)

    return RegularSource(medium, source_field, spherical_expansion, dimension=3)


class BearingSource:
    """A point source inside a roller bearing together with the
    waves reflected by the bearing's boundaries.

    Attributes:
        source_position (np.ndarray): The location of the point source
        amplitudes (tuple[complex, complex]): The (pressure, shear)
            amplitudes of the point source at the solved frequency
        potentials (tuple[HelmholtzPotential, HelmholtzPotential]): The
            reflected (pressure, shear) potentials
    """
    def __init__(
        self,
        source_position: Coordinates,
        amplitudes: tuple[complex, complex],
        potentials: tuple[HelmholtzPotential, HelmholtzPotential]
    ):
        self.source_position = np.asarray(source_position, dtype=float)
        self.amplitudes = tuple(amplitudes)
        self.potentials = tuple(potentials)

    @property
    def pressure(self) -> HelmholtzPotential:
        return self.potentials[0]

    @property
    def shear(self) -> HelmholtzPotential:
        return self.potentials[1]

    @property
    def omega(self) -> float:
        return self.pressure.omega

    def field(self, x: Coordinates) -> np.ndarray:
        """The reflected (phi, psi) potentials at x."""
        return np.array([self.pressure.field(x), self.shear.field(x)])

    def displacement(self, x: Coordinates) -> np.ndarray:
        """The reflected displacement (u_r, u_theta) at x."""
        return displacement(self.pressure, self.shear, x)

    def traction(self, medium: LinearElasticMedium, x: Coordinates) -> np.ndarray:
        """The reflected traction (sigma_rr, sigma_rtheta) at x."""
        return traction(self.pressure, self.shear, medium, x)
