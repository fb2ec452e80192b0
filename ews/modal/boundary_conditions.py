"""Traction boundary conditions on circular boundaries, one angular
mode at a time.

The displacement is u = grad(phi) + curl(psi e_z). For a single mode
n the potentials are

    phi = (a_J J_n(kp r) + a_H H_n(kp r)) exp(i n theta)
    psi = (b_J J_n(ks r) + b_H H_n(ks r)) exp(i n theta)

and the tractions (sigma_rr, sigma_rtheta) on a circle of radius r
are linear in the unknowns [a_J, a_H, b_J, b_H].
"""
import numpy as np

from ..base.bearing import RollerBearing
from ..base.consts import BoundaryKind, Matrix
from ..base.medium import LinearElasticMedium
from .special import radial_basis


def _pressure_traction_column(
    kp: float,
    radius: float,
    n: int,
    lam: float,
    mu: float,
    regular: bool
) -> np.ndarray:
    Z, dZ, d2Z = (radial_basis(n, kp * radius, regular, d) for d in range(3))
    sigma_rr = -lam * kp**2 * Z + 2 * mu * kp**2 * d2Z
    sigma_rt = 2j * mu * n * (kp * dZ / radius - Z / radius**2)
    return np.array([sigma_rr, sigma_rt])


def _shear_traction_column(
    ks: float,
    radius: float,
    n: int,
    mu: float,
    regular: bool
) -> np.ndarray:
    Z, dZ, d2Z = (radial_basis(n, ks * radius, regular, d) for d in range(3))
    sigma_rr = 2j * mu * n * (ks * dZ / radius - Z / radius**2)
    sigma_rt = mu * (-ks**2 * d2Z + ks * dZ / radius - n**2 * Z / radius**2)
    return np.array([sigma_rr, sigma_rt])


def traction_mode_matrix(
    omega: float,
    medium: LinearElasticMedium,
    radius: float,
    n: int
) -> Matrix:
    """The tractions of the four basis potentials of mode n on a
    circle of the given radius.

    Args:
        omega (float): The angular frequency
        medium (LinearElasticMedium): The elastic medium
        radius (float): The radius of the circle
        n (int): The angular mode

    Returns:
        Matrix: A shape (2, 4) matrix. Rows are (sigma_rr, sigma_rtheta),
            columns are the potentials (phi_J, phi_H, psi_J, psi_H).
    """
    kp = medium.kp(omega)
    ks = medium.ks(omega)
    lam = medium.lame_lambda
    mu = medium.lame_mu

    return np.column_stack([
        _pressure_traction_column(kp, radius, n, lam, mu, regular=True),
        _pressure_traction_column(kp, radius, n, lam, mu, regular=False),
        _shear_traction_column(ks, radius, n, mu, regular=True),
        _shear_traction_column(ks, radius, n, mu, regular=False),
    ])


def boundary_condition_mode(
    omega: float,
    boundary: BoundaryKind,
    bearing: RollerBearing,
    n: int
) -> Matrix:
    """The shape (2, 4) traction operator of mode n on one boundary
    of the bearing."""
    return traction_mode_matrix(omega, bearing.medium, bearing.radius(boundary), n)


def boundary_condition_system(
    omega: float,
    bearing: RollerBearing,
    inner_boundary: BoundaryKind,
    outer_boundary: BoundaryKind,
    n: int
) -> Matrix:
    """The shape (4, 4) system of mode n: the traction operator on
    the first boundary stacked above the one on the second."""
    return np.vstack([
        boundary_condition_mode(omega, inner_boundary, bearing, n),
        boundary_condition_mode(omega, outer_boundary, bearing, n),
    ])
