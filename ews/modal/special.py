"""Cylindrical wave functions and their translation (addition) theorems.

Regular waves are J_n(k r) exp(i n theta) and outgoing waves are
H_n(k r) exp(i n theta), where H_n is the Hankel function of the
first kind.
"""
from typing import Callable
import numpy as np
from scipy.special import hankel1, h1vp, jv, jvp

from ..base.consts import Coordinates
from ..base.medium import AcousticMedium


def cartesian_to_polar(x: Coordinates) -> tuple[float, float]:
    """Polar coordinates (r, theta) of a 2D point, theta in (-pi, pi]."""
    return float(np.hypot(x[0], x[1])), float(np.arctan2(x[1], x[0]))


def hankel(order, argument):
    """Hankel function of the first kind H_order(argument)."""
    return hankel1(order, argument)


def radial_basis(
    orders: np.ndarray,
    argument,
    regular: bool,
    derivative: int = 0
) -> np.ndarray:
    """Bessel J_n (regular) or Hankel H_n (outgoing) functions of the
    given orders, or their derivatives with respect to the argument.

    Args:
        orders (np.ndarray): The (integer) orders n
        argument (float | complex): The argument k r
        regular (bool): Whether to use J_n (True) or H_n (False)
        derivative (int): Which derivative to take (0, 1 or 2)
    """
    if derivative == 0:
        return jv(orders, argument) if regular else hankel1(orders, argument)
    return jvp(orders, argument, derivative) if regular else h1vp(orders, argument, derivative)


def regular_basis_function(medium: AcousticMedium, omega: float) -> Callable:
    """The regular basis J_n(k r) exp(i n theta), n = -order..order,
    as a function (order, x) -> np.ndarray."""
    k = medium.wavenumber(omega)

    def basis(order: int, x: Coordinates) -> np.ndarray:
        r, theta = cartesian_to_polar(x)
        ns = np.arange(-order, order + 1)
        return jv(ns, k * r) * np.exp(1j * ns * theta)

    return basis


def outgoing_basis_function(medium: AcousticMedium, omega: float) -> Callable:
    """The outgoing basis H_n(k r) exp(i n theta), n = -order..order,
    as a function (order, x) -> np.ndarray."""
    k = medium.wavenumber(omega)

    def basis(order: int, x: Coordinates) -> np.ndarray:
        r, theta = cartesian_to_polar(x)
        ns = np.arange(-order, order + 1)
        return hankel1(ns, k * r) * np.exp(1j * ns * theta)

    return basis


def _translation_orders(in_order: int, out_order: int) -> np.ndarray:
    # [n, m] -> m - n for n = -out_order..out_order, m = -in_order..in_order
    ns = np.arange(-out_order, out_order + 1)[:, np.newaxis]
    ms = np.arange(-in_order, in_order + 1)[np.newaxis, :]
    return ms - ns


def outgoing_translation_matrix(
    medium: AcousticMedium,
    in_order: int,
    out_order: int,
    omega: float,
    shift: Coordinates
) -> np.ndarray:
    """Re-expand outgoing waves centred at c as regular waves centred
    at c + shift (Graf's addition theorem).

    If a field is sum_m a_m H_m(k|z - c|) exp(i m theta), then close
    to c + shift (|z - c - shift| < |shift|) it equals
    sum_n b_n J_n(k|y|) exp(i n theta_y), y = z - c - shift, with
    b = V a and V[n, m] = H_{m-n}(k|shift|) exp(i (m-n) theta_shift).

    Returns:
        np.ndarray: A shape (2*out_order + 1, 2*in_order + 1) matrix V
    """
    r, theta = cartesian_to_polar(shift)
    if r == 0:
        raise ValueError("Error: outgoing waves cannot be translated by a zero shift")
    k = medium.wavenumber(omega)
    orders = _translation_orders(in_order, out_order)
    return hankel1(orders, k * r) * np.exp(1j * orders * theta)


def regular_translation_matrix(
    medium: AcousticMedium,
    in_order: int,
    out_order: int,
    omega: float,
    shift: Coordinates
) -> np.ndarray:
    """Re-expand waves centred at c as the same family of waves
    centred at c + shift, with
    U[n, m] = J_{m-n}(k|shift|) exp(i (m-n) theta_shift).

    Valid everywhere for regular waves, and for outgoing waves far
    from c + shift (|z - c - shift| > |shift|).

    Returns:
        np.ndarray: A shape (2*out_order + 1, 2*in_order + 1) matrix U
    """
    r, theta = cartesian_to_polar(shift)
    k = medium.wavenumber(omega)
    orders = _translation_orders(in_order, out_order)
    return jv(orders, k * r) * np.exp(1j * orders * theta)
