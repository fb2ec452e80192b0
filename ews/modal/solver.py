"""Reflection of a point source by the two traction-free boundaries of
a roller bearing, solved one angular mode at a time.

Angular modes decouple on circular boundaries, so for every retained
mode n a 4x4 system is solved for the reflected coefficients
[phi_J, phi_H, psi_J, psi_H] that cancel the traction of the incident
field on both the inner and the outer boundary.
"""
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from functools import partial
from typing import Callable, Iterable, Optional
import logging
import numpy as np

from ..base.bearing import RollerBearing
from ..base.consts import (
    Amplitude, BoundaryKind, Coordinates, Matrix, ModeIndices,
    NUM_MODE_UNKNOWNS, ParallelMode, SINGULAR_TOLERANCE, Vector, WaveType
)
from ..base.exceptions import SingularModeSystemError
from .boundary_conditions import boundary_condition_mode, boundary_condition_system
from .fourier import mode_range, validate_modes
from .potentials import HelmholtzPotential
from .sources import BearingSource, amplitude_function
from .special import cartesian_to_polar, outgoing_translation_matrix, regular_translation_matrix


def _as_modes(modes) -> ModeIndices:
    if isinstance(modes, (int, np.integer)):
        return mode_range(int(modes))
    modes = validate_modes(modes)
    if len(modes) == 0:
        raise ValueError("Error: At least one mode must be retained")
    return modes


def _incident_column(
    bearing: RollerBearing,
    boundary: BoundaryKind,
    source_position: np.ndarray,
    amplitudes: tuple[complex, complex],
    modes: ModeIndices,
    omega: float
) -> np.ndarray:
    """Coefficients of the incident point source about the origin,
    valid on the given boundary of the bearing.

    Returns:
        np.ndarray: A shape (4, M) array with rows
            (phi_J, phi_H, psi_J, psi_H)
    """
    source_radius, _ = cartesian_to_polar(source_position)
    boundary_radius = bearing.radius(boundary)
    if np.isclose(source_radius, boundary_radius):
        raise ValueError(
            f"Error: Point source at radius {source_radius} lies on the {boundary.name.lower()} boundary"
        )

    order = int(np.max(np.abs(modes)))
    rows = modes + order
    shift = -source_position
    column = np.zeros((NUM_MODE_UNKNOWNS, len(modes)), dtype=complex)

    for i, (wave_type, amplitude) in enumerate(zip(WaveType, amplitudes)):
        acoustic = bearing.medium.acoustic(wave_type)
        if boundary_radius < source_radius:
            # Boundary is closer to the origin than the source: regular waves
            translation = outgoing_translation_matrix(acoustic, 0, order, omega, shift)
            column[2 * i] = amplitude * translation[rows, 0]
        else:
            # Boundary encloses the source: outgoing waves
            translation = regular_translation_matrix(acoustic, 0, order, omega, shift)
            column[2 * i + 1] = amplitude * translation[rows, 0]

    return (1j / 4) * column


def incident_coefficients(
    bearing: RollerBearing,
    source_position: Coordinates,
    amplitudes: tuple[Amplitude, Amplitude],
    modes,
    omega: float
) -> tuple[Matrix, Matrix]:
    """The coefficients of a point source (with pressure and shear
    parts) about the bearing centre, on the inner and the outer
    boundary.

    Args:
        bearing (RollerBearing): The bearing
        source_position (Coordinates): The location of the source
        amplitudes (tuple[Amplitude, Amplitude]): The pressure and
            shear amplitudes (constants or functions of frequency)
        modes: The retained modes (or a basis order)
        omega (float): The angular frequency

    Returns:
        tuple[Matrix, Matrix]: Two shape (4, M) arrays (inner, outer)
            with rows (phi_J, phi_H, psi_J, psi_H)
    """
    modes = _as_modes(modes)
    source_position = np.asarray(source_position, dtype=float)
    amps = tuple(amplitude_function(a)(omega) for a in amplitudes)

    inner = _incident_column(bearing, BoundaryKind.INNER, source_position, amps, modes, omega)
    outer = _incident_column(bearing, BoundaryKind.OUTER, source_position, amps, modes, omega)
    return inner, outer


def incident_potentials(
    bearing: RollerBearing,
    source_position: Coordinates,
    amplitudes: tuple[Amplitude, Amplitude],
    modes,
    omega: float,
    boundary: BoundaryKind
) -> tuple[HelmholtzPotential, HelmholtzPotential]:
    """The incident (pressure, shear) potentials, expanded about the
    bearing centre, valid near the given boundary."""
    modes = _as_modes(modes)
    inner, outer = incident_coefficients(bearing, source_position, amplitudes, modes, omega)
    coes = inner if boundary is BoundaryKind.INNER else outer
    return _potentials_from_coefficients(bearing, coes, modes, omega)


def _potentials_from_coefficients(
    bearing: RollerBearing,
    coes: Matrix,
    modes: ModeIndices,
    omega: float
) -> tuple[HelmholtzPotential, HelmholtzPotential]:
    medium = bearing.medium
    phi = HelmholtzPotential(WaveType.PRESSURE, medium.cp, medium.kp(omega), coes[0:2], modes)
    psi = HelmholtzPotential(WaveType.SHEAR, medium.cs, medium.ks(omega), coes[2:4], modes)
    return phi, psi


def column_scaled_condition_number(matrix: Matrix) -> float:
    """The 2-norm condition number of a matrix after scaling each
    column to unit maximum magnitude."""
    scales = np.max(np.abs(matrix), axis=0)
    if np.any(scales == 0) or not np.all(np.isfinite(scales)):
        return np.inf
    return float(np.linalg.cond(matrix / scales))


def solve_mode(
    omega: float,
    bearing: RollerBearing,
    n: int,
    incident_inner: Vector,
    incident_outer: Vector,
    singular_tolerance: float = SINGULAR_TOLERANCE
) -> Vector:
    """Solve for the reflected coefficients of a single mode.

    Args:
        omega (float): The angular frequency
        bearing (RollerBearing): The bearing
        n (int): The angular mode
        incident_inner (Vector): The shape (4,) incident coefficients
            of this mode valid on the inner boundary
        incident_outer (Vector): The shape (4,) incident coefficients
            of this mode valid on the outer boundary
        singular_tolerance (float): The largest acceptable
            column-scaled condition number of the system

    Returns:
        Vector: The shape (4,) reflected coefficients
            (phi_J, phi_H, psi_J, psi_H)

    Raises:
        SingularModeSystemError: If the system is numerically singular
    """
    inner_rows = boundary_condition_mode(omega, BoundaryKind.INNER, bearing, n)
    outer_rows = boundary_condition_mode(omega, BoundaryKind.OUTER, bearing, n)
    system = boundary_condition_system(omega, bearing, BoundaryKind.INNER, BoundaryKind.OUTER, n)

    # The reflected traction cancels the incident traction on both boundaries
    forcing = -np.concatenate([inner_rows @ incident_inner, outer_rows @ incident_outer])

    condition_number = column_scaled_condition_number(system)
    if not condition_number <= singular_tolerance:
        logging.error(
            f"Mode n = {n} system at omega = {omega:.6g} has condition number {condition_number:.3e}"
        )
        raise SingularModeSystemError(omega, n, condition_number)

    try:
        reflected = np.linalg.solve(system, forcing)
    except np.linalg.LinAlgError as err:
        logging.exception(f"Mode n = {n} system at omega = {omega:.6g} could not be solved")
        raise SingularModeSystemError(omega, n, condition_number) from err

    if not np.all(np.isfinite(reflected)):
        logging.error(f"Mode n = {n} solution at omega = {omega:.6g} is not finite")
        raise SingularModeSystemError(omega, n, condition_number)

    logging.debug(f"Solved mode n = {n} at omega = {omega:.6g} (condition number {condition_number:.3e})")
    return reflected


def _solve_mode_entry(
    omega: float,
    bearing: RollerBearing,
    singular_tolerance: float,
    entry: tuple[int, Vector, Vector]
) -> Vector:
    n, incident_inner, incident_outer = entry
    return solve_mode(omega, bearing, int(n), incident_inner, incident_outer, singular_tolerance)


def parallel_map(
    func: Callable,
    items: Iterable,
    parallel_mode: ParallelMode = ParallelMode.SERIAL,
    max_workers: Optional[int] = None
) -> list:
    """Apply func to every item, possibly concurrently.

    Results are always returned in the order of items. Exceptions
    raised by func propagate to the caller.
    """
    if parallel_mode is ParallelMode.SERIAL:
        return [func(item) for item in items]
    elif parallel_mode is ParallelMode.THREAD:
        executor_type = ThreadPoolExecutor
    elif parallel_mode is ParallelMode.PROCESS:
        executor_type = ProcessPoolExecutor
    else:
        raise ValueError(f"Unrecognized parallel mode {parallel_mode}")

    with executor_type(max_workers=max_workers) as executor:
        return list(executor.map(func, items))


def reflected_coefficients(
    bearing: RollerBearing,
    source_position: Coordinates,
    amplitudes: tuple[Amplitude, Amplitude],
    modes,
    omega: float,
    parallel_mode: ParallelMode = ParallelMode.SERIAL,
    max_workers: Optional[int] = None,
    singular_tolerance: float = SINGULAR_TOLERANCE
) -> Matrix:
    """Solve every retained mode for the reflected coefficients.

    Returns:
        Matrix: A shape (4, M) array; column j holds the coefficients
            (phi_J, phi_H, psi_J, psi_H) of modes[j]
    """
    modes = _as_modes(modes)
    inner, outer = incident_coefficients(bearing, source_position, amplitudes, modes, omega)

    solve = partial(_solve_mode_entry, omega, bearing, singular_tolerance)
    entries = list(zip(modes, inner.T, outer.T))
    logging.debug(f"Solving {len(modes)} modes at omega = {omega:.6g} ({parallel_mode.name.lower()})")

    return np.column_stack(parallel_map(solve, entries, parallel_mode, max_workers))


def bearing_point_source(
    bearing: RollerBearing,
    source_position: Coordinates,
    amplitudes: tuple[Amplitude, Amplitude],
    modes,
    omega: float,
    parallel_mode: ParallelMode = ParallelMode.SERIAL,
    max_workers: Optional[int] = None,
    singular_tolerance: float = SINGULAR_TOLERANCE
) -> BearingSource:
    """A point source in a roller bearing, together with the waves
    reflected by the bearing's traction-free boundaries.

    Args:
        bearing (RollerBearing): The bearing
        source_position (Coordinates): The location of the source
        amplitudes (tuple[Amplitude, Amplitude]): The pressure and
            shear amplitudes (constants or functions of frequency)
        modes: The retained modes (or a basis order)
        omega (float): The angular frequency
        parallel_mode (ParallelMode): How to evaluate the modes
        max_workers (int): The worker pool size (if parallel)
        singular_tolerance (float): The largest acceptable
            column-scaled condition number of a mode system

    Returns:
        BearingSource: The source and its reflected potentials

    Raises:
        SingularModeSystemError: If any mode system is singular
    """
    modes = _as_modes(modes)
    coes = reflected_coefficients(
        bearing, source_position, amplitudes, modes, omega,
        parallel_mode, max_workers, singular_tolerance
    )
    potentials = _potentials_from_coefficients(bearing, coes, modes, omega)
    amps = tuple(amplitude_function(a)(omega) for a in amplitudes)
    return BearingSource(source_position, amps, potentials)
