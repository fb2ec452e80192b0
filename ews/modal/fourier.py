"""Fourier-mode representation of data sampled on a circular boundary.

A field f sampled at angles theta_i is represented by the truncated
Fourier series

    f(theta) ~ sum_{n in modes} c_n exp(i n theta)

The coefficients c_n are found by least squares from the samples, and
the series can be evaluated back at any set of angles.
"""
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Self, Union
import logging
import numpy as np

from ..base.consts import ModeIndices
from ..base.exceptions import ModeCountError, ShapeMismatchError


ModeSpec = Union[int, ModeIndices, list[int], range, None]


def mode_range(order: int) -> ModeIndices:
    """The symmetric mode set -order, ..., order."""
    if order < 0:
        raise ValueError(f"Error: basis order must be non-negative (got {order})")
    return np.arange(-order, order + 1)


def default_basis_order(num_samples: int) -> int:
    """The largest symmetric basis order determined by num_samples
    field values, floor(N/2 - 1/2)."""
    return max((num_samples - 1) // 2, 0)


def validate_modes(modes) -> ModeIndices:
    """Convert a mode set to a 1D integer array and check that it is
    strictly increasing.

    Raises:
        ValueError: If the modes are not integers, not 1D, or not
            sorted and unique
    """
    modes = np.asarray(modes)
    if modes.ndim != 1:
        raise ValueError(f"Error: modes must be a 1D sequence (got shape {modes.shape})")
    if modes.size == 0:
        return modes.astype(int)
    if not np.issubdtype(modes.dtype, np.integer):
        if not np.all(np.mod(modes, 1) == 0):
            raise ValueError(f"Error: modes must be integers (got {modes})")
        modes = modes.astype(int)
    if np.any(np.diff(modes) <= 0):
        raise ValueError(f"Error: modes must be sorted and unique (got {modes})")
    return modes


def _resolve_modes(modes: ModeSpec, num_samples: int) -> ModeIndices:
    if modes is None:
        return mode_range(default_basis_order(num_samples))
    if isinstance(modes, (int, np.integer)):
        return mode_range(int(modes))
    return validate_modes(modes)


def exponential_matrix(thetas: np.ndarray, modes: ModeIndices) -> np.ndarray:
    """The matrix E[i,j] = exp(i thetas[i] modes[j])."""
    return np.exp(1j * np.outer(thetas, modes))


def fields_to_fourier_modes(
    thetas: np.ndarray,
    fields: np.ndarray,
    modes: ModeSpec = None
) -> np.ndarray:
    """Find the Fourier coefficients that best represent sampled
    field values in the least-squares sense.

    Args:
        thetas (np.ndarray): A shape (N,) array of sample angles
        fields (np.ndarray): A shape (N,) or (N, C) array of field
            values (one column per field component)
        modes (ModeSpec): The retained modes. An integer means the
            symmetric range -modes..modes; None means the largest
            symmetric range determined by N samples.

    Returns:
        np.ndarray: A shape (M,) or (M, C) array of coefficients,
            one row per mode

    Raises:
        ModeCountError: If more modes than samples are requested
        ShapeMismatchError: If fields does not have one row per angle
    """
    thetas = np.asarray(thetas, dtype=float)
    fields = np.asarray(fields)
    modes = _resolve_modes(modes, len(thetas))

    if len(modes) > len(thetas):
        raise ModeCountError(
            f"Can not calculate the {len(modes)} modes {modes} of the Fourier series from only "
            f"{len(thetas)} field points. Either decrease the number of modes or increase the number of points in fields"
        )
    if fields.shape[0] != len(thetas):
        raise ShapeMismatchError(
            f"Error: fields should have one row per angle ({len(thetas)}). Has shape {fields.shape} instead."
        )

    exps = exponential_matrix(thetas, modes)
    coefficients, _, rank, _ = np.linalg.lstsq(exps, fields, rcond=None)
    if rank < len(modes):
        logging.debug(f"Exponential matrix is rank deficient (rank {rank} < {len(modes)} modes)")
    return coefficients


def fourier_modes_to_fields(
    thetas: np.ndarray,
    coefficients: np.ndarray,
    modes: ModeSpec = None
) -> np.ndarray:
    """Evaluate a truncated Fourier series at the given angles.

    Args:
        thetas (np.ndarray): A shape (N,) array of angles. Need not
            be the angles the coefficients were fitted on.
        coefficients (np.ndarray): A shape (M,) or (M, C) array of
            Fourier coefficients
        modes (ModeSpec): The modes of the coefficients. If None,
            M must be odd and the modes are -(M-1)/2..(M-1)/2.

    Returns:
        np.ndarray: A shape (N,) or (N, C) array of field values
    """
    thetas = np.asarray(thetas, dtype=float)
    coefficients = np.asarray(coefficients)

    if modes is None:
        if coefficients.shape[0] % 2 == 0:
            raise ShapeMismatchError(
                f"Error: cannot infer a symmetric mode range from {coefficients.shape[0]} coefficients"
            )
        modes = mode_range(coefficients.shape[0] // 2)
    else:
        modes = _resolve_modes(modes, len(thetas))

    if coefficients.shape[0] != len(modes):
        raise ShapeMismatchError(
            f"Error: coefficients should have one row per mode ({len(modes)}). Has shape {coefficients.shape} instead."
        )

    return exponential_matrix(thetas, modes) @ coefficients


def _owned_array(values, dtype=None) -> np.ndarray:
    if values is None:
        return np.zeros(0, dtype=dtype)
    return np.array(values, dtype=dtype, copy=True)


@dataclass(frozen=True, eq=False)
class BoundaryData:
    """Field values sampled on a circular boundary together with
    their Fourier-mode representation.

    Records are values: every array is copied on construction, and
    the transforms return new records. Only normalize() changes the
    contents of fields/coefficients in place.

    Attributes:
        thetas (np.ndarray): A shape (N,) array of sample angles
        fields (np.ndarray): A shape (N,) or (N, C) array of sampled
            field values (empty if not populated)
        modes (np.ndarray): A shape (M,) array of retained modes
            (empty if not populated)
        coefficients (np.ndarray): A shape (M,) or (M, C) array of
            Fourier coefficients (empty if not populated)
    """
    thetas: np.ndarray
    fields: np.ndarray = field(default=None)
    modes: np.ndarray = field(default=None)
    coefficients: np.ndarray = field(default=None)

    def __post_init__(self):
        thetas = _owned_array(self.thetas, float)
        fields = _owned_array(self.fields, complex)
        modes = validate_modes(_owned_array(self.modes, int))
        coefficients = _owned_array(self.coefficients, complex)

        if thetas.ndim != 1:
            raise ShapeMismatchError(f"Error: thetas must be 1D (got shape {thetas.shape})")
        if fields.size > 0 and fields.shape[0] != len(thetas):
            raise ShapeMismatchError(
                f"Error: fields should have one row per angle ({len(thetas)}). Has shape {fields.shape} instead."
            )
        if coefficients.size > 0 and coefficients.shape[0] != len(modes):
            raise ShapeMismatchError(
                f"Error: coefficients should have one row per mode ({len(modes)}). Has shape {coefficients.shape} instead."
            )
        if len(modes) > len(thetas):
            raise ModeCountError(
                f"Error: {len(modes)} modes cannot be represented by {len(thetas)} field points"
            )

        object.__setattr__(self, 'thetas', thetas)
        object.__setattr__(self, 'fields', fields)
        object.__setattr__(self, 'modes', modes)
        object.__setattr__(self, 'coefficients', coefficients)

    @property
    def has_fields(self) -> bool:
        return self.fields.size > 0

    @property
    def has_coefficients(self) -> bool:
        return self.coefficients.size > 0

    def with_changes(self, **changes) -> Self:
        """A copy of this record with the given attributes replaced."""
        return replace(self, **changes)

    def with_fourier_modes(self, modes: ModeSpec = None) -> Self:
        """A copy of this record with coefficients/modes computed
        from the sampled fields.

        Args:
            modes (ModeSpec): The modes to retain. Defaults to the
                largest symmetric range the samples determine.
        """
        modes = _resolve_modes(modes, len(self.thetas))
        coefficients = fields_to_fourier_modes(self.thetas, self.fields, modes)
        return self.with_changes(coefficients=coefficients, modes=modes)

    def with_fields_from_modes(self, thetas: Optional[np.ndarray] = None) -> Self:
        """A copy of this record with fields reconstructed from the
        stored coefficients/modes.

        Args:
            thetas (np.ndarray): If provided, new angles to evaluate
                the series at (replacing the stored angles)
        """
        thetas = self.thetas if thetas is None else np.asarray(thetas, dtype=float)
        fields = fourier_modes_to_fields(thetas, self.coefficients, self.modes)
        return self.with_changes(thetas=thetas, fields=fields)


class BoundaryBasis:
    """An ordered collection of boundary data records sharing a
    common boundary (for example one record per excitation).

    Attributes:
        basis (list[BoundaryData]): The records of this basis
    """
    def __init__(self, basis: list[BoundaryData]):
        self.basis = list(basis)

    def __iter__(self) -> Iterator[BoundaryData]:
        return iter(self.basis)

    def __len__(self) -> int:
        return len(self.basis)

    def __getitem__(self, i: int) -> BoundaryData:
        return self.basis[i]

    def normalize(self) -> Self:
        """Normalize every record in place. See normalize()."""
        return normalize(self)


def boundary_energy(data: BoundaryData) -> Optional[float]:
    """The energy (squared L2 norm over the boundary) of a record.

    Uses the sampled fields if present: adjacent samples are
    averaged and weighted by the forward angular gap, excluding the
    segment that wraps from the last sample back to the first.
    Otherwise uses Parseval's identity 2 pi ||c||^2 on the Fourier
    coefficients.

    Returns:
        Optional[float]: The energy, or None if the record holds
            neither fields nor coefficients
    """
    if data.has_fields:
        fs = (data.fields[:-1] + np.roll(data.fields, -1, axis=0)[:-1]) / 2
        dthetas = np.roll(data.thetas, -1)[:-1] - data.thetas[:-1]
        if fs.ndim > 1:
            dthetas = dthetas[:, np.newaxis]
        return float(np.sum(np.abs(fs)**2 * dthetas))
    elif data.has_coefficients:
        return float(2 * np.pi * np.linalg.norm(data.coefficients)**2)
    return None


def normalize(boundary_basis: BoundaryBasis) -> BoundaryBasis:
    """Rescale every record of a basis to unit energy, in place.

    Both fields and coefficients of a record are divided by the
    square root of its energy (see boundary_energy()). Records with
    no data, or zero energy, are left unchanged.

    Returns:
        BoundaryBasis: The same (mutated) basis
    """
    for bd in boundary_basis:
        energy = boundary_energy(bd)
        if energy is None or energy == 0:
            logging.debug("Skipping normalization of a record with no energy")
            continue

        n = np.sqrt(energy)
        bd.fields[...] = bd.fields / n
        bd.coefficients[...] = bd.coefficients / n

    return boundary_basis
