import hashlib
import json
import logging
import os
from typing import Optional, Self
import cloudpickle
import numpy as np

from ..base.bearing import RollerBearing
from ..base.consts import Amplitude, Coordinates, ParallelMode, SINGULAR_TOLERANCE
from ..base.exceptions import SingularModeSystemError
from .fourier import mode_range
from .solver import bearing_point_source
from .sources import BearingSource


def get_filename_base(file: str) -> str:
    """Gets just a file's name without any attached folders
    or file extensions"""
    return os.path.splitext(os.path.basename(file))[0]


def get_sweep_filename_base(
    bearing_config: str,
    medium_config: str,
    numerical_config: str
) -> str:
    """Get the base filename (no extension) of a frequency sweep
    based on the config files used to create it.
    """
    labels = (get_filename_base(f) for f in (bearing_config, medium_config, numerical_config))
    return "scattering_" + "_".join(labels)


def _parse_frequencies(entry) -> np.ndarray:
    """Frequencies are given either as a list or as a
    {"start", "stop", "num"} linear range."""
    if isinstance(entry, dict):
        return np.linspace(float(entry["start"]), float(entry["stop"]), int(entry["num"]))
    return np.asarray(entry, dtype=float)


class FrequencySweepResult:
    """The results of solving a bearing problem at many frequencies.

    Attributes:
        solutions (dict[float, BearingSource]): The solved source
            at each frequency that could be solved
        resonances (list[tuple[float, int]]): The (frequency, mode)
            pairs whose boundary system was singular
    """
    def __init__(self):
        self.solutions: dict[float, BearingSource] = {}
        self.resonances: list[tuple[float, int]] = []

    @property
    def frequencies(self) -> np.ndarray:
        return np.array(sorted(self.solutions))

    @property
    def resonant_frequencies(self) -> np.ndarray:
        return np.array([omega for omega, _ in self.resonances])

    def __len__(self) -> int:
        return len(self.solutions) + len(self.resonances)


class BearingScatteringProblem:
    """A point source inside a roller bearing, solved by matching
    traction-free boundary conditions mode by mode.

    Attributes:
        bearing (RollerBearing): The bearing geometry and material
        source_position (np.ndarray): The location of the point source
        amplitudes (tuple[Amplitude, Amplitude]): The pressure and
            shear amplitudes of the point source
        modes (np.ndarray): The retained angular modes
        parallel_mode (ParallelMode): How modes are evaluated
        max_workers (Optional[int]): The worker pool size
        singular_tolerance (float): The largest acceptable
            column-scaled condition number of a mode system
        frequencies (np.ndarray): The default frequencies to sweep
        filename_base (Optional[str]): The base name of the pickle
            cache of a sweep (set when created from config files)
    """
    def __init__(
        self,
        bearing: RollerBearing,
        source_position: Coordinates,
        amplitudes: tuple[Amplitude, Amplitude],
        basis_order: int,
        parallel_mode: ParallelMode = ParallelMode.SERIAL,
        max_workers: Optional[int] = None,
        singular_tolerance: float = SINGULAR_TOLERANCE,
        frequencies: Optional[np.ndarray] = None
    ):
        self.bearing = bearing
        self.source_position = np.asarray(source_position, dtype=float)
        self.amplitudes = tuple(amplitudes)
        self.modes = mode_range(basis_order)
        self.parallel_mode = parallel_mode
        self.max_workers = max_workers
        self.singular_tolerance = singular_tolerance
        self.frequencies = np.array([]) if frequencies is None else np.asarray(frequencies, dtype=float)
        self.filename_base = None

        if len(self.amplitudes) != 2:
            raise ValueError(
                f"Error: A bearing source needs (pressure, shear) amplitudes. Got {len(self.amplitudes)} amplitudes."
            )

    @classmethod
    def from_config_files(
        cls,
        bearing_config_file: str,
        medium_config_file: str,
        numerical_config_file: str
    ) -> Self:
        """Set up a problem from bearing, medium and numerical
        configuration JSON files.

        Raises:
            IOException: If any of the provided filenames is invalid
                or otherwise inaccessible
        """
        bearing = RollerBearing.from_config_files(bearing_config_file, medium_config_file)

        with open(bearing_config_file, 'r') as in_json_file:
            source_entry = json.load(in_json_file)['source']
        with open(numerical_config_file, 'r') as in_json_file:
            numerical = json.load(in_json_file)

        problem = cls(
            bearing=bearing,
            source_position=tuple(source_entry["position"]),
            amplitudes=tuple(source_entry["amplitudes"]),
            basis_order=int(numerical["basis_order"]),
            parallel_mode=ParallelMode.from_string(numerical.get("parallel_mode", "serial")),
            max_workers=numerical.get("max_workers"),
            singular_tolerance=float(numerical.get("singular_tolerance", SINGULAR_TOLERANCE)),
            frequencies=_parse_frequencies(numerical.get("frequencies", []))
        )
        problem.filename_base = get_sweep_filename_base(
            bearing_config_file, medium_config_file, numerical_config_file
        )
        return problem

    def solve(self, omega: float) -> BearingSource:
        """Solve the problem at a single angular frequency.

        Raises:
            SingularModeSystemError: If omega is a resonance of any
                retained mode
        """
        logging.debug(f"Entering solve() with omega = {omega:.6g}")
        return bearing_point_source(
            self.bearing,
            self.source_position,
            self.amplitudes,
            self.modes,
            omega,
            parallel_mode=self.parallel_mode,
            max_workers=self.max_workers,
            singular_tolerance=self.singular_tolerance
        )

    def solve_frequencies(
        self,
        frequencies: Optional[np.ndarray] = None,
        pickle: bool = False,
        pickle_folder: Optional[str] = None
    ) -> FrequencySweepResult:
        """Solve the problem at many angular frequencies.

        Frequencies where a mode system is singular are recorded as
        resonances rather than aborting the sweep.

        Args:
            frequencies (np.ndarray): The angular frequencies to solve
                at. Defaults to the configured frequencies.
            pickle (bool): Whether to cache the result in
                pickle_folder, and reuse an existing cache
            pickle_folder (str): The folder to store the cache in

        Returns:
            FrequencySweepResult: The solutions and resonances
        """
        frequencies = self.frequencies if frequencies is None else np.asarray(frequencies, dtype=float)

        if pickle:
            cached = self.load_cached_sweep(frequencies, pickle_folder)
            if cached is not None:
                return cached

        result = FrequencySweepResult()
        for omega in frequencies:
            try:
                result.solutions[float(omega)] = self.solve(omega)
            except SingularModeSystemError as err:
                logging.warning(f"Skipping resonant frequency omega = {omega:.6g}: {err}")
                result.resonances.append((float(omega), err.mode))

        logging.info(
            f"Frequency sweep finished: {len(result.solutions)} solved, {len(result.resonances)} resonant"
        )

        if pickle:
            self.save_sweep(result, frequencies, pickle_folder)
        return result

    def _cache_path(self, frequencies: np.ndarray, pickle_folder: Optional[str]) -> str:
        """The cache file of a sweep, named after the config files and
        a digest of the swept frequencies."""
        if self.filename_base is None:
            raise ValueError("Error: Only problems created from config files can be cached")
        digest = hashlib.sha1(np.asarray(frequencies, dtype=float).tobytes()).hexdigest()[:12]
        return os.path.join(pickle_folder or ".", f"{self.filename_base}_{digest}.pickle")

    def load_cached_sweep(
        self,
        frequencies: np.ndarray,
        pickle_folder: Optional[str]
    ) -> Optional[FrequencySweepResult]:
        """Gets a cached sweep over the given frequencies from
        pickle_folder if it exists."""
        cache_path = self._cache_path(frequencies, pickle_folder)
        logging.info("Checking for cached sweep files . . .")
        if not os.path.exists(cache_path):
            logging.info("Cached sweep files not found. Running sweep . . .")
            return None

        logging.info(f"Cached sweep found at {cache_path}. Returning cached sweep.")
        with open(cache_path, 'rb') as infile:
            return cloudpickle.load(infile)

    def save_sweep(
        self,
        result: FrequencySweepResult,
        frequencies: np.ndarray,
        pickle_folder: Optional[str]
    ) -> str:
        """Pickle a sweep result over the given frequencies into
        pickle_folder."""
        cache_path = self._cache_path(frequencies, pickle_folder)
        os.makedirs(os.path.dirname(cache_path) or ".", exist_ok=True)
        with open(cache_path, 'wb') as outfile:
            cloudpickle.dump(result, outfile)
        logging.info(f"Saved sweep to {cache_path}")
        return cache_path
