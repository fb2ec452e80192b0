# Most necessary high-level things for running experiments imported here.
__version__ = "0.1.0"

from .base.consts import WaveType, BoundaryKind, ParallelMode
from .base.exceptions import (
    ScatteringError, ModeCountError, ShapeMismatchError, SingularModeSystemError
)
from .base.medium import AcousticMedium, LinearElasticMedium
from .base.bearing import RollerBearing
from .modal.fourier import (
    BoundaryData, BoundaryBasis, fields_to_fourier_modes,
    fourier_modes_to_fields, normalize, mode_range
)
from .modal.potentials import HelmholtzPotential, displacement, traction
from .modal.sources import (
    RegularSource, BearingSource, point_source, pressure_point_source,
    shear_point_source, plane_z_shear_source
)
from .modal.solver import bearing_point_source, incident_potentials
from .modal.algorithm import BearingScatteringProblem, FrequencySweepResult
