import json

import numpy as np
import pytest

from ews.base.bearing import RollerBearing
from ews.base.medium import LinearElasticMedium


@pytest.fixture
def medium():
    return LinearElasticMedium(density=1.0, cp=2.0, cs=1.0)


@pytest.fixture
def bearing(medium):
    return RollerBearing(medium, inner_radius=1.0, outer_radius=2.0)


@pytest.fixture
def source_position():
    # Inside the elastic ring, |s| ~ 1.43
    return np.array([1.4, 0.3])


@pytest.fixture
def config_files(tmp_path):
    """Bearing, medium and numerical configuration files."""
    bearing_file = tmp_path / "bearing.json"
    medium_file = tmp_path / "steel.json"
    numerical_file = tmp_path / "coarse.json"

    bearing_file.write_text(json.dumps({
        "bearing": {"inner_radius": 1.0, "outer_radius": 2.0},
        "source": {"position": [1.4, 0.3], "amplitudes": [1.0, 0.5]},
    }))
    medium_file.write_text(json.dumps({
        "medium": {"density": 1.0, "cp": 2.0, "cs": 1.0},
    }))
    numerical_file.write_text(json.dumps({
        "basis_order": 4,
        "frequencies": {"start": 1.0, "stop": 3.0, "num": 3},
        "parallel_mode": "serial",
    }))
    return str(bearing_file), str(medium_file), str(numerical_file)
