import json
from typing import Self

from .consts import BoundaryKind
from .medium import LinearElasticMedium


class RollerBearing:
    """The elastic ring of a roller bearing: an annulus of linear
    elastic material between two concentric, traction-free
    circular boundaries centred at the origin.

    Attributes:
        medium (LinearElasticMedium): The elastic material of the ring
        inner_radius (float): The radius of the inner boundary
        outer_radius (float): The radius of the outer boundary
    """
    def __init__(
        self,
        medium: LinearElasticMedium,
        inner_radius: float,
        outer_radius: float
    ):
        if not 0 < inner_radius < outer_radius:
            raise ValueError(
                f"Error: Bearing radii must satisfy 0 < inner < outer (got inner={inner_radius}, outer={outer_radius})"
            )
        self.medium = medium
        self.inner_radius = inner_radius
        self.outer_radius = outer_radius

    def radius(self, boundary: BoundaryKind) -> float:
        """The radius of the given boundary of the ring."""
        if boundary is BoundaryKind.INNER:
            return self.inner_radius
        elif boundary is BoundaryKind.OUTER:
            return self.outer_radius
        raise ValueError(f"Unrecognized boundary {boundary}")

    def contains(self, r: float) -> bool:
        """Whether a radius lies strictly inside the elastic ring."""
        return self.inner_radius < r < self.outer_radius

    @classmethod
    def from_config_entry(cls, entry: dict, medium: LinearElasticMedium) -> Self:
        """Create a bearing from the "bearing" entry of an
        appropriately-formatted JSON config file.

        Args:
            entry (dict): The entry from the config file to
                create this bearing from
            medium (LinearElasticMedium): The material of the ring

        Returns:
            RollerBearing: The corresponding bearing geometry
        """
        inner_radius = float(entry["inner_radius"])
        outer_radius = float(entry["outer_radius"])
        return cls(medium, inner_radius, outer_radius)

    @classmethod
    def from_config_files(cls, bearing_config_file: str, medium_config_file: str) -> Self:
        """Create a bearing from bearing and medium configuration
        JSON files.

        Raises:
            IOException: If either filename is invalid or otherwise
                inaccessible
        """
        medium = LinearElasticMedium.from_config_file(medium_config_file)
        with open(bearing_config_file, 'r') as in_json_file:
            config = json.load(in_json_file)
        return cls.from_config_entry(config['bearing'], medium)

    def __repr__(self) -> str:
        return (
            f"RollerBearing(medium={self.medium!r}, inner_radius={self.inner_radius}, "
            f"outer_radius={self.outer_radius})"
        )
