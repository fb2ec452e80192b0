import json
from typing import Self
import numpy as np

from .consts import WaveType


class AcousticMedium:
    """A scalar (Helmholtz) medium carrying a single wave type.

    Used to describe either the pressure or the shear part of an
    elastic medium when expanding a single potential.

    Attributes:
        density (float): The density of the medium
        wavespeed (float): The speed of the waves in this medium
    """
    def __init__(self, density: float, wavespeed: float):
        if density <= 0 or wavespeed <= 0:
            raise ValueError(
                f"Error: density and wavespeed must be positive (got {density}, {wavespeed})"
            )
        self.density = density
        self.wavespeed = wavespeed

    def wavenumber(self, omega: float) -> float:
        """The wavenumber k = omega / c at angular frequency omega."""
        return omega / self.wavespeed

    def __repr__(self) -> str:
        return f"AcousticMedium(density={self.density}, wavespeed={self.wavespeed})"


class LinearElasticMedium:
    """An isotropic, homogeneous, linearly elastic medium.

    Attributes:
        density (float): The density (rho) of the medium
        cp (float): The compressional (pressure) wave speed
        cs (float): The shear wave speed
    """
    def __init__(self, density: float, cp: float, cs: float):
        """Initialize an elastic medium from its wave speeds.

        Args:
            density (float): The density (rho) of the medium
            cp (float): The compressional (pressure) wave speed
            cs (float): The shear wave speed

        Raises:
            ValueError: If any parameter is not positive, or if the
                shear wave speed is not smaller than the pressure
                wave speed
        """
        if density <= 0 or cp <= 0 or cs <= 0:
            raise ValueError(
                f"Error: density and wave speeds must be positive (got rho={density}, cp={cp}, cs={cs})"
            )
        if cs >= cp:
            raise ValueError(
                f"Error: shear wave speed cs={cs} must be smaller than pressure wave speed cp={cp}"
            )
        self.density = density
        self.cp = cp
        self.cs = cs

    @classmethod
    def from_lame_constants(cls, lam: float, mu: float, density: float) -> Self:
        """Create a medium from its Lame constants and density.

        Args:
            lam (float): The first Lame parameter (lambda)
            mu (float): The shear modulus (mu)
            density (float): The density (rho) of the medium
        """
        if density <= 0 or mu <= 0:
            raise ValueError(
                f"Error: density and shear modulus must be positive (got rho={density}, mu={mu})"
            )
        cp = np.sqrt((lam + 2 * mu) / density)
        cs = np.sqrt(mu / density)
        return cls(density, cp, cs)

    @property
    def lame_lambda(self) -> float:
        """The first Lame parameter lambda = rho (cp^2 - 2 cs^2)"""
        return self.density * (self.cp**2 - 2 * self.cs**2)

    @property
    def lame_mu(self) -> float:
        """The shear modulus mu = rho cs^2"""
        return self.density * self.cs**2

    def wavespeed(self, wave_type: WaveType) -> float:
        """The wave speed of the given wave type."""
        if wave_type is WaveType.PRESSURE:
            return self.cp
        elif wave_type is WaveType.SHEAR:
            return self.cs
        raise ValueError(f"Unrecognized wave type {wave_type}")

    def wavenumber(self, wave_type: WaveType, omega: float) -> float:
        """The wavenumber of the given wave type at angular frequency omega."""
        return omega / self.wavespeed(wave_type)

    def kp(self, omega: float) -> float:
        return omega / self.cp

    def ks(self, omega: float) -> float:
        return omega / self.cs

    def acoustic(self, wave_type: WaveType) -> AcousticMedium:
        """The scalar medium carrying only the given wave type."""
        return AcousticMedium(self.density, self.wavespeed(wave_type))

    @classmethod
    def from_config_entry(cls, entry: dict) -> Self:
        """Create a medium from the "medium" entry of a
        medium configuration JSON file.

        The entry either lists wave speeds ("density", "cp", "cs")
        or Lame constants ("density", "lambda", "mu").

        Args:
            entry (dict): The entry from the config file

        Returns:
            LinearElasticMedium: The corresponding elastic medium
        """
        density = float(entry["density"])
        if "cp" in entry and "cs" in entry:
            return cls(density, float(entry["cp"]), float(entry["cs"]))
        elif "lambda" in entry and "mu" in entry:
            return cls.from_lame_constants(float(entry["lambda"]), float(entry["mu"]), density)
        raise ValueError(
            "Medium config entry must contain either (cp, cs) or (lambda, mu)"
        )

    @classmethod
    def from_config_file(cls, config_file: str) -> Self:
        """Create a medium from a medium configuration JSON file.

        Args:
            config_file (str): A path to the medium configuration
                JSON file

        Raises:
            IOException: If the provided filename is invalid or
                otherwise inaccessible
        """
        with open(config_file, 'r') as in_json_file:
            config = json.load(in_json_file)
        return cls.from_config_entry(config['medium'])

    def __repr__(self) -> str:
        return f"LinearElasticMedium(density={self.density}, cp={self.cp}, cs={self.cs})"
