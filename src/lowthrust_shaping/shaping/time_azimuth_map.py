"""
===============================================================================
LOW-THRUST SHAPING - Time / Azimuth Map
===============================================================================
Lookup table from time since departure to azimuth angle for a converged
shape.  Azimuths are sampled uniformly over the leg, their times come from
the time-rate quadrature, and a B-spline interpolates azimuth as a function
of time.  The table is built once and never modified.
===============================================================================
"""

import logging
import math

import numpy as np

from lowthrust_shaping.core.errors import InterpolationDomainError
from lowthrust_shaping.numerics.interpolation import (
    InterpolatorSettings,
    OneDimensionalInterpolator,
)
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature
from lowthrust_shaping.shaping.kinematics import ShapeKinematics

logger = logging.getLogger(__name__)


class TimeAzimuthMap:
    """
    Parameters
    ----------
    kinematics : ShapeKinematics
        Converged shape.
    quadrature : GaussianQuadrature
        Rule bound to the initial azimuth.
    initial_azimuth, final_azimuth : float
        Leg limits (rad).
    time_of_flight : float
        Normalized time of flight of the shape.
    step : float
        Normalized nominal spacing of the samples in time.
    interpolator_settings : InterpolatorSettings, optional
        Spline degree and domain tolerance.
    """

    def __init__(self, kinematics: ShapeKinematics, quadrature: GaussianQuadrature,
                 initial_azimuth: float, final_azimuth: float,
                 time_of_flight: float, step: float,
                 interpolator_settings: InterpolatorSettings = None):
        if step <= 0.0:
            raise ValueError(f"Time-map step must be positive, got {step}")
        if time_of_flight <= 0.0:
            raise ValueError(f"Time of flight must be positive, got {time_of_flight}")

        self.kinematics = kinematics
        self.initial_azimuth = float(initial_azimuth)
        self.final_azimuth = float(final_azimuth)
        self.quadrature = quadrature.with_lower_limit(self.initial_azimuth)
        settings = interpolator_settings or InterpolatorSettings()

        self.number_of_intervals = max(int(math.ceil(time_of_flight / step)),
                                       settings.order + 1)
        self.azimuths = np.linspace(self.initial_azimuth, self.final_azimuth,
                                    self.number_of_intervals + 1)
        self.times = self.quadrature.integrate_cumulative(kinematics.time_rate, self.azimuths)

        self._interpolator = OneDimensionalInterpolator(self.times, self.azimuths, settings)

        logger.info("Time-azimuth map: %d samples over %.6f normalized time units",
                    self.azimuths.size, self.times[-1])

    def angle_at_time(self, time: float) -> float:
        """Azimuth reached *time* (normalized) after departure."""
        return self._interpolator(time)

    def time_at_angle(self, azimuth: float) -> float:
        """Normalized time since departure at which *azimuth* is reached."""
        tolerance = 1.0e-12 * max(1.0, abs(self.final_azimuth))
        if not (self.initial_azimuth - tolerance <= azimuth
                <= self.final_azimuth + tolerance):
            raise InterpolationDomainError(
                f"Azimuth {azimuth!r} outside leg [{self.initial_azimuth!r}, "
                f"{self.final_azimuth!r}]",
                value=azimuth, lower=self.initial_azimuth, upper=self.final_azimuth)
        return self.quadrature.integrate(self.kinematics.time_rate, azimuth)
