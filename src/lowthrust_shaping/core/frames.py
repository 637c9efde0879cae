"""
===============================================================================
LOW-THRUST SHAPING - Spherical <-> Cartesian Frame Transformations
===============================================================================
The shaping method works in spherical coordinates about the central body:

    r          radial distance
    theta      azimuth angle   (in the reference x-y plane, from +x)
    phi        elevation angle (latitude above the x-y plane)

Velocities and accelerations in spherical form are expressed in the local
frame spanned by the unit vectors

    e_r     = ( cos(phi) cos(theta),  cos(phi) sin(theta),  sin(phi) )
    e_theta = (          -sin(theta),           cos(theta),       0  )
    e_phi   = (-sin(phi) cos(theta), -sin(phi) sin(theta),  cos(phi) )

so a spherical state is (r, theta, phi, v_r, v_theta, v_phi).  The same
layout is used for an acceleration "state" (r, theta, phi, a_r, a_theta,
a_phi), which lets one conversion routine serve both.

All functions operate on NumPy arrays and return NumPy arrays.  Angles are in
radians.

References
----------
    [1] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.
    [2] Novak & Vasile, "Improved Shaping Approach to the Preliminary Design
        of Low-Thrust Trajectories", JGCD 34(1), 2011.

===============================================================================
"""

import numpy as np

from lowthrust_shaping.core.constants import TWO_PI


# =============================================================================
# LOCAL FRAME ROTATION
# =============================================================================

def local_to_inertial_matrix(azimuth: float, elevation: float) -> np.ndarray:
    """
    Rotation matrix from the local spherical frame to the inertial frame.

    The columns are the local unit vectors expressed in inertial axes:

        R = | cos(p)cos(t)  -sin(t)  -sin(p)cos(t) |
            | cos(p)sin(t)   cos(t)  -sin(p)sin(t) |
            | sin(p)           0       cos(p)      |

    Parameters
    ----------
    azimuth : float
        Azimuth angle t (rad).
    elevation : float
        Elevation angle p (rad).

    Returns
    -------
    np.ndarray
        3x3 rotation matrix.  Its transpose maps inertial to local.
    """
    ct, st = np.cos(azimuth), np.sin(azimuth)
    cp, sp = np.cos(elevation), np.sin(elevation)
    return np.array([
        [cp * ct,  -st,  -sp * ct],
        [cp * st,   ct,  -sp * st],
        [sp,       0.0,   cp],
    ], dtype=np.float64)


def wrap_to_two_pi(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    wrapped = angle % TWO_PI
    # Guard against -0.0 % 2pi returning 2pi after rounding
    if wrapped >= TWO_PI:
        wrapped -= TWO_PI
    return float(wrapped)


# =============================================================================
# STATE CONVERSIONS
# =============================================================================

def cartesian_to_spherical_state(cartesian_state: np.ndarray) -> np.ndarray:
    """
    Convert a Cartesian state to spherical form.

    Parameters
    ----------
    cartesian_state : np.ndarray
        (6,) position and velocity in inertial axes.

    Returns
    -------
    np.ndarray
        (6,) spherical state (r, theta, phi, v_r, v_theta, v_phi), with the
        azimuth in (-pi, pi] as returned by arctan2.
    """
    state = np.asarray(cartesian_state, dtype=np.float64)
    position = state[:3]
    velocity = state[3:]

    radius = np.linalg.norm(position)
    if radius == 0.0:
        raise ValueError("Position is at the origin; spherical state is undefined.")

    azimuth = np.arctan2(position[1], position[0])
    elevation = np.arcsin(np.clip(position[2] / radius, -1.0, 1.0))

    local_velocity = local_to_inertial_matrix(azimuth, elevation).T @ velocity

    return np.array([radius, azimuth, elevation,
                     local_velocity[0], local_velocity[1], local_velocity[2]])


def spherical_to_cartesian_state(spherical_state: np.ndarray) -> np.ndarray:
    """
    Convert a spherical state to Cartesian form.

    The last three entries may be velocity or acceleration components in the
    local frame; they are rotated into inertial axes either way.

    Parameters
    ----------
    spherical_state : np.ndarray
        (6,) state (r, theta, phi, x_r, x_theta, x_phi).

    Returns
    -------
    np.ndarray
        (6,) Cartesian position and rotated vector.
    """
    state = np.asarray(spherical_state, dtype=np.float64)
    radius, azimuth, elevation = state[:3]

    cp = np.cos(elevation)
    position = radius * np.array([cp * np.cos(azimuth),
                                  cp * np.sin(azimuth),
                                  np.sin(elevation)])
    vector = local_to_inertial_matrix(azimuth, elevation) @ state[3:]

    return np.concatenate([position, vector])
