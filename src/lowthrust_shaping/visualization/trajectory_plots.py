"""
===============================================================================
LOW-THRUST SHAPING - Trajectory Plots
===============================================================================
Figures of shaped legs: 3-D path about the central body, thrust-acceleration
profile, time-azimuth map and midpoint re-propagation errors.  All figures
are written to disk with the Agg backend.
===============================================================================
"""

import os

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from lowthrust_shaping.core.constants import AU


class PlotStyle:
    """Colours by plot role and the figure helpers shared by every plot."""

    COLORS = {
        'primary': '#1F4E79',      # shaped path
        'secondary': '#8E3B8A',    # velocity error
        'accent1': '#E07A1F',      # thrust
        'accent2': '#B22222',      # arrival
        'success': '#2F7D32',      # departure
        'body': '#F2C12E',
    }

    PALETTE = ['#1F4E79', '#E07A1F', '#2F7D32', '#B22222', '#8E3B8A']

    RC_PARAMS = {
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.titleweight': 'bold',
        'axes.grid': True,
        'axes.spines.top': False,
        'axes.spines.right': False,
        'grid.color': '#DDDDDD',
        'grid.linewidth': 0.5,
        'lines.linewidth': 1.8,
        'legend.fontsize': 9,
    }

    @staticmethod
    def setup_style():
        plt.rcParams.update(PlotStyle.RC_PARAMS)
        plt.rcParams['axes.prop_cycle'] = plt.cycler(color=PlotStyle.PALETTE)

    @staticmethod
    def create_figure(nrows=1, ncols=1, figsize=None):
        """Styled (fig, axes) pair using the tight layout engine."""
        PlotStyle.setup_style()
        return plt.subplots(nrows, ncols, figsize=figsize, layout='tight')

    @staticmethod
    def save_figure(fig, filepath, dpi=200):
        """Write *fig* to *filepath*, creating the directory, and close it."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filepath, dpi=dpi, facecolor='white')
        plt.close(fig)



def plot_trajectory_3d(trajectory, title, filepath, label='Shaped leg'):
    """3-D heliocentric path of a leg with departure and arrival markers.

    Parameters
    ----------
    trajectory : pd.DataFrame
        Table with x, y, z columns in metres (see trajectory_table()).
    title : str
    filepath : str
    label : str
    """
    PlotStyle.setup_style()
    fig = plt.figure(figsize=(10, 9))
    ax = fig.add_subplot(111, projection='3d')

    x = trajectory['x'].to_numpy() / AU
    y = trajectory['y'].to_numpy() / AU
    z = trajectory['z'].to_numpy() / AU if 'z' in trajectory else np.zeros_like(x)

    ax.plot(x, y, z, color=PlotStyle.COLORS['primary'], label=label)
    ax.scatter([0.0], [0.0], [0.0], color=PlotStyle.COLORS['body'], s=120,
               label='Central body')
    ax.scatter([x[0]], [y[0]], [z[0]], color=PlotStyle.COLORS['success'], s=40,
               label='Departure')
    ax.scatter([x[-1]], [y[-1]], [z[-1]], color=PlotStyle.COLORS['accent2'], s=40,
               label='Arrival')

    ax.set_xlabel('X [AU]')
    ax.set_ylabel('Y [AU]')
    ax.set_zlabel('Z [AU]')
    ax.set_title(title)
    ax.legend(loc='upper left', fontsize=9)
    PlotStyle.save_figure(fig, filepath)


def plot_thrust_profile(trajectory, title, filepath):
    """Thrust-acceleration magnitude against time of flight.

    Parameters
    ----------
    trajectory : pd.DataFrame
        Table with time_days and thrust_acceleration [m/s^2] columns.
    title : str
    filepath : str
    """
    fig, ax = PlotStyle.create_figure(figsize=(10, 5))
    ax.plot(trajectory['time_days'], trajectory['thrust_acceleration'] * 1.0e3,
            color=PlotStyle.COLORS['accent1'])
    ax.set_xlabel('Time since departure [days]')
    ax.set_ylabel('Thrust acceleration [mm/s$^2$]')
    ax.set_title(title)
    PlotStyle.save_figure(fig, filepath)


def plot_time_azimuth_map(times_days, azimuths_rad, title, filepath):
    """Azimuth angle reached as a function of time.

    Parameters
    ----------
    times_days : array-like
    azimuths_rad : array-like
    title : str
    filepath : str
    """
    fig, ax = PlotStyle.create_figure(figsize=(10, 5))
    ax.plot(times_days, np.degrees(azimuths_rad), color=PlotStyle.COLORS['primary'])
    ax.set_xlabel('Time since departure [days]')
    ax.set_ylabel('Azimuth [deg]')
    ax.set_title(title)
    PlotStyle.save_figure(fig, filepath)


def plot_propagation_errors(comparison, title, filepath):
    """Position and velocity difference between propagated and shaped states.

    Parameters
    ----------
    comparison : pd.DataFrame
        Output of PropagationResult.to_dataframe().
    title : str
    filepath : str
    """
    fig, axes = PlotStyle.create_figure(nrows=2, ncols=1, figsize=(10, 8))
    axes[0].semilogy(comparison['time_days'], comparison['position_error'] / 1.0e3,
                     color=PlotStyle.COLORS['primary'])
    axes[0].set_ylabel('Position error [km]')
    axes[1].semilogy(comparison['time_days'], comparison['velocity_error'],
                     color=PlotStyle.COLORS['secondary'])
    axes[1].set_ylabel('Velocity error [m/s]')
    axes[1].set_xlabel('Time since departure [days]')
    fig.suptitle(title, fontsize=15)
    PlotStyle.save_figure(fig, filepath)
