"""
===============================================================================
LOW-THRUST SHAPING - Visualization Module
===============================================================================
Submodules:
    trajectory_plots -- PlotStyle and figures of shaped legs
===============================================================================
"""
