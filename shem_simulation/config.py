"""
Configuration settings for the SHeM ray-tracing simulation.

All lengths are in millimetres and all angles in degrees. The back wall
(pinhole plate) lies in the plane y = 0 and the sample sits below it at
y = -WORKING_DISTANCE_MM. Users can modify these values to customize the
simulation without changing the core code.
"""

from __future__ import annotations

import math

# =============================================================================
# Output
# =============================================================================

# Output directories (relative to the chosen output directory)
DATA_OUTPUT_DIR = "Data"
FIGURES_OUTPUT_DIR = "Figures"

# Output file names
SCAN_RESULT_FILE = "scan_result.npz"
DETECTED_RAYS_CSV = "detected_rays.csv"
RAY_PATHS_CSV = "ray_paths.csv"
SCAN_IMAGE_FIGURE_BASE = "scan_image"
EFFUSE_IMAGE_FIGURE_BASE = "effuse_image"
HISTOGRAM_FIGURE_BASE = "scatter_histogram"
DIRECTIONS_FIGURE_BASE = "outgoing_directions"
RAY_PATHS_FIGURE_BASE = "ray"
SCENE_FIGURE = "scene_geometry.png"

# =============================================================================
# Pinhole Plate Geometry
# =============================================================================

# Distance from the pinhole plate down to the sample surface
WORKING_DISTANCE_MM = 2.121

# Radius of the pinhole plate about the origin
PLATE_RADIUS_MM = 5.0

# Whether the plate outside the apertures scatters rays (otherwise they pass)
PLATE_REPRESENT = False

# Scattering law of the plate: 1 = cosine
PLATE_COMPOSITION = 1
PLATE_PARAMETER = 0.0

# Detector apertures as ((centre_x, centre_z), (axis_x, axis_z)), full axis lengths
APERTURES = [
    ((2.121, 0.0), (1.0, 1.0)),
]

# =============================================================================
# Beam Source
# =============================================================================

# Angle of incidence from the plate normal
INCIDENCE_ANGLE_DEG = 45.0

# Distance from the beam's impact point on the sample back to the source pinhole
SOURCE_DISTANCE_MM = 2.9

# Radius of the source pinhole
SOURCE_PINHOLE_RADIUS_MM = 0.01

# Angular model of the source: "uniform" (cone) or "gaussian"
SOURCE_MODEL = "uniform"

# Half angle of the uniform cone
SOURCE_THETA_MAX_DEG = 0.5

# Standard deviation of the Gaussian model
SOURCE_SIGMA_DEG = 0.25

# Effusive beam from the source nozzle: rays per pixel (0 disables it) and
# the half angle of its cone about the beam direction
EFFUSE_N_RAYS = 0
EFFUSE_THETA_MAX_DEG = 30.0


def beam_direction():
    """Unit vector of the central beam, travelling down towards the sample."""
    angle = math.radians(INCIDENCE_ANGLE_DEG)
    return [math.sin(angle), -math.cos(angle), 0.0]


def source_position():
    """Centre of the source pinhole, upstream of the impact point at (0, -WD, 0)."""
    direction = beam_direction()
    return [
        -SOURCE_DISTANCE_MM * direction[0],
        -WORKING_DISTANCE_MM - SOURCE_DISTANCE_MM * direction[1],
        0.0,
    ]


# =============================================================================
# Sample
# =============================================================================

# Side length of the default flat sample
SAMPLE_SIZE_MM = 6.0

# Scattering law of the sample: 0 specular, 1 cosine, 2 uniform,
# 3 broad specular (parameter = sigma in radians), 4 cosine/specular mixture
SAMPLE_COMPOSITION = 1
SAMPLE_PARAMETER = 0.0

# Optional STL file for the sample (None uses the flat sample) and its scale to mm
SAMPLE_STL_FILE = None
SAMPLE_STL_SCALE = 1.0

# =============================================================================
# Analytic Sphere
# =============================================================================

SPHERE_ENABLED = False
SPHERE_RADIUS_MM = 0.5
# Sphere resting on the sample surface at the beam's impact point
SPHERE_CENTRE_MM = [0.0, -WORKING_DISTANCE_MM + SPHERE_RADIUS_MM, 0.0]
SPHERE_COMPOSITION = 1
SPHERE_PARAMETER = 0.0

# =============================================================================
# Scan and Tracing Parameters
# =============================================================================

SCAN_X_RANGE_MM = (-0.5, 0.5)
SCAN_Z_RANGE_MM = (-0.5, 0.5)
SCAN_STEP_MM = 0.1

# Rays traced per pixel (scan) or in total (single position)
DEFAULT_N_RAYS = 500

# Maximum number of scattering events before a ray is killed
DEFAULT_MAX_SCATTERS = 20

# Seed of the random source (None for a fresh seed every run)
DEFAULT_SEED = 2024

# =============================================================================
# Visualization Settings
# =============================================================================

# Maximum number of ray paths to plot
MAX_PATHS_TO_PLOT = 50

# Plot DPI settings
PLOT_DPI = 300
QUICK_PLOT_DPI = 150

SCAN_IMAGE_CMAP = "gray"
SAMPLE_COLOR = "lightgray"
SAMPLE_ALPHA = 0.4
APERTURE_COLOR = "red"
SPHERE_COLOR = "steelblue"
