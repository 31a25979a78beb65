"""
Numerical constants and debug configuration for the ray tracer.
"""

# Debug flag
DEBUG = False

# Tolerance on |det(A)| below which a ray/triangle system is treated as
# parallel or degenerate
DETERMINANT_EPSILON = 1.0e-10

# Element index used when a ray is not on a triangle (sphere, plate, source)
NO_ELEMENT = -1

# Tolerance used when checking that directions are unit vectors
UNIT_TOLERANCE = 1.0e-9
