"""
Testing subpackage for the SHeM simulation.

This subpackage provides tools for testing and debugging the simulation:
- Simple analytical samples (flat, trench, box, icosphere)
- Mesh and scene validation
- Analytic vs triangulated sphere comparison

Example usage:
    from shem_simulation.testing import create_flat_sample, compare_sphere_models

    # Create a flat sample for testing
    mesh = create_flat_sample(height=-2.121)

    # Run comparison test
    analytic, triangulated = compare_sphere_models(n_rays=500)
"""

from .simple_geometry import (
    create_flat_sample,
    create_trench_sample,
    create_simple_box,
    create_simple_sphere,
    print_mesh_info,
)

from .validation import (
    validate_mesh,
    validate_scene,
    validate_geometry_builders,
    run_quick_test,
)

from .comparison import (
    compare_sphere_models,
    print_comparison,
)

__all__ = [
    # Simple geometry
    "create_flat_sample",
    "create_trench_sample",
    "create_simple_box",
    "create_simple_sphere",
    "print_mesh_info",
    # Validation
    "validate_mesh",
    "validate_scene",
    "validate_geometry_builders",
    "run_quick_test",
    # Comparison
    "compare_sphere_models",
    "print_comparison",
]
