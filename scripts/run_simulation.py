#!/usr/bin/env python
"""
SHeM Simulation - Main Runner Script

This script runs the SHeM ray-tracing simulation with the settings in
shem_simulation/config.py.

Usage:
    python run_simulation.py
    python run_simulation.py -n 1000
    python run_simulation.py --single --sphere
    python run_simulation.py --sample-stl sample.stl --no-plot

Output files (Data/, Figures/) will be saved in the project directory or in
the specified output directory.
"""

from pathlib import Path
import sys

# Make shem_simulation importable when running from a source checkout
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from shem_simulation.runner import run_full_simulation, main as runner_main


def main():
    """Script entry point."""
    if len(sys.argv) > 1:
        runner_main()
    else:
        run_full_simulation(output_dir=project_dir)


if __name__ == "__main__":
    main()
