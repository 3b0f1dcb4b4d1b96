"""
EEG Forward Test - Accuracy Harness for the DUNEuro EEG Forward Solver

This package compares numerical EEG forward solutions with analytical
multi-layer sphere solutions:
- Physics: Sphere model geometry, dipoles and unit conventions
- Forward: Driver factory and numerical solve (direct or transfer matrix)
- Comparison: Error measures (RE, MAG, RDM) and the test pipeline
- File I/O: Electrode/dipole/conductivity readers and VTK export
- Validation: Config and geometry consistency checks
- Presets: Source model parameter sets
- Visualization: Dark lab theme and potential plots

Usage:
    # After installing with: pip install -e .
    from eeg_forward_test.comparison.metrics import relative_error
    from eeg_forward_test.comparison.harness import run_forward_test
    from eeg_forward_test.config import load_config
"""

__version__ = "0.1.0"
__all__ = [
    "physics",
    "forward",
    "comparison",
    "fileio",
    "validation",
    "presets",
    "visualization",
    "config",
]
