"""
EEG Forward Test - Numerical vs Analytical Comparison

Quick accuracy test of the DUNEuro EEG forward solver on a multi-layer
sphere head model.

Pipeline:
1. Build the driver from the configuration (mesh, conductivities, solver)
2. Read dipoles and electrodes, project electrodes onto the mesh
3. Solve the forward problem numerically (direct or transfer approach)
4. Compute the analytical sphere solution at the same electrodes
5. Compare: norms, relative error, MAG and RDM per dipole

Both solutions are average referenced before comparison. Optionally the
head model, dipoles and electrode potentials are written as VTK files,
the potentials plotted, and the metrics saved as a YAML report.

Usage:
    eeg-forward-test configs.ini
    eeg-forward-test configs/default_test.yaml --source-model venant --all-dipoles
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from eeg_forward_test.config import (
    DEFAULT_CONFIG_PATH,
    get_bool,
    get_param,
    get_path,
    get_section,
    merge_config,
)
from eeg_forward_test.comparison.metrics import (
    ComparisonMetrics,
    check_tolerances,
    compare_solutions,
)
from eeg_forward_test.fileio.readers import read_dipoles, read_field_vectors
from eeg_forward_test.fileio.vtk_export import (
    write_dipoles,
    write_electrode_potentials,
    write_volume,
)
from eeg_forward_test.forward.driver import (
    APPROACHES,
    ForwardDriver,
    NumericalSolution,
    load_duneuropy,
    make_driver,
    set_electrodes,
    solve_direct,
    solve_transfer,
)
from eeg_forward_test.physics.constants import DEFAULT_CONFIG_FILENAME, DIM
from eeg_forward_test.physics.dipole import Dipole
from eeg_forward_test.physics.sphere_model import SphereModel, compute_analytical_solution
from eeg_forward_test.presets import apply_preset
from eeg_forward_test.validation import (
    validate_config_file,
    validate_solution_pair,
    validate_sphere_model,
)

DIPOLE_SELECTIONS = ("first", "all")


@dataclass
class DipoleComparison:
    """Numerical and analytical solution of one dipole with its metrics."""

    index: int
    dipole: Dipole
    numerical: np.ndarray
    analytical: np.ndarray
    metrics: ComparisonMetrics
    tolerance_failures: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.tolerance_failures


@dataclass
class ForwardTestResult:
    """Container for the outcome of one forward test run."""

    comparisons: list[DipoleComparison]
    electrodes: np.ndarray
    approach: str
    source_model: str
    written_files: dict[str, Path] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(comparison.passed for comparison in self.comparisons)

    @property
    def mean_relative_error(self) -> float:
        return float(np.mean([c.metrics.relative_error for c in self.comparisons]))

    @property
    def n_electrodes(self) -> int:
        return int(self.electrodes.shape[0])


def _quiet(*args, **kwargs) -> None:
    return None


def _indexed_path(path: Path, index: int, n_total: int) -> Path:
    """Insert a dipole index before the extension when several dipoles are written."""
    path = Path(path)
    if n_total <= 1:
        return path
    return path.with_name(f"{path.stem}_{index}{path.suffix}")


def _select_dipoles(dipoles: list[Dipole], selection: str) -> list[tuple[int, Dipole]]:
    if not dipoles:
        raise ValueError("dipole file contains no dipoles")
    if selection == "first":
        return [(0, dipoles[0])]
    return list(enumerate(dipoles))


def run_forward_test(
    config: dict[str, Any],
    base_dir: Path | str | None = None,
    driver_backend: Any = None,
    analytic_backend: Any = None,
    verbose: bool = True,
) -> ForwardTestResult:
    """
    Run the numerical vs analytical forward test.

    Parameters
    ----------
    config : dict
        Full configuration (see configs/default_test.yaml).
    base_dir : Path or str, optional
        Directory that relative input and output paths are resolved
        against. Default is the current working directory, which is also
        what the driver uses for the mesh and conductivity files.
    driver_backend : module, optional
        DUNEuro bindings; imported on demand if None.
    analytic_backend : module, optional
        simbiosphere bindings; imported on demand if None.
    verbose : bool
        Print progress. Default True.

    Returns
    -------
    ForwardTestResult
        Per-dipole solutions and metrics.

    Raises
    ------
    KeyError
        If a required configuration key is missing.
    ValueError
        If the configuration or the input data is inconsistent.
    ImportError
        If the external solver bindings are unavailable.
    """
    say = print if verbose else _quiet
    base_dir = Path(base_dir) if base_dir is not None else None

    approach = str(get_param(config, "harness.approach", "direct")).strip().lower()
    if approach not in APPROACHES:
        raise ValueError(f"Unknown approach '{approach}'. Use one of {', '.join(APPROACHES)}.")

    selection = str(get_param(config, "dipole.select", "first")).strip().lower()
    if selection not in DIPOLE_SELECTIONS:
        raise ValueError(
            f"Unknown dipole selection '{selection}'. Use one of {', '.join(DIPOLE_SELECTIONS)}."
        )

    source_model = str(get_param(config, "source_model.type", "unspecified"))

    say("The goal of this program is to quickly test the EEG forward solver implemented in DUNEuro.")

    say("\n[1/5] Creating driver...")
    if driver_backend is None:
        driver_backend = load_duneuropy()
    driver = make_driver(config, driver_backend)
    if not isinstance(driver, ForwardDriver):
        raise TypeError(f"{type(driver).__name__} does not implement the MEEG driver interface")
    say("  Driver created")

    say("\n[2/5] Reading dipoles and electrodes...")
    all_dipoles = read_dipoles(get_path(config, "dipole.filename", base_dir))
    selected = _select_dipoles(all_dipoles, selection)
    dipoles = [dipole for _, dipole in selected]
    say(f"  Dipoles read: {len(all_dipoles)} in file, {len(dipoles)} selected")

    electrodes = read_field_vectors(get_path(config, "electrodes.filename", base_dir), dim=DIM)
    set_electrodes(driver, electrodes, get_section(config, "electrodes"), driver_backend)
    say(f"  Electrodes set: {electrodes.shape[0]}")

    say(f"\n[3/5] Solving EEG forward problem numerically ({approach}, {source_model})...")
    if approach == "direct":
        numerical: list[NumericalSolution] = [
            solve_direct(driver, dipole, config, driver_backend, electrodes.shape[0])
            for dipole in dipoles
        ]
    else:
        numerical = solve_transfer(driver, dipoles, config, driver_backend, electrodes.shape[0])
    say("  Numerical solution computed")

    say("\n[4/5] Computing analytical solution using simbiosphere...")
    model = SphereModel.from_config(config, base_dir)
    geometry = validate_sphere_model(model, electrodes, dipoles)
    for message in geometry.warnings:
        say(f"  WARNING: {message}")
    if not geometry.is_valid:
        raise ValueError(" ".join(geometry.errors))

    analytical = [
        compute_analytical_solution(model, electrodes, dipole, analytic_backend)
        for dipole in dipoles
    ]
    say("  Analytical solution computed")

    say("\n[5/5] Comparing analytical and numerical solution...")
    tolerances = get_section(config, "harness.tolerances")
    comparisons = []
    for (index, dipole), solution, reference in zip(selected, numerical, analytical):
        check = validate_solution_pair(solution.potentials, reference)
        if not check.is_valid:
            raise ValueError(f"Dipole {index}: " + " ".join(check.errors))

        metrics = compare_solutions(solution.potentials, reference)
        comparisons.append(
            DipoleComparison(
                index=index,
                dipole=dipole,
                numerical=solution.potentials,
                analytical=reference,
                metrics=metrics,
                tolerance_failures=check_tolerances(metrics, tolerances),
            )
        )
    say("  Comparison finished")

    result = ForwardTestResult(
        comparisons=comparisons,
        electrodes=electrodes,
        approach=approach,
        source_model=source_model,
    )

    if get_bool(config, "output.write", default=False):
        say("\nWriting VTK output...")
        result.written_files.update(
            write_outputs(result, driver, numerical, config, base_dir, say)
        )

    report_path = get_param(config, "output.report", default=None)
    if report_path:
        result.written_files["report"] = save_report(result, _resolve(report_path, base_dir))
        say(f"  Report written: {result.written_files['report']}")

    plot_path = get_param(config, "output.plot", default=None)
    if plot_path:
        # Import here so matplotlib is only loaded when plotting is requested
        from eeg_forward_test.visualization.potential_plot import plot_electrode_potentials

        checked = any(value is not None for value in tolerances.values())
        n_total = len(comparisons)
        for comparison in comparisons:
            path = _indexed_path(_resolve(plot_path, base_dir), comparison.index, n_total)
            result.written_files[f"plot_{comparison.index}"] = plot_electrode_potentials(
                comparison.analytical,
                comparison.numerical,
                path=path,
                metrics=comparison.metrics,
                passed=comparison.passed if checked else None,
                title=f"DIPOLE {comparison.index} - {source_model.upper()}",
            )
        say(f"  Potential plot(s) written: {n_total}")

    return result


def _resolve(path: Any, base_dir: Path | None) -> Path:
    path = Path(str(path))
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def write_outputs(
    result: ForwardTestResult,
    driver: Any,
    numerical: list[NumericalSolution],
    config: dict[str, Any],
    base_dir: Path | None = None,
    say=print,
) -> dict[str, Path]:
    """
    Write head model, dipoles and electrode potentials as VTK files.

    The head model is only written for the direct approach, since the
    transfer approach never forms a volume solution.
    """
    output_config = get_section(config, "output")
    n_total = len(result.comparisons)
    written: dict[str, Path] = {}

    if result.approach == "direct":
        say("  Writing the head model")
        volume_base = _resolve(get_param(config, "output.filename"), base_dir)
        for comparison, solution in zip(result.comparisons, numerical):
            volume_config = dict(output_config)
            volume_path = _indexed_path(volume_base, comparison.index, n_total)
            volume_path.parent.mkdir(parents=True, exist_ok=True)
            volume_config["filename"] = str(volume_path)
            write_volume(driver, solution.domain_function, volume_config)
            written[f"volume_{comparison.index}"] = volume_path
    else:
        say("  Skipping the head model (no volume solution in transfer approach)")

    say("  Writing the dipoles")
    written["dipoles"] = write_dipoles(
        [comparison.dipole for comparison in result.comparisons],
        _resolve(get_param(config, "output.filename_dipole"), base_dir),
    )

    say("  Writing the analytical and numerical potentials at the electrodes")
    electrode_base = _resolve(get_param(config, "output.filename_electrode_potentials"), base_dir)
    for comparison in result.comparisons:
        written[f"electrode_potentials_{comparison.index}"] = write_electrode_potentials(
            result.electrodes,
            comparison.analytical,
            comparison.numerical,
            _indexed_path(electrode_base, comparison.index, n_total),
        )

    return written


def print_report(result: ForwardTestResult) -> None:
    """Print the comparison metrics of every dipole."""
    print("\n" + "=" * 60)
    print("  FORWARD TEST RESULTS")
    print("=" * 60)
    print(f"  Approach: {result.approach}")
    print(f"  Source model: {result.source_model}")
    print(f"  Electrodes: {result.n_electrodes}")

    for comparison in result.comparisons:
        metrics = comparison.metrics
        print(f"\nDipole {comparison.index}:")
        print(f"  Norm of analytical solution : {metrics.norm_analytical}")
        print(f"  Norm of numerical solution : {metrics.norm_numerical}")
        print(f"  Relative error : {metrics.relative_error}")
        print(f"  MAG : {metrics.magnitude_error}")
        print(f"  RDM : {metrics.relative_difference_measure}")
        for failure in comparison.tolerance_failures:
            print(f"  FAILED: {failure}")

    if len(result.comparisons) > 1:
        print(f"\nThe average relative error is {result.mean_relative_error}")

    print("\n" + "=" * 60)
    print(f"  Forward test {'passed' if result.passed else 'FAILED'}")
    print("=" * 60)


def save_report(result: ForwardTestResult, path: Path | str) -> Path:
    """
    Save the metrics of a forward test run as YAML.

    Returns
    -------
    Path
        The file written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    report = {
        "approach": result.approach,
        "source_model": result.source_model,
        "n_electrodes": result.n_electrodes,
        "passed": result.passed,
        "mean_relative_error": result.mean_relative_error,
        "dipoles": [
            {
                "index": comparison.index,
                "position": comparison.dipole.position.tolist(),
                "moment": comparison.dipole.moment.tolist(),
                **comparison.metrics.to_dict(),
                "tolerance_failures": list(comparison.tolerance_failures),
            }
            for comparison in result.comparisons
        ],
    }

    with open(path, "w") as f:
        yaml.dump(report, f, default_flow_style=False, sort_keys=False)
    return path


# =============================================================================
# Command Line Interface
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eeg-forward-test",
        description="Compare the DUNEuro EEG forward solution with the analytical sphere solution.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        help=f"YAML or INI config (default: ./{DEFAULT_CONFIG_FILENAME} if present, "
        "else configs/default_test.yaml)",
    )
    parser.add_argument("--source-model", default=None, help="Source model preset to use")
    parser.add_argument("--approach", choices=APPROACHES, default=None, help="Numerical approach")
    parser.add_argument("--all-dipoles", action="store_true", help="Test every dipole in the file")
    parser.add_argument("--write-output", action="store_true", help="Write VTK output")
    parser.add_argument("--report", default=None, help="Write a YAML metrics report")
    parser.add_argument("--plot", default=None, help="Save an electrode potential plot")
    parser.add_argument("--validate-only", action="store_true", help="Only validate the config")
    parser.add_argument("--quiet", action="store_true", help="Only print the final report")
    return parser


def _default_config_path() -> Path:
    local = Path.cwd() / DEFAULT_CONFIG_FILENAME
    return local if local.exists() else DEFAULT_CONFIG_PATH


def apply_cli_overrides(config: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    """Merge command line options into a copy of the configuration."""
    if args.source_model:
        config = apply_preset(config, args.source_model)

    overrides: dict[str, Any] = {}
    if args.approach:
        overrides.setdefault("harness", {})["approach"] = args.approach
    if args.all_dipoles:
        overrides.setdefault("dipole", {})["select"] = "all"
    if args.write_output:
        overrides.setdefault("output", {})["write"] = True
    if args.report:
        overrides.setdefault("output", {})["report"] = args.report
    if args.plot:
        overrides.setdefault("output", {})["plot"] = args.plot

    return merge_config(config, overrides)


def main(argv: list[str] | None = None) -> int:
    """Run the forward test from the command line. Returns the exit code."""
    args = build_parser().parse_args(argv)
    config_path = Path(args.config) if args.config else _default_config_path()

    validation = validate_config_file(config_path)
    for message in validation.warnings:
        print(f"WARNING: {message}")
    if not validation.is_valid:
        for message in validation.errors:
            print(f"ERROR: {message}", file=sys.stderr)
        for suggestion in validation.recovery_suggestions:
            print(f"  -> {suggestion}", file=sys.stderr)
        return 1
    if args.validate_only:
        print(f"Configuration {config_path} is valid.")
        return 0

    try:
        config = apply_cli_overrides(validation.config, args)
        result = run_forward_test(config, verbose=not args.quiet)
    except (ImportError, KeyError, ValueError, TypeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_report(result)
    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
