"""Headless runner: python -m quantum_measurement {coins,spin,bloch,photons}."""
import argparse
import logging
import sys

from configs.simulation_config import ENUM_NAME_FIELDS, get_simulation_config

from .bloch_sphere import BlochSphereExperiment
from .coins import CoinExperimentScene
from .exceptions import QuantumMeasurementError
from .photons import PhotonsExperiment
from .qrng import RandomSource
from .spin import SternGerlachExperiment
from .utils import data_structures
from .utils.data_structures import DisplayMode
from .utils.logging_setup import LEVEL_NAMES, level_from_name, setup_logger
from .utils.statistics import outcome_fraction

logger = logging.getLogger(__name__)


def scenario_info(name: str) -> dict:
    """Scenario dictionary with enum member names resolved."""
    info = dict(get_simulation_config(name))
    for field_name, enum_name in ENUM_NAME_FIELDS.get(name, {}).items():
        enum_cls = getattr(data_structures, enum_name)
        info[field_name] = enum_cls[info[field_name]]
    return info


def run_frames(experiment, frames: int, dt: float) -> None:
    for _ in range(frames):
        experiment.step(dt)


def run_coins(args, random_source: RandomSource) -> None:
    scene = CoinExperimentScene(scenario_info("coins"), random_source)
    if args.bias is not None:
        scene.set_bias(args.bias)
    scene.start_experiment()

    counts_a = []
    for _ in range(args.passes):
        scene.coin_set.prepare(measure_when_prepared=True)
        run_frames(scene, args.frames, args.dt)
        result = scene.coin_set.measure_all()
        counts_a.append(result.count_a)

    a, b = scene.coin_set.state_values
    n = scene.coin_set.number_of_active_systems
    print(f"{scene.system_type.value} coins, bias {scene.bias.value}, {n} coins x {args.passes} passes")
    print(f"  {a}: {sum(counts_a)}  {b}: {n * args.passes - sum(counts_a)}")
    print(f"  observed fraction of {a}: {sum(counts_a) / (n * args.passes):.4f}")


def run_spin(args, random_source: RandomSource) -> None:
    experiment = SternGerlachExperiment(scenario_info("spin"), random_source)
    run_frames(experiment, args.frames, args.dt)

    print(f"{experiment.experiment}, source {experiment.incoming_direction}")
    expected = experiment.expected_probabilities()
    for i, (device, counts) in enumerate(zip(experiment.devices, experiment.stage_counts)):
        observed = outcome_fraction(counts["up"], counts["down"])
        print(f"  stage {i + 1} ({device.orientation_label}): up={counts['up']} down={counts['down']} "
              f"observed P(+)={observed:.3f} expected P(+)={expected[i]:.3f}")
    print(f"  blocked: {experiment.blocked_count}, in flight: {len(experiment.particles)}")


def run_bloch(args, random_source: RandomSource) -> None:
    experiment = BlochSphereExperiment(scenario_info("bloch"), random_source)
    for _ in range(args.passes):
        experiment.reprepare()
        run_frames(experiment, args.frames, args.dt)
        experiment.observe()

    sphere = experiment.preparation_sphere
    print(f"Prepared {experiment.selected_state_direction}: polar={sphere.polar_angle:.3f} "
          f"azimuthal={sphere.azimuthal_angle:.3f}")
    print(f"  basis {experiment.measurement_basis.name}, field {experiment.magnetic_field_strength}, "
          f"scene {experiment.scene.value}")
    print(f"  up={experiment.up_measurement_count} down={experiment.down_measurement_count}")


def run_photons(args, random_source: RandomSource) -> None:
    experiment = PhotonsExperiment(scenario_info("photons"), random_source)
    run_frames(experiment, args.frames, args.dt)

    h = experiment.horizontal_polarization_detector
    v = experiment.vertical_polarization_detector
    print(f"Photons at {experiment.laser.polarization_angle} degrees, {experiment.laser.emitted_count} emitted")
    unit = "/s" if h.display_mode == DisplayMode.RATE else ""
    print(f"  horizontal: {h.displayed_value:g}{unit}")
    print(f"  vertical:   {v.displayed_value:g}{unit}")
    print(f"  launched: {experiment.launched_count} detected: {experiment.detected_count} "
          f"lost: {experiment.lost_count}")
    print(f"  normalized outcome value: {experiment.normalized_outcome_value:.3f}")


RUNNERS = {
    "coins": run_coins,
    "spin": run_spin,
    "bloch": run_bloch,
    "photons": run_photons,
}


def build_parser() -> argparse.ArgumentParser:
    run_config = get_simulation_config("run")
    parser = argparse.ArgumentParser(description="Quantum measurement simulation runner")
    parser.add_argument("experiment", choices=sorted(RUNNERS), help="Experiment to run")
    parser.add_argument("--seed", "-s", type=int, default=run_config["seed"],
                        help="Random seed for a reproducible run")
    parser.add_argument("--frames", "-f", type=int, default=run_config["frames"],
                        help=f"Frames to step (default: {run_config['frames']})")
    parser.add_argument("--dt", type=float, default=run_config["dt"],
                        help="Seconds per frame (default: 1/60)")
    parser.add_argument("--passes", "-p", type=int, default=10,
                        help="Prepare/measure passes for coins and bloch (default: 10)")
    parser.add_argument("--bias", "-b", type=float, default=None,
                        help="Coin bias override")
    parser.add_argument("--log-level", "-l", choices=list(LEVEL_NAMES), default="WARNING",
                        help="Log level (default: WARNING)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger("quantum_measurement", level_from_name(args.log_level))

    if args.frames < 0 or args.dt <= 0:
        print("Frames must not be negative and dt must be positive")
        return 2

    random_source = RandomSource(args.seed)
    try:
        RUNNERS[args.experiment](args, random_source)
    except QuantumMeasurementError as e:
        logger.error(f"Simulation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
