"""Motion clip annotation — contacts and trajectory windows → .npz."""

import argparse
import logging
from typing import Optional, Sequence

from animlab.pipeline import AnnotationConfig, AnnotationPipeline, SensorConfig

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(message)s"


def _args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="animlab",
        description="Annotate a motion clip with contacts and trajectory windows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  animlab walk.npz --config sensors.json\n"
            "  python -m animlab walk.npz --sensor LeftFoot --sensor RightFoot --threshold 0.05\n"
        ),
    )
    p.add_argument("clip", help="clip archive (.npz)")
    p.add_argument("--config", help="AnnotationConfig JSON file")
    p.add_argument("--sensor", action="append", default=[], help="joint name to label (repeatable)")
    p.add_argument("--threshold", type=float, default=None)
    p.add_argument("--ground-height", type=float, default=None)
    p.add_argument("--output-dir", default=None)
    p.add_argument("--name", default=None)
    p.add_argument("--no-trajectory", dest="trajectory", action="store_false", default=True)
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> AnnotationConfig:
    """AnnotationConfig from the JSON file (if any) with command-line overrides applied."""
    config = AnnotationConfig.from_json(args.config) if args.config else AnnotationConfig()
    for joint in args.sensor:
        config.sensors.append(SensorConfig(joint=joint))
    if args.threshold is not None:
        for sensor in config.sensors:
            sensor.threshold = args.threshold
    if args.ground_height is not None:
        config.ground_height = args.ground_height
    if args.output_dir:
        config.output_dir = args.output_dir
    if not args.trajectory:
        config.sample_trajectories = False
    return config


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format=LOG_FORMAT, datefmt="%H:%M:%S")

    result = AnnotationPipeline(build_config(args)).run(args.clip, output_name=args.name)
    print(f"\nannotations → {result['output_path']}")
    print(f"frames : {result['frames']}")
    print(f"sensors: {result['sensors']}")


if __name__ == "__main__":
    main()
