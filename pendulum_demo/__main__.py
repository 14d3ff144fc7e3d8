#!/usr/bin/env python3
"""
Double pendulum entry point.

Usage:
    python -m pendulum_demo
    python -m pendulum_demo --trail --m2 5 --a2 120
    python -m pendulum_demo --headless --steps 2000
"""

import argparse
import sys

from .demo import PendulumDemo


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Double pendulum simulation with OpenGL rendering',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m pendulum_demo                       # Interactive window
  python -m pendulum_demo --trail --paused      # Start paused with the trail on
  python -m pendulum_demo --headless -n 5000    # Physics only, print progress
        """
    )
    PendulumDemo.add_common_args(parser)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    config = PendulumDemo.config_from_args(args)
    model = PendulumDemo.model_from_args(args)
    demo = PendulumDemo(config, model)

    if args.headless:
        demo.run_headless(args.steps)
        return 0

    try:
        demo.run()
    except RuntimeError as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
