"""
Main entry point when running the robot_control module with python -m.
"""

import argparse
import logging
import sys

from .robot import main, setup_logging

if __name__ == "__main__":
    # Parse command-line arguments
    parser = argparse.ArgumentParser(
        description="Run the autonomous routine against the simulated drivetrain"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    parser.add_argument(
        "--output-dir", default=".", help="Base directory for recorded runs (default: .)"
    )
    parser.add_argument(
        "--no-record", action="store_true", help="Do not record the run to CSV"
    )
    parser.add_argument(
        "--plot", action="store_true", help="Plot the recorded run when it finishes"
    )
    args = parser.parse_args()

    # Setup logging based on verbose flag
    setup_logging(args.verbose)

    if args.plot and args.no_record:
        parser.error("--plot requires a recorded run")

    try:
        sys.exit(main(output_dir=args.output_dir, record=not args.no_record, plot=args.plot))
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)
