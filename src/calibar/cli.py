#!/usr/bin/env python3
"""
calibar CLI - camera calibration and marker-locked AR overlay.

Usage:
    calibar                     - Calibrate if needed, then show the overlay (default)
    calibar run                 - Same as above
    calibar calibrate           - Recalibrate even if a calibration file exists, then run
    calibar show                - Print the stored calibration
    calibar init-config PATH    - Write a default config file
    calibar board PATH          - Write a printable chessboard image
    calibar marker PATH         - Write a printable ArUco marker (id 0)
    calibar --help              - Show this help

Exit codes: 0 ok, 1 capture device unavailable, 2 calibration unreadable,
3 usage error.

Options:
    --config PATH    Config file (default: calibar.toml if present)
    --verbose        Debug logging
    --log-file PATH  Also log to a file
"""

import argparse
import logging
import sys
from pathlib import Path

from calibar.errors import EXIT_CALIBRATION_UNREADABLE, EXIT_USAGE, CalibarError

COMMANDS = ("run", "calibrate", "show", "init-config", "board", "marker")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="calibar", add_help=False)
    parser.add_argument("command", nargs="?", default="run")
    parser.add_argument("path", nargs="?", type=Path)
    parser.add_argument("--config", type=Path)
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--log-file")
    parser.add_argument("-h", "--help", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    if args.help:
        print(__doc__)
        return 0

    if args.command not in COMMANDS:
        print(f"Unknown command: {args.command}")
        print("Run 'calibar --help' for usage")
        return EXIT_USAGE

    from calibar.logging_utils import add_file_handler, setup_logger

    logger = setup_logger(logging.DEBUG if args.verbose else logging.INFO)
    if args.log_file:
        add_file_handler(logger, args.log_file)

    from calibar.config import (
        create_default_app_config,
        load_calibration,
        resolve_app_config,
        save_app_config,
    )

    if args.command in ("init-config", "board", "marker") and args.path is None:
        print(f"'{args.command}' needs a PATH argument")
        return EXIT_USAGE

    if args.command == "init-config":
        save_app_config(create_default_app_config(), args.path)
        print(f"Wrote {args.path}")
        return 0

    config = resolve_app_config(args.config)

    if args.command == "board":
        import cv2
        from calibar.calibration import render_chessboard

        cv2.imwrite(str(args.path), render_chessboard(config.chessboard))
        print(f"Wrote {args.path}")
        return 0

    if args.command == "marker":
        import cv2
        from calibar.detection import generate_marker_image

        cv2.imwrite(str(args.path), generate_marker_image(config.marker))
        print(f"Wrote {args.path}")
        return 0

    if args.command == "show":
        calibration = load_calibration(config.calibration_path)
        if calibration is None:
            print(f"No valid calibration at {config.calibration_path}")
            return EXIT_CALIBRATION_UNREADABLE
        print(f"Calibration: {config.calibration_path}")
        print(f"  intrinsic:\n{calibration.intrinsic}")
        print(f"  distortion (k1, k2, p1, p2): {calibration.distortion}")
        return 0

    from calibar.app import run

    try:
        return run(config, force_calibration=args.command == "calibrate")
    except CalibarError as e:
        logger.error("%s", e)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
