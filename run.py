"""
eyefollow - Main Entry Point
Orchestrates a tracking run:
  1. Build the tracking configuration from the command line
  2. Start the face tracking pipeline (detection thread)
  3. Run the render host (pygame window, or headless)
  4. Exit when the user quits

The detection thread is a daemon: it goes away with the process.

Usage:
    python run.py
    python run.py --camera 1 --width 1024 --height 768
    python run.py --headless --duration 30
"""

import argparse
import logging
import signal
import sys

from eyefollow.pipeline import TrackingPipeline
from eyefollow.tracking.config import TrackingConfig

logger = logging.getLogger('eyefollow')


def _force_exit(sig, frame):
    """Ctrl+C / kill signal — exit cleanly."""
    logger.info("Force exit requested")
    sys.exit(0)


def build_config(args) -> TrackingConfig:
    """Map parsed command-line options onto a TrackingConfig."""
    if args.headless:
        config = TrackingConfig.for_headless(camera_index=args.camera)
    else:
        config = TrackingConfig.for_session(camera_index=args.camera)
    config.model_dir = args.model_dir
    return config


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Eyes that follow your face')
    parser.add_argument(
        '--camera', type=int, default=0,
        help='Camera device index (default: 0)'
    )
    parser.add_argument(
        '--model-dir', default='.',
        help='Directory holding the face detection model (default: working directory)'
    )
    parser.add_argument(
        '--width', type=int, default=800,
        help='Window width in pixels (default: 800)'
    )
    parser.add_argument(
        '--height', type=int, default=600,
        help='Window height in pixels (default: 600)'
    )
    parser.add_argument(
        '--headless', action='store_true',
        help='Run without a window, logging the eye orientation'
    )
    parser.add_argument(
        '--duration', type=float, default=None,
        help='Headless only: stop after this many seconds'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Debug logging'
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )
    signal.signal(signal.SIGTERM, _force_exit)

    logger.info("Starting face-tracking eyes...")

    config = build_config(args)
    pipeline = TrackingPipeline(config)
    pipeline.start()

    try:
        if config.mode == 'headless':
            from eyefollow.viewer import HeadlessHost
            HeadlessHost(pipeline.smoother).run(duration=args.duration)
        else:
            from eyefollow.viewer import EyeViewer
            EyeViewer(pipeline.smoother, width=args.width, height=args.height).run()

    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    finally:
        status = pipeline.get_status()['face_tracking']
        logger.info(
            f"Session summary — frames: {status['frames_captured']}, "
            f"detections: {status['detections']}, "
            f"capture failures: {status['capture_failures']}"
        )

    return 0


if __name__ == '__main__':
    sys.exit(main())
