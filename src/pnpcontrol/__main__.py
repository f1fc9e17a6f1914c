import argparse
import logging
import sys
import threading

from .core.config import SystemConfig
from .core.exceptions import CentroidFileError, PnPError
from .hardware.mock import create_hardware
from .placement.loader import load_centroid_file
from .sequencer.runner import SequencerRunner

logger = logging.getLogger(__name__)

# Exit status for a configuration failure; 1..4 are the centroid file codes
CONFIG_ERROR_EXIT_CODE = 5


def _start_api(runner: SequencerRunner, config: SystemConfig) -> None:
    """Serve the status API from a daemon thread"""
    import uvicorn

    from .api.app import init_app

    app = init_app(runner)
    server = uvicorn.Server(
        uvicorn.Config(app, host=config.api.host, port=config.api.port, log_level="warning")
    )
    threading.Thread(target=server.run, name="status-api", daemon=True).start()
    logger.info(f"Status API listening on http://{config.api.host}:{config.api.port}")


def main(argv=None) -> int:
    """Main entry point with argument parsing"""
    parser = argparse.ArgumentParser(description="Pick and place controller")
    parser.add_argument("centroid_file", help="Placement list (YAML)")
    parser.add_argument("--config", help="Controller configuration (YAML)")
    parser.add_argument(
        "--keys",
        default="",
        help="Operator key presses fed to the simulated machine, e.g. '2ppc'",
    )
    parser.add_argument(
        "--settle-polls",
        type=int,
        default=2,
        help="Readiness polls each simulated instruction takes",
    )
    parser.add_argument(
        "--no-realtime",
        action="store_true",
        help="Run the simulated machine as fast as possible instead of at the poll rate",
    )
    parser.add_argument("--max-ticks", type=int, default=None, help="Stop after N ticks")
    parser.add_argument(
        "--exit-on-complete",
        action="store_true",
        help="Exit once all components are placed instead of waiting for quit",
    )
    parser.add_argument("--api", action="store_true", help="Serve the status API")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = SystemConfig.from_yaml(args.config) if args.config else SystemConfig.create_default()
    except PnPError as e:
        logger.error(f"Failed to load configuration: {e}")
        return CONFIG_ERROR_EXIT_CODE

    try:
        centroid = load_centroid_file(args.centroid_file)
    except CentroidFileError as e:
        logger.error(f"Problem with centroid file: {e}")
        print(f"Problem with centroid file, error code {int(e.code)}", file=sys.stderr)
        return int(e.code)

    hardware = create_hardware(
        {
            "type": "mock",
            "settle_polls": args.settle_polls,
            "keys": list(args.keys),
            "realtime": not args.no_realtime,
        }
    )
    runner = SequencerRunner(hardware, centroid.queue, centroid.mode, config)

    if args.api or config.api.enabled:
        _start_api(runner, config)

    try:
        runner.run(max_ticks=args.max_ticks, stop_on_complete=args.exit_on_complete)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
