"""Main entry point for the Tongits server."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from tongits_server.config import load_config
from tongits_server.game.engine import GameEngine
from tongits_server.logging import GameLogger
from tongits_server.network.server import GameServer
from tongits_server.utils.logger import GameDisplay, setup_logging

logger = logging.getLogger(__name__)


def generate_log_filename(log_dir: str) -> str:
    """Generate log filename with the server start timestamp.

    Format: {ISO timestamp}_tongits.jsonl

    Args:
        log_dir: Directory for log files.

    Returns:
        Full path to log file.
    """
    timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
    return str(Path(log_dir) / f"{timestamp}_tongits.jsonl")


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(
        description="Tongits card game server"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config file (YAML)",
    )
    parser.add_argument(
        "-H",
        "--host",
        help="Host address to bind (overrides config)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        help="Server port (overrides config)",
    )
    parser.add_argument(
        "-s",
        "--seed",
        type=int,
        help="Random seed for reproducible shuffles (overrides config)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--show-hands",
        action="store_true",
        help="Show player hands in output",
    )
    parser.add_argument(
        "--game-log",
        type=Path,
        help="Directory for game log files (filename auto-generated)",
    )

    args = parser.parse_args(argv)

    # Load config
    config = load_config(args.config)

    # Apply command-line overrides
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.seed is not None:
        config.game.seed = args.seed
    if args.verbose:
        config.logging.level = "DEBUG"
    if args.show_hands:
        config.logging.show_hands = True

    # Game log directory (CLI argument overrides config file)
    game_log_enabled = args.game_log is not None or config.game_log.enabled
    game_log_dir = str(args.game_log) if args.game_log else config.game_log.output_path
    log_path = generate_log_filename(game_log_dir) if game_log_enabled else None

    setup_logging(config.logging.level)
    display = GameDisplay(show_hands=config.logging.show_hands)

    print("Tongits Server starting...")
    print(f"Address: {config.server.host}:{config.server.port}")
    print(f"Players per table: {config.game.num_players}")
    if log_path:
        print(f"Game log: {log_path}")
    print()

    try:
        with GameLogger(log_path) as game_logger:
            engine = GameEngine(config, game_logger=game_logger)
            engine.set_callbacks(
                on_round_start=display.print_round_start,
                on_round_end=display.print_round_end,
            )

            with GameServer(
                host=config.server.host,
                port=config.server.port,
                engine=engine,
            ) as server:
                print(f"Listening on port {server.port}, waiting for players...")
                server.serve_forever()

        return 0

    except KeyboardInterrupt:
        print("\nServer interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
