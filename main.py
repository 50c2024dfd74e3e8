"""
Entry point for BlockDrop.

Supports two modes:
  - play:  Play the game with keyboard controls.
  - serve: Run a headless score server that collects submissions.

Usage:
    python main.py
    python main.py --mode play --server 192.168.1.20
    python main.py --mode play --host-server
    python main.py --mode serve --port 8080
"""

from __future__ import annotations

import argparse
import pathlib
import sys

import yaml

DEFAULT_CONFIG = pathlib.Path(__file__).resolve().parent / "config" / "settings.yaml"


def load_config(config_path: str | pathlib.Path) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dict of configuration key-value pairs (empty if the file is empty).

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace with mode, config, server, port, host_server and seed.
    """
    parser = argparse.ArgumentParser(
        description="BlockDrop: a falling-block puzzle game with a shared leaderboard.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=["play", "serve"],
        default="play",
        help="Run mode: 'play' (open the game window), 'serve' (score server only).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=None,
        help="Address of a score server to push final scores to (play mode).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Score server port (default: server_port from the config).",
    )
    parser.add_argument(
        "--host-server",
        action="store_true",
        help="Also run a score server in the background while playing.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the piece randomizer.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point: parse args, load config, and dispatch to the selected mode."""
    args = parse_args(argv)
    config = load_config(args.config)

    from blockdrop.leaderboard import Leaderboard
    from blockdrop.net import ScoreServer, ScoreSubmitter

    port = args.port if args.port is not None else config.get("server_port", 8080)
    leaderboard = Leaderboard()

    if args.mode == "serve":
        server = ScoreServer(leaderboard, config.get("server_bind", "0.0.0.0"), port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nScore server stopped. Final leaderboard:")
            for rank, entry in enumerate(leaderboard.entries(), start=1):
                print(f"{rank:>3}. {entry.name:<16} {entry.score:>8}")

    elif args.mode == "play":
        from blockdrop.play import play_manual

        server = None
        if args.host_server or config.get("host_server", False):
            try:
                server = ScoreServer(leaderboard, config.get("server_bind", "0.0.0.0"), port).start()
            except OSError as e:
                print(f"Could not start score server on port {port}: {e}", file=sys.stderr)

        address = args.server or config.get("server_address")
        submitter = None
        if address:
            submitter = ScoreSubmitter(address, port, timeout=config.get("submit_timeout", 5.0))

        try:
            play_manual(config, leaderboard, submitter, seed=args.seed)
        finally:
            if submitter is not None:
                submitter.shutdown()
            if server is not None:
                server.stop()

    else:
        print(f"Unknown mode: {args.mode}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
