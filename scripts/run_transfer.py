"""CLI entrypoint to move a single artifact to or from a bucket repository."""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bucket_wagon.config import DEFAULT_CONFIG, WagonConfig
from bucket_wagon.events import LoggingTransferListener
from bucket_wagon.exceptions import ConfigurationError, WagonError
from bucket_wagon.models import AuthenticationInfo, Repository
from bucket_wagon.wagon import BucketWagon

KEY_ID_ENV = "BUCKET_WAGON_KEY_ID"
APPLICATION_KEY_ENV = "BUCKET_WAGON_APPLICATION_KEY"

EXIT_OK = 0
EXIT_MISSING = 1
EXIT_ERROR = 2


def load_env_file(env_path: str = ".env") -> None:
    """Load credentials from a dotenv file without overriding the environment.

    Accepts ``KEY=value`` lines, an optional ``export`` prefix and values
    wrapped in single or double quotes.
    """
    env_file = Path(env_path)
    if not env_file.exists():
        logging.debug("Environment file not found: %s", env_path)
        return

    logging.info("Loading environment from: %s", env_path)
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        name, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        os.environ.setdefault(name.strip(), value)


def expand_env_vars(data: dict | list | str) -> dict | list | str:
    """Recursively expand ${VAR} references in config. Unset variables are left as-is."""
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        def replacer(match):
            return os.environ.get(match.group(1), match.group(0))

        return re.sub(r"\$\{(\w+)\}", replacer, data)
    else:
        return data


def load_config(path: Path | None) -> WagonConfig:
    if not path:
        return DEFAULT_CONFIG
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            raw_config = json.load(f)
        except ValueError as exc:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return WagonConfig.from_dict(expand_env_vars(raw_config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Transfer artifacts to and from a bucket repository")
    parser.add_argument("--url", required=True, help="Repository URL, e.g. b2://bucket/path/to/repo")
    parser.add_argument("--repository-id", default="remote", help="Repository id used in log output")
    parser.add_argument("--config", type=Path, help="Optional path to a JSON config file overriding defaults")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Verbosity for logging output",
    )
    parser.add_argument("--env-file", default=".env", help="Path to .env file (default: .env)")

    commands = parser.add_subparsers(dest="command", required=True)

    get = commands.add_parser("get", help="Download a resource")
    get.add_argument("resource")
    get.add_argument("destination", type=Path)

    get_if_newer = commands.add_parser("get-if-newer", help="Download a resource if uploaded after TIMESTAMP")
    get_if_newer.add_argument("resource")
    get_if_newer.add_argument("destination", type=Path)
    get_if_newer.add_argument("timestamp", type=int, help="Reference time in epoch milliseconds")

    put = commands.add_parser("put", help="Upload a local file")
    put.add_argument("source", type=Path)
    put.add_argument("resource")

    exists = commands.add_parser("exists", help="Exit 0 if the resource exists, 1 otherwise")
    exists.add_argument("resource")

    info = commands.add_parser("info", help="Print remote metadata as JSON")
    info.add_argument("resource")
    return parser


def run_command(wagon: BucketWagon, args: argparse.Namespace) -> int:
    if args.command == "get":
        wagon.fetch(args.resource, args.destination)
    elif args.command == "get-if-newer":
        downloaded = wagon.fetch_if_newer(args.resource, args.destination, args.timestamp)
        if not downloaded:
            logging.info("%s is up to date", args.resource)
    elif args.command == "put":
        wagon.store(args.source, args.resource)
    elif args.command == "exists":
        found = wagon.exists(args.resource)
        print("found" if found else "missing")
        return EXIT_OK if found else EXIT_MISSING
    elif args.command == "info":
        remote = wagon.get_remote_file(args.resource)
        print(
            json.dumps(
                {
                    "key": remote.key,
                    "upload_timestamp": remote.upload_timestamp,
                    "content_length": remote.content_length,
                    "content_type": remote.content_type,
                },
                indent=2,
            )
        )
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    load_env_file(args.env_file)

    try:
        config = load_config(args.config)
        credentials = AuthenticationInfo(
            username=os.environ.get(KEY_ID_ENV),
            password=os.environ.get(APPLICATION_KEY_ENV),
        )
        with BucketWagon(config) as wagon:
            wagon.add_transfer_listener(LoggingTransferListener())
            wagon.connect(Repository(id=args.repository_id, url=args.url), credentials)
            return run_command(wagon, args)
    except WagonError as exc:
        logging.error("%s: %s", type(exc).__name__, exc.message)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
