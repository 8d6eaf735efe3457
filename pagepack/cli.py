from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_HOST,
    DEFAULT_OUT_DIR,
    DEFAULT_PORT,
    AppConfig,
    load_config,
    validate_config,
)
from .errors import ConfigurationError
from .pipeline import process_directory
from .utils import clean_output_dir, parse_bool, relative_path_to_absolute

LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def setup_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger = logging.getLogger("pagepack")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    parser = argparse.ArgumentParser(
        prog="pagepack",
        description="A static site generator for truly portable sites. "
        "All sites work as is online and offline.",
    )
    parser.add_argument("project", nargs="?", help="Directory containing the page files.")
    parser.add_argument("--config", default=config_path, help="Path to config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--out",
        "-o",
        default=cfg_str("out", DEFAULT_OUT_DIR),
        help="The directory to which the converted files should be placed.",
    )
    parser.add_argument(
        "--minify",
        "-m",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("minify", False),
        help="Minify the generated HTML documents.",
    )
    parser.add_argument(
        "--watch",
        "-w",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("watch", False),
        help="Watch for file changes and refresh the browser page on changes.",
    )
    parser.add_argument(
        "--port",
        "-p",
        default=cfg_str("port", str(DEFAULT_PORT)),
        help="Port of the development server.",
    )
    parser.add_argument("--host", default=cfg_str("host", DEFAULT_HOST), help="Host of the development server.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging.")
    return parser


def resolve_app_config(args: argparse.Namespace, working_directory: str) -> AppConfig:
    if not args.project:
        raise ConfigurationError("Missing project directory")
    try:
        port = int(str(args.port).strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port: {args.port}") from exc
    config = AppConfig(
        src_dir=Path(relative_path_to_absolute(args.project, working_directory)),
        dst_dir=Path(relative_path_to_absolute(args.out, working_directory)),
        minify=args.minify,
        watch=args.watch,
        port=port,
        host=args.host,
    )
    return validate_config(config)


def main(argv: Optional[Sequence[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=DEFAULT_CONFIG_FILE)
    pre_args, _ = pre_parser.parse_known_args(argv)

    try:
        file_config = load_config(Path(pre_args.config))
        parser = build_parser(file_config, pre_args.config)
        args = parser.parse_args(argv)
        setup_logging(args.verbose)
        config = resolve_app_config(args, os.getcwd())
        clean_output_dir(config.dst_dir, config.src_dir)
    except ConfigurationError as exc:
        print(f"pagepack: {exc}", file=sys.stderr)
        sys.exit(1)

    start = time.perf_counter()
    built, failed = process_directory(config)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"{built} page(s) written to: {config.dst_dir}" + (f" ({failed} failed)" if failed else ""))

    if config.watch:
        from .devserver import start_dev_server

        try:
            start_dev_server(config)
        except KeyboardInterrupt:
            print("\nStopping...")
    elif failed:
        sys.exit(1)
