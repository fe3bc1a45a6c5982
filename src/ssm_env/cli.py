from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

from ssm_env import __version__
from ssm_env.config import ExpanderConfig
from ssm_env.environ import load_env_file
from ssm_env.errors import SsmEnvError
from ssm_env.expander import Expander

PROG = "ssm-env"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Resolve SSM parameters and KMS payloads in the environment, then exec a command.",
    )
    parser.add_argument(
        "-template",
        "--template",
        default=None,
        help=(
            "The template used to determine what the SSM parameter name is for an environment "
            "variable. When this template returns an empty string, the env variable is not an "
            "SSM parameter"
        ),
    )
    parser.add_argument(
        "-with-decryption",
        "--with-decryption",
        dest="with_decryption",
        action="store_true",
        default=None,
        help="Will attempt to decrypt the parameter, and set the env var as plaintext",
    )
    parser.add_argument(
        "-no-fail",
        "--no-fail",
        dest="no_fail",
        action="store_true",
        default=None,
        help="Don't fail if error retrieving parameter",
    )
    parser.add_argument(
        "-print",
        "--print",
        dest="print_only",
        action="store_true",
        help="Print resolved NAME=value pairs instead of exporting them to the command",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to a JSON/YAML configuration file",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Optional .env file merged into the environment before expansion",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic verbosity on stderr (default: %(default)s)",
    )
    parser.add_argument("-V", dest="version", action="store_true", help="Print the version and exit")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command and arguments to run")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=f"{PROG}: %(message)s", stream=sys.stderr)


def launch(path: str, argv: Sequence[str], environ: Dict[str, str]) -> NoReturn:
    os.execve(path, list(argv), environ)
    raise OSError(f"exec {path} returned")  # pragma: no cover - execve never returns


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not args.command and not args.print_only:
        parser.print_usage(sys.stderr)
        return 1

    configure_logging(args.log_level)

    try:
        if args.env_file:
            load_env_file(args.env_file)
        config = ExpanderConfig.load(
            path=args.config,
            overrides={
                "template": args.template,
                "with_decryption": args.with_decryption,
                "no_fail": args.no_fail,
            },
        )

        path: Optional[str] = None
        if args.command:
            path = shutil.which(args.command[0])
            if path is None:
                raise FileNotFoundError(f'exec: "{args.command[0]}": executable file not found in $PATH')

        result = Expander.from_config(config).expand(
            decrypt=config.with_decryption,
            best_effort=config.no_fail,
            print_only=args.print_only,
        )
    except (SsmEnvError, ValueError, OSError) as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1

    if args.print_only:
        for name, value in result.changes:
            print(f"{name}={value}")
        if path is None:
            return 0
        environ = dict(os.environ)
    else:
        environ = result.environ

    try:
        launch(path, args.command, environ)
    except OSError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
