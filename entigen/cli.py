# File: entigen/cli.py
"""
Entigen - Command-Line Interface
=================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Print the entity descriptors as JSON
    python -m entigen --model model.yaml

    # Write one <Entity>.json per entity, keeping existing changelog dates
    python -m entigen -m model.yaml -o .jhipster -v

    # Check the model only
    python -m entigen -m model.yaml --validate-only

Exit codes:
    0 — success
    1 — entity creation error (invalid association, incompatible storage)
    4 — input error (unreadable model, missing database type)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_CREATION_ERROR: int = 1
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root entigen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("entigen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from entigen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="entigen",
        description=(
            "Entigen — turns a parsed class model into the entity descriptors "
            "consumed by the code-generation templates."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -m model.yaml\n"
            "  %(prog)s -m model.yaml -o .jhipster -v\n"
            "  %(prog)s -m model.yaml --validate-only\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    io_group = parser.add_argument_group("input / output")
    io_group.add_argument(
        "-m", "--model",
        required=True,
        help="Path to the parsed model document (JSON or YAML).",
    )
    io_group.add_argument(
        "-o", "--output",
        default=None,
        help="Directory receiving one <Entity>.json per entity "
             "(prints JSON to stdout when omitted).",
    )
    io_group.add_argument(
        "--prior-state",
        default=None,
        help="Directory of previously generated entity files "
             "(defaults to the output directory, else .jhipster).",
    )
    io_group.add_argument(
        "-d", "--database-type",
        default=None,
        help="Override the document's databaseType.",
    )

    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Run the checks and print diagnostics without writing entities.",
    )
    behaviour_group.add_argument(
        "--no-user-management",
        action="store_true",
        default=False,
        help="Treat a 'User' class as a regular entity.",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def _run(args: argparse.Namespace) -> int:
    """Load, create, then print or export. Returns the exit code."""
    from entigen.creator import CreationReport, EntityCreator
    from entigen.exceptions import EntityCreationError, MissingInputError
    from entigen.exporters import EntityExporter
    from entigen.loader import ModelDocument, load_model_file
    from entigen.state import DEFAULT_STATE_DIR, load_prior_state

    try:
        document: ModelDocument = load_model_file(Path(args.model).resolve())
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load model: %s", exc)
        return EXIT_INPUT_ERROR

    options = document.options
    if args.no_user_management:
        options = options.model_copy(update={"no_user_management": True})

    output_dir: Optional[Path] = Path(args.output).resolve() if args.output else None
    state_dir: Path = Path(args.prior_state or args.output or DEFAULT_STATE_DIR).resolve()
    try:
        prior_state: Dict[str, str] = load_prior_state(
            state_dir, document.model.class_names
        )
    except ValueError as exc:
        logger.error("Failed to read prior state: %s", exc)
        return EXIT_INPUT_ERROR

    creator: EntityCreator = EntityCreator(options=options, prior_state=prior_state)
    try:
        report: CreationReport = creator.create(
            document.model, args.database_type or document.database_type
        )
    except MissingInputError as exc:
        logger.error("Missing input: %s", exc)
        return EXIT_INPUT_ERROR
    except EntityCreationError as exc:
        logger.error("Entity creation failed: %s", exc)
        return EXIT_CREATION_ERROR

    if args.validate_only:
        print(report.summary())
        return EXIT_SUCCESS

    if output_dir is None:
        payload = {
            class_id: entity.to_json_dict()
            for class_id, entity in report.entities.items()
        }
        print(json.dumps(payload, indent=4))
    else:
        EntityExporter().export(report.entities, document.model, output_dir)
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    exit_code: int = _run(args)
    if exit_code != EXIT_SUCCESS:
        logger.error("Entity creation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_CREATION_ERROR",
    "EXIT_INPUT_ERROR",
]
