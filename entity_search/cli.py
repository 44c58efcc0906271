"""Command-line entry point for entity-search.

``entity-search inspect`` prints the effective search fields a registry
exposes; ``entity-search new-config`` scaffolds a JSON declaration file.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from .config_file import generate_stub_config, load_search_config
from .errors import SearchConfigurationError
from .load_target import load_entity_type, load_search_options
from .logging_config import setup_logging
from .registry import SearchConfigurationOptions

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "ENTITY_SEARCH_LOG_LEVEL"
LOG_FILE_ENV = "ENTITY_SEARCH_LOG_FILE"
DEFAULT_CONFIG_OUTPUT_DIR = Path("search_configs")
DEFAULT_CONFIG_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

CommandHandler = Callable[[Sequence[str]], int]

HELP_TEXT = """\
Usage: entity-search <command> [<args>]

Commands:
  inspect      Print the effective search fields of configured entities
  new-config   Scaffold a JSON search config for one or more entity types

Run `entity-search <command> --help` to see the options for a specific command.
"""


def slugify_name(name: str) -> str:
    """Return a filesystem-friendly slug for the config name."""
    slug = name.strip().lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug or "config"


def _add_logging_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        help=f"Logging verbosity (DEBUG, INFO, WARNING, ERROR). "
        f"Defaults to ${LOG_LEVEL_ENV} or INFO.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=os.environ.get(LOG_FILE_ENV) or None,
        help=f"Also write logs to this rotating file. Defaults to ${LOG_FILE_ENV}.",
    )


def _load_entity_types(targets: Sequence[str]) -> List[type]:
    return [load_entity_type(target) for target in targets]


def describe_options(
    options: SearchConfigurationOptions,
    entity_types: Optional[Sequence[type]] = None,
) -> Dict[str, object]:
    """Return a JSON-ready summary of the effective search fields."""
    types_to_show = list(entity_types) if entity_types else list(options.entity_types())
    entities: Dict[str, object] = {}
    for entity_type in types_to_show:
        config = options.entity(entity_type)
        entities[entity_type.__name__] = {
            "explicit": config.has_explicit_fields,
            "fields": [
                {
                    "name": field.name,
                    "match_mode": field.match_mode.value,
                    "weight": field.weight,
                }
                for field in config.search_fields
            ],
        }
    return {
        "default_match_mode": options.default_match_mode.value,
        "default_search_field_names": list(options.default_search_field_names),
        "entities": entities,
    }


def handle_inspect(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="entity-search inspect",
        description="Print the effective search fields of a configured registry.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples
            --------
            entity-search inspect --target myapp.search:configure_search_fields
            entity-search inspect --entity myapp.models:Customer \\
                --config search_configs/customers.json
            """
        ),
    )
    parser.add_argument(
        "--target",
        help=(
            "Import string for a SearchConfigurationOptions instance or an "
            "initializer callable (format: package.module:ATTRIBUTE). "
            "Defaults to an empty registry."
        ),
    )
    parser.add_argument(
        "--entity",
        action="append",
        default=[],
        help="Entity class to inspect (format: package.module:Class). Repeatable.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON search config to apply on top of the target registry.",
    )
    _add_logging_options(parser)

    args = parser.parse_args(list(argv))
    setup_logging(log_level=str(args.log_level), log_file=args.log_file)

    try:
        options = (
            load_search_options(args.target)
            if args.target
            else SearchConfigurationOptions()
        )
        entity_types = _load_entity_types(args.entity)
        if args.config is not None:
            if options.frozen:
                logger.error(
                    "Registry from %s is frozen; cannot apply %s",
                    args.target,
                    args.config,
                )
                return 1
            load_search_config(
                args.config.expanduser(),
                options,
                entity_types or options.entity_types(),
            )
    except (TypeError, ValueError, SearchConfigurationError) as exc:
        logger.error("Failed to load search configuration: %s", exc)
        return 1

    if not entity_types and not len(options):
        logger.warning("No entity types configured; nothing to inspect.")

    print(json.dumps(describe_options(options, entity_types), indent=2))
    return 0


def handle_new_config(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="entity-search new-config",
        description="Scaffold a search config stub listing each entity's "
        "default search fields.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples
            --------
            entity-search new-config customers --entity myapp.models:Customer
            entity-search new-config catalog \\
                --entity myapp.models:Product --entity myapp.models:Category \\
                --output-dir config/search
            """
        ),
    )
    parser.add_argument(
        "name",
        help="Human-friendly identifier for this config stub (used in the filename slug).",
    )
    parser.add_argument(
        "--entity",
        action="append",
        required=True,
        help="Entity class to include (format: package.module:Class). Repeatable.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_CONFIG_OUTPUT_DIR,
        help=(
            "Directory where the stub will be written "
            f"(defaults to ./{DEFAULT_CONFIG_OUTPUT_DIR})."
        ),
    )
    _add_logging_options(parser)

    args = parser.parse_args(list(argv))
    setup_logging(log_level=str(args.log_level), log_file=args.log_file)

    try:
        entity_types = _load_entity_types(args.entity)
        stub = generate_stub_config(entity_types)
    except (TypeError, ValueError, SearchConfigurationError) as exc:
        logger.error("Failed to load entity types: %s", exc)
        return 1

    slug = slugify_name(args.name)
    timestamp = datetime.now(timezone.utc).strftime(DEFAULT_CONFIG_TIMESTAMP_FORMAT)
    output_dir = args.output_dir.expanduser().resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    output_path = output_dir / f"{timestamp}_{slug}.json"
    counter = 1
    while output_path.exists():
        output_path = output_dir / f"{timestamp}_{slug}_{counter:02d}.json"
        counter += 1

    output_path.write_text(json.dumps(stub, indent=2), encoding="utf-8")
    logger.info(
        "Wrote search config stub for %d entity type(s) at %s",
        len(stub),
        output_path,
    )
    return 0


COMMANDS: Dict[str, CommandHandler] = {
    "inspect": handle_inspect,
    "new-config": handle_new_config,
    "new_config": handle_new_config,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch to the requested subcommand."""
    load_dotenv()
    args: List[str] = list(argv if argv is not None else sys.argv[1:])

    if not args or args[0] in {"-h", "--help", "help"}:
        print(HELP_TEXT)
        return 0

    command = args[0]
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command '{command}'.\n", file=sys.stderr)
        print(HELP_TEXT, file=sys.stderr)
        return 1

    return handler(args[1:])


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
