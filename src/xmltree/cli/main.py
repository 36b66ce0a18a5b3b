"""Main CLI entry point for the xmltree command-line tool.

Provides re-formatting of XML files and a structural summary of their tree.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from xmltree import __version__
from xmltree.api import XMLTreeParser
from xmltree.shared.config import ConfigError, XMLTreeConfig
from xmltree.shared.errors import XMLTreeError
from xmltree.shared.logging import get_logger
from xmltree.tree import XMLNode

INDENT_CHOICES = {"tab": "\t", "space": " "}

logger = get_logger(__name__, None, "cli")


def load_config(config_path: Optional[Path]) -> XMLTreeConfig:
    """Load configuration from a JSON file, or return the defaults.

    Raises:
        ConfigError: If the file content is not a valid configuration
    """
    if config_path is None:
        return XMLTreeConfig()
    try:
        return XMLTreeConfig.from_json(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e


def configure_logging(config: XMLTreeConfig, args: argparse.Namespace) -> None:
    """Apply the configured package log level unless -v/-q was given."""
    if not (args.verbose or args.quiet):
        logging.getLogger("xmltree").setLevel(config.logging_level)


def collect_statistics(root: XMLNode, parser: XMLTreeParser) -> Dict[str, Any]:
    """Summarize a parsed tree."""
    nodes = [root, *root.iter_descendants()]
    stats: Dict[str, Any] = {
        "root": root.tag,
        "element_count": len(nodes),
        "attribute_count": sum(node.attribute_count for node in nodes),
        "text_count": sum(1 for node in nodes if node.has_text()),
        "max_depth": max(node.get_depth() for node in nodes),
    }
    if parser.last_metrics is not None:
        stats["metrics"] = parser.last_metrics.to_dict()
    return stats


def format_statistics(stats: Dict[str, Any], tree: Dict[str, Any], format_type: str) -> str:
    """Format an inspect result for output."""
    if format_type == "json":
        return json.dumps({"statistics": stats, "tree": tree}, indent=2)

    lines = [
        f"Root element: <{stats['root']}>",
        f"Elements: {stats['element_count']}",
        f"Attributes: {stats['attribute_count']}",
        f"Text nodes: {stats['text_count']}",
        f"Max depth: {stats['max_depth']}",
    ]
    metrics = stats.get("metrics")
    if metrics:
        lines.append(f"Parse time: {metrics['processing_time_ms']:.2f}ms")
    return "\n".join(lines)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xmltree",
        description="Parse, inspect and re-format XML documents"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Format command
    format_parser = subparsers.add_parser("format", help="Re-indent an XML file")
    format_parser.add_argument(
        "path",
        type=Path,
        help="XML file to format"
    )
    format_parser.add_argument(
        "--indent", "-i",
        choices=sorted(INDENT_CHOICES),
        help="Indent character (default: from configuration, tab)"
    )
    format_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    format_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Summarize an XML file")
    inspect_parser.add_argument(
        "path",
        type=Path,
        help="XML file to inspect"
    )
    inspect_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )
    inspect_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def cmd_format(args: argparse.Namespace) -> int:
    """Handle format command."""
    config = load_config(args.config)
    configure_logging(config, args)
    if args.indent:
        config = config.override(serializer__indent=INDENT_CHOICES[args.indent])

    parser = XMLTreeParser(config)
    root = parser.parse_file(args.path)
    output = parser.serialize(root)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        print(f"Formatted XML written to {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Handle inspect command."""
    config = load_config(args.config)
    configure_logging(config, args)
    parser = XMLTreeParser(config)
    root = parser.parse_file(args.path)
    stats = collect_statistics(root, parser)
    print(format_statistics(stats, root.to_dict(), args.format))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "format":
            return cmd_format(args)
        elif args.command == "inspect":
            return cmd_inspect(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except (XMLTreeError, ConfigError, OSError, UnicodeDecodeError, RecursionError) as e:
        logger.bind(command=args.command).debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
