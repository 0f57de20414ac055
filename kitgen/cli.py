"""CLI entrypoints for kitgen commands."""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import SUPPORTED_TRANSPORTS
from .errors import KitgenError
from .logging import configure_logging
from .orchestrator import GenerationReport, Generator

_INIT_KINDS = ("service",) + SUPPORTED_TRANSPORTS
_UPDATE_KINDS = ("service", "grpc")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_transport_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--transport",
        choices=SUPPORTED_TRANSPORTS,
        default=None,
        help="Transport to generate (defaults to default_transport from .kitgen.yml).",
    )


def _add_name_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Service name, e.g. orders.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kitgen",
        description="Generate and maintain go-kit service scaffolding from a Go interface.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only report warnings and errors."
    )
    parser.add_argument(
        "-C",
        "--root",
        default=".",
        help="Path to the Go project root (defaults to current directory).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as unified diffs without writing anything.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Create a service file with an empty interface.")
    _add_verbose_option(new_parser, suppress_default=True)
    new_parser.add_argument("kind", choices=("service",), help="What to create.")
    _add_name_argument(new_parser)

    init_parser = subparsers.add_parser(
        "init",
        help="Generate service stubs, endpoints or a transport from the service interface.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    init_parser.add_argument("kind", choices=_INIT_KINDS, help="Layer to initialize.")
    _add_name_argument(init_parser)
    _add_transport_option(init_parser)

    update_parser = subparsers.add_parser(
        "update",
        help="Merge new interface methods into previously generated files.",
    )
    _add_verbose_option(update_parser, suppress_default=True)
    update_parser.add_argument("kind", choices=_UPDATE_KINDS, help="Layer to update.")
    _add_name_argument(update_parser)
    _add_transport_option(update_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for kitgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    try:
        generator = Generator(args.root, dry_run=bool(args.dry_run))
        report = _dispatch(generator, args)
    except KitgenError as exc:
        where = f"{exc.artifact}: " if exc.artifact else ""
        parser.exit(exc.exit_code, f"kitgen {args.command} failed: {where}{exc}\n")

    _print_report(report, root=generator.root, dry_run=bool(args.dry_run))
    if not report.ok:
        first = report.failures[0]
        parser.exit(
            report.exit_code,
            f"kitgen {args.command} finished with {len(report.failures)} failed layer(s); "
            f"first: {first.layer}: {first.error}\nRun with --verbose for more details.\n",
        )


def _dispatch(generator: Generator, args: argparse.Namespace) -> GenerationReport:
    transport = getattr(args, "transport", None)
    if args.command == "new":
        return generator.new_service(args.name)
    if args.command == "init":
        if args.kind == "service":
            return generator.init_service(args.name, transport)
        return generator.init_transport(args.name, args.kind)
    if args.command == "update":
        if args.kind == "service":
            return generator.update_service(args.name, transport)
        return generator.update_grpc(args.name)
    raise ValueError(f"Unknown command {args.command}")  # pragma: no cover - argparse enforces choices


def _print_report(report: GenerationReport, *, root: Path, dry_run: bool) -> None:
    if dry_run:
        print(f"{report.command} {report.service} (dry-run):")
        print(report.diff or "(no changes)")
        return
    changed = report.changed()
    if not changed and report.ok:
        print(f"{report.service}: already up to date")
        return
    for result in changed:
        print(f"{result.status:>8} {_relativize(root / result.path, root)}")


def _relativize(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = ["main"]
