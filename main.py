#!/usr/bin/env python3
"""
GraphScript - Console runner

Loads a saved graph, generates Python source for it, compiles the source
into an isolated unit and runs it, printing diagnostics and output.

Usage:
    python main.py hello.json
    python main.py hello.json --show-source --no-run
    python main.py hello.json --target console --output-dir build
    python main.py hello.json --package --output-dir dist
"""
import argparse
import sys

from loguru import logger

from src.core.config import AppConfig, ConfigManager
from src.core.logging import setup_logging
from src.graphscript.core.errors import GraphScriptError
from src.graphscript.persistence import GraphSerializer
from src.graphscript.workflow import GraphWorkflow


def _print_report(title: str, lines) -> None:
    lines = list(lines)
    if not lines:
        return
    print(f"{title}:")
    for line in lines:
        print(f"  {line}")


def main(argv=None) -> int:
    """Main entry point for console application."""
    parser = argparse.ArgumentParser(
        description="GraphScript - compile and run visual script graphs"
    )
    parser.add_argument("graph", help="Saved graph (.json)")
    parser.add_argument("--config", help="Settings file (.json or .toml)")
    parser.add_argument(
        "--target",
        choices=["library", "console", "windowed"],
        help="Output kind (settings default if omitted)"
    )
    parser.add_argument("--output-dir", help="Persist generated artifacts here")
    parser.add_argument("--no-run", action="store_true", help="Compile only")
    parser.add_argument("--show-source", action="store_true", help="Print the generated source")
    parser.add_argument("--package", action="store_true", help="Build a native executable")

    args = parser.parse_args(argv)

    config = ConfigManager(args.config).data if args.config else AppConfig()
    setup_logging(config.general.debug_mode, config.general.log_dir)

    try:
        report = GraphSerializer().load(args.graph)
    except GraphScriptError as e:
        print(f"Error: {e}")
        return 1
    _print_report("Load warnings", report.warnings)

    workflow = GraphWorkflow(config)
    target = args.target or config.build.target

    if args.package:
        try:
            outcome = workflow.package(report.graph, target, args.output_dir)
        except GraphScriptError as e:
            logger.error(f"Packaging aborted: {e}")
            print(f"Error: {e}")
            return 1
        _print_report("Diagnostics", outcome.compilation.diagnostics)
        if outcome.packaged:
            print(f"Executable: {outcome.artifact_path}")
            return 0
        print(f"Packaging failed: {outcome.error}")
        if outcome.artifact_path:
            print(f"Fallback artifact: {outcome.artifact_path}")
        return 1

    result = workflow.run(report.graph, target, args.output_dir, execute=not args.no_run)

    if result.generation_error is not None:
        print(f"Error: {result.generation_error}")
        return 1

    if args.show_source:
        print(result.source)
    _print_report("Codegen warnings", result.codegen_warnings)
    _print_report("Diagnostics", result.compilation.diagnostics)

    if not result.compilation.success:
        return 1
    if result.compilation.artifact_path:
        print(f"Artifact: {result.compilation.artifact_path}")

    if result.run is None:
        return 0

    sys.stdout.write(result.run.output)
    if not result.run.success:
        print(f"Run failed: {result.run.fault}")
        if result.run.fault.traceback_text:
            print(result.run.fault.traceback_text)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
