"""Command line entry point for the alert pipeline."""

import argparse
import asyncio
import logging
from pathlib import Path

from .app import AlertSystem
from .config import load_config
from .export import ExportOptions


def setup_logging(log_level: str = 'INFO', log_file: str = None):
    """Setup logging configuration."""
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run the alert analysis pipeline')
    parser.add_argument(
        '--config',
        default=None,
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single collection cycle and exit'
    )
    parser.add_argument(
        '--run-for',
        type=float,
        default=None,
        metavar='SECONDS',
        help='Run scheduled tasks and notifications for this many seconds'
    )
    parser.add_argument(
        '--output',
        default=None,
        help='Write analyzed alerts of a --once run to this JSON file'
    )
    parser.add_argument(
        '--export',
        choices=['csv', 'json', 'html'],
        default=None,
        help='Export stored alerts after running'
    )
    parser.add_argument(
        '--export-path',
        default=None,
        help='Export file path (defaults to the generated filename)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='Logging level (overrides the config file)'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        help='Also write logs to this file'
    )
    return parser


async def run_for(system: AlertSystem, seconds: float):
    system.start()
    try:
        await asyncio.sleep(seconds)
    finally:
        await system.stop()


def print_statistics(stats: dict):
    print("\n" + "=" * 50)
    print("PIPELINE RESULTS")
    print("=" * 50)
    print(f"Total alerts processed: {stats['total_alerts']}")
    print(f"Duplicates: {stats['duplicates']}")
    print(f"Average sentiment: {stats['average_sentiment']:.3f}")
    print("\nUrgency distribution:")
    for level, count in stats['urgency_distribution'].items():
        print(f"  {level}: {count}")
    print("=" * 50 + "\n")


def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    log_level = args.log_level or config.get('output', {}).get('log_level', 'INFO')
    setup_logging(log_level, args.log_file)
    logger = logging.getLogger(__name__)

    system = AlertSystem(config=config)

    if args.once or args.run_for is None:
        result = system.run_collection_cycle()
        logger.info(result.message)

        alerts = system.poll_new_alerts()
        logger.info(f"{len(alerts)} new alerts available")

        if args.output:
            Path(args.output).parent.mkdir(parents=True, exist_ok=True)
            system.pipeline.save_results(system.pipeline.last_alerts, args.output)

        print_statistics(system.pipeline.compute_statistics(system.pipeline.last_alerts))

    if args.run_for is not None:
        logger.info(f"Running scheduled tasks for {args.run_for} seconds")
        asyncio.run(run_for(system, args.run_for))

    if args.export:
        result = system.export(ExportOptions(format=args.export))
        path = Path(args.export_path or result.filename)
        path.write_text(result.data, encoding='utf-8')
        print(f"Exported {args.export.upper()} ({result.size} bytes) to {path}")

    system.store.close()


if __name__ == '__main__':
    main()
