import argparse
import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Optional

from core.entities import AggregateReport
from ingestion.source_factory import create_extractors
from services.config import load_config
from services.logging import setup_logging
from workflows.aggregator import TrendAggregator


def write_report(report: AggregateReport, output: Optional[str]) -> None:
    """Print the report JSON, or write it to `output` when given."""
    body = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)

    if output is None:
        print(body)
        return

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


async def main(output: Optional[str] = None, config_path: Optional[str] = None) -> AggregateReport:
    start_time = time.perf_counter()
    logger = logging.getLogger(__name__)

    config = load_config(config_path)

    logger.info("Starting one-shot aggregation run")

    aggregator = TrendAggregator.from_extractors(create_extractors(config))
    report = await aggregator.run()

    write_report(report, output)
    if output:
        logger.info(f"Report written to {output}")

    end_time = time.perf_counter()
    logger.info(f"Total time: {end_time - start_time:.2f}s")
    return report


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one indie trends aggregation")
    parser.add_argument("--output", "-o", help="Write the report JSON to this file instead of stdout")
    parser.add_argument("--config", help="Path to config.yml")
    return parser.parse_args(argv)


def cli(argv=None) -> None:
    args = parse_args(argv)
    setup_logging()
    asyncio.run(main(output=args.output, config_path=args.config))


if __name__ == "__main__":
    cli()
