import argparse
import logging
import sys
from pathlib import Path

import structlog

from .batch import monthly_windows, run_batch
from .carbon_client import CarbonIntensityClient
from .config import settings
from .exceptions import CarbonPipelineError
from .models import Output, RequestMode, TimeWindow
from .pipeline import run

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch and normalize GB carbon intensity data"
    )
    parser.add_argument("--start", required=True, help="Window start, YYYY-MM-DDTHH:MMZ")
    parser.add_argument("--end", required=True, help="Window end, YYYY-MM-DDTHH:MMZ")
    parser.add_argument("--intensity", action="store_true", help="National intensity")
    parser.add_argument("--generation", action="store_true", help="National generation mix")
    parser.add_argument(
        "--regional-wide",
        action="store_true",
        help="Regional readings, one column per region and measure",
    )
    parser.add_argument(
        "--regional-long",
        action="store_true",
        help="Regional readings, one row per region and half hour",
    )
    parser.add_argument(
        "--monthly",
        action="store_true",
        help="Split the window into calendar months and fetch each separately",
    )
    parser.add_argument("--output-dir", default=settings.output_dir)

    args = parser.parse_args(argv)
    if not (args.intensity or args.generation or args.regional_wide or args.regional_long):
        parser.error("select at least one of --intensity, --generation, "
                     "--regional-wide, --regional-long")
    return args


def write_output(output: Output, window: TimeWindow, output_dir: Path) -> list[Path]:
    """Write each dataset of an Output to a Parquet file."""
    output_dir.mkdir(parents=True, exist_ok=True)
    suffix = f"{window.start.replace(':', '')}_{window.end.replace(':', '')}"

    paths = []
    for name, frame in (("wide", output.wide), ("long", output.long)):
        if frame is None:
            continue
        path = output_dir / f"{name}_{suffix}.parquet"
        frame.to_parquet(path, index=False)
        logger.info("dataset_written", dataset=name, path=str(path), rows=len(frame))
        paths.append(path)
    return paths


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the carbon intensity pipeline."""
    args = parse_args(argv)

    try:
        window = TimeWindow(start=args.start, end=args.end)
    except ValueError as e:
        logger.error("invalid_window", error=str(e))
        return 2

    mode = RequestMode(
        want_intensity=args.intensity,
        want_generation=args.generation,
        want_regional_wide=args.regional_wide,
        want_regional_long=args.regional_long,
    )

    logger.info(
        "pipeline_starting",
        start=window.start,
        end=window.end,
        monthly=args.monthly,
        base_url=settings.carbon_api_base_url,
    )

    client = CarbonIntensityClient()
    try:
        if args.monthly:
            output = run_batch(monthly_windows(window), mode, client=client)
        else:
            output = run(window, mode, client=client)
    except CarbonPipelineError as e:
        logger.error("pipeline_failed", error=str(e))
        return 1

    write_output(output, window, Path(args.output_dir))
    logger.info("pipeline_completed", shape=output.shape.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
