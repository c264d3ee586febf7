"""
Demonstration of a full repricing run: stock CSV in, priced results and a
summary out.

Usage: python -m demos.repricing_demo [stock.csv] [output.csv]
Without a CSV a small synthetic stock list is priced.
"""

import io
import sys

import pandas as pd

from agents.batch_processor import BatchReport, process_batch
from config.config import build_strategy_config, load_settings, load_strategy_file
from connectors.csv_export import export_results_csv, results_to_frame
from connectors.csv_source import load_records
from utils.logger import get_logger

LOGGER_NAME = "demos.repricing_demo"

logger = get_logger(LOGGER_NAME)

SAMPLE_STOCK_CSV = """VRM,Retail price,Retail valuation,Days in stock,Auto Trader Retail Rating,Days since last price change
AB12CDE,"£9,878","£10,000",10,85,0
CD34EFG,"£9,000","£10,000",10,85,0
EF56GHI,"£14,200","£15,000",45,62,12
GH78IJK,"£6,450","£7,200",200,30,3
IJ90KLM,"£8,100",,20,70,1
,£5000,£5200,12,55,0
"""


def run_repricing_demo(
    csv_path: str | None = None, output_path: str | None = None
) -> BatchReport:
    """
    Price a stock file with the configured strategy and print a summary.
    Returns the BatchReport for further use.
    """
    settings = load_settings()
    get_logger(LOGGER_NAME, settings.log_level)
    logger.info("--- Starting Repricing Demonstration ---")

    overrides = None
    if settings.default_strategy_path:
        overrides = load_strategy_file(settings.default_strategy_path)
        logger.info(f"Using strategy from {settings.default_strategy_path}")
    config = build_strategy_config(overrides)

    source = csv_path if csv_path else io.StringIO(SAMPLE_STOCK_CSV)
    records = load_records(source)
    report = process_batch(
        records,
        config,
        sample_size=settings.sample_size,
        max_workers=settings.max_workers,
    )

    print("\n--- Repricing Summary ---")
    print(pd.Series(report.summary).to_string())
    print(f"\nTotal increment: {report.stats['total_increment']:.2f}")
    print(f"Total drop:      {report.stats['total_drop']:.2f}")
    print(f"Net impact:      {report.stats['net_impact']:.2f}")
    print("\n--- Sample Results ---")
    print(results_to_frame(report.sample_results).to_string(index=False))
    print("-------------------------\n")

    if output_path:
        export_results_csv(report.results, output_path)
        logger.info(f"Wrote {len(report.results)} results to {output_path}")

    logger.info("--- Repricing Demonstration Complete ---")
    return report


if __name__ == "__main__":
    args = sys.argv[1:]
    run_repricing_demo(
        csv_path=args[0] if args else None,
        output_path=args[1] if len(args) > 1 else None,
    )
