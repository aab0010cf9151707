"""
TradeSense CLI

Command-line interface for one-off decisions on CSV bar files.

Usage:
    python -m tradesense.cli --input bars.csv --symbol BTCUSDT --timeframe 1h
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

from tradesense.adapters.providers import MomentumPredictionProvider
from tradesense.engine import TradingDecisionEngine
from tradesense.indicators.config import PERIODS_PER_YEAR
from tradesense.indicators.schemas import PriceSeries
from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.exceptions import ConfigValidationError
from tradesense.risk_manager.schemas import PortfolioSnapshot

LOG = logging.getLogger(__name__)


def load_series(input_path: Path) -> PriceSeries:
    """Read an OHLCV CSV with a timestamp column"""
    df = pd.read_csv(input_path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    LOG.info(f"Loaded {len(df)} bars from {input_path}")
    return PriceSeries.from_dataframe(df)


def load_json(path: Optional[str]) -> Optional[dict]:
    if not path:
        return None
    with open(path, 'r') as f:
        return json.load(f)


def run(
    input_path: Path,
    symbol: str,
    timeframe: str,
    portfolio_path: Optional[str] = None,
    config_path: Optional[str] = None,
    analyze_only: bool = False,
    use_momentum: bool = True,
) -> dict:
    """Evaluate one CSV file and return the JSON-ready result"""
    series = load_series(input_path)

    config_dict = load_json(config_path)
    risk_config = RiskConfig.from_dict(config_dict) if config_dict else RiskConfig.from_env()

    portfolio = load_json(portfolio_path)
    snapshot = PortfolioSnapshot.from_dict(portfolio) if portfolio is not None else None

    engine = TradingDecisionEngine(
        prediction_provider=MomentumPredictionProvider() if use_momentum else None,
    )

    if analyze_only:
        analysis = asyncio.run(
            engine.analyze(symbol, series, timeframe, risk_config.ensure_valid().fusion_config())
        )
        return analysis.to_dict()

    signal, assessment = asyncio.run(
        engine.evaluate(symbol, series, timeframe, snapshot, risk_config)
    )
    return {
        'symbol': symbol,
        'timeframe': timeframe,
        'bars': len(series),
        'signal': signal.to_dict(),
        'assessment': assessment.to_dict(),
        'risk_config_hash': risk_config.get_config_hash(),
    }


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="TradeSense decision CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Decision with default risk settings and no portfolio (always rejected at exposure)
    python -m tradesense.cli --input data/BTCUSDT_1h.csv --symbol BTCUSDT --timeframe 1h

    # Decision against a portfolio snapshot with custom risk settings
    python -m tradesense.cli --input data/BTCUSDT_1h.csv --symbol BTCUSDT --timeframe 1h \\
        --portfolio portfolio.json --config risk.json

    # Signal analysis only
    python -m tradesense.cli --input data/BTCUSDT_1h.csv --symbol BTCUSDT --timeframe 1h --analyze-only
        """
    )

    parser.add_argument("--input", type=str, required=True, help="Input OHLCV CSV file")
    parser.add_argument("--symbol", type=str, required=True, help="Symbol identifier")
    parser.add_argument(
        "--timeframe",
        type=str,
        required=True,
        choices=sorted(PERIODS_PER_YEAR),
        help="Bar timeframe"
    )
    parser.add_argument("--portfolio", type=str, help="Portfolio snapshot JSON file")
    parser.add_argument("--config", type=str, help="Risk configuration JSON file")
    parser.add_argument("--output", type=str, help="Write result JSON here instead of stdout")
    parser.add_argument("--analyze-only", action="store_true", help="Skip risk gating")
    parser.add_argument("--no-prediction", action="store_true",
                        help="Disable the momentum prediction collaborator")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--quiet", action="store_true", help="Suppress all output except errors")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    try:
        result = run(
            Path(args.input),
            args.symbol,
            args.timeframe,
            portfolio_path=args.portfolio,
            config_path=args.config,
            analyze_only=args.analyze_only,
            use_momentum=not args.no_prediction,
        )
    except ConfigValidationError as e:
        LOG.error(str(e))
        return 2
    except (OSError, ValueError, KeyError) as e:
        LOG.error(f"Failed to evaluate {args.input}: {e}")
        return 1

    text = json.dumps(result, indent=2)
    if args.output:
        Path(args.output).write_text(text)
        LOG.info(f"Result written to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
