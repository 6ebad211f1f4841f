"""Command-line front end: scan a cluster file, analyze a strategy file.

Usage:
    python -m polylens scan cluster.json
    python -m polylens scan cluster.json --detect --rules sum_to_one,arbitrage_bundle
    python -m polylens analyze strategy.json --rate 0.05
    python -m polylens analyze strategy.json --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from polylens.config import AnalysisConfig, ScannerConfig, parse_rules
from polylens.models.cluster import ClusterType, MarketCluster
from polylens.models.flag import ScannerFlag, ScannerResult
from polylens.models.strategy import Strategy, StrategyAnalysis
from polylens.payoff.analyzer import analyze_strategy
from polylens.payoff.scenarios import ScenarioLimitError
from polylens.scanner.cluster_scanner import scan_cluster
from polylens.scanner.cluster_type import detect_cluster_type
from polylens.scanner.thresholds import build_threshold_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_SCENARIO_LIMIT = 2

# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_flag_line(flag: ScannerFlag) -> str:
    """단일 플래그를 한 줄 문자열로 포맷."""
    profit = "-" if flag.potential_profit is None else f"{flag.potential_profit:.2f}"
    return (
        f"  [{flag.severity.value.upper():<6}] {flag.title[:45]:<45} "
        f"| score: {flag.severity_score:3d} "
        f"| conf: {flag.confidence:5.1f} "
        f"| profit: {profit} "
        f"| markets: {len(flag.affected_markets)}"
    )


def format_trade_line(trade) -> str:
    return (
        f"      → {trade.side:<3} {trade.market_question[:50]:<50} "
        f"stake {trade.suggested_stake:.3f} ({trade.reason})"
    )


def format_scan_result(result: ScannerResult) -> str:
    cluster = result.cluster
    lines = [
        f"Cluster: {cluster.name or cluster.id} "
        f"[{cluster.cluster_type.value}, {len(cluster.markets)} markets]",
        f"Checks: {result.checks_performed} | Duration: {result.scan_duration:.2f}ms",
    ]
    if not result.flags:
        lines.append("No inefficiencies found.")
        return "\n".join(lines)

    count = len(result.flags)
    lines.append(f"Found {count} {'flag' if count == 1 else 'flags'}:")
    for flag in result.flags:
        lines.append(format_flag_line(flag))
        for trade in flag.suggested_trades:
            lines.append(format_trade_line(trade))
    return "\n".join(lines)


def format_analysis(analysis: StrategyAnalysis) -> str:
    """요약 블록 + 시나리오별 한 줄."""
    surface = analysis.payoff_surface
    lines = [
        f"Total stake:        ${analysis.total_stake:,.2f}",
        f"Expected payoff:    ${analysis.expected_payoff:,.2f} "
        f"({analysis.expected_return:+.2f}%)",
        f"Max profit:         ${analysis.max_profit:,.2f}",
        f"Max loss:           ${analysis.max_loss:,.2f}",
        f"Break-even prob:    {analysis.break_even_probability * 100:.1f}%",
        f"Surface EV (today): ${surface.expected_value:,.2f}",
        f"Time-weighted EV:   ${surface.time_weighted_ev:,.2f}",
    ]
    if analysis.scenarios:
        lines.append("")
        lines.append(f"Scenarios ({len(analysis.scenarios)}):")
        for scenario in analysis.scenarios:
            outcomes = ", ".join(
                f"{mid}={side.value}" for mid, side in scenario.outcomes.items()
            )
            lines.append(
                f"  {scenario.id:<12} p={scenario.probability:6.4f} "
                f"payoff=${scenario.payoff:>10,.2f}  {outcomes}"
            )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def load_json(path: str) -> dict:
    """Read a JSON object from ``path``. OSError / ValueError propagate."""
    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def prepare_cluster(cluster: MarketCluster) -> MarketCluster:
    """마켓 질문으로 클러스터 타입(및 임계값) 채우기."""
    cluster.cluster_type = detect_cluster_type(cluster.markets)
    if cluster.cluster_type == ClusterType.THRESHOLD and cluster.threshold_config is None:
        cluster.threshold_config = build_threshold_config(
            cluster.name or cluster.id, cluster.markets
        )
    logger.info(
        "Detected cluster type %s for %s", cluster.cluster_type.value,
        cluster.name or cluster.id,
    )
    return cluster


def run_scan(args: argparse.Namespace) -> int:
    cluster = MarketCluster.from_dict(load_json(args.path))
    if args.detect:
        cluster = prepare_cluster(cluster)

    overrides = {
        "sum_to_one_threshold": args.sum_threshold,
        "threshold_margin": args.threshold_margin,
        "min_arbitrage_profit": args.min_profit,
        "enabled_rules": parse_rules(args.rules) if args.rules is not None else None,
    }
    config = ScannerConfig.from_env().merged(overrides)

    result = scan_cluster(cluster, config)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_scan_result(result))
    return EXIT_OK


def run_analyze(args: argparse.Namespace) -> int:
    strategy = Strategy.from_dict(load_json(args.path))
    if args.rate is not None:
        strategy = strategy.with_discount_rate(args.rate)

    analysis = analyze_strategy(strategy, AnalysisConfig.from_env())
    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
    else:
        print(format_analysis(analysis))
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """커맨드라인 인자 파싱."""
    parser = argparse.ArgumentParser(
        prog="polylens",
        description="Prediction-market inefficiency scanner and strategy analyzer",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json", action="store_true", default=False,
        help="Print the full result as JSON",
    )
    common.add_argument(
        "--verbose", "-v", action="store_true", default=False,
        help="Log at DEBUG level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser(
        "scan", parents=[common], help="Scan a market cluster for inefficiencies",
    )
    scan.add_argument("path", help="Cluster JSON file")
    scan.add_argument(
        "--detect", action="store_true", default=False,
        help="Classify the cluster from its questions before scanning",
    )
    scan.add_argument(
        "--sum-threshold", type=float, default=None,
        help="Sum-to-one tolerance (default: 0.05)",
    )
    scan.add_argument(
        "--threshold-margin", type=float, default=None,
        help="Threshold consistency margin (default: 0.02)",
    )
    scan.add_argument(
        "--min-profit", type=float, default=None,
        help="Minimum arbitrage profit per $1 (default: 0.01)",
    )
    scan.add_argument(
        "--rules", type=str, default=None,
        help="Comma-separated rules (e.g., sum_to_one,arbitrage_bundle)",
    )
    scan.set_defaults(handler=run_scan)

    analyze = sub.add_parser(
        "analyze", parents=[common], help="Analyze a strategy's payoffs",
    )
    analyze.add_argument("path", help="Strategy JSON file")
    analyze.add_argument(
        "--rate", type=float, default=None,
        help="Annual discount rate, overrides the file (default: 0.10)",
    )
    analyze.set_defaults(handler=run_analyze)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        return args.handler(args)
    except ScenarioLimitError as e:
        logger.error("Strategy too large to enumerate: %s", e)
        return EXIT_SCENARIO_LIMIT
    except OSError as e:
        logger.error("Cannot read %s: %s", args.path, e)
        return EXIT_BAD_INPUT
    except (KeyError, ValueError) as e:
        logger.error("Invalid input in %s: %s", args.path, e)
        return EXIT_BAD_INPUT


def cli_main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
