from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from imgbench.config import ENV_HELP, HealthPolicy, SweepConfig, load_from_env
from imgbench.loadgen.health import probe_server
from imgbench.loadgen.runner import new_client, run_sweep
from imgbench.metrics import LevelStatistics
from imgbench.report import SweepReport, render_level

logger = logging.getLogger("imgbench")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    epilog = "Environment variables:\n" + "\n".join(
        f"  {name:<20} {text}" for name, text in ENV_HELP.items()
    )
    parser = argparse.ArgumentParser(
        prog="imgbench",
        description="Concurrency sweep load test for an image-generation server.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--base-url", help="Base URL of the server")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--max-concurrent", type=int, help="Highest concurrency level to test")
    parser.add_argument("--requests-per-level", type=int, help="Requests per client at each level")
    parser.add_argument("--cooldown", type=float, help="Seconds to wait between levels")
    parser.add_argument("--output-dir", type=Path, help="Directory for run results and images")
    parser.add_argument("--prompt", help="Prompt sent with every request")
    parser.add_argument("--strict-health", action="store_true", help="Abort when the health check fails")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def build_config(args: argparse.Namespace, base: SweepConfig) -> SweepConfig:
    target = base.target
    if args.base_url:
        target = replace(target, base_url=args.base_url)
    if args.timeout is not None:
        target = replace(target, timeout_sec=args.timeout)
    request = base.request
    if args.prompt:
        request = replace(request, prompt=args.prompt)
    config = replace(base, target=target, request=request)
    if args.max_concurrent is not None:
        config = replace(config, max_concurrency=args.max_concurrent)
    if args.requests_per_level is not None:
        config = replace(config, requests_per_level=args.requests_per_level)
    if args.cooldown is not None:
        config = replace(config, cooldown_sec=args.cooldown)
    if args.output_dir is not None:
        config = replace(config, output_dir=args.output_dir)
    if args.strict_health:
        config = replace(config, health_policy=HealthPolicy.FAIL)
    config.validate()
    return config


async def _print_level(stats: LevelStatistics, max_concurrency: int) -> None:
    print(render_level(stats))


async def run(config: SweepConfig) -> int:
    logger.info("URL: %s", config.target.url)
    logger.info("Timeout: %ss", config.target.timeout_sec)
    logger.info("Max Concurrent: %d", config.max_concurrency)
    logger.info("Requests per level: %d", config.requests_per_level)

    async with new_client() as client:
        logger.info("Checking server availability at %s...", config.target.base_url)
        if await probe_server(client, config.target.base_url):
            logger.info("Server is available.")
        elif config.health_policy is HealthPolicy.FAIL:
            logger.error("Server health check failed.")
            return 1
        else:
            logger.warning("Server health check failed. Proceeding anyway...")

        report = SweepReport(config.run_dir)
        await run_sweep(config, report=report, client=client, progress=_print_level)

    print(report.render())
    report.write_csv(config.run_dir / "summary.csv")
    logger.info("Load test completed!")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = build_config(args, load_from_env())
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    try:
        config.run_dir.mkdir(parents=True, exist_ok=True)
        (config.run_dir / "run.json").write_text(
            json.dumps(config.to_metadata(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
    except OSError as exc:
        logger.error("Cannot create output directory %s: %s", config.run_dir, exc)
        return 1
    return asyncio.run(run(config))


if __name__ == "__main__":
    sys.exit(main())
