#!/usr/bin/env python3
"""
Launch Migrator - Main Entry Point

Runs auction-to-pool migrations against the in-memory collaborators,
sweeps clearing prices, and mines hook address salts.
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from eth_utils import to_bytes

from .analysis.position_charts import PositionChartGenerator
from .analysis.price_sweep import float_to_q96, price_grid, run_price_sweep, sweep_statistics
from .analysis.results_manager import ResultsManager, RunMetadata
from .core.exceptions import LaunchMigratorError
from .engine.config import MigrationConfig, load_config
from .simulation.scenario import MigrationScenario
from .tools.salt_miner import mine_salt


def main(argv: Optional[list] = None) -> int:
    """Main entry point with command-line interface"""

    parser = argparse.ArgumentParser(
        prog="launch-migrator",
        description="Auction-to-pool liquidity migration simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run one migration
  launch-migrator --config configs/basic_migration.json --clearing-price 0.5 --raised 250000000000000000000000

  # Sweep clearing prices and save results with charts
  launch-migrator --config configs/advanced_migration.json --sweep 0.01 10 25 --raised 250000000000000000000000 --chart --output results

  # Mine a salt for a before-initialize hook address
  launch-migrator --mine-salt --deployer 0x... --init-code-hash 0x... --permissions 0x2000 \\
                  --msg-sender 0x... --token-launcher 0x...
        """
    )

    # Migration arguments
    parser.add_argument('--config', type=str, metavar='FILE',
                        help='Migration configuration JSON file')

    parser.add_argument('--clearing-price', type=float, default=1.0,
                        help='Auction clearing price in currency per token (default: 1.0)')

    parser.add_argument('--raised', type=int,
                        help='Currency raised by the auction, in base units')

    parser.add_argument('--sweep', type=float, nargs=3, metavar=('START', 'STOP', 'NUM'),
                        help='Sweep geometrically spaced clearing prices')

    parser.add_argument('--chart', action='store_true',
                        help='Render position / sweep charts (requires --output)')

    parser.add_argument('--output', type=str, metavar='DIR',
                        help='Save results under this directory')

    # Salt mining arguments
    parser.add_argument('--mine-salt', action='store_true',
                        help='Mine a CREATE2 salt for a hook address')
    parser.add_argument('--deployer', type=str, help='Deploying factory address')
    parser.add_argument('--init-code-hash', type=str, help='keccak256 of the init code')
    parser.add_argument('--permissions', type=lambda v: int(v, 0), help='Hook permission mask, e.g. 0x2000')
    parser.add_argument('--msg-sender', type=str, help='Account calling the token launcher')
    parser.add_argument('--token-launcher', type=str, help='Token launcher address')
    parser.add_argument('--prefix', type=str, default='', help='Vanity hex prefix')
    parser.add_argument('--case-sensitive', action='store_true', help='Match prefix on the checksummed address')
    parser.add_argument('--max-iterations', type=int, default=1_000_000,
                        help='Salts to try before giving up (default: 1000000)')

    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if not (args.mine_salt or args.config):
        parser.print_help()
        return 1

    try:
        if args.mine_salt:
            print("Mining Hook Address Salt")
            print("=" * 50)
            return run_salt_miner(args)

        config = load_config(args.config)
        if args.raised is None:
            parser.error("--raised is required with --config")

        if args.sweep:
            print("Running Clearing Price Sweep")
            print("=" * 50)
            return run_sweep(config, args)

        print("Running Migration")
        print("=" * 50)
        return run_migration(config, args)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1
    except (LaunchMigratorError, ValueError, OSError) as e:
        print(f"Error: {type(e).__name__}: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def _run_name(args) -> str:
    return Path(args.config).stem


def _metadata(args, run_dir: Path, execution_time: float, parameters: dict) -> RunMetadata:
    return RunMetadata(
        run_id=run_dir.name,
        run_name=_run_name(args),
        timestamp=datetime.now().isoformat(),
        parameters=parameters,
        execution_time=execution_time
    )


def run_migration(config: MigrationConfig, args) -> int:
    """Fund, clear, migrate and sweep one launch"""

    clearing_price = float_to_q96(args.clearing_price)
    print(f"Configuration: {args.config}")
    print(f"  Strategy: {config.strategy.value}")
    print(f"  Total supply: {config.total_supply:,}")
    print(f"  Auction share: {config.auction_supply:,} ({config.token_split_to_auction_bps / 100:.2f}%)")
    print(f"  Clearing price: {args.clearing_price} ({clearing_price} Q96)")
    print(f"  Currency raised: {args.raised:,}")
    print()

    start_time = time.time()
    scenario = MigrationScenario(config)
    result = scenario.run(clearing_price, args.raised)
    swept = scenario.sweep()
    elapsed = time.time() - start_time

    data = result.data
    print("Migration Result:")
    print("-" * 30)
    print(f"  Pool: {result.pool_id}")
    print(f"  Initial tick: {result.initial_tick}")
    print(f"  sqrtPriceX96: {data.sqrt_price_x96}")
    print(f"  Token amount: {data.token_amount:,} of reserve {data.reserve_supply:,}")
    print(f"  Currency amount: {data.currency_amount:,} (leftover {data.leftover_currency:,})")
    print(f"  Liquidity: {data.liquidity:,}")
    print(f"  Actions: {' -> '.join(result.actions)}")
    print()
    print("Positions:")
    for position in scenario.positions:
        print(f"  #{position.token_id}: [{position.tick_lower}, {position.tick_upper}] "
              f"L={position.liquidity:,} amounts=({position.amount0:,}, {position.amount1:,})")
    print()
    print("Swept to operator:")
    for asset, amount in swept.items():
        print(f"  {asset}: {amount:,}")
    print(f"\nCompleted in {elapsed:.2f}s")

    if args.output:
        manager = ResultsManager(args.output)
        run_dir = manager.create_run_directory(_run_name(args))
        results = {
            "config": config.model_dump(mode="json"),
            "migration": result.to_dict(),
            "positions": [p.to_dict() for p in scenario.positions],
            "swept": swept
        }
        metadata = _metadata(args, run_dir, elapsed, {
            "clearing_price": clearing_price, "currency_raised": args.raised
        })
        manager.save_results(run_dir, results, metadata)

        if args.chart:
            chart = PositionChartGenerator().plot_positions(
                result, config.tick_spacing, run_dir / "charts" / "positions.png"
            )
            print(f"✅ Chart saved: {chart}")

        manager.save_summary_report(run_dir, {
            "metadata": metadata.__dict__,
            "migration": {k: v for k, v in result.to_dict().items() if k != "pool_key"}
        })
        print(f"✅ Results saved: {run_dir}")

    return 0


def run_sweep(config: MigrationConfig, args) -> int:
    """Run one migration per clearing price and summarize"""

    start, stop, num = args.sweep
    prices = price_grid(start, stop, int(num))
    print(f"Sweeping {len(prices)} prices from {start} to {stop}, raised {args.raised:,}")

    start_time = time.time()
    df = run_price_sweep(config, prices, args.raised, verbose=args.verbose)
    stats = sweep_statistics(df)
    elapsed = time.time() - start_time

    print()
    print("Sweep Summary:")
    print("-" * 30)
    for key, value in stats.items():
        print(f"  {key.replace('_', ' ').title()}: {value}")
    print(f"\nCompleted in {elapsed:.2f}s")

    if args.output:
        manager = ResultsManager(args.output)
        run_dir = manager.create_run_directory(f"{_run_name(args)}_sweep")
        manager.save_table(run_dir, df)
        metadata = _metadata(args, run_dir, elapsed, {
            "start": start, "stop": stop, "num": int(num), "currency_raised": args.raised
        })
        manager.save_results(run_dir, {"statistics": stats, "rows": df.to_dict(orient="records")}, metadata)

        if args.chart:
            chart = PositionChartGenerator().plot_price_sweep(df, run_dir / "charts" / "price_sweep.png")
            if chart:
                print(f"✅ Chart saved: {chart}")

        manager.save_summary_report(run_dir, {"metadata": metadata.__dict__, "sweep_statistics": stats})
        print(f"✅ Results saved: {run_dir}")

    return 0


def run_salt_miner(args) -> int:
    """Mine and print a salt"""

    missing = [name for name in ("deployer", "init_code_hash", "permissions", "msg_sender", "token_launcher")
               if getattr(args, name) is None]
    if missing:
        print(f"Error: missing --{', --'.join(m.replace('_', '-') for m in missing)}")
        return 1

    print("Run properties:")
    print(f" * Deployer: {args.deployer}")
    print(f" * Init code hash: {args.init_code_hash}")
    print(f" * Hook permissions mask: {args.permissions:#06x}")
    print(f" * Msg sender: {args.msg_sender}")
    print(f" * Token launcher: {args.token_launcher}")
    if args.prefix:
        print(f" * Vanity prefix: {args.prefix} ({'case sensitive' if args.case_sensitive else 'any case'})")
    print()

    start_time = time.time()
    mined = mine_salt(
        args.deployer,
        to_bytes(hexstr=args.init_code_hash),
        args.permissions,
        args.msg_sender,
        args.token_launcher,
        vanity_prefix=args.prefix,
        case_sensitive=args.case_sensitive,
        max_iterations=args.max_iterations
    )
    elapsed = time.time() - start_time

    print("Salt Found!")
    for key, value in mined.to_dict().items():
        print(f" * {key.replace('_', ' ').capitalize()}: {value}")
    print(f"\nCompleted in {elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
