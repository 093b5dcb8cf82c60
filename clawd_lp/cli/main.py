"""Main CLI entry point"""

import sys
import os
import json
import logging
import argparse
from pathlib import Path

from ..core.balances import BalanceQuery
from ..core.config import Config
from ..core.connection import Web3Manager
from ..core.form_cache import FormCache
from ..operations.liquidity import LiquidityManager
from ..operations.pools import PoolQuery
from ..operations.vesting import VestingManager
from ..types import FormState
from ..utils.formatting import (
    format_multiplier,
    format_usd_value,
    format_weth,
    price_to_usd,
)
from ..utils.math import from_base_units
from ..utils.transactions import format_gas_cost


def get_results_dir():
    """Get results directory, create if needed"""
    results_dir = Path.cwd() / "results"
    results_dir.mkdir(exist_ok=True)
    return results_dir


def save_result(filename, data):
    """Save result to JSON file in results directory"""
    results_dir = get_results_dir()
    filepath = results_dir / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return filepath


def get_eth_price(args):
    """ETH/USD from --eth-price or ETH_USD_PRICE, None if unknown"""
    if getattr(args, "eth_price", None):
        return args.eth_price
    env_price = os.getenv("ETH_USD_PRICE")
    return float(env_price) if env_price else None


def get_manager(args):
    return Web3Manager(address=getattr(args, "sender", None))


def get_liquidity_manager(args):
    return LiquidityManager(
        manager=get_manager(args),
        maxFeePerGas=args.max_fee,
        maxPriorityFeePerGas=args.priority_fee,
    )


def get_form_cache():
    return FormCache(ttl_seconds=Config().form_cache_ttl_seconds)


def print_transactions(steps):
    """Print built transactions, one per step"""
    for i, step in enumerate(steps, 1):
        tx = step["tx"]
        cost = format_gas_cost(tx["gas"], tx["maxFeePerGas"])
        print(f"  {i}. {step['step']:<14} to {tx['to']}  nonce {tx['nonce']}  "
              f"gas {tx['gas']}  (max {cost:.6f} ETH)")


def print_range(lm, tick_lower, tick_upper, price, eth_usd):
    t0, t1 = lm.weth.symbol, lm.clawd.symbol
    print(f"  Current price: {price.ratio:,.2f} {t1}/{t0}  (tick {price.current_tick})")
    print(f"  {t1} price:     {price_to_usd(price.current_tick, eth_usd)}")
    for label, tick in (("Lower", tick_lower), ("Upper", tick_upper)):
        print(f"  {label} tick:    {tick:>8}  {price_to_usd(tick, eth_usd):>12}  "
              f"{format_multiplier(tick, price.ratio)}")


def print_position_type(position_type, t0, t1):
    if position_type == "in_range":
        print(f"\n  Status: IN RANGE (both tokens deposited)")
    elif position_type == "below_range":
        print(f"\n  WARNING: Price is BELOW your range")
        print(f"  Only {t0} needed.")
    else:
        print(f"\n  WARNING: Price is ABOVE your range")
        print(f"  Only {t1} needed.")


def cmd_pool(args):
    """Query the WETH/CLAWD pool"""
    query = PoolQuery(get_manager(args))
    result = query.get_pool_info(get_eth_price(args))

    print(json.dumps(result, indent=2, default=str))
    filepath = save_result("pool.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_balances(args):
    """Query ETH, WETH and CLAWD balances"""
    manager = get_manager(args)
    eth_usd = get_eth_price(args)
    clawd_usd = PoolQuery(manager).get_price(eth_usd).token1_usd if eth_usd else None

    result = BalanceQuery(manager).get_all_balances(args.address, eth_usd, clawd_usd)

    print(f"Balances for {result['address']}")
    print("-" * 60)
    for bal in result["balances"]:
        if "error" in bal:
            print(f"  {bal['symbol']}: ERROR - {bal['error']}")
        else:
            print(f"  {bal['symbol']}: {bal['balance']} {bal['usd']}")
    print("-" * 60)

    short_addr = result["address"][:10]
    filepath = save_result(f"balances_{short_addr}.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def resolve_range(lm, args, price):
    """Spacing-aligned ticks from args, falling back to the default range around the current tick"""
    default_lower, default_upper = lm.default_range(price)
    tick_lower = default_lower if args.lower is None else args.lower
    tick_upper = default_upper if args.upper is None else args.upper
    return lm.align_range(tick_lower, tick_upper)


def cmd_quote(args):
    """Counterpart amount for a range and one anchor amount"""
    lm = get_liquidity_manager(args)
    eth_usd = get_eth_price(args)
    price = lm.pool_query.get_price(eth_usd)
    tick_lower, tick_upper = resolve_range(lm, args, price)

    q = lm.quote(tick_lower, tick_upper, weth_amount=args.weth, clawd_amount=args.clawd,
                 price=price, slippage_bps=args.slippage_bps)
    t0, t1 = lm.weth.symbol, lm.clawd.symbol

    print("=" * 60)
    print(f"LP QUOTE: {t0}/{t1} pool ({lm.config.fee / 10000:.2f}% fee)")
    print("=" * 60)
    print_range(lm, q.tick_lower, q.tick_upper, price, eth_usd)

    print(f"\n  YOU NEED:")
    print(f"    {format_weth(q.weth_wei)} {t0} {format_usd_value(q.weth_wei, eth_usd)}")
    print(f"    {q.clawd_amount:,.2f} {t1} {format_usd_value(q.clawd_wei, price.token1_usd)}")
    print(f"\n  Minimums: {format_weth(q.weth_min)} {t0} / {from_base_units(q.clawd_min):,.2f} {t1}")
    print_position_type(q.position_type, t0, t1)
    print("\n" + "=" * 60)

    result = q.to_dict()
    result["price"] = price.to_dict()
    filepath = save_result("lp_quote.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def _amounts_from_args(lm, args, price, tick_lower, tick_upper):
    """Both deposit amounts, computing a missing side from the other on the aligned range"""
    if args.weth is not None and args.clawd is not None:
        return args.weth, args.clawd
    q = lm.quote(tick_lower, tick_upper, weth_amount=args.weth, clawd_amount=args.clawd, price=price)
    return q.weth_amount, q.clawd_amount


def _form_defaults(args):
    """Fill missing lock-up args from a fresh cached form"""
    if not getattr(args, "use_form", False):
        return
    form = get_form_cache().load()
    if form is None:
        raise ValueError("No saved form (expired or never set). Run 'clawd-lp form set' first.")
    if args.lower is None:
        args.lower = form.tick_lower
    if args.upper is None:
        args.upper = form.tick_upper
    if args.weth is None and form.weth_input:
        args.weth = float(form.weth_input)
    if args.clawd is None and form.clawd_input:
        args.clawd = float(form.clawd_input)
    if getattr(args, "vest_days", None) is None:
        args.vest_days = form.vest_days


def cmd_lock_up(args):
    """Build approve + lockUp transactions"""
    _form_defaults(args)
    if args.weth is None and args.clawd is None:
        raise ValueError("Specify --weth and/or --clawd")

    lm = get_liquidity_manager(args)
    price = lm.pool_query.get_price(get_eth_price(args))
    tick_lower, tick_upper = resolve_range(lm, args, price)
    weth, clawd = _amounts_from_args(lm, args, price, tick_lower, tick_upper)

    result = lm.build_lock_up(tick_lower, tick_upper, weth, clawd, vest_days=args.vest_days,
                              slippage_bps=args.slippage_bps, check_balances=not args.no_balance_check)

    params = result["params"]
    print(f"Lock up {format_weth(params['amount0'])} {lm.weth.symbol} + "
          f"{from_base_units(params['amount1']):,.2f} {lm.clawd.symbol} "
          f"for {result['vest_days']} days, ticks {params['tick_lower']} to {params['tick_upper']}")
    print(f"Next step: {result['next_step']}")
    print("Unsigned transactions:")
    print_transactions(result["transactions"])

    filepath = save_result("lock_up.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_mint(args):
    """Build approve + mint transactions"""
    _form_defaults(args)
    if args.weth is None and args.clawd is None:
        raise ValueError("Specify --weth and/or --clawd")

    lm = get_liquidity_manager(args)
    price = lm.pool_query.get_price(get_eth_price(args))
    tick_lower, tick_upper = resolve_range(lm, args, price)
    weth, clawd = _amounts_from_args(lm, args, price, tick_lower, tick_upper)

    result = lm.build_mint(tick_lower, tick_upper, weth, clawd, slippage_bps=args.slippage_bps,
                           recipient=args.recipient, check_balances=not args.no_balance_check)

    params = result["params"]
    print(f"Mint {format_weth(params['amount0_desired'])} {lm.weth.symbol} + "
          f"{from_base_units(params['amount1_desired']):,.2f} {lm.clawd.symbol}, "
          f"ticks {params['tick_lower']} to {params['tick_upper']}")
    print(f"Next step: {result['next_step']}")
    print("Unsigned transactions:")
    print_transactions(result["transactions"])

    filepath = save_result("mint.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def get_vesting_manager(args):
    return VestingManager(
        manager=get_manager(args),
        maxFeePerGas=args.max_fee,
        maxPriorityFeePerGas=args.priority_fee,
    )


def cmd_vesting_status(args):
    """Vesting state, locked amounts and previews"""
    vm = get_vesting_manager(args)
    eth_usd = get_eth_price(args)
    status = vm.status()

    result = {"status": status.to_dict(), "time_remaining": vm.time_remaining(status)}

    print("=" * 60)
    print(f"VESTING: {vm.vesting.address}")
    print("=" * 60)
    if not status.is_locked:
        print("  No position locked.")
    else:
        price = vm.pool_query.get_price(eth_usd)
        locked = vm.locked_amounts(status, price)
        preview = vm.vest_preview(status, price)
        result.update({"locked": locked, "vest_preview": preview})

        print(f"  Owner:          {status.owner}")
        print(f"  Position:       #{status.token_id}")
        print(f"  Vested:         {status.vested_percent:.2f}%")
        print(f"  Withdrawn:      {status.withdrawn_percent:.2f}%")
        print(f"  Available:      {status.available_percent:.2f}%")
        print(f"  Time remaining: {result['time_remaining']}")
        print(f"\n  Locked: {format_weth(locked['amount0'])} WETH {format_usd_value(locked['amount0'], eth_usd)}"
              f" + {locked['clawd']:,.2f} CLAWD {format_usd_value(locked['amount1'], price.token1_usd)}")
        print(f"  Vest now: {format_weth(preview['amount0'])} WETH + "
              f"{from_base_units(preview['amount1']):,.2f} CLAWD")

        if not args.skip_claim_preview:
            fees = vm.claim_preview(status)
            result["claim_preview"] = fees
            print(f"  Unclaimed fees: {format_weth(fees['amount0'])} WETH + {fees['clawd']:,.2f} CLAWD")
    print("=" * 60)

    filepath = save_result("vesting_status.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def _cmd_vesting_write(args, build, filename):
    vm = get_vesting_manager(args)
    result = build(vm)
    if "preview" in result:
        preview = result["preview"]
        print(f"Minimums: {format_weth(preview['amount0_min'])} WETH / "
              f"{from_base_units(preview['amount1_min']):,.2f} CLAWD")
    print("Unsigned transaction:")
    print_transactions([result])

    filepath = save_result(filename, result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_vesting_claim(args):
    """Build a claim transaction"""
    _cmd_vesting_write(args, lambda vm: vm.build_claim(), "vesting_claim.json")


def cmd_vesting_vest(args):
    """Build a vest transaction"""
    _cmd_vesting_write(args, lambda vm: vm.build_vest(args.slippage_bps), "vesting_vest.json")


def cmd_vesting_claim_and_vest(args):
    """Build a claimAndVest transaction"""
    _cmd_vesting_write(args, lambda vm: vm.build_claim_and_vest(args.slippage_bps),
                       "vesting_claim_and_vest.json")


def cmd_form_show(args):
    """Show the saved lock-up form"""
    form = get_form_cache().load()
    if form is None:
        print("No saved form.")
        return
    print(json.dumps(form.to_dict(), indent=2))


def cmd_form_set(args):
    """Edit the saved lock-up form, recomputing the counterpart amount"""
    cache = get_form_cache()
    form = cache.load() or FormState(vest_days=Config().default_vest_days)

    lm = get_liquidity_manager(args)
    form = lm.edit_form(form, tick_lower=args.lower, tick_upper=args.upper, weth=args.weth,
                        clawd=args.clawd, vest_days=args.vest_days)
    form = cache.save(form) or form
    print(json.dumps(form.to_dict(), indent=2))


def cmd_form_reset(args):
    """Clear the saved lock-up form"""
    get_form_cache().clear()
    print("Form cleared.")


def add_gas_args(parser):
    parser.add_argument("--max-fee", type=float, help="Max fee per gas in Gwei")
    parser.add_argument("--priority-fee", type=float, help="Priority fee in Gwei")


def add_position_args(parser, vest=False):
    parser.add_argument("--lower", type=int, help="Lower tick (default: current - 50 spacings)")
    parser.add_argument("--upper", type=int, help="Upper tick (default: current + 50 spacings)")
    parser.add_argument("--weth", type=float, help="WETH amount")
    parser.add_argument("--clawd", type=float, help="CLAWD amount")
    parser.add_argument("--slippage-bps", type=int, help="Slippage in basis points (default 500)")
    if vest:
        parser.add_argument("--vest-days", type=int, help="Vesting duration in days")


def main():
    parser = argparse.ArgumentParser(
        prog="clawd-lp",
        description="CLAWD LP - WETH/CLAWD concentrated liquidity and vesting on Base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands overview:
  pool        Pool price and tick
  balances    ETH/WETH/CLAWD balances
  quote       Counterpart amount for a tick range
  lock-up     Build approve + lockUp transactions (vesting contract)
  mint        Build approve + mint transactions (position manager)
  vesting     Vesting status, claim, vest, claim-and-vest
  form        Saved lock-up form (show, set, reset)

examples:
  clawd-lp pool --eth-price 3000
  clawd-lp quote --weth 0.1
  clawd-lp form set --lower -200 --upper 200 --weth 0.1
  clawd-lp lock-up --use-form --from 0xYourAddress
  clawd-lp vesting status

configuration:
  RPC_URL          Set in .env file
  PUBLIC_KEY       Sender address, set in wallet.env (or pass --from)
  VESTING_ADDRESS  LiquidityVesting contract
  ETH_USD_PRICE    ETH price for USD display (or pass --eth-price)
  overrides        config/clawd_lp.json, gas_config.json
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--from", dest="sender", help="Sender/owner address (default: PUBLIC_KEY)")
    parser.add_argument("--eth-price", type=float, help="ETH price in USD for display")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # ── Queries ────────────────────────────────────────────────────────
    pool_parser = subparsers.add_parser("pool", help="Query pool price")
    pool_parser.set_defaults(func=cmd_pool)

    balances_parser = subparsers.add_parser("balances", help="Query ETH and token balances")
    balances_parser.add_argument("--address", help="Address to query")
    balances_parser.set_defaults(func=cmd_balances)

    quote_parser = subparsers.add_parser("quote", help="Counterpart amount for a range")
    add_position_args(quote_parser)
    add_gas_args(quote_parser)
    quote_parser.set_defaults(func=cmd_quote)

    # ── Transactions (unsigned) ────────────────────────────────────────
    lock_parser = subparsers.add_parser("lock-up", help="Build lock-up transactions")
    add_position_args(lock_parser, vest=True)
    add_gas_args(lock_parser)
    lock_parser.add_argument("--use-form", action="store_true", help="Fill missing values from the saved form")
    lock_parser.add_argument("--no-balance-check", action="store_true", help="Skip wallet balance check")
    lock_parser.set_defaults(func=cmd_lock_up)

    mint_parser = subparsers.add_parser("mint", help="Build mint transactions")
    add_position_args(mint_parser)
    add_gas_args(mint_parser)
    mint_parser.add_argument("--recipient", help="Position NFT recipient (default: sender)")
    mint_parser.add_argument("--use-form", action="store_true", help="Fill missing values from the saved form")
    mint_parser.add_argument("--no-balance-check", action="store_true", help="Skip wallet balance check")
    mint_parser.set_defaults(func=cmd_mint)

    # ── Vesting ────────────────────────────────────────────────────────
    vesting_parser = subparsers.add_parser("vesting", help="Vesting contract operations")
    vesting_sub = vesting_parser.add_subparsers(dest="vesting_command")

    status_parser = vesting_sub.add_parser("status", help="Vesting state and previews")
    status_parser.add_argument("--skip-claim-preview", action="store_true", help="Do not simulate claim()")
    add_gas_args(status_parser)
    status_parser.set_defaults(func=cmd_vesting_status)

    for name, func, help_text in (
        ("claim", cmd_vesting_claim, "Build a claim transaction"),
        ("vest", cmd_vesting_vest, "Build a vest transaction"),
        ("claim-and-vest", cmd_vesting_claim_and_vest, "Build a claimAndVest transaction"),
    ):
        p = vesting_sub.add_parser(name, help=help_text)
        p.add_argument("--slippage-bps", type=int, help="Slippage in basis points (default 500)")
        add_gas_args(p)
        p.set_defaults(func=func)

    # ── Form ───────────────────────────────────────────────────────────
    form_parser = subparsers.add_parser("form", help="Saved lock-up form")
    form_sub = form_parser.add_subparsers(dest="form_command")

    form_show_parser = form_sub.add_parser("show", help="Show the saved form")
    form_show_parser.set_defaults(func=cmd_form_show)

    form_set_parser = form_sub.add_parser("set", help="Edit the form and recompute the counterpart")
    form_set_parser.add_argument("--lower", type=int, help="Lower tick")
    form_set_parser.add_argument("--upper", type=int, help="Upper tick")
    form_set_parser.add_argument("--weth", type=float, help="WETH amount (anchor)")
    form_set_parser.add_argument("--clawd", type=float, help="CLAWD amount (anchor)")
    form_set_parser.add_argument("--vest-days", type=int, help="Vesting duration in days")
    add_gas_args(form_set_parser)
    form_set_parser.set_defaults(func=cmd_form_set)

    form_reset_parser = form_sub.add_parser("reset", help="Clear the saved form")
    form_reset_parser.set_defaults(func=cmd_form_reset)

    # ── Parse and dispatch ─────────────────────────────────────────────
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "vesting" and not args.vesting_command:
        vesting_parser.print_help()
        sys.exit(1)

    if args.command == "form" and not args.form_command:
        form_parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
