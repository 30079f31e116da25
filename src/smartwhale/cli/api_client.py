"""CLI to call SmartWhale API routes and the CoinGecko price stream.

Usage:
  poetry run smartwhale-api health
  poetry run smartwhale-api whales top --limit 10
  poetry run smartwhale-api whales detail 0xBE0eB53F46cd790Cd13851d5EFf43D12404d33E8
  poetry run smartwhale-api activity --type sell --severity HIGH
  poetry run smartwhale-api signals --token ETH
  poetry run smartwhale-api prices bitcoin ethereum
  poetry run smartwhale-api cron sync-whales --secret $CRON_SECRET
  poetry run smartwhale-api stream bitcoin ethereum --messages 5
"""
import argparse
import asyncio
import json
import sys

import httpx


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _data(response: httpx.Response) -> object:
    """Unwrap the {success, data} envelope."""
    response.raise_for_status()
    body = response.json()
    if isinstance(body, dict) and body.get("mock"):
        print("(mock data: upstream API unavailable)", file=sys.stderr)
    return body.get("data", body) if isinstance(body, dict) else body


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    print_json(_data(client.get("/")))
    return 0


def cmd_whales_overview(client: httpx.Client, _: argparse.Namespace) -> int:
    data = _data(client.get("/api/whales"))
    print(f"{data['whale_count']} whales, {data['total_eth']:,.0f} ETH", file=sys.stderr)
    print_json(data)
    return 0


def cmd_whales_top(client: httpx.Client, args: argparse.Namespace) -> int:
    data = _data(client.get("/api/whales/top", params={"limit": args.limit}))
    for whale in data["whales"]:
        print(f"{whale['rank']:>3}  {whale['balance']:>14,.2f} ETH  {whale['label']}")
    return 0


def cmd_whales_detail(client: httpx.Client, args: argparse.Namespace) -> int:
    data = _data(client.get(f"/api/whales/{args.address}", params={"period": args.period}))
    print_json(data)
    return 0


def cmd_whales_transactions(client: httpx.Client, args: argparse.Namespace) -> int:
    data = _data(client.get(f"/api/whales/{args.address}/transactions"))
    print(f"Found {len(data)} transactions for {args.address}")
    print_json(data[: args.head] if args.head else data)
    return 0


def cmd_activity(client: httpx.Client, args: argparse.Namespace) -> int:
    params = {"type": args.type, "severity": args.severity, "limit": args.limit}
    data = _data(client.get("/api/whales/activity", params=params))
    print_json(data["stats"])
    for a in data["activities"]:
        print(f"{a['timestamp']}  {a['tx_type']:<8} {a['severity']:<6} "
              f"{a['amount']:>16,.2f} {a['token_symbol']:<6} {a['whale_label']}")
    return 0


def cmd_signals(client: httpx.Client, args: argparse.Namespace) -> int:
    params: dict[str, object] = {"limit": args.limit, "whales": not args.no_whales}
    if args.token:
        params["token"] = args.token
    if args.type:
        params["type"] = args.type
    data = _data(client.get("/api/signals", params=params))
    print_json(data["stats"])
    for s in data["signals"]:
        print(f"{s['token']:<6} {s['signal_type']:<12} {s['confidence']:>3}%  "
              f"entry {s['entry_price']:<12g} target {s['target_price']:<12g} stop {s['stop_loss']:g}")
    return 0


def cmd_prices(client: httpx.Client, args: argparse.Namespace) -> int:
    data = _data(client.get("/api/prices", params={"tokens": ",".join(args.tokens)}))
    print_json(data)
    return 0


def cmd_analytics(client: httpx.Client, args: argparse.Namespace) -> int:
    print_json(_data(client.get("/api/analytics/stats", params={"period": args.period})))
    return 0


def cmd_cron(client: httpx.Client, args: argparse.Namespace) -> int:
    headers = {"Authorization": f"Bearer {args.secret}"} if args.secret else {}
    print_json(_data(client.post(f"/api/cron/{args.job}", headers=headers)))
    return 0


def cmd_stream(args: argparse.Namespace) -> int:
    """Run CoinGeckoProvider.stream() directly and print quotes (no server required)."""
    from smartwhale.providers import CoinGeckoProvider

    count = 0

    async def run() -> None:
        nonlocal count
        stop_event = asyncio.Event()
        async with CoinGeckoProvider(poll_interval=args.interval) as provider:
            print(
                f"Streaming {args.coin_ids} (duration={args.duration}s, "
                f"max_messages={args.messages or 'unlimited'})",
                file=sys.stderr,
            )
            async for quote in provider.stream(args.coin_ids, stop_event=stop_event):
                count += 1
                print_json(quote.model_dump(mode="json"))
                if args.messages and count >= args.messages:
                    stop_event.set()
                    return

    async def run_with_timeout() -> None:
        if args.duration and args.duration > 0:
            try:
                await asyncio.wait_for(run(), timeout=args.duration)
            except asyncio.TimeoutError:
                print(f"Stopped after {args.duration}s ({count} messages)", file=sys.stderr)
        else:
            await run()

    try:
        asyncio.run(run_with_timeout())
    except KeyboardInterrupt:
        print(f"\nStopped by user ({count} messages)", file=sys.stderr)
        return 130
    except httpx.HTTPError as e:
        print(f"Stream error: {e}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Call SmartWhale API routes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--base-url", default="http://localhost:8000",
                        help="API base URL (default: http://localhost:8000)")
    parser.add_argument("--timeout", type=float, default=30.0,
                        help="Request timeout in seconds (default: 30)")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET / health check")

    whales = subparsers.add_parser("whales", help="Whale routes (/api/whales)")
    whales_sub = whales.add_subparsers(dest="whales_cmd", required=True)
    whales_sub.add_parser("overview", help="GET /api/whales")
    p = whales_sub.add_parser("top", help="GET /api/whales/top")
    p.add_argument("--limit", type=int, default=20, help="Max whales (default: 20)")
    p = whales_sub.add_parser("detail", help="GET /api/whales/{address}")
    p.add_argument("address", help="Wallet address (0x...)")
    p.add_argument("--period", type=int, default=30, help="Days of balance history (default: 30)")
    p = whales_sub.add_parser("transactions", help="GET /api/whales/{address}/transactions")
    p.add_argument("address", help="Wallet address (0x...)")
    p.add_argument("--head", type=int, default=0, help="Show only first N (0 = all)")

    p = subparsers.add_parser("activity", help="GET /api/whales/activity")
    p.add_argument("--type", choices=["all", "buy", "sell", "transfer"], default="all")
    p.add_argument("--severity", choices=["all", "HIGH", "MEDIUM", "LOW"], default="all")
    p.add_argument("--limit", type=int, default=20)

    p = subparsers.add_parser("signals", help="GET /api/signals")
    p.add_argument("--token", default=None, help="Ticker filter (e.g. ETH)")
    p.add_argument("--type", choices=["STRONG_BUY", "BUY", "HOLD", "SELL", "STRONG_SELL"], default=None)
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--no-whales", action="store_true", help="Technical scoring only")

    p = subparsers.add_parser("prices", help="GET /api/prices")
    p.add_argument("tokens", nargs="+", help="CoinGecko ids (e.g. bitcoin ethereum)")

    p = subparsers.add_parser("analytics", help="GET /api/analytics/stats")
    p.add_argument("--period", choices=["24h", "7d", "30d"], default="24h")

    p = subparsers.add_parser("cron", help="POST /api/cron/{job}")
    p.add_argument("job", choices=["sync-whales", "check-alerts"])
    p.add_argument("--secret", default=None, help="CRON_SECRET sent as Bearer token")

    p = subparsers.add_parser("stream", help="CoinGecko polling stream (no server required)")
    p.add_argument("coin_ids", nargs="+", help="CoinGecko ids (e.g. bitcoin ethereum)")
    p.add_argument("--interval", type=float, default=10.0, help="Poll interval seconds (default: 10)")
    p.add_argument("--duration", type=float, default=None, metavar="SECS",
                   help="Stop after SECS seconds (default: run until Ctrl+C)")
    p.add_argument("--messages", type=int, default=None, metavar="N",
                   help="Stop after N messages (default: no limit)")
    return parser


HANDLERS = {
    "health": cmd_health,
    "whales": {
        "overview": cmd_whales_overview,
        "top": cmd_whales_top,
        "detail": cmd_whales_detail,
        "transactions": cmd_whales_transactions,
    },
    "activity": cmd_activity,
    "signals": cmd_signals,
    "prices": cmd_prices,
    "analytics": cmd_analytics,
    "cron": cmd_cron,
}


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    if args.command == "stream":
        return cmd_stream(args)

    handler = HANDLERS[args.command]
    if isinstance(handler, dict):
        handler = handler[args.whales_cmd]

    try:
        with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=args.timeout) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
