# proofmind/__main__.py
"""
ProofMind command line.

    python -m proofmind config
    python -m proofmind stats [--category EDUCATION]
    python -m proofmind list erd1...
    python -m proofmind show erd1... CERT-2024-001
    python -m proofmind explorer tx <hash> | account <erd1...>
    python -m proofmind demo

Settings come from the environment (PROOFMIND_*) or .env. Output is JSON.
``demo`` runs a create/read cycle against an in-memory chain.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError as SettingsError

from .adapters import Ed25519Signer
from .config import Settings
from .context import AppContext, create_context, demo_bridges
from .errors import ProofMindError
from .models import CreateCertificateRequest
from .transport import MockNetworkProvider
from .wire import pubkey_to_address


logger = logging.getLogger(__name__)

# smart-contract addresses carry 8 zero bytes and the VM type (0x0500)
DEMO_CONTRACT = pubkey_to_address(bytes(8) + b"\x05\x00" + bytes(22))


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


async def _with_context(settings: Settings, handler, args: argparse.Namespace) -> int:
    ctx = create_context(settings)
    try:
        return await handler(ctx, args)
    finally:
        await ctx.aclose()


async def _config(ctx: AppContext, args: argparse.Namespace) -> int:
    payload = ctx.config.to_dict()
    payload["network"] = ctx.settings.network
    _print(payload)
    return 0


async def _stats(ctx: AppContext, args: argparse.Namespace) -> int:
    payload = {"totalCertificates": await ctx.gateway.get_total_certificates()}
    if args.category:
        payload["category"] = args.category
        payload["categoryCount"] = await ctx.gateway.get_category_stats(args.category)
    _print(payload)
    return 0


async def _list(ctx: AppContext, args: argparse.Namespace) -> int:
    certs = await ctx.gateway.get_user_certificates(args.address)
    _print([c.to_dict() for c in certs])
    return 0


async def _show(ctx: AppContext, args: argparse.Namespace) -> int:
    cert = await ctx.gateway.get_certificate(args.address, args.proof_id)
    if cert is None:
        print(f"Certificate {args.proof_id} not found", file=sys.stderr)
        return 1
    payload = cert.to_dict()
    payload["ai_analysis"] = await ctx.gateway.get_ai_analysis(args.address, args.proof_id)
    _print(payload)
    return 0


async def _explorer(ctx: AppContext, args: argparse.Namespace) -> int:
    if args.kind == "tx":
        url = ctx.gateway.explorer_transaction_url(args.value)
    else:
        url = ctx.gateway.explorer_account_url(args.value)
    _print({"url": url})
    return 0


async def _demo(settings: Settings) -> int:
    signer = Ed25519Signer()
    settings = settings.model_copy(update={"contract_address": DEMO_CONTRACT, "tx_poll_interval": 0.0})
    network = MockNetworkProvider(DEMO_CONTRACT, execute_on_poll=True)
    network.fund(signer.address, 10**18)

    ctx = create_context(settings, network=network, bridges=demo_bridges(signer))
    try:
        wallet = await ctx.session.connect("extension")
        tx_hash = await ctx.store.create(CreateCertificateRequest(
            proof_text="Completed Advanced Blockchain Development Course",
            proof_id="CERT-2024-001",
            category="EDUCATION",
            ai_tags=["education", "blockchain"],
        ))
        _print({
            "wallet": wallet.to_record(),
            "txHash": tx_hash,
            "explorer": ctx.gateway.explorer_transaction_url(tx_hash),
            "certificates": [c.to_dict() for c in ctx.store.certificates],
            "dashboard": ctx.store.dashboard_stats().to_dict(),
        })
        await ctx.session.disconnect()
    finally:
        await ctx.aclose()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="proofmind", description="ProofMind certificate access")
    subparsers = parser.add_subparsers(dest="command")

    config = subparsers.add_parser("config", help="Show the resolved network configuration")
    config.set_defaults(handler=_config)

    stats = subparsers.add_parser("stats", help="Global certificate counts")
    stats.add_argument("--category", help="Also count one category (e.g. EDUCATION)")
    stats.set_defaults(handler=_stats)

    list_ = subparsers.add_parser("list", help="Certificates owned by an address")
    list_.add_argument("address", help="Owner address (erd1...)")
    list_.set_defaults(handler=_list)

    show = subparsers.add_parser("show", help="One certificate")
    show.add_argument("address", help="Owner address (erd1...)")
    show.add_argument("proof_id", help="Proof ID")
    show.set_defaults(handler=_show)

    explorer = subparsers.add_parser("explorer", help="Explorer link")
    explorer.add_argument("kind", choices=["tx", "account"])
    explorer.add_argument("value", help="Transaction hash or address")
    explorer.set_defaults(handler=_explorer)

    demo = subparsers.add_parser("demo", help="Create and read a certificate on an in-memory chain")
    demo.set_defaults(handler=None)

    return parser


def main(argv: Any = None) -> int:
    """Program entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        settings = Settings()
    except SettingsError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "demo":
            return asyncio.run(_demo(settings))
        return asyncio.run(_with_context(settings, args.handler, args))
    except ProofMindError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
