# src/main.py — v2
"""CLI entry point — inspect and repair per-network manifests.

Usage:
    fetchdeploy show --rpc-url <url>
    fetchdeploy forget --rpc-url <url> (--impl-version <v> | --admin) [--tx-hash <h>]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from fetchdeploy.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="fetchdeploy",
        description=f"fetchdeploy v{__version__} — deployment manifest tool",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- show ---
    p_show = subparsers.add_parser(
        "show", help="Print the manifest of a network",
    )
    p_show.add_argument("--rpc-url", required=True, help="JSON-RPC endpoint")
    p_show.set_defaults(func=_cmd_show)

    # --- forget ---
    p_forget = subparsers.add_parser(
        "forget", help="Remove a deployment record from the manifest",
    )
    p_forget.add_argument("--rpc-url", required=True, help="JSON-RPC endpoint")
    slot = p_forget.add_mutually_exclusive_group(required=True)
    slot.add_argument(
        "--impl-version", dest="impl_version", default=None,
        help="Implementation version whose record is removed",
    )
    slot.add_argument(
        "--admin", action="store_true",
        help="Remove the admin record",
    )
    p_forget.add_argument(
        "--tx-hash", default=None,
        help="Only remove the record if it was created by this transaction",
    )
    p_forget.set_defaults(func=_cmd_forget)

    return parser


async def _cmd_show(args: argparse.Namespace) -> int:
    """Print the network's manifest document as JSON."""
    from fetchdeploy.config.settings import Settings
    from fetchdeploy.manifest.manifest_factory import create_manifest_store
    from fetchdeploy.network.jsonrpc_provider import JsonRpcProvider

    settings = Settings()
    provider = JsonRpcProvider(args.rpc_url, timeout_s=settings.rpc_timeout_s)
    store = await create_manifest_store(provider, settings)
    try:
        data = await store.read()
    finally:
        store.close()
    print(data.model_dump_json(indent=2, exclude_none=True))
    return 0


async def _cmd_forget(args: argparse.Namespace) -> int:
    """Clear one manifest slot under the exclusive session."""
    from fetchdeploy.config.settings import Settings
    from fetchdeploy.core.version import Version
    from fetchdeploy.deployment.coordinator import admin_lens, impl_lens
    from fetchdeploy.manifest.manifest_factory import create_manifest_store
    from fetchdeploy.network.jsonrpc_provider import JsonRpcProvider

    settings = Settings()
    provider = JsonRpcProvider(args.rpc_url, timeout_s=settings.rpc_timeout_s)
    lens = admin_lens() if args.admin else impl_lens(Version.parse(args.impl_version))
    store = await create_manifest_store(provider, settings)

    async def clear() -> bool:
        data = await store.read()
        slot = lens(data)
        stored = slot.get()
        if stored is None:
            return False
        if args.tx_hash is not None and stored.tx_hash != args.tx_hash:
            logger.warning(
                "Record at %s was created by %s, not %s; leaving it",
                stored.address, stored.tx_hash, args.tx_hash,
            )
            return False
        slot.set(None)
        await store.write(data)
        return True

    try:
        removed = await store.locked_run(clear)
    finally:
        store.close()
    print("Removed" if removed else "Nothing removed")
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from fetchdeploy.config.settings import Settings
    from fetchdeploy.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
