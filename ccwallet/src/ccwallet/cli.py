"""
Cloud Wallet CLI - Show balances, plan payments and resolve NFT content.
"""

from __future__ import annotations

import asyncio
import sys

import typer
from loguru import logger

from ccwcore.config import Settings, get_settings

app = typer.Typer(
    name="ccw-wallet",
    help="Chia Cloud Wallet tools",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _check_address(address: str | None) -> None:
    from ccwallet.wallet.address import is_valid_address

    if address is not None and not is_valid_address(address):
        logger.error(f"Invalid wallet address: {address}")
        raise typer.Exit(1)


def _create_service(settings: Settings, jwt_token: str, address: str | None):
    from ccwallet.backends.cloud_wallet import CloudWalletBackend
    from ccwallet.wallet.service import WalletService

    backend = CloudWalletBackend(
        api_base_url=settings.api_base_url,
        hydrated_coins_url=settings.hydrated_coins_url,
        jwt_token=jwt_token,
        timeout=settings.api_timeout,
    )
    return WalletService(backend=backend, address=address)


@app.command()
def balance(
    jwt_token: str = typer.Option("", "--jwt", envvar="JWT_TOKEN", help="Cloud wallet JWT"),
    address: str | None = typer.Option(None, "--address", "-a", help="Wallet address"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Display the wallet balance by asset type."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    jwt_token = jwt_token or settings.jwt_token
    if not jwt_token:
        logger.error("JWT required. Use --jwt or the JWT_TOKEN env var")
        raise typer.Exit(1)
    _check_address(address)

    asyncio.run(_show_balance(settings, jwt_token, address))


async def _show_balance(settings: Settings, jwt_token: str, address: str | None) -> None:
    """Show balance implementation."""
    import httpx

    from ccwallet.wallet.address import is_valid_address, to_puzzle_hash
    from ccwallet.wallet.balance import format_cat_amount, format_xch
    from ccwallet.wallet.cat_metadata import CATMetadataRegistry

    wallet = _create_service(settings, jwt_token, address)
    registry = CATMetadataRegistry()

    try:
        try:
            await wallet.sync()
        except httpx.HTTPError as e:
            logger.error(f"Failed to sync wallet: {e}")
            raise typer.Exit(1)

        breakdown = await wallet.get_balance()
        print(f"\nAddress: {wallet.address}")
        if wallet.address and is_valid_address(wallet.address):
            print(f"Puzzle hash: 0x{to_puzzle_hash(wallet.address)}")
        print(f"Spendable XCH: {format_xch(breakdown.xch, show_unit=True)}")
        print(f"Coins: {breakdown.coin_count} total, {breakdown.xch_coin_count} XCH")

        if breakdown.cat_by_asset:
            print("\nCAT tokens:")
            for asset_id, amount in sorted(breakdown.cat_by_asset.items()):
                metadata = registry.get(asset_id)
                denom = metadata.denom if metadata else 1000
                print(
                    f"  {registry.display_name(asset_id):<40} "
                    f"{format_cat_amount(amount, denom):>15}"
                )

        print(f"\nNFTs: {breakdown.nft_coin_count}")

    finally:
        await wallet.close()


@app.command()
def select(
    amount: str = typer.Argument(..., help="Amount to send in XCH"),
    fee_rate: float = typer.Option(1.0, "--fee-rate", "-r", help="Fee in mojos per byte"),
    jwt_token: str = typer.Option("", "--jwt", envvar="JWT_TOKEN", help="Cloud wallet JWT"),
    address: str | None = typer.Option(None, "--address", "-a", help="Wallet address"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Show which coins a payment would spend and the fee it needs."""
    from ccwallet.wallet.balance import xch_to_mojos

    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    jwt_token = jwt_token or settings.jwt_token
    if not jwt_token:
        logger.error("JWT required. Use --jwt or the JWT_TOKEN env var")
        raise typer.Exit(1)
    _check_address(address)

    try:
        mojos = xch_to_mojos(amount)
    except ValueError as e:
        logger.error(f"Invalid amount: {e}")
        raise typer.Exit(1)

    asyncio.run(_show_selection(settings, jwt_token, address, mojos, fee_rate))


async def _show_selection(
    settings: Settings,
    jwt_token: str,
    address: str | None,
    amount: int,
    fee_rate: float,
) -> None:
    """Show coin selection implementation."""
    import httpx

    from ccwallet.wallet.balance import format_xch
    from ccwallet.wallet.models import SelectionFailed
    from ccwallet.wallet.selection import InvalidAmountError

    wallet = _create_service(settings, jwt_token, address)

    try:
        try:
            await wallet.sync()
            plan = await wallet.plan_payment(amount, fee_rate=fee_rate)
        except httpx.HTTPError as e:
            logger.error(f"Failed to sync wallet: {e}")
            raise typer.Exit(1)
        except InvalidAmountError as e:
            logger.error(str(e))
            raise typer.Exit(1)

        if isinstance(plan, SelectionFailed):
            logger.error(
                f"Cannot pay {format_xch(plan.target_amount)} XCH: {plan.reason.value} "
                f"(available {format_xch(plan.available_amount)} XCH)"
            )
            raise typer.Exit(1)

        selection = plan.selection
        print(f"\nAmount: {format_xch(plan.amount, show_unit=True)}")
        print(f"Fee:    {format_xch(plan.fee, decimals=12, show_unit=True)} (~{plan.byte_size} B)")
        print(f"Change: {format_xch(selection.change_amount, decimals=12, show_unit=True)}")
        print(f"Efficiency: {selection.efficiency:.2%}")
        print(f"\nInputs ({selection.input_count}):")
        for coin in selection.selected_coins:
            print(f"  {coin.coin_id}  {format_xch(coin.amount, decimals=12):>20}")

    finally:
        await wallet.close()


@app.command()
def resolve(
    uri: str = typer.Argument(..., help="IPFS or HTTP(S) URI"),
    jwt_token: str = typer.Option("", "--jwt", envvar="JWT_TOKEN", help="Token for auth gateways"),
    metadata: bool = typer.Option(False, "--metadata", "-m", help="Fetch as a metadata document"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Resolve content through the configured IPFS gateways."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    asyncio.run(_resolve(settings, uri, jwt_token or settings.jwt_token or None, metadata))


async def _resolve(settings: Settings, uri: str, jwt_token: str | None, metadata: bool) -> None:
    """Resolve implementation."""
    import json

    from ccwcore.cache import TTLCache
    from ccwcore.gateways import GatewayConfigurationError, GatewayRegistry
    from ccwcore.ipfs import InvalidContentURIError
    from ccwcore.metadata import MetadataCache
    from ccwcore.resolver import ContentResolver, ResolverContext

    try:
        registry = GatewayRegistry(settings.get_gateway_endpoints())
    except GatewayConfigurationError as e:
        logger.error(f"Invalid gateway configuration: {e}")
        raise typer.Exit(1)

    context = ResolverContext(content_cache=TTLCache(settings.metadata_cache_ttl))

    async with ContentResolver(registry, context, timeout=settings.gateway_timeout) as resolver:
        try:
            if metadata:
                cache = MetadataCache(resolver, ttl=settings.metadata_cache_ttl)
                document = await cache.get_or_fetch(uri, auth_token=jwt_token)
                if document is None:
                    logger.error(f"Metadata for {uri} could not be loaded")
                    raise typer.Exit(1)
                print(json.dumps(document, indent=2))
                return

            resolved = await resolver.resolve(uri, auth_token=jwt_token)
        except (InvalidContentURIError, GatewayConfigurationError) as e:
            logger.error(str(e))
            raise typer.Exit(1)

        if resolved.is_placeholder:
            logger.warning("No gateway could serve the content, showing placeholder")
        print(f"Source: {resolved.source}")
        if resolved.handle is not None:
            print(f"Handle: {resolved.url} ({len(resolved.handle.data)} bytes)")
            resolved.handle.release()
        else:
            print(f"URL:    {resolved.url}")
        if resolved.content_type:
            print(f"Type:   {resolved.content_type}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
