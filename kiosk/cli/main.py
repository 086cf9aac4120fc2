"""
Kiosk operator CLI

Runs a single kiosk transaction from the command line, e.g., to register a bidder on behalf of someone at the
front desk, or to verify the kiosk's API configuration.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable

import click

from kiosk.api.errors import KioskError
from kiosk.api.httpx_transport import HttpxTransport
from kiosk.api.transport import Transport
from kiosk.config import KioskConfig
from kiosk.core.async_service import AsyncService
from kiosk.core.logging import configure_logging
from kiosk.domain.session import BidDetails, NewUser
from kiosk.fulfillment.bid_placement import BidPlacement, BidResolution
from kiosk.fulfillment.bidder_details import retrieve_bidder_details
from kiosk.fulfillment.bidder_registration import BidderRegistration
from kiosk.fulfillment.outcome import classify, classify_failure
from kiosk.identity.client import IdentityClient

TransportFactory = Callable[[KioskConfig], Transport]


def _default_transport_factory(config: KioskConfig) -> Transport:
    return HttpxTransport(config.api)


async def _with_transport(
    transport_factory: TransportFactory,
    config: KioskConfig,
    action: Callable[[Transport], Any],
) -> Any:
    transport = transport_factory(config)
    if isinstance(transport, AsyncService):
        await transport.start()
    try:
        return await action(transport)
    finally:
        if isinstance(transport, AsyncService):
            await transport.stop()


def _run_transaction(
    ctx: click.Context, bid_details: BidDetails, placing_bid: bool
) -> BidResolution | None:
    config: KioskConfig = ctx.obj["config"]

    async def perform_actions(transport: Transport) -> BidResolution | None:
        registration = BidderRegistration(
            IdentityClient(transport, bid_details),
            network_retries=config.bidding.network_retries,
        )
        placement = BidPlacement(registration, placing_bid, config.bidding)
        return await placement.perform_actions()

    try:
        return asyncio.run(
            _with_transport(ctx.obj["transport_factory"], config, perform_actions)
        )
    except KioskError as err:
        click.echo(classify_failure(placing_bid, err).value)
        raise click.ClickException(str(err)) from err
    except ValueError as err:
        raise click.UsageError(str(err), ctx) from err


def _echo_result(bid_details: BidDetails, resolution: BidResolution | None):
    if resolution is None:
        click.echo("cancelled")
        return
    click.echo(classify(resolution.placing_bid, resolution).value)
    click.echo(f"bidder_id: {bid_details.bidder_id}")
    click.echo(f"paddle_number: {bid_details.paddle_number}")
    if bid_details.created_new_user:
        click.echo(f"pin: {bid_details.bidder_pin}")


def _user_options(command):
    options = [
        click.option("--auction", "auction_id", required=True, help="Auction ID"),
        click.option("--email", required=True),
        click.option("--password", prompt=True, hide_input=True),
        click.option("--phone", required=True),
        click.option("--post-code", default=""),
        click.option("--name", default=""),
        click.option("--card-token", default=None, help="Stripe token for a card to attach"),
        click.option("--swiped", is_flag=True, help="The card was swiped"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@click.group()
@click.option(
    "--config-file",
    required=True,
    type=click.Path(exists=True, resolve_path=True, readable=True, path_type=Path),
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def kiosk(ctx: click.Context, config_file: Path, log_level: str):
    """
    Auction kiosk bid fulfillment
    """
    configure_logging(logging.getLevelName(log_level.upper()))
    ctx.ensure_object(dict)
    ctx.obj["config"] = KioskConfig.from_config_file(config_file)
    ctx.obj.setdefault("transport_factory", _default_transport_factory)


@kiosk.command()
@click.pass_context
def show_config(ctx: click.Context):
    """
    Displays the kiosk config as JSON - secrets are masked
    """
    click.echo(json.dumps(ctx.obj["config"].to_dict(), indent=3))


@kiosk.command()
@_user_options
@click.pass_context
def register(
    ctx: click.Context,
    auction_id: str,
    email: str,
    password: str,
    phone: str,
    post_code: str,
    name: str,
    card_token: str | None,
    swiped: bool,
):
    """
    Registers a bidder on the auction
    """
    # pylint: disable=too-many-arguments
    bid_details = BidDetails(
        auction_id=auction_id,
        new_user=NewUser(
            email=email,
            password=password,
            phone=phone,
            post_code=post_code,
            name=name,
            credit_card_token=card_token,
            swiped_credit_card=swiped,
        ),
    )
    _echo_result(bid_details, _run_transaction(ctx, bid_details, placing_bid=False))


@kiosk.command()
@_user_options
@click.option("--artwork", "artwork_id", required=True, help="Artwork ID of the lot")
@click.option("--amount-cents", type=click.IntRange(min=1), required=True)
@click.pass_context
def bid(
    ctx: click.Context,
    auction_id: str,
    email: str,
    password: str,
    phone: str,
    post_code: str,
    name: str,
    card_token: str | None,
    swiped: bool,
    artwork_id: str,
    amount_cents: int,
):
    """
    Registers the bidder if necessary, places the bid, and waits for it to be resolved
    """
    # pylint: disable=too-many-arguments
    bid_details = BidDetails(
        auction_id=auction_id,
        new_user=NewUser(
            email=email,
            password=password,
            phone=phone,
            post_code=post_code,
            name=name,
            credit_card_token=card_token,
            swiped_credit_card=swiped,
        ),
        artwork_id=artwork_id,
        bid_amount_cents=amount_cents,
    )
    _echo_result(bid_details, _run_transaction(ctx, bid_details, placing_bid=True))


@kiosk.command()
@click.option("--auction", "auction_id", required=True, help="Auction ID")
@click.argument("identifier")
@click.pass_context
def send_bidder_details(ctx: click.Context, auction_id: str, identifier: str):
    """
    Sends the bidder number and PIN to the email or phone number registered for the auction
    """

    async def send(transport: Transport):
        await retrieve_bidder_details(transport, auction_id, identifier)

    try:
        asyncio.run(
            _with_transport(ctx.obj["transport_factory"], ctx.obj["config"], send)
        )
    except (KioskError, ValueError) as err:
        raise click.ClickException(str(err)) from err
    click.echo("Your details have been sent")


if __name__ == "__main__":
    kiosk()  # pylint: disable=no-value-for-parameter
