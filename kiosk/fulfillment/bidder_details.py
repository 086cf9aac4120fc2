"""
Bidder details retrieval

Bidders who forgot their bidder number or PIN can have them sent to the email or phone number registered for the
auction. No kiosk session is required.
"""
from kiosk.api.transport import Transport
from kiosk.domain.session import BidDetails
from kiosk.identity.client import IdentityClient


async def retrieve_bidder_details(
    transport: Transport, auction_id: str, identifier: str
):
    """
    :param identifier: email or phone number
    :exception ServerRejection: e.g., the identifier is not registered for the auction
    :exception NetworkFailure: the request could not be sent
    """
    identifier = identifier.strip()
    if not identifier:
        raise ValueError("email or phone number is required")

    client = IdentityClient(transport, BidDetails(auction_id=auction_id))
    await client.send_bidder_details(identifier)
