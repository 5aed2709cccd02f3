"""Twilio Messages REST client."""

import re
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from infrastructure.configuration import TwilioSettings

_NON_DIGITS = re.compile(r"\D")


def format_phone_number(phone_number):
    """Format a phone number in E.164.

    Formatting characters are removed. Ten-digit numbers that do not start
    with a country code are assumed to be North American.

    Examples:
        format_phone_number("(555) 123-4567") -> "+15551234567"
        format_phone_number("+44 20 7946 0958") -> "+442079460958"
    """
    cleaned = _NON_DIGITS.sub("", phone_number)
    if len(cleaned) == 10 and not cleaned.startswith("1"):
        cleaned = "1" + cleaned
    return "+" + cleaned


def messages_url(settings: "TwilioSettings"):
    """Messages resource URL for the configured account"""
    return "{}/Accounts/{}/Messages.json".format(
        settings.TWILIO_API_URL.rstrip("/"), settings.TWILIO_ACCOUNT_SID
    )


def send_message(settings: "TwilioSettings", to, from_, body, timeout=10):
    """Create a message through the Twilio Messages API.

    Parameters:
    settings: Twilio settings holding the account credentials
    to: Destination address ("+1555..." or "whatsapp:+1555...")
    from_: Sender address in the same format as `to`
    body: Message text
    timeout: HTTP timeout in seconds

    Returns the raw requests.Response. A created message answers with
    HTTP 201 and a JSON document holding its `sid`.
    """
    return requests.post(
        messages_url(settings),
        data={"To": to, "From": from_, "Body": body},
        auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
        timeout=timeout,
    )
