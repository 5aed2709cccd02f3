"""Resend email REST client."""

import json
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from infrastructure.configuration import ResendSettings


def send_email(settings: "ResendSettings", to, subject, text, timeout=10):
    """Send a plain text email through the Resend API.

    Parameters:
    settings: Resend settings holding the API key and sender
    to: Recipient email address
    subject: Subject line
    text: Plain text body
    timeout: HTTP timeout in seconds

    Returns the raw requests.Response. A successful send answers with
    HTTP 200 and a JSON document holding the email `id`.
    """
    payload = {
        "from": settings.RESEND_FROM_EMAIL,
        "to": [to],
        "subject": subject,
        "text": text,
    }
    headers = {
        "Authorization": "Bearer {}".format(settings.RESEND_API_KEY),
        "Content-Type": "application/json",
    }
    url = settings.RESEND_API_URL.rstrip("/") + "/emails"
    return requests.post(url, data=json.dumps(payload), headers=headers, timeout=timeout)
