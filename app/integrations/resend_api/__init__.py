"""Resend module for sending notification emails."""

from .client import send_email
