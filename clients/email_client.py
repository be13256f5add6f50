"""
Client for the HTTP email gateway that delivers customer notifications.

Each request is a compact JSON document posted with an API key and an
HMAC-SHA256 signature of its exact bytes. The gateway answers with
``{"success": bool, "message": str}``; it owns SMTP delivery.
"""

import hashlib
import hmac
import json
import logging

import requests

logger = logging.getLogger(__name__)


class EmailGatewayError(Exception):
    """The gateway could not be reached or refused the message."""


class EmailGatewayClient:
    """Signed JSON requests to the email gateway."""

    SENDERS = ("support", "system")

    def __init__(self, gateway_url: str, api_key: str, hmac_secret: str, timeout: float = 10):
        """
        Raises:
            ValueError: If gateway_url, api_key or hmac_secret is empty
        """
        for name, value in (
            ("gateway_url", gateway_url),
            ("api_key", api_key),
            ("hmac_secret", hmac_secret),
        ):
            if not value:
                raise ValueError(f"Email gateway setting '{name}' must not be empty")

        self.gateway_url = gateway_url
        self._api_key = api_key
        self._secret = hmac_secret.encode("utf-8")
        self.timeout = timeout

    def sign(self, body: str) -> str:
        """Hex HMAC-SHA256 of body as UTF-8."""
        return hmac.new(self._secret, body.encode("utf-8"), hashlib.sha256).hexdigest()

    def _post(self, document: dict) -> None:
        body = json.dumps(document, separators=(",", ":"))
        try:
            reply = requests.post(
                self.gateway_url,
                data=body,
                headers={
                    "Content-Type": "application/json",
                    "X-API-Key": self._api_key,
                    "X-Signature": self.sign(body),
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise EmailGatewayError(f"Connection failed: {e}") from e

        try:
            result = reply.json()
        except ValueError:
            raise EmailGatewayError(f"Invalid response from gateway (HTTP {reply.status_code})")

        if reply.status_code != 200 or not result.get("success"):
            raise EmailGatewayError(
                f"Gateway refused message (HTTP {reply.status_code}): "
                f"{result.get('message', 'no reason given')}"
            )

    def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        sender: str = "support",
        html: bool = True,
    ) -> None:
        """
        Deliver one message.

        Args:
            to: Customer address
            subject: Subject line
            body: HTML, or plain text when html=False
            sender: Gateway sender identity, one of SENDERS

        Raises:
            ValueError: Empty recipient or unknown sender
            EmailGatewayError: Delivery was not accepted
        """
        if not to:
            raise ValueError("Recipient address is required")
        if sender not in self.SENDERS:
            raise ValueError(f"Unknown sender '{sender}'; expected one of {', '.join(self.SENDERS)}")

        self._post({
            "type": "custom",
            "email": to,
            "subject": subject,
            "body": body,
            "content_type": "text/html" if html else "text/plain",
            "sender": sender,
        })
        logger.info("Gateway accepted email to %s (%s)", to, subject)
