"""
Handler for IssueCreated events.

Emails the customer a receipt for their submission with a link to the
issue's chat room. Runs after the issue has committed; the event bus logs
any failure here and the submission still succeeds.
"""

import html
import logging
from typing import Callable

from core.config import SupportConfig
from core.events import IssueCreated

logger = logging.getLogger(__name__)


def compose_issue_created_email(issue, message: str, config: SupportConfig) -> tuple[str, str]:
    """
    Subject and HTML body of the receipt for a new issue.

    All customer-supplied text is escaped.
    """
    company = html.escape(issue.company_name)
    title = html.escape(issue.title)
    subject = html.escape(issue.subject)
    body_text = html.escape(message) if message else "<i>(no message)</i>"
    chat_url = html.escape(config.chat_url(issue.id), quote=True)

    body = (
        f"<h1>{company}</h1>"
        "<p>Thank you for contacting us!</p>"
        "<p>We have received your message:</p>"
        f"<p><strong>{subject}</strong></p>"
        f"<blockquote>{body_text}</blockquote>"
        "<p>We have opened a chat room where you can talk directly with our "
        f"support staff about your issue <strong>{title}</strong>.</p>"
        f"<p>To join the chat, <a href=\"{chat_url}\">follow this link</a>.</p>"
        "<p>Kind regards,<br>"
        f"<strong>{company}</strong> customer support</p>"
    )
    return f"New issue: {issue.title}", body


def handle_issue_created(email_client, config: SupportConfig) -> Callable:
    """
    Factory that returns an IssueCreated handler.

    Dependencies are captured at wiring time via closure.

    Args:
        email_client: EmailGatewayClient instance
        config: SupportConfig providing the chat link base URL

    Returns:
        Handler callable that sends the receipt email
    """

    def send_issue_receipt(event: IssueCreated):
        issue = event.issue
        subject, body = compose_issue_created_email(issue, event.message, config)
        email_client.send_email(to=issue.customer_email, subject=subject, body=body)
        logger.info("Issue receipt sent for %s", issue.id)

    return send_issue_receipt
