"""
Passwordless login links. Delivery belongs to the mail provider; this module builds the
link and hands it to the configured sender, which by default only logs it.
"""

import logging
from typing import Callable, Optional
from urllib.parse import urlencode

from app.core.config import settings

logger = logging.getLogger(__name__)

LinkSender = Callable[[str, str], None]


def build_login_link(token: str, invite_code: Optional[str] = None) -> str:
    params = {"token": token}
    if invite_code:
        params["invite"] = invite_code
    return f"{settings.site_url.rstrip('/')}/auth/callback?{urlencode(params)}"


def log_login_link(email: str, link: str) -> None:
    logger.info("Login link for %s: %s", email, link)


_sender: LinkSender = log_login_link


def set_login_link_sender(sender: LinkSender) -> None:
    """Swap the delivery hook (e.g. an SMTP sender, or a capture in tests)."""
    global _sender
    _sender = sender


def send_login_link(email: str, link: str) -> None:
    _sender(email, link)
