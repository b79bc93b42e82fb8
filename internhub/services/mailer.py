"""Outbound email (account credentials) via SMTP, rendered from Jinja2 templates."""
import asyncio
import logging
from pathlib import Path

import yagmail
from jinja2 import Environment, FileSystemLoader, select_autoescape

from internhub.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_template(name: str, **context) -> str:
    return _env.get_template(name).render(app_name=settings.app_name, **context)


def _send_sync(to: str, subject: str, html: str) -> None:
    yag = yagmail.SMTP(
        user={settings.smtp_user: settings.mail_from_name},
        password=settings.smtp_password,
        host=settings.smtp_host,
        port=settings.smtp_port,
        smtp_starttls=True,
        smtp_ssl=False,
    )
    try:
        # yagmail turns newlines into <br>; the template is already HTML
        yag.send(to=to, subject=subject, contents=html.replace("\n", ""))
    finally:
        yag.close()


async def send_email(to: str, subject: str, template: str, **context) -> None:
    if not settings.smtp_user:
        logger.warning(f"SMTP_USER not set; skipping '{subject}' email to {to}")
        return
    html = render_template(template, **context)
    await asyncio.to_thread(_send_sync, to, subject, html)
    logger.info(f"Sent '{subject}' email to {to}")


async def send_credentials_email(
    email: str, full_name: str, password: str, role: str, matric_number: str | None = None
) -> None:
    await send_email(
        email,
        f"Your {settings.app_name} account",
        "user_credentials.html",
        full_name=full_name,
        email=email,
        password=password,
        role=role,
        matric_number=matric_number,
    )
