import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

from loguru import logger


MODERATOR_EMAILS = "moderators@example.com"
DEFAULT_FROM = "noreply@reddat.com"
NEW_LINK_SUBJECT = "New link submitted"


@dataclass
class MailConfig:
    # provider: fake | smtp
    provider: str = "fake"
    sender: str = DEFAULT_FROM
    moderators: str = MODERATOR_EMAILS
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    starttls: bool = False


def get_default_config() -> MailConfig:
    provider = os.getenv("REDDAT_MAIL_PROVIDER", "fake").lower()
    if provider not in {"fake", "smtp"}:
        provider = "fake"
    try:
        port = int(os.getenv("REDDAT_SMTP_PORT", "25"))
    except ValueError:
        port = 25
    return MailConfig(
        provider=provider,
        sender=os.getenv("REDDAT_MAIL_FROM", DEFAULT_FROM),
        moderators=os.getenv("REDDAT_MODERATOR_EMAILS", MODERATOR_EMAILS),
        smtp_host=os.getenv("REDDAT_SMTP_HOST", "localhost"),
        smtp_port=port,
        smtp_user=os.getenv("REDDAT_SMTP_USER"),
        smtp_password=os.getenv("REDDAT_SMTP_PASSWORD"),
        starttls=os.getenv("REDDAT_SMTP_STARTTLS", "0").lower() in {"1", "true", "yes"},
    )


def build_new_link_message(link, config: MailConfig) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = NEW_LINK_SUBJECT
    msg["From"] = config.sender
    msg["To"] = config.moderators
    msg.set_content(
        "A new link has been posted.\n\n"
        f"Title: {link.title}\n"
        f"URL: {link.url}\n"
    )
    return msg


class Notifier(Protocol):
    def new_link(self, link) -> None: ...


class LogNotifier:
    """Logs moderator notifications instead of delivering them."""

    def __init__(self, config: Optional[MailConfig] = None):
        self.config = config or MailConfig()

    def new_link(self, link) -> None:
        msg = build_new_link_message(link, self.config)
        logger.info("[fake mail] to={} subject={!r} link={}", msg["To"], msg["Subject"], link.id)


class SmtpNotifier:
    def __init__(self, config: MailConfig):
        self.config = config

    def new_link(self, link) -> None:
        cfg = self.config
        msg = build_new_link_message(link, cfg)
        try:
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=10) as server:
                if cfg.starttls:
                    server.starttls()
                if cfg.smtp_user and cfg.smtp_password:
                    server.login(cfg.smtp_user, cfg.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to notify moderators about link {}: {}", link.id, e)
            return
        logger.info("Moderators notified about link {}", link.id)


def make_notifier(config: Optional[MailConfig] = None) -> Notifier:
    cfg = config or get_default_config()
    if cfg.provider == "smtp":
        return SmtpNotifier(cfg)
    return LogNotifier(cfg)


_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = make_notifier()
    return _notifier
