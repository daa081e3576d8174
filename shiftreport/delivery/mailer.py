"""SMTP delivery of the rendered shift report."""

from __future__ import annotations

import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Callable

from config.settings import MailSettings
from observability.logging_config import get_logger
from shiftreport.common.exceptions import ConfigurationError, DeliveryError
from shiftreport.infra.safe_logging import mask_email
from shiftreport.rendering.orchestrator import RenderedArtifact

logger = get_logger(__name__)

SUBJECT = "Parte de Jefatura"
BODY = "Adjuntamos el parte de jefatura en PDF."

SmtpFactory = Callable[[MailSettings], smtplib.SMTP]


@dataclass(frozen=True)
class DeliveryReceipt:
    message_id: str
    accepted: tuple[str, ...]
    rejected: tuple[str, ...] = ()


def ensure_mail_configured(settings: MailSettings) -> None:
    """Raise ``ConfigurationError`` before any network I/O if a setting is missing."""
    missing = settings.missing_fields()
    if missing:
        raise ConfigurationError("Mail transport is not configured", missing=missing)


def build_message(artifact: RenderedArtifact, recipient: str, sender: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = SUBJECT
    message["From"] = sender
    message["To"] = recipient
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] or None)
    message.set_content(BODY)

    maintype, _, subtype = artifact.content_type.partition("/")
    message.add_attachment(
        artifact.content,
        maintype=maintype,
        subtype=subtype,
        filename=artifact.filename,
    )
    return message


def open_smtp_transport(settings: MailSettings) -> smtplib.SMTP:
    """Implicit TLS on port 465, plain connection (upgraded later if offered) otherwise."""
    if settings.implicit_tls:
        return smtplib.SMTP_SSL(
            settings.host,
            settings.port,
            timeout=settings.timeout_s,
            context=ssl.create_default_context(),
        )
    return smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout_s)


def _decode(raw: bytes | str) -> str:
    return raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)


def _refusal_summary(refused: dict) -> str:
    return "; ".join(f"{code} {_decode(reply)}" for code, reply in refused.values())


def send_report(
    artifact: RenderedArtifact,
    recipient: str,
    settings: MailSettings,
    *,
    smtp_factory: SmtpFactory = open_smtp_transport,
) -> DeliveryReceipt:
    """Send ``artifact`` to ``recipient``. One attempt; failures raise ``DeliveryError``."""
    ensure_mail_configured(settings)
    message = build_message(artifact, recipient, settings.sender)

    try:
        with smtp_factory(settings) as server:
            if not settings.implicit_tls:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
            server.login(settings.user, settings.password)
            refused = server.send_message(message)
    except smtplib.SMTPRecipientsRefused as exc:
        raise DeliveryError(
            "All recipients were refused",
            smtp_response=_refusal_summary(exc.recipients),
        ) from exc
    except smtplib.SMTPResponseException as exc:
        raise DeliveryError(
            f"SMTP server rejected the message ({exc.smtp_code})",
            smtp_code=exc.smtp_code,
            smtp_response=_decode(exc.smtp_error),
        ) from exc
    except (smtplib.SMTPException, OSError) as exc:
        raise DeliveryError(f"SMTP transport failed: {type(exc).__name__}") from exc

    receipt = DeliveryReceipt(
        message_id=message["Message-ID"],
        accepted=tuple(addr for addr in [recipient] if addr not in refused),
        rejected=tuple(refused),
    )
    if not receipt.accepted:
        raise DeliveryError("All recipients were refused", smtp_response=_refusal_summary(refused))
    logger.info(
        "Shift report mail sent",
        extra={
            "message_id": receipt.message_id,
            "recipient": mask_email(recipient),
            "accepted": len(receipt.accepted),
            "rejected": len(receipt.rejected),
            "attachment_bytes": artifact.size,
        },
    )
    return receipt


__all__ = [
    "DeliveryReceipt",
    "build_message",
    "ensure_mail_configured",
    "open_smtp_transport",
    "send_report",
]
