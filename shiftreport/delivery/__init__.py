"""Outbound delivery of rendered reports."""

from __future__ import annotations

from .mailer import DeliveryReceipt, ensure_mail_configured, send_report

__all__ = ["DeliveryReceipt", "ensure_mail_configured", "send_report"]
