"""Alerting module for entry notifications (email + SMS)."""

from entry_alert.alerting.email import send_email
from entry_alert.alerting.notifier import build_entry_alert, channel_for, send_notification
from entry_alert.alerting.sms import send_sms

__all__ = ["send_email", "send_sms", "send_notification", "build_entry_alert", "channel_for"]
