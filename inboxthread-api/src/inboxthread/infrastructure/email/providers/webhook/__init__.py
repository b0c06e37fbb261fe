from inboxthread.infrastructure.email.providers.webhook.mapper import parse_date, parse_email_from_webhook

__all__ = ["parse_date", "parse_email_from_webhook"]
