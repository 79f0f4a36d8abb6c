import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.pymongo import PyMongoIntegration
from sentry_sdk.integrations.redis import RedisIntegration

from studylib.core.exceptions import AppError

# Transactions for these paths are never sent
UNTRACED_PATHS = ("/health", "/scalar")
FILTERED_HEADERS = {"authorization", "cookie", "set-cookie"}


def init_sentry(
    dsn: str,
    environment: str = "prod",
    release: str | None = None,
    traces_sample_rate: float = 0.2,
    send_default_pii: bool = False,
):
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        send_default_pii=send_default_pii,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(),
            PyMongoIntegration(),
            RedisIntegration(),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        before_send=before_send,
        before_send_transaction=before_send_transaction,
    )


def before_send(event, hint):
    """Drop expected client errors and tag the rest with the namespace error code"""
    exc = (hint.get("exc_info") or (None, None, None))[1]
    if isinstance(exc, AppError):
        if exc.status_code < 500:
            return None
        event.setdefault("tags", {})["error_code"] = exc.code

    headers = (event.get("request") or {}).get("headers") or {}
    for name in list(headers):
        if name.lower() in FILTERED_HEADERS:
            headers[name] = "[Filtered]"
    return event


def before_send_transaction(event, hint):
    if str(event.get("transaction", "")).startswith(UNTRACED_PATHS):
        return None
    return event
