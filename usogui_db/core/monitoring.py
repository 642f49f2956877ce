"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of the Usogui DB server, including:
- API endpoint tracing
- Database operation monitoring
- Outbound HTTP calls made by the media URL resolver
- Authentication and moderation audit events
- Error tracking

Every helper degrades to a debug log line when Logfire is disabled or not
configured, so callers never need to guard their calls.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_PROJECT_NAME = os.getenv("LOGFIRE_PROJECT_NAME", "usogui-db")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "usogui-db-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")

# Sampling configuration
LOGFIRE_SAMPLE_RATE = float(os.getenv("LOGFIRE_SAMPLE_RATE", "1.0"))
LOGFIRE_TRACE_SAMPLE_RATE = float(os.getenv("LOGFIRE_TRACE_SAMPLE_RATE", "1.0"))

# Feature flags
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Sets up Logfire with automatic instrumentation for SQLAlchemy database
    operations, HTTPX requests and FastAPI endpoints.

    Args:
        app: FastAPI application instance for FastAPI instrumentation (optional).

    Returns:
        True when Logfire was configured, False when it is disabled or failed.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire
        from logfire import SamplingOptions

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
            sampling=SamplingOptions(
                head=LOGFIRE_SAMPLE_RATE,
                tail=LOGFIRE_TRACE_SAMPLE_RATE,
            ),
        )

        if LOGFIRE_TRACE_SQLALCHEMY:
            try:
                logfire.instrument_sqlalchemy()
                logger.info("Logfire: SQLAlchemy instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument SQLAlchemy: {e}")

        if LOGFIRE_TRACE_HTTPX:
            try:
                logfire.instrument_httpx()
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument HTTPX: {e}")

        if LOGFIRE_TRACE_FASTAPI:
            if app is not None:
                try:
                    logfire.instrument_fastapi(app=app)
                    logger.info("Logfire: FastAPI instrumentation enabled")
                except Exception as e:
                    logger.warning(f"Failed to instrument FastAPI: {e}")
            else:
                logger.debug("FastAPI app instance not provided, skipping FastAPI instrumentation")

        logger.info(
            f"Logfire monitoring initialized: "
            f"project={LOGFIRE_PROJECT_NAME}, "
            f"environment={LOGFIRE_ENVIRONMENT}, "
            f"service={LOGFIRE_SERVICE_NAME}"
        )
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with response metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP response status code
        duration_ms: Request duration in milliseconds
    """
    if not LOGFIRE_ENABLED:
        logger.debug(f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)")
        return
    try:
        import logfire

        logfire.info(
            "API request",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_media_resolution(url: str, platform: str, cached: bool, duration_ms: Optional[float] = None) -> None:
    """
    Log the outcome of a media URL resolution.

    Args:
        url: The URL that was resolved
        platform: Detected platform
        cached: Whether the result came from the resolver cache
        duration_ms: Time spent on the outbound lookup, if any
    """
    if not LOGFIRE_ENABLED:
        logger.debug(f"Media resolved: platform={platform}, cached={cached}, url={url}")
        return
    try:
        import logfire

        logfire.info(
            "Media URL resolved",
            url=url,
            platform=platform,
            cached=cached,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log media resolution to Logfire: {url}")


def log_auth_event(event: str, user_id: Optional[int] = None, username: Optional[str] = None) -> None:
    """
    Log an authentication event (login, refresh, logout, password reset).

    Args:
        event: Event name
        user_id: The user involved, when known
        username: The username involved, when known
    """
    if not LOGFIRE_ENABLED:
        logger.debug(f"Auth event: {event} (user_id={user_id}, username={username})")
        return
    try:
        import logfire

        logfire.info("Auth event", auth_event=event, user_id=user_id, username=username)
    except Exception:
        logger.debug(f"Could not log auth event to Logfire: {event}")


def log_moderation_action(
    action: str, resource: str, resource_id: int, moderator_id: int, reason: Optional[str] = None
) -> None:
    """
    Log a moderation decision on a community submission.

    Args:
        action: approve or reject
        resource: Kind of submission (media, guide, annotation)
        resource_id: Identifier of the submission
        moderator_id: The moderator who acted
        reason: Rejection reason, if any
    """
    logger.info(
        f"Moderation: {action} {resource} {resource_id} by user {moderator_id}",
        extra={
            "action": action,
            "resource": resource,
            "resource_id": resource_id,
            "moderator_id": moderator_id,
            "reason": reason,
        },
    )
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "Moderation action",
            action=action,
            resource=resource,
            resource_id=resource_id,
            moderator_id=moderator_id,
            reason=reason,
        )
    except Exception:
        logger.debug(f"Could not log moderation action to Logfire: {action} {resource} {resource_id}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not LOGFIRE_ENABLED:
        logger.debug(f"{error_type}: {error_message}")
        return
    try:
        import logfire

        logfire.error(
            f"{error_type}: {error_message}",
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
