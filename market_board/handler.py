"""Lambda handler serving the Market Board page."""

import json
import os
from datetime import UTC, datetime
from typing import Any

from .config import Config
from .dashboard import build_snapshot, render_dashboard
from .feed import NewsFeedFetcher
from .logging_config import create_execution_logger, setup_structured_logging
from .market import MarketDataClient, MarketDataError

setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

# Reused across warm invocations so revalidation windows apply
_market_client: MarketDataClient | None = None


def get_market_client(config: Config, execution_id: str) -> MarketDataClient:
    """Return the shared market client, creating it on first use."""
    global _market_client
    if _market_client is None:
        _market_client = MarketDataClient(
            config.get_market_config(), execution_id=execution_id
        )
    return _market_client


def dashboard_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Lambda handler that fetches market data and returns the rendered page.

    Args:
        event: Lambda event data
        context: Lambda context object

    Returns:
        Response dictionary with status, headers and body
    """
    execution_id = f"lambda_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("handler", execution_id)

    main_logger.log_execution_start(
        lambda_request_id=getattr(context, "aws_request_id", "unknown"),
        lambda_function_name=getattr(context, "function_name", "unknown"),
    )

    try:
        config = Config()
        client = get_market_client(config, execution_id)
        fetcher = NewsFeedFetcher(config.get_news_config(), execution_id=execution_id)
        dashboard_config = config.get_dashboard_config()

        snapshot = build_snapshot(client, fetcher, dashboard_config, execution_id)
        html = render_dashboard(snapshot, dashboard_config)

        main_logger.log_execution_end(
            success=True, coins=len(snapshot.coins), news_items=len(snapshot.news)
        )
        return {
            "statusCode": 200,
            "headers": {"Content-Type": "text/html; charset=utf-8"},
            "body": html,
        }

    except MarketDataError as e:
        error_msg = f"Market data unavailable: {e}"
        main_logger.error(error_msg, error=str(e))
        main_logger.log_execution_end(success=False, error=error_msg)
        return _error_response(502, error_msg, execution_id)

    except Exception as e:
        error_msg = f"Critical error in dashboard handler: {e}"
        main_logger.error(error_msg, error=str(e))
        main_logger.log_execution_end(success=False, error=error_msg)
        return _error_response(500, error_msg, execution_id)


def _error_response(status: int, error_msg: str, execution_id: str) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "message": "Market Board rendering failed",
                "execution_id": execution_id,
                "error": error_msg,
            }
        ),
    }
