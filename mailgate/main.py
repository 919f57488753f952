#!/usr/bin/env python3
"""
main.py

HTTP entry point for the mailing-list gateway.

    GET  /mailing-list?action=add|subscribe&emailAddr=..&listName=..
    POST /invite-request
    POST /member-request
    GET  /health

Run the development server with ``python -m mailgate.main``.
"""

import os
import sys
import logging
from typing import Optional

from flask import Flask, jsonify, redirect, request

from .client import MailjetClient
from .config import GatewayConfig, validate_configuration
from .notifications import SlackNotifier
from .relay import RequesterInfo, relay_form
from .workflow import SubscriptionWorkflow

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def setup_logging(config: GatewayConfig):
    """Configure root logging once for the whole process"""
    handlers = [logging.StreamHandler()]
    if config.log_dir:
        os.makedirs(config.log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(config.log_dir, "gateway.log")))

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )

    # Quiet noisy libs
    logging.getLogger("urllib3").setLevel(logging.INFO)
    logging.getLogger("requests").setLevel(logging.INFO)


def create_app(config: Optional[GatewayConfig] = None, client: Optional[MailjetClient] = None,
               notifier: Optional[SlackNotifier] = None) -> Flask:
    """Build the Flask app; the CRM client and notifier are shared by all requests"""
    config = config or GatewayConfig()
    client = client or MailjetClient(config)
    notifier = notifier or SlackNotifier.from_config(config)
    workflow = SubscriptionWorkflow(config, client, notifier)

    app = Flask(__name__)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/mailing-list", methods=["GET"])
    def mailing_list():
        query_string = request.query_string.decode("utf-8", errors="replace")
        outcome = workflow.handle_query(query_string)
        if outcome.is_redirect:
            return redirect(outcome.location, code=outcome.status)
        return jsonify(outcome.body), outcome.status

    def _relay(kind: str):
        if request.method == "OPTIONS":
            return "", 204, CORS_HEADERS
        form = request.get_json(silent=True)
        requester = RequesterInfo.from_headers(request.headers, request.remote_addr)
        status, body = relay_form(notifier, kind, form, requester)
        return jsonify(body), status, CORS_HEADERS

    @app.route("/invite-request", methods=["POST", "OPTIONS"])
    def invite_request():
        return _relay("invite")

    @app.route("/member-request", methods=["POST", "OPTIONS"])
    def member_request():
        return _relay("member")

    return app


def main():
    """Validate configuration and run the development server"""
    config = GatewayConfig()
    setup_logging(config)

    logger.info("=" * 60)
    logger.info("🎯 MAILING LIST GATEWAY")
    logger.info("=" * 60)
    for key, value in config.get_summary().items():
        logger.info(f"{key}: {value}")

    if validate_configuration(config):
        logger.error("❌ Configuration errors detected. Please fix and try again.")
        sys.exit(1)

    app = create_app(config)
    app.run(host=config.host, port=config.port)


if __name__ == "__main__":
    main()
