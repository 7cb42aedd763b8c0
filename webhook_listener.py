from typing import Optional
from flask import Flask, Response, request, jsonify

from relay_config import RelayConfig, configure_logging
from gateway_response import build_response
from relay_handler import GENERIC_FAULT, WebhookRelay


def create_app(relay: Optional[WebhookRelay] = None) -> Flask:
    app = Flask(__name__)
    state = {"relay": relay}

    def current_relay() -> WebhookRelay:
        if state["relay"] is None:
            config = RelayConfig.from_env()
            configure_logging(config.log_level)
            state["relay"] = WebhookRelay(config)
        return state["relay"]

    @app.route("/webhook", methods=["GET", "POST"])
    def webhook():
        if request.method == "GET":
            return jsonify({
                "status": "alive",
                "message": "Webhook endpoint is running"
            }), 200

        event = {
            "headers": dict(request.headers),
            "body": request.get_data(),
        }

        try:
            relay = current_relay()
        except RuntimeError:
            app.logger.exception("Relay configuration is incomplete")
            result = build_response(500, GENERIC_FAULT)
        else:
            result = relay.handle(event)

        return Response(
            result["body"],
            status=result["statusCode"],
            headers=result["headers"],
        )

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=3000)
