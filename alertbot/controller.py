import logging
import time

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .constants import DEFAULT_TEST_MESSAGE, MAX_BODY_BYTES
from .errors import NotReadyError, ValidationError, classify_error
from .formatters import translate_payload
from .schemas import parse_alert_request, parse_test_request
from .services import add_severity_reactions, resolve_channel
from .utils import utc_now_iso

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class BotContext:
    """Estado do processo compartilhado pelos handlers: o client do Discord e o início do uptime."""

    def __init__(self, client, started_at=None):
        self.client = client
        self.started_at = time.monotonic() if started_at is None else started_at

    def uptime(self) -> float:
        return time.monotonic() - self.started_at


def create_app(client, max_body_bytes=MAX_BODY_BYTES):
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = max_body_bytes
    CORS(app)

    ctx = BotContext(client)
    app.extensions['alertbot'] = ctx

    @app.after_request
    def security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.errorhandler(HTTPException)
    def http_error(exc):
        if exc.code == 413:
            return jsonify({'error': 'Payload too large'}), 413
        return jsonify({'error': exc.name}), exc.code

    @app.errorhandler(Exception)
    def unhandled_error(exc):
        logger.exception("Erro não tratado em %s %s", request.method, request.path)
        return jsonify({'error': 'Internal server error', 'details': str(exc)}), 500

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'healthy',
            'bot_status': 'online' if ctx.client.is_ready() else 'offline',
            'uptime': ctx.uptime(),
            'timestamp': utc_now_iso(),
        }), 200

    @app.route('/api/info', methods=['GET'])
    def info():
        client = ctx.client
        if not client.is_ready():
            return jsonify({'error': 'Bot not ready'}), 503
        return jsonify({
            'bot_id': client.user.id,
            'bot_username': client.user.username,
            'bot_tag': client.user.tag,
            'guild_count': client.guild_count,
            'online': True,
            'uptime_seconds': int(ctx.uptime()),
        }), 200

    @app.route('/api/alerts', methods=['POST'])
    def alerts():
        alert, error = parse_alert_request(request.get_json(silent=True))
        if error:
            return jsonify({'error': error}), 400

        client = ctx.client
        if not client.is_ready():
            body, status = NotReadyError().to_response()
            return jsonify(body), status

        logger.debug("Alerta recebido: type=%s channel=%s source=%s", alert.message_type, alert.channel_id, alert.source)

        # Etapa 1: entrega da mensagem
        try:
            channel = resolve_channel(client, alert.channel_id)
            options = translate_payload(alert.payload)
            sent = client.send_message(channel, options)
        except Exception as exc:
            body, status = classify_error(exc)
            return jsonify(body), status

        # Etapa 2: reações (não afetam o resultado da entrega)
        added, reaction_errors = add_severity_reactions(client, sent, alert.message_type)

        if alert.source:
            logger.info("Alerta enviado: %s para o canal %s (origem: %s)", alert.message_type, alert.channel_id, alert.source)
        else:
            logger.info("Alerta enviado: %s para o canal %s", alert.message_type, alert.channel_id)

        result = {
            'success': True,
            'message_id': sent.id,
            'channel_id': alert.channel_id,
            'timestamp': utc_now_iso(),
            'reactions': added,
        }
        if alert.message_type is not None:
            result['message_type'] = alert.message_type
        if reaction_errors:
            result['reaction_errors'] = reaction_errors
        return jsonify(result), 200

    @app.route('/api/test', methods=['POST'])
    def test_message():
        data = request.get_json(silent=True)
        try:
            ping, error = parse_test_request(data)
            if error:
                raise ValidationError(error)
            channel = resolve_channel(ctx.client, ping.channel_id)
            sent = ctx.client.send_message(channel, {'content': ping.message or DEFAULT_TEST_MESSAGE})
        except Exception as exc:
            logger.error("Falha na mensagem de teste: %s", exc)
            return jsonify({'error': str(exc)}), 500

        return jsonify({
            'success': True,
            'message_id': sent.id,
            'test': True,
        }), 200

    return app
