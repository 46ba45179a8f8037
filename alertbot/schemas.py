from typing import Any, Dict, Optional, Tuple


class AlertRequest:
    def __init__(self, channel_id: str, payload: Dict[str, Any],
                 message_type: Optional[str] = None, source: Optional[str] = None):
        self.channel_id = channel_id
        self.payload = payload
        self.message_type = message_type
        self.source = source


class PingRequest:
    def __init__(self, channel_id: str, message: Optional[str] = None):
        self.channel_id = channel_id
        self.message = message


def _channel_id(data: Dict[str, Any]) -> Optional[str]:
    value = data.get('channel_id')
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def parse_alert_request(data) -> Tuple[Optional[AlertRequest], Optional[str]]:
    """
    Valida o corpo de POST /api/alerts antes de qualquer chamada ao Discord.

    Retorna (AlertRequest, None) ou (None, mensagem de erro).
    """
    if not isinstance(data, dict):
        data = {}

    channel_id = _channel_id(data)
    if not channel_id:
        return None, "channel_id is required"

    payload = data.get('payload')
    if payload is None:
        return None, "payload is required"
    if not isinstance(payload, dict):
        return None, "payload must be an object"

    return AlertRequest(
        channel_id=channel_id,
        payload=payload,
        message_type=_optional_str(data.get('message_type')),
        source=_optional_str(data.get('source')),
    ), None


def parse_test_request(data) -> Tuple[Optional[PingRequest], Optional[str]]:
    if not isinstance(data, dict):
        data = {}
    channel_id = _channel_id(data)
    if not channel_id:
        return None, "channel_id is required"
    message = data.get('message')
    return PingRequest(channel_id, str(message) if message else None), None
