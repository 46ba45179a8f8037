import re
from datetime import datetime
from typing import Any, Dict

from .errors import TranslationError


_FRACTION_RE = re.compile(r"(?<=\d\d:\d\d:\d\d)\.(\d+)")


def _present(value) -> bool:
    return value is not None and value != ""


def parse_timestamp(value) -> datetime:
    if not isinstance(value, str):
        raise TranslationError(f"Invalid timestamp: {value!r}")
    raw = value.strip()
    # fromisoformat só aceita "Z" a partir do Python 3.11
    if raw.endswith('Z') or raw.endswith('z'):
        raw = raw[:-1] + '+00:00'
    # antes do 3.11 a fração precisa ter exatamente 3 ou 6 dígitos
    raw = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], raw, count=1)
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise TranslationError(f"Invalid timestamp: {value!r}") from exc


def build_embed(descriptor: Dict[str, Any]) -> Dict[str, Any]:
    """
    Converte um EmbedDescriptor no objeto embed do Discord.

    Somente os campos presentes são copiados; nenhum campo ausente vira
    string vazia ou null.
    """
    if not isinstance(descriptor, dict):
        raise TranslationError("Each embed must be an object")

    embed: Dict[str, Any] = {}
    if _present(descriptor.get('title')):
        embed['title'] = descriptor['title']
    if _present(descriptor.get('description')):
        embed['description'] = descriptor['description']
    if descriptor.get('color') is not None:
        try:
            embed['color'] = int(descriptor['color'])
        except (TypeError, ValueError) as exc:
            raise TranslationError(f"Invalid color: {descriptor['color']!r}") from exc
    if _present(descriptor.get('timestamp')):
        embed['timestamp'] = parse_timestamp(descriptor['timestamp']).isoformat()

    footer = descriptor.get('footer')
    if isinstance(footer, dict) and _present(footer.get('text')):
        embed['footer'] = {'text': footer['text']}

    fields = descriptor.get('fields')
    if isinstance(fields, list) and fields:
        embed['fields'] = [
            {
                'name': field.get('name'),
                'value': field.get('value'),
                'inline': field.get('inline') is True,
            }
            for field in fields
            if isinstance(field, dict)
        ]
    return embed


def translate_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if _present(payload.get('content')):
        options['content'] = payload['content']

    embeds = payload.get('embeds')
    if isinstance(embeds, list):
        options['embeds'] = [build_embed(descriptor) for descriptor in embeds]
    return options
