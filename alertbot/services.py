import logging
from typing import Dict, List, Optional, Tuple

from .constants import DISCORD_UNKNOWN_CHANNEL, MESSAGE_TYPE_REACTIONS
from .discord_client import Channel, DiscordClient, SentMessage
from .errors import DiscordAPIError, NotFoundError

logger = logging.getLogger(__name__)


def resolve_channel(client: DiscordClient, channel_id: str) -> Channel:
    try:
        channel = client.fetch_channel(channel_id)
    except DiscordAPIError as exc:
        if exc.code == DISCORD_UNKNOWN_CHANNEL or exc.status == 404:
            raise NotFoundError() from exc
        raise
    if channel is None:
        raise NotFoundError()
    return channel


def reactions_for(message_type: Optional[str]) -> List[str]:
    return list(MESSAGE_TYPE_REACTIONS.get(message_type or "", []))


def add_severity_reactions(client: DiscordClient, message: SentMessage,
                           message_type: Optional[str]) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Adiciona as reações do tipo de mensagem, uma de cada vez e na ordem da
    tabela. Falhas não interrompem as reações seguintes.

    Retorna (reações adicionadas, erros por reação).
    """
    added: List[str] = []
    errors: List[Dict[str, str]] = []
    for emoji in reactions_for(message_type):
        try:
            client.add_reaction(message, emoji)
        except Exception as exc:
            logger.warning("Falha ao adicionar reação %s na mensagem %s: %s", emoji, message.id, exc)
            errors.append({"emoji": emoji, "error": str(exc)})
            continue
        added.append(emoji)
    return added, errors
