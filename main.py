import logging
import sys
import threading

from alertbot.constants import APP_HOST, APP_PORT, DEBUG_MODE, DISCORD_BOT_TOKEN
from alertbot.controller import create_app
from alertbot.discord_client import DiscordClient
from alertbot.errors import LoginError

logger = logging.getLogger("alertbot")


def _log_thread_exception(args):
    logger.error("Exceção não tratada na thread %s", args.thread.name if args.thread else '?',
                 exc_info=(args.exc_type, args.exc_value, args.exc_traceback))


def main():
    # O app só é criado depois do login: sem token válido o processo não atende requisições
    if not DISCORD_BOT_TOKEN:
        logger.error("DISCORD_BOT_TOKEN environment variable is required")
        sys.exit(1)

    client = DiscordClient(DISCORD_BOT_TOKEN)
    try:
        client.login()
    except LoginError as exc:
        logger.error("Falha no login do Discord: %s", exc)
        sys.exit(1)

    app = create_app(client)
    logger.info("CV Alert Bot API escutando na porta %d", APP_PORT)
    # use_reloader=False evita um segundo login quando DEBUG_MODE está ativo
    app.run(host=APP_HOST, port=APP_PORT, debug=DEBUG_MODE, use_reloader=False)


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if DEBUG_MODE else logging.INFO,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    threading.excepthook = _log_thread_exception
    main()
