import os

# Configurações globais de ambiente
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
APP_HOST = os.getenv("HOST", "0.0.0.0")
APP_PORT = int(os.getenv("PORT", "3000"))
DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"

# API REST do Discord
DISCORD_API_BASE_URL = os.getenv("DISCORD_API_BASE_URL", "https://discord.com/api/v10").rstrip('/')
DISCORD_TIMEOUT_SECONDS = float(os.getenv("DISCORD_TIMEOUT_SECONDS", "10"))
DISCORD_USER_AGENT = "DiscordBot (discord-alert-bot, 1.0.0)"
DISCORD_GUILDS_PAGE_SIZE = 200

# Limite do corpo JSON recebido (10 MB)
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))

# Códigos de erro da API do Discord
DISCORD_UNKNOWN_CHANNEL = 10003
DISCORD_MISSING_PERMISSIONS = 50013
DISCORD_INVALID_FORM_BODY = 50035

# Reações por tipo de mensagem, na ordem em que são adicionadas
MESSAGE_TYPE_REACTIONS = {
    "CRITICAL_ALERT": ["🚨", "👀"],
    "HIGH_PRIORITY_ALERT": ["⚠️"],
    "HEALTHY_STATUS": ["✅"],
}

DEFAULT_TEST_MESSAGE = "🧪 Test message from CV Alert Bot"
