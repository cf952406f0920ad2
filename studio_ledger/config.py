# studio_ledger/config.py
import logging
import os

from dotenv import load_dotenv

load_dotenv()

# Configurações do Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Configurações do Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")

# Fuso do estúdio, usado para agrupar agendamentos e despesas por dia/mês
STUDIO_TIMEZONE = os.getenv("STUDIO_TIMEZONE", "America/Sao_Paulo")

# Antecedência dos lembretes de agendamento (em horas)
REMINDER_HOURS_BEFORE = int(os.getenv("REMINDER_HOURS_BEFORE", "24"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def is_backend_configured(url=None, key=None) -> bool:
    """Diz se há credenciais reais do Supabase (nem ausentes, nem placeholder)."""
    url = SUPABASE_URL if url is None else url
    key = SUPABASE_KEY if key is None else key
    if not url or not key:
        return False
    return "placeholder" not in url and "placeholder" not in key


def configure_logging(level: str = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx loga cada requisição ao Supabase/Telegram em INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
