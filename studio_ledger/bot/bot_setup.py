# studio_ledger/bot/bot_setup.py
import logging

from telegram.ext import Application, CommandHandler

from studio_ledger.bot.commands import ALL_COMMANDS

logger = logging.getLogger(__name__)


def setup_bot(config: dict) -> Application:
    """
    Configura a aplicação do bot do Telegram com todos os comandos.
    Retorna o objeto Application configurado, pronto para ser usado por um servidor WSGI
    (webhook) ou rodado com run_polling().
    """
    application = Application.builder().token(config["TELEGRAM_BOT_TOKEN"]).build()

    # A store fica no bot_data para que todos os comandos usem a mesma cópia local
    application.bot_data["store"] = config["STORE"]

    for name, handler in ALL_COMMANDS.items():
        application.add_handler(CommandHandler(name, handler))

    logger.info("Bot configurado com %d comandos", len(ALL_COMMANDS))
    return application
