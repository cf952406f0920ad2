# studio_ledger/main.py
import asyncio
import logging

from flask import Flask, request, jsonify
from telegram import Update

from studio_ledger import config
from studio_ledger.bot.bot_setup import setup_bot
from studio_ledger.core.store import build_store

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


def create_app(ptb_application) -> Flask:
    """Aplicação Flask que repassa os updates do webhook do Telegram para o bot."""
    flask_app = Flask(__name__)

    @flask_app.route(WEBHOOK_PATH, methods=["POST"])
    async def telegram_webhook():
        if not request.is_json:
            logger.error("Webhook recebeu uma requisição que não é JSON")
            return jsonify({"status": "error", "message": "Request must be JSON"}), 400

        try:
            update = Update.de_json(request.get_json(), ptb_application.bot)
            await ptb_application.process_update(update)
        except Exception:
            logger.exception("Falha ao processar update do Telegram")
            return jsonify({"status": "error", "message": "Failed to process update"}), 500
        return jsonify({"status": "ok"}), 200

    @flask_app.route("/health", methods=["GET"])
    def health():
        store = ptb_application.bot_data["store"]
        return jsonify({table: status.value for table, status in store.status.items()}), 200

    return flask_app


def build_application():
    store = build_store()
    store.fetch_all()
    return setup_bot({"TELEGRAM_BOT_TOKEN": config.TELEGRAM_BOT_TOKEN, "STORE": store})


def create_wsgi_app() -> Flask:
    """Ponto de entrada do Gunicorn: `gunicorn 'studio_ledger.main:create_wsgi_app()'`."""
    config.configure_logging()
    ptb_application = build_application()
    asyncio.run(ptb_application.initialize())
    return create_app(ptb_application)


def main() -> None:
    """Roda o bot localmente com polling."""
    config.configure_logging()
    if not config.TELEGRAM_BOT_TOKEN:
        raise SystemExit("Defina TELEGRAM_BOT_TOKEN no .env")
    application = build_application()
    logger.info("Bot iniciado em modo polling")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
