# studio_ledger/bot/commands/procedures.py
from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger.bot.commands.utils import (
    collection_failed, find_by_prefix, format_errors, get_store, reply_load_error,
    reply_store_error, split_args,
)
from studio_ledger.core.errors import StoreError
from studio_ledger.core.models import PROCEDURES
from studio_ledger.utils.text_utils import short_id
from studio_ledger.utils.validation import validate_procedure


async def procedures_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Lista os procedimentos em ordem alfabética."""
    store = get_store(context)
    store.fetch_procedures()
    if collection_failed(store, PROCEDURES):
        await reply_load_error(update)
        return
    if not store.procedures:
        await update.message.reply_text("Nenhum procedimento cadastrado. Use /novo_procedimento Nome.")
        return

    lines = [f"• {p['name']} [{short_id(p['id'])}]" for p in store.procedures]
    await update.message.reply_text("Procedimentos:\n\n" + "\n".join(lines))


async def new_procedure_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    fields = {"name": " ".join(context.args or []).strip()}
    errors = validate_procedure(fields)
    if errors:
        await update.message.reply_text(format_errors(errors) + "\nUso: /novo_procedimento Nome")
        return

    try:
        procedure = get_store(context).add_procedure(fields)
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"✅ Procedimento '{procedure['name']}' cadastrado! [{short_id(procedure['id'])}]")


async def edit_procedure_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    parts = split_args(context)
    if len(parts) < 2:
        await update.message.reply_text("Uso: /editar_procedimento id; Nome")
        return

    store = get_store(context)
    store.fetch_procedures()
    procedure = find_by_prefix(store.procedures, parts[0])
    if procedure is None:
        await update.message.reply_text(f"Procedimento '{parts[0]}' não encontrado. Use /procedimentos para ver os ids.")
        return

    fields = {"name": parts[1]}
    errors = validate_procedure(fields)
    if errors:
        await update.message.reply_text(format_errors(errors))
        return

    try:
        updated = store.update_procedure(procedure["id"], fields)
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"✅ Procedimento renomeado para '{updated['name']}'.")


async def delete_procedure_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not context.args:
        await update.message.reply_text("Uso: /remover_procedimento id")
        return

    store = get_store(context)
    store.fetch_procedures()
    procedure = find_by_prefix(store.procedures, context.args[0])
    if procedure is None:
        await update.message.reply_text(f"Procedimento '{context.args[0]}' não encontrado.")
        return

    try:
        store.delete_procedure(procedure["id"])
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"🗑️ Procedimento '{procedure['name']}' removido.")
