# studio_ledger/bot/commands/clients.py
from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger.bot.commands.utils import (
    collection_failed, find_by_prefix, format_errors, get_store, reply_load_error,
    reply_store_error, split_args,
)
from studio_ledger.core import reports
from studio_ledger.core.errors import StoreError
from studio_ledger.core.models import CLIENTS
from studio_ledger.utils.text_utils import format_phone, short_id
from studio_ledger.utils.validation import validate_client


def _client_line(client) -> str:
    return f"• {client['full_name']} - {format_phone(client.get('phone'))} [{short_id(client['id'])}]"


async def clients_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Lista os clientes, opcionalmente filtrando por nome ou telefone."""
    store = get_store(context)
    store.fetch_clients()
    if collection_failed(store, CLIENTS):
        await reply_load_error(update)
        return

    term = " ".join(context.args or []).strip()
    found = reports.search_clients(store.clients, term)
    if not found:
        if term:
            await update.message.reply_text(f"Nenhum cliente encontrado para '{term}'.")
        else:
            await update.message.reply_text("Nenhum cliente cadastrado ainda. Use /novo_cliente Nome; telefone.")
        return

    message = f"Clientes ({len(found)}):\n\n" + "\n".join(_client_line(c) for c in found)
    await update.message.reply_text(message)


async def new_client_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Cadastra um cliente: /novo_cliente Nome; telefone"""
    parts = split_args(context)
    if len(parts) < 2:
        await update.message.reply_text("Uso: /novo_cliente Nome; telefone\nEx: /novo_cliente Ana Lima; (11) 98888-7777")
        return

    fields = {"full_name": parts[0], "phone": parts[1]}
    errors = validate_client(fields)
    if errors:
        await update.message.reply_text(format_errors(errors))
        return

    try:
        client = get_store(context).add_client(fields)
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"✅ Cliente '{client['full_name']}' cadastrado! [{short_id(client['id'])}]")


async def edit_client_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Altera nome e telefone: /editar_cliente id; Nome; telefone"""
    parts = split_args(context)
    if len(parts) < 3:
        await update.message.reply_text("Uso: /editar_cliente id; Nome; telefone")
        return

    store = get_store(context)
    store.fetch_clients()
    client = find_by_prefix(store.clients, parts[0])
    if client is None:
        await update.message.reply_text(f"Cliente '{parts[0]}' não encontrado. Use /clientes para ver os ids.")
        return

    fields = {"full_name": parts[1], "phone": parts[2]}
    errors = validate_client(fields)
    if errors:
        await update.message.reply_text(format_errors(errors))
        return

    try:
        updated = store.update_client(client["id"], fields)
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"✅ Cliente '{updated['full_name']}' atualizado!")


async def delete_client_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remove um cliente sem agendamentos: /remover_cliente id"""
    if not context.args:
        await update.message.reply_text("Uso: /remover_cliente id")
        return

    store = get_store(context)
    store.fetch_clients()
    client = find_by_prefix(store.clients, context.args[0])
    if client is None:
        await update.message.reply_text(f"Cliente '{context.args[0]}' não encontrado. Use /clientes para ver os ids.")
        return

    try:
        store.delete_client(client["id"])
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(f"🗑️ Cliente '{client['full_name']}' removido.")
