# studio_ledger/bot/commands/expenses.py
import datetime

from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger.bot.commands.utils import (
    collection_failed, find_by_prefix, format_errors, get_store, reply_load_error,
    reply_store_error, split_args,
)
from studio_ledger.core import reports
from studio_ledger.core.errors import StoreError
from studio_ledger.core.models import EXPENSE_CATEGORIES, EXPENSES
from studio_ledger.utils.text_utils import format_currency, parse_amount, parse_date, parse_month, short_id
from studio_ledger.utils.validation import validate_expense


def match_category(text: str):
    """Categoria da lista fixa, sem diferenciar maiúsculas; o texto original se não bater."""
    lowered = (text or "").strip().lower()
    return next((c for c in EXPENSE_CATEGORIES if c.lower() == lowered), (text or "").strip())


async def expenses_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Lista despesas: /despesas [AAAA-MM] [categoria]. Sem mês, usa o mês atual."""
    store = get_store(context)
    store.fetch_expenses()
    if collection_failed(store, EXPENSES):
        await reply_load_error(update)
        return

    args = list(context.args or [])
    month = parse_month(args[0]) if args else None
    if month:
        args = args[1:]
    else:
        month = reports.month_key(reports.now_local())
    category = match_category(" ".join(args)) if args else None
    if category and category not in EXPENSE_CATEGORIES:
        await update.message.reply_text(f"Categoria '{category}' não existe. Use uma de: {', '.join(EXPENSE_CATEGORIES)}")
        return

    result = reports.filter_expenses(store.expenses, category=category, month=month)
    title = f"Despesas de {month}" + (f" em {category}" if category else "")
    if not result["expenses"]:
        await update.message.reply_text(f"{title}: nenhuma despesa registrada.")
        return

    lines = []
    for expense in result["expenses"]:
        day = reports.to_local(expense["expense_date"]).strftime("%d/%m")
        notes = f" - {expense['notes']}" if expense.get("notes") else ""
        lines.append(
            f"• {day} {expense['category']}: {format_currency(float(expense['amount']))}{notes} [{short_id(expense['id'])}]"
        )
    message = f"{title}:\n\n" + "\n".join(lines) + f"\n\nTotal: {format_currency(result['total'])}"
    await update.message.reply_text(message)


async def new_expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/nova_despesa categoria; valor; [AAAA-MM-DD]; [observações]"""
    parts = split_args(context)
    if len(parts) < 2:
        await update.message.reply_text(
            "Uso: /nova_despesa categoria; valor; [AAAA-MM-DD]; [observações]\n"
            f"Categorias: {', '.join(EXPENSE_CATEGORIES)}"
        )
        return

    expense_date = parse_date(parts[2]) if len(parts) > 2 and parts[2] else datetime.date.today()
    notes = parts[3] if len(parts) > 3 and parts[3] else None
    fields = {
        "category": match_category(parts[0]),
        "amount": parse_amount(parts[1]),
        "expense_date": expense_date.isoformat() if expense_date else None,
        "notes": notes,
    }
    errors = validate_expense(fields)
    if errors:
        await update.message.reply_text(format_errors(errors))
        return

    try:
        expense = get_store(context).add_expense(fields)
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text(
        f"✅ Despesa de {format_currency(float(expense['amount']))} em '{expense['category']}' registrada! "
        f"[{short_id(expense['id'])}]"
    )


async def delete_expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not context.args:
        await update.message.reply_text("Uso: /remover_despesa id")
        return

    store = get_store(context)
    store.fetch_expenses()
    expense = find_by_prefix(store.expenses, context.args[0])
    if expense is None:
        await update.message.reply_text(f"Despesa '{context.args[0]}' não encontrada.")
        return

    try:
        store.delete_expense(expense["id"])
    except StoreError as e:
        await reply_store_error(update, e)
        return
    await update.message.reply_text("🗑️ Despesa removida.")
