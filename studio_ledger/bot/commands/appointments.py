# studio_ledger/bot/commands/appointments.py
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger import config
from studio_ledger.bot import reminders
from studio_ledger.bot.commands.utils import (
    collection_failed, find_by_prefix, format_errors, get_store, reply_load_error,
    reply_store_error, split_args,
)
from studio_ledger.core import reports
from studio_ledger.core.errors import StoreError
from studio_ledger.core.models import APPOINTMENTS, STATUS_CANCELLED, STATUS_COMPLETED, STATUS_SCHEDULED
from studio_ledger.utils.text_utils import format_currency, parse_amount, parse_date, parse_datetime, short_id
from studio_ledger.utils.validation import validate_appointment

AGENDA_LIMIT = 10


def _match_by_name(records: List[Dict[str, Any]], text: str, key: str) -> Optional[Dict[str, Any]]:
    """Id abreviado, nome exato (sem diferenciar maiúsculas) ou trecho único do nome."""
    found = find_by_prefix(records, text)
    if found:
        return found
    lowered = text.strip().lower()
    exact = [r for r in records if (r.get(key) or "").lower() == lowered]
    if len(exact) == 1:
        return exact[0]
    partial = [r for r in records if lowered and lowered in (r.get(key) or "").lower()]
    return partial[0] if len(partial) == 1 else None


def _resolve_procedures(procedures, text: str) -> Tuple[List[str], List[str]]:
    ids, missing = [], []
    for name in (n.strip() for n in text.split(",")):
        if not name:
            continue
        procedure = _match_by_name(procedures, name, "name")
        if procedure is None:
            missing.append(name)
        elif procedure["id"] not in ids:
            ids.append(procedure["id"])
    return ids, missing


def appointment_line(appointment: Dict[str, Any]) -> str:
    when = reports.to_local(appointment["appointment_date"])
    client = (appointment.get("client") or {}).get("full_name") or reports.UNKNOWN_CLIENT
    procedures = ", ".join(p["name"] for p in appointment.get("procedures") or []) or "-"
    return (
        f"• {when.strftime('%d/%m %H:%M')} - {client} ({procedures}) "
        f"{format_currency(float(appointment.get('total_value') or 0))} "
        f"[{appointment.get('status')}] [{short_id(appointment['id'])}]"
    )


async def agenda_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Agenda de um dia (/agenda AAAA-MM-DD) ou os próximos atendimentos."""
    store = get_store(context)
    store.fetch_appointments()
    if collection_failed(store, APPOINTMENTS):
        await reply_load_error(update)
        return

    if context.args:
        day = parse_date(context.args[0])
        if day is None:
            await update.message.reply_text("Data inválida. Use AAAA-MM-DD (ex: 2025-03-10).")
            return
        selected = reports.appointments_on(store.appointments, day)
        title = f"Agenda de {day.strftime('%d/%m/%Y')}"
    else:
        selected = reports.upcoming_appointments(store.appointments, limit=AGENDA_LIMIT)
        title = "Próximos atendimentos"

    if not selected:
        await update.message.reply_text(f"{title}: nenhum agendamento. 🎉")
        return
    await update.message.reply_text(f"{title}:\n\n" + "\n".join(appointment_line(a) for a in selected))


async def schedule_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/agendar cliente; AAAA-MM-DD HH:MM; valor; procedimento1, procedimento2"""
    parts = split_args(context)
    if len(parts) < 4:
        await update.message.reply_text(
            "Uso: /agendar cliente; AAAA-MM-DD HH:MM; valor; procedimento1, procedimento2\n"
            "Ex: /agendar Maria Silva; 2025-03-10 14:00; 150; Extensão de Cílios"
        )
        return

    store = get_store(context)
    store.fetch_clients()
    store.fetch_procedures()

    client = _match_by_name(store.clients, parts[0], "full_name")
    if client is None:
        await update.message.reply_text(f"Cliente '{parts[0]}' não encontrado. Use /clientes para conferir.")
        return
    procedure_ids, missing = _resolve_procedures(store.procedures, parts[3])
    if missing:
        await update.message.reply_text(f"Procedimento(s) não encontrado(s): {', '.join(missing)}. Use /procedimentos.")
        return

    when = parse_datetime(parts[1])
    fields = {
        "client_id": client["id"],
        "appointment_date": pd.Timestamp(when).tz_localize(config.STUDIO_TIMEZONE).isoformat() if when else None,
        "total_value": parse_amount(parts[2]),
        "status": STATUS_SCHEDULED,
    }
    errors = validate_appointment(fields, procedure_ids)
    if errors:
        await update.message.reply_text(format_errors(errors))
        return

    try:
        appointment = store.add_appointment(fields, procedure_ids)
    except StoreError as e:
        await reply_store_error(update, e)
        return

    message = "✅ Agendamento criado!\n" + appointment_line(appointment)
    if reminders.schedule_appointment_reminder(context.job_queue, update.effective_chat.id, appointment):
        message += "\n⏰ Vou te lembrar antes do horário."
    await update.message.reply_text(message)


async def _change_status(update: Update, context: ContextTypes.DEFAULT_TYPE, status: str) -> None:
    if not context.args:
        await update.message.reply_text("Informe o id do agendamento. Use /agenda para ver os ids.")
        return

    store = get_store(context)
    store.fetch_appointments()
    appointment = find_by_prefix(store.appointments, context.args[0])
    if appointment is None:
        await update.message.reply_text(f"Agendamento '{context.args[0]}' não encontrado.")
        return

    try:
        updated = store.update_appointment(appointment["id"], {"status": status})
    except StoreError as e:
        await reply_store_error(update, e)
        return

    if status != STATUS_SCHEDULED:
        reminders.cancel_appointment_reminder(context.job_queue, appointment["id"])
    await update.message.reply_text(f"✅ Agendamento marcado como {status}.\n" + appointment_line(updated))


async def complete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _change_status(update, context, STATUS_COMPLETED)


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _change_status(update, context, STATUS_CANCELLED)


async def delete_appointment_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not context.args:
        await update.message.reply_text("Uso: /remover_agendamento id")
        return

    store = get_store(context)
    store.fetch_appointments()
    appointment = find_by_prefix(store.appointments, context.args[0])
    if appointment is None:
        await update.message.reply_text(f"Agendamento '{context.args[0]}' não encontrado.")
        return

    try:
        store.delete_appointment(appointment["id"])
    except StoreError as e:
        await reply_store_error(update, e)
        return
    reminders.cancel_appointment_reminder(context.job_queue, appointment["id"])
    await update.message.reply_text("🗑️ Agendamento removido.")


async def reminders_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Agenda lembretes para todos os atendimentos futuros com status 'agendado'."""
    store = get_store(context)
    store.fetch_appointments()
    if collection_failed(store, APPOINTMENTS):
        await reply_load_error(update)
        return
    if not reminders.reminders_available(context.job_queue):
        await update.message.reply_text(
            "⏰ Os lembretes não estão disponíveis neste modo de execução (rode o bot com polling)."
        )
        return

    upcoming = reports.upcoming_appointments(store.appointments, limit=len(store.appointments))
    scheduled = sum(
        reminders.schedule_appointment_reminder(context.job_queue, update.effective_chat.id, a)
        for a in upcoming
    )
    await update.message.reply_text(
        f"⏰ {scheduled} lembrete(s) agendado(s), {config.REMINDER_HOURS_BEFORE}h antes de cada atendimento."
    )
