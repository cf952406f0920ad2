# studio_ledger/bot/reminders.py
import datetime
import logging
from typing import Any, Dict, Optional

import pandas as pd
from telegram.ext import ContextTypes, JobQueue

from studio_ledger import config
from studio_ledger.core.reports import now_local, to_local

logger = logging.getLogger(__name__)


def reminder_job_name(appointment_id: str) -> str:
    return f"lembrete-{appointment_id}"


def reminder_time(appointment_date, hours_before: int = None, tz: str = None) -> pd.Timestamp:
    """Horário local em que o lembrete deve sair."""
    hours = config.REMINDER_HOURS_BEFORE if hours_before is None else hours_before
    return to_local(appointment_date, tz) - datetime.timedelta(hours=hours)


def seconds_until_reminder(appointment_date, now=None, hours_before: int = None,
                           tz: str = None) -> Optional[float]:
    """Segundos até o lembrete, ou None se o horário do lembrete já passou."""
    now = to_local(now, tz) if now is not None else now_local(tz)
    delay = (reminder_time(appointment_date, hours_before, tz) - now).total_seconds()
    return delay if delay > 0 else None


def reminder_message(appointment: Dict[str, Any], tz: str = None) -> str:
    client = appointment.get("client") or {}
    name = client.get("full_name") or "cliente"
    when = to_local(appointment["appointment_date"], tz)
    return (
        f"⏰ Lembrete de Agendamento\n"
        f"Você tem um agendamento com {name} em {when.strftime('%d/%m')} às {when.strftime('%H:%M')}."
    )


async def send_reminder(context: ContextTypes.DEFAULT_TYPE) -> None:
    job = context.job
    await context.bot.send_message(chat_id=job.chat_id, text=job.data["text"])


def reminders_available(job_queue: Optional[JobQueue]) -> bool:
    """True só se o agendador da JobQueue estiver rodando (Application.start ou run_polling)."""
    return job_queue is not None and bool(job_queue.scheduler.running)


def cancel_appointment_reminder(job_queue: Optional[JobQueue], appointment_id: str) -> int:
    if job_queue is None:
        return 0
    jobs = job_queue.get_jobs_by_name(reminder_job_name(appointment_id))
    for job in jobs:
        job.schedule_removal()
    return len(jobs)


def schedule_appointment_reminder(job_queue: Optional[JobQueue], chat_id: int,
                                  appointment: Dict[str, Any], now=None) -> bool:
    """Agenda (ou reagenda) o lembrete de um agendamento. False se não houver o que agendar."""
    if not reminders_available(job_queue):
        logger.warning("JobQueue parada ou ausente; lembrete do agendamento %s não agendado", appointment["id"])
        return False

    delay = seconds_until_reminder(appointment["appointment_date"], now)
    if delay is None:
        return False

    cancel_appointment_reminder(job_queue, appointment["id"])
    job_queue.run_once(
        send_reminder,
        when=delay,
        chat_id=chat_id,
        name=reminder_job_name(appointment["id"]),
        data={"appointment_id": appointment["id"], "text": reminder_message(appointment)},
    )
    logger.info("Lembrete do agendamento %s em %.0f segundos", appointment["id"], delay)
    return True
