# tests/test_reminders.py
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from studio_ledger import config
from studio_ledger.bot import reminders

TZ = "America/Sao_Paulo"
NOW = "2025-03-10 12:00"


def appointment(date="2025-03-11T14:00:00", id="a1"):
    return {
        "id": id,
        "appointment_date": date,
        "client": {"id": "c1", "full_name": "Maria Silva"},
        "procedures": [],
        "status": "agendado",
    }


@patch.object(config, "REMINDER_HOURS_BEFORE", 24)
class TestReminderTiming(unittest.TestCase):
    def test_seconds_until_reminder(self):
        # lembrete às 14:00 do dia 10, duas horas depois de NOW
        self.assertEqual(reminders.seconds_until_reminder("2025-03-11T14:00:00", now=NOW, tz=TZ), 7200.0)

    def test_reminder_already_due(self):
        self.assertIsNone(reminders.seconds_until_reminder("2025-03-11T11:00:00", now=NOW, tz=TZ))

    def test_custom_hours_before(self):
        self.assertEqual(
            reminders.seconds_until_reminder("2025-03-10T15:00:00", now=NOW, hours_before=1, tz=TZ),
            7200.0,
        )

    def test_aware_dates_use_studio_timezone(self):
        # 17:00 UTC = 14:00 em São Paulo
        self.assertEqual(reminders.seconds_until_reminder("2025-03-11T17:00:00+00:00", now=NOW, tz=TZ), 7200.0)

    def test_reminder_message(self):
        message = reminders.reminder_message(appointment(), tz=TZ)
        self.assertEqual(
            message,
            "⏰ Lembrete de Agendamento\nVocê tem um agendamento com Maria Silva em 11/03 às 14:00.",
        )


@patch.object(config, "REMINDER_HOURS_BEFORE", 24)
@patch.object(config, "STUDIO_TIMEZONE", TZ)
class TestScheduleReminder(unittest.TestCase):
    def setUp(self):
        self.job_queue = MagicMock()
        self.job_queue.scheduler.running = True
        self.job_queue.get_jobs_by_name.return_value = []

    def test_schedules_job(self):
        scheduled = reminders.schedule_appointment_reminder(self.job_queue, 42, appointment(), now=NOW)

        self.assertTrue(scheduled)
        self.job_queue.run_once.assert_called_once()
        args, kwargs = self.job_queue.run_once.call_args
        self.assertIs(args[0], reminders.send_reminder)
        self.assertEqual(kwargs["when"], 7200.0)
        self.assertEqual(kwargs["chat_id"], 42)
        self.assertEqual(kwargs["name"], "lembrete-a1")
        self.assertEqual(kwargs["data"]["appointment_id"], "a1")
        self.assertIn("Maria Silva", kwargs["data"]["text"])

    def test_replaces_existing_job(self):
        old_job = MagicMock()
        self.job_queue.get_jobs_by_name.return_value = [old_job]

        reminders.schedule_appointment_reminder(self.job_queue, 42, appointment(), now=NOW)

        old_job.schedule_removal.assert_called_once()
        self.job_queue.get_jobs_by_name.assert_called_with("lembrete-a1")

    def test_past_reminder_is_not_scheduled(self):
        scheduled = reminders.schedule_appointment_reminder(
            self.job_queue, 42, appointment("2025-03-10T13:00:00"), now=NOW,
        )
        self.assertFalse(scheduled)
        self.job_queue.run_once.assert_not_called()

    def test_stopped_scheduler_is_not_scheduled(self):
        # Sob o webhook do gunicorn só initialize() roda; a JobQueue nunca é iniciada
        self.job_queue.scheduler.running = False

        scheduled = reminders.schedule_appointment_reminder(self.job_queue, 42, appointment(), now=NOW)

        self.assertFalse(scheduled)
        self.job_queue.run_once.assert_not_called()
        self.assertFalse(reminders.reminders_available(self.job_queue))
        self.assertFalse(reminders.reminders_available(None))

    def test_without_job_queue(self):
        self.assertFalse(reminders.schedule_appointment_reminder(None, 42, appointment(), now=NOW))
        self.assertEqual(reminders.cancel_appointment_reminder(None, "a1"), 0)

    def test_cancel(self):
        jobs = [MagicMock(), MagicMock()]
        self.job_queue.get_jobs_by_name.return_value = jobs

        self.assertEqual(reminders.cancel_appointment_reminder(self.job_queue, "a1"), 2)
        for job in jobs:
            job.schedule_removal.assert_called_once()


class TestSendReminder(unittest.IsolatedAsyncioTestCase):
    async def test_sends_job_text_to_chat(self):
        context = MagicMock()
        context.job.chat_id = 42
        context.job.data = {"appointment_id": "a1", "text": "⏰ Lembrete"}
        context.bot.send_message = AsyncMock()

        await reminders.send_reminder(context)

        context.bot.send_message.assert_awaited_once_with(chat_id=42, text="⏰ Lembrete")


if __name__ == "__main__":
    unittest.main()
