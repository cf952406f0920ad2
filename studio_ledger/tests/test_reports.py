# tests/test_reports.py
import datetime
import unittest

import pandas as pd

from studio_ledger.core import reports
from studio_ledger.core.models import STATUS_CANCELLED, STATUS_COMPLETED, STATUS_SCHEDULED

TZ = "America/Sao_Paulo"


def appointment(id, client_id, date, value, status=STATUS_COMPLETED, name=None):
    return {
        "id": id,
        "client_id": client_id,
        "appointment_date": date,
        "total_value": value,
        "status": status,
        "client": {"id": client_id, "full_name": name or client_id} if name is not False else None,
        "procedures": [],
    }


def expense(id, category, amount, date):
    return {"id": id, "category": category, "amount": amount, "expense_date": date, "notes": None}


class TestDates(unittest.TestCase):
    def test_to_local_converts_aware_timestamps(self):
        # 02:00 UTC de 1º de março ainda é fevereiro em São Paulo
        local = reports.to_local("2025-03-01T02:00:00+00:00", TZ)
        self.assertEqual(local, pd.Timestamp("2025-02-28 23:00"))
        self.assertIsNone(local.tzinfo)

    def test_to_local_keeps_naive_timestamps(self):
        self.assertEqual(reports.to_local("2025-03-01 02:00", TZ), pd.Timestamp("2025-03-01 02:00"))
        self.assertEqual(reports.to_local(datetime.date(2025, 3, 1), TZ), pd.Timestamp("2025-03-01"))

    def test_month_key(self):
        self.assertEqual(reports.month_key("2025-03"), "2025-03")
        self.assertEqual(reports.month_key("2025-03-15"), "2025-03")
        self.assertEqual(reports.month_key(datetime.date(2024, 12, 31)), "2024-12")
        self.assertEqual(reports.month_key("2025-03-01T01:00:00+00:00", TZ), "2025-02")


class TestMonthlySummary(unittest.TestCase):
    def setUp(self):
        self.appointments = [
            appointment("a1", "c1", "2025-03-10T14:00:00", 150.0, name="Maria Silva"),
            appointment("a2", "c2", "2025-03-12T10:00:00", 80.0, name="Ana Santos"),
            appointment("a3", "c1", "2025-03-20T10:00:00", 500.0, STATUS_SCHEDULED),
            appointment("a4", "c2", "2025-03-21T10:00:00", 90.0, STATUS_CANCELLED),
            appointment("a5", "c1", "2025-02-10T10:00:00", 60.0),
        ]
        self.expenses = [
            expense("e1", "Material de Trabalho", 200.0, "2025-03-05"),
            expense("e2", "Luz", 45.0, "2025-02-05"),
        ]

    def test_only_completed_appointments_count_as_revenue(self):
        summary = reports.monthly_summary(self.appointments, self.expenses, "2025-03", TZ)
        self.assertEqual(summary, {"month": "2025-03", "revenue": 230.0, "expenses": 200.0, "profit": 30.0})

    def test_monthly_balance(self):
        self.assertEqual(reports.monthly_balance(self.appointments, self.expenses, "2025-02", TZ), 15.0)

    def test_empty_month(self):
        summary = reports.monthly_summary(self.appointments, self.expenses, "2025-04", TZ)
        self.assertEqual(summary, {"month": "2025-04", "revenue": 0.0, "expenses": 0.0, "profit": 0.0})

    def test_empty_collections(self):
        summary = reports.monthly_summary([], [], "2025-03", TZ)
        self.assertEqual(summary["revenue"], 0.0)
        self.assertEqual(summary["expenses"], 0.0)
        self.assertEqual(summary["profit"], 0.0)

    def test_revenue_only_month(self):
        summary = reports.monthly_summary(self.appointments, [], "2025-03", TZ)
        self.assertEqual(summary["profit"], 230.0)

    def test_negative_profit(self):
        summary = reports.monthly_summary([], self.expenses, "2025-03", TZ)
        self.assertEqual(summary["profit"], -200.0)

    def test_month_boundary_uses_studio_timezone(self):
        late = [appointment("a1", "c1", "2025-04-01T01:30:00+00:00", 100.0)]
        self.assertEqual(reports.monthly_summary(late, [], "2025-03", TZ)["revenue"], 100.0)
        self.assertEqual(reports.monthly_summary(late, [], "2025-04", TZ)["revenue"], 0.0)


class TestExpensesByCategory(unittest.TestCase):
    def test_totals_and_percentages(self):
        expenses = [
            expense("e1", "Luz", 60.0, "2025-03-01"),
            expense("e2", "Aluguel", 300.0, "2025-03-02"),
            expense("e3", "Luz", 40.0, "2025-03-15"),
            expense("e4", "Internet", 999.0, "2025-02-15"),
        ]

        breakdown = reports.expenses_by_category(expenses, "2025-03", TZ)

        self.assertEqual(breakdown, [
            {"category": "Aluguel", "amount": 300.0, "percentage": 75.0},
            {"category": "Luz", "amount": 100.0, "percentage": 25.0},
        ])

    def test_no_expenses_in_month(self):
        self.assertEqual(reports.expenses_by_category([expense("e1", "Luz", 10.0, "2025-01-01")], "2025-03"), [])
        self.assertEqual(reports.expenses_by_category([], "2025-03"), [])


class TestTopClients(unittest.TestCase):
    def test_ranked_by_completed_revenue(self):
        appointments = [
            appointment("a1", "c3", "2025-03-01T10:00:00", 100.0, name="Carla"),
            appointment("a2", "c1", "2025-03-02T10:00:00", 300.0, name="Maria Silva"),
            appointment("a3", "c2", "2025-03-03T10:00:00", 300.0, name="Ana Santos"),
            appointment("a4", "c1", "2025-03-04T10:00:00", 200.0, name="Maria Silva"),
            appointment("a5", "c3", "2025-03-05T10:00:00", 1000.0, STATUS_CANCELLED, name="Carla"),
        ]

        ranking = reports.top_clients(appointments, "2025-03", tz=TZ)

        self.assertEqual(ranking, [
            {"client_id": "c1", "name": "Maria Silva", "total": 500.0, "appointments": 2},
            {"client_id": "c2", "name": "Ana Santos", "total": 300.0, "appointments": 1},
            {"client_id": "c3", "name": "Carla", "total": 100.0, "appointments": 1},
        ])

    def test_ties_keep_input_order(self):
        appointments = [
            appointment("a1", "c2", "2025-03-01T10:00:00", 100.0, name="Bia"),
            appointment("a2", "c1", "2025-03-02T10:00:00", 100.0, name="Ana"),
        ]
        names = [c["name"] for c in reports.top_clients(appointments, "2025-03", tz=TZ)]
        self.assertEqual(names, ["Bia", "Ana"])

    def test_limit(self):
        appointments = [
            appointment(f"a{i}", f"c{i}", "2025-03-01T10:00:00", float(10 * i), name=f"Cliente {i}")
            for i in range(1, 8)
        ]
        ranking = reports.top_clients(appointments, "2025-03", tz=TZ)
        self.assertEqual(len(ranking), reports.TOP_CLIENTS_LIMIT)
        self.assertEqual(ranking[0]["client_id"], "c7")
        self.assertEqual(len(reports.top_clients(appointments, "2025-03", limit=2, tz=TZ)), 2)

    def test_missing_client_gets_placeholder_name(self):
        appointments = [appointment("a1", "c9", "2025-03-01T10:00:00", 50.0, name=False)]
        ranking = reports.top_clients(appointments, "2025-03", tz=TZ)
        self.assertEqual(ranking[0]["name"], reports.UNKNOWN_CLIENT)


class TestTrendAndReport(unittest.TestCase):
    def test_trend_spans_year_boundary_oldest_first(self):
        appointments = [appointment("a1", "c1", "2024-12-10T10:00:00", 120.0)]
        expenses = [expense("e1", "Luz", 20.0, "2025-02-01")]

        trend = reports.monthly_trend(appointments, expenses, months=6, reference="2025-02", tz=TZ)

        self.assertEqual(
            [m["month"] for m in trend],
            ["2024-09", "2024-10", "2024-11", "2024-12", "2025-01", "2025-02"],
        )
        self.assertEqual(trend[3], {"month": "2024-12", "revenue": 120.0, "expenses": 0.0, "profit": 120.0})
        self.assertEqual(trend[5]["profit"], -20.0)

    def test_monthly_report_keys(self):
        appointments = [appointment("a1", "c1", "2025-03-10T14:00:00", 150.0, name="Maria Silva")]
        expenses = [expense("e1", "Luz", 50.0, "2025-03-01")]

        report = reports.monthly_report(appointments, expenses, now="2025-03-20 12:00", tz=TZ)

        self.assertEqual(set(report), {"month", "summary", "expenses_by_category", "top_clients", "trend"})
        self.assertEqual(report["month"], "2025-03")
        self.assertEqual(report["summary"]["profit"], 100.0)
        self.assertEqual(report["top_clients"][0]["name"], "Maria Silva")
        self.assertEqual(report["trend"][-1]["month"], "2025-03")

    def test_monthly_report_for_other_month(self):
        report = reports.monthly_report([], [], month="2024-11", now="2025-03-20 12:00", tz=TZ)
        self.assertEqual(report["month"], "2024-11")
        self.assertEqual(report["summary"]["month"], "2024-11")


class TestAgendaViews(unittest.TestCase):
    def setUp(self):
        self.now = "2025-03-10 12:00"
        self.appointments = [
            appointment("past", "c1", "2025-03-10T09:00:00", 80.0, STATUS_SCHEDULED),
            appointment("later-today", "c1", "2025-03-10T15:00:00", 80.0, STATUS_SCHEDULED),
            appointment("next-week", "c2", "2025-03-17T10:00:00", 80.0, STATUS_SCHEDULED),
            appointment("tomorrow", "c2", "2025-03-11T10:00:00", 80.0, STATUS_SCHEDULED),
            appointment("cancelled", "c2", "2025-03-12T10:00:00", 80.0, STATUS_CANCELLED),
        ]

    def test_upcoming_only_future_scheduled_soonest_first(self):
        upcoming = reports.upcoming_appointments(self.appointments, now=self.now, tz=TZ)
        self.assertEqual([a["id"] for a in upcoming], ["later-today", "tomorrow", "next-week"])

    def test_upcoming_limit(self):
        upcoming = reports.upcoming_appointments(self.appointments, now=self.now, limit=1, tz=TZ)
        self.assertEqual([a["id"] for a in upcoming], ["later-today"])

    def test_appointments_on_day(self):
        day = reports.appointments_on(self.appointments, datetime.date(2025, 3, 10), TZ)
        self.assertEqual([a["id"] for a in day], ["past", "later-today"])
        self.assertEqual(reports.appointments_on([], datetime.date(2025, 3, 10), TZ), [])

    def test_dashboard_stats(self):
        appointments = self.appointments + [appointment("done", "c1", "2025-03-05T10:00:00", 150.0)]
        expenses = [expense("e1", "Luz", 50.0, "2025-03-01"), expense("e2", "Luz", 70.0, "2025-02-01")]
        clients = [{"id": "c1"}, {"id": "c2"}]

        stats = reports.dashboard_stats(clients, appointments, expenses, now=self.now, tz=TZ)

        self.assertEqual(stats["total_clients"], 2)
        self.assertEqual(stats["today_appointments"], 2)
        self.assertEqual(stats["monthly_revenue"], 150.0)
        self.assertEqual(stats["monthly_expenses"], 50.0)
        self.assertEqual(stats["monthly_balance"], 100.0)
        self.assertEqual([a["id"] for a in stats["upcoming_appointments"]], ["later-today", "tomorrow", "next-week"])


class TestFilters(unittest.TestCase):
    def test_filter_expenses(self):
        expenses = [
            expense("e1", "Luz", 60.0, "2025-03-01"),
            expense("e2", "Aluguel", 300.0, "2025-03-02"),
            expense("e3", "Luz", 40.0, "2025-02-15"),
        ]

        by_category = reports.filter_expenses(expenses, category="Luz")
        self.assertEqual([e["id"] for e in by_category["expenses"]], ["e1", "e3"])
        self.assertEqual(by_category["total"], 100.0)

        by_both = reports.filter_expenses(expenses, category="Luz", month="2025-03")
        self.assertEqual([e["id"] for e in by_both["expenses"]], ["e1"])

        everything = reports.filter_expenses(expenses)
        self.assertEqual(everything["total"], 400.0)

    def test_filter_expenses_empty(self):
        self.assertEqual(reports.filter_expenses([], category="Luz"), {"expenses": [], "total": 0.0})

    def test_search_clients(self):
        clients = [
            {"id": "c1", "full_name": "Maria Silva", "phone": "(11) 99999-9999"},
            {"id": "c2", "full_name": "Ana Santos", "phone": "(21) 88888-7777"},
        ]
        self.assertEqual([c["id"] for c in reports.search_clients(clients, "maria")], ["c1"])
        self.assertEqual([c["id"] for c in reports.search_clients(clients, "88888")], ["c2"])
        self.assertEqual([c["id"] for c in reports.search_clients(clients, "2188888")], ["c2"])
        self.assertEqual(len(reports.search_clients(clients, "")), 2)
        self.assertEqual(reports.search_clients(clients, "Joana"), [])


if __name__ == "__main__":
    unittest.main()
