# studio_ledger/core/reports.py
"""
Visões calculadas sobre as coleções da store: painel e relatório mensal.

São funções puras; recebem as listas de registros (dicionários, como vêm da
store) e recalculam tudo a cada chamada. Datas com fuso são convertidas para o
fuso do estúdio antes de agrupar por dia/mês; datas sem fuso já são locais.
"""
import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from studio_ledger import config
from studio_ledger.core.models import STATUS_COMPLETED, STATUS_SCHEDULED
from studio_ledger.utils.text_utils import digits_only

DateLike = Union[str, datetime.date, datetime.datetime, pd.Timestamp]

UPCOMING_LIMIT = 5
TOP_CLIENTS_LIMIT = 5
TREND_MONTHS = 6
UNKNOWN_CLIENT = "Cliente não encontrado"


def to_local(value: DateLike, tz: str = None) -> pd.Timestamp:
    """Converte para um Timestamp sem fuso, no horário local do estúdio."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz or config.STUDIO_TIMEZONE).tz_localize(None)
    return ts


def now_local(tz: str = None) -> pd.Timestamp:
    return to_local(pd.Timestamp.now(tz="UTC"), tz)


def month_key(value: DateLike, tz: str = None) -> str:
    """'AAAA-MM' de uma data, datetime ou de uma string já no formato de mês."""
    if isinstance(value, str) and len(value) == 7:
        return str(pd.Period(value, freq="M"))
    return to_local(value, tz).strftime("%Y-%m")


def _dated_frame(records: Iterable[Dict[str, Any]], date_column: str, value_column: str,
                 columns: List[str], tz: str = None) -> pd.DataFrame:
    df = pd.DataFrame(list(records))
    if df.empty:
        return pd.DataFrame(columns=columns + [date_column, value_column, "when", "month"])

    for column in columns:
        if column not in df:
            df[column] = None
    df["when"] = pd.to_datetime([to_local(v, tz) for v in df[date_column]])
    df["month"] = df["when"].dt.strftime("%Y-%m")
    df[value_column] = pd.to_numeric(df[value_column], errors="coerce").fillna(0.0)
    return df


def _appointments_frame(appointments, tz=None) -> pd.DataFrame:
    return _dated_frame(appointments, "appointment_date", "total_value", ["id", "client_id", "status", "client"], tz)


def _expenses_frame(expenses, tz=None) -> pd.DataFrame:
    return _dated_frame(expenses, "expense_date", "amount", ["id", "category"], tz)


def _money(value) -> float:
    return round(float(value), 2)


def _revenue(df_appointments: pd.DataFrame, month: str) -> float:
    if df_appointments.empty:
        return 0.0
    done = df_appointments[(df_appointments["month"] == month) & (df_appointments["status"] == STATUS_COMPLETED)]
    return _money(done["total_value"].sum())


def _expenses_total(df_expenses: pd.DataFrame, month: str) -> float:
    if df_expenses.empty:
        return 0.0
    return _money(df_expenses.loc[df_expenses["month"] == month, "amount"].sum())


def monthly_summary(appointments, expenses, month: DateLike, tz: str = None) -> Dict[str, Any]:
    """Receita (agendamentos concluídos), despesas e lucro de um mês."""
    key = month_key(month, tz)
    revenue = _revenue(_appointments_frame(appointments, tz), key)
    spent = _expenses_total(_expenses_frame(expenses, tz), key)
    return {"month": key, "revenue": revenue, "expenses": spent, "profit": _money(revenue - spent)}


def monthly_balance(appointments, expenses, month: DateLike, tz: str = None) -> float:
    return monthly_summary(appointments, expenses, month, tz)["profit"]


def expenses_by_category(expenses, month: DateLike, tz: str = None) -> List[Dict[str, Any]]:
    """Total por categoria no mês, com o percentual sobre o total do período (maior primeiro)."""
    df = _expenses_frame(expenses, tz)
    if df.empty:
        return []
    df = df[df["month"] == month_key(month, tz)]
    if df.empty:
        return []

    totals = df.groupby("category", sort=False)["amount"].sum()
    period_total = totals.sum()
    totals = totals.sort_values(ascending=False, kind="mergesort")
    return [
        {
            "category": category,
            "amount": _money(amount),
            "percentage": round(float(amount / period_total * 100), 2) if period_total > 0 else 0.0,
        }
        for category, amount in totals.items()
    ]


def _client_name(client) -> str:
    if isinstance(client, dict) and client.get("full_name"):
        return client["full_name"]
    return UNKNOWN_CLIENT


def top_clients(appointments, month: DateLike, limit: int = TOP_CLIENTS_LIMIT, tz: str = None) -> List[Dict[str, Any]]:
    """
    Clientes com maior receita de agendamentos concluídos no mês.
    Empates mantêm a ordem em que o cliente aparece na lista de entrada.
    """
    df = _appointments_frame(appointments, tz)
    if df.empty:
        return []
    df = df[(df["month"] == month_key(month, tz)) & (df["status"] == STATUS_COMPLETED)]
    if df.empty:
        return []

    df = df.assign(name=df["client"].map(_client_name))
    grouped = df.groupby("client_id", sort=False).agg(
        name=("name", "first"),
        total=("total_value", "sum"),
        appointments=("total_value", "size"),
    )
    grouped = grouped.sort_values("total", ascending=False, kind="mergesort").head(limit)
    return [
        {
            "client_id": client_id,
            "name": row["name"],
            "total": _money(row["total"]),
            "appointments": int(row["appointments"]),
        }
        for client_id, row in grouped.iterrows()
    ]


def monthly_trend(appointments, expenses, months: int = TREND_MONTHS,
                  reference: Optional[DateLike] = None, tz: str = None) -> List[Dict[str, Any]]:
    """Resumo mensal do mês de referência e dos (months - 1) anteriores, do mais antigo ao mais recente."""
    current = pd.Period(month_key(reference if reference is not None else now_local(tz), tz), freq="M")
    df_appointments = _appointments_frame(appointments, tz)
    df_expenses = _expenses_frame(expenses, tz)

    trend = []
    for offset in range(months - 1, -1, -1):
        key = str(current - offset)
        revenue = _revenue(df_appointments, key)
        spent = _expenses_total(df_expenses, key)
        trend.append({"month": key, "revenue": revenue, "expenses": spent, "profit": _money(revenue - spent)})
    return trend


def monthly_report(appointments, expenses, month: Optional[DateLike] = None,
                   now: Optional[DateLike] = None, tz: str = None) -> Dict[str, Any]:
    now = to_local(now, tz) if now is not None else now_local(tz)
    key = month_key(month if month is not None else now, tz)
    return {
        "month": key,
        "summary": monthly_summary(appointments, expenses, key, tz),
        "expenses_by_category": expenses_by_category(expenses, key, tz),
        "top_clients": top_clients(appointments, key, tz=tz),
        "trend": monthly_trend(appointments, expenses, reference=now, tz=tz),
    }


def upcoming_appointments(appointments, now: Optional[DateLike] = None,
                          limit: int = UPCOMING_LIMIT, tz: str = None) -> List[Dict[str, Any]]:
    """Próximos agendamentos com status 'agendado', do mais próximo ao mais distante."""
    appointments = list(appointments)
    df = _appointments_frame(appointments, tz)
    if df.empty:
        return []
    now = to_local(now, tz) if now is not None else now_local(tz)
    upcoming = df[(df["when"] > now) & (df["status"] == STATUS_SCHEDULED)]
    upcoming = upcoming.sort_values("when", kind="mergesort").head(limit)
    return [appointments[i] for i in upcoming.index]


def appointments_on(appointments, day: DateLike, tz: str = None) -> List[Dict[str, Any]]:
    """Agenda de um dia, em ordem de horário."""
    appointments = list(appointments)
    df = _appointments_frame(appointments, tz)
    if df.empty:
        return []
    target = to_local(day, tz).date()
    on_day = df[df["when"].dt.date == target].sort_values("when", kind="mergesort")
    return [appointments[i] for i in on_day.index]


def dashboard_stats(clients, appointments, expenses, now: Optional[DateLike] = None,
                    tz: str = None) -> Dict[str, Any]:
    appointments = list(appointments)
    now = to_local(now, tz) if now is not None else now_local(tz)
    summary = monthly_summary(appointments, expenses, now, tz)
    return {
        "total_clients": len(list(clients)),
        "today_appointments": len(appointments_on(appointments, now, tz)),
        "monthly_revenue": summary["revenue"],
        "monthly_expenses": summary["expenses"],
        "monthly_balance": summary["profit"],
        "upcoming_appointments": upcoming_appointments(appointments, now, tz=tz),
    }


def filter_expenses(expenses, category: str = None, month: Optional[DateLike] = None,
                    tz: str = None) -> Dict[str, Any]:
    """Despesas filtradas por categoria e/ou mês, na ordem recebida, com o total."""
    expenses = list(expenses)
    df = _expenses_frame(expenses, tz)
    if df.empty:
        return {"expenses": [], "total": 0.0}
    mask = pd.Series(True, index=df.index)
    if category:
        mask &= df["category"] == category
    if month is not None:
        mask &= df["month"] == month_key(month, tz)
    selected = df[mask]
    return {
        "expenses": [expenses[i] for i in selected.index],
        "total": _money(selected["amount"].sum()),
    }


def search_clients(clients, term: str) -> List[Dict[str, Any]]:
    """Clientes cujo nome ou telefone contém o termo (nome sem diferenciar maiúsculas)."""
    term = (term or "").strip()
    if not term:
        return list(clients)
    lowered = term.lower()
    term_digits = digits_only(term)
    found = []
    for client in clients:
        name = (client.get("full_name") or "").lower()
        phone = client.get("phone") or ""
        if lowered in name or term in phone or (term_digits and term_digits in digits_only(phone)):
            found.append(client)
    return found
