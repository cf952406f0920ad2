# studio_ledger/bot/commands/reports.py
from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger.bot.commands.appointments import appointment_line
from studio_ledger.bot.commands.utils import collection_failed, get_store, reply_load_error
from studio_ledger.core import charts, reports
from studio_ledger.core.models import APPOINTMENTS, CLIENTS, EXPENSES
from studio_ledger.utils.text_utils import format_currency, format_percentage, parse_month


async def dashboard_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Resumo do painel: clientes, atendimentos de hoje, saldo do mês e próximos horários."""
    store = get_store(context)
    store.fetch_clients()
    store.fetch_appointments()
    store.fetch_expenses()
    if any(collection_failed(store, table) for table in (CLIENTS, APPOINTMENTS, EXPENSES)):
        await reply_load_error(update)
        return

    stats = reports.dashboard_stats(store.clients, store.appointments, store.expenses)
    balance = stats["monthly_balance"]
    message = (
        "📊 Painel\n\n"
        f"Clientes: {stats['total_clients']}\n"
        f"Atendimentos hoje: {stats['today_appointments']}\n"
        f"Receita do mês: {format_currency(stats['monthly_revenue'])}\n"
        f"Despesas do mês: {format_currency(stats['monthly_expenses'])}\n"
        f"{'Lucro' if balance >= 0 else 'Prejuízo'} do mês: {format_currency(balance)}\n"
    )
    if stats["upcoming_appointments"]:
        message += "\nPróximos atendimentos:\n" + "\n".join(appointment_line(a) for a in stats["upcoming_appointments"])
    else:
        message += "\nNenhum atendimento agendado."
    await update.message.reply_text(message)


def format_report(report) -> str:
    summary = report["summary"]
    lines = [
        f"📈 Relatório de {report['month']}",
        "",
        f"Receita: {format_currency(summary['revenue'])}",
        f"Despesas: {format_currency(summary['expenses'])}",
        f"{'Lucro' if summary['profit'] >= 0 else 'Prejuízo'}: {format_currency(summary['profit'])}",
    ]
    if report["expenses_by_category"]:
        lines += ["", "Despesas por categoria:"]
        lines += [
            f"• {item['category']}: {format_currency(item['amount'])} ({format_percentage(item['percentage'])})"
            for item in report["expenses_by_category"]
        ]
    if report["top_clients"]:
        lines += ["", "Melhores clientes:"]
        lines += [
            f"{position}. {item['name']}: {format_currency(item['total'])} ({item['appointments']} atendimento(s))"
            for position, item in enumerate(report["top_clients"], start=1)
        ]
    lines += ["", "Últimos 6 meses:"]
    lines += [
        f"• {item['month']}: receita {format_currency(item['revenue'])}, despesas {format_currency(item['expenses'])}"
        for item in report["trend"]
    ]
    return "\n".join(lines)


async def report_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Relatório financeiro de um mês (/relatorio AAAA-MM), com gráficos."""
    month = None
    if context.args:
        month = parse_month(context.args[0])
        if month is None:
            await update.message.reply_text("Mês inválido. Use AAAA-MM (ex: 2025-03).")
            return

    store = get_store(context)
    store.fetch_appointments()
    store.fetch_expenses()
    if any(collection_failed(store, table) for table in (APPOINTMENTS, EXPENSES)):
        await reply_load_error(update)
        return

    await update.message.reply_text("Gerando seu relatório, por favor aguarde...")
    report = reports.monthly_report(store.appointments, store.expenses, month)
    await update.message.reply_text(format_report(report))

    trend_chart = charts.generate_trend_chart(report["trend"])
    if trend_chart:
        trend_chart.name = "tendencia_mensal.png"
        await update.message.reply_photo(photo=trend_chart, caption="Receita x despesas nos últimos meses")

    category_chart = charts.generate_category_chart(report["expenses_by_category"])
    if category_chart:
        category_chart.name = "despesas_por_categoria.png"
        await update.message.reply_photo(photo=category_chart, caption=f"Despesas por categoria em {report['month']}")
