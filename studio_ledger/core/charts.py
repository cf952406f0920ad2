# studio_ledger/core/charts.py
import io
from typing import Any, Dict, List, Union

import matplotlib

matplotlib.use("Agg")  # sem display: os gráficos só são gravados em PNG

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd

# Configurações globais para os gráficos (cores, fontes, etc.)
plt.style.use('seaborn-v0_8-darkgrid')
plt.rcParams['font.family'] = 'sans-serif'
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['legend.fontsize'] = 10

# Mesma paleta dos relatórios do app
COLORS = {
    'Receita': '#10b981',
    'Despesas': '#ef4444',
    'Lucro': '#8b5cf6',
    'Fatias': ['#ec4899', '#8b5cf6', '#06b6d4', '#10b981', '#f59e0b', '#ef4444'],
}

TREND_LABELS = {'revenue': 'Receita', 'expenses': 'Despesas', 'profit': 'Lucro'}


def _to_png(fig) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=150)
    buf.seek(0)
    plt.close(fig)
    return buf


def generate_trend_chart(trend: List[Dict[str, Any]]) -> Union[io.BytesIO, None]:
    """Barras de receita, despesas e lucro por mês (saída de reports.monthly_trend)."""
    if not trend:
        return None

    df = pd.DataFrame(trend).set_index('month')[list(TREND_LABELS)].rename(columns=TREND_LABELS)
    if not df.abs().to_numpy().any():
        return None

    fig, ax = plt.subplots(figsize=(12, 7))
    df.plot(kind='bar', ax=ax, color=[COLORS[label] for label in df.columns])

    ax.set_title('Receita x Despesas - últimos meses', fontsize=16, fontweight='bold')
    ax.set_ylabel('Valor (R$)')
    ax.set_xlabel('Mês')
    ax.tick_params(axis='x', rotation=45)
    ax.legend(title='Tipo')
    ax.grid(axis='y', linestyle='--', alpha=0.7)

    for container in ax.containers:
        ax.bar_label(container, fmt='R$%.2f', fontsize=8, padding=3)
    ax.yaxis.set_major_formatter(mticker.FormatStrFormatter('R$%.2f'))

    fig.tight_layout()
    return _to_png(fig)


def generate_category_chart(breakdown: List[Dict[str, Any]]) -> Union[io.BytesIO, None]:
    """Pizza das despesas por categoria (saída de reports.expenses_by_category)."""
    if not breakdown:
        return None

    totals = pd.Series({item['category']: item['amount'] for item in breakdown})
    totals = totals[totals > 0]
    if totals.empty:
        return None

    fig, ax = plt.subplots(figsize=(10, 7))
    wedges, _texts, _autotexts = ax.pie(
        totals,
        autopct='%1.1f%%',
        startangle=90,
        pctdistance=0.8,
        colors=COLORS['Fatias'][:len(totals)] if len(totals) <= len(COLORS['Fatias']) else None,
    )
    ax.set_title('Despesas por Categoria', fontsize=16, fontweight='bold')
    ax.axis('equal')

    labels = [f"{name}: R${value:.2f}" for name, value in totals.items()]
    ax.legend(wedges, labels, title="Categoria", loc="center left", bbox_to_anchor=(1, 0, 0.5, 1))

    fig.tight_layout()
    return _to_png(fig)
