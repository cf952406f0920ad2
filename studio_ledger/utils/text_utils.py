# studio_ledger/utils/text_utils.py
import datetime
import re
from typing import Union


def digits_only(s: str) -> str:
    """Mantém só os dígitos. Ex: "(11) 99999-9999" -> "11999999999" """
    return re.sub(r"\D", "", s or "")


def format_phone(phone: Union[str, None]) -> str:
    """Formata telefones brasileiros de 10 ou 11 dígitos; outros valores voltam como vieram.
    Ex: "11999999999" -> "(11) 99999-9999"
    Ex: "1133334444" -> "(11) 3333-4444"
    """
    if not phone:
        return ""
    digits = digits_only(phone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return phone


def format_currency(value: float) -> str:
    """Formata em reais. Ex: 1234.5 -> "R$ 1.234,50" """
    sign = "-" if value < 0 else ""
    inteiro, centavos = f"{abs(value):,.2f}".split(".")
    return f"{sign}R$ {inteiro.replace(',', '.')},{centavos}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%".replace(".", ",")


def parse_amount(text: str) -> Union[float, None]:
    """Lê valores como "150", "150,50", "R$ 1.234,56" ou "80.00". None se não for número."""
    if text is None:
        return None
    cleaned = text.strip().replace("R$", "").replace(" ", "")
    if not cleaned:
        return None
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_month(text: str) -> Union[str, None]:
    """Valida um mês no formato AAAA-MM. Devolve a própria string ou None."""
    try:
        return datetime.datetime.strptime(text.strip(), "%Y-%m").strftime("%Y-%m")
    except (AttributeError, ValueError):
        return None


def parse_date(text: str) -> Union[datetime.date, None]:
    """Aceita AAAA-MM-DD ou DD/MM/AAAA."""
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.datetime.strptime(text.strip(), fmt).date()
        except (AttributeError, ValueError):
            continue
    return None


def parse_datetime(text: str) -> Union[datetime.datetime, None]:
    """Aceita "AAAA-MM-DD HH:MM" ou "DD/MM/AAAA HH:MM"."""
    for fmt in ("%Y-%m-%d %H:%M", "%d/%m/%Y %H:%M", "%Y-%m-%dT%H:%M"):
        try:
            return datetime.datetime.strptime(text.strip(), fmt)
        except (AttributeError, ValueError):
            continue
    return None


def short_id(record_id: str) -> str:
    return (record_id or "")[:8]
