# studio_ledger/utils/validation.py
# Validação dos formulários, feita antes de qualquer chamada à store.
# Cada função devolve {campo: mensagem}; dicionário vazio significa válido.
from typing import Any, Dict, Iterable

from studio_ledger.core.models import EXPENSE_CATEGORIES
from studio_ledger.utils.text_utils import digits_only


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _positive(value) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def validate_client(fields: Dict[str, Any]) -> Dict[str, str]:
    errors = {}
    if _is_blank(fields.get("full_name")):
        errors["full_name"] = "Nome completo é obrigatório"

    phone = fields.get("phone")
    if _is_blank(phone):
        errors["phone"] = "Telefone é obrigatório"
    elif len(digits_only(phone)) not in (10, 11):
        errors["phone"] = "Telefone deve ter 10 ou 11 dígitos"
    return errors


def validate_procedure(fields: Dict[str, Any]) -> Dict[str, str]:
    if _is_blank(fields.get("name")):
        return {"name": "Nome do procedimento é obrigatório"}
    return {}


def validate_appointment(fields: Dict[str, Any], procedure_ids: Iterable[str]) -> Dict[str, str]:
    errors = {}
    if _is_blank(fields.get("client_id")):
        errors["client_id"] = "Cliente é obrigatório"
    if not list(procedure_ids or []):
        errors["procedure_ids"] = "Pelo menos um procedimento deve ser selecionado"
    if _is_blank(fields.get("appointment_date")):
        errors["appointment_date"] = "Data e hora são obrigatórias"
    if not _positive(fields.get("total_value")):
        errors["total_value"] = "Valor deve ser maior que zero"
    return errors


def validate_expense(fields: Dict[str, Any]) -> Dict[str, str]:
    errors = {}
    if _is_blank(fields.get("category")):
        errors["category"] = "Categoria é obrigatória"
    elif fields["category"] not in EXPENSE_CATEGORIES:
        errors["category"] = f"Categoria inválida. Use uma de: {', '.join(EXPENSE_CATEGORIES)}"
    if not _positive(fields.get("amount")):
        errors["amount"] = "Valor deve ser maior que zero"
    if _is_blank(fields.get("expense_date")):
        errors["expense_date"] = "Data é obrigatória"
    return errors
