# studio_ledger/core/models.py
from typing import List, Optional, TypedDict

# No código os registros circulam como dicionários, no mesmo formato das
# linhas do Supabase. Estes tipos só documentam esse formato.

CLIENTS = "clients"
PROCEDURES = "procedures"
APPOINTMENTS = "appointments"
APPOINTMENT_PROCEDURES = "appointment_procedures"
EXPENSES = "expenses"

# Enumeração aberta: outros valores vindos do banco são mantidos como estão.
STATUS_SCHEDULED = "agendado"
STATUS_COMPLETED = "concluído"
STATUS_CANCELLED = "cancelado"

EXPENSE_CATEGORIES = [
    "Luz",
    "Aluguel",
    "Internet",
    "Gasolina",
    "Material de Trabalho",
    "Outros",
]


class Client(TypedDict):
    id: str
    full_name: str
    phone: str
    created_at: str


class Procedure(TypedDict):
    id: str
    name: str
    created_at: str


class Appointment(TypedDict, total=False):
    id: str
    client_id: str
    appointment_date: str
    total_value: float
    status: str
    created_at: str
    client: Optional[Client]
    procedures: List[Procedure]


class Expense(TypedDict):
    id: str
    category: str
    amount: float
    expense_date: str
    notes: Optional[str]
    created_at: str
