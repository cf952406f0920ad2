# studio_ledger/core/fixtures.py
import copy
import datetime
import logging
import uuid
from typing import Any, Dict, List, Optional

from studio_ledger.core.backend import Backend, normalize_appointment
from studio_ledger.core.errors import BackendError
from studio_ledger.core.models import (
    APPOINTMENTS, APPOINTMENT_PROCEDURES, CLIENTS, EXPENSES, PROCEDURES,
    STATUS_COMPLETED, STATUS_SCHEDULED,
)

logger = logging.getLogger(__name__)

# Chaves estrangeiras conferidas como o Postgres faria: (tabela, coluna) -> tabela referenciada
FOREIGN_KEYS = {
    (APPOINTMENTS, "client_id"): CLIENTS,
    (APPOINTMENT_PROCEDURES, "appointment_id"): APPOINTMENTS,
    (APPOINTMENT_PROCEDURES, "procedure_id"): PROCEDURES,
}


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class FixtureBackend(Backend):
    """
    Backend em memória para quando o Supabase não está configurado.

    Devolve linhas no mesmo formato do SupabaseBackend (inclusive os joins de
    agendamento) e recusa as mesmas violações de chave estrangeira, para que a
    store se comporte igual com qualquer um dos dois.
    """

    def __init__(self, seed: bool = True):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            CLIENTS: [],
            PROCEDURES: [],
            APPOINTMENTS: [],
            APPOINTMENT_PROCEDURES: [],
            EXPENSES: [],
        }
        if seed:
            self._seed()

    def _seed(self) -> None:
        now = _now()
        maria = self.insert(CLIENTS, {"full_name": "Maria Silva", "phone": "(11) 99999-9999"})
        ana = self.insert(CLIENTS, {"full_name": "Ana Santos", "phone": "(11) 88888-8888"})
        cilios = self.insert(PROCEDURES, {"name": "Extensão de Cílios"})
        sobrancelhas = self.insert(PROCEDURES, {"name": "Design de Sobrancelhas"})

        amanha = self.insert(APPOINTMENTS, {
            "client_id": maria["id"],
            "appointment_date": (now + datetime.timedelta(days=1)).isoformat(),
            "total_value": 150.0,
            "status": STATUS_SCHEDULED,
        })
        hoje = self.insert(APPOINTMENTS, {
            "client_id": ana["id"],
            "appointment_date": now.isoformat(),
            "total_value": 80.0,
            "status": STATUS_COMPLETED,
        })
        self.replace_appointment_procedures(amanha["id"], [cilios["id"]])
        self.replace_appointment_procedures(hoje["id"], [sobrancelhas["id"]])

        self.insert(EXPENSES, {
            "category": "Material de Trabalho",
            "amount": 200.0,
            "expense_date": now.date().isoformat(),
            "notes": "Compras de produtos",
        })
        logger.info("Backend de exemplo carregado com dados fixos")

    def _table(self, table: str) -> List[Dict[str, Any]]:
        try:
            return self.tables[table]
        except KeyError:
            raise BackendError(f"Tabela desconhecida: '{table}'") from None

    def _find(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        return next((row for row in self._table(table) if row["id"] == record_id), None)

    def _check_foreign_keys(self, table: str, row: Dict[str, Any]) -> None:
        for (fk_table, column), referenced in FOREIGN_KEYS.items():
            if fk_table == table and column in row and self._find(referenced, row[column]) is None:
                raise BackendError(
                    f"violação de chave estrangeira: {table}.{column} = '{row[column]}' não existe em '{referenced}'"
                )

    def _check_not_referenced(self, table: str, record_id: str) -> None:
        for (fk_table, column), referenced in FOREIGN_KEYS.items():
            if referenced == table and self.exists(fk_table, column, record_id):
                raise BackendError(
                    f"violação de chave estrangeira: '{record_id}' ainda é referenciado por {fk_table}.{column}"
                )

    def select(self, table: str, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        rows = sorted(self._table(table), key=lambda row: row.get(order_by) or "", reverse=descending)
        return copy.deepcopy(rows)

    def select_appointments(self) -> List[Dict[str, Any]]:
        procedures_by_id = {p["id"]: p for p in self._table(PROCEDURES)}
        appointments = []
        for row in self.select(APPOINTMENTS, "appointment_date", descending=True):
            row["client"] = copy.deepcopy(self._find(CLIENTS, row["client_id"]))
            row["procedures"] = [
                copy.deepcopy(procedures_by_id[pid])
                for pid in self.get_procedure_ids(row["id"])
                if pid in procedures_by_id
            ]
            appointments.append(normalize_appointment(row))
        return appointments

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._check_foreign_keys(table, row)
        record = {"id": _new_id(), **row}
        if table != APPOINTMENT_PROCEDURES:
            record.setdefault("created_at", _now().isoformat())
        self._table(table).append(record)
        return copy.deepcopy(record)

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        record = self._find(table, record_id)
        if record is None:
            return None
        self._check_foreign_keys(table, fields)
        record.update({k: v for k, v in fields.items() if k not in ("id", "created_at")})
        return copy.deepcopy(record)

    def delete(self, table: str, record_id: str) -> bool:
        record = self._find(table, record_id)
        if record is None:
            return False
        self._check_not_referenced(table, record_id)
        self._table(table).remove(record)
        return True

    def exists(self, table: str, column: str, value: Any) -> bool:
        return any(row.get(column) == value for row in self._table(table))

    def get_procedure_ids(self, appointment_id: str) -> List[str]:
        return [
            row["procedure_id"]
            for row in self._table(APPOINTMENT_PROCEDURES)
            if row["appointment_id"] == appointment_id
        ]

    def replace_appointment_procedures(self, appointment_id: str, procedure_ids: List[str]) -> None:
        new_rows = [{"appointment_id": appointment_id, "procedure_id": pid} for pid in procedure_ids]
        # Confere tudo antes de mexer na tabela: a troca é tudo ou nada
        for row in new_rows:
            self._check_foreign_keys(APPOINTMENT_PROCEDURES, row)
        joins = self._table(APPOINTMENT_PROCEDURES)
        joins[:] = [row for row in joins if row["appointment_id"] != appointment_id]
        joins.extend({"id": _new_id(), **row} for row in new_rows)
