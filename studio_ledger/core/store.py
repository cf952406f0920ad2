# studio_ledger/core/store.py
"""
Store do estúdio: cópia local das quatro coleções (clientes, procedimentos,
agendamentos e despesas) e as operações de CRUD que passam pelo backend.

Regras:
- fetch_* substitui a coleção inteira e nunca levanta erro; em caso de falha
  a coleção fica vazia e o status vai para ERROR ("estado desconhecido",
  não "zero registros").
- add/update/delete propagam qualquer erro e só mexem na cópia local depois
  que o backend confirmou a operação.
- Clientes e procedimentos referenciados por agendamentos não podem ser
  removidos (ReferentialIntegrityError), nada é apagado em cascata.
- Toda mutação de agendamento recarrega a coleção de agendamentos inteira,
  já com cliente e procedimentos resolvidos.
"""
import enum
import logging
from typing import Any, Dict, Iterable, List, Optional

from studio_ledger import config
from studio_ledger.core.backend import Backend
from studio_ledger.core.errors import BackendError, RecordNotFoundError, ReferentialIntegrityError, StoreError
from studio_ledger.core.models import (
    APPOINTMENTS, APPOINTMENT_PROCEDURES, CLIENTS, EXPENSES, PROCEDURES,
    Appointment, Client, Expense, Procedure,
)

logger = logging.getLogger(__name__)


class CollectionStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


# Ordem de cada coleção: (coluna, decrescente)
FETCH_ORDER = {
    CLIENTS: ("created_at", True),
    PROCEDURES: ("name", False),
    APPOINTMENTS: ("appointment_date", True),
    EXPENSES: ("created_at", True),
}

# Quem referencia cada entidade: (tabela, coluna, mensagem ao usuário)
REFERENCED_BY = {
    CLIENTS: (
        APPOINTMENTS,
        "client_id",
        "Este cliente não pode ser excluído pois possui agendamentos associados.",
    ),
    PROCEDURES: (
        APPOINTMENT_PROCEDURES,
        "procedure_id",
        "Este procedimento não pode ser excluído pois está associado a um ou mais agendamentos.",
    ),
}


class LedgerStore:
    def __init__(self, backend: Backend):
        self.backend = backend
        self.collections: Dict[str, List[Dict[str, Any]]] = {table: [] for table in FETCH_ORDER}
        self.status: Dict[str, CollectionStatus] = {table: CollectionStatus.IDLE for table in FETCH_ORDER}
        self.last_error: Dict[str, Optional[Exception]] = {table: None for table in FETCH_ORDER}

    @property
    def clients(self) -> List[Client]:
        return self.collections[CLIENTS]

    @property
    def procedures(self) -> List[Procedure]:
        return self.collections[PROCEDURES]

    @property
    def appointments(self) -> List[Appointment]:
        return self.collections[APPOINTMENTS]

    @property
    def expenses(self) -> List[Expense]:
        return self.collections[EXPENSES]

    @property
    def loading(self) -> bool:
        return any(status is CollectionStatus.LOADING for status in self.status.values())

    # --- Operações genéricas ---

    def _fetch(self, table: str) -> List[Dict[str, Any]]:
        self.status[table] = CollectionStatus.LOADING
        try:
            if table == APPOINTMENTS:
                rows = self.backend.select_appointments()
            else:
                order_by, descending = FETCH_ORDER[table]
                rows = self.backend.select(table, order_by, descending)
        except BackendError as e:
            logger.error("Erro ao buscar %s: %s", table, e)
            self.collections[table] = []
            self.status[table] = CollectionStatus.ERROR
            self.last_error[table] = e
            return []

        self.collections[table] = rows
        self.status[table] = CollectionStatus.READY
        self.last_error[table] = None
        return rows

    def _get(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        return next((row for row in self.collections[table] if row["id"] == record_id), None)

    def _add(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            record = self.backend.insert(table, dict(fields))
        except BackendError as e:
            logger.error("Erro ao adicionar em %s: %s", table, e)
            raise
        self.collections[table] = [record] + self.collections[table]
        return record

    def _update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            row = self.backend.update(table, record_id, dict(fields))
        except BackendError as e:
            logger.error("Erro ao atualizar %s (%s): %s", table, record_id, e)
            raise
        if row is None:
            raise RecordNotFoundError(table, record_id)

        merged = {**(self._get(table, record_id) or {}), **row}
        self.collections[table] = [merged if r["id"] == record_id else r for r in self.collections[table]]
        return merged

    def _delete(self, table: str, record_id: str) -> None:
        if table in REFERENCED_BY:
            ref_table, ref_column, message = REFERENCED_BY[table]
            if self.backend.exists(ref_table, ref_column, record_id):
                raise ReferentialIntegrityError(message)
        try:
            deleted = self.backend.delete(table, record_id)
        except BackendError as e:
            logger.error("Erro ao remover de %s (%s): %s", table, record_id, e)
            raise
        if not deleted:
            raise RecordNotFoundError(table, record_id)
        self.collections[table] = [r for r in self.collections[table] if r["id"] != record_id]

    def fetch_all(self) -> None:
        for table in FETCH_ORDER:
            self._fetch(table)

    # --- Clientes ---

    def fetch_clients(self) -> List[Dict[str, Any]]:
        return self._fetch(CLIENTS)

    def get_client(self, client_id: str) -> Optional[Dict[str, Any]]:
        return self._get(CLIENTS, client_id)

    def add_client(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._add(CLIENTS, fields)

    def update_client(self, client_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(CLIENTS, client_id, fields)

    def delete_client(self, client_id: str) -> None:
        self._delete(CLIENTS, client_id)

    # --- Procedimentos ---

    def fetch_procedures(self) -> List[Dict[str, Any]]:
        return self._fetch(PROCEDURES)

    def get_procedure(self, procedure_id: str) -> Optional[Dict[str, Any]]:
        return self._get(PROCEDURES, procedure_id)

    def add_procedure(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._add(PROCEDURES, fields)

    def update_procedure(self, procedure_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(PROCEDURES, procedure_id, fields)

    def delete_procedure(self, procedure_id: str) -> None:
        self._delete(PROCEDURES, procedure_id)

    # --- Agendamentos ---

    def fetch_appointments(self) -> List[Dict[str, Any]]:
        return self._fetch(APPOINTMENTS)

    def get_appointment(self, appointment_id: str) -> Optional[Dict[str, Any]]:
        return self._get(APPOINTMENTS, appointment_id)

    def add_appointment(self, fields: Dict[str, Any], procedure_ids: Iterable[str] = ()) -> Dict[str, Any]:
        procedure_ids = list(procedure_ids)
        try:
            record = self.backend.insert(APPOINTMENTS, dict(fields))
        except BackendError as e:
            logger.error("Erro ao adicionar agendamento: %s", e)
            raise

        if procedure_ids:
            try:
                self.backend.replace_appointment_procedures(record["id"], procedure_ids)
            except BackendError as e:
                logger.error("Erro ao associar procedimentos ao agendamento %s: %s", record["id"], e)
                self._discard_appointment(record["id"])
                raise

        self.fetch_appointments()
        return self.get_appointment(record["id"]) or record

    def update_appointment(
        self,
        appointment_id: str,
        fields: Dict[str, Any],
        procedure_ids: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Atualiza campos do agendamento e, se procedure_ids vier (mesmo vazio),
        troca o conjunto inteiro de procedimentos.

        A troca dos procedimentos vem primeiro; se a gravação dos campos falhar
        depois, o conjunto anterior (lido do backend, não do cache) é restaurado.
        """
        if procedure_ids is not None:
            procedure_ids = list(procedure_ids)
        previous_ids = None
        try:
            if (procedure_ids is not None or not fields) and not self.backend.exists(
                APPOINTMENTS, "id", appointment_id
            ):
                raise RecordNotFoundError(APPOINTMENTS, appointment_id)
            if procedure_ids is not None:
                previous_ids = self.backend.get_procedure_ids(appointment_id)
                self.backend.replace_appointment_procedures(appointment_id, procedure_ids)
        except BackendError as e:
            logger.error("Erro ao trocar procedimentos do agendamento %s: %s", appointment_id, e)
            raise

        row = None
        if fields:
            try:
                row = self.backend.update(APPOINTMENTS, appointment_id, dict(fields))
                if row is None:
                    raise RecordNotFoundError(APPOINTMENTS, appointment_id)
            except StoreError as e:
                logger.error("Erro ao atualizar agendamento %s: %s", appointment_id, e)
                if previous_ids is not None:
                    self._restore_procedures(appointment_id, previous_ids)
                raise

        self.fetch_appointments()
        return self.get_appointment(appointment_id) or row

    def delete_appointment(self, appointment_id: str) -> None:
        previous_ids = self.backend.get_procedure_ids(appointment_id)
        if previous_ids:
            self.backend.replace_appointment_procedures(appointment_id, [])
        try:
            self._delete(APPOINTMENTS, appointment_id)
        except StoreError:
            if previous_ids:
                self._restore_procedures(appointment_id, previous_ids)
            raise
        self.fetch_appointments()

    def _discard_appointment(self, appointment_id: str) -> None:
        try:
            self.backend.delete(APPOINTMENTS, appointment_id)
        except BackendError:
            logger.exception("Agendamento %s ficou gravado sem procedimentos", appointment_id)

    def _restore_procedures(self, appointment_id: str, procedure_ids: List[str]) -> None:
        try:
            self.backend.replace_appointment_procedures(appointment_id, procedure_ids)
        except BackendError:
            logger.exception("Não foi possível restaurar os procedimentos do agendamento %s", appointment_id)

    # --- Despesas ---

    def fetch_expenses(self) -> List[Dict[str, Any]]:
        return self._fetch(EXPENSES)

    def get_expense(self, expense_id: str) -> Optional[Dict[str, Any]]:
        return self._get(EXPENSES, expense_id)

    def add_expense(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._add(EXPENSES, fields)

    def update_expense(self, expense_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(EXPENSES, expense_id, fields)

    def delete_expense(self, expense_id: str) -> None:
        self._delete(EXPENSES, expense_id)


def build_store(url: str = None, key: str = None) -> LedgerStore:
    """Escolhe o backend uma única vez: Supabase se configurado, senão dados de exemplo."""
    if config.is_backend_configured(url, key):
        from studio_ledger.core.db import SupabaseBackend, get_supabase_client

        logger.info("Usando o Supabase como backend")
        return LedgerStore(SupabaseBackend(get_supabase_client(url, key)))

    from studio_ledger.core.fixtures import FixtureBackend

    logger.warning("Supabase não configurado; usando dados de exemplo em memória")
    return LedgerStore(FixtureBackend())
