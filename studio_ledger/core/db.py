# studio_ledger/core/db.py
import logging
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from studio_ledger.config import SUPABASE_URL, SUPABASE_KEY
from studio_ledger.core.backend import Backend, normalize_appointment
from studio_ledger.core.errors import BackendError
from studio_ledger.core.models import APPOINTMENTS, APPOINTMENT_PROCEDURES

logger = logging.getLogger(__name__)

# Join do PostgREST: cliente pela FK e procedimentos pela tabela de associação
APPOINTMENT_SELECT = "*, client:clients(*), procedures:procedures(*)"


def get_supabase_client(url: str = None, key: str = None) -> Client:
    """Retorna uma instância do cliente Supabase."""
    return create_client(url or SUPABASE_URL, key or SUPABASE_KEY)


class SupabaseBackend(Backend):
    """Backend real: cada método é uma chamada encadeada ao cliente Supabase."""

    def __init__(self, supabase_client: Client):
        self.client = supabase_client

    def select(self, table: str, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        try:
            response = self.client.table(table).select("*").order(order_by, desc=descending).execute()
        except Exception as e:
            raise BackendError(f"Erro ao buscar '{table}': {e}") from e
        return response.data or []

    def select_appointments(self) -> List[Dict[str, Any]]:
        try:
            response = (
                self.client.table(APPOINTMENTS)
                .select(APPOINTMENT_SELECT)
                .order("appointment_date", desc=True)
                .execute()
            )
        except Exception as e:
            raise BackendError(f"Erro ao buscar agendamentos: {e}") from e
        return [normalize_appointment(row) for row in response.data or []]

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.table(table).insert(row).execute()
        except Exception as e:
            raise BackendError(f"Erro ao inserir em '{table}': {e}") from e
        if not response.data:
            raise BackendError(f"O Supabase não devolveu a linha inserida em '{table}'.")
        return response.data[0]

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.table(table).update(fields).eq("id", record_id).execute()
        except Exception as e:
            raise BackendError(f"Erro ao atualizar '{table}' ({record_id}): {e}") from e
        return response.data[0] if response.data else None

    def delete(self, table: str, record_id: str) -> bool:
        try:
            response = self.client.table(table).delete().eq("id", record_id).execute()
        except Exception as e:
            raise BackendError(f"Erro ao remover de '{table}' ({record_id}): {e}") from e
        return bool(response.data)

    def exists(self, table: str, column: str, value: Any) -> bool:
        try:
            response = self.client.table(table).select("id").eq(column, value).limit(1).execute()
        except Exception as e:
            raise BackendError(f"Erro ao consultar '{table}': {e}") from e
        return bool(response.data)

    def get_procedure_ids(self, appointment_id: str) -> List[str]:
        try:
            response = (
                self.client.table(APPOINTMENT_PROCEDURES)
                .select("procedure_id")
                .eq("appointment_id", appointment_id)
                .execute()
            )
        except Exception as e:
            raise BackendError(f"Erro ao buscar procedimentos do agendamento {appointment_id}: {e}") from e
        return [row["procedure_id"] for row in response.data or []]

    def replace_appointment_procedures(self, appointment_id: str, procedure_ids: List[str]) -> None:
        previous_ids = self.get_procedure_ids(appointment_id)
        try:
            self.client.table(APPOINTMENT_PROCEDURES).delete().eq("appointment_id", appointment_id).execute()
        except Exception as e:
            raise BackendError(f"Erro ao limpar procedimentos do agendamento {appointment_id}: {e}") from e

        if not procedure_ids:
            return
        try:
            self.client.table(APPOINTMENT_PROCEDURES).insert(_join_rows(appointment_id, procedure_ids)).execute()
        except Exception as e:
            logger.warning("Falha ao gravar procedimentos de %s; restaurando os anteriores", appointment_id)
            self._restore_procedures(appointment_id, previous_ids)
            raise BackendError(f"Erro ao gravar procedimentos do agendamento {appointment_id}: {e}") from e

    def _restore_procedures(self, appointment_id: str, procedure_ids: List[str]) -> None:
        if not procedure_ids:
            return
        try:
            self.client.table(APPOINTMENT_PROCEDURES).insert(_join_rows(appointment_id, procedure_ids)).execute()
        except Exception:
            logger.exception("Não foi possível restaurar os procedimentos do agendamento %s", appointment_id)


def _join_rows(appointment_id: str, procedure_ids: List[str]) -> List[Dict[str, str]]:
    return [{"appointment_id": appointment_id, "procedure_id": pid} for pid in procedure_ids]
