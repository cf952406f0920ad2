# studio_ledger/core/backend.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Backend(ABC):
    """
    Capacidades que a store usa do banco.

    Há duas implementações: SupabaseBackend (db.py), que fala com o banco real,
    e FixtureBackend (fixtures.py), em memória, usada quando o Supabase não está
    configurado. As duas devolvem linhas no mesmo formato; a escolha é feita uma
    única vez, na inicialização (ver store.build_store).

    Toda falha de comunicação deve sair como BackendError.
    """

    @abstractmethod
    def select(self, table: str, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def select_appointments(self) -> List[Dict[str, Any]]:
        """Agendamentos com 'client' e 'procedures' resolvidos, mais recentes primeiro."""

    @abstractmethod
    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insere e devolve a linha gravada (com id e created_at do servidor)."""

    @abstractmethod
    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Atualiza parcialmente; None se o id não existir."""

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Remove a linha; False se o id não existir."""

    @abstractmethod
    def exists(self, table: str, column: str, value: Any) -> bool:
        ...

    @abstractmethod
    def get_procedure_ids(self, appointment_id: str) -> List[str]:
        ...

    @abstractmethod
    def replace_appointment_procedures(self, appointment_id: str, procedure_ids: List[str]) -> None:
        """
        Troca todo o conjunto de procedimentos do agendamento (apaga e reinsere).
        Se falhar no meio, o conjunto anterior deve ser restaurado.
        """


def normalize_appointment(row: Dict[str, Any]) -> Dict[str, Any]:
    """Garante as chaves 'client' e 'procedures' com o mesmo formato nos dois backends."""
    appointment = dict(row)
    appointment["client"] = appointment.get("client") or None
    procedures = appointment.get("procedures") or []
    appointment["procedures"] = sorted(procedures, key=lambda p: p.get("name") or "")
    return appointment
