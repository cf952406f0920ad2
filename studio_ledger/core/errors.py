# studio_ledger/core/errors.py


class StoreError(Exception):
    """Erro base da store."""


class BackendError(StoreError):
    """Falha na chamada ao backend (rede, PostgREST, constraint...)."""


class RecordNotFoundError(StoreError):
    def __init__(self, table: str, record_id: str):
        super().__init__(f"Registro '{record_id}' não encontrado em '{table}'.")
        self.table = table
        self.record_id = record_id


class ReferentialIntegrityError(StoreError):
    """A exclusão deixaria agendamentos apontando para um registro inexistente."""
