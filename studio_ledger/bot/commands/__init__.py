# studio_ledger/bot/commands/__init__.py

from .utils import start_command, help_command
from .appointments import (
    agenda_command,
    cancel_command,
    complete_command,
    delete_appointment_command,
    reminders_command,
    schedule_command,
)
from .clients import clients_command, delete_client_command, edit_client_command, new_client_command
from .expenses import delete_expense_command, expenses_command, new_expense_command
from .procedures import (
    delete_procedure_command,
    edit_procedure_command,
    new_procedure_command,
    procedures_command,
)
from .reports import dashboard_command, report_command

# Nome do comando no Telegram -> handler
ALL_COMMANDS = {
    "start": start_command,
    "help": help_command,
    "painel": dashboard_command,
    "clientes": clients_command,
    "novo_cliente": new_client_command,
    "editar_cliente": edit_client_command,
    "remover_cliente": delete_client_command,
    "procedimentos": procedures_command,
    "novo_procedimento": new_procedure_command,
    "editar_procedimento": edit_procedure_command,
    "remover_procedimento": delete_procedure_command,
    "agenda": agenda_command,
    "agendar": schedule_command,
    "concluir": complete_command,
    "cancelar": cancel_command,
    "remover_agendamento": delete_appointment_command,
    "lembretes": reminders_command,
    "despesas": expenses_command,
    "nova_despesa": new_expense_command,
    "remover_despesa": delete_expense_command,
    "relatorio": report_command,
}
