# studio_ledger/bot/commands/utils.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from telegram import Update
from telegram.ext import ContextTypes

from studio_ledger.core.errors import BackendError, StoreError
from studio_ledger.core.store import CollectionStatus, LedgerStore

logger = logging.getLogger(__name__)


def get_store(context: ContextTypes.DEFAULT_TYPE) -> LedgerStore:
    return context.bot_data["store"]


def split_args(context: ContextTypes.DEFAULT_TYPE) -> List[str]:
    """Argumentos do comando separados por ';'. Ex: "/novo_cliente Ana Lima; 11 98888-7777" """
    text = " ".join(context.args or []).strip()
    if not text:
        return []
    return [part.strip() for part in text.split(";")]


def find_by_prefix(records: Iterable[Dict[str, Any]], prefix: str) -> Optional[Dict[str, Any]]:
    """Registro cujo id começa com o prefixo; None se nenhum ou se mais de um bater."""
    prefix = (prefix or "").strip()
    if not prefix:
        return None
    matches = [r for r in records if r["id"].startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def format_errors(errors: Dict[str, str]) -> str:
    return "⚠️ Corrija os campos abaixo:\n" + "\n".join(f"- {message}" for message in errors.values())


def collection_failed(store: LedgerStore, table: str) -> bool:
    return store.status[table] is CollectionStatus.ERROR


async def reply_store_error(update: Update, error: StoreError) -> None:
    if isinstance(error, BackendError):
        await update.message.reply_text("❌ Ocorreu um erro ao falar com o banco de dados. Tente novamente mais tarde. 😟")
    else:
        await update.message.reply_text(f"❌ {error}")


async def reply_load_error(update: Update) -> None:
    await update.message.reply_text(
        "❌ Não consegui carregar os dados agora. Isso não quer dizer que não existam registros; tente novamente em instantes."
    )


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Envia uma mensagem quando o comando /start é emitido."""
    await update.message.reply_text(
        "Olá! Sou o assistente do seu estúdio. 💅\n\n"
        "Comandos úteis:\n"
        "- /painel para o resumo do dia e do mês.\n"
        "- /agenda para os próximos atendimentos.\n"
        "- /clientes, /procedimentos e /despesas para consultar cadastros.\n"
        "- /relatorio para o relatório financeiro do mês.\n"
        "- /help para ver todos os comandos."
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Envia uma mensagem quando o comando /help é emitido."""
    await update.message.reply_text(
        "Separe os campos com ';'. Ids podem ser abreviados (os 8 primeiros caracteres bastam).\n\n"
        "Clientes:\n"
        "- /clientes [busca]\n"
        "- /novo_cliente Nome; telefone\n"
        "- /editar_cliente id; Nome; telefone\n"
        "- /remover_cliente id\n\n"
        "Procedimentos:\n"
        "- /procedimentos\n"
        "- /novo_procedimento Nome\n"
        "- /editar_procedimento id; Nome\n"
        "- /remover_procedimento id\n\n"
        "Agendamentos:\n"
        "- /agenda [AAAA-MM-DD]\n"
        "- /agendar cliente; AAAA-MM-DD HH:MM; valor; procedimento1, procedimento2\n"
        "- /concluir id, /cancelar id, /remover_agendamento id\n"
        "- /lembretes para agendar lembretes dos próximos atendimentos\n\n"
        "Despesas:\n"
        "- /despesas [AAAA-MM] [categoria]\n"
        "- /nova_despesa categoria; valor; [AAAA-MM-DD]; [observações]\n"
        "- /remover_despesa id\n\n"
        "Relatórios:\n"
        "- /painel\n"
        "- /relatorio [AAAA-MM]"
    )
