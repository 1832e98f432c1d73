# vitrine/core/autorizacao.py
"""
Regras de acesso aos pedidos.

O administrador lê e altera qualquer pedido. O dono lê e altera o próprio
pedido, mas apenas pelas operações de cliente (pagar, cancelar, editar
endereço). Qualquer outro ator recebe AcessoNegadoError; o ator anônimo
recebe NaoAutenticadoError.
"""
from dataclasses import dataclass
from enum import Enum

from vitrine.core.entities import Pedido, Principal
from vitrine.core.exceptions import AcessoNegadoError, NaoAutenticadoError


class Operacao(str, Enum):
    LER = 'ler'
    PAGAR = 'pagar'
    CANCELAR = 'cancelar'
    EDITAR_ENDERECO = 'editar_endereco'
    ENTREGAR = 'entregar'
    FORCAR_STATUS = 'forcar_status'
    AVANCAR_STATUS = 'avancar_status'
    LISTAR_TODOS = 'listar_todos'


OPERACOES_DONO = frozenset({
    Operacao.LER,
    Operacao.PAGAR,
    Operacao.CANCELAR,
    Operacao.EDITAR_ENDERECO,
})


@dataclass(frozen=True)
class Acesso:
    leitura: bool = False
    escrita: bool = False


class GuardaAutorizacao:
    """Decide o que o ator da requisição pode fazer com um pedido."""

    def exigir_autenticado(self, principal: Principal) -> Principal:
        if principal is None or not principal.autenticado:
            raise NaoAutenticadoError()
        return principal

    def pode_acessar(self, principal: Principal, pedido: Pedido) -> Acesso:
        if principal is None or not principal.autenticado:
            return Acesso()
        if principal.is_admin or pedido.pertence_a(principal.usuario_id):
            return Acesso(leitura=True, escrita=True)
        return Acesso()

    def exigir_admin(self, principal: Principal) -> Principal:
        self.exigir_autenticado(principal)
        if not principal.is_admin:
            raise AcessoNegadoError("Operação restrita a administradores.")
        return principal

    def exigir(self, principal: Principal, pedido: Pedido, operacao: Operacao) -> Principal:
        """Levanta erro se o ator não puder executar `operacao` sobre `pedido`."""
        self.exigir_autenticado(principal)
        if principal.is_admin:
            return principal
        if not pedido.pertence_a(principal.usuario_id):
            raise AcessoNegadoError()
        if operacao not in OPERACOES_DONO:
            raise AcessoNegadoError("Operação restrita a administradores.")
        return principal
