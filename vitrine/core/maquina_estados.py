# vitrine/core/maquina_estados.py
"""
Máquina de estados do pedido.

Fluxo normal: Placed -> Processing -> Shipped -> Out for delivery -> Delivered.
Cancelled é alcançável a partir de Placed e Processing, e cancelar de novo
não falha. Delivered e Cancelled são estados finais.

O status e a flag de entrega (esta_entregue) são independentes: marcar como
entregue não altera o status, e vice-versa.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from vitrine.core.autorizacao import GuardaAutorizacao, Operacao
from vitrine.core.entities import Pedido, Principal, ResultadoPagamento, StatusPedido
from vitrine.core.exceptions import ConflitoEstadoError

logger = logging.getLogger(__name__)

S = StatusPedido

FLUXO_NORMAL = (S.PLACED, S.PROCESSING, S.SHIPPED, S.OUT_FOR_DELIVERY, S.DELIVERED)
ESTADOS_FINAIS = frozenset({S.DELIVERED, S.CANCELLED})
# Depois do envio o pedido não pode mais ser cancelado nem ter o endereço alterado
ESTADOS_ENVIADOS = frozenset({S.SHIPPED, S.OUT_FOR_DELIVERY, S.DELIVERED})

TRANSICOES = {
    S.PLACED: frozenset({S.PROCESSING, S.CANCELLED}),
    S.PROCESSING: frozenset({S.SHIPPED, S.CANCELLED}),
    S.SHIPPED: frozenset({S.OUT_FOR_DELIVERY}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED}),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
}


def agora() -> datetime:
    return datetime.now(timezone.utc)


class MaquinaEstadosPedido:
    """Aplica as transições do pedido, verificando quem pode executá-las."""

    def __init__(self, guarda: Optional[GuardaAutorizacao] = None, relogio: Callable[[], datetime] = agora):
        self.guarda = guarda or GuardaAutorizacao()
        self.relogio = relogio

    # --- Consultas ---

    @staticmethod
    def pode_cancelar(pedido: Pedido) -> bool:
        return pedido.status not in ESTADOS_ENVIADOS

    @staticmethod
    def pode_editar_endereco(pedido: Pedido) -> bool:
        return pedido.status not in ESTADOS_ENVIADOS

    @staticmethod
    def proximo_status(status: StatusPedido) -> Optional[StatusPedido]:
        if status not in FLUXO_NORMAL or status == S.DELIVERED:
            return None
        return FLUXO_NORMAL[FLUXO_NORMAL.index(status) + 1]

    # --- Transições ---

    def marcar_pago(self, principal: Principal, pedido: Pedido, resultado: ResultadoPagamento) -> Pedido:
        self.guarda.exigir(principal, pedido, Operacao.PAGAR)
        if pedido.status in ESTADOS_FINAIS:
            self._rejeitar(pedido, f"Não é possível pagar um pedido com status '{pedido.status.value}'.")
        pedido.esta_pago = True
        pedido.pago_em = self.relogio()
        pedido.resultado_pagamento = resultado
        logger.info("Pedido %s marcado como pago (transação %s).", pedido.id, resultado.id)
        return pedido

    def marcar_entregue(self, principal: Principal, pedido: Pedido) -> Pedido:
        self.guarda.exigir(principal, pedido, Operacao.ENTREGAR)
        pedido.esta_entregue = True
        pedido.entregue_em = self.relogio()
        logger.info("Pedido %s marcado como entregue (status %s).", pedido.id, pedido.status.value)
        return pedido

    def forcar_status(self, principal: Principal, pedido: Pedido, novo_status) -> Pedido:
        """Sobrescreve o status sem consultar a tabela de transições (uso administrativo)."""
        self.guarda.exigir(principal, pedido, Operacao.FORCAR_STATUS)
        novo = StatusPedido.de_texto(novo_status)
        logger.info("Status do pedido %s forçado de %s para %s.", pedido.id, pedido.status.value, novo.value)
        pedido.status = novo
        return pedido

    def transicionar(self, principal: Principal, pedido: Pedido, destino=None) -> Pedido:
        """Move o pedido respeitando TRANSICOES. Sem destino, avança no fluxo normal."""
        self.guarda.exigir(principal, pedido, Operacao.AVANCAR_STATUS)
        if destino is None:
            novo = self.proximo_status(pedido.status)
            if novo is None:
                self._rejeitar(pedido, f"O pedido com status '{pedido.status.value}' não pode avançar.")
        else:
            novo = StatusPedido.de_texto(destino)
            if novo not in TRANSICOES[pedido.status]:
                self._rejeitar(
                    pedido,
                    f"Transição de '{pedido.status.value}' para '{novo.value}' não permitida.",
                )
        logger.info("Pedido %s: %s -> %s.", pedido.id, pedido.status.value, novo.value)
        pedido.status = novo
        return pedido

    def cancelar(self, principal: Principal, pedido: Pedido) -> Pedido:
        """Cancelar um pedido já cancelado apenas reafirma o status."""
        self.guarda.exigir(principal, pedido, Operacao.CANCELAR)
        if not self.pode_cancelar(pedido):
            self._rejeitar(pedido, "Não é possível cancelar um pedido que já foi enviado ou entregue.")
        pedido.status = S.CANCELLED
        logger.info("Pedido %s cancelado.", pedido.id)
        return pedido

    def editar_endereco(self, principal: Principal, pedido: Pedido, parcial: dict) -> Pedido:
        self.guarda.exigir(principal, pedido, Operacao.EDITAR_ENDERECO)
        if not self.pode_editar_endereco(pedido):
            self._rejeitar(pedido, "Não é possível editar um pedido que já foi enviado ou entregue.")
        pedido.endereco_entrega = pedido.endereco_entrega.mesclar(parcial or {})
        logger.info("Endereço do pedido %s atualizado (%s).", pedido.id, ', '.join(sorted(parcial or {})))
        return pedido

    def _rejeitar(self, pedido: Pedido, mensagem: str):
        logger.warning("Pedido %s: %s", pedido.id, mensagem)
        raise ConflitoEstadoError(mensagem, status_atual=pedido.status)
