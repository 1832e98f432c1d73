import logging
import time
from decimal import Decimal
from typing import Callable

from decouple import config

# Importa os Protocols e Entidades da camada Core
from vitrine.core.ports import IGatewayPagamento
from vitrine.core.entities import Pedido, ResultadoPagamento

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: Implementações concretas dos serviços externos.
# ====================================================================

class PagamentoGatewayStub(IGatewayPagamento):
    """
    Gateway de Pagamento simulado (modo demonstração).
    Gera cobranças no formato do Razorpay, aprova qualquer verificação e
    repassa o resultado de pagamento informado pelo cliente.
    """

    def __init__(self, relogio: Callable[[], float] = time.time):
        self.relogio = relogio
        self.key_id = config('RAZORPAY_KEY_ID', default='demo_key_id')
        self.moeda = config('PAGAMENTO_MOEDA', default='INR')

    def criar_cobranca(self, pedido: Pedido) -> dict:
        """Cobrança simulada; o valor vai em unidades mínimas da moeda (centavos/paise)."""
        instante = self.relogio()
        centavos = int((Decimal(pedido.valor_total) * 100).to_integral_value())
        cobranca = {
            'id': f"order_mock_{int(instante * 1000)}",
            'entity': 'order',
            'amount': centavos,
            'amount_paid': 0,
            'amount_due': centavos,
            'currency': self.moeda,
            'receipt': f"receipt_{pedido.id}",
            'status': 'created',
            'attempts': 0,
            'notes': {'pedido_id': pedido.id},
            'created_at': int(instante),
        }
        logger.info("Cobrança simulada %s criada para o pedido %s (%s %s).",
                    cobranca['id'], pedido.id, centavos, self.moeda)
        return {'order': cobranca, 'key_id': self.key_id}

    def verificar_pagamento(self, dados: dict) -> dict:
        """Verificação simulada: sempre aprovada."""
        dados = dados or {}
        return {
            'order_id': dados.get('razorpay_order_id'),
            'payment_id': dados.get('razorpay_payment_id'),
            'signature': dados.get('razorpay_signature'),
            'status': 'success',
        }

    def confirmar(self, pedido: Pedido, resultado: ResultadoPagamento) -> ResultadoPagamento:
        """Repassa o resultado informado pelo cliente sem validar o status (modo demonstração)."""
        logger.info("Pagamento %s do pedido %s registrado (status %s).",
                    resultado.id, pedido.id, resultado.status)
        return resultado

    def consultar_status(self, pedido_id: str) -> dict:
        return {'payment_status': 'completed', 'order_id': pedido_id}
