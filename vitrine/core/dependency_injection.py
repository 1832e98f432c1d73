# vitrine/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from vitrine.infrastructure.repositories import (
    ProdutoRepositoryDjango,
    CarrinhoRepositoryDjango,
    PedidoRepositoryDjango,
)
from vitrine.infrastructure.gateways import PagamentoGatewayStub
from .autorizacao import GuardaAutorizacao
from .maquina_estados import MaquinaEstadosPedido
from .use_cases import (
    GerenciarCarrinhoUseCase,
    FinalizarPedidoUseCase,
    GerenciarPedidoUseCase,
    ProcessarPagamentoUseCase,
)

# Repositórios e Gateways Concretos
produto_repo = ProdutoRepositoryDjango()
carrinho_repo = CarrinhoRepositoryDjango()
pedido_repo = PedidoRepositoryDjango()
pagamento_gateway = PagamentoGatewayStub()
guarda = GuardaAutorizacao()

# ====================================================================
# Use Cases de Carrinho/Checkout
# ====================================================================

def get_gerenciar_carrinho_use_case() -> GerenciarCarrinhoUseCase:
    return GerenciarCarrinhoUseCase(carrinho_repo, produto_repo, guarda)

def get_finalizar_pedido_use_case() -> FinalizarPedidoUseCase:
    return FinalizarPedidoUseCase(
        carrinho_repo=carrinho_repo,
        pedido_repo=pedido_repo,
        guarda=guarda,
    )


# ====================================================================
# Use Cases de Pedidos/Pagamento
# ====================================================================

def get_gerenciar_pedido_use_case() -> GerenciarPedidoUseCase:
    return GerenciarPedidoUseCase(
        pedido_repo=pedido_repo,
        pagamento_gateway=pagamento_gateway,
        maquina=MaquinaEstadosPedido(guarda),
    )

def get_processar_pagamento_use_case() -> ProcessarPagamentoUseCase:
    return ProcessarPagamentoUseCase(pedido_repo, pagamento_gateway, guarda)
