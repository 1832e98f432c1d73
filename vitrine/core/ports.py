# vitrine/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositorios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Protocol, List, Optional
from abc import abstractmethod

from vitrine.core.entities import Carrinho, Pedido, Produto, ResultadoPagamento


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IProdutoRepository(Protocol):
    """Catálogo de produtos (somente leitura para o carrinho)."""

    @abstractmethod
    def buscar_por_id(self, produto_id: str) -> Optional[Produto]: ...


class ICarrinhoRepository(Protocol):
    """Protocolo para a persistência de Carrinhos (um por usuário)."""

    @abstractmethod
    def buscar_por_usuario(self, usuario_id: str) -> Optional[Carrinho]:
        """Retorna o carrinho do usuário ou None se ele ainda não existir."""
        ...

    @abstractmethod
    def salvar(self, carrinho: Carrinho) -> Carrinho:
        """
        Grava o carrinho inteiro (itens e total), criando-o se necessário,
        e incrementa a versão.
        """
        ...

    @abstractmethod
    def limpar_carrinho(self, usuario_id: str) -> Optional[Carrinho]: ...


class IPedidoRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def criar_pedido(self, pedido: Pedido, carrinho: Carrinho) -> Pedido:
        """
        Cria o pedido e limpa o carrinho em uma única transação atômica.
        Se já existir um pedido com a mesma chave de idempotência, devolve o
        existente sem criar outro.
        """
        ...

    @abstractmethod
    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]: ...

    @abstractmethod
    def buscar_por_chave_idempotencia(self, chave: str) -> Optional[Pedido]: ...

    @abstractmethod
    def listar_todos_pedidos(self) -> List[Pedido]:
        """Todos os pedidos, do mais recente para o mais antigo."""
        ...

    @abstractmethod
    def listar_pedidos_por_usuario(self, usuario_id: str) -> List[Pedido]:
        """Pedidos do usuário, do mais recente para o mais antigo."""
        ...

    @abstractmethod
    def atualizar(self, pedido: Pedido) -> Pedido:
        """Grava apenas os campos mutáveis (status, pagamento, entrega, endereço)."""
        ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IGatewayPagamento(Protocol):
    """Protocolo para serviços externos de processamento de pagamento."""

    @abstractmethod
    def criar_cobranca(self, pedido: Pedido) -> dict: ...

    @abstractmethod
    def verificar_pagamento(self, dados: dict) -> dict: ...

    @abstractmethod
    def confirmar(self, pedido: Pedido, resultado: ResultadoPagamento) -> ResultadoPagamento:
        """Confirma o resultado informado pelo cliente e o devolve para ser gravado no pedido."""
        ...

    @abstractmethod
    def consultar_status(self, pedido_id: str) -> dict: ...
