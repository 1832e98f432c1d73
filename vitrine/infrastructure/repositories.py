"""
Camada de Infraestrutura: Implementação de Repositórios.

Esta camada traduz as operações abstratas definidas nas Interfaces da Core
em chamadas concretas ao framework (Django ORM) ou a estruturas em memória.
"""
import itertools
import logging
import uuid
from copy import deepcopy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from django.apps import apps
from django.db import transaction
from django.db.utils import IntegrityError
from django.utils import timezone as dj_timezone

# Importações da Camada CORE (ENTIDADES e INTERFACES)
from vitrine.core.entities import Carrinho, Pedido, Produto
from vitrine.core.ports import (
    ICarrinhoRepository,
    IPedidoRepository,
    IProdutoRepository,
)
from vitrine.core.exceptions import CheckoutIncompletoError, PedidoNaoEncontradoError

from .mappers import (
    CarrinhoMapper,
    ItemCarrinhoMapper,
    ItemPedidoMapper,
    PedidoMapper,
    ProdutoMapper,
)

logger = logging.getLogger(__name__)


# ====================================================================
# 1. REPOSITÓRIOS (Implementação Django ORM)
# ====================================================================

# Helper para Lazy Loading
def get_model(app_label, model_name):
    """Busca o modelo Django de forma segura (Lazy Loading)."""
    return apps.get_model(app_label, model_name)


class ProdutoRepositoryDjango(IProdutoRepository):
    """Implementação do ProdutoRepository usando o Django ORM."""

    @property
    def ProdutoModel(self):
        return get_model('catalogo', 'Produto')

    def buscar_por_id(self, produto_id: str) -> Optional[Produto]:
        try:
            return ProdutoMapper.to_entity(self.ProdutoModel.objects.get(pk=produto_id))
        except (self.ProdutoModel.DoesNotExist, ValueError, TypeError):
            # IDs fora do formato numérico também contam como inexistentes
            return None


class CarrinhoRepositoryDjango(ICarrinhoRepository):
    """Implementação do CarrinhoRepository usando o Django ORM."""

    # Propriedades para carregar modelos de forma LAZY
    @property
    def CarrinhoModel(self):
        return get_model('carrinho', 'Carrinho')

    @property
    def ItemCarrinhoModel(self):
        return get_model('carrinho', 'ItemCarrinho')

    def _carregar(self, **filtros) -> Optional[Carrinho]:
        model = self.CarrinhoModel.objects.prefetch_related('itens').filter(**filtros).first()
        return CarrinhoMapper.to_entity(model)

    def _bloquear(self, usuario_id: str):
        """Retorna o carrinho do usuário com a linha travada (select_for_update)."""
        return self.CarrinhoModel.objects.select_for_update().filter(usuario_id=usuario_id).first()

    def buscar_por_usuario(self, usuario_id: str) -> Optional[Carrinho]:
        return self._carregar(usuario_id=usuario_id)

    @transaction.atomic
    def salvar(self, carrinho: Carrinho) -> Carrinho:
        """Salva a Entidade Carrinho, sincronizando os ItemCarrinhoModels."""
        carrinho_model = self._bloquear(carrinho.usuario_id)
        if carrinho_model is None:
            # Criado na primeira adição
            self.CarrinhoModel.objects.get_or_create(usuario_id=carrinho.usuario_id)
            carrinho_model = self._bloquear(carrinho.usuario_id)

        existentes = {str(item.pk): item for item in carrinho_model.itens.all()}
        atuais = {item.id for item in carrinho.itens}

        # 1. Deleta itens que foram removidos da entidade
        removidos = [pk for pk in existentes if pk not in atuais]
        if removidos:
            self.ItemCarrinhoModel.objects.filter(carrinho=carrinho_model, pk__in=removidos).delete()

        # 2. Atualiza os existentes e cria os novos
        for item in carrinho.itens:
            ItemCarrinhoMapper.to_model(item, carrinho_model.pk, existentes.get(item.id)).save()

        carrinho_model.valor_total = carrinho.valor_total
        carrinho_model.versao += 1
        carrinho_model.save()

        return self._carregar(pk=carrinho_model.pk)

    @transaction.atomic
    def limpar_carrinho(self, usuario_id: str) -> Optional[Carrinho]:
        """Remove todos os itens do carrinho do usuário (o carrinho continua existindo)."""
        carrinho_model = self._bloquear(usuario_id)
        if carrinho_model is None:
            return None # Se o carrinho não existe, não há o que limpar

        carrinho_model.itens.all().delete()
        carrinho_model.valor_total = Decimal('0')
        carrinho_model.versao += 1
        carrinho_model.save()
        return self._carregar(pk=carrinho_model.pk)


class PedidoRepositoryDjango(IPedidoRepository):
    """Implementação do PedidoRepository usando o Django ORM."""

    def __init__(self, carrinho_repo: Optional[CarrinhoRepositoryDjango] = None):
        self.carrinho_repo = carrinho_repo or CarrinhoRepositoryDjango()

    # Propriedades para carregar modelos de forma LAZY
    @property
    def PedidoModel(self):
        return get_model('pedidos', 'Pedido')

    @property
    def ItemPedidoModel(self):
        return get_model('pedidos', 'ItemPedido')

    def _queryset(self):
        return self.PedidoModel.objects.prefetch_related('itens').order_by('-data_pedido', '-id')

    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]:
        try:
            return PedidoMapper.to_entity(self._queryset().get(pk=pedido_id))
        except (self.PedidoModel.DoesNotExist, ValueError, TypeError):
            return None

    def buscar_por_chave_idempotencia(self, chave: str) -> Optional[Pedido]:
        if not chave:
            return None
        return PedidoMapper.to_entity(self._queryset().filter(chave_idempotencia=chave).first())

    def criar_pedido(self, pedido: Pedido, carrinho: Carrinho) -> Pedido:
        """
        Cria o pedido, seus itens e esvazia o carrinho na mesma transação.
        Um checkout concorrente com a mesma chave perde na restrição UNIQUE e
        devolve o pedido do vencedor.
        """
        try:
            with transaction.atomic():
                model = PedidoMapper.to_model(pedido)
                model.save()
                self.ItemPedidoModel.objects.bulk_create(
                    [ItemPedidoMapper.to_model(item, pedido_id=model.pk) for item in pedido.itens]
                )
                self.carrinho_repo.limpar_carrinho(carrinho.usuario_id)
        except IntegrityError:
            existente = self.buscar_por_chave_idempotencia(pedido.chave_idempotencia)
            if existente is None:
                raise
            logger.warning("Checkout concorrente para a chave %s; usando o pedido %s.",
                           pedido.chave_idempotencia, existente.id)
            self.carrinho_repo.limpar_carrinho(carrinho.usuario_id)
            return existente

        return self.buscar_por_id(model.pk)

    def listar_pedidos_por_usuario(self, usuario_id: str) -> List[Pedido]:
        """Lista todos os pedidos de um usuário."""
        return [PedidoMapper.to_entity(model) for model in self._queryset().filter(usuario_id=usuario_id)]

    def listar_todos_pedidos(self) -> List[Pedido]:
        return [PedidoMapper.to_entity(model) for model in self._queryset()]

    @transaction.atomic
    def atualizar(self, pedido: Pedido) -> Pedido:
        """Grava apenas os campos mutáveis; itens e valores nunca são reescritos."""
        atualizados = self.PedidoModel.objects.filter(pk=pedido.id).update(
            data_atualizacao=dj_timezone.now(),
            **PedidoMapper.campos_mutaveis(pedido),
        )
        if not atualizados:
            raise PedidoNaoEncontradoError(f"Pedido ID {pedido.id} não existe para atualização.")
        return self.buscar_por_id(pedido.id)


# ====================================================================
# REPOSITÓRIOS (Implementações In-Memory para Teste - Mock)
# NOTA: Estes repositórios não usam o Django ORM e servem apenas para
# testes unitários e simulações onde o DB não é necessário. Sempre
# devolvem cópias, como um banco faria.
# ====================================================================

# Catálogo em memória para simulação
PRODUTOS_DB: Dict[str, Produto] = {
    "prod-101": Produto(
        id="prod-101",
        nome="Camiseta Básica Algodão",
        descricao="Camiseta de algodão penteado",
        preco=Decimal("100.00"),
        categoria="Camisetas",
        imagens=["/media/produtos/camiseta-basica.jpg"],
        tamanhos=["P", "M", "G"],
        cores=["Preto", "Branco"],
    ),
    "prod-102": Produto(
        id="prod-102",
        nome="Calça Jeans Reta",
        descricao="Calça jeans de lavagem média",
        preco=Decimal("249.90"),
        categoria="Calças",
        imagens=["/media/produtos/calca-jeans.jpg"],
        tamanhos=["38", "40", "42"],
        cores=["Azul"],
    ),
    "prod-103": Produto(
        id="prod-103",
        nome="Boné Aba Curva",
        descricao="Boné ajustável",
        preco=Decimal("59.95"),
        categoria="Acessórios",
    ),
}


def _agora() -> datetime:
    return datetime.now(timezone.utc)


class ProdutoRepository(IProdutoRepository):
    """Implementação In-Memory para testes."""

    def __init__(self, produtos: Optional[Dict[str, Produto]] = None):
        self.produtos = PRODUTOS_DB if produtos is None else produtos

    def buscar_por_id(self, produto_id: str) -> Optional[Produto]:
        return deepcopy(self.produtos.get(str(produto_id)))


class CarrinhoRepository(ICarrinhoRepository):
    """Implementação In-Memory para testes."""

    def __init__(self):
        self.carrinhos: Dict[str, Carrinho] = {}

    def buscar_por_usuario(self, usuario_id: str) -> Optional[Carrinho]:
        return deepcopy(self.carrinhos.get(str(usuario_id)))

    def salvar(self, carrinho: Carrinho) -> Carrinho:
        """Salva (ou cria) o carrinho e incrementa a versão."""
        copia = deepcopy(carrinho)
        atual = self.carrinhos.get(copia.usuario_id)
        copia.id = atual.id if atual else (copia.id or str(uuid.uuid4()))
        copia.versao = (atual.versao if atual else 0) + 1
        copia.data_atualizacao = _agora()
        self.carrinhos[copia.usuario_id] = copia
        return deepcopy(copia)

    def limpar_carrinho(self, usuario_id: str) -> Optional[Carrinho]:
        """Esvazia o carrinho do usuário após o checkout."""
        atual = self.carrinhos.get(str(usuario_id))
        if not atual:
            return None
        atual.itens = []
        atual.valor_total = Decimal('0')
        atual.versao += 1
        atual.data_atualizacao = _agora()
        return deepcopy(atual)


class PedidoRepository(IPedidoRepository):
    """
    Implementação In-Memory para testes. Não é transacional: se o carrinho
    não puder ser esvaziado, o pedido fica gravado e CheckoutIncompletoError
    informa o id dele.
    """

    def __init__(self, carrinho_repo: ICarrinhoRepository):
        self.carrinho_repo = carrinho_repo
        self.pedidos: Dict[str, Pedido] = {}
        self._sequencia = itertools.count(1)

    def _ordenar(self, pedidos) -> List[Pedido]:
        # Mais recente primeiro; o id sequencial desempata
        return [deepcopy(p) for p in sorted(pedidos, key=lambda p: (p.criado_em, int(p.id)), reverse=True)]

    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]:
        return deepcopy(self.pedidos.get(str(pedido_id)))

    def buscar_por_chave_idempotencia(self, chave: str) -> Optional[Pedido]:
        if not chave:
            return None
        return deepcopy(next(
            (pedido for pedido in self.pedidos.values() if pedido.chave_idempotencia == chave),
            None
        ))

    def criar_pedido(self, pedido: Pedido, carrinho: Carrinho) -> Pedido:
        existente = self.buscar_por_chave_idempotencia(pedido.chave_idempotencia)
        if existente:
            novo = existente
        else:
            novo = deepcopy(pedido)
            novo.id = str(next(self._sequencia))
            novo.criado_em = novo.atualizado_em = _agora()
            self.pedidos[novo.id] = novo

        try:
            self.carrinho_repo.limpar_carrinho(carrinho.usuario_id)
        except Exception as e:
            raise CheckoutIncompletoError(novo.id) from e
        return deepcopy(novo)

    def listar_pedidos_por_usuario(self, usuario_id: str) -> List[Pedido]:
        """Lista todos os pedidos de um usuário específico."""
        return self._ordenar(p for p in self.pedidos.values() if p.pertence_a(usuario_id))

    def listar_todos_pedidos(self) -> List[Pedido]:
        return self._ordenar(self.pedidos.values())

    def atualizar(self, pedido: Pedido) -> Pedido:
        """Copia apenas os campos mutáveis para o registro gravado."""
        gravado = self.pedidos.get(str(pedido.id))
        if not gravado:
            raise PedidoNaoEncontradoError(f"Pedido ID {pedido.id} não existe para atualização.")
        for campo in ('status', 'esta_pago', 'pago_em', 'resultado_pagamento',
                      'esta_entregue', 'entregue_em', 'endereco_entrega'):
            setattr(gravado, campo, deepcopy(getattr(pedido, campo)))
        gravado.atualizado_em = _agora()
        return deepcopy(gravado)
