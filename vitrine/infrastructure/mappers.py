"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (vitrine.core.entities)
"""
from decimal import Decimal
from typing import Any, Optional, Type

from django.apps import apps
from django.db import models

from vitrine.core.entities import (
    Carrinho as CarrinhoEntity,
    EnderecoEntrega,
    ItemCarrinho as ItemCarrinhoEntity,
    ItemPedido as ItemPedidoEntity,
    Pedido as PedidoEntity,
    Produto as ProdutoEntity,
    ResultadoPagamento,
    Usuario as UsuarioEntity,
)


# ====================================================================
# Uso de apps.get_model para evitar dependências circulares
# ====================================================================

def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


def _texto_id(valor) -> Optional[str]:
    return None if valor is None else str(valor)


class BaseMapper:
    """Base dos mapeadores: cada um conhece o seu modelo via lazy loading."""

    app_label = ''
    model_name = ''

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model(cls.app_label, cls.model_name)


# ====================================================================
# MAPERS DE USUÁRIO E ENDEREÇO
# ====================================================================

class EnderecoMapper:
    """Converte o endereço entre o JSON gravado e a Entidade (valor)."""

    @staticmethod
    def to_entity(dados: Optional[dict]) -> EnderecoEntrega:
        dados = dados or {}
        return EnderecoEntrega(**{campo: dados.get(campo, '') for campo in EnderecoEntrega.CAMPOS})

    @staticmethod
    def to_json(endereco: EnderecoEntrega) -> dict:
        return endereco.como_dict()


class UsuarioMapper(BaseMapper):
    """Mapeador para o Usuário."""
    app_label, model_name = 'infrastructure', 'Usuario'

    @staticmethod
    def to_entity(model: Any) -> Optional[UsuarioEntity]:
        if not model: return None
        return UsuarioEntity(
            id=str(model.pk),
            nome=model.get_full_name() or model.email,
            email=model.email,
            is_admin=model.administrador,
            endereco_padrao=EnderecoMapper.to_entity(model.endereco_padrao) if model.endereco_padrao else None,
        )


# ====================================================================
# MAPERS DO CATÁLOGO
# ====================================================================

class ProdutoMapper(BaseMapper):
    """Mapeador para Produto."""
    app_label, model_name = 'catalogo', 'Produto'

    @staticmethod
    def to_entity(model: Any) -> Optional[ProdutoEntity]:
        if not model: return None
        return ProdutoEntity(
            id=str(model.pk),
            nome=model.nome,
            descricao=model.descricao,
            preco=model.preco,
            categoria=model.categoria,
            imagens=list(model.imagens or []),
            tamanhos=list(model.tamanhos or []),
            cores=list(model.cores or []),
            em_estoque=model.em_estoque,
        )


# ====================================================================
# MAPERS DO CARRINHO
# ====================================================================

class ItemCarrinhoMapper(BaseMapper):
    """Mapeador para ItemCarrinho."""
    app_label, model_name = 'carrinho', 'ItemCarrinho'

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemCarrinhoEntity]:
        if not model: return None
        return ItemCarrinhoEntity(
            id=str(model.pk),
            produto_id=str(model.produto_id),
            quantidade=model.quantidade,
            preco=model.preco,
            tamanho=model.tamanho,
            cor=model.cor,
            nome=model.nome,
            imagem=model.imagem,
        )

    @classmethod
    def to_model(cls, entity: ItemCarrinhoEntity, carrinho_id: int, model: Optional[Any] = None) -> Any:
        """Converte ItemCarrinho Entity para ItemCarrinho Model."""
        if not model:
            model = cls.model_class()(id=entity.id, carrinho_id=carrinho_id)

        model.produto_id = entity.produto_id
        model.quantidade = entity.quantidade
        model.preco = entity.preco
        model.tamanho = entity.tamanho
        model.cor = entity.cor
        model.nome = entity.nome
        model.imagem = entity.imagem
        return model


class CarrinhoMapper(BaseMapper):
    """Mapeador para Carrinho."""
    app_label, model_name = 'carrinho', 'Carrinho'

    @staticmethod
    def to_entity(model: Any) -> Optional[CarrinhoEntity]:
        """Converte Carrinho Model para Carrinho Entity, incluindo itens."""
        if not model: return None
        return CarrinhoEntity(
            id=str(model.pk),
            usuario_id=str(model.usuario_id),
            itens=[ItemCarrinhoMapper.to_entity(item) for item in model.itens.all()],
            valor_total=Decimal(model.valor_total),
            versao=model.versao,
            data_atualizacao=model.data_atualizacao,
        )


# ====================================================================
# MAPERS DE PEDIDO
# ====================================================================

class ResultadoPagamentoMapper:

    @staticmethod
    def to_entity(dados: Optional[dict]) -> Optional[ResultadoPagamento]:
        if not dados: return None
        return ResultadoPagamento(
            id=dados.get('id', ''),
            status=dados.get('status', ''),
            update_time=dados.get('update_time', ''),
            email_address=dados.get('email_address', ''),
        )

    @staticmethod
    def to_json(resultado: Optional[ResultadoPagamento]) -> Optional[dict]:
        if resultado is None: return None
        return {
            'id': resultado.id,
            'status': resultado.status,
            'update_time': resultado.update_time,
            'email_address': resultado.email_address,
        }


class ItemPedidoMapper(BaseMapper):
    """Mapeador para ItemPedido."""
    app_label, model_name = 'pedidos', 'ItemPedido'

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemPedidoEntity]:
        if not model: return None
        return ItemPedidoEntity(
            produto_id=_texto_id(model.produto_id) or '',
            nome=model.nome,
            imagem=model.imagem,
            preco=model.preco,
            quantidade=model.quantidade,
            tamanho=model.tamanho,
            cor=model.cor,
        )

    @classmethod
    def to_model(cls, entity: ItemPedidoEntity, pedido_id: int) -> Any:
        """Converte ItemPedido Entity para ItemPedido Model (snapshot, sem depender do produto)."""
        return cls.model_class()(
            pedido_id=pedido_id,
            produto_id=entity.produto_id or None,
            nome=entity.nome,
            imagem=entity.imagem,
            preco=entity.preco,
            quantidade=entity.quantidade,
            tamanho=entity.tamanho,
            cor=entity.cor,
            # bulk_create não chama save(); o subtotal é calculado aqui
            subtotal=entity.subtotal,
        )


class PedidoMapper(BaseMapper):
    """Mapeador para Pedido."""
    app_label, model_name = 'pedidos', 'Pedido'

    @staticmethod
    def to_entity(model: Any) -> Optional[PedidoEntity]:
        """Converte Pedido Model para Pedido Entity, incluindo endereço snapshot."""
        if not model: return None
        return PedidoEntity(
            id=str(model.pk),
            usuario_id=str(model.usuario_id),
            itens=tuple(ItemPedidoMapper.to_entity(item) for item in model.itens.all()),
            endereco_entrega=EnderecoMapper.to_entity(model.endereco_entrega_json),
            metodo_pagamento=model.metodo_pagamento,
            valor_itens=model.valor_itens,
            valor_imposto=model.valor_imposto,
            valor_frete=model.valor_frete,
            valor_total=model.valor_total,
            status=model.status,
            esta_pago=model.esta_pago,
            pago_em=model.pago_em,
            resultado_pagamento=ResultadoPagamentoMapper.to_entity(model.resultado_pagamento),
            esta_entregue=model.esta_entregue,
            entregue_em=model.entregue_em,
            chave_idempotencia=model.chave_idempotencia,
            criado_em=model.data_pedido,
            atualizado_em=model.data_atualizacao,
        )

    @classmethod
    def to_model(cls, entity: PedidoEntity) -> Any:
        """Converte um Pedido novo (sem id) para o Model."""
        return cls.model_class()(
            usuario_id=entity.usuario_id,
            status=entity.status.value,
            valor_itens=entity.valor_itens,
            valor_imposto=entity.valor_imposto,
            valor_frete=entity.valor_frete,
            valor_total=entity.valor_total,
            metodo_pagamento=entity.metodo_pagamento,
            endereco_entrega_json=EnderecoMapper.to_json(entity.endereco_entrega),
            chave_idempotencia=entity.chave_idempotencia,
        )

    @staticmethod
    def campos_mutaveis(entity: PedidoEntity) -> dict:
        """Somente o que a máquina de estados pode alterar depois da criação."""
        return {
            'status': entity.status.value,
            'esta_pago': entity.esta_pago,
            'pago_em': entity.pago_em,
            'resultado_pagamento': ResultadoPagamentoMapper.to_json(entity.resultado_pagamento),
            'esta_entregue': entity.esta_entregue,
            'entregue_em': entity.entregue_em,
            'endereco_entrega_json': EnderecoMapper.to_json(entity.endereco_entrega),
        }
