# vitrine/core/precificacao.py
"""
Cálculo de valores do carrinho e do pedido.

Funções puras, sem efeitos colaterais. O mesmo cálculo é usado na exibição
do carrinho, no checkout e nos totais gravados no pedido, para que os três
nunca divirjam.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from vitrine.core.exceptions import ValorInvalidoError

TAXA_IMPOSTO = Decimal('0.08')
VALOR_FRETE = Decimal('0')  # Frete grátis
DUAS_CASAS = Decimal('0.01')


@dataclass(frozen=True)
class Totais:
    """Valores calculados a partir dos itens. Só o total é arredondado."""
    valor_itens: Decimal
    valor_imposto: Decimal
    valor_frete: Decimal
    valor_total: Decimal


def arredondar(valor: Decimal) -> Decimal:
    return valor.quantize(DUAS_CASAS, rounding=ROUND_HALF_UP)


def somar_itens(itens: Iterable) -> Decimal:
    """Σ(preço × quantidade) sobre qualquer item com `preco` e `quantidade`."""
    total = Decimal('0')
    for item in itens:
        preco = Decimal(str(item.preco))
        if preco < 0 or item.quantidade < 0:
            raise ValorInvalidoError(
                f"Valor inválido para o produto {item.produto_id}: "
                f"preço {preco}, quantidade {item.quantidade}."
            )
        total += preco * item.quantidade
    return total


def calcular_totais(itens: Iterable) -> Totais:
    valor_itens = somar_itens(itens)
    valor_imposto = valor_itens * TAXA_IMPOSTO
    return Totais(
        valor_itens=valor_itens,
        valor_imposto=valor_imposto,
        valor_frete=VALOR_FRETE,
        valor_total=arredondar(valor_itens + valor_imposto + VALOR_FRETE),
    )
