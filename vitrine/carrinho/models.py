# Define os modelos para o domínio de Carrinho.
import uuid

from django.conf import settings
from django.db import models


class Carrinho(models.Model):
    """Modelo de Carrinho de Compras (um por usuário)."""
    usuario = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='carrinho',
    )
    # Total gravado; recalculado pela camada Core a cada alteração
    valor_total = models.DecimalField(max_digits=12, decimal_places=2, default=0, verbose_name="Valor Total")
    # Incrementada a cada gravação; compõe a chave de idempotência do checkout
    versao = models.PositiveIntegerField(default=0, verbose_name="Versão")
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Carrinho"
        verbose_name_plural = "Carrinhos"
        db_table = 'carrinho_compras'

    def __str__(self):
        return f"Carrinho #{self.pk} ({self.usuario})"


class ItemCarrinho(models.Model):
    """Modelo para os itens dentro do carrinho, com snapshot de preço, nome e imagem."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    carrinho = models.ForeignKey(Carrinho, on_delete=models.CASCADE, related_name='itens')
    produto = models.ForeignKey('catalogo.Produto', on_delete=models.CASCADE, related_name='itens_carrinho')
    quantidade = models.PositiveIntegerField(default=1)
    tamanho = models.CharField(max_length=50, blank=True, default='')
    cor = models.CharField(max_length=50, blank=True, default='')

    # Snapshot do produto no momento da adição
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço Unitário")
    nome = models.CharField(max_length=255, blank=True, default='')
    imagem = models.CharField(max_length=500, blank=True, default='')

    data_adicao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Item do Carrinho"
        verbose_name_plural = "Itens do Carrinho"
        unique_together = ('carrinho', 'produto', 'tamanho', 'cor')
        ordering = ['data_adicao']
        db_table = 'carrinho_item'

    def __str__(self):
        return f"{self.quantidade}x {self.nome}"

    @property
    def subtotal(self):
        return self.preco * self.quantidade
