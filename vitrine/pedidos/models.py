from django.conf import settings
from django.db import models

from vitrine.core.entities import StatusPedido


class Pedido(models.Model):
    """
    Modelo para pedidos de compra. Itens, endereço e valores são uma cópia
    do carrinho no momento do checkout.
    """
    STATUS_CHOICES = [(status.value, status.value) for status in StatusPedido]

    PAGAMENTO_CHOICES = [
        ('stripe', 'Stripe'),
        ('paypal', 'PayPal'),
        ('razorpay', 'Razorpay'),
        ('cod', 'Pagamento na Entrega'),
    ]

    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='pedidos',
        verbose_name="Cliente"
    )

    data_pedido = models.DateTimeField(auto_now_add=True, verbose_name="Data do Pedido")
    data_atualizacao = models.DateTimeField(auto_now=True, verbose_name="Última Atualização")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusPedido.PLACED.value, verbose_name="Status")

    # Valores (o imposto guarda 4 casas; só o total é arredondado)
    valor_itens = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="Valor dos Itens")
    valor_imposto = models.DecimalField(max_digits=14, decimal_places=4, verbose_name="Imposto")
    valor_frete = models.DecimalField(max_digits=10, decimal_places=2, default=0, verbose_name="Valor do Frete")
    valor_total = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="Total do Pedido")

    # Pagamento
    metodo_pagamento = models.CharField(max_length=20, choices=PAGAMENTO_CHOICES, verbose_name="Método de Pagamento")
    esta_pago = models.BooleanField(default=False, verbose_name="Pago")
    pago_em = models.DateTimeField(blank=True, null=True, verbose_name="Pago em")
    resultado_pagamento = models.JSONField(blank=True, null=True, verbose_name="Resultado do Pagamento")

    # Entrega (independente do status)
    esta_entregue = models.BooleanField(default=False, verbose_name="Entregue")
    entregue_em = models.DateTimeField(blank=True, null=True, verbose_name="Entregue em")

    # Endereço (Snapshot/Cópia dos dados no momento da compra)
    endereco_entrega_json = models.JSONField(verbose_name="Endereço de Entrega (JSON)", help_text="Cópia do endereço no momento do pedido")

    # "<id do carrinho>:<versão>" - impede pedidos duplicados no checkout
    chave_idempotencia = models.CharField(max_length=100, unique=True, null=True, blank=True, verbose_name="Chave de Idempotência")

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        ordering = ['-data_pedido', '-id']
        db_table = 'pedido_compra'

    def __str__(self):
        return f"Pedido {self.id} - {self.usuario} - {self.status}"


class ItemPedido(models.Model):
    """
    Modelo para os itens contidos em um pedido.
    """
    pedido = models.ForeignKey(Pedido, on_delete=models.CASCADE, related_name='itens')

    # Referência fraca ao produto original
    produto = models.ForeignKey(
        'catalogo.Produto',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='itens_pedido',
        verbose_name="Produto Original"
    )

    # Snapshots (Cópia dos dados do produto no momento da compra, para histórico)
    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    imagem = models.CharField(max_length=500, blank=True, default='', verbose_name="Imagem")
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço Unitário na Compra")
    quantidade = models.PositiveIntegerField(verbose_name="Quantidade")
    tamanho = models.CharField(max_length=50, blank=True, default='')
    cor = models.CharField(max_length=50, blank=True, default='')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="Subtotal")

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        ordering = ['id']
        db_table = 'pedido_item'

    def __str__(self):
        return f"{self.quantidade}x {self.nome} (Pedido {self.pedido_id})"

    def save(self, *args, **kwargs):
        # Atualiza o subtotal automaticamente antes de salvar
        self.subtotal = self.quantidade * self.preco
        super().save(*args, **kwargs)
