from django.db import models

# ====================================================================
# Produto
# ====================================================================

class Produto(models.Model):
    """
    Produto do catálogo. O carrinho apenas lê nome, preço e imagem no
    momento da adição; alterações posteriores não afetam carrinhos nem pedidos.
    """
    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    descricao = models.TextField(blank=True, verbose_name="Descrição")
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço")
    categoria = models.CharField(max_length=100, blank=True, verbose_name="Categoria")

    # Listas simples (URLs de imagem, tamanhos e cores disponíveis)
    imagens = models.JSONField(default=list, blank=True, verbose_name="Imagens")
    tamanhos = models.JSONField(default=list, blank=True, verbose_name="Tamanhos")
    cores = models.JSONField(default=list, blank=True, verbose_name="Cores")

    em_estoque = models.BooleanField(default=True, verbose_name="Em Estoque")
    data_criacao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['nome']
        db_table = 'catalogo_produto'

    def __str__(self):
        return self.nome
