# Configuração da interface administrativa do Django para os modelos da Vitrine.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from vitrine.carrinho.models import Carrinho, ItemCarrinho
from vitrine.catalogo.models import Produto
from vitrine.infrastructure.models import Usuario
from vitrine.pedidos.models import ItemPedido, Pedido

# ====================================================================
# 1. ADMIN PERSONALIZADO PARA USUÁRIOS (login por e-mail)
# ====================================================================

class UsuarioCreationForm(UserCreationForm):
    class Meta:
        model = Usuario
        fields = ('email',)


class UsuarioChangeForm(UserChangeForm):
    class Meta:
        model = Usuario
        fields = '__all__'


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Customização do modelo Usuario. O campo 'username' não existe, então tudo usa o e-mail."""
    form = UsuarioChangeForm
    add_form = UsuarioCreationForm

    list_display = ('email', 'first_name', 'last_name', 'is_admin', 'is_staff', 'is_active')
    list_filter = ('is_admin', 'is_staff', 'is_active')

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Informações de Perfil', {'fields': ('first_name', 'last_name', 'telefone', 'endereco_padrao')}),
        ('Permissões', {'fields': ('is_active', 'is_admin', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Datas', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2'),
        }),
    )

    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)


# ====================================================================
# 2. ADMIN PARA PRODUTOS
# ====================================================================

@admin.register(Produto)
class ProdutoAdmin(admin.ModelAdmin):
    list_display = ('nome', 'categoria', 'preco', 'em_estoque')
    list_filter = ('categoria', 'em_estoque')
    search_fields = ('nome', 'descricao')


# ====================================================================
# 3. ADMIN PARA CARRINHOS (somente leitura)
# ====================================================================

class ItemCarrinhoInline(admin.TabularInline):
    model = ItemCarrinho
    extra = 0
    readonly_fields = ('produto', 'nome', 'preco', 'quantidade', 'tamanho', 'cor')
    can_delete = False


@admin.register(Carrinho)
class CarrinhoAdmin(admin.ModelAdmin):
    list_display = ('id', 'usuario', 'valor_total', 'versao', 'data_atualizacao')
    readonly_fields = ('usuario', 'valor_total', 'versao')
    inlines = [ItemCarrinhoInline]
    search_fields = ('usuario__email',)


# ====================================================================
# 4. ADMIN PARA PEDIDOS
# ====================================================================

class ItemPedidoInline(admin.TabularInline):
    """Itens são snapshot da compra: nada é editável."""
    model = ItemPedido
    extra = 0
    readonly_fields = ('produto', 'nome', 'imagem', 'preco', 'quantidade', 'tamanho', 'cor', 'subtotal')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    list_display = ('id', 'usuario', 'data_pedido', 'status', 'valor_total', 'esta_pago', 'esta_entregue')
    list_filter = ('status', 'esta_pago', 'esta_entregue', 'metodo_pagamento')
    search_fields = ('id', 'usuario__email')
    date_hierarchy = 'data_pedido'
    inlines = [ItemPedidoInline]
    # Valores e itens são imutáveis; transições passam pela API
    readonly_fields = (
        'usuario', 'metodo_pagamento', 'valor_itens', 'valor_imposto', 'valor_frete', 'valor_total',
        'status', 'esta_pago', 'pago_em', 'resultado_pagamento', 'esta_entregue', 'entregue_em',
        'endereco_entrega_json', 'chave_idempotencia', 'data_pedido', 'data_atualizacao',
    )

    def has_add_permission(self, request):
        return False
