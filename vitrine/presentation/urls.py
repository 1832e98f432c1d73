"""
Rotas da API REST (montadas em /api/ por vitrine.urls).
Os caminhos seguem o contrato público da loja, sem barra final.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import views


urlpatterns = [
    # ====================================================================
    # 1. AUTENTICAÇÃO (JWT)
    # ====================================================================
    path('token', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh', TokenRefreshView.as_view(), name='token_refresh'),

    # ====================================================================
    # 2. CARRINHO
    # ====================================================================
    path('cart', views.CarrinhoAPIView.as_view(), name='api_carrinho'),
    path('cart/add', views.AdicionarItemCarrinhoAPIView.as_view(), name='api_carrinho_adicionar'),
    path('cart/update/<str:item_id>', views.AtualizarItemCarrinhoAPIView.as_view(), name='api_carrinho_atualizar'),
    path('cart/remove/<str:item_id>', views.RemoverItemCarrinhoAPIView.as_view(), name='api_carrinho_remover'),
    path('cart/clear', views.LimparCarrinhoAPIView.as_view(), name='api_carrinho_limpar'),

    # ====================================================================
    # 3. PEDIDOS
    # ====================================================================
    path('orders', views.PedidosAPIView.as_view(), name='api_pedidos'),
    # Antes de orders/<id> para não ser capturada como id
    path('orders/myorders', views.MeusPedidosAPIView.as_view(), name='api_meus_pedidos'),
    path('orders/<str:pedido_id>', views.PedidoDetalheAPIView.as_view(), name='api_pedido_detalhe'),
    path('orders/<str:pedido_id>/pay', views.PagarPedidoAPIView.as_view(), name='api_pedido_pagar'),
    path('orders/<str:pedido_id>/deliver', views.EntregarPedidoAPIView.as_view(), name='api_pedido_entregar'),
    path('orders/<str:pedido_id>/status', views.StatusPedidoAPIView.as_view(), name='api_pedido_status'),
    path('orders/<str:pedido_id>/advance', views.AvancarStatusPedidoAPIView.as_view(), name='api_pedido_avancar'),
    path('orders/<str:pedido_id>/cancel', views.CancelarPedidoAPIView.as_view(), name='api_pedido_cancelar'),
    path('orders/<str:pedido_id>/edit', views.EditarEnderecoPedidoAPIView.as_view(), name='api_pedido_editar'),

    # ====================================================================
    # 4. PAGAMENTO
    # ====================================================================
    path('payment/create-order', views.CriarCobrancaAPIView.as_view(), name='api_pagamento_cobranca'),
    path('payment/verify', views.VerificarPagamentoAPIView.as_view(), name='api_pagamento_verificar'),
    path('payment/status/<str:pedido_id>', views.StatusPagamentoAPIView.as_view(), name='api_pagamento_status'),
]
