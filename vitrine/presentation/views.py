from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from vitrine.core import dependency_injection as di
from vitrine.core.entities import EnderecoEntrega, Principal
from vitrine.infrastructure.mappers import UsuarioMapper

from .serializers import (
    AdicionarItemSerializer,
    AtualizarItemSerializer,
    AvancarStatusSerializer,
    CarrinhoSerializer,
    CheckoutSerializer,
    CriarCobrancaSerializer,
    EditarEnderecoSerializer,
    PagamentoSerializer,
    PedidoSerializer,
    StatusSerializer,
)


# ====================================================================
# VIEWS: Orquestram a requisição, a execução dos casos de uso e a resposta.
# Os erros do Core sobem até o EXCEPTION_HANDLER (presentation.excecoes).
# ====================================================================

def principal_da_requisicao(request) -> Principal:
    """Monta o ator da requisição a partir do usuário autenticado."""
    user = request.user
    if not user or not user.is_authenticated:
        return Principal.anonimo()
    return UsuarioMapper.to_entity(user).como_principal()


def validar(serializer_class, request, **kwargs):
    serializer = serializer_class(data=request.data, **kwargs)
    serializer.is_valid(raise_exception=True)
    return serializer


def resposta_carrinho(carrinho, message=None, status_code=status.HTTP_200_OK):
    corpo = {'success': True}
    if message:
        corpo['message'] = message
    corpo['cart'] = CarrinhoSerializer(carrinho).data
    return Response(corpo, status=status_code)


def resposta_pedido(pedido, message=None, status_code=status.HTTP_200_OK):
    corpo = {'success': True}
    if message:
        corpo['message'] = message
    corpo['order'] = PedidoSerializer(pedido).data
    return Response(corpo, status=status_code)


class BaseAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def principal(self) -> Principal:
        return principal_da_requisicao(self.request)


# ====================================================================
# 1. CARRINHO
# ====================================================================

class CarrinhoAPIView(BaseAPIView):
    """
    API View para consultar o carrinho do usuário logado.
    """

    @extend_schema(responses={200: CarrinhoSerializer})
    def get(self, request):
        carrinho = di.get_gerenciar_carrinho_use_case().obter_carrinho(self.principal())
        return resposta_carrinho(carrinho)


class AdicionarItemCarrinhoAPIView(BaseAPIView):

    @extend_schema(request=AdicionarItemSerializer, responses={200: CarrinhoSerializer})
    def post(self, request):
        """Adiciona um item (ou soma a quantidade de um item igual)."""
        dados = validar(AdicionarItemSerializer, request).validated_data
        carrinho = di.get_gerenciar_carrinho_use_case().adicionar_item(
            self.principal(),
            produto_id=dados['produto_id'],
            quantidade=dados['quantidade'],
            tamanho=dados.get('tamanho') or '',
            cor=dados.get('cor') or '',
        )
        return resposta_carrinho(carrinho, 'Item adicionado ao carrinho.')


class AtualizarItemCarrinhoAPIView(BaseAPIView):

    @extend_schema(request=AtualizarItemSerializer, responses={200: CarrinhoSerializer})
    def put(self, request, item_id):
        dados = validar(AtualizarItemSerializer, request).validated_data
        carrinho = di.get_gerenciar_carrinho_use_case().atualizar_item(
            self.principal(), item_id, dados['quantidade']
        )
        return resposta_carrinho(carrinho, 'Carrinho atualizado.')


class RemoverItemCarrinhoAPIView(BaseAPIView):

    @extend_schema(responses={200: CarrinhoSerializer})
    def delete(self, request, item_id):
        carrinho = di.get_gerenciar_carrinho_use_case().remover_item(self.principal(), item_id)
        return resposta_carrinho(carrinho, 'Item removido do carrinho.')


class LimparCarrinhoAPIView(BaseAPIView):

    @extend_schema(responses={200: CarrinhoSerializer})
    def delete(self, request):
        carrinho = di.get_gerenciar_carrinho_use_case().limpar(self.principal())
        return resposta_carrinho(carrinho, 'Carrinho esvaziado.')


# ====================================================================
# 2. PEDIDOS
# ====================================================================

class PedidosAPIView(BaseAPIView):
    """
    GET: lista todos os pedidos (administrador).
    POST: finaliza o checkout do carrinho do usuário logado. Sem
    shippingAddress, usa o endereço padrão do perfil.
    """

    @extend_schema(responses={200: PedidoSerializer(many=True)})
    def get(self, request):
        pedidos = di.get_gerenciar_pedido_use_case().listar_todos(self.principal())
        return Response({'success': True, 'orders': PedidoSerializer(pedidos, many=True).data})

    @extend_schema(request=CheckoutSerializer, responses={201: PedidoSerializer})
    def post(self, request):
        serializer = validar(CheckoutSerializer, request)
        endereco = (serializer.to_endereco_entity()
                    or UsuarioMapper.to_entity(request.user).endereco_padrao
                    or EnderecoEntrega())
        pedido = di.get_finalizar_pedido_use_case().executar(
            self.principal(),
            endereco_entrega=endereco,
            metodo_pagamento=serializer.validated_data['metodo_pagamento'],
        )
        return resposta_pedido(pedido, 'Pedido criado com sucesso!', status.HTTP_201_CREATED)


class MeusPedidosAPIView(BaseAPIView):

    @extend_schema(responses={200: PedidoSerializer(many=True)})
    def get(self, request):
        pedidos = di.get_gerenciar_pedido_use_case().listar_meus(self.principal())
        return Response({'success': True, 'orders': PedidoSerializer(pedidos, many=True).data})


class PedidoDetalheAPIView(BaseAPIView):

    @extend_schema(responses={200: PedidoSerializer})
    def get(self, request, pedido_id):
        pedido = di.get_gerenciar_pedido_use_case().detalhar(self.principal(), pedido_id)
        return resposta_pedido(pedido)


class PagarPedidoAPIView(BaseAPIView):

    @extend_schema(request=PagamentoSerializer, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        resultado = validar(PagamentoSerializer, request).to_resultado()
        pedido = di.get_gerenciar_pedido_use_case().pagar(self.principal(), pedido_id, resultado)
        return resposta_pedido(pedido, 'Pagamento registrado.')


class EntregarPedidoAPIView(BaseAPIView):

    @extend_schema(request=None, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        pedido = di.get_gerenciar_pedido_use_case().marcar_entregue(self.principal(), pedido_id)
        return resposta_pedido(pedido, 'Pedido marcado como entregue.')


class StatusPedidoAPIView(BaseAPIView):
    """Sobrescreve o status sem consultar a tabela de transições (administrador)."""

    @extend_schema(request=StatusSerializer, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        dados = validar(StatusSerializer, request).validated_data
        pedido = di.get_gerenciar_pedido_use_case().forcar_status(self.principal(), pedido_id, dados['status'])
        return resposta_pedido(pedido, 'Status do pedido atualizado.')


class AvancarStatusPedidoAPIView(BaseAPIView):

    @extend_schema(request=AvancarStatusSerializer, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        dados = validar(AvancarStatusSerializer, request).validated_data
        pedido = di.get_gerenciar_pedido_use_case().avancar_status(
            self.principal(), pedido_id, dados.get('status')
        )
        return resposta_pedido(pedido, 'Status do pedido atualizado.')


class CancelarPedidoAPIView(BaseAPIView):

    @extend_schema(request=None, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        pedido = di.get_gerenciar_pedido_use_case().cancelar(self.principal(), pedido_id)
        return resposta_pedido(pedido, 'Pedido cancelado.')


class EditarEnderecoPedidoAPIView(BaseAPIView):

    @extend_schema(request=EditarEnderecoSerializer, responses={200: PedidoSerializer})
    def put(self, request, pedido_id):
        dados = validar(EditarEnderecoSerializer, request).validated_data
        pedido = di.get_gerenciar_pedido_use_case().editar_endereco(
            self.principal(), pedido_id, dict(dados['endereco_entrega'])
        )
        return resposta_pedido(pedido, 'Endereço de entrega atualizado.')


# ====================================================================
# 3. PAGAMENTO (gateway simulado)
# ====================================================================

class CriarCobrancaAPIView(BaseAPIView):

    @extend_schema(request=CriarCobrancaSerializer)
    def post(self, request):
        dados = validar(CriarCobrancaSerializer, request).validated_data
        cobranca = di.get_processar_pagamento_use_case().criar_cobranca(self.principal(), dados['pedido_id'])
        return Response({'success': True, **cobranca})


class VerificarPagamentoAPIView(BaseAPIView):

    def post(self, request):
        detalhes = di.get_processar_pagamento_use_case().verificar(self.principal(), dict(request.data))
        return Response({
            'success': True,
            'message': 'Pagamento verificado (modo demonstração).',
            'payment_details': detalhes,
        })


class StatusPagamentoAPIView(BaseAPIView):

    def get(self, request, pedido_id):
        situacao = di.get_processar_pagamento_use_case().consultar_status(self.principal(), pedido_id)
        return Response({'success': True, **situacao})
