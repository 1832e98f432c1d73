from typing import Optional

from rest_framework import serializers

from vitrine.core.entities import EnderecoEntrega, METODOS_PAGAMENTO, ResultadoPagamento

# As chaves JSON seguem o formato camelCase do contrato da API;
# `source` aponta para o atributo correspondente da entidade.


# ====================================================================
# SERIALIZERS DE ENDEREÇO
# ====================================================================

class EnderecoEntregaSerializer(serializers.Serializer):
    """
    Endereço de entrega. Usado na entrada (checkout e edição parcial) e na
    saída (pedido). Chaves desconhecidas são rejeitadas.
    """
    fullName = serializers.CharField(source='nome_completo', max_length=255)
    address = serializers.CharField(source='endereco', max_length=255)
    city = serializers.CharField(source='cidade', max_length=100)
    postalCode = serializers.CharField(source='codigo_postal', max_length=20)
    country = serializers.CharField(source='pais', max_length=100)
    phone = serializers.CharField(source='telefone', max_length=20)

    def to_internal_value(self, data):
        if isinstance(data, dict):
            desconhecidos = set(data) - set(self.fields)
            if desconhecidos:
                raise serializers.ValidationError(
                    {campo: ["Campo de endereço desconhecido."] for campo in sorted(desconhecidos)}
                )
        return super().to_internal_value(data)


# ====================================================================
# SERIALIZERS DE ENTRADA: CARRINHO
# ====================================================================

class AdicionarItemSerializer(serializers.Serializer):
    productId = serializers.CharField(source='produto_id')
    quantity = serializers.IntegerField(source='quantidade', default=1)
    size = serializers.CharField(source='tamanho', required=False, allow_blank=True, allow_null=True, default='')
    color = serializers.CharField(source='cor', required=False, allow_blank=True, allow_null=True, default='')


class AtualizarItemSerializer(serializers.Serializer):
    # Quantidade <= 0 remove o item
    quantity = serializers.IntegerField(source='quantidade')


# ====================================================================
# SERIALIZERS DE ENTRADA: PEDIDOS E PAGAMENTO
# ====================================================================

class CheckoutSerializer(serializers.Serializer):
    """
    Serializer para a validação dos dados de checkout.
    """
    shippingAddress = EnderecoEntregaSerializer(source='endereco_entrega', required=False)
    paymentMethod = serializers.ChoiceField(source='metodo_pagamento', choices=METODOS_PAGAMENTO)

    def to_endereco_entity(self) -> Optional[EnderecoEntrega]:
        """Sem shippingAddress, a view usa o endereço padrão do usuário."""
        dados = self.validated_data.get('endereco_entrega')
        return EnderecoEntrega(**dados) if dados is not None else None


class EditarEnderecoSerializer(serializers.Serializer):
    """Edição parcial: só os campos enviados são validados e mesclados."""
    shippingAddress = EnderecoEntregaSerializer(source='endereco_entrega')

    def __init__(self, *args, **kwargs):
        kwargs['partial'] = True
        super().__init__(*args, **kwargs)

    def validate(self, attrs):
        if 'endereco_entrega' not in attrs:
            raise serializers.ValidationError({'shippingAddress': ["Este campo é obrigatório."]})
        return attrs


class PagamentoSerializer(serializers.Serializer):
    """
    Resultado repassado pelo gateway (PayPal/Stripe). O e-mail pode vir
    direto em `email` ou aninhado em `payer.email_address`.
    """
    id = serializers.CharField()
    status = serializers.CharField()
    update_time = serializers.CharField(required=False, allow_blank=True, default='')
    email = serializers.CharField(required=False, allow_blank=True)
    payer = serializers.DictField(required=False)

    def to_resultado(self) -> ResultadoPagamento:
        dados = self.validated_data
        email = dados.get('email') or (dados.get('payer') or {}).get('email_address', '')
        return ResultadoPagamento(
            id=dados['id'],
            status=dados['status'],
            update_time=dados.get('update_time', ''),
            email_address=email or '',
        )


class StatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class AvancarStatusSerializer(serializers.Serializer):
    # Sem status, o pedido avança para o próximo estado do fluxo normal
    status = serializers.CharField(required=False, allow_null=True)


class CriarCobrancaSerializer(serializers.Serializer):
    orderId = serializers.CharField(source='pedido_id')


# ====================================================================
# SERIALIZERS DE SAÍDA (entidades do Core -> JSON)
# ====================================================================

class ItemCarrinhoSerializer(serializers.Serializer):
    _id = serializers.CharField(source='id', read_only=True)
    product = serializers.CharField(source='produto_id', read_only=True)
    name = serializers.CharField(source='nome', read_only=True)
    image = serializers.CharField(source='imagem', read_only=True)
    price = serializers.DecimalField(source='preco', max_digits=None, decimal_places=2, read_only=True)
    quantity = serializers.IntegerField(source='quantidade', read_only=True)
    size = serializers.CharField(source='tamanho', read_only=True)
    color = serializers.CharField(source='cor', read_only=True)


class CarrinhoSerializer(serializers.Serializer):
    """
    Serializer principal para o carrinho de compras.
    """
    _id = serializers.CharField(source='id', read_only=True, allow_null=True)
    user = serializers.CharField(source='usuario_id', read_only=True)
    items = ItemCarrinhoSerializer(source='itens', many=True, read_only=True)
    totalAmount = serializers.DecimalField(source='valor_total', max_digits=None, decimal_places=2, read_only=True)
    totalQuantity = serializers.IntegerField(source='quantidade_total', read_only=True)
    version = serializers.IntegerField(source='versao', read_only=True)
    updatedAt = serializers.DateTimeField(source='data_atualizacao', read_only=True)


class ItemPedidoSerializer(serializers.Serializer):
    product = serializers.CharField(source='produto_id', read_only=True)
    name = serializers.CharField(source='nome', read_only=True)
    image = serializers.CharField(source='imagem', read_only=True)
    price = serializers.DecimalField(source='preco', max_digits=None, decimal_places=2, read_only=True)
    quantity = serializers.IntegerField(source='quantidade', read_only=True)
    size = serializers.CharField(source='tamanho', read_only=True)
    color = serializers.CharField(source='cor', read_only=True)


class ResultadoPagamentoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    update_time = serializers.CharField(read_only=True)
    email_address = serializers.CharField(read_only=True)


class PedidoSerializer(serializers.Serializer):
    _id = serializers.CharField(source='id', read_only=True)
    user = serializers.CharField(source='usuario_id', read_only=True)
    orderItems = ItemPedidoSerializer(source='itens', many=True, read_only=True)
    shippingAddress = EnderecoEntregaSerializer(source='endereco_entrega', read_only=True)
    paymentMethod = serializers.CharField(source='metodo_pagamento', read_only=True)
    paymentResult = ResultadoPagamentoSerializer(source='resultado_pagamento', read_only=True)
    itemsPrice = serializers.DecimalField(source='valor_itens', max_digits=None, decimal_places=2, read_only=True)
    # Guardado com 4 casas; exibido com 2, como os demais valores
    taxPrice = serializers.DecimalField(source='valor_imposto', max_digits=None, decimal_places=2, read_only=True)
    shippingPrice = serializers.DecimalField(source='valor_frete', max_digits=None, decimal_places=2, read_only=True)
    totalPrice = serializers.DecimalField(source='valor_total', max_digits=None, decimal_places=2, read_only=True)
    status = serializers.CharField(source='status.value', read_only=True)
    isPaid = serializers.BooleanField(source='esta_pago', read_only=True)
    paidAt = serializers.DateTimeField(source='pago_em', read_only=True)
    isDelivered = serializers.BooleanField(source='esta_entregue', read_only=True)
    deliveredAt = serializers.DateTimeField(source='entregue_em', read_only=True)
    createdAt = serializers.DateTimeField(source='criado_em', read_only=True)
    updatedAt = serializers.DateTimeField(source='atualizado_em', read_only=True)
