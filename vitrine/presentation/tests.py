# vitrine/presentation/tests.py

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from vitrine.catalogo.models import Produto
from vitrine.core.exceptions import CheckoutIncompletoError
from vitrine.pedidos.models import Pedido

ENDERECO = {
    'fullName': 'Maria da Silva',
    'address': 'Rua das Flores, 100',
    'city': 'São Paulo',
    'postalCode': '01000-000',
    'country': 'Brasil',
    'phone': '11999990000',
}


class ApiTestCase(TestCase):
    """Base: dono, outro cliente, administrador e dois produtos."""

    def setUp(self):
        Usuario = get_user_model()
        self.dono = Usuario.objects.create_user(email='maria@exemplo.com', password='senha-forte-123')
        self.outro = Usuario.objects.create_user(email='joao@exemplo.com', password='senha-forte-123')
        self.admin = Usuario.objects.create_user(email='admin@exemplo.com', password='senha-forte-123', is_admin=True)

        self.camiseta = Produto.objects.create(nome='Camiseta', preco=Decimal('100.00'), imagens=['/media/c.jpg'])
        self.bone = Produto.objects.create(nome='Boné', preco=Decimal('19.99'))

        self.client = APIClient()

    def como(self, usuario):
        self.client.force_authenticate(user=usuario)
        return self.client

    def adicionar(self, produto=None, quantidade=2, **extra):
        produto = produto or self.camiseta
        corpo = {'productId': str(produto.pk), 'quantity': quantidade, **extra}
        return self.client.post('/api/cart/add', corpo, format='json')

    def checkout(self, usuario=None, metodo='stripe'):
        self.como(usuario or self.dono)
        self.adicionar()
        resposta = self.client.post(
            '/api/orders', {'shippingAddress': ENDERECO, 'paymentMethod': metodo}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED, resposta.content)
        return resposta.json()['order']


# ====================================================================
# AUTENTICAÇÃO
# ====================================================================

class TestAutenticacao(ApiTestCase):

    def test_sem_credenciais_recebe_401(self):
        for metodo, url in (('get', '/api/cart'), ('post', '/api/orders'), ('get', '/api/orders/myorders')):
            with self.subTest(url=url):
                resposta = getattr(self.client, metodo)(url)
                self.assertEqual(resposta.status_code, status.HTTP_401_UNAUTHORIZED)
                self.assertFalse(resposta.json()['success'])

    def test_token_jwt(self):
        resposta = self.client.post(
            '/api/token', {'email': 'maria@exemplo.com', 'password': 'senha-forte-123'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        token = resposta.json()['access']

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        resposta = self.client.get('/api/cart')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.json()['cart']['user'], str(self.dono.pk))


# ====================================================================
# CARRINHO
# ====================================================================

class TestCarrinhoAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.como(self.dono)

    def test_carrinho_inicial_vazio(self):
        resposta = self.client.get('/api/cart')

        corpo = resposta.json()
        self.assertTrue(corpo['success'])
        self.assertEqual(corpo['cart']['items'], [])
        self.assertEqual(corpo['cart']['totalAmount'], 0)

    def test_adicionar_item(self):
        resposta = self.adicionar(size='M', color='Preto')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        carrinho = resposta.json()['cart']
        item = carrinho['items'][0]
        self.assertEqual(item['product'], str(self.camiseta.pk))
        self.assertEqual(item['name'], 'Camiseta')
        self.assertEqual(item['image'], '/media/c.jpg')
        self.assertEqual(item['price'], 100.0)
        self.assertEqual(item['size'], 'M')
        self.assertIn('_id', item)
        self.assertEqual(carrinho['totalAmount'], 200.0)
        self.assertEqual(carrinho['totalQuantity'], 2)

    def test_produto_inexistente_404(self):
        resposta = self.client.post('/api/cart/add', {'productId': '999999', 'quantity': 1}, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(resposta.json()['success'])

    def test_quantidade_invalida_400(self):
        resposta = self.adicionar(quantidade=0)
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

        resposta = self.adicionar(quantidade='muitos')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.json()['message'], 'Dados inválidos.')
        self.assertIn('quantity', resposta.json()['errors'])

    def test_atualizar_para_zero_remove(self):
        item_id = self.adicionar().json()['cart']['items'][0]['_id']

        resposta = self.client.put(f'/api/cart/update/{item_id}', {'quantity': 0}, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.json()['cart']['items'], [])

    def test_atualizar_item_inexistente_404(self):
        self.adicionar()
        resposta = self.client.put('/api/cart/update/item-fantasma', {'quantity': 3}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)

    def test_remover_item_inexistente_e_ignorado(self):
        self.adicionar()

        resposta = self.client.delete('/api/cart/remove/item-fantasma')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resposta.json()['cart']['items']), 1)

    def test_limpar(self):
        self.adicionar()
        self.adicionar(self.bone, 1)

        resposta = self.client.delete('/api/cart/clear')

        self.assertEqual(resposta.json()['cart']['items'], [])
        self.assertEqual(resposta.json()['cart']['totalAmount'], 0)


# ====================================================================
# CHECKOUT E PEDIDOS
# ====================================================================

class TestCheckoutAPI(ApiTestCase):

    def test_checkout_cria_pedido(self):
        """
        Cenário: Carrinho [{Camiseta, 100, qtd 2}] gera pedido de 216.00 e o carrinho é esvaziado.
        """
        pedido = self.checkout()

        self.assertEqual(pedido['itemsPrice'], 200.0)
        self.assertEqual(pedido['taxPrice'], 16.0)
        self.assertEqual(pedido['shippingPrice'], 0.0)
        self.assertEqual(pedido['totalPrice'], 216.0)
        self.assertEqual(pedido['status'], 'Placed')
        self.assertFalse(pedido['isPaid'])
        self.assertFalse(pedido['isDelivered'])
        self.assertEqual(pedido['user'], str(self.dono.pk))
        self.assertEqual(pedido['shippingAddress'], ENDERECO)
        self.assertEqual(pedido['orderItems'][0]['name'], 'Camiseta')

        carrinho = self.client.get('/api/cart').json()['cart']
        self.assertEqual(carrinho['items'], [])

    def test_carrinho_vazio_400(self):
        self.como(self.dono)
        resposta = self.client.post(
            '/api/orders', {'shippingAddress': ENDERECO, 'paymentMethod': 'stripe'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resposta.json()['success'])

    def test_endereco_invalido_400(self):
        self.como(self.dono)
        self.adicionar()

        incompleto = {k: v for k, v in ENDERECO.items() if k != 'city'}
        resposta = self.client.post(
            '/api/orders', {'shippingAddress': incompleto, 'paymentMethod': 'stripe'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

        desconhecido = {**ENDERECO, 'state': 'SP'}
        resposta = self.client.post(
            '/api/orders', {'shippingAddress': desconhecido, 'paymentMethod': 'stripe'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertEqual(len(self.client.get('/api/cart').json()['cart']['items']), 1)
        self.assertEqual(Pedido.objects.count(), 0)

    def test_metodo_de_pagamento_invalido_400(self):
        self.como(self.dono)
        self.adicionar()
        resposta = self.client.post(
            '/api/orders', {'shippingAddress': ENDERECO, 'paymentMethod': 'boleto'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('paymentMethod', resposta.json()['errors'])

    def test_imposto_exibido_com_duas_casas(self):
        """
        Cenário: Carrinho [{Boné, 19.99, qtd 2}]; o imposto 3.1984 é gravado inteiro e exibido como 3.20.
        """
        self.como(self.dono)
        self.adicionar(self.bone)

        resposta = self.client.post(
            '/api/orders', {'shippingAddress': ENDERECO, 'paymentMethod': 'stripe'}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resposta.json()['order']['taxPrice'], 3.2)
        self.assertEqual(Pedido.objects.get().valor_imposto, Decimal('3.1984'))

    def test_sem_endereco_usa_o_endereco_padrao(self):
        self.dono.endereco_padrao = {
            'nome_completo': 'Maria da Silva',
            'endereco': 'Rua das Flores, 100',
            'cidade': 'São Paulo',
            'codigo_postal': '01000-000',
            'pais': 'Brasil',
            'telefone': '11999990000',
        }
        self.dono.save()
        self.como(self.dono)
        self.adicionar()

        resposta = self.client.post('/api/orders', {'paymentMethod': 'cod'}, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED, resposta.content)
        self.assertEqual(resposta.json()['order']['shippingAddress'], ENDERECO)

    def test_sem_endereco_e_sem_padrao_400(self):
        self.como(self.dono)
        self.adicionar()

        resposta = self.client.post('/api/orders', {'paymentMethod': 'cod'}, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Pedido.objects.count(), 0)

    def test_checkout_incompleto_informa_o_pedido(self):
        self.como(self.dono)
        self.adicionar()
        erro = CheckoutIncompletoError('42')

        with patch('vitrine.core.use_cases.FinalizarPedidoUseCase.executar', side_effect=erro):
            resposta = self.client.post(
                '/api/orders', {'shippingAddress': ENDERECO, 'paymentMethod': 'stripe'}, format='json'
            )

        self.assertEqual(resposta.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resposta.json()['orderId'], '42')
        self.assertFalse(resposta.json()['success'])


class TestPedidosAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.pedido = self.checkout()
        self.url = f"/api/orders/{self.pedido['_id']}"

    def test_detalhe_por_dono_admin_e_outro(self):
        self.assertEqual(self.como(self.dono).get(self.url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.como(self.admin).get(self.url).status_code, status.HTTP_200_OK)
        resposta = self.como(self.outro).get(self.url)
        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(resposta.json()['success'])

    def test_pedido_inexistente_404(self):
        resposta = self.como(self.dono).get('/api/orders/999999')
        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)

    def test_listagem_geral_exige_admin(self):
        self.assertEqual(self.como(self.dono).get('/api/orders').status_code, status.HTTP_403_FORBIDDEN)

        resposta = self.como(self.admin).get('/api/orders')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual([p['_id'] for p in resposta.json()['orders']], [self.pedido['_id']])

    def test_meus_pedidos(self):
        segundo = self.checkout()
        self.checkout(self.outro)

        resposta = self.como(self.dono).get('/api/orders/myorders')

        ids = [p['_id'] for p in resposta.json()['orders']]
        self.assertEqual(ids, [segundo['_id'], self.pedido['_id']])

    def test_pagar(self):
        corpo = {
            'id': 'PAY-123',
            'status': 'COMPLETED',
            'update_time': '2024-05-01T12:00:00Z',
            'payer': {'email_address': 'maria@exemplo.com'},
        }

        resposta = self.como(self.dono).put(f'{self.url}/pay', corpo, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        pedido = resposta.json()['order']
        self.assertTrue(pedido['isPaid'])
        self.assertIsNotNone(pedido['paidAt'])
        self.assertEqual(pedido['paymentResult']['id'], 'PAY-123')
        self.assertEqual(pedido['paymentResult']['email_address'], 'maria@exemplo.com')

    def test_pagar_com_status_de_falha_grava_como_informado(self):
        corpo = {'id': 'PAY-1', 'status': 'failed', 'email': 'sem-arroba'}

        resposta = self.como(self.dono).put(f'{self.url}/pay', corpo, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK, resposta.content)
        pedido = resposta.json()['order']
        self.assertTrue(pedido['isPaid'])
        self.assertEqual(pedido['paymentResult']['status'], 'failed')
        self.assertEqual(pedido['paymentResult']['email_address'], 'sem-arroba')
        self.assertTrue(Pedido.objects.get(pk=self.pedido['_id']).esta_pago)

    def test_pagar_sem_id_400(self):
        resposta = self.como(self.dono).put(f'{self.url}/pay', {'status': 'COMPLETED'}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_entregar_exige_admin_e_nao_muda_status(self):
        self.assertEqual(self.como(self.dono).put(f'{self.url}/deliver').status_code, status.HTTP_403_FORBIDDEN)

        resposta = self.como(self.admin).put(f'{self.url}/deliver')

        pedido = resposta.json()['order']
        self.assertTrue(pedido['isDelivered'])
        self.assertIsNotNone(pedido['deliveredAt'])
        self.assertEqual(pedido['status'], 'Placed')

    def test_cancelar_pedido_enviado(self):
        """
        Cenário: O admin marca o pedido como enviado; o cancelamento do dono é recusado.
        """
        self.como(self.admin).put(f'{self.url}/status', {'status': 'Shipped'}, format='json')

        resposta = self.como(self.dono).put(f'{self.url}/cancel')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.json()['status'], 'Shipped')
        self.assertEqual(Pedido.objects.get(pk=self.pedido['_id']).status, 'Shipped')

    def test_cancelar(self):
        resposta = self.como(self.dono).put(f'{self.url}/cancel')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.json()['order']['status'], 'Cancelled')

    def test_outro_cliente_nao_cancela(self):
        resposta = self.como(self.outro).put(f'{self.url}/cancel')
        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)

    def test_editar_endereco_parcial(self):
        resposta = self.como(self.dono).put(
            f'{self.url}/edit', {'shippingAddress': {'city': 'Campinas'}}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        endereco = resposta.json()['order']['shippingAddress']
        self.assertEqual(endereco['city'], 'Campinas')
        self.assertEqual(endereco['fullName'], 'Maria da Silva')

    def test_editar_endereco_sem_dados_400(self):
        resposta = self.como(self.dono).put(f'{self.url}/edit', {}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_desconhecido_400(self):
        resposta = self.como(self.admin).put(f'{self.url}/status', {'status': 'Extraviado'}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_avancar_status(self):
        resposta = self.como(self.admin).put(f'{self.url}/advance', {}, format='json')
        self.assertEqual(resposta.json()['order']['status'], 'Processing')

        resposta = self.como(self.admin).put(f'{self.url}/advance', {'status': 'Delivered'}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.json()['status'], 'Processing')


# ====================================================================
# PAGAMENTO (gateway simulado)
# ====================================================================

class TestPagamentoAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.pedido = self.checkout()

    def test_criar_cobranca(self):
        resposta = self.como(self.dono).post(
            '/api/payment/create-order', {'orderId': self.pedido['_id']}, format='json'
        )

        corpo = resposta.json()
        self.assertTrue(corpo['success'])
        self.assertEqual(corpo['order']['amount'], 21600)
        self.assertTrue(corpo['order']['id'].startswith('order_mock_'))
        self.assertIn('key_id', corpo)

    def test_criar_cobranca_de_outro_cliente(self):
        resposta = self.como(self.outro).post(
            '/api/payment/create-order', {'orderId': self.pedido['_id']}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)

    def test_verificar(self):
        resposta = self.como(self.dono).post(
            '/api/payment/verify', {'razorpay_order_id': 'order_mock_1', 'razorpay_payment_id': 'pay_1'},
            format='json',
        )

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.json()['payment_details']['status'], 'success')

    def test_consultar_status(self):
        resposta = self.como(self.dono).get(f"/api/payment/status/{self.pedido['_id']}")

        self.assertEqual(resposta.json()['payment_status'], 'completed')
        self.assertEqual(resposta.json()['order_id'], self.pedido['_id'])
