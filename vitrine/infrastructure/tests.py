# vitrine/infrastructure/tests.py

import unittest
from decimal import Decimal
from io import StringIO
from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db.utils import OperationalError
from django.test import TestCase

from vitrine.carrinho.models import Carrinho as CarrinhoModel, ItemCarrinho as ItemCarrinhoModel
from vitrine.catalogo.models import Produto as ProdutoModel
from vitrine.core.entities import EnderecoEntrega, ItemPedido, Pedido, Principal, ResultadoPagamento, StatusPedido
from vitrine.core.exceptions import PedidoNaoEncontradoError, ServicoExternoError
from vitrine.core.use_cases import FinalizarPedidoUseCase, GerenciarCarrinhoUseCase
from vitrine.infrastructure.gateways import PagamentoGatewayStub
from vitrine.infrastructure.repositories import (
    CarrinhoRepositoryDjango, PedidoRepositoryDjango, ProdutoRepositoryDjango
)
from vitrine.pedidos.models import ItemPedido as ItemPedidoModel, Pedido as PedidoModel


def endereco() -> EnderecoEntrega:
    return EnderecoEntrega(
        nome_completo='Maria da Silva',
        endereco='Rua das Flores, 100',
        cidade='São Paulo',
        codigo_postal='01000-000',
        pais='Brasil',
        telefone='11999990000',
    )


class RepositoriosDjangoTestCase(TestCase):
    """Base com usuário, produtos e os repositórios sobre o ORM."""

    def setUp(self):
        Usuario = get_user_model()
        self.usuario = Usuario.objects.create_user(email='maria@exemplo.com', password='senha-forte-123')
        self.dono = Principal(usuario_id=str(self.usuario.pk))

        self.camiseta = ProdutoModel.objects.create(
            nome='Camiseta', preco=Decimal('100.00'), imagens=['/media/camiseta.jpg']
        )
        self.bone = ProdutoModel.objects.create(nome='Boné', preco=Decimal('19.99'))

        self.carrinho_repo = CarrinhoRepositoryDjango()
        self.pedido_repo = PedidoRepositoryDjango(self.carrinho_repo)
        self.carrinho_uc = GerenciarCarrinhoUseCase(self.carrinho_repo, ProdutoRepositoryDjango())
        self.checkout_uc = FinalizarPedidoUseCase(self.carrinho_repo, self.pedido_repo)


class TestProdutoRepositoryDjango(RepositoriosDjangoTestCase):

    def test_buscar_por_id(self):
        produto = ProdutoRepositoryDjango().buscar_por_id(str(self.camiseta.pk))

        self.assertEqual(produto.nome, 'Camiseta')
        self.assertEqual(produto.preco, Decimal('100.00'))
        self.assertEqual(produto.imagem_principal, '/media/camiseta.jpg')

    def test_ids_inexistentes_ou_mal_formados(self):
        repo = ProdutoRepositoryDjango()
        self.assertIsNone(repo.buscar_por_id('999999'))
        self.assertIsNone(repo.buscar_por_id('nao-e-numero'))


class TestCarrinhoRepositoryDjango(RepositoriosDjangoTestCase):

    def test_primeira_adicao_cria_carrinho(self):
        carrinho = self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 2, 'M', 'Preto')

        model = CarrinhoModel.objects.get(usuario=self.usuario)
        self.assertEqual(carrinho.id, str(model.pk))
        self.assertEqual(model.versao, 1)
        self.assertEqual(model.valor_total, Decimal('200.00'))
        item = model.itens.get()
        self.assertEqual((item.tamanho, item.cor, item.quantidade), ('M', 'Preto', 2))
        self.assertEqual(item.nome, 'Camiseta')

    def test_mesma_variante_nao_duplica_linha(self):
        self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 1, 'M')
        carrinho = self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 2, 'M')

        self.assertEqual(ItemCarrinhoModel.objects.count(), 1)
        self.assertEqual(carrinho.itens[0].quantidade, 3)
        self.assertEqual(carrinho.versao, 2)

    def test_remover_apaga_a_linha(self):
        self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 1)
        item_id = self.carrinho_uc.adicionar_item(self.dono, str(self.bone.pk), 1).itens[1].id

        carrinho = self.carrinho_uc.remover_item(self.dono, item_id)

        self.assertFalse(ItemCarrinhoModel.objects.filter(pk=item_id).exists())
        self.assertEqual(len(carrinho.itens), 1)
        self.assertEqual(CarrinhoModel.objects.get().valor_total, Decimal('100.00'))

    def test_limpar_sem_carrinho(self):
        self.assertIsNone(self.carrinho_repo.limpar_carrinho(str(self.usuario.pk)))

    def test_limpar_mantem_carrinho_e_incrementa_versao(self):
        self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 1)

        carrinho = self.carrinho_repo.limpar_carrinho(str(self.usuario.pk))

        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.valor_total, Decimal('0'))
        self.assertEqual(carrinho.versao, 2)
        self.assertEqual(CarrinhoModel.objects.count(), 1)
        self.assertEqual(ItemCarrinhoModel.objects.count(), 0)


class TestPedidoRepositoryDjango(RepositoriosDjangoTestCase):

    def _checkout(self, *produtos):
        for produto in produtos or (self.camiseta,):
            self.carrinho_uc.adicionar_item(self.dono, str(produto.pk), 2)
        return self.checkout_uc.executar(self.dono, endereco(), 'stripe')

    def test_checkout_grava_pedido_e_esvazia_carrinho(self):
        carrinho = self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 2)

        pedido = self.checkout_uc.executar(self.dono, endereco(), 'stripe')

        model = PedidoModel.objects.get(pk=pedido.id)
        self.assertEqual(model.valor_itens, Decimal('200.00'))
        self.assertEqual(model.valor_imposto, Decimal('16.0000'))
        self.assertEqual(model.valor_total, Decimal('216.00'))
        self.assertEqual(model.status, 'Placed')
        self.assertEqual(model.chave_idempotencia, carrinho.chave_idempotencia)
        self.assertEqual(model.endereco_entrega_json['cidade'], 'São Paulo')

        item = ItemPedidoModel.objects.get(pedido=model)
        self.assertEqual(item.subtotal, Decimal('200.00'))
        self.assertEqual(item.produto_id, self.camiseta.pk)

        self.assertEqual(ItemCarrinhoModel.objects.count(), 0)
        self.assertEqual(CarrinhoModel.objects.get().valor_total, Decimal('0'))

    def test_falha_ao_esvaziar_desfaz_o_pedido(self):
        """
        Cenário: A limpeza do carrinho falha dentro da transação; nada é gravado.
        """
        self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 2)

        with patch.object(self.carrinho_repo, 'limpar_carrinho', side_effect=RuntimeError('falha')):
            with self.assertRaises(ServicoExternoError):
                self.checkout_uc.executar(self.dono, endereco(), 'stripe')

        self.assertEqual(PedidoModel.objects.count(), 0)
        self.assertEqual(ItemPedidoModel.objects.count(), 0)
        self.assertEqual(ItemCarrinhoModel.objects.count(), 1)

    def test_chave_repetida_devolve_pedido_existente(self):
        carrinho = self.carrinho_uc.adicionar_item(self.dono, str(self.camiseta.pk), 1)
        itens = (ItemPedido(produto_id=str(self.camiseta.pk), nome='Camiseta', imagem='',
                            preco=Decimal('100.00'), quantidade=1),)
        pedido = Pedido(
            usuario_id=str(self.usuario.pk), itens=itens, endereco_entrega=endereco(),
            metodo_pagamento='cod', valor_itens=Decimal('100.00'), valor_imposto=Decimal('8.00'),
            valor_frete=Decimal('0'), valor_total=Decimal('108.00'),
            chave_idempotencia=carrinho.chave_idempotencia,
        )

        primeiro = self.pedido_repo.criar_pedido(pedido, carrinho)
        segundo = self.pedido_repo.criar_pedido(pedido, carrinho)

        self.assertEqual(primeiro.id, segundo.id)
        self.assertEqual(PedidoModel.objects.count(), 1)
        self.assertEqual(ItemPedidoModel.objects.count(), 1)

    def test_atualizar_grava_apenas_campos_mutaveis(self):
        pedido = self._checkout()
        pedido.status = StatusPedido.PROCESSING
        pedido.esta_pago = True
        pedido.resultado_pagamento = ResultadoPagamento(id='PAY-1', status='COMPLETED')
        pedido.valor_total = Decimal('1.00')
        pedido.metodo_pagamento = 'cod'

        atualizado = self.pedido_repo.atualizar(pedido)

        self.assertEqual(atualizado.status, StatusPedido.PROCESSING)
        self.assertTrue(atualizado.esta_pago)
        self.assertEqual(atualizado.resultado_pagamento.id, 'PAY-1')
        self.assertEqual(atualizado.valor_total, Decimal('216.00'))
        self.assertEqual(atualizado.metodo_pagamento, 'stripe')

    def test_atualizar_pedido_inexistente(self):
        pedido = self._checkout()
        pedido.id = '999999'
        with self.assertRaises(PedidoNaoEncontradoError):
            self.pedido_repo.atualizar(pedido)

    def test_listagem_mais_recente_primeiro(self):
        primeiro = self._checkout(self.camiseta)
        segundo = self._checkout(self.bone)

        ids = [pedido.id for pedido in self.pedido_repo.listar_pedidos_por_usuario(str(self.usuario.pk))]

        self.assertEqual(ids, [segundo.id, primeiro.id])
        self.assertEqual(len(self.pedido_repo.listar_todos_pedidos()), 2)

    def test_buscar_por_id_mal_formado(self):
        self.assertIsNone(self.pedido_repo.buscar_por_id('abc'))
        self.assertIsNone(self.pedido_repo.buscar_por_chave_idempotencia(''))

    def test_itens_do_pedido_sobrevivem_ao_produto(self):
        pedido = self._checkout()
        self.camiseta.delete()

        gravado = self.pedido_repo.buscar_por_id(pedido.id)

        self.assertEqual(gravado.itens[0].nome, 'Camiseta')
        self.assertEqual(gravado.itens[0].produto_id, '')


# ====================================================================
# GATEWAY DE PAGAMENTO SIMULADO
# ====================================================================

class TestPagamentoGatewayStub(unittest.TestCase):

    def setUp(self):
        self.gateway = PagamentoGatewayStub(relogio=lambda: 1700000000.5)
        self.pedido = Pedido(
            id='7', usuario_id='1', endereco_entrega=endereco(), metodo_pagamento='razorpay',
            itens=(ItemPedido(produto_id='1', nome='A', imagem='', preco=Decimal('100'), quantidade=2),),
            valor_itens=Decimal('200'), valor_imposto=Decimal('16'), valor_frete=Decimal('0'),
            valor_total=Decimal('216.00'),
        )

    def test_criar_cobranca_em_centavos(self):
        cobranca = self.gateway.criar_cobranca(self.pedido)

        order = cobranca['order']
        self.assertEqual(order['id'], 'order_mock_1700000000500')
        self.assertEqual(order['amount'], 21600)
        self.assertEqual(order['amount_due'], 21600)
        self.assertEqual(order['receipt'], 'receipt_7')
        self.assertEqual(order['status'], 'created')
        self.assertIn('key_id', cobranca)

    def test_verificacao_sempre_aprovada(self):
        detalhes = self.gateway.verificar_pagamento({'razorpay_order_id': 'order_1', 'razorpay_payment_id': 'pay_1'})
        self.assertEqual(detalhes['status'], 'success')
        self.assertEqual(detalhes['payment_id'], 'pay_1')

    def test_confirmar_repassa_qualquer_status(self):
        for status in ('failed', 'DECLINED', 'Cancelled', 'COMPLETED'):
            with self.subTest(status=status):
                resultado = ResultadoPagamento(id='PAY-1', status=status, email_address='não é um e-mail')
                self.assertIs(self.gateway.confirmar(self.pedido, resultado), resultado)

    def test_consultar_status(self):
        self.assertEqual(self.gateway.consultar_status('7'), {'payment_status': 'completed', 'order_id': '7'})


# ====================================================================
# COMANDOS DE GERENCIAMENTO
# ====================================================================

class TestCarregarProdutos(TestCase):

    def test_carga_idempotente(self):
        call_command('carregar_produtos', stdout=StringIO())
        call_command('carregar_produtos', stdout=StringIO())

        self.assertEqual(ProdutoModel.objects.count(), 5)
        self.assertTrue(ProdutoModel.objects.filter(nome='iPhone 15 Pro', preco=Decimal('999.00')).exists())

    def test_limpar_antes_de_carregar(self):
        ProdutoModel.objects.create(nome='Produto Antigo', preco=Decimal('1.00'))

        call_command('carregar_produtos', '--limpar', stdout=StringIO())

        self.assertFalse(ProdutoModel.objects.filter(nome='Produto Antigo').exists())
        self.assertEqual(ProdutoModel.objects.count(), 5)


class TestWaitForDb(unittest.TestCase):

    @patch('vitrine.core.management.commands.wait_for_db.time.sleep')
    @patch('vitrine.core.management.commands.wait_for_db.connections')
    def test_aguarda_ate_conectar(self, connections_mock, sleep_mock):
        conexao = MagicMock()
        conexao.ensure_connection.side_effect = [OperationalError(), OperationalError(), None]
        connections_mock.__getitem__.return_value = conexao
        saida = StringIO()

        call_command('wait_for_db', '--intervalo', '0.5', stdout=saida)

        self.assertEqual(conexao.ensure_connection.call_count, 3)
        self.assertEqual(sleep_mock.call_count, 2)
        sleep_mock.assert_called_with(0.5)
        self.assertIn('Banco de dados disponível!', saida.getvalue())

    @patch('vitrine.core.management.commands.wait_for_db.time.sleep')
    @patch('vitrine.core.management.commands.wait_for_db.connections')
    def test_desiste_apos_as_tentativas(self, connections_mock, sleep_mock):
        conexao = MagicMock()
        conexao.ensure_connection.side_effect = OperationalError()
        connections_mock.__getitem__.return_value = conexao

        with self.assertRaises(CommandError):
            call_command('wait_for_db', '--tentativas', '2', stdout=StringIO())

        self.assertEqual(conexao.ensure_connection.call_count, 2)
