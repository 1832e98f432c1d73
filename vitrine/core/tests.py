# vitrine/core/tests.py

import unittest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock, patch

from vitrine.core.autorizacao import Acesso, GuardaAutorizacao, Operacao
from vitrine.core.entities import (
    Carrinho, EnderecoEntrega, ItemCarrinho, ItemPedido, Pedido, Principal, Produto, ResultadoPagamento, StatusPedido
)
from vitrine.core.exceptions import (
    AcessoNegadoError,
    CarrinhoVazioError,
    CheckoutIncompletoError,
    ConflitoEstadoError,
    DadosInvalidosError,
    ItemCarrinhoNaoEncontradoError,
    NaoAutenticadoError,
    PedidoNaoEncontradoError,
    ProdutoNaoEncontradoError,
    ServicoExternoError,
    StatusInvalidoError,
    ValorInvalidoError,
)
from vitrine.core.maquina_estados import MaquinaEstadosPedido
from vitrine.core.precificacao import calcular_totais, somar_itens
from vitrine.core.use_cases import (
    FinalizarPedidoUseCase, GerenciarCarrinhoUseCase, GerenciarPedidoUseCase, ProcessarPagamentoUseCase
)
from vitrine.infrastructure.gateways import PagamentoGatewayStub
from vitrine.infrastructure.repositories import CarrinhoRepository, PedidoRepository, ProdutoRepository

S = StatusPedido

ADMIN = Principal(usuario_id='admin-1', is_admin=True)
DONO = Principal(usuario_id='user-1')
OUTRO = Principal(usuario_id='user-2')
ANONIMO = Principal.anonimo()

INSTANTE_FIXO = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def endereco_completo(**campos) -> EnderecoEntrega:
    dados = dict(
        nome_completo='Maria da Silva',
        endereco='Rua das Flores, 100',
        cidade='São Paulo',
        codigo_postal='01000-000',
        pais='Brasil',
        telefone='11999990000',
    )
    dados.update(campos)
    return EnderecoEntrega(**dados)


def catalogo() -> dict:
    return {
        'prod-a': Produto(id='prod-a', nome='Produto A', preco=Decimal('100.00'), imagens=['/media/a.jpg']),
        'prod-b': Produto(id='prod-b', nome='Produto B', preco=Decimal('19.99')),
    }


def novo_pedido(status=S.PLACED, usuario_id='user-1') -> Pedido:
    item = ItemPedido(produto_id='prod-a', nome='Produto A', imagem='', preco=Decimal('100'), quantidade=2)
    return Pedido(
        id='1',
        usuario_id=usuario_id,
        itens=(item,),
        endereco_entrega=endereco_completo(),
        metodo_pagamento='stripe',
        valor_itens=Decimal('200'),
        valor_imposto=Decimal('16'),
        valor_frete=Decimal('0'),
        valor_total=Decimal('216.00'),
        status=status,
    )


# ====================================================================
# PRECIFICAÇÃO
# ====================================================================

class TestPrecificacao(unittest.TestCase):

    def test_cenario_dois_itens_de_cem(self):
        """
        Cenário: [{A, 100, qtd 2}] -> itens 200, imposto 16.00, total 216.00.
        """
        itens = [ItemPedido(produto_id='A', nome='A', imagem='', preco=Decimal('100'), quantidade=2)]

        totais = calcular_totais(itens)

        self.assertEqual(totais.valor_itens, Decimal('200'))
        self.assertEqual(totais.valor_imposto, Decimal('16.00'))
        self.assertEqual(totais.valor_frete, Decimal('0'))
        self.assertEqual(totais.valor_total, Decimal('216.00'))

    def test_apenas_o_total_e_arredondado(self):
        itens = [ItemCarrinho(produto_id='B', quantidade=1, preco=Decimal('19.99'))]

        totais = calcular_totais(itens)

        self.assertEqual(totais.valor_imposto, Decimal('1.5992'))
        self.assertEqual(totais.valor_total, Decimal('21.59'))
        self.assertEqual(totais.valor_total.as_tuple().exponent, -2)

    def test_total_igual_itens_vezes_um_ponto_zero_oito(self):
        for preco, quantidade in [('10.05', 1), ('0.99', 3), ('1234.56', 7), ('0.01', 1)]:
            with self.subTest(preco=preco, quantidade=quantidade):
                itens = [ItemCarrinho(produto_id='X', quantidade=quantidade, preco=Decimal(preco))]
                totais = calcular_totais(itens)
                esperado = (Decimal(preco) * quantidade * Decimal('1.08')).quantize(Decimal('0.01'))
                self.assertEqual(totais.valor_total, esperado)

    def test_lista_vazia_soma_zero(self):
        self.assertEqual(somar_itens([]), Decimal('0'))
        self.assertEqual(calcular_totais([]).valor_total, Decimal('0.00'))

    def test_preco_negativo_e_rejeitado(self):
        item = SimpleNamespace(produto_id='X', preco=Decimal('-1'), quantidade=1)
        with self.assertRaises(ValorInvalidoError):
            somar_itens([item])

    def test_quantidade_negativa_e_rejeitada(self):
        item = SimpleNamespace(produto_id='X', preco=Decimal('1'), quantidade=-2)
        with self.assertRaises(ValorInvalidoError):
            calcular_totais([item])


# ====================================================================
# ENTIDADES
# ====================================================================

class TestEntidades(unittest.TestCase):

    def test_item_carrinho_normaliza_variantes_nulas(self):
        item = ItemCarrinho(produto_id='A', quantidade=1, preco='10', tamanho=None, cor=None)
        self.assertEqual(item.chave, ('A', '', ''))
        self.assertEqual(item.preco, Decimal('10'))

    def test_item_carrinho_rejeita_quantidade_invalida(self):
        for quantidade in (0, -1, 1.5, '2', True):
            with self.subTest(quantidade=quantidade):
                with self.assertRaises(DadosInvalidosError):
                    ItemCarrinho(produto_id='A', quantidade=quantidade, preco=Decimal('1'))

    def test_status_aceita_valor_ou_nome(self):
        self.assertIs(StatusPedido.de_texto('Out for delivery'), S.OUT_FOR_DELIVERY)
        self.assertIs(StatusPedido.de_texto('OUT_FOR_DELIVERY'), S.OUT_FOR_DELIVERY)
        self.assertIs(StatusPedido.de_texto('OutForDelivery'), S.OUT_FOR_DELIVERY)
        self.assertIs(StatusPedido.de_texto('cancelled'), S.CANCELLED)
        with self.assertRaises(StatusInvalidoError):
            StatusPedido.de_texto('Perdido')

    def test_endereco_mescla_campos_informados(self):
        endereco = endereco_completo().mesclar({'cidade': 'Campinas'})
        self.assertEqual(endereco.cidade, 'Campinas')
        self.assertEqual(endereco.nome_completo, 'Maria da Silva')

    def test_endereco_rejeita_campos_desconhecidos(self):
        with self.assertRaises(DadosInvalidosError):
            endereco_completo().mesclar({'estado': 'SP'})

    def test_endereco_incompleto(self):
        with self.assertRaises(DadosInvalidosError):
            endereco_completo(telefone='  ').validar_completo()

    def test_pedido_rejeita_metodo_de_pagamento_desconhecido(self):
        with self.assertRaises(DadosInvalidosError):
            Pedido(
                usuario_id='u', itens=novo_pedido().itens, endereco_entrega=endereco_completo(),
                metodo_pagamento='boleto', valor_itens=Decimal('1'), valor_imposto=Decimal('0'),
                valor_frete=Decimal('0'), valor_total=Decimal('1'),
            )

    def test_resultado_pagamento_exige_id_e_status(self):
        with self.assertRaises(DadosInvalidosError):
            ResultadoPagamento(id='', status='COMPLETED')
        with self.assertRaises(DadosInvalidosError):
            ResultadoPagamento(id='PAY-1', status='')


# ====================================================================
# CARRINHO
# ====================================================================

class TestGerenciarCarrinho(unittest.TestCase):

    def setUp(self):
        self.produtos = catalogo()
        self.carrinho_repo = CarrinhoRepository()
        self.use_case = GerenciarCarrinhoUseCase(self.carrinho_repo, ProdutoRepository(self.produtos))

    def test_obter_sem_carrinho_retorna_carrinho_vazio(self):
        carrinho = self.use_case.obter_carrinho(DONO)

        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.valor_total, Decimal('0'))
        self.assertEqual(carrinho.usuario_id, 'user-1')

    def test_adicionar_cria_carrinho_com_snapshot(self):
        """
        Cenário: A primeira adição cria o carrinho e congela preço, nome e imagem.
        """
        carrinho = self.use_case.adicionar_item(DONO, 'prod-a', 2, 'M', 'Preto')

        self.assertEqual(len(carrinho.itens), 1)
        item = carrinho.itens[0]
        self.assertEqual(item.preco, Decimal('100.00'))
        self.assertEqual(item.nome, 'Produto A')
        self.assertEqual(item.imagem, '/media/a.jpg')
        self.assertEqual(carrinho.valor_total, Decimal('200.00'))
        self.assertEqual(carrinho.versao, 1)

    def test_mesma_variante_soma_quantidades(self):
        self.use_case.adicionar_item(DONO, 'prod-a', 1, 'M', 'Preto')
        carrinho = self.use_case.adicionar_item(DONO, 'prod-a', 2, 'M', 'Preto')

        self.assertEqual(len(carrinho.itens), 1)
        self.assertEqual(carrinho.itens[0].quantidade, 3)
        self.assertEqual(carrinho.valor_total, Decimal('300.00'))

    def test_variante_diferente_cria_outro_item(self):
        self.use_case.adicionar_item(DONO, 'prod-a', 1, 'M', 'Preto')
        carrinho = self.use_case.adicionar_item(DONO, 'prod-a', 1, 'G', 'Preto')

        self.assertEqual(len(carrinho.itens), 2)

    def test_preco_congelado_na_adicao(self):
        self.use_case.adicionar_item(DONO, 'prod-a', 1)
        self.produtos['prod-a'].preco = Decimal('150.00')

        carrinho = self.use_case.adicionar_item(DONO, 'prod-b', 1)

        item_a = next(item for item in carrinho.itens if item.produto_id == 'prod-a')
        self.assertEqual(item_a.preco, Decimal('100.00'))
        self.assertEqual(carrinho.valor_total, Decimal('119.99'))

    def test_produto_inexistente(self):
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.adicionar_item(DONO, 'nao-existe', 1)
        self.assertIsNone(self.carrinho_repo.buscar_por_usuario('user-1'))

    def test_quantidade_invalida_na_adicao(self):
        for quantidade in (0, -1, 1.5, True):
            with self.subTest(quantidade=quantidade):
                with self.assertRaises(DadosInvalidosError):
                    self.use_case.adicionar_item(DONO, 'prod-a', quantidade)

    def test_anonimo_nao_usa_carrinho(self):
        with self.assertRaises(NaoAutenticadoError):
            self.use_case.adicionar_item(ANONIMO, 'prod-a', 1)
        with self.assertRaises(NaoAutenticadoError):
            self.use_case.obter_carrinho(ANONIMO)

    def test_atualizar_define_quantidade(self):
        item_id = self.use_case.adicionar_item(DONO, 'prod-b', 1).itens[0].id

        carrinho = self.use_case.atualizar_item(DONO, item_id, 5)

        self.assertEqual(carrinho.itens[0].quantidade, 5)
        self.assertEqual(carrinho.valor_total, Decimal('99.95'))

    def test_atualizar_para_zero_equivale_a_remover(self):
        for quantidade in (0, -3):
            with self.subTest(quantidade=quantidade):
                self.use_case.limpar(DONO)
                self.use_case.adicionar_item(DONO, 'prod-a', 1)
                item_id = self.use_case.adicionar_item(DONO, 'prod-b', 2).itens[1].id

                atualizado = self.use_case.atualizar_item(DONO, item_id, quantidade)

                self.assertEqual([item.produto_id for item in atualizado.itens], ['prod-a'])
                self.assertEqual(atualizado.valor_total, Decimal('100.00'))

    def test_atualizar_item_inexistente(self):
        self.use_case.adicionar_item(DONO, 'prod-a', 1)
        with self.assertRaises(ItemCarrinhoNaoEncontradoError):
            self.use_case.atualizar_item(DONO, 'item-fantasma', 2)

    def test_atualizar_sem_carrinho(self):
        with self.assertRaises(ItemCarrinhoNaoEncontradoError):
            self.use_case.atualizar_item(DONO, 'item-fantasma', 2)

    def test_remover_item_inexistente_nao_altera_carrinho(self):
        antes = self.use_case.adicionar_item(DONO, 'prod-a', 1)

        depois = self.use_case.remover_item(DONO, 'item-fantasma')

        self.assertEqual(len(depois.itens), 1)
        self.assertEqual(depois.versao, antes.versao)

    def test_remover_sem_carrinho_retorna_vazio(self):
        carrinho = self.use_case.remover_item(DONO, 'item-fantasma')
        self.assertTrue(carrinho.vazio)

    def test_remover_item(self):
        item_id = self.use_case.adicionar_item(DONO, 'prod-a', 1).itens[0].id

        carrinho = self.use_case.remover_item(DONO, item_id)

        self.assertTrue(carrinho.vazio)
        self.assertEqual(carrinho.valor_total, Decimal('0'))

    def test_limpar(self):
        self.use_case.adicionar_item(DONO, 'prod-a', 1)

        carrinho = self.use_case.limpar(DONO)

        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.valor_total, Decimal('0'))

    def test_total_confere_apos_qualquer_sequencia(self):
        a = self.use_case.adicionar_item(DONO, 'prod-a', 3).itens[0].id
        b = self.use_case.adicionar_item(DONO, 'prod-b', 2, 'P').itens[1].id
        passos = [
            lambda: self.use_case.adicionar_item(DONO, 'prod-b', 1, 'P'),
            lambda: self.use_case.atualizar_item(DONO, a, 1),
            lambda: self.use_case.adicionar_item(DONO, 'prod-a', 4, 'G'),
            lambda: self.use_case.remover_item(DONO, b),
            lambda: self.use_case.atualizar_item(DONO, a, 0),
        ]
        for passo in passos:
            carrinho = passo()
            self.assertEqual(carrinho.valor_total, somar_itens(carrinho.itens))
            gravado = self.carrinho_repo.buscar_por_usuario('user-1')
            self.assertEqual(gravado.valor_total, somar_itens(gravado.itens))

    def test_carrinhos_isolados_por_usuario(self):
        item_id = self.use_case.adicionar_item(DONO, 'prod-a', 1).itens[0].id

        self.assertTrue(self.use_case.obter_carrinho(OUTRO).vazio)
        with self.assertRaises(ItemCarrinhoNaoEncontradoError):
            self.use_case.atualizar_item(OUTRO, item_id, 3)

    def test_total_divergente_apos_gravacao(self):
        """
        Cenário: O repositório devolve um total que não bate com os itens.
        """
        carrinho_repo_mock = Mock()
        carrinho_repo_mock.buscar_por_usuario.return_value = None
        carrinho_repo_mock.salvar.return_value = Carrinho(
            usuario_id='user-1',
            itens=[ItemCarrinho(produto_id='prod-a', quantidade=1, preco=Decimal('100'))],
            valor_total=Decimal('1'),
        )
        use_case = GerenciarCarrinhoUseCase(carrinho_repo_mock, ProdutoRepository(self.produtos))

        with self.assertRaises(ServicoExternoError):
            use_case.adicionar_item(DONO, 'prod-a', 1)


# ====================================================================
# CHECKOUT
# ====================================================================

class TestFinalizarPedido(unittest.TestCase):

    def setUp(self):
        self.carrinho_repo = CarrinhoRepository()
        self.pedido_repo = PedidoRepository(self.carrinho_repo)
        self.carrinho_uc = GerenciarCarrinhoUseCase(self.carrinho_repo, ProdutoRepository(catalogo()))
        self.use_case = FinalizarPedidoUseCase(self.carrinho_repo, self.pedido_repo)

    def test_checkout_cenario_duzentos(self):
        """
        Cenário: [{A, 100, qtd 2}] -> pedido com 200 / 16.00 / 216.00 e carrinho vazio.
        """
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 2)

        pedido = self.use_case.executar(DONO, endereco_completo(), 'stripe')

        self.assertEqual(pedido.valor_itens, Decimal('200.00'))
        self.assertEqual(pedido.valor_imposto, Decimal('16.00'))
        self.assertEqual(pedido.valor_frete, Decimal('0'))
        self.assertEqual(pedido.valor_total, Decimal('216.00'))
        self.assertEqual(pedido.status, S.PLACED)
        self.assertEqual(pedido.usuario_id, 'user-1')
        self.assertFalse(pedido.esta_pago)
        self.assertEqual(pedido.itens[0].nome, 'Produto A')

        carrinho = self.carrinho_repo.buscar_por_usuario('user-1')
        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.valor_total, Decimal('0'))

    def test_valor_itens_igual_ao_total_do_carrinho(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1, 'M')
        carrinho = self.carrinho_uc.adicionar_item(DONO, 'prod-b', 3)

        pedido = self.use_case.executar(DONO, endereco_completo(), 'cod')

        self.assertEqual(pedido.valor_itens, carrinho.valor_total)
        self.assertEqual(len(pedido.itens), 2)

    def test_carrinho_vazio(self):
        with self.assertRaises(CarrinhoVazioError):
            self.use_case.executar(DONO, endereco_completo(), 'stripe')

        item_id = self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1).itens[0].id
        self.carrinho_uc.remover_item(DONO, item_id)
        with self.assertRaises(CarrinhoVazioError):
            self.use_case.executar(DONO, endereco_completo(), 'stripe')
        self.assertEqual(self.pedido_repo.listar_todos_pedidos(), [])

    def test_endereco_incompleto_mantem_carrinho(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1)

        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar(DONO, endereco_completo(cidade=''), 'stripe')

        self.assertEqual(len(self.carrinho_repo.buscar_por_usuario('user-1').itens), 1)

    def test_metodo_de_pagamento_invalido_mantem_carrinho(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1)

        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar(DONO, endereco_completo(), 'boleto')

        self.assertEqual(len(self.carrinho_repo.buscar_por_usuario('user-1').itens), 1)

    def test_anonimo(self):
        with self.assertRaises(NaoAutenticadoError):
            self.use_case.executar(ANONIMO, endereco_completo(), 'stripe')

    def test_falha_ao_gravar_pedido_mantem_carrinho(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 2)

        with patch.object(self.pedido_repo, 'criar_pedido', side_effect=RuntimeError('banco fora do ar')):
            with self.assertRaises(ServicoExternoError):
                self.use_case.executar(DONO, endereco_completo(), 'stripe')

        carrinho = self.carrinho_repo.buscar_por_usuario('user-1')
        self.assertEqual(len(carrinho.itens), 1)
        self.assertEqual(carrinho.valor_total, Decimal('200.00'))

    def test_repeticao_apos_falha_ao_limpar_carrinho_reaproveita_pedido(self):
        """
        Cenário: O pedido é gravado mas o carrinho não é esvaziado; o checkout
        repetido devolve o mesmo pedido e termina de esvaziar o carrinho.
        """
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 2)

        with patch.object(self.carrinho_repo, 'limpar_carrinho', side_effect=RuntimeError('timeout')):
            with self.assertRaises(CheckoutIncompletoError) as ctx:
                self.use_case.executar(DONO, endereco_completo(), 'stripe')
        pedido_id = ctx.exception.pedido_id
        self.assertIsNotNone(self.pedido_repo.buscar_por_id(pedido_id))

        pedido = self.use_case.executar(DONO, endereco_completo(), 'stripe')

        self.assertEqual(pedido.id, pedido_id)
        self.assertEqual(len(self.pedido_repo.listar_todos_pedidos()), 1)
        self.assertTrue(self.carrinho_repo.buscar_por_usuario('user-1').vazio)

    def test_novo_checkout_apos_nova_adicao_cria_outro_pedido(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1)
        primeiro = self.use_case.executar(DONO, endereco_completo(), 'stripe')
        self.carrinho_uc.adicionar_item(DONO, 'prod-b', 1)

        segundo = self.use_case.executar(DONO, endereco_completo(), 'paypal')

        self.assertNotEqual(primeiro.id, segundo.id)
        self.assertNotEqual(primeiro.chave_idempotencia, segundo.chave_idempotencia)

    def test_itens_do_pedido_nao_mudam_com_o_carrinho(self):
        self.carrinho_uc.adicionar_item(DONO, 'prod-a', 1)
        pedido = self.use_case.executar(DONO, endereco_completo(), 'stripe')

        self.carrinho_uc.adicionar_item(DONO, 'prod-b', 5)

        gravado = self.pedido_repo.buscar_por_id(pedido.id)
        self.assertEqual([item.produto_id for item in gravado.itens], ['prod-a'])


# ====================================================================
# AUTORIZAÇÃO
# ====================================================================

class TestGuardaAutorizacao(unittest.TestCase):

    def setUp(self):
        self.guarda = GuardaAutorizacao()
        self.pedido = novo_pedido()

    def test_pode_acessar(self):
        self.assertEqual(self.guarda.pode_acessar(ADMIN, self.pedido), Acesso(True, True))
        self.assertEqual(self.guarda.pode_acessar(DONO, self.pedido), Acesso(True, True))
        self.assertEqual(self.guarda.pode_acessar(OUTRO, self.pedido), Acesso())
        self.assertEqual(self.guarda.pode_acessar(ANONIMO, self.pedido), Acesso())

    def test_dono_so_executa_operacoes_de_cliente(self):
        for operacao in (Operacao.LER, Operacao.PAGAR, Operacao.CANCELAR, Operacao.EDITAR_ENDERECO):
            self.guarda.exigir(DONO, self.pedido, operacao)
        for operacao in (Operacao.ENTREGAR, Operacao.FORCAR_STATUS, Operacao.AVANCAR_STATUS):
            with self.subTest(operacao=operacao):
                with self.assertRaises(AcessoNegadoError):
                    self.guarda.exigir(DONO, self.pedido, operacao)

    def test_admin_executa_tudo(self):
        for operacao in Operacao:
            self.guarda.exigir(ADMIN, self.pedido, operacao)

    def test_outro_usuario_e_anonimo(self):
        with self.assertRaises(AcessoNegadoError):
            self.guarda.exigir(OUTRO, self.pedido, Operacao.LER)
        with self.assertRaises(NaoAutenticadoError):
            self.guarda.exigir(ANONIMO, self.pedido, Operacao.LER)
        with self.assertRaises(AcessoNegadoError):
            self.guarda.exigir_admin(DONO)


# ====================================================================
# MÁQUINA DE ESTADOS
# ====================================================================

class TestMaquinaEstadosPedido(unittest.TestCase):

    def setUp(self):
        self.maquina = MaquinaEstadosPedido(relogio=lambda: INSTANTE_FIXO)
        self.resultado = ResultadoPagamento(id='PAY-1', status='COMPLETED', email_address='maria@exemplo.com')

    def test_cancelar_antes_do_envio(self):
        for status in (S.PLACED, S.PROCESSING):
            with self.subTest(status=status):
                pedido = novo_pedido(status)
                self.maquina.cancelar(DONO, pedido)
                self.assertEqual(pedido.status, S.CANCELLED)

    def test_cancelar_depois_do_envio_falha(self):
        """
        Cenário: Pedido já enviado; o cancelamento falha e o status não muda.
        """
        for status in (S.SHIPPED, S.OUT_FOR_DELIVERY, S.DELIVERED):
            with self.subTest(status=status):
                pedido = novo_pedido(status)
                with self.assertRaises(ConflitoEstadoError) as ctx:
                    self.maquina.cancelar(DONO, pedido)
                self.assertEqual(pedido.status, status)
                self.assertEqual(ctx.exception.status_atual, status)

    def test_cancelar_pedido_cancelado_mantem_cancelado(self):
        pedido = novo_pedido(S.CANCELLED)

        self.maquina.cancelar(DONO, pedido)

        self.assertEqual(pedido.status, S.CANCELLED)

    def test_editar_endereco_antes_do_envio(self):
        for status in (S.PLACED, S.PROCESSING):
            with self.subTest(status=status):
                pedido = novo_pedido(status)
                self.maquina.editar_endereco(DONO, pedido, {'cidade': 'Campinas', 'telefone': '19988887777'})
                self.assertEqual(pedido.endereco_entrega.cidade, 'Campinas')
                self.assertEqual(pedido.endereco_entrega.telefone, '19988887777')
                self.assertEqual(pedido.endereco_entrega.nome_completo, 'Maria da Silva')

    def test_editar_endereco_depois_do_envio_falha(self):
        for status in (S.SHIPPED, S.OUT_FOR_DELIVERY, S.DELIVERED):
            with self.subTest(status=status):
                pedido = novo_pedido(status)
                with self.assertRaises(ConflitoEstadoError):
                    self.maquina.editar_endereco(DONO, pedido, {'cidade': 'Campinas'})
                self.assertEqual(pedido.endereco_entrega.cidade, 'São Paulo')

    def test_editar_endereco_com_campo_desconhecido(self):
        with self.assertRaises(DadosInvalidosError):
            self.maquina.editar_endereco(DONO, novo_pedido(), {'bairro': 'Centro'})

    def test_outro_usuario_e_negado_em_qualquer_status(self):
        for status in StatusPedido:
            with self.subTest(status=status):
                with self.assertRaises(AcessoNegadoError):
                    self.maquina.cancelar(OUTRO, novo_pedido(status))
                with self.assertRaises(AcessoNegadoError):
                    self.maquina.marcar_pago(OUTRO, novo_pedido(status), self.resultado)

    def test_marcar_pago(self):
        pedido = novo_pedido()

        self.maquina.marcar_pago(DONO, pedido, self.resultado)

        self.assertTrue(pedido.esta_pago)
        self.assertEqual(pedido.pago_em, INSTANTE_FIXO)
        self.assertEqual(pedido.resultado_pagamento, self.resultado)
        self.assertEqual(pedido.status, S.PLACED)

    def test_marcar_pago_em_estado_final_falha(self):
        for status in (S.DELIVERED, S.CANCELLED):
            with self.subTest(status=status):
                pedido = novo_pedido(status)
                with self.assertRaises(ConflitoEstadoError):
                    self.maquina.marcar_pago(ADMIN, pedido, self.resultado)
                self.assertFalse(pedido.esta_pago)

    def test_marcar_entregue_nao_altera_status(self):
        pedido = novo_pedido(S.PLACED)

        self.maquina.marcar_entregue(ADMIN, pedido)

        self.assertTrue(pedido.esta_entregue)
        self.assertEqual(pedido.entregue_em, INSTANTE_FIXO)
        self.assertEqual(pedido.status, S.PLACED)

    def test_marcar_entregue_exige_admin(self):
        with self.assertRaises(AcessoNegadoError):
            self.maquina.marcar_entregue(DONO, novo_pedido())

    def test_forcar_status_ignora_transicoes(self):
        pedido = novo_pedido(S.DELIVERED)

        self.maquina.forcar_status(ADMIN, pedido, 'Processing')

        self.assertEqual(pedido.status, S.PROCESSING)

    def test_forcar_status_desconhecido(self):
        pedido = novo_pedido()
        with self.assertRaises(StatusInvalidoError):
            self.maquina.forcar_status(ADMIN, pedido, 'Extraviado')
        self.assertEqual(pedido.status, S.PLACED)

    def test_forcar_status_exige_admin(self):
        with self.assertRaises(AcessoNegadoError):
            self.maquina.forcar_status(DONO, novo_pedido(), 'Shipped')

    def test_transicionar_segue_o_fluxo_normal(self):
        pedido = novo_pedido()
        for esperado in (S.PROCESSING, S.SHIPPED, S.OUT_FOR_DELIVERY, S.DELIVERED):
            self.maquina.transicionar(ADMIN, pedido)
            self.assertEqual(pedido.status, esperado)

        with self.assertRaises(ConflitoEstadoError):
            self.maquina.transicionar(ADMIN, pedido)

    def test_transicionar_para_destino(self):
        pedido = novo_pedido(S.PROCESSING)
        self.maquina.transicionar(ADMIN, pedido, 'Cancelled')
        self.assertEqual(pedido.status, S.CANCELLED)

    def test_transicionar_fora_da_tabela_falha(self):
        pedido = novo_pedido(S.PLACED)
        with self.assertRaises(ConflitoEstadoError):
            self.maquina.transicionar(ADMIN, pedido, S.SHIPPED)
        self.assertEqual(pedido.status, S.PLACED)

        with self.assertRaises(ConflitoEstadoError):
            self.maquina.transicionar(ADMIN, novo_pedido(S.SHIPPED), 'Cancelled')


# ====================================================================
# PEDIDOS E PAGAMENTO
# ====================================================================

class TestGerenciarPedido(unittest.TestCase):

    def setUp(self):
        self.carrinho_repo = CarrinhoRepository()
        self.pedido_repo = PedidoRepository(self.carrinho_repo)
        self.carrinho_uc = GerenciarCarrinhoUseCase(self.carrinho_repo, ProdutoRepository(catalogo()))
        self.checkout_uc = FinalizarPedidoUseCase(self.carrinho_repo, self.pedido_repo)

        self.pagamento_gateway_mock = Mock()
        self.pagamento_gateway_mock.confirmar.side_effect = lambda pedido, resultado: resultado
        self.use_case = GerenciarPedidoUseCase(
            self.pedido_repo,
            self.pagamento_gateway_mock,
            MaquinaEstadosPedido(relogio=lambda: INSTANTE_FIXO),
        )
        self.pedido = self._checkout(DONO)

    def _checkout(self, principal, produto_id='prod-a'):
        self.carrinho_uc.adicionar_item(principal, produto_id, 2)
        return self.checkout_uc.executar(principal, endereco_completo(), 'stripe')

    def test_detalhar(self):
        self.assertEqual(self.use_case.detalhar(DONO, self.pedido.id).id, self.pedido.id)
        self.assertEqual(self.use_case.detalhar(ADMIN, self.pedido.id).id, self.pedido.id)
        with self.assertRaises(AcessoNegadoError):
            self.use_case.detalhar(OUTRO, self.pedido.id)
        with self.assertRaises(NaoAutenticadoError):
            self.use_case.detalhar(ANONIMO, self.pedido.id)
        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.detalhar(DONO, '999')

    def test_listar_meus_mais_recente_primeiro(self):
        segundo = self._checkout(DONO, 'prod-b')
        self._checkout(OUTRO)

        pedidos = self.use_case.listar_meus(DONO)

        self.assertEqual([p.id for p in pedidos], [segundo.id, self.pedido.id])

    def test_listar_todos_exige_admin(self):
        self._checkout(OUTRO)
        with self.assertRaises(AcessoNegadoError):
            self.use_case.listar_todos(DONO)
        self.assertEqual(len(self.use_case.listar_todos(ADMIN)), 2)

    def test_pagar_grava_resultado(self):
        resultado = ResultadoPagamento(id='PAY-9', status='COMPLETED', update_time='2024-05-01T12:00:00Z')

        self.use_case.pagar(DONO, self.pedido.id, resultado)

        gravado = self.pedido_repo.buscar_por_id(self.pedido.id)
        self.assertTrue(gravado.esta_pago)
        self.assertEqual(gravado.pago_em, INSTANTE_FIXO)
        self.assertEqual(gravado.resultado_pagamento.id, 'PAY-9')
        self.pagamento_gateway_mock.confirmar.assert_called_once()

    def test_status_de_falha_e_gravado_como_informado(self):
        """
        Cenário: O gateway simulado repassa o resultado; mesmo um status de falha
        informado pelo cliente marca o pedido como pago e fica gravado como veio.
        """
        use_case = GerenciarPedidoUseCase(
            self.pedido_repo, PagamentoGatewayStub(), MaquinaEstadosPedido(relogio=lambda: INSTANTE_FIXO)
        )

        pedido = use_case.pagar(DONO, self.pedido.id, ResultadoPagamento(id='PAY-1', status='FAILED'))

        self.assertTrue(pedido.esta_pago)
        gravado = self.pedido_repo.buscar_por_id(self.pedido.id)
        self.assertTrue(gravado.esta_pago)
        self.assertEqual(gravado.resultado_pagamento.status, 'FAILED')

    def test_cancelar_pedido_enviado_mantem_status(self):
        self.use_case.forcar_status(ADMIN, self.pedido.id, 'Shipped')

        with self.assertRaises(ConflitoEstadoError):
            self.use_case.cancelar(DONO, self.pedido.id)

        self.assertEqual(self.pedido_repo.buscar_por_id(self.pedido.id).status, S.SHIPPED)

    def test_cancelar(self):
        pedido = self.use_case.cancelar(DONO, self.pedido.id)
        self.assertEqual(pedido.status, S.CANCELLED)
        self.assertEqual(self.pedido_repo.buscar_por_id(self.pedido.id).status, S.CANCELLED)

    def test_editar_endereco(self):
        pedido = self.use_case.editar_endereco(DONO, self.pedido.id, {'endereco': 'Av. Paulista, 1000'})
        self.assertEqual(pedido.endereco_entrega.endereco, 'Av. Paulista, 1000')
        self.assertEqual(pedido.endereco_entrega.cidade, 'São Paulo')

    def test_marcar_entregue(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.marcar_entregue(DONO, self.pedido.id)

        pedido = self.use_case.marcar_entregue(ADMIN, self.pedido.id)

        self.assertTrue(pedido.esta_entregue)
        self.assertEqual(pedido.status, S.PLACED)

    def test_admin_nao_ve_existencia_antes_de_ser_admin(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.forcar_status(DONO, '999', 'Shipped')

    def test_avancar_status(self):
        pedido = self.use_case.avancar_status(ADMIN, self.pedido.id)
        self.assertEqual(pedido.status, S.PROCESSING)
        pedido = self.use_case.avancar_status(ADMIN, self.pedido.id, 'Shipped')
        self.assertEqual(pedido.status, S.SHIPPED)

    def test_atualizacao_nao_altera_valores(self):
        pedido = self.use_case.detalhar(DONO, self.pedido.id)
        pedido.valor_total = Decimal('1.00')
        pedido.status = S.PROCESSING

        self.pedido_repo.atualizar(pedido)

        gravado = self.pedido_repo.buscar_por_id(self.pedido.id)
        self.assertEqual(gravado.valor_total, Decimal('216.00'))
        self.assertEqual(gravado.status, S.PROCESSING)


class TestProcessarPagamento(unittest.TestCase):

    def setUp(self):
        self.pedido_repo_mock = Mock()
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido()
        self.pagamento_gateway_mock = Mock()
        self.use_case = ProcessarPagamentoUseCase(self.pedido_repo_mock, self.pagamento_gateway_mock)

    def test_criar_cobranca_para_o_dono(self):
        self.pagamento_gateway_mock.criar_cobranca.return_value = {'order': {'id': 'order_mock_1'}}

        cobranca = self.use_case.criar_cobranca(DONO, '1')

        self.assertEqual(cobranca['order']['id'], 'order_mock_1')
        self.pagamento_gateway_mock.criar_cobranca.assert_called_once_with(self.pedido_repo_mock.buscar_por_id.return_value)

    def test_criar_cobranca_de_outro_usuario(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.criar_cobranca(OUTRO, '1')
        self.pagamento_gateway_mock.criar_cobranca.assert_not_called()

    def test_pedido_inexistente(self):
        self.pedido_repo_mock.buscar_por_id.return_value = None
        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.consultar_status(DONO, '42')

    def test_verificar_exige_autenticacao(self):
        with self.assertRaises(NaoAutenticadoError):
            self.use_case.verificar(ANONIMO, {})


if __name__ == '__main__':
    unittest.main()
