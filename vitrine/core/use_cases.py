# vitrine/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.

Todo caso de uso recebe explicitamente o Principal (ator da requisição);
nada é lido de estado global.
"""
import logging
from typing import List, Optional

# Entidades e Exceções
from vitrine.core.entities import (
    Carrinho, EnderecoEntrega, ItemCarrinho, ItemPedido, Pedido, Principal, ResultadoPagamento, StatusPedido
)
from vitrine.core.exceptions import (
    BaseErroCore,
    CarrinhoVazioError,
    CheckoutIncompletoError,
    DadosInvalidosError,
    ItemCarrinhoNaoEncontradoError,
    PedidoNaoEncontradoError,
    ProdutoNaoEncontradoError,
    ServicoExternoError,
)
from vitrine.core.autorizacao import GuardaAutorizacao, Operacao
from vitrine.core.maquina_estados import MaquinaEstadosPedido
from vitrine.core.precificacao import calcular_totais, somar_itens

# Portas (Interfaces) - Importadas do vitrine/core/ports.py
from vitrine.core.ports import (
    ICarrinhoRepository,
    IGatewayPagamento,
    IPedidoRepository,
    IProdutoRepository,
)

logger = logging.getLogger(__name__)


def _validar_quantidade(quantidade) -> int:
    if isinstance(quantidade, bool) or not isinstance(quantidade, int):
        raise DadosInvalidosError("A quantidade deve ser um número inteiro.")
    return quantidade


# ====================================================================
# 1. CASOS DE USO DO CARRINHO
# ====================================================================

class GerenciarCarrinhoUseCase:
    """
    Caso de Uso que centraliza a lógica de gestão do carrinho (adicionar,
    atualizar, remover, limpar, visualizar). O total é recalculado e
    conferido após toda alteração.
    """
    def __init__(
        self,
        carrinho_repo: ICarrinhoRepository,
        produto_repo: IProdutoRepository,
        guarda: Optional[GuardaAutorizacao] = None,
    ):
        self.carrinho_repo = carrinho_repo
        self.produto_repo = produto_repo
        self.guarda = guarda or GuardaAutorizacao()

    def _dono(self, principal: Principal) -> str:
        return str(self.guarda.exigir_autenticado(principal).usuario_id)

    def obter_carrinho(self, principal: Principal) -> Carrinho:
        """Retorna o carrinho do usuário, ou um carrinho vazio se ainda não existir."""
        usuario_id = self._dono(principal)
        return self.carrinho_repo.buscar_por_usuario(usuario_id) or Carrinho(usuario_id=usuario_id)

    def adicionar_item(
        self,
        principal: Principal,
        produto_id: str,
        quantidade: int = 1,
        tamanho: str = '',
        cor: str = '',
    ) -> Carrinho:
        """Adiciona um item ou soma a quantidade se (produto, tamanho, cor) já estiver no carrinho."""
        usuario_id = self._dono(principal)
        if _validar_quantidade(quantidade) < 1:
            raise DadosInvalidosError("A quantidade a adicionar deve ser positiva.")

        produto = self.produto_repo.buscar_por_id(produto_id)
        if not produto:
            raise ProdutoNaoEncontradoError(f"Produto ID {produto_id} não encontrado.")

        carrinho = self.carrinho_repo.buscar_por_usuario(usuario_id) or Carrinho(usuario_id=usuario_id)
        chave = (str(produto.id), tamanho or '', cor or '')
        item_existente = carrinho.buscar_por_chave(chave)

        if item_existente:
            item_existente.quantidade += quantidade
        else:
            # O preço é congelado no momento da adição
            carrinho.itens.append(ItemCarrinho(
                produto_id=str(produto.id),
                quantidade=quantidade,
                preco=produto.preco,
                tamanho=tamanho or '',
                cor=cor or '',
                nome=produto.nome,
                imagem=produto.imagem_principal,
            ))

        logger.info("Carrinho do usuário %s: +%s x produto %s (%s/%s).",
                    usuario_id, quantidade, produto.id, chave[1], chave[2])
        return self._salvar(carrinho)

    def atualizar_item(self, principal: Principal, item_id: str, quantidade: int) -> Carrinho:
        """Define a quantidade de um item; quantidade <= 0 remove o item."""
        usuario_id = self._dono(principal)
        _validar_quantidade(quantidade)

        carrinho = self.carrinho_repo.buscar_por_usuario(usuario_id)
        item = carrinho.buscar_item(item_id) if carrinho else None
        if not item:
            raise ItemCarrinhoNaoEncontradoError(f"Item {item_id} não encontrado no carrinho.")

        if quantidade <= 0:
            carrinho.itens.remove(item)
        else:
            item.quantidade = quantidade
        return self._salvar(carrinho)

    def remover_item(self, principal: Principal, item_id: str) -> Carrinho:
        """Remove o item. Item inexistente não é erro: o carrinho volta inalterado."""
        usuario_id = self._dono(principal)
        carrinho = self.carrinho_repo.buscar_por_usuario(usuario_id)
        if not carrinho:
            return Carrinho(usuario_id=usuario_id)

        item = carrinho.buscar_item(item_id)
        if not item:
            logger.debug("Remoção ignorada: item %s não está no carrinho de %s.", item_id, usuario_id)
            return carrinho

        carrinho.itens.remove(item)
        return self._salvar(carrinho)

    def limpar(self, principal: Principal) -> Carrinho:
        usuario_id = self._dono(principal)
        carrinho = self.carrinho_repo.limpar_carrinho(usuario_id)
        return carrinho or Carrinho(usuario_id=usuario_id)

    def _salvar(self, carrinho: Carrinho) -> Carrinho:
        carrinho.valor_total = somar_itens(carrinho.itens)
        salvo = self.carrinho_repo.salvar(carrinho)

        esperado = somar_itens(salvo.itens)
        if salvo.valor_total != esperado:
            logger.error("Total do carrinho %s divergente: gravado %s, esperado %s.",
                         salvo.id, salvo.valor_total, esperado)
            raise ServicoExternoError("O total do carrinho ficou inconsistente após a gravação.")
        return salvo


# ====================================================================
# 2. CASO DE USO DE CHECKOUT
# ====================================================================

class FinalizarPedidoUseCase:
    """
    Caso de Uso que coordena a finalização do checkout:
    Snapshot dos itens, Cálculo dos valores, Criação do pedido e Limpeza do carrinho.

    A criação do pedido e a limpeza do carrinho formam uma unidade: o
    repositório de pedidos faz as duas coisas atomicamente. A chave de
    idempotência (carrinho + versão) impede pedidos duplicados quando o
    checkout é repetido.
    """
    def __init__(
        self,
        carrinho_repo: ICarrinhoRepository,
        pedido_repo: IPedidoRepository,
        guarda: Optional[GuardaAutorizacao] = None,
    ):
        self.carrinho_repo = carrinho_repo
        self.pedido_repo = pedido_repo
        self.guarda = guarda or GuardaAutorizacao()

    def executar(self, principal: Principal, endereco_entrega: EnderecoEntrega, metodo_pagamento: str) -> Pedido:
        """Processa o checkout do carrinho do ator."""
        usuario_id = str(self.guarda.exigir_autenticado(principal).usuario_id)
        endereco_entrega.validar_completo()

        carrinho = self.carrinho_repo.buscar_por_usuario(usuario_id)
        if not carrinho or carrinho.vazio:
            raise CarrinhoVazioError("Não é possível finalizar o checkout com o carrinho vazio.")

        chave = carrinho.chave_idempotencia
        existente = self.pedido_repo.buscar_por_chave_idempotencia(chave)
        if existente:
            logger.warning("Checkout repetido para o carrinho %s; reaproveitando o pedido %s.",
                           carrinho.id, existente.id)
            self._esvaziar_carrinho(existente, usuario_id)
            return existente

        # 1. Snapshot (cópia) dos itens e cálculo dos valores
        itens = [ItemPedido.de_item_carrinho(item) for item in carrinho.itens]
        totais = calcular_totais(itens)

        pedido = Pedido(
            usuario_id=usuario_id,
            itens=tuple(itens),
            endereco_entrega=endereco_entrega,
            metodo_pagamento=metodo_pagamento,
            valor_itens=totais.valor_itens,
            valor_imposto=totais.valor_imposto,
            valor_frete=totais.valor_frete,
            valor_total=totais.valor_total,
            status=StatusPedido.PLACED,
            chave_idempotencia=chave,
        )

        # 2. Grava o pedido e esvazia o carrinho (atômico no repositório)
        try:
            pedido_final = self.pedido_repo.criar_pedido(pedido, carrinho)
        except BaseErroCore:
            raise
        except Exception as e:
            logger.exception("Falha ao gravar o pedido do carrinho %s.", carrinho.id)
            raise ServicoExternoError("Não foi possível registrar o pedido. O carrinho foi mantido.") from e

        logger.info("Pedido %s criado para o usuário %s: itens %s, total %s.",
                    pedido_final.id, usuario_id, pedido_final.valor_itens, pedido_final.valor_total)
        return pedido_final

    def _esvaziar_carrinho(self, pedido: Pedido, usuario_id: str):
        try:
            self.carrinho_repo.limpar_carrinho(usuario_id)
        except Exception as e:
            logger.exception("Pedido %s gravado, mas o carrinho de %s não foi esvaziado.", pedido.id, usuario_id)
            raise CheckoutIncompletoError(pedido.id) from e


# ====================================================================
# 3. CASOS DE USO DE PEDIDO
# ====================================================================

class GerenciarPedidoUseCase:
    """Leitura e transições de pedidos, para o dono e para o administrador."""

    def __init__(
        self,
        pedido_repo: IPedidoRepository,
        pagamento_gateway: IGatewayPagamento,
        maquina: Optional[MaquinaEstadosPedido] = None,
    ):
        self.pedido_repo = pedido_repo
        self.pagamento_gateway = pagamento_gateway
        self.maquina = maquina or MaquinaEstadosPedido()
        self.guarda = self.maquina.guarda

    def _carregar(self, principal: Principal, pedido_id: str, operacao: Operacao) -> Pedido:
        self.guarda.exigir_autenticado(principal)
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError(f"Pedido ID {pedido_id} não encontrado.")
        self.guarda.exigir(principal, pedido, operacao)
        return pedido

    # --- Consultas ---

    def detalhar(self, principal: Principal, pedido_id: str) -> Pedido:
        return self._carregar(principal, pedido_id, Operacao.LER)

    def listar_meus(self, principal: Principal) -> List[Pedido]:
        usuario_id = self.guarda.exigir_autenticado(principal).usuario_id
        return self.pedido_repo.listar_pedidos_por_usuario(str(usuario_id))

    def listar_todos(self, principal: Principal) -> List[Pedido]:
        self.guarda.exigir_admin(principal)
        return self.pedido_repo.listar_todos_pedidos()

    # --- Operações do dono (ou admin) ---

    def pagar(self, principal: Principal, pedido_id: str, resultado: ResultadoPagamento) -> Pedido:
        pedido = self._carregar(principal, pedido_id, Operacao.PAGAR)
        confirmado = self.pagamento_gateway.confirmar(pedido, resultado)
        self.maquina.marcar_pago(principal, pedido, confirmado)
        return self.pedido_repo.atualizar(pedido)

    def cancelar(self, principal: Principal, pedido_id: str) -> Pedido:
        pedido = self._carregar(principal, pedido_id, Operacao.CANCELAR)
        self.maquina.cancelar(principal, pedido)
        return self.pedido_repo.atualizar(pedido)

    def editar_endereco(self, principal: Principal, pedido_id: str, parcial: dict) -> Pedido:
        pedido = self._carregar(principal, pedido_id, Operacao.EDITAR_ENDERECO)
        self.maquina.editar_endereco(principal, pedido, parcial)
        return self.pedido_repo.atualizar(pedido)

    # --- Operações administrativas ---

    def marcar_entregue(self, principal: Principal, pedido_id: str) -> Pedido:
        self.guarda.exigir_admin(principal)
        pedido = self._carregar(principal, pedido_id, Operacao.ENTREGAR)
        self.maquina.marcar_entregue(principal, pedido)
        return self.pedido_repo.atualizar(pedido)

    def forcar_status(self, principal: Principal, pedido_id: str, novo_status) -> Pedido:
        self.guarda.exigir_admin(principal)
        pedido = self._carregar(principal, pedido_id, Operacao.FORCAR_STATUS)
        self.maquina.forcar_status(principal, pedido, novo_status)
        return self.pedido_repo.atualizar(pedido)

    def avancar_status(self, principal: Principal, pedido_id: str, destino=None) -> Pedido:
        self.guarda.exigir_admin(principal)
        pedido = self._carregar(principal, pedido_id, Operacao.AVANCAR_STATUS)
        self.maquina.transicionar(principal, pedido, destino)
        return self.pedido_repo.atualizar(pedido)


# ====================================================================
# 4. CASOS DE USO DE PAGAMENTO (gateway simulado)
# ====================================================================

class ProcessarPagamentoUseCase:
    """Cobrança e verificação junto ao gateway, sempre em nome do dono do pedido."""

    def __init__(self, pedido_repo: IPedidoRepository, pagamento_gateway: IGatewayPagamento,
                 guarda: Optional[GuardaAutorizacao] = None):
        self.pedido_repo = pedido_repo
        self.pagamento_gateway = pagamento_gateway
        self.guarda = guarda or GuardaAutorizacao()

    def _pedido(self, principal: Principal, pedido_id: str) -> Pedido:
        self.guarda.exigir_autenticado(principal)
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError(f"Pedido ID {pedido_id} não encontrado.")
        self.guarda.exigir(principal, pedido, Operacao.PAGAR)
        return pedido

    def criar_cobranca(self, principal: Principal, pedido_id: str) -> dict:
        pedido = self._pedido(principal, pedido_id)
        return self.pagamento_gateway.criar_cobranca(pedido)

    def verificar(self, principal: Principal, dados: dict) -> dict:
        self.guarda.exigir_autenticado(principal)
        return self.pagamento_gateway.verificar_pagamento(dados)

    def consultar_status(self, principal: Principal, pedido_id: str) -> dict:
        pedido = self._pedido(principal, pedido_id)
        return self.pagamento_gateway.consultar_status(pedido.id)
