class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    mensagem_padrao = "Erro inesperado."

    def __init__(self, message=None):
        self.message = message or self.mensagem_padrao
        super().__init__(self.message)

# ===============================================
# ERROS DE VALIDAÇÃO
# ===============================================

class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos."""
    mensagem_padrao = "Os dados fornecidos são inválidos."

class ValorInvalidoError(DadosInvalidosError):
    """Preço ou quantidade negativos no cálculo de valores."""
    mensagem_padrao = "Preço e quantidade não podem ser negativos."

class CarrinhoVazioError(DadosInvalidosError):
    """Erro levantado ao tentar fazer checkout com carrinho vazio."""
    mensagem_padrao = "O carrinho de compras está vazio."

class StatusInvalidoError(DadosInvalidosError):
    """Erro levantado ao tentar definir um status de pedido inexistente."""
    mensagem_padrao = "O status fornecido não é válido para um pedido."

# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    mensagem_padrao = "O item solicitado não foi encontrado."

class ProdutoNaoEncontradoError(ItemNaoEncontradoError):
    mensagem_padrao = "O produto solicitado não foi encontrado."

class PedidoNaoEncontradoError(ItemNaoEncontradoError):
    mensagem_padrao = "Pedido não encontrado."

class ItemCarrinhoNaoEncontradoError(ItemNaoEncontradoError):
    mensagem_padrao = "Item não encontrado no carrinho."

# ===============================================
# ERROS DE AUTORIZAÇÃO
# ===============================================

class AutorizacaoError(BaseErroCore):
    """O ator da requisição não tem a capacidade exigida."""
    mensagem_padrao = "Não autorizado."

class NaoAutenticadoError(AutorizacaoError):
    mensagem_padrao = "É necessário estar autenticado."

class AcessoNegadoError(AutorizacaoError):
    mensagem_padrao = "Você não tem permissão para acessar este pedido."

# ===============================================
# ERROS DE FLUXO DO PEDIDO
# ===============================================

class ConflitoEstadoError(BaseErroCore):
    """Transição não permitida pelo status atual do pedido."""
    mensagem_padrao = "Operação não permitida no status atual do pedido."

    def __init__(self, message=None, status_atual=None):
        self.status_atual = status_atual
        super().__init__(message)

# ===============================================
# ERROS DE SERVIÇOS EXTERNOS
# ===============================================

class ServicoExternoError(BaseErroCore):
    """Falha de um colaborador externo (pagamento, catálogo, armazenamento)."""
    mensagem_padrao = "Falha em um serviço externo."

class CheckoutIncompletoError(ServicoExternoError):
    """O pedido foi gravado mas o carrinho não pôde ser esvaziado."""

    def __init__(self, pedido_id, message=None):
        self.pedido_id = pedido_id
        if message is None:
            message = (f"Pedido {pedido_id} criado, mas o carrinho não foi esvaziado. "
                       f"Repita o checkout para concluir.")
        super().__init__(message)
