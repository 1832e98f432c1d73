from dataclasses import dataclass, field, replace
from decimal import Decimal
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
import uuid

from vitrine.core.exceptions import DadosInvalidosError, StatusInvalidoError, ValorInvalidoError

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros. Toda entidade valida seus
# dados no construtor, antes de chegar aos casos de uso.
# ====================================================================

def _novo_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Principal:
    """Ator autenticado da requisição (dono, administrador ou anônimo)."""
    usuario_id: Optional[str] = None
    is_admin: bool = False

    @property
    def autenticado(self) -> bool:
        return self.usuario_id is not None

    @classmethod
    def anonimo(cls) -> 'Principal':
        return cls()


@dataclass
class Usuario:
    """Entidade do Usuário, usada como referência para pedidos/carrinhos."""
    nome: str
    email: str
    is_admin: bool = False
    endereco_padrao: Optional['EnderecoEntrega'] = None
    id: str = field(default_factory=_novo_id)

    def como_principal(self) -> Principal:
        return Principal(usuario_id=str(self.id), is_admin=self.is_admin)


@dataclass(frozen=True)
class EnderecoEntrega:
    """Endereço de entrega (valor). Copiado para o pedido no checkout."""
    nome_completo: str = ''
    endereco: str = ''
    cidade: str = ''
    codigo_postal: str = ''
    pais: str = ''
    telefone: str = ''

    CAMPOS = ('nome_completo', 'endereco', 'cidade', 'codigo_postal', 'pais', 'telefone')

    def __post_init__(self):
        for campo in self.CAMPOS:
            valor = getattr(self, campo)
            if valor is None:
                object.__setattr__(self, campo, '')
            elif not isinstance(valor, str):
                raise DadosInvalidosError(f"Campo de endereço '{campo}' deve ser texto.")

    def validar_completo(self) -> 'EnderecoEntrega':
        faltando = [campo for campo in self.CAMPOS if not getattr(self, campo).strip()]
        if faltando:
            raise DadosInvalidosError(
                f"Endereço de entrega incompleto. Campos obrigatórios: {', '.join(faltando)}."
            )
        return self

    def mesclar(self, parcial: dict) -> 'EnderecoEntrega':
        """Retorna um novo endereço com os campos informados sobrescritos (merge raso)."""
        desconhecidos = set(parcial) - set(self.CAMPOS)
        if desconhecidos:
            raise DadosInvalidosError(
                f"Campos de endereço desconhecidos: {', '.join(sorted(desconhecidos))}."
            )
        return replace(self, **parcial)

    def como_dict(self) -> dict:
        return {campo: getattr(self, campo) for campo in self.CAMPOS}


@dataclass
class Produto:
    """Produto do catálogo (colaborador externo, apenas leitura)."""
    nome: str
    preco: Decimal
    descricao: str = ''
    categoria: str = ''
    imagens: List[str] = field(default_factory=list)
    tamanhos: List[str] = field(default_factory=list)
    cores: List[str] = field(default_factory=list)
    em_estoque: bool = True
    id: str = field(default_factory=_novo_id)

    @property
    def imagem_principal(self) -> str:
        return self.imagens[0] if self.imagens else ''


@dataclass
class ItemCarrinho:
    """Entidade que representa um item no carrinho, com snapshot do preço."""
    produto_id: str
    quantidade: int
    preco: Decimal
    tamanho: str = ''
    cor: str = ''
    nome: str = ''
    imagem: str = ''
    id: str = field(default_factory=_novo_id)

    def __post_init__(self):
        if not self.produto_id:
            raise DadosInvalidosError("O item do carrinho precisa de um produto.")
        if isinstance(self.quantidade, bool) or not isinstance(self.quantidade, int):
            raise DadosInvalidosError("A quantidade deve ser um número inteiro.")
        if self.quantidade < 1:
            raise DadosInvalidosError("A quantidade deve ser maior que zero.")
        self.preco = Decimal(str(self.preco))
        if self.preco < 0:
            raise ValorInvalidoError("O preço do item não pode ser negativo.")
        self.produto_id = str(self.produto_id)
        self.tamanho = self.tamanho or ''
        self.cor = self.cor or ''

    @property
    def chave(self) -> Tuple[str, str, str]:
        """Identidade para mesclagem: (produto, tamanho, cor)."""
        return (self.produto_id, self.tamanho, self.cor)

    @property
    def subtotal(self) -> Decimal:
        return self.preco * self.quantidade


@dataclass
class Carrinho:
    """Entidade do Carrinho de Compras."""
    usuario_id: str
    itens: List[ItemCarrinho] = field(default_factory=list)
    valor_total: Decimal = Decimal('0')
    versao: int = 0
    id: Optional[str] = None
    data_atualizacao: Optional[datetime] = None

    def buscar_item(self, item_id: str) -> Optional[ItemCarrinho]:
        return next((item for item in self.itens if item.id == str(item_id)), None)

    def buscar_por_chave(self, chave: Tuple[str, str, str]) -> Optional[ItemCarrinho]:
        return next((item for item in self.itens if item.chave == chave), None)

    @property
    def vazio(self) -> bool:
        return not self.itens

    @property
    def quantidade_total(self) -> int:
        return sum(item.quantidade for item in self.itens)

    @property
    def chave_idempotencia(self) -> str:
        return f"{self.id}:{self.versao}"


class StatusPedido(str, Enum):
    PLACED = 'Placed'
    PROCESSING = 'Processing'
    SHIPPED = 'Shipped'
    OUT_FOR_DELIVERY = 'Out for delivery'
    DELIVERED = 'Delivered'
    CANCELLED = 'Cancelled'

    @classmethod
    def de_texto(cls, valor) -> 'StatusPedido':
        """Aceita o valor ('Out for delivery') ou o nome ('OutForDelivery', 'OUT_FOR_DELIVERY')."""
        if isinstance(valor, cls):
            return valor
        if not isinstance(valor, str) or not valor.strip():
            raise StatusInvalidoError()
        normalizado = valor.strip().replace('_', '').replace(' ', '').lower()
        for status in cls:
            if normalizado in (status.value.replace(' ', '').lower(), status.name.replace('_', '').lower()):
                return status
        raise StatusInvalidoError(f"O status '{valor}' não é um status de pedido válido.")


METODOS_PAGAMENTO = ('stripe', 'paypal', 'razorpay', 'cod')


@dataclass(frozen=True)
class ItemPedido:
    """Snapshot de um item no momento da compra (imutável)."""
    produto_id: str
    nome: str
    imagem: str
    preco: Decimal
    quantidade: int
    tamanho: str = ''
    cor: str = ''

    @classmethod
    def de_item_carrinho(cls, item: ItemCarrinho) -> 'ItemPedido':
        return cls(
            produto_id=item.produto_id,
            nome=item.nome,
            imagem=item.imagem,
            preco=item.preco,
            quantidade=item.quantidade,
            tamanho=item.tamanho,
            cor=item.cor,
        )

    @property
    def subtotal(self) -> Decimal:
        return self.preco * self.quantidade


@dataclass(frozen=True)
class ResultadoPagamento:
    """Campos repassados pelo gateway de pagamento (não validados além da presença)."""
    id: str
    status: str
    update_time: str = ''
    email_address: str = ''

    def __post_init__(self):
        if not self.id or not self.status:
            raise DadosInvalidosError("O resultado do pagamento precisa de 'id' e 'status'.")


@dataclass
class Pedido:
    """Entidade do Pedido de Venda."""
    # Campos imutáveis após a criação
    usuario_id: str
    itens: Tuple[ItemPedido, ...]
    endereco_entrega: EnderecoEntrega
    metodo_pagamento: str
    valor_itens: Decimal
    valor_imposto: Decimal
    valor_frete: Decimal
    valor_total: Decimal
    # Campos mutáveis (apenas via máquina de estados)
    status: StatusPedido = StatusPedido.PLACED
    esta_pago: bool = False
    pago_em: Optional[datetime] = None
    resultado_pagamento: Optional[ResultadoPagamento] = None
    esta_entregue: bool = False
    entregue_em: Optional[datetime] = None
    chave_idempotencia: Optional[str] = None
    id: Optional[str] = None
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None

    def __post_init__(self):
        if not self.itens:
            raise DadosInvalidosError("Um pedido precisa de pelo menos um item.")
        self.itens = tuple(self.itens)
        self.status = StatusPedido.de_texto(self.status)
        if self.metodo_pagamento not in METODOS_PAGAMENTO:
            raise DadosInvalidosError(
                f"Método de pagamento '{self.metodo_pagamento}' inválido. "
                f"Use um de: {', '.join(METODOS_PAGAMENTO)}."
            )

    def pertence_a(self, usuario_id: Optional[str]) -> bool:
        return usuario_id is not None and str(self.usuario_id) == str(usuario_id)
