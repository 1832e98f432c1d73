"""
Tradução das exceções do Core (e do próprio DRF) para respostas HTTP no
envelope {success, message, ...}. Registrado em REST_FRAMEWORK['EXCEPTION_HANDLER'].
"""
import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from vitrine.core.exceptions import (
    AcessoNegadoError,
    AutorizacaoError,
    BaseErroCore,
    CheckoutIncompletoError,
    ConflitoEstadoError,
    DadosInvalidosError,
    ItemNaoEncontradoError,
    NaoAutenticadoError,
    ServicoExternoError,
)

logger = logging.getLogger(__name__)

# A ordem importa: subclasses antes das classes base
STATUS_POR_ERRO = (
    (NaoAutenticadoError, status.HTTP_401_UNAUTHORIZED),
    (AcessoNegadoError, status.HTTP_403_FORBIDDEN),
    (AutorizacaoError, status.HTTP_403_FORBIDDEN),
    (ItemNaoEncontradoError, status.HTTP_404_NOT_FOUND),
    (DadosInvalidosError, status.HTTP_400_BAD_REQUEST),
    (ConflitoEstadoError, status.HTTP_400_BAD_REQUEST),
    (ServicoExternoError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_http(exc: BaseErroCore) -> int:
    for classe, codigo in STATUS_POR_ERRO:
        if isinstance(exc, classe):
            return codigo
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _resposta_core(exc: BaseErroCore, contexto: str) -> Response:
    codigo = status_http(exc)
    corpo = {'success': False, 'message': exc.message}

    if isinstance(exc, ConflitoEstadoError) and exc.status_atual is not None:
        corpo['status'] = exc.status_atual.value
    if isinstance(exc, CheckoutIncompletoError):
        corpo['orderId'] = exc.pedido_id

    if codigo >= 500:
        logger.error("%s: %s", contexto, exc.message, exc_info=exc)
    else:
        logger.info("%s: %s (%s)", contexto, exc.message, codigo)
    return Response(corpo, status=codigo)


def tratar_excecao(exc, context):
    view = context.get('view')
    contexto = view.__class__.__name__ if view is not None else 'API'

    if isinstance(exc, BaseErroCore):
        return _resposta_core(exc, contexto)

    # Erros do próprio DRF (autenticação, parse, validação de serializer, 404)
    response = exception_handler(exc, context)
    if response is None:
        logger.exception("Erro inesperado em %s.", contexto)
        return Response(
            {'success': False, 'message': 'Erro interno do servidor.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {'success': False, 'message': 'Dados inválidos.', 'errors': response.data}
    else:
        detalhe = response.data.get('detail', '') if isinstance(response.data, dict) else response.data
        response.data = {'success': False, 'message': str(detalhe)}
    return response
