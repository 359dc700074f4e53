import logging

from django.db import IntegrityError
from rest_framework import status as drf_status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DuplicateResource(APIException):
    status_code = drf_status.HTTP_409_CONFLICT
    default_detail = 'Já existe um registro com esses dados.'
    default_code = 'duplicate'


class CompanyRequired(APIException):
    status_code = drf_status.HTTP_400_BAD_REQUEST
    default_detail = 'ADMINISTRADOR deve fornecer company_id ao criar recursos.'
    default_code = 'company_required'


class InvalidCredentials(APIException):
    status_code = drf_status.HTTP_401_UNAUTHORIZED
    default_detail = 'Credenciais inválidas.'
    default_code = 'invalid_credentials'


class TransactionFailure(APIException):
    status_code = drf_status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Não foi possível concluir a operação. Nada foi gravado.'
    default_code = 'transaction_failed'


def api_exception_handler(exc, context):
    """
    Handler padrão do DRF, com dois acréscimos:
    - IntegrityError vira DuplicateResource (a constraint do banco é a garantia final);
    - qualquer outra exceção não tratada vira um 500 genérico, com o detalhe só no log.
    """
    if isinstance(exc, IntegrityError):
        logger.warning(f'Violação de integridade: {exc}')
        exc = DuplicateResource()

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception(f'Erro não tratado em {view.__class__.__name__ if view else "?"}: {exc}')
    return Response(
        {'detail': 'Erro interno do servidor.'},
        status=drf_status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
