"""
Upload de imagens (logo da empresa, produtos e variações) e entrega dos arquivos.

Chaves no storage:
  logos/<company_id>/logo<ext>
  products/<company_id>/<product_id>-<timestamp><ext>
  products/<company_id>/<product_id>-v<variant_id>-<timestamp><ext>
"""

import logging
import mimetypes

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.http import Http404, HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_GET
from rest_framework import permissions, status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from .mixins import parse_int
from ..authentication import get_session
from ..permissions import HasResourcePermission, Resource, can_access_company
from ..services import catalog as catalog_service
from ..services import companies as company_service
from ..services.common import resolve_company_for_create
from ..storage import get_storage, normalize_key

logger = logging.getLogger(__name__)

UPLOAD_FOLDERS = ('logos', 'products')


def _validated_upload(request):
    upload = request.FILES.get('file')
    if upload is None:
        raise ValidationError({'file': 'Nenhum arquivo enviado.'})
    if upload.size > settings.UPLOAD_MAX_BYTES:
        limite = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
        raise ValidationError({'file': f'Arquivo muito grande. Máximo {limite}MB.'})
    extension = settings.UPLOAD_ALLOWED_CONTENT_TYPES.get(upload.content_type)
    if extension is None:
        raise ValidationError({'file': 'Tipo de arquivo não permitido. Use JPG, PNG ou WEBP.'})
    return upload, extension


def _timestamp():
    return timezone.now().strftime('%Y%m%d%H%M%S%f')


class UploadView(APIView):
    permission_classes = [permissions.IsAuthenticated, HasResourcePermission]
    parser_classes = [MultiPartParser, FormParser]
    resource = Resource.UPLOADS

    def store(self, upload, key):
        storage = get_storage()
        saved = storage.upload(upload.read(), key)
        return saved, storage.url(saved)


class LogoUploadView(UploadView):
    """POST /api/uploads/logo/ - logo da empresa (a última enviada vale)."""

    def post(self, request):
        session = get_session(request)
        upload, extension = _validated_upload(request)
        company = resolve_company_for_create(session, parse_int(request.data.get('company_id'), 'company_id'))
        previous = company.logo_url

        key, url = self.store(upload, f'logos/{company.pk}/logo{extension}')
        if session.is_platform:
            company = company_service.update_company(session, company.pk, {'logo_url': url})
        else:
            company = company_service.update_own_company(session, {'logo_url': url})

        if previous and previous != url:
            try:
                get_storage().delete(previous)
            except (SuspiciousFileOperation, OSError) as exc:
                logger.warning(f'Não foi possível remover o logo anterior {previous}: {exc}')
        return Response({'key': key, 'url': url}, status=status.HTTP_201_CREATED)


class ProductImageUploadView(UploadView):
    """POST /api/uploads/product/  (multipart: file, product_id)"""

    def post(self, request):
        session = get_session(request)
        upload, extension = _validated_upload(request)
        product = catalog_service.get_product(session, request.data.get('product_id'))
        if not can_access_company(session.company_id, product.company_id):
            raise PermissionDenied('Sem permissão para esta empresa.')

        key, url = self.store(upload, f'products/{product.company_id}/{product.pk}-{_timestamp()}{extension}')
        catalog_service.update_product(session, product.pk, {'image_url': url})
        return Response({'key': key, 'url': url}, status=status.HTTP_201_CREATED)


class VariantImageUploadView(UploadView):
    """POST /api/uploads/variant/  (multipart: file, variant_id)"""

    def post(self, request):
        session = get_session(request)
        upload, extension = _validated_upload(request)
        variant = catalog_service.get_variant(session, request.data.get('variant_id'))
        product = variant.product
        if not can_access_company(session.company_id, product.company_id):
            raise PermissionDenied('Sem permissão para esta empresa.')

        key, url = self.store(
            upload, f'products/{product.company_id}/{product.pk}-v{variant.pk}-{_timestamp()}{extension}'
        )
        catalog_service.update_variant(session, variant.pk, {'image_url': url})
        return Response({'key': key, 'url': url}, status=status.HTTP_201_CREATED)


class UploadDeleteView(UploadView):
    """DELETE /api/uploads/?key=<chave ou url> - só dentro da pasta da própria empresa."""

    def delete(self, request):
        session = get_session(request)
        try:
            key = normalize_key(request.query_params.get('key'))
        except SuspiciousFileOperation:
            raise ValidationError({'key': 'Chave de arquivo inválida.'})

        parts = key.split('/')
        if len(parts) < 3 or parts[0] not in UPLOAD_FOLDERS or not can_access_company(session.company_id, parts[1]):
            raise PermissionDenied('Sem permissão para remover este arquivo.')
        get_storage().delete(key)
        return Response(status=status.HTTP_204_NO_CONTENT)


@require_GET
def serve_file(request, key):
    """GET /api/files/<chave> - imagens públicas (logos e produtos)."""
    try:
        content = get_storage().read(key)
    except SuspiciousFileOperation:
        raise Http404('Arquivo não encontrado.')
    if content is None:
        raise Http404('Arquivo não encontrado.')
    content_type = mimetypes.guess_type(key)[0] or 'application/octet-stream'
    response = HttpResponse(content, content_type=content_type)
    response['Cache-Control'] = 'public, max-age=86400'
    return response
