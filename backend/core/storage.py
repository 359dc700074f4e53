"""
Adaptador de armazenamento de arquivos (logos e imagens de produtos).

Guarda por chave relativa (ex.: "logos/3/logo.png") em cima de um Storage do
Django. O padrão é disco local em MEDIA_ROOT; qualquer outro backend de
Storage (ex.: S3) pode ser passado no construtor.
"""

import logging
import unicodedata
import re
from urllib.parse import unquote

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    if not key:
        raise SuspiciousFileOperation('Chave de arquivo vazia.')
    key = unquote(str(key)).replace('\\', '/')
    for prefix in (settings.MEDIA_URL, '/uploads/'):
        if prefix and key.startswith(prefix):
            key = key[len(prefix):]
    key = key.lstrip('/')
    if not key or '..' in key.split('/'):
        raise SuspiciousFileOperation(f'Chave de arquivo inválida: {key!r}')
    return key


def sanitize_filename(name: str) -> str:
    """
    Remove acentos, espaços e caracteres perigosos de um nome de arquivo.
    Ex.: "Água Crystal (foto)" -> "Agua-Crystal-foto"
    """
    if not name:
        return ''
    normalized = unicodedata.normalize('NFD', name)
    normalized = ''.join(ch for ch in normalized if unicodedata.category(ch) != 'Mn')
    replaced = re.sub(r'[^a-zA-Z0-9\-_.]', '-', normalized)
    collapsed = re.sub(r'[-_]+', '-', replaced)
    return re.sub(r'(^[-_.]+|[-_.]+$)', '', collapsed)


class StorageAdapter:

    def __init__(self, storage=None):
        self.storage = storage or FileSystemStorage(location=settings.MEDIA_ROOT, base_url=settings.MEDIA_URL)

    def upload(self, content: bytes, key: str) -> str:
        """Grava o conteúdo na chave, sobrescrevendo o que existir."""
        key = normalize_key(key)
        if self.storage.exists(key):
            self.storage.delete(key)
        saved = self.storage.save(key, ContentFile(content))
        logger.info(f'Arquivo gravado: {saved}')
        return saved

    def delete(self, key: str) -> None:
        key = normalize_key(key)
        # FileSystemStorage ignora arquivo inexistente
        self.storage.delete(key)

    def rename(self, old_key: str, new_key: str) -> None:
        old_key = normalize_key(old_key)
        new_key = normalize_key(new_key)
        if not self.storage.exists(old_key):
            raise FileNotFoundError(f'Arquivo de origem não encontrado: {old_key}')
        content = self.read(old_key)
        self.upload(content, new_key)
        self.storage.delete(old_key)

    def read(self, key: str):
        key = normalize_key(key)
        if not self.storage.exists(key):
            return None
        with self.storage.open(key, 'rb') as fh:
            return fh.read()

    def exists(self, key: str) -> bool:
        return self.storage.exists(normalize_key(key))

    def url(self, key: str) -> str:
        return self.storage.url(normalize_key(key))


def get_storage() -> StorageAdapter:
    return StorageAdapter()
