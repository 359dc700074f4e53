from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DynamicPageSizePagination(PageNumberPagination):
    """?page=N&limit=M, com o mesmo bloco `pagination` usado nos logs de auditoria."""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response({
            'results': data,
            'pagination': {
                'page': self.page.number,
                'limit': paginator.per_page,
                'total': paginator.count,
                'total_pages': paginator.num_pages if paginator.count else 0,
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'results': schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'page': {'type': 'integer'},
                        'limit': {'type': 'integer'},
                        'total': {'type': 'integer'},
                        'total_pages': {'type': 'integer'},
                    },
                },
            },
        }
