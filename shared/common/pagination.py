# shared/common/pagination.py
"""
Custom Pagination Classes for API responses
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from typing import Any, Dict


class StandardPagination(PageNumberPagination):
    """
    Page number pagination wrapped in the standard success envelope.
    """

    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100
    page_query_param = 'page'

    def get_paginated_response(self, data: Any) -> Response:
        return Response({
            'success': True,
            'count': self.page.paginator.count,
            'total_pages': self.page.paginator.num_pages,
            'current_page': self.page.number,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })

    def get_paginated_response_schema(self, schema: Dict) -> Dict:
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean', 'example': True},
                'count': {'type': 'integer', 'example': 42},
                'total_pages': {'type': 'integer', 'example': 3},
                'current_page': {'type': 'integer', 'example': 1},
                'next': {'type': 'string', 'nullable': True},
                'previous': {'type': 'string', 'nullable': True},
                'results': schema,
            }
        }
