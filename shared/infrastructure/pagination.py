"""
Pagination used by the back-office list endpoints.

Clients page with ``?page=<n>&limit=<m>``. Responses carry the page of
items under ``results_key`` together with the total count and the number
of pages.
"""

import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageLimitPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100
    results_key = "results"

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        page_size = self.page.paginator.per_page
        return Response(
            {
                self.results_key: data,
                "total": total,
                "page": self.page.number,
                "pages": math.ceil(total / page_size) if page_size else 0,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                self.results_key: schema,
                "total": {"type": "integer"},
                "page": {"type": "integer"},
                "pages": {"type": "integer"},
            },
        }
