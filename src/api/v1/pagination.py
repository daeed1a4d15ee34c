"""Pagination utilities for API v1."""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """Page number pagination that also reports the grand total and page count."""

    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 200

    def get_paginated_response(self, data):
        return Response({
            "total": self.page.paginator.count,
            "page": self.page.number,
            "total_pages": self.page.paginator.num_pages,
            "next": self.get_next_link(),
            "previous": self.get_previous_link(),
            "results": data,
        })

    def get_paginated_response_schema(self, schema):
        base = super().get_paginated_response_schema(schema)
        properties = dict(base["properties"])
        properties["total"] = properties.pop("count")
        properties["page"] = {"type": "integer", "example": 1}
        properties["total_pages"] = {"type": "integer", "example": 1}
        return {**base, "properties": properties, "required": ["total", "results"]}
