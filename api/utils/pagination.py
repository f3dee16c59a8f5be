"""Pagination used by the course catalog and the admin user list."""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination with a client-tunable ``page_size``.

    The payload is wrapped again by ``api_response``, so clients read
    ``data.results`` and ``data.count``.
    """

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 60

    def get_paginated_response(self, data):
        return Response(
            {
                "count": self.page.paginator.count,
                "total_pages": self.page.paginator.num_pages,
                "current_page": self.page.number,
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "results": data,
            }
        )

    def get_paginated_response_schema(self, schema):
        response_schema = super().get_paginated_response_schema(schema)
        response_schema["properties"]["total_pages"] = {"type": "integer", "example": 3}
        response_schema["properties"]["current_page"] = {"type": "integer", "example": 1}
        return response_schema
