from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StorePagination(PageNumberPagination):
    """?page=2&limit=24, with the counters the store pager shows."""
    page_size = 24
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_data(self, data):
        paginator = self.page.paginator
        return {
            'results': list(data),
            'totalCount': paginator.count,
            'totalPages': paginator.num_pages,
            'currentPage': self.page.number,
            'hasNextPage': self.page.has_next(),
            'hasPreviousPage': self.page.has_previous(),
        }

    def get_paginated_response(self, data):
        return Response(self.get_paginated_data(data))
