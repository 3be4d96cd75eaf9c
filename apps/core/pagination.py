from rest_framework.pagination import LimitOffsetPagination


class StandardResultsSetPagination(LimitOffsetPagination):
    """limit/offset paging reported as {total, limit, offset, hasMore}"""

    default_limit = 50
    max_limit = 200

    def get_pagination_meta(self) -> dict:
        return {
            "total": self.count,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.offset + self.limit < self.count,
        }
