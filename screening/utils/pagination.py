from rest_framework.pagination import PageNumberPagination


class CustomPageNumberPagination(PageNumberPagination):
    """Paginação por página com `page_size` configurável via query string."""

    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100


class ModerationLogPagination(CustomPageNumberPagination):
    """Histórico de moderação: páginas maiores para a ferramenta de revisão."""

    page_size = 50
    max_page_size = 200
