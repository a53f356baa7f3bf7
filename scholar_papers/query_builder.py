import urllib.parse

from scholar_papers.exceptions import InvalidQueryException

MAX_PAGE_RESULTS = 10


class QueryBuilder:
    """Builds URLs for Google Scholar searches, citer lists and cluster lookups.

    Attributes:
        base_url (str): The base URL for Google Scholar search.

    """

    def __init__(self, base_url="https://scholar.google.com/scholar"):
        """Initializes the QueryBuilder with a base URL.

        Args:
            base_url (str, optional): The base URL for Google Scholar.
                                       Defaults to "https://scholar.google.com/scholar".

        """
        self.base_url = base_url

    def build_search_url(self, words=None, phrase=None, authors=None, title_only=False, count=5):
        """Builds a Google Scholar search URL.

        Args:
            words (str, optional): Words the papers must contain. Defaults to None.
            phrase (str, optional): Exact phrase the papers must contain. Defaults to None.
            authors (str, optional): Author names to search for. Defaults to None.
            title_only (bool, optional): Match words/phrase in titles only. Defaults to False.
            count (int, optional): Number of results per page, capped at 10. Defaults to 5.

        Returns:
            str: The constructed Google Scholar search URL.

        Raises:
            InvalidQueryException: If neither words, phrase nor authors are given.
            ValueError: If count is smaller than 1.

        """
        if not (words or phrase or authors):
            raise InvalidQueryException("A search needs words, a phrase or authors.")
        if count < 1:
            raise ValueError("count must be a positive integer.")

        query_parts = []
        if words:
            query_parts.append(words)
        if phrase:
            query_parts.append(f'"{phrase}"')  # Enclose phrase in quotes

        params = {
            "as_q": " ".join(query_parts),
            "as_occt": "title" if title_only else "any",
            "as_sauthors": authors or "",
            "hl": "en",
            "num": min(count, MAX_PAGE_RESULTS),
            "as_sdt": "0,5",
        }
        return f"{self.base_url}?{urllib.parse.urlencode(params)}"

    def build_citation_url(self, cluster_id, count=MAX_PAGE_RESULTS):
        """Builds the URL listing the papers that cite the given cluster.

        Args:
            cluster_id (str): Cluster ID of the cited paper.
            count (int, optional): Number of citers per page, capped at 10. Defaults to 10.

        Returns:
            str: The constructed citer-list URL.

        """
        self._check_cluster_id(cluster_id)
        params = {"cites": cluster_id, "hl": "en", "num": min(max(count, 1), MAX_PAGE_RESULTS)}
        return f"{self.base_url}?{urllib.parse.urlencode(params)}"

    def build_cluster_url(self, cluster_id):
        """Builds the URL of the page listing one paper cluster."""
        self._check_cluster_id(cluster_id)
        return f"{self.base_url}?{urllib.parse.urlencode({'cluster': cluster_id, 'hl': 'en'})}"

    @staticmethod
    def _check_cluster_id(cluster_id):
        if not str(cluster_id).isdigit():
            raise InvalidQueryException(f"Cluster ID must be numeric, got {cluster_id!r}.")
