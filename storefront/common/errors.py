class CatalogFetchError(Exception):
    """The content provider could not be reached or answered with an error."""

    def __init__(self, message: str, status_code=None) -> None:
        super().__init__(message)
        self.status_code = status_code
