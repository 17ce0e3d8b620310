"""Document store exceptions."""


class StoreError(Exception):
    """Persistence failure (connectivity, timeout, or constraint violation).

    Attributes:
        operation: Store operation that failed (insert, find, list, delete, ping)
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"[{operation}] {message}")
