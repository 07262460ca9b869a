class RetailSimError(Exception):
    pass


class NotFoundError(RetailSimError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class DuplicateIdError(RetailSimError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Promotion id already exists: {key}")


class InsufficientStockError(RetailSimError):
    def __init__(self, item_name: str, requested: int, available: int):
        self.item_name = item_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {item_name}: requested={requested}, available={available}"
        )


class PersistenceError(RetailSimError):
    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to persist {path}: {cause}")


class InvalidInputError(RetailSimError):
    pass
