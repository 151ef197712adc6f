class NotFound(ValueError):
    pass


class AccessDenied(ValueError):
    pass


class ChartLimitReached(ValueError):
    def __init__(self, count: int, limit: int):
        super().__init__("You have reached the maximum number of charts for your subscription tier.")
        self.count = count
        self.limit = limit


class CSVImportError(ValueError):
    def __init__(self, message: str, errors: list[str], total_rows: int = 0, valid_rows: int = 0):
        super().__init__(message)
        self.errors = errors
        self.total_rows = total_rows
        self.valid_rows = valid_rows
