"""Records backend exception hierarchy."""


class RecordsError(Exception):
    """Base exception for failed calls to the records backend."""

    def __init__(self, message: str, status_code: int = 500):
        self.status_code = status_code
        super().__init__(message)


class RecordNotFoundError(RecordsError):
    """Requested row does not exist."""

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"{table} record {record_id} not found", status_code=404)
