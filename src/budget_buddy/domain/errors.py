NO_COLUMNS_MESSAGE = "Please select at least one column to export"


class ExportError(ValueError):
    pass


class NoColumnsSelectedError(ExportError):
    def __init__(self, message: str = NO_COLUMNS_MESSAGE) -> None:
        super().__init__(message)
