class SharError(Exception):
    pass


class SharImportError(SharError):
    def __init__(self, path: str, message: str | None = None):
        super().__init__(message or "import error")
        self.path = path
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"Import error: {self.message} \"{self.path}\""
        return f"Import error: \"{self.path}\""
