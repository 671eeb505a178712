from app.models.file import FileRecord

__all__ = [
    "FileRecord",
]
