import mimetypes
from pathlib import Path

from docuextract.documents.models import UploadedFile


class FileLoader:
    """Reads files from disk into UploadedFile blobs for the pipeline."""

    def load(self, path: Path) -> UploadedFile:
        """Read file bytes and guess the MIME type from the name.

        Raises:
            FileNotFoundError: if the file does not exist.
        """
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        mime_type, _ = mimetypes.guess_type(path.name)
        return UploadedFile(name=path.name, content=path.read_bytes(), mime_type=mime_type or "")
