"""
Output sinks for assembled text
"""

from typing import Optional, TextIO

from utils.validators import ensure_output_dir


class LazyFileWriter:
    """
    File sink that is created on the first write

    A run that aborts before producing text leaves no output file behind.
    """

    def __init__(self, output_path: str, encoding: str = "utf-8"):
        self.output_path = output_path
        self.encoding = encoding
        self._file: Optional[TextIO] = None

    @property
    def opened(self) -> bool:
        return self._file is not None

    def write(self, text: str) -> int:
        if self._file is None:
            path = ensure_output_dir(self.output_path)
            self._file = open(path, "w", encoding=self.encoding)
        return self._file.write(text)

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
