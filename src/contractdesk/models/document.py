"""
Document models for the retrieval and extraction stages.

- SourceFile: chat-platform reference to an uploaded file
- SourceDocument: raw bytes plus declared metadata, ephemeral per run
- ExtractedText: plain text produced by the extraction cascade
"""

import base64
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class SourceFile(BaseModel):
    """File reference as delivered by the chat platform's upload event."""
    id: str = Field(..., description="Platform file identifier")
    name: str = Field(..., description="Display filename")
    size: int = Field(default=0, description="Declared size in bytes")
    mimetype: Optional[str] = Field(default=None, description="Declared content type")
    url_private: Optional[str] = Field(default=None, description="Authenticated file URL")
    url_private_download: Optional[str] = Field(default=None, description="Authenticated download URL")

    @property
    def download_url(self) -> Optional[str]:
        return self.url_private_download or self.url_private


class SourceDocument(BaseModel):
    """Raw document bytes with the metadata they were declared with."""
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., repr=False, description="Raw document bytes")
    file_name: str = Field(..., description="Display filename")
    declared_size: int = Field(default=0, description="Size reported by the sender")
    content_type: Optional[str] = Field(default=None, description="Content type reported by the sender")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def stem(self) -> str:
        return Path(self.file_name).stem

    def has_pdf_signature(self) -> bool:
        return self.data[:1024].lstrip().startswith(b"%PDF")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @classmethod
    def from_base64(
        cls,
        encoded: str,
        file_name: str,
        content_type: Optional[str] = None,
    ) -> "SourceDocument":
        data = base64.b64decode(encoded)
        return cls(data=data, file_name=file_name, declared_size=len(data), content_type=content_type)

    @classmethod
    def from_path(cls, path: str | Path, content_type: Optional[str] = None) -> "SourceDocument":
        path = Path(path)
        data = path.read_bytes()
        return cls(data=data, file_name=path.name, declared_size=len(data), content_type=content_type)


class ExtractedText(BaseModel):
    """Plain text recovered from a document and the strategy that produced it."""
    model_config = ConfigDict(frozen=True)

    text: str
    method: str = Field(..., description="Name of the extraction strategy that succeeded")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def char_count(self) -> int:
        return len(self.text)

    def sample(self, limit: int = 2000) -> str:
        return self.text[:limit]
