"""
Data Transfer Objects for Document Delivery
"""

import base64
from dataclasses import dataclass


@dataclass
class RenderResult:
    """
    Result of a document rendering operation.

    Contains the document bytes and metadata for HTTP responses.
    """

    content: bytes
    filename: str
    content_type: str = "application/pdf"
    cache_hit: bool = False

    def __len__(self) -> int:
        """Return the size of the document in bytes"""
        return len(self.content)

    def as_base64(self) -> str:
        """Encode the content for JSON transport"""
        return base64.b64encode(self.content).decode('ascii')
