"""
Interfaces for Document Delivery

Defines the seams between the render service and the systems around it: the
document store that supplies records, and the raster converter used for
image output.
"""

from abc import ABC, abstractmethod
from typing import Optional

from docgen.services.documents import LeaveRequest, Marksheet


class IDocumentSource(ABC):
    """
    Interface for looking up renderable documents.

    Implementations load records from the backing store with the staff and
    HOD references populated where available.
    """

    @abstractmethod
    def get_marksheet(self, marksheet_id: str) -> Optional[Marksheet]:
        """
        Look up a marksheet.

        Args:
            marksheet_id: Entity id of the marksheet

        Returns:
            The marksheet, or None if it does not exist
        """
        pass

    @abstractmethod
    def get_leave_request(self, leave_id: str) -> Optional[LeaveRequest]:
        """
        Look up a leave request.

        Returns:
            The leave request, or None if it does not exist
        """
        pass


class IImageConverter(ABC):
    """Interface for rasterising a rendered PDF."""

    @abstractmethod
    def convert(self, pdf_bytes: bytes) -> bytes:
        """
        Convert the first page of a PDF to a JPEG image.

        Raises:
            Exception: If conversion fails
        """
        pass
