"""
Media library operations.
"""
import logging

from ..models import MediaItem
from ..utils import paginate

logger = logging.getLogger(__name__)


class MediaService:
    """Media library backed by Django storage and the ORM."""

    def __init__(self, model=MediaItem):
        self.model = model

    def upload(self, file_obj, mime_type=None):
        """Store an uploaded file, reusing an existing item with the same bytes."""
        item, created = self.model.get_or_create_from_file(file_obj, mime_type=mime_type)
        if created:
            logger.info("Stored media %s (%s)", item.original_name, item.human_file_size)
        return item

    def find_by_id(self, pk):
        return self.model.objects.filter(pk=pk).first()

    def find_all(self, page=1, limit=20, mime_type=None):
        """List media newest first, optionally filtered by MIME prefix (e.g. ``image/``)."""
        qs = self.model.objects.all()
        if mime_type:
            qs = qs.filter(mime_type__startswith=mime_type)
        return paginate(qs, page, limit)

    def delete(self, pk):
        """Remove the files and the row. Unknown ids are ignored."""
        item = self.find_by_id(pk)
        if item is None:
            return
        item.delete_files()
        item.delete()
