"""
Media library model for django-nextblog.

Features content-addressed storage with SHA256 deduplication.
"""
import hashlib
import io
import logging
import os

from django.core.files.base import ContentFile
from django.db import models
from django.utils import timezone

from ..conf import blog_settings

logger = logging.getLogger(__name__)


def get_upload_path(instance, filename):
    """Generate upload path for media files."""
    return timezone.now().strftime(blog_settings.MEDIA_UPLOAD_PATH) + filename


def get_thumbnail_path(instance, filename):
    return timezone.now().strftime(blog_settings.THUMBNAIL_UPLOAD_PATH) + filename


class MediaItem(models.Model):
    """
    Uploaded file with content-based deduplication.

    Files are stored once and referenced by SHA256 content hash.
    Uploading the same bytes twice returns the existing item.
    """

    file = models.FileField(upload_to=get_upload_path)
    thumbnail = models.FileField(upload_to=get_thumbnail_path, blank=True)
    content_hash = models.CharField(
        max_length=64,
        unique=True,
        db_index=True,
        help_text="SHA256 hash of file content for deduplication",
    )
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100, blank=True, db_index=True)
    size = models.PositiveIntegerField(default=0, help_text="File size in bytes")
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Media Item"
        verbose_name_plural = "Media Library"

    def __str__(self):
        return self.original_name

    @property
    def file_url(self):
        """Return URL to the file."""
        if self.file:
            return self.file.url
        return None

    @property
    def thumbnail_url(self):
        if self.thumbnail:
            return self.thumbnail.url
        return None

    @property
    def file_extension(self):
        """Return file extension."""
        if self.original_name:
            return os.path.splitext(self.original_name)[1].lower()
        return ""

    @property
    def is_image(self):
        return self.mime_type.startswith("image/")

    @property
    def human_file_size(self):
        """Return human-readable file size."""
        size = self.size
        for unit in ["B", "KB", "MB", "GB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TB"

    @classmethod
    def get_or_create_from_file(cls, file_obj, mime_type=None):
        """
        Get existing media item or create new one based on content hash.

        Args:
            file_obj: Django UploadedFile or File
            mime_type: overrides ``file_obj.content_type`` when given

        Returns:
            (MediaItem instance, created boolean)
        """
        hasher = hashlib.sha256()
        for chunk in file_obj.chunks():
            hasher.update(chunk)
        content_hash = hasher.hexdigest()

        existing = cls.objects.filter(content_hash=content_hash).first()
        if existing:
            return existing, False

        mime_type = mime_type or getattr(file_obj, "content_type", "") or ""
        original_name = os.path.basename(file_obj.name)

        file_obj.seek(0)
        item = cls(
            content_hash=content_hash,
            original_name=original_name,
            mime_type=mime_type,
            size=file_obj.size,
        )
        item.file.save(f"{content_hash[:12]}{item.file_extension}", file_obj, save=False)
        item.save()

        if item.is_image:
            item._extract_image_metadata()

        return item, True

    def _extract_image_metadata(self):
        """Read dimensions and write a thumbnail for image uploads."""
        from PIL import Image

        try:
            with self.file.open("rb") as fh, Image.open(fh) as img:
                self.width, self.height = img.size
                update_fields = ["width", "height"]

                if blog_settings.GENERATE_THUMBNAILS:
                    image_format = img.format or "PNG"
                    thumb = img.copy()
                    thumb.thumbnail(tuple(blog_settings.THUMBNAIL_SIZE))
                    buffer = io.BytesIO()
                    thumb.save(buffer, format=image_format)
                    self.thumbnail.save(
                        f"thumb-{os.path.basename(self.file.name)}",
                        ContentFile(buffer.getvalue()),
                        save=False,
                    )
                    update_fields.append("thumbnail")
        except (OSError, ValueError) as e:
            logger.warning("Could not read image %s: %s", self.original_name, e)
            return

        self.save(update_fields=update_fields)

    def delete_files(self):
        """Remove the stored file and thumbnail from storage."""
        if self.thumbnail:
            self.thumbnail.delete(save=False)
        if self.file:
            self.file.delete(save=False)
