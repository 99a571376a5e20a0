"""
Knowledge base tree operations.
"""
from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import KnowledgeDoc


class KnowledgeService:
    """Knowledge base operations backed by the Django ORM."""

    def __init__(self, model=KnowledgeDoc):
        self.model = model

    def create(self, title, content="", parent_id=None, sort_order=0):
        return self.model.objects.create(
            title=title,
            content=content,
            parent_id=parent_id,
            sort_order=sort_order,
        )

    def find_by_id(self, pk):
        return self.model.objects.select_related("parent").filter(pk=pk).first()

    def find_by_slug(self, slug):
        return self.model.objects.select_related("parent").filter(slug=slug).first()

    def get_children(self, parent_id):
        return list(self.model.objects.filter(parent_id=parent_id).order_by("sort_order", "id"))

    def get_tree(self):
        """
        Return root documents with ``tree_children`` populated recursively.
        """
        docs = list(self.model.objects.order_by("sort_order", "id"))
        by_parent = {}
        for doc in docs:
            by_parent.setdefault(doc.parent_id, []).append(doc)
        for doc in docs:
            doc.tree_children = by_parent.get(doc.pk, [])
        return by_parent.get(None, [])

    def update(self, pk, **fields):
        doc = self.model.objects.get(pk=pk)
        if fields.get("parent_id") is not None:
            self._check_parent(doc, fields["parent_id"])
        for name, value in fields.items():
            setattr(doc, name, value)
        doc.save()
        return doc

    def delete(self, pk):
        """Delete a document and every document below it."""
        self.model.objects.get(pk=pk).delete()

    def reorder(self, items):
        """Apply ``[(pk, sort_order), ...]`` in one transaction."""
        with transaction.atomic():
            for pk, sort_order in items:
                self.model.objects.filter(pk=pk).update(sort_order=sort_order)

    def _check_parent(self, doc, parent_id):
        current = self.model.objects.filter(pk=parent_id).first()
        if current is None:
            raise self.model.DoesNotExist(f"Parent document {parent_id} does not exist.")
        while current is not None:
            if current.pk == doc.pk:
                raise ValidationError("A document cannot be moved under itself.")
            current = current.parent
