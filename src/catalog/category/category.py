"""Category aggregate root for grouping products on the storefront."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from catalog.domain import catalog
from catalog.product.product import slugify


@catalog.aggregate
class Category:
    """A storefront grouping of products, optionally nested under a parent."""

    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    parent_id: Identifier()
    position: Integer(default=0)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, parent_id=None, position=0):
        from catalog.category.events import CategoryAdded

        now = datetime.now(UTC)
        category = cls(
            name=name,
            slug=slugify(name),
            parent_id=parent_id,
            position=position or 0,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryAdded(
                category_id=category.id,
                name=name,
                slug=category.slug,
                parent_id=parent_id,
                position=category.position,
            )
        )
        return category

    def update(self, name=None, position=None):
        from catalog.category.events import CategoryUpdated

        if name is not None:
            self.name = name
            self.slug = slugify(name)
        if position is not None:
            self.position = position
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryUpdated(
                category_id=self.id,
                name=self.name,
                slug=self.slug,
                position=self.position,
            )
        )

    def deactivate(self):
        from catalog.category.events import CategoryDeactivated

        if not self.is_active:
            raise ValidationError({"status": ["Category is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now

        self.raise_(CategoryDeactivated(category_id=self.id, deactivated_at=now))
