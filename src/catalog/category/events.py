"""Domain events for the Category aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from catalog.domain import catalog


@catalog.event(part_of="Category")
class CategoryAdded:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True)
    slug = String()
    parent_id = Identifier()
    position = Integer(default=0)


@catalog.event(part_of="Category")
class CategoryUpdated:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True)
    slug = String()
    position = Integer()


@catalog.event(part_of="Category")
class CategoryDeactivated:
    __version__ = 1

    category_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
