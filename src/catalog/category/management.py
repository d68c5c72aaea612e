"""Category management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from catalog.category.category import Category
from catalog.domain import catalog


@catalog.command(part_of="Category")
class AddCategory:
    name: String(required=True, max_length=100)
    parent_id: Identifier()
    position: Integer(default=0)


@catalog.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    position: Integer()


@catalog.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@catalog.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(AddCategory)
    def add_category(self, command):
        repo = current_domain.repository_for(Category)

        if command.parent_id:
            parent = repo.get(command.parent_id)
            if not parent.is_active:
                raise ValidationError({"parent_id": ["Parent category is inactive"]})

        category = Category.create(
            name=command.name,
            parent_id=command.parent_id,
            position=command.position,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update(name=command.name, position=command.position)
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)
