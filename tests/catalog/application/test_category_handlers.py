"""Application tests for category management handlers."""

import pytest
from catalog.category.category import Category
from catalog.category.management import AddCategory, DeactivateCategory, UpdateCategory
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


class TestManageCategoryHandler:
    def test_add_category(self):
        category_id = current_domain.process(AddCategory(name="Accessories"), asynchronous=False)
        category = current_domain.repository_for(Category).get(category_id)
        assert category.slug == "accessories"

    def test_add_child_category(self):
        parent_id = current_domain.process(AddCategory(name="Clothing"), asynchronous=False)
        child_id = current_domain.process(AddCategory(name="Shirts", parent_id=parent_id), asynchronous=False)
        assert current_domain.repository_for(Category).get(child_id).parent_id == parent_id

    def test_inactive_parent_rejected(self):
        parent_id = current_domain.process(AddCategory(name="Clothing"), asynchronous=False)
        current_domain.process(DeactivateCategory(category_id=parent_id), asynchronous=False)

        with pytest.raises(ValidationError) as exc:
            current_domain.process(AddCategory(name="Shirts", parent_id=parent_id), asynchronous=False)
        assert "parent_id" in exc.value.messages

    def test_update_category(self):
        category_id = current_domain.process(AddCategory(name="Bags"), asynchronous=False)
        current_domain.process(UpdateCategory(category_id=category_id, position=3), asynchronous=False)

        category = current_domain.repository_for(Category).get(category_id)
        assert category.position == 3
        assert category.name == "Bags"
