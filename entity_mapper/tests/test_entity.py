import pytest

from entity_mapper import Entity, MissingAttribute, Mode, Registry, SqlAlchemyDatabase
from entity_mapper.errors import DuplicateTable, EntityWithoutTables
from entity_mapper.tests.declarations import Animal, Article, Dog, Product, User, UserProfile


def test_entity_defaults_to_table_named_after_class():
    assert Animal.tables == ("animals",)
    assert User.tables == ("users",)


def test_entity_keeps_declared_tables():
    assert Article.tables == ("articles", "article_meta")


def test_child_entity_extends_parent_tables():
    assert Dog.tables == ("animals", "dogs")
    assert UserProfile.tables == ("users", "profiles")


def test_child_entity_extends_parent_translations():
    class DiscountedProduct(Product):
        tables = ("discounts",)
        translations = ("terms_translation", "name_translation")

    assert DiscountedProduct.tables == ("products", "discounts")
    assert DiscountedProduct.translations == ("name_translation", "description_translation", "terms_translation")


def test_entity_without_tables():
    with pytest.raises(EntityWithoutTables):

        class Tableless(Entity):
            tables = ()


def test_entity_repeating_parent_table():
    with pytest.raises(DuplicateTable):

        class Puppy(Dog):
            tables = ("dogs",)


def test_entity_repeating_own_table():
    with pytest.raises(DuplicateTable):

        class Twice(Entity):
            tables = ("articles", "articles")


def test_get_returns_populated_value(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry).from_array({"id": 1, "title": None})

    assert article.get("id") == 1
    assert article.get("title") is None
    assert article["id"] == 1
    assert "title" in article
    assert "body" not in article


def test_get_never_populated_attribute(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry)

    with pytest.raises(MissingAttribute):
        article.get("title")


def test_set_marks_entity_dirty(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry).from_array({"id": 1})
    assert not article.dirty

    assert article.set("title", "Hello").set("body", "World") is article

    assert article.dirty
    assert article.to_dict() == {"id": 1, "title": "Hello", "body": "World"}


def test_item_assignment_marks_entity_dirty(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry).from_array({"id": 1})

    article["title"] = "Hello"

    assert article.dirty
    assert article.get("title") == "Hello"


def test_to_dict_is_a_copy(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry).from_array({"id": 1})

    article.to_dict()["id"] = 2

    assert article.get("id") == 1


def test_no_action_switches_mode(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry)
    assert article.mode is Mode.WRITE_BACK

    assert article.no_action() is article

    assert article.mode is Mode.NO_ACTION


def test_repr_shows_primary_values(database: SqlAlchemyDatabase, registry: Registry) -> None:
    article = Article(database, registry).from_array({"id": 3})

    assert repr(article) == "Article({'id': 3})"
