import typing

import pytest
from sqlalchemy import select
from sqlalchemy.engine import Connection

from entity_mapper import Registry, Settings, SqlAlchemyDatabase
from entity_mapper.tests.declarations import Product, metadata


def _items(connection: Connection) -> typing.List[typing.Tuple[str, int, str]]:
    table = metadata.tables["translation_items"]
    return [tuple(row) for row in connection.execute(select(table).order_by(table.c.languageId))]


@pytest.fixture()
def product(database: SqlAlchemyDatabase, registry: Registry) -> Product:
    product = Product(database, registry).from_array({"price": 10})
    product.set_translation("en", "name_translation", "Chair")
    product.insert()
    return product


def test_insert_creates_translation_ids(product: Product, connection: Connection) -> None:
    translation_ids = [row[0] for row in connection.execute(select(metadata.tables["translations"]))]

    assert sorted(translation_ids) == sorted(
        [product.get("name_translation"), product.get("description_translation")]
    )
    assert product.get("name_translation") != product.get("description_translation")


def test_insert_flushes_translations_set_beforehand(product: Product, connection: Connection) -> None:
    assert _items(connection) == [("en", product.get("name_translation"), "Chair")]
    assert not product.state.dirty_translations


def test_fresh_instance_reads_flushed_translation(
    product: Product, database: SqlAlchemyDatabase, registry: Registry
) -> None:
    product.set_translation("de", "name_translation", "Stuhl")
    product.update_translations()

    fresh = Product(database, registry).from_primary(product.get("id"))

    assert fresh.get_translation("de", "name_translation") == "Stuhl"
    assert fresh.get_translation("en", "name_translation") == "Chair"


def test_missing_translation_is_empty_string(
    product: Product, database: SqlAlchemyDatabase, registry: Registry
) -> None:
    fresh = Product(database, registry).from_primary(product.get("id"))

    assert fresh.get_translation("fr", "description_translation") == ""
    assert fresh.state.translation_buffer[("fr", "description_translation")] == ""


def test_translation_is_cached(
    product: Product, database: SqlAlchemyDatabase, registry: Registry, statements: typing.List[str]
) -> None:
    fresh = Product(database, registry).from_primary(product.get("id"))
    statements.clear()

    fresh.get_translation("en", "name_translation")
    fresh.get_translation("en", "name_translation")

    assert len(statements) == 1


def test_update_translations_replaces_value(product: Product, connection: Connection) -> None:
    product.set_translation("en", "name_translation", "Armchair")

    product.update_translations()

    assert _items(connection) == [("en", product.get("name_translation"), "Armchair")]


def test_set_translation_is_buffered(product: Product, connection: Connection) -> None:
    assert product.set_translation("en", "name_translation", "Stool") is product

    assert product.get_translation("en", "name_translation") == "Stool"
    assert ("en", "name_translation") in product.state.dirty_translations
    assert _items(connection)[0][2] == "Chair"


def test_delete_removes_translations(product: Product, connection: Connection) -> None:
    product.delete()

    assert _items(connection) == []
    assert list(connection.execute(select(metadata.tables["translations"]))) == []
    assert list(connection.execute(select(metadata.tables["products"]))) == []


def test_side_tables_follow_settings(database: SqlAlchemyDatabase, connection: Connection) -> None:
    connection.exec_driver_sql("CREATE TABLE i18n (id INTEGER PRIMARY KEY)")
    connection.exec_driver_sql(
        "CREATE TABLE i18n_items (lang VARCHAR(8), id INTEGER, text TEXT, PRIMARY KEY (lang, id))"
    )
    settings = Settings(
        translations_table="i18n",
        translation_items_table="i18n_items",
        translation_id_column="id",
        language_column="lang",
        data_column="text",
    )
    product = Product(database, Registry(settings=settings)).from_array({"price": 1})
    product.set_translation("en", "name_translation", "Lamp")

    product.insert()

    assert list(connection.exec_driver_sql("SELECT lang, text FROM i18n_items")) == [("en", "Lamp")]
