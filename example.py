import logging

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, create_engine

from entity_mapper import Entity, Registry, Repository, SqlAlchemyDatabase


logging.basicConfig(level=logging.DEBUG)


metadata = MetaData()
Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(255)),
    Column("body", Text),
    Column("title_translation", Integer),
)
Table(
    "article_meta",
    metadata,
    Column("id", Integer, ForeignKey("articles.id"), primary_key=True),
    Column("views", Integer),
)
Table("translations", metadata, Column("translationId", Integer, primary_key=True))
Table(
    "translation_items",
    metadata,
    Column("languageId", String(8), primary_key=True),
    Column("translationId", Integer, primary_key=True, autoincrement=False),
    Column("data", Text),
)


class Article(Entity):
    tables = ("articles", "article_meta")
    translations = ("title_translation",)


class ArticleRepo(Repository[Article, int]):
    pass


engine = create_engine("sqlite://", echo=True)

with engine.connect() as connection:
    metadata.create_all(connection)
    repo = ArticleRepo(SqlAlchemyDatabase(connection), Registry())

    article = repo.new(title="Hello", body="World", views=0)
    article.set_translation("de", "title_translation", "Hallo")
    article.insert()

    with repo.scope():
        repo.get(article.get("id")).set("views", 1)

    reloaded = repo.get(article.get("id")).no_action()
    assert reloaded.get("views") == 1
    assert reloaded.get_translation("de", "title_translation") == "Hallo"

    reloaded.delete()
    connection.commit()
