from typing import Generator, List

import pytest
from _pytest.config.argparsing import Parser
from _pytest.fixtures import SubRequest
from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine, create_engine

from entity_mapper import Registry, Settings, SqlAlchemyDatabase
from entity_mapper.tests.declarations import metadata


def pytest_addoption(parser: Parser) -> None:
    parser.addoption("--sqlalchemy-url", action="store", default="sqlite://")


@pytest.fixture()
def engine(request: SubRequest) -> Engine:
    return create_engine(request.config.getoption("--sqlalchemy-url"))


@pytest.fixture()
def statements(engine: Engine) -> Generator[List[str], None, None]:
    executed: List[str] = []

    def record(conn, cursor, statement, parameters, context, executemany) -> None:
        executed.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    yield executed
    event.remove(engine, "before_cursor_execute", record)


@pytest.fixture()
def connection(engine: Engine, statements: List[str]) -> Generator[Connection, None, None]:
    with engine.connect() as connection:
        metadata.drop_all(connection)
        metadata.create_all(connection)
        statements.clear()
        yield connection
        connection.rollback()
        metadata.drop_all(connection)
        connection.commit()


@pytest.fixture()
def database(connection: Connection) -> SqlAlchemyDatabase:
    return SqlAlchemyDatabase(connection)


@pytest.fixture()
def registry() -> Registry:
    return Registry(settings=Settings())


@pytest.fixture()
def tags(connection: Connection) -> Generator[None, None, None]:
    # INT rather than INTEGER, so SQLite does not make the key a rowid alias
    connection.exec_driver_sql("CREATE TABLE tags (id INT PRIMARY KEY, name TEXT)")
    yield
    connection.rollback()
    connection.exec_driver_sql("DROP TABLE IF EXISTS tags")
    connection.commit()
