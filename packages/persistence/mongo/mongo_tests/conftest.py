"""Test configuration for the MongoDB persistence package."""

import pytest
from mongomock_motor import AsyncMongoMockClient

from dao_commons_mongo import MongoConnectionManager


class MockSession:
    """Mock Motor session.

    Motor's ClientSession uses sync start_transaction() and end_session();
    commit_transaction/abort_transaction are async. Match that so the UoW
    doesn't await the wrong thing.
    """

    def __init__(self):
        self._in_transaction = False
        self.commits = 0
        self.aborts = 0
        self.ended = False
        self.fail_commit: Exception | None = None

    def in_transaction(self):
        return self._in_transaction

    def start_transaction(self):
        self._in_transaction = True

    async def commit_transaction(self):
        if self.fail_commit is not None:
            raise self.fail_commit
        self._in_transaction = False
        self.commits += 1

    async def abort_transaction(self):
        self._in_transaction = False
        self.aborts += 1

    def end_session(self):
        self._in_transaction = False
        self.ended = True


@pytest.fixture
def mock_session():
    return MockSession()


@pytest.fixture
def mongo_connection():
    """Connection manager wired to an in-process mongomock client."""
    connection = MongoConnectionManager("mongodb://mock:27017", database="test_db")
    connection._client = AsyncMongoMockClient()
    return connection


@pytest.fixture
def mongo_connection_with_mock_session(mongo_connection):
    """Connection whose client hands out MockSession objects."""
    sessions = []

    async def _mock_start_session():
        sessions.append(MockSession())
        return sessions[-1]

    mongo_connection.client.start_session = _mock_start_session
    mongo_connection.started_sessions = sessions
    return mongo_connection
