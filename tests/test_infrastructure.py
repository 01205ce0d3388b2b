"""
Tests for dependency injection, structured logging and exceptions.
"""

import json
from typing import Optional

import pytest

from content_intel.infrastructure.di import DIContainer
from content_intel.infrastructure.exceptions import (
    ConfigurationError, EntityNotFoundError, PluginTimeoutError, UnknownPluginError
)
from content_intel.infrastructure.observability import (
    HumanReadableFormatter, JSONLogFormatter, LogLevel, MemoryLogHandler, get_correlation_id, get_logger
)

from .fixtures.plugins import make_plugin


class Database:
    pass


class Repository:
    def __init__(self, database: Database):
        self.database = database


class Service:
    def __init__(self, repository: Repository, cache: Optional[dict] = None, retries: int = 3):
        self.repository = repository
        self.cache = cache
        self.retries = retries


class TestDIContainer:
    """Test the dependency injection container."""

    def test_singleton_class_resolved_once(self):
        container = DIContainer()
        container.register_singleton(Database, Database)

        assert container.resolve(Database) is container.resolve(Database)

    def test_transient(self):
        container = DIContainer()
        container.register_transient(Database, Database)

        assert container.resolve(Database) is not container.resolve(Database)

    def test_factory(self):
        container = DIContainer()
        database = Database()
        container.register_factory(Database, lambda: database)

        assert container.resolve(Database) is database

    def test_constructor_injection(self):
        """Registered services are injected and unregistered optionals keep their defaults."""
        container = DIContainer()
        container.register_singleton(Database, Database())
        container.register_singleton(Repository, Repository)

        service = container.create_instance(Service, retries=5)

        assert service.repository.database is container.resolve(Database)
        assert service.cache is None
        assert service.retries == 5

    def test_missing_required_dependency(self):
        with pytest.raises(ValueError, match="Cannot resolve dependency"):
            DIContainer().create_instance(Repository)

    def test_resolve_unregistered(self):
        container = DIContainer()
        assert container.has(Database) is False
        with pytest.raises(ValueError, match="not registered"):
            container.resolve(Database)

    def test_clear(self):
        container = DIContainer()
        container.register_singleton(Database, Database())
        container.clear()

        assert container.has(Database) is False


class TestStructuredLogging:
    """Test the structured logger."""

    @pytest.fixture
    def handler(self):
        logger = get_logger("content_intel_tests")
        handler = MemoryLogHandler()
        logger.add_handler(handler)
        yield handler
        logger.remove_handler(handler)

    def test_child_loggers_use_parent_handlers(self, handler):
        get_logger("content_intel_tests.child").info("hello", extra={"n": 1})

        record = handler.records[-1]
        assert record["logger"] == "content_intel_tests.child"
        assert record["message"] == "hello"
        assert record["extra"] == {"n": 1}
        assert "correlation_id" not in record

    def test_level_filtering(self, handler):
        logger = get_logger("content_intel_tests.levels", LogLevel.WARNING)
        logger.info("dropped")
        logger.warning("kept")

        assert [record["message"] for record in handler.records] == ["kept"]

    def test_correlation_and_entity_context(self, handler):
        logger = get_logger("content_intel_tests.context")

        with logger.correlation_context("abc") as correlation_id:
            assert get_correlation_id() == "abc"
            with logger.entity_context("node", 7):
                logger.info("inside")
        logger.info("outside")

        inside, outside = handler.records[-2:]
        assert correlation_id == "abc"
        assert inside["correlation_id"] == "abc"
        assert inside["entity"] == "node/7"
        assert "entity" not in outside
        assert get_correlation_id() is None

    def test_error_with_exception(self, handler):
        get_logger("content_intel_tests.errors").error("failed", exc_info=ValueError("bad"))

        assert handler.records[-1]["extra"]["exception"] == {
            "type": "ValueError", "message": "bad", "module": "builtins"
        }

    def test_formatters(self):
        record = {"timestamp": "t", "level": "INFO", "message": "m", "entity": "node/1", "extra": {"k": "v"}}

        assert json.loads(JSONLogFormatter().format(record)) == record
        assert HumanReadableFormatter().format(record) == "[t] INFO: m [entity=node/1] [k=v]"

    @pytest.mark.asyncio
    async def test_collector_logs_with_entity_context(self, table, collector, repository):
        """Collection records carry the entity key and a correlation id."""
        handler = MemoryLogHandler()
        logger = get_logger("content_intel.collector")
        logger.add_handler(handler)
        make_plugin(table, "broken", error=RuntimeError("db timeout"))
        try:
            await collector.collect_intel(repository.load("node", 1))
        finally:
            logger.remove_handler(handler)

        failure = next(record for record in handler.records if record["message"] == "Plugin failed")
        summary = next(record for record in handler.records if record["message"] == "Intel collected")

        assert failure["level"] == "ERROR"
        assert failure["extra"]["plugin"] == "broken"
        assert summary["entity"] == "node/1"
        assert summary["correlation_id"] == failure["correlation_id"]


class TestExceptions:
    """Test the exception hierarchy."""

    def test_to_dict(self):
        error = EntityNotFoundError("node", 9)
        data = error.to_dict()

        assert data["error_type"] == "EntityNotFoundError"
        assert data["error_code"] == "ENTITY_NOT_FOUND"
        assert data["context"] == {"entity_type": "node", "entity_id": "9"}
        assert data["message"] == "Entity node/9 not found."

    def test_unknown_plugin(self):
        error = UnknownPluginError("ghost")
        assert error.message == 'The "ghost" plugin does not exist.'
        assert error.context["plugin_id"] == "ghost"

    def test_timeout(self):
        error = PluginTimeoutError("slow", 2.0)
        assert error.message == "Plugin slow timed out after 2.0s"
        assert error.context == {"timeout": 2.0, "plugin_id": "slow"}
        assert error.error_code == "PLUGIN_TIMEOUT"

    def test_configuration_error_code_override(self):
        error = ConfigurationError("bad", config_path="/tmp/x.yaml", error_code="INVALID_YAML")
        assert error.error_code == "INVALID_YAML"
        assert error.context["config_path"] == "/tmp/x.yaml"
