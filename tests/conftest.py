"""
Shared pytest fixtures.
"""

import copy

import pytest

from content_intel.framework.configuration import ConfigurationBuilder
from content_intel.framework.collector import ContentIntelCollector
from content_intel.framework.plugin_management import ContentIntelPluginRegistry, PluginRegistrationTable
from content_intel.infrastructure.content_repository import InMemoryContentRepository
from content_intel.infrastructure.di import DIContainer

from .fixtures.content import CONTENT, FixedClock


@pytest.fixture
def content_data():
    """A private copy of the test content dump."""
    return copy.deepcopy(CONTENT)


@pytest.fixture
def repository(content_data):
    return InMemoryContentRepository.from_dict(content_data)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def table():
    """An empty registration table, isolated from the bundled plugins."""
    return PluginRegistrationTable()


@pytest.fixture
def make_configuration():
    """Build a configuration from a plain mapping, without environment variables."""
    def build(**settings):
        return ConfigurationBuilder().add_dict_source(settings).build()
    return build


@pytest.fixture
def configuration(make_configuration):
    return make_configuration()


@pytest.fixture
def registry(table):
    return ContentIntelPluginRegistry(table, DIContainer())


@pytest.fixture
def collector(registry, repository, configuration):
    return ContentIntelCollector(registry, repository, repository, configuration)
