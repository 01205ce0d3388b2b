"""
Tests for the plugin registry: definitions, instantiation, availability,
applicability and weight ordering.
"""

from dataclasses import replace

import pytest

from content_intel.framework.plugin_management import ContentIntelPluginRegistry, PluginDescriptor
from content_intel.infrastructure.di import DIContainer
from content_intel.infrastructure.exceptions import PluginError, UnknownPluginError

from .fixtures.plugins import ScriptedPlugin, make_plugin


def plugin_ids(plugins):
    return [plugin_id for plugin_id, _ in plugins]


class TestDefinitions:
    """Test descriptor listing, caching and alteration."""

    def test_lists_unavailable_plugins(self, table, registry):
        """Definitions include plugins whose dependencies are missing."""
        make_plugin(table, "present")
        make_plugin(table, "missing", available=False)

        assert set(registry.get_definitions()) == {"present", "missing"}
        assert plugin_ids(registry.get_available_plugins()) == ["present"]

    def test_definitions_keep_discovery_order(self, table, registry):
        """Definitions are returned in registration order."""
        for plugin_id in ("c", "a", "b"):
            make_plugin(table, plugin_id)

        assert list(registry.get_definitions()) == ["c", "a", "b"]

    def test_cache_invalidated_by_registration(self, table, registry):
        """Registering a plugin after the first listing is visible on the next one."""
        make_plugin(table, "first")
        assert list(registry.get_definitions()) == ["first"]

        make_plugin(table, "second")
        assert list(registry.get_definitions()) == ["first", "second"]

    def test_cache_invalidated_by_unregistration(self, table, registry):
        """Removing a plugin from the table drops it from the definitions."""
        make_plugin(table, "first")
        make_plugin(table, "second")
        registry.get_definitions()

        table.unregister("first")
        assert list(registry.get_definitions()) == ["second"]

    def test_alter_hooks_run_in_order(self, table, registry):
        """Each hook receives the output of the previous one."""
        make_plugin(table, "one", weight=5)
        seen = []

        def double_weights(definitions):
            seen.append("double")
            return {pid: replace(d, weight=d.weight * 2) for pid, d in definitions.items()}

        def add_one(definitions):
            seen.append("add")
            return {pid: replace(d, weight=d.weight + 1) for pid, d in definitions.items()}

        registry.add_alter_hook(double_weights)
        registry.add_alter_hook(add_one)

        assert registry.get_definition("one").weight == 11
        assert seen == ["double", "add"]

    def test_alter_hook_returning_none_keeps_definitions(self, table, registry):
        """A hook that only observes leaves the definitions unchanged."""
        make_plugin(table, "one")
        registry.add_alter_hook(lambda definitions: None)

        assert list(registry.get_definitions()) == ["one"]

    def test_alter_hook_can_remove_and_relabel(self, table, registry):
        """Hooks may drop plugins and rewrite any descriptor field."""
        make_plugin(table, "keep", label="Keep")
        make_plugin(table, "drop")

        def alter(definitions):
            del definitions["drop"]
            definitions["keep"] = replace(definitions["keep"], label="Renamed", entity_types=frozenset({"user"}))
            return definitions

        registry.add_alter_hook(alter)

        definitions = registry.get_definitions()
        assert list(definitions) == ["keep"]
        assert definitions["keep"].label == "Renamed"
        assert registry.create_instance("keep").label() == "Renamed"

    def test_alter_hook_can_add_plugin(self, table, registry):
        """Hooks may add descriptors carrying their own factory."""
        make_plugin(table, "base")
        extra_class = make_plugin(table, "template")
        table.unregister("template")

        def add(definitions):
            definitions["added"] = PluginDescriptor(id="added", label="Added", factory=extra_class)
            return definitions

        registry.add_alter_hook(add)

        assert "added" in registry.get_definitions()
        assert plugin_ids(registry.get_available_plugins()) == ["base", "added"]

    def test_malformed_altered_definition_dropped(self, table, registry):
        """A definition stored under a key other than its id is discarded."""
        make_plugin(table, "good")

        def alter(definitions):
            definitions["wrong_key"] = definitions["good"]
            return definitions

        registry.add_alter_hook(alter)
        assert list(registry.get_definitions()) == ["good"]

    def test_clear_cached_definitions_reruns_hooks(self, table, registry):
        """Clearing the cache rebuilds definitions on the next call."""
        make_plugin(table, "one")
        calls = []
        registry.add_alter_hook(lambda definitions: calls.append(1))

        registry.get_definitions()
        registry.get_definitions()
        assert len(calls) == 1

        registry.clear_cached_definitions()
        registry.get_definitions()
        assert len(calls) == 2

    def test_get_definitions_returns_copy(self, table, registry):
        """Mutating the returned mapping does not affect the registry."""
        make_plugin(table, "one")
        registry.get_definitions().clear()

        assert registry.has_definition("one")


class TestInstantiation:
    """Test plugin instance creation."""

    def test_unknown_plugin(self, registry):
        """An unknown id raises UnknownPluginError."""
        with pytest.raises(UnknownPluginError) as exc_info:
            registry.create_instance("nope")

        assert exc_info.value.plugin_id == "nope"
        assert exc_info.value.error_code == "UNKNOWN_PLUGIN"

    def test_unknown_plugin_does_not_break_registry(self, table, registry):
        """Lookups keep working after an unknown id was requested."""
        make_plugin(table, "one")

        with pytest.raises(UnknownPluginError):
            registry.get_definition("two")
        assert registry.create_instance("one").plugin_id == "one"

    def test_instances_are_cached(self, table, registry):
        """The same instance is returned for repeated calls."""
        make_plugin(table, "one")

        assert registry.create_instance("one") is registry.create_instance("one")

    def test_instances_rebuilt_after_cache_clear(self, table, registry):
        """Clearing definitions also drops cached instances."""
        make_plugin(table, "one")
        first = registry.create_instance("one")

        registry.clear_cached_definitions()
        assert registry.create_instance("one") is not first

    def test_factory_failure_wrapped(self, table, registry):
        """A failing factory surfaces as PluginError with the cause attached."""
        def broken_factory(descriptor):
            raise RuntimeError("boom")

        table.register(PluginDescriptor(id="broken", label="Broken"), broken_factory)

        with pytest.raises(PluginError) as exc_info:
            registry.create_instance("broken")
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_dependencies_injected_from_container(self, table):
        """Constructor parameters are resolved from the DI container."""

        class Greeting:
            def __init__(self, text):
                self.text = text

        class GreetingPlugin(ScriptedPlugin):
            def __init__(self, descriptor: PluginDescriptor, greeting: Greeting):
                super().__init__(descriptor)
                self.greeting = greeting

        container = DIContainer()
        container.register_singleton(Greeting, Greeting("hello"))
        table.register(PluginDescriptor(id="greeting", label="Greeting"), GreetingPlugin)

        registry = ContentIntelPluginRegistry(table, container)
        assert registry.create_instance("greeting").greeting.text == "hello"

    def test_plugin_with_broken_factory_skipped(self, table, registry):
        """Plugins that cannot be instantiated are left out of the available list."""
        make_plugin(table, "good")

        def broken_factory(descriptor):
            raise RuntimeError("boom")

        table.register(PluginDescriptor(id="broken", label="Broken"), broken_factory)

        assert plugin_ids(registry.get_available_plugins()) == ["good"]


class TestOrderingAndFiltering:
    """Test weight ordering, availability and applicability."""

    def test_weight_order(self, table, registry):
        """Plugins with weights 30, 10, 20 come back as 10, 20, 30."""
        make_plugin(table, "thirty", weight=30)
        make_plugin(table, "ten", weight=10)
        make_plugin(table, "twenty", weight=20)

        assert plugin_ids(registry.get_available_plugins()) == ["ten", "twenty", "thirty"]

    def test_equal_weights_keep_discovery_order(self, table, registry):
        """Sorting is stable for equal weights."""
        make_plugin(table, "b", weight=5)
        make_plugin(table, "a", weight=5)
        make_plugin(table, "first", weight=-1)
        make_plugin(table, "c", weight=5)

        assert plugin_ids(registry.get_available_plugins()) == ["first", "b", "a", "c"]

    def test_availability_exception_means_unavailable(self, table, registry):
        """A plugin whose availability check raises is treated as unavailable."""
        make_plugin(table, "flaky", available=RuntimeError("no database"))
        make_plugin(table, "fine")

        assert plugin_ids(registry.get_available_plugins()) == ["fine"]
        assert registry.is_plugin_available("flaky") is False

    def test_applicable_plugins_by_entity_type(self, table, registry, repository):
        """An empty entity-type set applies to every type."""
        make_plugin(table, "nodes_only", weight=2, entity_types=["node"])
        make_plugin(table, "anything", weight=1)
        make_plugin(table, "users_only", entity_types=["user"])

        node = repository.load("node", 1)
        term = repository.load("taxonomy_term", 5)

        assert plugin_ids(registry.get_applicable_plugins(node)) == ["anything", "nodes_only"]
        assert plugin_ids(registry.get_applicable_plugins(term)) == ["anything"]

    def test_applicable_plugins_respect_applies_override(self, table, registry, repository):
        """Plugins can refuse an entity through their own applies check."""
        make_plugin(table, "refuses", applies_to=False)
        make_plugin(table, "accepts", weight=3, applies_to=True, entity_types=["user"])

        node = repository.load("node", 1)
        assert plugin_ids(registry.get_applicable_plugins(node)) == ["accepts"]

    def test_applies_exception_excludes_plugin(self, table, registry, repository):
        """A failing applicability check excludes only that plugin."""
        class Picky(ScriptedPlugin):
            def applies(self, entity):
                raise ValueError("cannot tell")

        table.register(PluginDescriptor(id="picky", label="Picky"), Picky)
        make_plugin(table, "fine")

        node = repository.load("node", 1)
        assert plugin_ids(registry.get_applicable_plugins(node)) == ["fine"]
