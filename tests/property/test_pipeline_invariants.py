"""
Property-Based Tests for Bootstrap Pipeline Invariants

Tests exactly-once invocation, tier ordering and hook chain shape over
randomly generated extension graphs.
"""
from hypothesis import given, settings

from core.checker import DiagnosticCheckerHook
from core.configuration_runner import ConfigurationExtensionRunner
from core.definition_runner import DefinitionExtensionRunner
from core.hook_registrar import LifecycleHookRegistrar
from core.listeners import ListenerDetectorHook
from di.factory import DefaultComponentFactory
from tests.property.strategies import (
    TIER_INDEX,
    extension_graph_strategy,
    flat_extension_strategy,
    hook_set_strategy,
)
from tests.support import (
    Journal,
    OrderedConfigurationExtension,
    OrderedDefinitionExtension,
    OrderedHook,
    PriorityConfigurationExtension,
    PriorityDefinitionExtension,
    PriorityHook,
    PriorityMergedHook,
    RecordingConfigurationExtension,
    RecordingDefinitionExtension,
    RecordingHook,
    RecordingMergedHook,
    descriptor,
)

DEFINITION_CLASSES = {
    "priority": PriorityDefinitionExtension,
    "ordered": OrderedDefinitionExtension,
    "plain": RecordingDefinitionExtension,
}

CONFIGURATION_CLASSES = {
    "priority": PriorityConfigurationExtension,
    "ordered": OrderedConfigurationExtension,
    "plain": RecordingConfigurationExtension,
}

HOOK_CLASSES = {
    ("priority", False): PriorityHook,
    ("ordered", False): OrderedHook,
    ("plain", False): RecordingHook,
    ("priority", True): PriorityMergedHook,
    ("plain", True): RecordingMergedHook,
}


class _Sink:
    def add_listener(self, listener):
        pass


def build_graph(specs, journal):
    """Register the roots; every other extension is registered by its parent."""
    factory = DefaultComponentFactory()
    children = {spec.index: [] for spec in specs}
    for spec in specs:
        if spec.parent is not None:
            children[spec.parent].append(spec)

    built = {}
    for spec in reversed(specs):
        built[spec.index] = descriptor(
            DEFINITION_CLASSES[spec.tier],
            journal=journal,
            label=spec.name,
            registers={child.name: built[child.index] for child in children[spec.index]},
            order=spec.rank,
        )
    for spec in specs:
        if spec.parent is None:
            factory.register_descriptor(spec.name, built[spec.index])
    return factory


def assert_tier_order(invoked_specs):
    tiers = [TIER_INDEX[spec.tier] for spec in invoked_specs]
    assert tiers == sorted(tiers)
    for tier in ("priority", "ordered"):
        ranks = [spec.rank for spec in invoked_specs if spec.tier == tier]
        assert ranks == sorted(ranks)


class TestDefinitionRunnerInvariants:
    """Properties of the fixpoint over definition-mutating extensions."""

    @given(extension_graph_strategy())
    @settings(max_examples=150, deadline=None)
    def test_every_extension_invoked_exactly_once(self, specs):
        journal = Journal()
        factory = build_graph(specs, journal)

        runner = DefinitionExtensionRunner(factory)
        runner.run(factory, [])

        mutated = journal.labels("mutate")
        assert sorted(mutated) == sorted(spec.name for spec in specs)
        assert len(mutated) == len(set(mutated))
        assert runner.processed == {spec.name for spec in specs}

    @given(extension_graph_strategy())
    @settings(max_examples=150, deadline=None)
    def test_registering_extension_runs_first(self, specs):
        journal = Journal()
        factory = build_graph(specs, journal)

        DefinitionExtensionRunner(factory).run(factory, [])

        position = {label: i for i, label in enumerate(journal.labels("mutate"))}
        for spec in specs:
            if spec.parent is not None:
                assert position[specs[spec.parent].name] < position[spec.name]

    @given(extension_graph_strategy())
    @settings(max_examples=150, deadline=None)
    def test_up_front_extensions_follow_tier_order(self, specs):
        journal = Journal()
        factory = build_graph(specs, journal)

        DefinitionExtensionRunner(factory).run(factory, [])

        by_name = {spec.name: spec for spec in specs}
        roots = [by_name[label] for label in journal.labels("mutate") if by_name[label].parent is None]
        assert_tier_order(roots)

    @given(extension_graph_strategy())
    @settings(max_examples=100, deadline=None)
    def test_configuration_callbacks_follow_invocation_order(self, specs):
        journal = Journal()
        factory = build_graph(specs, journal)

        DefinitionExtensionRunner(factory).run(factory, [])

        assert journal.labels("apply") == journal.labels("mutate")


class TestConfigurationRunnerInvariants:

    @given(flat_extension_strategy())
    @settings(max_examples=150, deadline=None)
    def test_tiers_and_ranks(self, specs):
        journal = Journal()
        factory = DefaultComponentFactory()
        for spec in specs:
            factory.register_descriptor(
                spec.name,
                descriptor(CONFIGURATION_CLASSES[spec.tier], journal=journal, label=spec.name, order=spec.rank),
            )

        ConfigurationExtensionRunner(factory).run()

        by_name = {spec.name: spec for spec in specs}
        applied = [by_name[label] for label in journal.labels("apply")]
        assert len(applied) == len(specs)
        assert_tier_order(applied)
        plain = [spec.index for spec in applied if spec.tier == "plain"]
        assert plain == sorted(plain)


class TestHookChainInvariants:

    @given(hook_set_strategy())
    @settings(max_examples=150, deadline=None)
    def test_chain_shape(self, hooks):
        journal = Journal()
        factory = DefaultComponentFactory()
        for spec in hooks:
            factory.register_descriptor(
                spec.name,
                descriptor(HOOK_CLASSES[(spec.tier, spec.merged)], journal=journal, label=spec.name, order=spec.rank),
            )

        registrar = LifecycleHookRegistrar(factory)
        registrar.register(_Sink())

        chain = factory.lifecycle_hooks
        assert isinstance(chain[0], DiagnosticCheckerHook)
        assert isinstance(chain[-1], ListenerDetectorHook)
        assert len(chain) == registrar.checker.target_hook_count + 1

        by_name = {spec.name: spec for spec in hooks}
        middle = [by_name[hook.label] for hook in chain[1:-1]]
        assert sorted(spec.index for spec in middle) == sorted(spec.index for spec in hooks)

        flags = [spec.merged for spec in middle]
        assert flags == sorted(flags)

        assert_tier_order([spec for spec in middle if not spec.merged])
        assert_tier_order([spec for spec in middle if spec.merged])
