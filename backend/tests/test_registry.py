"""
Unit tests for analyzer dependency resolution.
"""

import pytest

from analysis.base import BaseAnalyzer, Statistic
from analysis.dispatcher import EventDispatcher
from analysis.errors import CyclicDependencyError, InvalidConfigError
from analysis.events import EventType, Relation
from analysis.registry import ModuleDescriptor, ModuleRegistry


class BuffCounter(BaseAnalyzer):
    def __init__(self, context, **dependencies):
        super().__init__(context, **dependencies)
        self.applications = 0
        self.add_handler(EventType.APPLYBUFF, Relation.BY_PLAYER, self.on_apply)

    def on_apply(self, event):
        self.applications += 1


class BuffReport(BaseAnalyzer):
    DEPENDENCIES = {"counter": "BuffCounter"}

    def statistics(self):
        return [Statistic(label="Applications", value=self.counter.applications)]


class Leaf(BaseAnalyzer):
    pass


class Threshold(BaseAnalyzer):
    def __init__(self, context, minimum=0, **dependencies):
        super().__init__(context, **dependencies)
        self.minimum = minimum


def descriptor(name, *dependencies):
    return ModuleDescriptor(
        name, Leaf, dependencies={f"{dep.lower()}_analyzer": dep for dep in dependencies}
    )


class TestModuleRegistry:
    def test_dependencies_come_first(self):
        registry = ModuleRegistry(
            [
                descriptor("Report", "Casts", "Buffs"),
                descriptor("Casts", "Abilities"),
                descriptor("Abilities"),
                descriptor("Buffs"),
            ]
        )

        order = [d.name for d in registry.order()]

        assert order == ["Abilities", "Buffs", "Casts", "Report"]

    def test_declaration_order_is_kept(self):
        registry = ModuleRegistry([descriptor("C"), descriptor("A"), descriptor("B")])

        assert [d.name for d in registry.order()] == ["C", "A", "B"]

    def test_cycle(self):
        registry = ModuleRegistry(
            [descriptor("A", "B"), descriptor("B", "A"), descriptor("C")]
        )

        with pytest.raises(CyclicDependencyError) as excinfo:
            registry.order()

        assert set(excinfo.value.names) == {"A", "B"}
        assert isinstance(excinfo.value, InvalidConfigError)

    def test_unknown_dependency(self):
        with pytest.raises(InvalidConfigError):
            ModuleRegistry([descriptor("A", "Missing")])

    def test_duplicate(self):
        with pytest.raises(InvalidConfigError):
            ModuleRegistry([descriptor("A"), descriptor("A")])

    @pytest.mark.parametrize("attr", ["casts", "fight", "buffs", "name", "degraded", "context"])
    def test_dependency_shadowing_an_analyzer_attribute(self, attr):
        with pytest.raises(InvalidConfigError):
            ModuleRegistry(
                [
                    descriptor("Counter"),
                    ModuleDescriptor("Reader", Leaf, dependencies={attr: "Counter"}),
                ]
            )

    def test_build_injects_dependencies(self, make_fight, make_context):
        context = make_context(make_fight())
        registry = ModuleRegistry([BuffReport, BuffCounter])

        analyzers = registry.build(context)

        assert [a.name for a in analyzers] == ["BuffCounter", "BuffReport"]
        assert registry.get("BuffReport").counter is registry.get("BuffCounter")
        assert "BuffCounter" in registry
        assert len(registry) == 2

    def test_build_once(self, make_fight, make_context):
        context = make_context(make_fight())
        registry = ModuleRegistry([BuffCounter])
        registry.build(context)

        with pytest.raises(InvalidConfigError):
            registry.build(context)

    def test_options(self, make_fight, make_context):
        registry = ModuleRegistry([ModuleDescriptor.of(Threshold, minimum=3)])

        (threshold,) = registry.build(make_context(make_fight()))

        assert threshold.minimum == 3

    def test_dependent_without_handlers(self, make_event, make_fight, make_context):
        fight = make_fight([make_event(1000, "applybuff", 197211)])
        context = make_context(fight)
        registry = ModuleRegistry([BuffCounter, BuffReport])
        analyzers = registry.build(context)

        EventDispatcher(context, analyzers).dispatch(fight.events)

        report = registry.get("BuffReport")
        assert not report.degraded
        assert report.collect_statistics() == [Statistic(label="Applications", value=1)]
        assert report.collect_suggestions() == []
