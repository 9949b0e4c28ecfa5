import logging
from typing import Dict, List, Optional, Type

from analysis.base import AnalysisContext, BaseAnalyzer
from analysis.errors import CyclicDependencyError, InvalidConfigError

# set on every analyzer in BaseAnalyzer.__init__
INSTANCE_ATTRIBUTES = {"context", "active"}


class ModuleDescriptor:
    def __init__(
        self,
        name: str,
        cls: Type[BaseAnalyzer],
        dependencies: Optional[Dict[str, str]] = None,
        options: Optional[Dict] = None,
    ):
        self.name = name
        self.cls = cls
        # attribute name on the analyzer -> name of the module it reads
        self.dependencies = dict(dependencies or {})
        self.options = dict(options or {})

    @classmethod
    def of(cls, analyzer_cls: Type[BaseAnalyzer], **options):
        return cls(
            analyzer_cls.get_name(),
            analyzer_cls,
            dependencies=analyzer_cls.DEPENDENCIES,
            options=options,
        )

    def __repr__(self):
        return f"ModuleDescriptor({self.name!r}, depends on {sorted(self.dependencies.values())})"


class ModuleRegistry:
    """Resolves analyzer dependencies and builds one instance of each per run"""

    def __init__(self, descriptors):
        self._descriptors: Dict[str, ModuleDescriptor] = {}
        for descriptor in descriptors:
            if not isinstance(descriptor, ModuleDescriptor):
                descriptor = ModuleDescriptor.of(descriptor)
            if descriptor.name in self._descriptors:
                raise InvalidConfigError(f"Analyzer {descriptor.name} registered twice")
            self._descriptors[descriptor.name] = descriptor

        for descriptor in self._descriptors.values():
            for attr in descriptor.dependencies:
                if attr in INSTANCE_ATTRIBUTES or hasattr(descriptor.cls, attr):
                    raise InvalidConfigError(
                        f"{descriptor.name} can not take dependency {attr}, "
                        "the name is already an analyzer attribute"
                    )
            for dependency in descriptor.dependencies.values():
                if dependency not in self._descriptors:
                    raise InvalidConfigError(
                        f"{descriptor.name} depends on unknown analyzer {dependency}"
                    )

        self._instances: Dict[str, BaseAnalyzer] = {}

    def order(self) -> List[ModuleDescriptor]:
        """Topological order, keeping declaration order among ready modules"""
        ordered = []
        placed = set()
        remaining = list(self._descriptors.values())

        while remaining:
            ready = [
                descriptor
                for descriptor in remaining
                if all(dep in placed for dep in descriptor.dependencies.values())
            ]
            if not ready:
                raise CyclicDependencyError(descriptor.name for descriptor in remaining)

            for descriptor in ready:
                ordered.append(descriptor)
                placed.add(descriptor.name)
            remaining = [descriptor for descriptor in remaining if descriptor.name not in placed]

        return ordered

    def build(self, context: AnalysisContext) -> List[BaseAnalyzer]:
        if self._instances:
            raise InvalidConfigError("Analyzers were already built for this run")

        analyzers = []
        for descriptor in self.order():
            dependencies = {
                attr: self._instances[name]
                for attr, name in descriptor.dependencies.items()
            }
            analyzer = descriptor.cls(context, **dependencies, **descriptor.options)
            self._instances[descriptor.name] = analyzer
            analyzers.append(analyzer)

            if not analyzer.active:
                logging.debug(f"{descriptor.name} is inactive for this fight")
        return analyzers

    def get(self, name) -> BaseAnalyzer:
        return self._instances[name]

    def __contains__(self, name):
        return name in self._descriptors

    def __len__(self):
        return len(self._descriptors)
