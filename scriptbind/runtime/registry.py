"""Registration of synthesized adapters into one engine instance."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from scriptbind.generator.errors import BuildError, BuildErrorKind
from scriptbind.generator.types import Bindings, ExposureSelection, TypeDescriptor, TypeKind

from .adapter import Adapter, synthesize
from .convert import Converter
from .engine import ScriptEngine
from .errors import BindingError, ErrorKind
from .values import DynamicValue

logger = logging.getLogger(__name__)

Entry = tuple[TypeDescriptor, ExposureSelection, type]


class Registry:
    """Owns the adapters and bound native classes installed into one engine.

    Nothing here is shared between engines: create one registry per engine.
    """

    def __init__(self, engine: ScriptEngine) -> None:
        self.engine = engine
        self._natives: dict[str, type] = {}
        self._adapters: dict[str, Adapter] = {}
        self._enums: set[str] = set()
        self.converter = Converter(self._natives, self._enums)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def adapter(self, name: str) -> Adapter:
        return self._adapters[name]

    def register(
        self, descriptor: TypeDescriptor, selection: ExposureSelection, native: type
    ) -> Adapter:
        """Synthesize and install one bound type."""
        return self.register_all([(descriptor, selection, native)])[0]

    def register_all(self, entries: Iterable[Entry]) -> list[Adapter]:
        """Synthesize every entry, then install them in order.

        Types in the batch may refer to each other and to types registered
        earlier. Nothing is installed unless every entry synthesizes.
        """
        entries = list(entries)
        batch: set[str] = set()
        for descriptor, _, _ in entries:
            if descriptor.name in batch or self.engine.has_global(descriptor.name):
                raise BindingError(
                    ErrorKind.ALREADY_REGISTERED,
                    descriptor.name,
                    f"global '{descriptor.name}' already exists",
                )
            batch.add(descriptor.name)

        known = {*self._natives, *batch}
        adapters = [
            synthesize(descriptor, selection, native, self.converter, known)
            for descriptor, selection, native in entries
        ]

        for adapter in adapters:
            self._natives[adapter.name] = adapter.native
            self._adapters[adapter.name] = adapter
            if adapter.kind == TypeKind.ENUM:
                self._enums.add(adapter.name)
            self.engine.register_type(adapter)
            logger.debug("Installed %s with facets %s", adapter.name, list(adapter.facets))
        return adapters

    def register_bindings(self, bindings: Bindings, natives: Mapping[str, type]) -> list[Adapter]:
        """Register every compiled type of a parsed declaration file."""
        entries: list[Entry] = []
        for descriptor, selection in bindings.compiled():
            if descriptor.name not in natives:
                raise BuildError(
                    BuildErrorKind.UNKNOWN_TYPE,
                    descriptor.name,
                    None,
                    "no native class was supplied for this type",
                )
            entries.append((descriptor, selection, natives[descriptor.name]))
        return self.register_all(entries)

    def wrap(self, instance: Any) -> DynamicValue:
        """Hand a native instance to scripts as a handle."""
        return self.converter.to_dynamic(instance)
