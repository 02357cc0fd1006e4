"""
Class registry construction and member scriptability decisions
"""

from dataclasses import dataclass, field
from types import MappingProxyType

from . import logger
from .config import GeneratorConfig
from .header_index import HeaderIndex
from .symbols import Symbol, Visibility
from .type_mapper import TypeCategory, TypeMapper, extract_namespace, normalize_type, strip_namespace

BINDABLE_KINDS = ("class", "struct", "namespace")
DEPENDENCY_ONLY_PREFIX = "_"


@dataclass(frozen=True)
class ClassEntry:
    """A class known to the generator"""
    name: str
    refcounted: bool
    dependency_only: bool = False
    header: str = ""
    symbol: Symbol | None = field(default=None, compare=False, repr=False)


def is_refcounted_name(name: str, config: GeneratorConfig) -> bool:
    if name in config.refcounted_base_types:
        return True
    return any(fragment in name for fragment in config.refcounted_fragments)


def is_refcounted_symbol(symbol: Symbol, config: GeneratorConfig) -> bool:
    if is_refcounted_name(normalize_type(symbol.name).name, config):
        return True
    return any(child.name in config.refcounted_markers for child in symbol.children)


def parse_requested_classes(requested) -> tuple[list[str], set[str]]:
    """Split CLI class arguments into names and the dependency-only subset"""
    names = []
    dependency_only = set()
    for argument in requested:
        name = argument
        if name.startswith(DEPENDENCY_ONLY_PREFIX):
            name = name[len(DEPENDENCY_ONLY_PREFIX):]
            dependency_only.add(name)
        if name and name not in names:
            names.append(name)
    return names, dependency_only


class ClassRegistry:
    """Read-only view of every registered class, built once before emission"""

    def __init__(self, entries: dict[str, ClassEntry], bindable: list[ClassEntry],
                 config: GeneratorConfig | None = None):
        self._entries = MappingProxyType(dict(entries))
        self._bindable = tuple(bindable)
        self.config = config or GeneratorConfig()

    @property
    def entries(self):
        return self._entries

    def __contains__(self, name: str):
        return name in self._entries

    def __len__(self):
        return len(self._entries)

    def get(self, name: str) -> ClassEntry | None:
        return self._entries.get(name)

    def class_names(self) -> frozenset[str]:
        return frozenset(self._entries)

    def is_refcounted(self, name: str) -> bool:
        entry = self._entries.get(name)
        if entry is not None:
            return entry.refcounted
        return is_refcounted_name(name, self.config)

    def bindable_classes(self) -> tuple[ClassEntry, ...]:
        """Classes to generate, in compound order"""
        return self._bindable

    def include_for(self, name: str) -> str:
        name = normalize_type(name).name
        entry = self._entries.get(name)
        header = entry.header if entry is not None else ""
        return header or self.config.fallback_includes.get(name, "")


class ClassSelector:
    """Builds the class registry from the symbol graph and the CLI allow-list"""

    def __init__(self, config: GeneratorConfig | None = None, header_index: HeaderIndex | None = None):
        self.config = config or GeneratorConfig()
        self.header_index = header_index or HeaderIndex()

    def resolve_header(self, name: str) -> str:
        alias = self.config.header_aliases.get(name)
        if alias is not None:
            if alias.endswith(".h"):
                return alias
            name = alias
        header = self.header_index.lookup(name)
        if not header and self.header_index.root is not None:
            logger.debug(f"No header found for {name}")
        return header

    def build_registry(self, graph, requested=()) -> ClassRegistry:
        """
        Register requested classes and every matching compound.

        Args:
            graph: Loaded SymbolGraph
            requested: Class names from the command line; a leading _ marks
                a class that is only a dependency and gets no output file
        """
        names, dependency_only = parse_requested_classes(requested)
        entries: dict[str, ClassEntry] = {}

        for name in names:
            entries[name] = ClassEntry(
                name=name,
                refcounted=is_refcounted_name(name, self.config),
                dependency_only=name in dependency_only,
                header=self.resolve_header(name),
            )

        bound: dict[str, ClassEntry] = {}
        for compound in graph.compounds:
            if compound.kind not in BINDABLE_KINDS:
                continue
            if names and strip_namespace(compound.name) not in names:
                continue
            if extract_namespace(compound.name) in self.config.bad_namespaces:
                logger.debug(f"Skipping {compound.name}, namespace is not bound")
                continue

            type_name = normalize_type(compound.name).name
            if type_name in bound:
                logger.debug(f"{compound.name} replaces an earlier class named {type_name}")
            entry = ClassEntry(
                name=type_name,
                refcounted=is_refcounted_symbol(compound, self.config),
                dependency_only=type_name in dependency_only,
                header=self.resolve_header(type_name),
                symbol=compound,
            )
            entries[type_name] = entry
            bound.pop(type_name, None)
            bound[type_name] = entry

        bindable = [entry for entry in bound.values() if not entry.dependency_only]
        logger.info(f"Registered {len(entries)} classes, {len(bindable)} to generate")
        return ClassRegistry(entries, bindable, self.config)


class MemberSelector:
    """Decides which members of a class can be exposed to script"""

    def __init__(self, registry: ClassRegistry, type_mapper: TypeMapper):
        self.registry = registry
        self.type_mapper = type_mapper
        self.config = registry.config

    @staticmethod
    def class_name(class_symbol: Symbol) -> str:
        return normalize_type(class_symbol.name).name

    def is_scriptable(self, member: Symbol) -> bool:
        if member.is_array():
            return False
        if self.type_mapper.is_bad_type(member.type):
            return False
        for param in member.parameters:
            if self.type_mapper.is_bad_type(param.type) or self.type_mapper.is_bad_type(param.basic_type()):
                return False
        if any("[noscript]" in comment for comment in member.comments()):
            return False
        return "[noscript]" not in member.return_comment

    def is_candidate_function(self, member: Symbol) -> bool:
        return (member.kind == "function"
                and "operator" not in member.name
                and member.visibility == Visibility.PUBLIC)

    def is_static(self, class_symbol: Symbol, member: Symbol) -> bool:
        """Namespace members are free functions and bind as statics"""
        return member.is_static or class_symbol.kind == "namespace"

    def is_constructor(self, class_symbol: Symbol, member: Symbol) -> bool:
        return not self.is_static(class_symbol, member) and member.name == self.class_name(class_symbol)

    def function_rejection(self, class_symbol: Symbol, member: Symbol) -> str | None:
        """Reason a candidate function can not be bound, or None"""
        class_name = self.class_name(class_symbol)
        if not self.is_scriptable(member):
            return "is not scriptable"
        if self.config.is_excluded(class_name, member.name, [p.basic_type() for p in member.parameters]):
            return "is excluded by configuration"

        is_constructor = self.is_constructor(class_symbol, member)
        if is_constructor:
            if self.registry.is_refcounted(class_name):
                return "is a constructor of a reference-counted class"
        else:
            result = self.type_mapper.classify(member.type)
            if not result.supported:
                return f"unsupported return value type {result.name}"
            if result.category == TypeCategory.VALUE_OBJECT and result.descriptor.is_pointer:
                return f"unsupported pointer return value {result.name}"

        for param in member.parameters:
            basic_type = param.basic_type()
            result = self.type_mapper.classify(basic_type)
            if not result.supported or result.category == TypeCategory.VOID:
                return f"unsupported parameter type {result.name}"
            if result.category == TypeCategory.MAP:
                return f"map parameter {result.name} can not be read from script"
            if "*" in basic_type:
                if not (self.registry.is_refcounted(result.name) and result.name in self.registry):
                    return f"unsupported pointer parameter {result.name}"
        return None

    def is_signal(self, member: Symbol) -> bool:
        return member.kind == "variable" and member.type.startswith("Signal")

    def is_candidate_variable(self, member: Symbol) -> bool:
        return (member.kind == "variable"
                and not member.is_static
                and member.visibility == Visibility.PUBLIC
                and not self.is_signal(member))

    def variable_rejection(self, member: Symbol) -> str | None:
        """Reason a candidate variable can not be exposed as a property, or None"""
        if not self.is_scriptable(member):
            return "is not scriptable"
        result = self.type_mapper.classify(member.type)
        if not result.supported:
            return f"unsupported variable type {result.name}"
        return None

    def is_property_variable(self, member: Symbol) -> bool:
        return self.is_candidate_variable(member) and self.variable_rejection(member) is None

    def exposes_properties(self, class_symbol: Symbol) -> bool:
        return self.class_name(class_symbol) not in self.config.skip_property_classes
