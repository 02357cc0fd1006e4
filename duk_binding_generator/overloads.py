"""
Overload sets, mangled thunk names and property accessor pairing
"""

import re
from dataclasses import dataclass, field

from . import logger
from .selector import MemberSelector
from .symbols import Parameter, Symbol
from .type_mapper import TypeMapper

VARARGS = "DUK_VARARGS"

_NON_IDENTIFIER = re.compile(r"\W")


def lower_first(name: str) -> str:
    """Script-side property names start with a lower-case letter"""
    return name[:1].lower() + name[1:]


@dataclass
class Overload:
    """One bound native function"""
    function_name: str
    function: Symbol
    parameters: list[Parameter] = field(default_factory=list)
    has_default_parameters: bool = False
    num_significant_parameters: int = 0
    is_property: bool = False
    is_constructor: bool = False
    is_static: bool = False

    @property
    def arg_count(self) -> str:
        return VARARGS if self.has_default_parameters else str(len(self.parameters))


@dataclass
class OverloadSet:
    """Overloads sharing a script-side name"""
    base_name: str
    script_name: str
    is_constructor: bool = False
    overloads: list[Overload] = field(default_factory=list)

    @property
    def needs_selector(self) -> bool:
        return len(self.overloads) >= 2

    @property
    def selector_name(self) -> str:
        return f"{self.base_name}_Selector"

    @property
    def entry_point(self) -> str:
        return self.selector_name if self.needs_selector else self.overloads[0].function_name

    @property
    def entry_arg_count(self) -> str:
        return VARARGS if self.needs_selector else self.overloads[0].arg_count

    def dispatch_order(self) -> list[Overload]:
        """Most significant parameters first; sorted() keeps declaration order for ties"""
        return sorted(self.overloads, key=lambda o: -o.num_significant_parameters)

    def contains(self, function_name: str) -> bool:
        return any(o.function_name == function_name for o in self.overloads)


@dataclass(frozen=True)
class Property:
    """A script property backed by getter and optional setter functions"""
    name: str
    getter: str
    setter: str = ""

    @property
    def read_only(self) -> bool:
        return not self.setter


class OverloadResolver:
    """Groups the bindable functions of a class into overload sets"""

    def __init__(self, member_selector: MemberSelector, type_mapper: TypeMapper):
        self.member_selector = member_selector
        self.type_mapper = type_mapper

    def mangle(self, base_name: str, parameters: list[Parameter]) -> str:
        """Append each parameter's normalized type to base_name"""
        name = base_name
        for param in parameters:
            type_name = self.type_mapper.normalize(param.basic_type()).name
            name += "_" + _NON_IDENTIFIER.sub("_", type_name)
        return name

    def resolve(self, class_symbol: Symbol, static: bool) -> dict[str, OverloadSet]:
        """
        Collect the instance or static overload sets of a class.

        Args:
            class_symbol: Class, struct or namespace compound
            static: Collect static functions instead of instance functions

        Returns:
            Overload sets keyed by base name, in declaration order
        """
        selector = self.member_selector
        class_name = selector.class_name(class_symbol)
        sets: dict[str, OverloadSet] = {}

        for member in class_symbol.children:
            if not selector.is_candidate_function(member):
                continue
            if selector.is_static(class_symbol, member) != static:
                continue

            reason = selector.function_rejection(class_symbol, member)
            if reason:
                logger.info(f"{member.name} in class {class_symbol.name} {reason}")
                continue

            is_constructor = selector.is_constructor(class_symbol, member)
            base_name = f"{class_name}_Ctor" if is_constructor else f"{class_name}_{member.name}"
            if static:
                base_name += "_Static"

            overload_set = sets.setdefault(base_name, OverloadSet(base_name, member.name, is_constructor))
            function_name = self.mangle(base_name, member.parameters)
            # A const variation of an already bound function
            if overload_set.contains(function_name):
                continue

            overload = Overload(
                function_name=function_name,
                function=member,
                parameters=member.parameters,
                num_significant_parameters=len(member.parameters),
                is_property=any("[property]" in c for c in member.comments()),
                is_constructor=is_constructor,
                is_static=static,
            )
            for index, param in enumerate(member.parameters):
                if param.has_default:
                    overload.has_default_parameters = True
                    overload.num_significant_parameters = index
                    break
            overload_set.overloads.append(overload)

        return sets

    def property_accessors(self, class_name: str, sets: dict[str, OverloadSet]) -> list[Property]:
        """Pair [property] getters with their Set or SetIs counterparts"""
        properties = []
        for base_name, overload_set in sets.items():
            for overload in overload_set.overloads:
                if not overload.is_property or overload.num_significant_parameters > 0:
                    continue
                name = base_name[len(class_name) + 1:]
                if name.startswith("Is"):
                    name = name[2:]
                if name.startswith("Get"):
                    name = name[3:]
                if not name:
                    continue

                setter_set = sets.get(f"{class_name}_Set{name}")
                if setter_set is None:
                    setter_set = sets.get(f"{class_name}_SetIs{name}")
                setter = ""
                if setter_set is not None:
                    setter = next((o.function_name for o in setter_set.overloads if len(o.parameters) == 1), "")

                properties.append(Property(lower_first(name), overload.function_name, setter))
        return properties
