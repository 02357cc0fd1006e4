"""
Symbol graph data model built from Doxygen XML
"""

from dataclasses import dataclass, field
from enum import Enum


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"

    @classmethod
    def from_xml(cls, value: str | None) -> "Visibility":
        """Map a Doxygen prot attribute; package and missing values count as public"""
        if value == "protected":
            return cls.PROTECTED
        if value == "private":
            return cls.PRIVATE
        return cls.PUBLIC


class Virtualness(Enum):
    NONE = "non-virtual"
    VIRTUAL = "virtual"
    PURE = "pure-virtual"

    @classmethod
    def from_xml(cls, value: str | None) -> "Virtualness":
        if value == "virtual":
            return cls.VIRTUAL
        if value == "pure-virtual":
            return cls.PURE
        return cls.NONE


def _strip_const(text: str, leading: bool = True, trailing: bool = True) -> str:
    if leading and text.startswith("const"):
        text = text[5:].strip()
    if trailing and text.endswith("const"):
        text = text[:-5].strip()
    return text


@dataclass
class Parameter:
    """A function or macro parameter"""
    type: str = ""
    name: str = ""
    default_value: str = ""
    comment: str = ""

    @property
    def has_default(self) -> bool:
        return bool(self.default_value)

    def is_pointer(self) -> bool:
        return self.basic_type().endswith("*")

    def is_reference(self) -> bool:
        return self.type.strip().endswith("&")

    def basic_type(self) -> str:
        """
        Type without reference and outer constness.

        "const float3 &" gives "float3", "float3 * const" gives "float3 *".
        """
        t = self.type.strip()
        if t.endswith("&"):
            t = _strip_const(t[:-1].strip(), trailing=False)
        return _strip_const(t, leading=False)

    def basic_type_retain_reference(self) -> str:
        """Type with leading and trailing const removed but any & or * kept"""
        return _strip_const(self.type.strip())


@dataclass
class VariableListEntry:
    """One entry of a Doxygen todo or bug page"""
    item: str
    value: str


@dataclass(eq=False)
class Symbol:
    """A compound or member from the documentation dump"""
    id: str = ""
    kind: str = ""
    name: str = ""
    type: str = ""
    visibility: Visibility = Visibility.PUBLIC
    virtualness: Virtualness = Virtualness.NONE
    is_static: bool = False
    is_const: bool = False
    is_mutable: bool = False
    is_explicit: bool = False
    arg_list: str = ""
    full_definition: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    children: list["Symbol"] = field(default_factory=list)
    parent: "Symbol | None" = field(default=None, repr=False)

    brief_description: str = ""
    detailed_description: str = ""
    inbody_description: str = ""
    return_comment: str = ""
    see_also: str = ""
    author: str = ""
    notes: list[str] = field(default_factory=list)
    todos: list[str] = field(default_factory=list)
    bugs: list[str] = field(default_factory=list)

    source_file: str = ""
    line_start: int = 0
    line_end: int = 0

    value: str = ""
    macro_body: str = ""

    category: str = ""
    index_title: str | None = None
    group_syntax: bool = False

    base_classes: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)

    def add_child(self, child: "Symbol"):
        child.parent = self
        self.children.append(child)

    def comments(self) -> list[str]:
        """Non-empty prose fields in brief, detailed, inbody order"""
        return [c for c in (self.brief_description, self.detailed_description, self.inbody_description) if c]

    def has_comments(self) -> bool:
        return bool(self.comments())

    def find_child_by_name(self, name: str, exclude: "Symbol | None" = None) -> "Symbol | None":
        for child in self.children:
            if child.name == name and child is not exclude:
                return child
        return None

    def find_parameter(self, name: str) -> Parameter | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def is_const_qualified(self) -> bool:
        if self.is_const:
            return True
        if self.kind == "function":
            return self.arg_list.strip().endswith("const")
        if self.kind == "variable":
            return "const" in self.type
        return False

    def is_array(self) -> bool:
        return "[" in self.arg_list

    def namespace(self) -> str:
        idx = self.name.rfind("::")
        return self.name[:idx] if idx > 0 else ""

    def name_without_namespace(self) -> str:
        idx = self.name.rfind("::")
        return self.name[idx + 2:] if idx > 0 else self.name

    def arg_string_without_types(self) -> str:
        return "(" + ",".join(p.name for p in self.parameters) + ")"

    def brief_comment(self) -> str:
        """Brief description, or the first sentence of the detailed one"""
        if self.brief_description:
            return self.brief_description
        if self.detailed_description:
            end = self.detailed_description.find(".")
            return self.detailed_description if end == -1 else self.detailed_description[:end]
        return ""

    def __repr__(self):
        return f"Symbol({self.kind} {self.name!r}, id={self.id!r})"


class OverloadGroups:
    """
    Documentation grouping of same-named members.

    Kept apart from the ownership tree: maps a symbol id to its canonical
    symbol id, and a canonical id to the ids grouped under it.
    """

    def __init__(self):
        self._canonical: dict[str, str] = {}
        self._others: dict[str, list[str]] = {}
        self._symbols: dict[str, Symbol] = {}

    def can_link(self, symbol: Symbol, canonical: Symbol) -> bool:
        if symbol is canonical or symbol.id == canonical.id:
            return False
        if symbol.id in self._canonical or canonical.id in self._canonical:
            return False
        # A symbol that already heads a group can not join another one
        return not self._others.get(symbol.id)

    def link(self, symbol: Symbol, canonical: Symbol) -> bool:
        """Group symbol under canonical; returns False when the link is refused"""
        if not self.can_link(symbol, canonical):
            return False
        self._canonical[symbol.id] = canonical.id
        self._others.setdefault(canonical.id, []).append(symbol.id)
        self._symbols[symbol.id] = symbol
        self._symbols[canonical.id] = canonical
        return True

    def similar_overload(self, symbol: Symbol) -> Symbol | None:
        canonical_id = self._canonical.get(symbol.id)
        return self._symbols.get(canonical_id) if canonical_id else None

    def other_overloads(self, symbol: Symbol) -> list[Symbol]:
        return [self._symbols[i] for i in self._others.get(symbol.id, [])]

    def is_similar_overload(self, symbol: Symbol) -> bool:
        return symbol.id in self._canonical

    def has_other_overloads(self, symbol: Symbol) -> bool:
        return bool(self._others.get(symbol.id))

    def __len__(self):
        return len(self._canonical)
