"""
Doxygen XML parsing into a cross-referenced symbol graph
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from . import logger
from .constants import IGNORED_TYPE_TOKENS
from .directives import process_directives
from .overload_grouping import group_similar_overloads
from .symbols import OverloadGroups, Parameter, Symbol, VariableListEntry, Virtualness, Visibility

DESCRIPTION_TAGS = ("briefdescription", "detaileddescription", "inbodydescription")

_OCTAL_LITERAL = re.compile(r"[+-]?0[0-7]+")
_INTEGER_SUFFIX = re.compile(r"[uUlL]+$")


class DoxygenParseError(RuntimeError):
    """Raised when a documentation XML file can not be parsed"""


def _text(element) -> str:
    """All text below element with whitespace runs collapsed"""
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def _description(element) -> str:
    """Flatten a description element, one line per paragraph"""
    if element is None:
        return ""
    paragraphs = element.findall("para")
    if not paragraphs:
        return _text(element)
    return "\n".join(t for t in (_text(p) for p in paragraphs) if t)


def _int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_int_literal(text: str) -> int | None:
    """Parse a C++ integer literal, returning None for anything else"""
    literal = _INTEGER_SUFFIX.sub("", text.strip())
    if _OCTAL_LITERAL.fullmatch(literal):
        return int(literal, 8)
    try:
        return int(literal, 0)
    except ValueError:
        return None


def _remove(parent, node):
    """Remove node from parent, keeping the text that followed it"""
    if node.tail:
        index = list(parent).index(node)
        if index > 0:
            previous = parent[index - 1]
            previous.tail = (previous.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    parent.remove(node)


class SymbolGraph:
    """Symbols read from a Doxygen XML dump, indexed by id and by name"""

    def __init__(self, ignored_type_tokens: list[str] | None = None):
        self.symbols: dict[str, Symbol] = {}
        self.symbols_by_name: dict[str, Symbol] = {}
        self.enums_by_name: dict[str, Symbol] = {}
        self.compounds: list[Symbol] = []
        self.overload_groups = OverloadGroups()
        self.todos: list[VariableListEntry] = []
        self.bugs: list[VariableListEntry] = []
        self.ignored_type_tokens = list(IGNORED_TYPE_TOKENS if ignored_type_tokens is None else ignored_type_tokens)

    def load_directory(self, directory, recursive: bool = True):
        """
        Load every XML file below directory, then group similar overloads.

        Args:
            directory: Directory holding the Doxygen XML output
            recursive: Also descend into subdirectories
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"XML input directory not found: {directory}")

        files = sorted(directory.rglob("*.xml") if recursive else directory.glob("*.xml"))
        logger.info(f"Parsing Doxygen XML from {directory} ({len(files)} files)")
        for path in files:
            self.load_file(path)

        self.group_overloads()
        logger.info(f"Parsed {len(self.symbols)} symbols from {len(self.compounds)} compounds")

    def load_file(self, path):
        path = Path(path)
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise DoxygenParseError(f"Failed to parse {path}: {e}") from e
        self._parse_root(root)

    def load_string(self, text: str):
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise DoxygenParseError(f"Failed to parse XML text: {e}") from e
        self._parse_root(root)

    def group_overloads(self) -> int:
        linked = group_similar_overloads(self.compounds, self.overload_groups)
        logger.debug(f"Grouped {linked} undocumented overloads")
        return linked

    def find(self, name: str) -> Symbol | None:
        return self.symbols_by_name.get(name)

    def _parse_root(self, root):
        compounddefs = [root] if root.tag == "compounddef" else root.findall("compounddef")
        for compounddef in compounddefs:
            self._parse_compound(compounddef)

    def _register(self, symbol: Symbol):
        if symbol.id in self.symbols:
            logger.debug(f"Duplicate symbol id {symbol.id}, keeping the latest definition")
        self.symbols[symbol.id] = symbol

    def _parse_compound(self, element):
        kind = element.get("kind", "")
        if kind == "page":
            self._parse_page(element)
            return

        compound = Symbol(
            id=element.get("id", ""),
            kind=kind,
            name=_text(element.find("compoundname")),
            visibility=Visibility.from_xml(element.get("prot")),
        )
        if not compound.id:
            compound.id = f"{kind}_{compound.name}"

        self._parse_documentation(element, compound)
        self._parse_location(element, compound)
        compound.base_classes = [_text(base) for base in element.findall("basecompoundref")]
        if kind == "file":
            compound.includes = [_text(include) for include in element.findall("includes")]

        self._register(compound)
        self.symbols_by_name[compound.name] = compound
        self.compounds.append(compound)

        for sectiondef in element.findall("sectiondef"):
            for memberdef in sectiondef.findall("memberdef"):
                member = self._parse_member(memberdef, compound)
                if member is not None:
                    compound.add_child(member)
                    self._register(member)

        # All siblings are parsed before directives run
        process_directives(compound, self.overload_groups)
        for child in compound.children:
            process_directives(child, self.overload_groups)

    def _parse_member(self, element, parent: Symbol) -> Symbol | None:
        name = _text(element.find("name"))
        # Doxygen names unnamed unions and structs with a leading @
        if name.startswith("@"):
            return None

        member = Symbol(
            id=element.get("id", "") or f"{parent.id}_{len(parent.children)}",
            kind=element.get("kind", ""),
            name=name,
            visibility=Visibility.from_xml(element.get("prot")),
            virtualness=Virtualness.from_xml(element.get("virt")),
            is_static=element.get("static") == "yes",
            is_const=element.get("const") == "yes",
            is_mutable=element.get("mutable") == "yes",
            is_explicit=element.get("explicit") == "yes",
            full_definition=_text(element.find("definition")),
            arg_list=_text(element.find("argsstring")),
        )

        member.type = _text(element.find("type"))
        if member.kind == "function":
            member.type = self._remove_type_tokens(member.type)

        for param in element.findall("param"):
            if member.kind == "define":
                member.parameters.append(Parameter(name=_text(param.find("defname"))))
            else:
                member.parameters.append(Parameter(
                    type=_text(param.find("type")),
                    name=_text(param.find("declname")),
                    default_value=_text(param.find("defval")),
                ))

        if member.kind == "define":
            initializer = element.find("initializer")
            member.macro_body = "".join(initializer.itertext()).strip() if initializer is not None else ""
            if member.parameters:
                member.arg_list = member.arg_string_without_types()

        self._parse_documentation(element, member)
        self._parse_location(element, member)

        if member.kind == "enum":
            self._parse_enum_values(element, member)
            self.enums_by_name[member.name] = member

        return member

    def _parse_enum_values(self, element, enum: Symbol):
        counter = -1
        for value_element in element.findall("enumvalue"):
            value = Symbol(
                id=value_element.get("id", "") or f"{enum.id}_{len(enum.children)}",
                kind="enumvalue",
                name=_text(value_element.find("name")),
                visibility=Visibility.from_xml(value_element.get("prot")),
            )
            initializer = _text(value_element.find("initializer"))
            if initializer.startswith("="):
                initializer = initializer[1:].strip()

            if not initializer:
                counter += 1
                value.value = str(counter)
            else:
                value.value = initializer
                parsed = parse_int_literal(initializer)
                if parsed is not None:
                    counter = parsed

            self._parse_documentation(value_element, value)
            enum.add_child(value)
            self._register(value)

    def _remove_type_tokens(self, type_text: str) -> str:
        for token in self.ignored_type_tokens:
            type_text = re.sub(rf"\b{re.escape(token)}\b", "", type_text)
        return " ".join(type_text.split())

    def _parse_location(self, element, symbol: Symbol):
        location = element.find("location")
        if location is None:
            return
        symbol.source_file = location.get("bodyfile") or location.get("file", "")
        symbol.line_start = _int(location.get("bodystart") or location.get("line"))
        symbol.line_end = _int(location.get("bodyend"), -1)
        if symbol.line_end == -1:
            symbol.line_end = symbol.line_start

    def _parse_documentation(self, element, symbol: Symbol):
        """Capture structured sections, then flatten the remaining prose"""
        descriptions = [element.find(tag) for tag in DESCRIPTION_TAGS]
        for description in descriptions:
            if description is not None:
                self._extract_sections(description, symbol)

        brief, detailed, inbody = (_description(d) for d in descriptions)
        symbol.brief_description = brief
        symbol.detailed_description = detailed
        symbol.inbody_description = inbody

    def _extract_sections(self, description, symbol: Symbol):
        parents = {child: parent for parent in description.iter() for child in parent}
        removed = set()

        for node in list(description.iter()):
            if self._has_removed_ancestor(node, parents, removed):
                continue
            if not self._capture_section(node, symbol):
                continue
            _remove(parents[node], node)
            removed.add(node)

    @staticmethod
    def _has_removed_ancestor(node, parents, removed) -> bool:
        while node in parents:
            node = parents[node]
            if node in removed:
                return True
        return False

    @staticmethod
    def _capture_section(node, symbol: Symbol) -> bool:
        """Store a structured section on symbol; returns True if node was consumed"""
        if node.tag == "parameterlist" and node.get("kind") == "param":
            for item in node.findall("parameteritem"):
                comment = _description(item.find("parameterdescription"))
                for name in item.findall("parameternamelist/parametername"):
                    param = symbol.find_parameter(_text(name))
                    if param is not None:
                        param.comment = comment
            return True

        if node.tag == "xrefsect":
            title = _text(node.find("xreftitle"))
            text = _description(node.find("xrefdescription"))
            if title == "Todo":
                symbol.todos.append(text)
                return True
            if title == "Bug":
                symbol.bugs.append(text)
                return True
            return False

        if node.tag == "simplesect":
            kind = node.get("kind")
            if kind == "note":
                symbol.notes.append(_description(node))
            elif kind == "return":
                symbol.return_comment = symbol.return_comment or _description(node)
            elif kind == "see":
                symbol.see_also = symbol.see_also or _description(node)
            elif kind == "author":
                symbol.author = symbol.author or _description(node)
            else:
                return False
            return True

        return False

    def _parse_page(self, element):
        page_id = element.get("id", "")
        if page_id == "todo":
            target = self.todos
        elif page_id == "bug":
            target = self.bugs
        else:
            logger.debug(f"Skipping documentation page {page_id}")
            return

        for variablelist in element.iter("variablelist"):
            entries = list(variablelist)
            for index, entry in enumerate(entries):
                if entry.tag != "varlistentry":
                    continue
                value = ""
                if index + 1 < len(entries) and entries[index + 1].tag == "listitem":
                    value = _description(entries[index + 1])
                target.append(VariableListEntry(_text(entry), value))
