"""
Type normalization and classification for C++ types seen in documentation
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from .config import GeneratorConfig
from .constants import SCOPED_TYPE_PREFIXES

STRING_TYPES = ("string", "String")
PRIMITIVE_TYPES = ("void", "bool", "Variant") + STRING_TYPES


class UnsupportedTypeError(ValueError):
    """Raised when code is requested for a type outside the supported taxonomy"""


class TypeCategory(Enum):
    VOID = "void"
    BOOL = "bool"
    NUMBER = "number"
    STD_STRING = "string"
    STRING = "String"
    VARIANT = "Variant"
    VECTOR = "vector"
    MAP = "map"
    SHARED_PTR = "shared_ptr"
    VALUE_OBJECT = "value_object"
    WEAK_OBJECT = "weak_object"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TypeDescriptor:
    """A type spelling reduced step by step to a bare name"""
    raw: str
    name: str
    is_const: bool = False
    is_pointer: bool = False
    is_reference: bool = False


NormalizationRule = Callable[[TypeDescriptor], Optional[TypeDescriptor]]


def strip_namespace(name: str, keep_prefixes=SCOPED_TYPE_PREFIXES) -> str:
    """Drop the qualification before the last ::, except for scoped enum types"""
    idx = name.rfind("::")
    if idx > 0 and not any(name.startswith(prefix) for prefix in keep_prefixes):
        return name[idx + 2:]
    return name


def extract_namespace(name: str, keep_prefixes=SCOPED_TYPE_PREFIXES) -> str:
    idx = name.rfind("::")
    if idx > 0 and not any(name.startswith(prefix) for prefix in keep_prefixes):
        return name[:idx]
    return ""


def collapse_template_spacing(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    name = d.name.strip().replace("< ", "<").replace(" >", ">")
    return replace(d, name=name) if name != d.name else None


def strip_leading_const(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    if d.name.startswith("const"):
        return replace(d, name=d.name[5:].strip(), is_const=True)
    return None


def strip_indirection(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    if d.name.endswith("&"):
        return replace(d, name=d.name[:-1].strip(), is_reference=True)
    if d.name.endswith("*"):
        return replace(d, name=d.name[:-1].strip(), is_pointer=True)
    return None


def strip_trailing_const(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    if d.name.endswith("const"):
        return replace(d, name=d.name[:-5].strip())
    return None


def alias_vec(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    return replace(d, name="float3") if d.name == "vec" else None


def _template_to_suffix(d: TypeDescriptor, template: str, suffix: str) -> Optional[TypeDescriptor]:
    prefix = template + "<"
    if d.name.startswith(prefix) and d.name.endswith(">"):
        element = normalize_type(d.name[len(prefix):-1]).name
        return replace(d, name=element + suffix)
    return None


def vector_template(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    return _template_to_suffix(d, "Vector", "Vector")


def shared_ptr_template(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    return _template_to_suffix(d, "SharedPtr", "Ptr")


def strip_type_namespace(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    name = strip_namespace(d.name)
    return replace(d, name=name) if name != d.name else None


def alias_key_types(d: TypeDescriptor) -> Optional[TypeDescriptor]:
    return replace(d, name="int") if d.name in ("Key", "KeySequence") else None


# Applied in order, each at most once
NORMALIZATION_RULES: list[NormalizationRule] = [
    collapse_template_spacing,
    strip_leading_const,
    strip_indirection,
    strip_trailing_const,
    alias_vec,
    vector_template,
    shared_ptr_template,
    strip_type_namespace,
    alias_key_types,
]


def normalize_type(text: str, rules: list[NormalizationRule] = NORMALIZATION_RULES) -> TypeDescriptor:
    """Reduce a raw C++ type spelling to its normalized descriptor"""
    descriptor = TypeDescriptor(raw=text, name=text.strip())
    for rule in rules:
        result = rule(descriptor)
        if result is not None:
            descriptor = result
    return descriptor


@dataclass(frozen=True)
class TypeInfo:
    """Result of classifying a type"""
    category: TypeCategory
    descriptor: TypeDescriptor
    element: str = ""
    element_category: TypeCategory | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def supported(self) -> bool:
        return self.category != TypeCategory.UNSUPPORTED

    @property
    def is_object(self) -> bool:
        return self.category in (TypeCategory.VALUE_OBJECT, TypeCategory.WEAK_OBJECT, TypeCategory.SHARED_PTR)

    @property
    def class_name(self) -> str:
        """Registered class the type refers to, after unwrapping containers"""
        if self.category in (TypeCategory.VALUE_OBJECT, TypeCategory.WEAK_OBJECT):
            return self.descriptor.name
        if self.element_category in (TypeCategory.VALUE_OBJECT, TypeCategory.WEAK_OBJECT):
            return self.element
        return ""


class TypeMapper:
    """Classifies C++ types against the registered classes"""

    def __init__(self, config: GeneratorConfig | None = None, class_names=(), is_refcounted=None):
        """
        Args:
            config: Generator configuration holding the type tables
            class_names: Names of all registered classes
            is_refcounted: Callable deciding the ownership model of a class name
        """
        self.config = config or GeneratorConfig()
        self.class_names = frozenset(class_names)
        self._is_refcounted = is_refcounted or (lambda name: False)
        self.number_types = frozenset(self.config.number_types)
        self._cache: dict[str, TypeInfo] = {}

    @classmethod
    def for_registry(cls, registry) -> "TypeMapper":
        return cls(registry.config, registry.class_names(), registry.is_refcounted)

    def normalize(self, text: str) -> TypeDescriptor:
        return normalize_type(text)

    def is_number(self, name: str) -> bool:
        return name in self.number_types

    def is_pod(self, name: str) -> bool:
        return name in self.number_types or name == "bool"

    def is_registered(self, name: str) -> bool:
        return name in self.class_names

    def is_refcounted(self, name: str) -> bool:
        return self._is_refcounted(name)

    def substitute(self, element: str) -> str:
        return self.config.template_substitutions.get(element, element)

    def is_bad_type(self, text: str) -> bool:
        """Raw spelling matches the deny-list; string types are always allowed"""
        if normalize_type(text).name in STRING_TYPES:
            return False
        stripped = text.strip()
        return any(rule.matches(stripped) for rule in self.config.bad_types)

    def is_supported(self, text: str) -> bool:
        return self.classify(text).supported

    def classify(self, text: str) -> TypeInfo:
        info = self._cache.get(text)
        if info is None:
            info = self._classify(text)
            self._cache[text] = info
        return info

    def _object_category(self, name: str) -> TypeCategory:
        return TypeCategory.WEAK_OBJECT if self.is_refcounted(name) else TypeCategory.VALUE_OBJECT

    def _classify(self, text: str) -> TypeInfo:
        d = normalize_type(text)
        name = d.name

        if self.is_bad_type(text):
            return TypeInfo(TypeCategory.UNSUPPORTED, d)
        # Primitive pointers have no script representation
        if d.is_pointer and (name in PRIMITIVE_TYPES or self.is_number(name)):
            return TypeInfo(TypeCategory.UNSUPPORTED, d)
        if name == "void":
            return TypeInfo(TypeCategory.VOID, d)
        if name == "bool":
            return TypeInfo(TypeCategory.BOOL, d)
        if self.is_number(name):
            return TypeInfo(TypeCategory.NUMBER, d)
        if name == "string":
            return TypeInfo(TypeCategory.STD_STRING, d)
        if name == "String":
            return TypeInfo(TypeCategory.STRING, d)
        if name == "Variant":
            return TypeInfo(TypeCategory.VARIANT, d)

        if name.endswith("Vector"):
            element = self.substitute(name[:-len("Vector")])
            if element in STRING_TYPES:
                category = TypeCategory.STRING if element == "String" else TypeCategory.STD_STRING
                return TypeInfo(TypeCategory.VECTOR, d, element, category)
            if self.is_registered(element):
                return TypeInfo(TypeCategory.VECTOR, d, element, self._object_category(element))
            return TypeInfo(TypeCategory.UNSUPPORTED, d, element)

        if name.endswith("Map"):
            element = self.substitute(name[:-len("Map")])
            if self.is_registered(element):
                return TypeInfo(TypeCategory.MAP, d, element, self._object_category(element))
            return TypeInfo(TypeCategory.UNSUPPORTED, d, element)

        if name.endswith("Ptr"):
            element = self.substitute(name[:-len("Ptr")])
            # Only reference-counted objects are held by SharedPtr
            if self.is_registered(element) and self.is_refcounted(element):
                return TypeInfo(TypeCategory.SHARED_PTR, d, element, TypeCategory.WEAK_OBJECT)
            return TypeInfo(TypeCategory.UNSUPPORTED, d, element)

        if self.is_registered(name):
            return TypeInfo(self._object_category(name), d)

        return TypeInfo(TypeCategory.UNSUPPORTED, d)

    def qualify_declaration(self, text: str) -> str:
        """
        Spell a return type for a local declaration in generated code.

        Namespaces are dropped from every qualified name and configured
        typedefs are re-qualified with their owning class.
        """
        declaration = " ".join(text.split())
        declaration = re.sub(
            r"\b(?:\w+::)+(\w+)",
            lambda m: m.group(0) if self._keeps_scope(m.group(0)) else m.group(1),
            declaration,
        )
        for typedef, qualified in self.config.return_type_qualifications.items():
            declaration = re.sub(rf"(?<![\w:]){re.escape(typedef)}\b", qualified, declaration)
        if declaration == "vec":
            declaration = "float3"
        return declaration

    @staticmethod
    def _keeps_scope(name: str) -> bool:
        return any(name.startswith(prefix) for prefix in SCOPED_TYPE_PREFIXES)
