"""
XML configuration file parsing for Duktape bindings generator
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from . import constants


@dataclass(frozen=True)
class BadTypeRule:
    """A raw type pattern that makes a member unscriptable"""
    pattern: str
    match: str = "contains"

    def matches(self, type_text: str) -> bool:
        if self.match == "endswith":
            return type_text.endswith(self.pattern)
        return self.pattern in type_text


@dataclass(frozen=True)
class MemberExclusion:
    """A member left unbound, optionally only the overload taking the given parameter types"""
    member: str
    parameters: tuple[str, ...] | None = None

    def matches(self, qualified_name: str, parameter_types=()) -> bool:
        if qualified_name != self.member:
            return False
        if self.parameters is None:
            return True
        parameter_types = list(parameter_types)
        return (len(parameter_types) == len(self.parameters)
                and all(expected in actual for expected, actual in zip(self.parameters, parameter_types)))


def _default_bad_types() -> list[BadTypeRule]:
    return [BadTypeRule(pattern, match) for pattern, match in constants.BAD_TYPE_PATTERNS]


def _default_exclusions() -> list[MemberExclusion]:
    return [MemberExclusion(member, parameters) for member, parameters in constants.EXCLUDED_MEMBERS]


@dataclass
class GeneratorConfig:
    """Configuration for Duktape bindings generation"""
    number_types: list[str] = field(default_factory=lambda: list(constants.NUMBER_TYPES))
    template_substitutions: dict[str, str] = field(default_factory=lambda: dict(constants.TEMPLATE_SUBSTITUTIONS))
    bad_types: list[BadTypeRule] = field(default_factory=_default_bad_types)
    refcounted_base_types: list[str] = field(default_factory=lambda: list(constants.REFCOUNTED_BASE_TYPES))
    refcounted_fragments: list[str] = field(default_factory=lambda: list(constants.REFCOUNTED_NAME_FRAGMENTS))
    refcounted_markers: list[str] = field(default_factory=lambda: list(constants.REFCOUNTED_MARKERS))
    bad_namespaces: list[str] = field(default_factory=lambda: list(constants.BAD_NAMESPACES))
    header_aliases: dict[str, str] = field(default_factory=lambda: dict(constants.HEADER_ALIASES))
    fallback_includes: dict[str, str] = field(default_factory=lambda: dict(constants.FALLBACK_INCLUDES))
    header_prefixes: list[str] = field(default_factory=list)
    excluded_members: list[MemberExclusion] = field(default_factory=_default_exclusions)
    skip_property_classes: list[str] = field(default_factory=lambda: list(constants.SKIP_PROPERTY_CLASSES))
    return_type_qualifications: dict[str, str] = field(
        default_factory=lambda: dict(constants.RETURN_TYPE_QUALIFICATIONS))
    ignored_type_tokens: list[str] = field(default_factory=lambda: list(constants.IGNORED_TYPE_TOKENS))

    def is_excluded(self, class_name: str, member_name: str, parameter_types=()) -> bool:
        qualified_name = f"{class_name}::{member_name}"
        return any(rule.matches(qualified_name, parameter_types) for rule in self.excluded_members)


def _required(element, attribute: str) -> str:
    value = element.get(attribute)
    if not value or not value.strip():
        raise ValueError(f"{element.tag.capitalize()} element missing '{attribute}' attribute")
    return value.strip()


def parse_config_file(config_path) -> GeneratorConfig:
    """Parse XML configuration file and return a GeneratorConfig extending the defaults"""
    try:
        tree = ET.parse(config_path)
        root = tree.getroot()

        if root.tag != "bindings":
            raise ValueError(f"Expected root element 'bindings', got '{root.tag}'")

        config = GeneratorConfig()

        for number_type in root.findall("number_type"):
            config.number_types.append(_required(number_type, "name"))

        for refcounted in root.findall("refcounted"):
            config.refcounted_base_types.append(_required(refcounted, "name"))

        for fragment in root.findall("refcounted_fragment"):
            config.refcounted_fragments.append(_required(fragment, "name"))

        for marker in root.findall("refcounted_marker"):
            config.refcounted_markers.append(_required(marker, "name"))

        for namespace in root.findall("bad_namespace"):
            config.bad_namespaces.append(_required(namespace, "name"))

        # Patterns match raw type text, inner whitespace included
        for bad_type in root.findall("bad_type"):
            pattern = bad_type.get("pattern")
            if not pattern:
                raise ValueError("Bad_type element missing 'pattern' attribute")
            match = bad_type.get("match", "contains").strip().lower()
            if match not in ("contains", "endswith"):
                raise ValueError(f"Invalid bad_type match '{match}'. Must be 'contains' or 'endswith'.")
            config.bad_types.append(BadTypeRule(pattern, match))

        for substitution in root.findall("template_substitution"):
            config.template_substitutions[_required(substitution, "from")] = _required(substitution, "to")

        for alias in root.findall("header_alias"):
            config.header_aliases[_required(alias, "class")] = _required(alias, "header")

        for fallback in root.findall("fallback_include"):
            config.fallback_includes[_required(fallback, "class")] = _required(fallback, "header")

        for prefix in root.findall("header_prefix"):
            config.header_prefixes.append(_required(prefix, "path"))

        for exclude in root.findall("exclude"):
            member = _required(exclude, "member")
            if "::" not in member:
                raise ValueError(f"Exclude member '{member}' must be written as 'Class::member'")
            parameters = exclude.get("params")
            if parameters is not None:
                parameters = tuple(p.strip() for p in parameters.split(",") if p.strip())
            config.excluded_members.append(MemberExclusion(member, parameters))

        for skip in root.findall("skip_properties"):
            config.skip_property_classes.append(_required(skip, "class"))

        return config

    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
