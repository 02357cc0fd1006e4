"""
Tests for XML configuration file parsing
"""

import pytest

from duk_binding_generator import constants
from duk_binding_generator.config import BadTypeRule, GeneratorConfig, MemberExclusion, parse_config_file


class TestXMLConfigParsing:
    """Test XML configuration file parsing functionality"""

    def write_config(self, temp_dir, content):
        config_file = temp_dir / "bindings.xml"
        config_file.write_text(content)
        return str(config_file)

    def test_defaults(self):
        """Test that a default configuration holds copies of the built-in tables"""
        config = GeneratorConfig()
        config.number_types.append("u64")

        assert "u64" not in constants.NUMBER_TYPES
        assert "u64" not in GeneratorConfig().number_types
        assert BadTypeRule("std::", "contains") in config.bad_types

    def test_parse_full_config(self, temp_dir):
        """Test that every element extends its table"""
        config = parse_config_file(self.write_config(temp_dir, """
        <bindings>
            <number_type name="u64"/>
            <refcounted name="INetworkSession"/>
            <refcounted_fragment name="Session"/>
            <refcounted_marker name="MANAGED_OBJECT"/>
            <bad_namespace name="Bullet"/>
            <bad_type pattern="btVector3" match="endswith"/>
            <bad_type pattern="QObject"/>
            <template_substitution from="Session" to="INetworkSession"/>
            <header_alias class="RaycastResult" header="IPhysics.h"/>
            <fallback_include class="Scene" header="Scene.h"/>
            <header_prefix path="Core/"/>
            <exclude member="Quat::Normalize"/>
            <exclude member="Quat::Lerp" params="const Quat &amp;, float"/>
            <skip_properties class="Plane"/>
        </bindings>
        """))

        assert config.number_types[-1] == "u64"
        assert config.refcounted_base_types[-1] == "INetworkSession"
        assert config.refcounted_fragments[-1] == "Session"
        assert config.refcounted_markers[-1] == "MANAGED_OBJECT"
        assert config.bad_namespaces[-1] == "Bullet"
        assert config.bad_types[-2:] == [BadTypeRule("btVector3", "endswith"), BadTypeRule("QObject", "contains")]
        assert config.template_substitutions["Session"] == "INetworkSession"
        assert config.header_aliases["RaycastResult"] == "IPhysics.h"
        assert config.fallback_includes["Scene"] == "Scene.h"
        assert config.header_prefixes == ["Core/"]
        assert config.is_excluded("Quat", "Normalize")
        assert config.is_excluded("float4", "Orthogonalize")
        assert config.excluded_members[-1] == MemberExclusion("Quat::Lerp", ("const Quat &", "float"))
        assert config.is_excluded("Quat", "Lerp", ["const Quat &", "float"])
        assert not config.is_excluded("Quat", "Lerp", ["float"])
        assert config.is_excluded("Plane", "Distance", ["float4"])
        assert not config.is_excluded("Plane", "Distance", ["float3"])
        assert "Plane" in config.skip_property_classes

    def test_bad_type_keeps_whitespace(self, temp_dir):
        """Test that bad type patterns are matched exactly as written"""
        config = parse_config_file(self.write_config(temp_dir, '<bindings><bad_type pattern="int *"/></bindings>'))

        rule = config.bad_types[-1]
        assert rule.pattern == "int *"
        assert rule.matches("const int *")
        assert not rule.matches("int")

    def test_empty_config(self, temp_dir):
        """Test that an empty root keeps the defaults"""
        config = parse_config_file(self.write_config(temp_dir, "<bindings/>"))

        assert config == GeneratorConfig()

    def test_wrong_root(self, temp_dir):
        """Test that the root element must be bindings"""
        with pytest.raises(ValueError, match="Expected root element 'bindings', got 'config'"):
            parse_config_file(self.write_config(temp_dir, "<config/>"))

    def test_missing_attribute(self, temp_dir):
        """Test that required attributes are reported by element"""
        with pytest.raises(ValueError, match="Header_alias element missing 'header' attribute"):
            parse_config_file(self.write_config(temp_dir, '<bindings><header_alias class="Foo"/></bindings>'))

    def test_bad_type_without_pattern(self, temp_dir):
        """Test that bad_type needs a pattern"""
        with pytest.raises(ValueError, match="Bad_type element missing 'pattern' attribute"):
            parse_config_file(self.write_config(temp_dir, "<bindings><bad_type/></bindings>"))

    def test_invalid_match_mode(self, temp_dir):
        """Test that only contains and endswith are accepted"""
        with pytest.raises(ValueError, match="Invalid bad_type match 'startswith'"):
            parse_config_file(self.write_config(
                temp_dir, '<bindings><bad_type pattern="Foo" match="startswith"/></bindings>'))

    def test_exclude_needs_class(self, temp_dir):
        """Test that excluded members are class-qualified"""
        with pytest.raises(ValueError, match="must be written as 'Class::member'"):
            parse_config_file(self.write_config(temp_dir, '<bindings><exclude member="Normalize"/></bindings>'))

    def test_invalid_xml(self, temp_dir):
        """Test that malformed XML is reported"""
        with pytest.raises(ValueError, match="XML parsing error"):
            parse_config_file(self.write_config(temp_dir, "<bindings>"))

    def test_missing_file(self, temp_dir):
        """Test that a missing file is reported"""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            parse_config_file(str(temp_dir / "missing.xml"))
