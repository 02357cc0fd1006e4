"""
Pytest configuration and fixtures
"""

import itertools
import tempfile
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

from duk_binding_generator.doxygen_parser import SymbolGraph
from duk_binding_generator.header_index import HeaderIndex
from duk_binding_generator.selector import ClassSelector


class DoxygenXml:
    """Builds Doxygen-shaped XML snippets for tests"""

    _ids = itertools.count(1)

    @classmethod
    def next_id(cls, prefix: str) -> str:
        return f"{prefix}_{next(cls._ids)}"

    @staticmethod
    def param(type_: str, name: str = "", default: str | None = None) -> str:
        xml = f"<param><type>{escape(type_)}</type>"
        if name:
            xml += f"<declname>{name}</declname>"
        if default is not None:
            xml += f"<defval>{escape(default)}</defval>"
        return xml + "</param>"

    @staticmethod
    def description(tag: str, text: str) -> str:
        if not text:
            return f"<{tag}/>"
        if text.lstrip().startswith("<"):
            return f"<{tag}>{text}</{tag}>"
        return f"<{tag}><para>{escape(text)}</para></{tag}>"

    @classmethod
    def function(cls, name: str, type_: str = "void", params=(), *, id=None, static=False, const=False,
                 prot="public", virt="non-virtual", brief="", detailed="", argsstring=None) -> str:
        params = list(params)
        if argsstring is None:
            argsstring = "()" + (" const" if const else "")
        return (
            f'<memberdef kind="function" id="{id or cls.next_id("function")}" prot="{prot}" '
            f'static="{"yes" if static else "no"}" const="{"yes" if const else "no"}" '
            f'explicit="no" inline="no" virt="{virt}">'
            f"<type>{escape(type_)}</type>"
            f"<definition>{escape(type_)} {name}</definition>"
            f"<argsstring>{escape(argsstring)}</argsstring>"
            f"<name>{name}</name>"
            + "".join(params)
            + cls.description("briefdescription", brief)
            + cls.description("detaileddescription", detailed)
            + "<inbodydescription/>"
            + '<location file="Test.h" line="10" column="1"/>'
            + "</memberdef>"
        )

    @classmethod
    def variable(cls, name: str, type_: str, *, id=None, static=False, prot="public", brief="") -> str:
        return (
            f'<memberdef kind="variable" id="{id or cls.next_id("variable")}" prot="{prot}" '
            f'static="{"yes" if static else "no"}" mutable="no">'
            f"<type>{escape(type_)}</type>"
            f"<definition>{escape(type_)} {name}</definition>"
            f"<argsstring></argsstring>"
            f"<name>{name}</name>"
            + cls.description("briefdescription", brief)
            + "<detaileddescription/><inbodydescription/>"
            + '<location file="Test.h" line="20" column="1"/>'
            + "</memberdef>"
        )

    @classmethod
    def enum(cls, name: str, values, *, id=None) -> str:
        enum_id = id or cls.next_id("enum")
        xml = f'<memberdef kind="enum" id="{enum_id}" prot="public" static="no"><name>{name}</name>'
        for index, (value_name, initializer) in enumerate(values):
            xml += f'<enumvalue id="{enum_id}_{index}" prot="public"><name>{value_name}</name>'
            if initializer is not None:
                xml += f"<initializer>= {escape(initializer)}</initializer>"
            xml += "<briefdescription/><detaileddescription/></enumvalue>"
        return xml + "<briefdescription/><detaileddescription/><inbodydescription/></memberdef>"

    @classmethod
    def compound(cls, name: str, members=(), *, kind="class", id=None, brief="", detailed="",
                 prot="public") -> str:
        return (
            f'<compounddef id="{id or cls.next_id(kind)}" kind="{kind}" prot="{prot}">'
            f"<compoundname>{name}</compoundname>"
            + (f'<sectiondef kind="public-func">{"".join(members)}</sectiondef>' if members else "")
            + cls.description("briefdescription", brief)
            + cls.description("detaileddescription", detailed)
            + '<location file="Test.h" line="1" column="1" bodyfile="Test.h" bodystart="1" bodyend="-1"/>'
            + "</compounddef>"
        )

    @staticmethod
    def document(*compounds) -> str:
        return ('<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
                '<doxygen version="1.9.1">' + "".join(compounds) + "</doxygen>\n")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def doxygen():
    """Builder for Doxygen XML snippets"""
    return DoxygenXml


@pytest.fixture
def make_graph():
    """Build a SymbolGraph from compound snippets, grouping overloads like a directory load"""
    def _make(*compounds):
        graph = SymbolGraph()
        graph.load_string(DoxygenXml.document(*compounds))
        graph.group_overloads()
        return graph
    return _make


@pytest.fixture
def make_registry(make_graph):
    """Build a class registry straight from compound snippets"""
    def _make(*compounds, classes=(), source_root=None, config=None):
        graph = make_graph(*compounds)
        prefixes = config.header_prefixes if config is not None else None
        selector = ClassSelector(config, HeaderIndex(source_root, prefixes))
        return selector.build_registry(graph, classes)
    return _make


@pytest.fixture
def xml_dir(tmp_path):
    """Empty directory for Doxygen XML files"""
    path = tmp_path / "xml"
    path.mkdir()
    return path


@pytest.fixture
def write_xml(xml_dir):
    """Write compounds into an XML file under xml_dir"""
    def _write(filename, *compounds):
        path = xml_dir / filename
        path.write_text(DoxygenXml.document(*compounds))
        return path
    return _write


@pytest.fixture
def sample_compounds(doxygen):
    """A small framework: a value vector class, a value class with overloads and two refcounted classes"""
    d = doxygen
    float3 = d.compound("Tundra::float3", [
        d.function("float3", "", [d.param("float", "x"), d.param("float", "y"), d.param("float", "z")],
                   argsstring="(float x, float y, float z)"),
        d.function("Length", "float", const=True, brief="Returns the length."),
        d.variable("x", "float"),
        d.variable("y", "float"),
        d.variable("z", "float"),
    ], kind="struct", id="structTundra_1_1float3")
    vehicle = d.compound("Tundra::Vehicle", [
        d.function("Vehicle", ""),
        d.function("Vehicle", "", [d.param("float", "speed")], argsstring="(float speed)"),
        d.function("GetSpeed", "float", const=True, brief="[property] Returns the speed."),
        d.function("SetSpeed", "void", [d.param("float", "speed")], argsstring="(float speed)"),
        d.function("Honk", "void"),
        d.function("Honk", "void", [d.param("int", "times"), d.param("bool", "loud", "false")],
                   argsstring="(int times, bool loud=false)", brief="Honks several times."),
        d.function("Position", "const float3 &", const=True),
        d.function("Create", "Vehicle", static=True),
        d.variable("position", "float3"),
        d.variable("maxSpeed", "const float"),
        d.enum("Gear", [("Low", "1"), ("High", None)]),
    ], id="classTundra_1_1Vehicle")
    entity = d.compound("Tundra::Entity", [
        d.function("Name", "const String &", const=True),
        d.function("SetName", "void", [d.param("const String &", "name")], argsstring="(const String &name)"),
    ], id="classTundra_1_1Entity")
    scene = d.compound("Tundra::Scene", [
        d.function("URHO3D_OBJECT", "", [d.param("Scene"), d.param("Object")]),
        d.function("Scene", ""),
        d.function("EntityById", "EntityPtr", [d.param("entity_id_t", "id")], const=True,
                   argsstring="(entity_id_t id) const"),
        d.function("Entities", "EntityMap &"),
        d.function("Spawn", "Entity *", [d.param("const float3 &", "pos")],
                   argsstring="(const float3 &pos)"),
        d.variable("EntityCreated", "Signal2< Entity *ARG(entity), AttributeChange::Type ARG(change)>"),
    ], id="classTundra_1_1Scene")
    return [float3, vehicle, entity, scene]
