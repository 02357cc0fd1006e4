"""
CLI integration tests
"""

import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "-m", "duk_binding_generator.main", *[str(a) for a in args]],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
    )


@pytest.fixture
def doxygen_dir(temp_dir, doxygen, sample_compounds):
    """A Doxygen XML directory holding the sample classes"""
    xml_dir = temp_dir / "xml"
    xml_dir.mkdir()
    (xml_dir / "index.xml").write_text(doxygen.document(*sample_compounds))
    return xml_dir


def test_cli_without_arguments_prints_usage():
    """Test that missing positional arguments print usage and succeed"""
    result = run_cli()

    assert result.returncode == 0
    assert "usage: duk-binding-generator" in result.stdout


def test_cli_without_output_dir_prints_usage(doxygen_dir):
    """Test that an input directory alone is not enough"""
    result = run_cli(doxygen_dir)

    assert result.returncode == 0
    assert "usage:" in result.stdout


def test_cli_generates_bindings(doxygen_dir, temp_dir):
    """Test a full run with class selection"""
    output_dir = temp_dir / "generated"

    result = run_cli(doxygen_dir, output_dir, temp_dir / "src", "Scene", "_Entity", "_float3")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert [p.name for p in output_dir.iterdir()] == ["SceneBindings.cpp"]
    assert "void Expose_Scene(duk_context* ctx)" in (output_dir / "SceneBindings.cpp").read_text()
    assert "[INFO] Generated bindings:" in result.stdout


def test_cli_quiet(doxygen_dir, temp_dir):
    """Test that quiet mode hides progress messages"""
    result = run_cli("-q", doxygen_dir, temp_dir / "generated")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "[INFO]" not in result.stdout
    assert (temp_dir / "generated" / "VehicleBindings.cpp").exists()


def test_cli_verbose_reports_skipped_members(doxygen_dir, temp_dir):
    """Test that verbose mode shows debug diagnostics"""
    result = run_cli("-v", doxygen_dir, temp_dir / "generated")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "[DEBUG]" in result.stdout
    assert "Scene in class Tundra::Scene is a constructor of a reference-counted class" in result.stdout


def test_cli_missing_input_directory(temp_dir):
    """Test that a missing input directory exits with an error"""
    result = run_cli(temp_dir / "missing", temp_dir / "generated")

    assert result.returncode == 1
    assert "Error: XML input directory not found" in result.stderr


def test_cli_output_path_is_a_file(doxygen_dir, temp_dir):
    """Test that an unwritable output location exits with an error"""
    blocker = temp_dir / "generated"
    blocker.write_text("")

    result = run_cli(doxygen_dir, blocker)

    assert result.returncode == 1
    assert "Error:" in result.stderr


def test_cli_malformed_xml(doxygen_dir, temp_dir):
    """Test that malformed documentation exits with an error"""
    (doxygen_dir / "broken.xml").write_text("<doxygen>")

    result = run_cli(doxygen_dir, temp_dir / "generated")

    assert result.returncode == 1
    assert "broken.xml" in result.stderr


def test_cli_with_config_file(doxygen_dir, temp_dir):
    """Test that configuration extends the built-in tables"""
    config_file = temp_dir / "bindings.xml"
    config_file.write_text("""
<bindings>
    <exclude member="Vehicle::Honk"/>
</bindings>
""")
    output_dir = temp_dir / "generated"

    result = run_cli("-C", config_file, doxygen_dir, output_dir, temp_dir / "src", "Vehicle", "_float3")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    content = (output_dir / "VehicleBindings.cpp").read_text()
    assert "Vehicle_Honk" not in content
    assert "Vehicle_GetSpeed" in content


def test_cli_with_invalid_config_file(doxygen_dir, temp_dir):
    """Test that configuration errors exit with an error"""
    config_file = temp_dir / "bindings.xml"
    config_file.write_text("<bindings><number_type/></bindings>")

    result = run_cli("-C", config_file, doxygen_dir, temp_dir / "generated")

    assert result.returncode == 1
    assert "Error reading config file: Number_type element missing 'name' attribute" in result.stderr


def test_cli_with_missing_config_file(doxygen_dir, temp_dir):
    """Test that a missing configuration file exits with an error"""
    result = run_cli("-C", temp_dir / "missing.xml", doxygen_dir, temp_dir / "generated")

    assert result.returncode == 1
    assert "Configuration file not found" in result.stderr
