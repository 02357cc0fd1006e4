"""
Main Duktape bindings generator orchestration
"""

from pathlib import Path

from . import logger
from .code_generators import CodeGenerator
from .config import GeneratorConfig
from .constants import OUTPUT_SUFFIX
from .doxygen_parser import SymbolGraph
from .header_index import HeaderIndex
from .selector import ClassRegistry, ClassSelector


class DukBindingsGenerator:
    """Main orchestrator for generating Duktape bindings from Doxygen XML"""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.graph: SymbolGraph | None = None
        self.registry: ClassRegistry | None = None

    def load(self, xml_dir) -> SymbolGraph:
        """Read the documentation dump into a fresh symbol graph"""
        self.graph = SymbolGraph(self.config.ignored_type_tokens)
        self.graph.load_directory(xml_dir)
        return self.graph

    def build_registry(self, classes=(), source_root=None) -> ClassRegistry:
        if self.graph is None:
            raise RuntimeError("Documentation must be loaded before building the class registry")
        header_index = HeaderIndex(source_root, self.config.header_prefixes)
        self.registry = ClassSelector(self.config, header_index).build_registry(self.graph, classes)
        return self.registry

    def generate_sources(self) -> dict[str, str]:
        """Generate the bindings unit of every bindable class, keyed by file name"""
        if self.registry is None:
            raise RuntimeError("Class registry must be built before generating bindings")

        code_generator = CodeGenerator(self.registry)
        sources = {}
        for entry in self.registry.bindable_classes():
            logger.info(f"Generating bindings for {entry.name}")
            sources[f"{entry.name}{OUTPUT_SUFFIX}"] = code_generator.generate_class(entry.symbol)
        return sources

    def generate(self, xml_dir, output_dir, source_root=None, classes=()) -> dict[str, str]:
        """Generate Duktape bindings from a Doxygen XML directory

        Args:
            xml_dir: Directory containing the Doxygen XML output
            output_dir: Directory receiving one <Class>Bindings.cpp per class
            source_root: Optional source tree searched for class headers
            classes: Class names to bind; a leading _ marks a dependency-only class
        """
        self.load(xml_dir)
        self.build_registry(classes, source_root)

        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        sources = self.generate_sources()
        for filename, content in sources.items():
            target = output_path / filename
            target.write_text(content)
            logger.info(f"Generated bindings: {target}")

        logger.info(f"Generated {len(sources)} bindings files in {output_path}")
        return sources
