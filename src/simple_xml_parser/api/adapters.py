"""Integration adapters for foreign XML tree libraries.

Adapters convert a parsed document to another library's element tree and back.
Conversion never raises: failures are reported in ``ConversionResult``.

Mapping to element trees:
    * elements keep their tag, active attributes and text;
    * comments and processing instructions become the library's comment and
      PI nodes;
    * CDATA payloads are merged into the surrounding text;
    * doctypes and user tags have no counterpart and are dropped with a
      warning.

BeautifulSoup receives the compact serialization of the document. pandas
receives one row per element (``tag``, ``text``, ``path``, ``depth`` and one
``attr_<name>`` column per attribute name); frames with ``tag`` and ``path``
columns convert back into the same tree.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type, Union

from simple_xml_parser.dom.builder import ParseResult
from simple_xml_parser.shared.config import PrintConfig
from simple_xml_parser.shared.logging import get_logger
from simple_xml_parser.shared.result import DiagnosticEntry, DiagnosticSeverity
from simple_xml_parser.tree.kinds import TagKind, kind_name
from simple_xml_parser.tree.model import XMLDocument, XMLNode
from simple_xml_parser.tree.printer import XMLPrinter

SourceDocument = Union[ParseResult, XMLDocument]

# Column prefix for attribute values in data frames
ATTRIBUTE_PREFIX = "attr_"
TABLE_ROOT_TAG = "data"
TABLE_ROW_TAG = "row"

_COMPACT = PrintConfig(tag_separator="", child_separator="")


class AdapterType(Enum):
    """Types of integration adapters."""

    XML_LIBRARY = auto()     # Element tree libraries (ElementTree, lxml, BeautifulSoup)
    DATA_FRAME = auto()      # Tabular libraries (pandas)


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    version: str
    adapter_type: AdapterType
    target_library: str
    description: str
    supported_versions: List[str] = field(default_factory=list)


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters.

    Subclasses provide bidirectional conversion between parsed documents and
    a target representation.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def to_target(self, source: SourceDocument) -> ConversionResult:
        """Convert a parse result or document to the target format."""

    @abstractmethod
    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert target data to a ``ParseResult``."""

    def _create_error_result(
        self,
        error_message: str,
        original_data: Any,
        conversion_time_ms: float = 0.0
    ) -> ConversionResult:
        """Create a ConversionResult for error conditions."""
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=conversion_time_ms,
            errors=[error_message],
            diagnostics=[
                DiagnosticEntry(
                    severity=DiagnosticSeverity.ERROR,
                    message=error_message,
                    component=self.__class__.__name__,
                    correlation_id=self.correlation_id
                )
            ]
        )

    def _check_source(
        self, source: SourceDocument, start_time: float
    ) -> Optional[ConversionResult]:
        """Error result when ``source`` holds no convertible document."""
        if isinstance(source, ParseResult) and not source.success:
            return self._create_error_result(
                "ParseResult is not successful", source, _elapsed(start_time)
            )
        document = source.document if isinstance(source, ParseResult) else source
        if document.root is None:
            return self._create_error_result(
                "Document has no root element", source, _elapsed(start_time)
            )
        return None

    def _parse_serialized(
        self,
        xml_string: str,
        target_data: Any,
        start_time: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ConversionResult:
        """Parse text produced by the target library into a ``ParseResult``."""
        from simple_xml_parser.api.parser import XMLParser

        parse_result = XMLParser().parse_string(xml_string)
        if not parse_result.success:
            result = self._create_error_result(
                f"Serialized data could not be parsed: {parse_result.error}",
                target_data,
                _elapsed(start_time),
            )
            result.converted_data = parse_result
            return result

        return ConversionResult(
            success=True,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=_elapsed(start_time),
            metadata={**(metadata or {}), "xml_length": len(xml_string)},
        )


class _ElementTreeLikeAdapter(IntegrationAdapter):
    """Shared conversion for libraries exposing the ElementTree API."""

    def _etree(self) -> Any:
        raise NotImplementedError

    def _serialize(self, etree: Any, target_data: Any) -> str:
        return etree.tostring(target_data, encoding="unicode")

    def _attach_pre_root(self, etree: Any, root: Any, nodes: List[XMLNode]) -> None:
        """Attach top-level nodes preceding the root, where supported."""

    def is_available(self) -> bool:
        try:
            self._etree()
        except ImportError:
            return False
        return True

    def to_target(self, source: SourceDocument) -> ConversionResult:
        start_time = time.time()
        failure = self._check_source(source, start_time)
        if failure is not None:
            return failure
        document = source.document if isinstance(source, ParseResult) else source

        warnings: List[str] = []
        try:
            etree = self._etree()
            target = self._convert_node(document.root, etree, warnings)
            self._attach_pre_root(etree, target, document.pre_root)
        except ImportError as e:
            return self._create_error_result(
                f"{self.metadata.target_library} is not available: {e}",
                source,
                _elapsed(start_time),
            )
        except (ValueError, TypeError) as e:
            self._logger.warning(
                "Conversion failed", extra={"error": str(e)}
            )
            return self._create_error_result(
                f"Failed to convert to {self.metadata.target_library}: {e}",
                source,
                _elapsed(start_time),
            )

        for message in warnings:
            self._logger.warning(message)
        return ConversionResult(
            success=True,
            converted_data=target,
            original_data=source,
            conversion_time_ms=_elapsed(start_time),
            warnings=warnings,
            metadata={"element_count": sum(1 for _ in target.iter())},
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        start_time = time.time()
        if hasattr(target_data, "getroot"):
            target_data = target_data.getroot()
        if not hasattr(target_data, "tag"):
            return self._create_error_result(
                f"Target data is not a valid {self.metadata.target_library} element",
                target_data,
                _elapsed(start_time),
            )

        try:
            xml_string = self._serialize(self._etree(), target_data)
        except ImportError as e:
            return self._create_error_result(
                f"{self.metadata.target_library} is not available: {e}",
                target_data,
                _elapsed(start_time),
            )

        return self._parse_serialized(
            xml_string, target_data, start_time, {"original_tag": target_data.tag}
        )

    def _convert_node(self, node: XMLNode, etree: Any, warnings: List[str]) -> Any:
        element = etree.Element(node.tag)
        for attribute in node.active_attributes():
            element.set(attribute.name, attribute.value)
        if node.text:
            element.text = node.text

        last = None
        for child in node.active_children():
            if child.kind == TagKind.CDATA:
                if last is None:
                    element.text = (element.text or "") + child.tag
                else:
                    last.tail = (last.tail or "") + child.tag
                continue

            converted = self._convert_child(child, etree, warnings)
            if converted is not None:
                element.append(converted)
                last = converted
        return element

    def _convert_child(self, node: XMLNode, etree: Any, warnings: List[str]) -> Any:
        if node.is_element:
            return self._convert_node(node, etree, warnings)
        if node.kind == TagKind.COMMENT:
            return etree.Comment(node.tag)
        if node.kind == TagKind.INSTRUCTION:
            target, _, text = node.tag.strip().partition(" ")
            return etree.ProcessingInstruction(target, text.strip() or None)
        warnings.append(f"Dropped {kind_name(node.kind)} node with no equivalent")
        return None


class ElementTreeAdapter(_ElementTreeLikeAdapter):
    """Adapter for bidirectional conversion with xml.etree.ElementTree."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="elementtree",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="xml.etree.ElementTree",
            supported_versions=["3.8+"],
            description="Bidirectional conversion between documents and ElementTree",
        )

    def _etree(self) -> Any:
        import xml.etree.ElementTree as ET
        return ET


class LxmlAdapter(_ElementTreeLikeAdapter):
    """Adapter for bidirectional conversion with lxml.etree."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="lxml",
            supported_versions=["4.9+", "5.x"],
            description="Bidirectional conversion between documents and lxml trees",
        )

    def _etree(self) -> Any:
        from lxml import etree
        return etree

    def _serialize(self, etree: Any, target_data: Any) -> str:
        # Serialize the whole tree so that pre-root comments are kept
        return etree.tostring(target_data.getroottree(), encoding="unicode")

    def _attach_pre_root(self, etree: Any, root: Any, nodes: List[XMLNode]) -> None:
        for node in nodes:
            if not node.active:
                continue
            if node.kind == TagKind.COMMENT:
                root.addprevious(etree.Comment(node.tag))
            elif node.kind == TagKind.INSTRUCTION:
                target, _, text = node.tag.strip().partition(" ")
                # The XML declaration is not a processing instruction for lxml
                if target.lower() != "xml":
                    root.addprevious(
                        etree.ProcessingInstruction(target, text.strip() or None)
                    )


class BeautifulSoupAdapter(IntegrationAdapter):
    """Adapter for bidirectional conversion with BeautifulSoup.

    The soup is built with the ``xml`` tree builder, which needs lxml.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="beautifulsoup",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="beautifulsoup4",
            supported_versions=["4.9+"],
            description="Bidirectional conversion between documents and BeautifulSoup"
        )

    def is_available(self) -> bool:
        try:
            from bs4 import BeautifulSoup  # noqa: F401
        except ImportError:
            return False
        return True

    def to_target(self, source: SourceDocument) -> ConversionResult:
        start_time = time.time()
        failure = self._check_source(source, start_time)
        if failure is not None:
            return failure
        document = source.document if isinstance(source, ParseResult) else source

        try:
            from bs4 import BeautifulSoup

            xml_string = XMLPrinter(_COMPACT).document_to_string(document)
            soup = BeautifulSoup(xml_string, "xml")
        except ImportError as e:
            return self._create_error_result(
                f"beautifulsoup4 is not available: {e}", source, _elapsed(start_time)
            )
        except ValueError as e:
            # Includes bs4.FeatureNotFound when no XML tree builder is installed
            return self._create_error_result(
                f"Failed to convert to BeautifulSoup: {e}", source, _elapsed(start_time)
            )

        return ConversionResult(
            success=True,
            converted_data=soup,
            original_data=source,
            conversion_time_ms=_elapsed(start_time),
            metadata={"parser_name": "xml", "xml_length": len(xml_string)},
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        start_time = time.time()
        if not hasattr(target_data, "prettify"):
            return self._create_error_result(
                "Target data is not a valid BeautifulSoup object",
                target_data,
                _elapsed(start_time),
            )
        return self._parse_serialized(str(target_data), target_data, start_time)


class PandasAdapter(IntegrationAdapter):
    """Adapter for bidirectional conversion with pandas DataFrame.

    Each active element becomes one row in document order. ``path`` is
    ``/root/child[i]/...`` where ``i`` counts element siblings.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="pandas",
            version="1.0.0",
            adapter_type=AdapterType.DATA_FRAME,
            target_library="pandas",
            supported_versions=["1.3+", "2.x"],
            description="Bidirectional conversion between documents and pandas DataFrame"
        )

    def is_available(self) -> bool:
        try:
            import pandas  # noqa: F401
        except ImportError:
            return False
        return True

    def to_target(self, source: SourceDocument) -> ConversionResult:
        start_time = time.time()
        failure = self._check_source(source, start_time)
        if failure is not None:
            return failure
        document = source.document if isinstance(source, ParseResult) else source

        try:
            import pandas as pd
        except ImportError as e:
            return self._create_error_result(
                f"pandas is not available: {e}", source, _elapsed(start_time)
            )

        df = pd.DataFrame(_element_rows(document.root))
        return ConversionResult(
            success=True,
            converted_data=df,
            original_data=source,
            conversion_time_ms=_elapsed(start_time),
            metadata={
                "row_count": len(df),
                "column_count": len(df.columns),
                "columns": list(df.columns),
            },
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        start_time = time.time()
        try:
            import pandas as pd
        except ImportError as e:
            return self._create_error_result(
                f"pandas is not available: {e}", target_data, _elapsed(start_time)
            )

        if not isinstance(target_data, pd.DataFrame):
            return self._create_error_result(
                "Target data is not a pandas DataFrame",
                target_data,
                _elapsed(start_time),
            )

        try:
            if {"tag", "path"}.issubset(target_data.columns):
                root = self._tree_from_rows(target_data, pd)
            else:
                root = self._tree_from_table(target_data, pd)
        except ValueError as e:
            return self._create_error_result(
                f"Failed to convert from pandas DataFrame: {e}",
                target_data,
                _elapsed(start_time),
            )

        document = XMLDocument()
        document.add_node(root)
        parse_result = ParseResult(document=document, correlation_id=self.correlation_id)
        parse_result.statistics.nodes_created = sum(1 for _ in root.iter())
        return ConversionResult(
            success=True,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=_elapsed(start_time),
            metadata={"row_count": len(target_data)},
        )

    def _tree_from_rows(self, frame: Any, pd: Any) -> XMLNode:
        """Rebuild a tree from rows produced by ``to_target``."""
        nodes: Dict[str, XMLNode] = {}
        root: Optional[XMLNode] = None
        for _, row in frame.iterrows():
            path = str(row["path"])
            node = XMLNode(tag=str(row["tag"]))
            text = row.get("text")
            if text is not None and pd.notna(text) and text != "":
                node.text = str(text)
            for column, value in row.items():
                column = str(column)
                if column.startswith(ATTRIBUTE_PREFIX) and pd.notna(value):
                    node.set_attribute(column[len(ATTRIBUTE_PREFIX):], str(value))

            parent_path = path.rsplit("/", 1)[0]
            if not parent_path:
                if root is not None:
                    raise ValueError(f"More than one root row: {path}")
                root = node
            else:
                father = nodes.get(parent_path)
                if father is None:
                    raise ValueError(f"Row {path} has no parent row")
                father.add_child(node)
            nodes[path] = node

        if root is None:
            raise ValueError("DataFrame has no root row")
        return root

    def _tree_from_table(self, frame: Any, pd: Any) -> XMLNode:
        """Generic frame: ``<data>`` holding one ``<row>`` per record."""
        root = XMLNode(tag=TABLE_ROOT_TAG)
        for _, row in frame.iterrows():
            record = XMLNode(tag=TABLE_ROW_TAG)
            for column, value in row.items():
                cell = XMLNode(tag=str(column))
                if pd.notna(value):
                    cell.text = str(value)
                record.add_child(cell)
            root.add_child(record)
        return root


def _element_rows(root: XMLNode) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    pending = [(root, f"/{root.tag}", 0)]
    while pending:
        node, path, depth = pending.pop()
        row: Dict[str, Any] = {
            "tag": node.tag,
            "text": node.text or "",
            "path": path,
            "depth": depth,
        }
        for attribute in node.active_attributes():
            row[f"{ATTRIBUTE_PREFIX}{attribute.name}"] = attribute.value
        rows.append(row)

        children = [child for child in node.active_children() if child.is_element]
        for i in reversed(range(len(children))):
            child = children[i]
            pending.append((child, f"{path}/{child.tag}[{i}]", depth + 1))
    return rows


def _elapsed(start_time: float) -> float:
    return (time.time() - start_time) * 1000


class AdapterRegistry:
    """Registry for managing integration adapters."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[IntegrationAdapter]] = {}
        self._lock = threading.RLock()

    def register(self, adapter_class: Type[IntegrationAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        with self._lock:
            self._adapters[adapter_class().metadata.name] = adapter_class

    def get_adapter(
        self,
        adapter_name: str,
        correlation_id: Optional[str] = None
    ) -> Optional[IntegrationAdapter]:
        """Get an adapter instance by name.

        Returns:
            Adapter instance if registered and available, None otherwise
        """
        with self._lock:
            adapter_class = self._adapters.get(adapter_name)
        if adapter_class is None:
            return None
        instance = adapter_class(correlation_id)
        return instance if instance.is_available() else None

    def list_available_adapters(self) -> List[AdapterMetadata]:
        """Metadata of every registered adapter whose library is importable."""
        with self._lock:
            classes = list(self._adapters.values())
        available = []
        for adapter_class in classes:
            instance = adapter_class()
            if instance.is_available():
                available.append(instance.metadata)
        return available


# Global adapter registry instance
_adapter_registry = AdapterRegistry()
_adapter_registry.register(ElementTreeAdapter)
_adapter_registry.register(LxmlAdapter)
_adapter_registry.register(BeautifulSoupAdapter)
_adapter_registry.register(PandasAdapter)


def register_adapter(adapter_class: Type[IntegrationAdapter]) -> None:
    """Register an integration adapter globally."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    adapter_name: str,
    correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Get a registered adapter instance, or None when unavailable."""
    return _adapter_registry.get_adapter(adapter_name, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """List all available integration adapters."""
    return _adapter_registry.list_available_adapters()
