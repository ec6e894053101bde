"""Test module for simple_xml_parser package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import simple_xml_parser

    # Assert
    assert simple_xml_parser is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import simple_xml_parser

    # Assert
    assert isinstance(simple_xml_parser.__version__, str)
    assert simple_xml_parser.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import simple_xml_parser

    assert simple_xml_parser.__author__ == "Simple XML Parser Team"


def test_package_all_exports_resolve() -> None:
    """Test that every name in __all__ is importable from the package."""
    import simple_xml_parser

    for name in simple_xml_parser.__all__:
        assert hasattr(simple_xml_parser, name), name


def test_level_one_parse_from_package() -> None:
    """Test the top-level parse_string entry point end to end."""
    from simple_xml_parser import parse_string

    result = parse_string("<root><item>value</item></root>")

    assert result.success is True
    assert result.tree.find("item").text == "value"
