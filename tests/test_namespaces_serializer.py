"""Tests for namespace file naming, rendering and parsing."""

from __future__ import annotations

import json

import pytest
import yaml

from portal.domain import ConfigFileFormat, Namespace, NamespaceItem, NamespaceSerializationError
from portal.namespaces import (
    serializer_derive_file_name,
    serializer_parse,
    serializer_render,
    serializer_resolve_format,
)


def _build_namespace(namespace_name: str, items: list[NamespaceItem]) -> Namespace:
    return Namespace(
        app_id="orderservice",
        env="dev",
        cluster_name="default",
        namespace_name=namespace_name,
        format=ConfigFileFormat.format_from_namespace_name(namespace_name),
        items=tuple(items),
    )


@pytest.mark.parametrize(
    ("namespace_name", "expected_file_name"),
    [
        ("application", "application.properties"),
        ("db.yml", "db.yml"),
        ("db.YAML", "db.YAML"),
        ("rules.json", "rules.json"),
        ("layout.xml", "layout.xml"),
        ("notes.txt", "notes.txt"),
        ("application.properties", "application.properties"),
        ("team.common", "team.common.properties"),
        ("v1.2", "v1.2.properties"),
    ],
)
def test_serializer_derive_file_name_keeps_supported_suffix_only(namespace_name: str, expected_file_name: str) -> None:
    """Keep names ending in a supported format token and append `.properties` otherwise.

    Args:
        namespace_name: Namespace name.
        expected_file_name: Expected export file name.

    Returns:
        None: Assertions validate file naming.

    Raises:
        AssertionError: Raised when the derived name is wrong.
    """

    assert serializer_derive_file_name(namespace_name) == expected_file_name


def test_serializer_resolve_format_defaults_to_properties() -> None:
    assert serializer_resolve_format("db.yml") is ConfigFileFormat.YML
    assert serializer_resolve_format("db.YAML") is ConfigFileFormat.YAML
    assert serializer_resolve_format("team.common") is ConfigFileFormat.PROPERTIES


def test_serializer_properties_render_keeps_order_comments_and_escapes() -> None:
    """Render items in line order with comments above and `.properties` escaping.

    Returns:
        None: Assertions validate rendered text and its parse.

    Raises:
        AssertionError: Raised when rendering loses information.
    """

    namespace = _build_namespace(
        "application",
        [
            NamespaceItem(key="timeout", value="30", comment="request timeout", line_num=2),
            NamespaceItem(key="url", value="jdbc:mysql://db:3306/orders", line_num=1),
            NamespaceItem(key="", value="", comment="", line_num=3),
            NamespaceItem(key="greeting key", value=" hello\nworld #1 ", line_num=4),
        ],
    )

    payload = serializer_render(namespace)

    assert payload.decode("utf-8") == (
        "url=jdbc\\:mysql\\://db\\:3306/orders\n"
        "# request timeout\n"
        "timeout=30\n"
        "\n"
        "greeting\\ key=\\ hello\\nworld \\#1 \n"
    )
    assert serializer_parse(payload, ConfigFileFormat.PROPERTIES) == {
        "url": "jdbc:mysql://db:3306/orders",
        "timeout": "30",
        "greeting key": " hello\nworld #1 ",
    }


def test_serializer_properties_parse_handles_continuations_and_separators() -> None:
    payload = (
        "! legacy comment\n"
        "first = one\n"
        "second:two\n"
        "third three\n"
        "long=alpha, \\\n"
        "     beta\n"
        "unicode=caf\\u00e9\n"
    ).encode("utf-8")

    assert serializer_parse(payload, ConfigFileFormat.PROPERTIES) == {
        "first": "one",
        "second": "two",
        "third": "three",
        "long": "alpha, beta",
        "unicode": "café",
    }


@pytest.mark.parametrize(
    "namespace_name",
    ["settings.json", "settings.yml", "settings.yaml", "settings.xml", "settings.txt"],
)
def test_serializer_key_value_formats_round_trip(namespace_name: str) -> None:
    """Parse each key/value rendering back into the rendered items.

    Args:
        namespace_name: Namespace name selecting the format.

    Returns:
        None: Assertions validate round-trip equality.

    Raises:
        AssertionError: Raised when a rendering is lossy.
    """

    items = [
        NamespaceItem(key="feature.enabled", value="true", comment="dropped outside properties", line_num=1),
        NamespaceItem(key="retries", value="3", line_num=2),
        NamespaceItem(key="motto", value="größer: <fast> & \"safe\"", line_num=3),
        NamespaceItem(key="empty", value="", line_num=4),
        NamespaceItem(key="banner", value="line1\r\nline2\rend", line_num=5),
    ]
    namespace = _build_namespace(namespace_name, items)

    payload = serializer_render(namespace)

    assert serializer_parse(payload, namespace.format) == {item.key: item.value for item in items}
    assert b"dropped outside properties" not in payload


def test_serializer_json_render_is_indented_utf8_in_item_order() -> None:
    namespace = _build_namespace(
        "settings.json",
        [
            NamespaceItem(key="zeta", value="ü", line_num=1),
            NamespaceItem(key="alpha", value="1", line_num=2),
        ],
    )

    payload = serializer_render(namespace)

    assert payload.decode("utf-8") == '{\n  "zeta": "ü",\n  "alpha": "1"\n}\n'
    assert list(json.loads(payload)) == ["zeta", "alpha"]


def test_serializer_yaml_render_keeps_string_values_as_strings() -> None:
    namespace = _build_namespace(
        "settings.yaml",
        [
            NamespaceItem(key="enabled", value="true", line_num=1),
            NamespaceItem(key="port", value="8080", line_num=2),
        ],
    )

    assert yaml.safe_load(serializer_render(namespace)) == {"enabled": "true", "port": "8080"}


@pytest.mark.parametrize(
    ("namespace_name", "content"),
    [
        ("db.yml", "spring:\n  datasource:\n    url: jdbc:mysql://db\n"),
        ("rules.json", '{"rules": [1, 2, 3]}'),
        ("layout.xml", "<layout><row/></layout>"),
        ("notes.txt", "free text: not validated {"),
    ],
)
def test_serializer_document_namespace_is_emitted_verbatim(namespace_name: str, content: str) -> None:
    """Emit the single `content` item as the whole file.

    Args:
        namespace_name: Namespace name selecting the format.
        content: Document text.

    Returns:
        None: Assertions validate verbatim output.

    Raises:
        AssertionError: Raised when the document is altered.
    """

    namespace = _build_namespace(namespace_name, [NamespaceItem(key="content", value=content, line_num=1)])

    payload = serializer_render(namespace)

    assert payload == content.encode("utf-8")
    assert serializer_parse(payload, namespace.format, as_document=True) == {"content": content}


@pytest.mark.parametrize(
    ("namespace_name", "content"),
    [
        ("db.yml", "spring: [unclosed"),
        ("rules.json", "{not json}"),
        ("layout.xml", "<layout>"),
    ],
)
def test_serializer_document_namespace_rejects_unparsable_content(namespace_name: str, content: str) -> None:
    namespace = _build_namespace(namespace_name, [NamespaceItem(key="content", value=content, line_num=1)])

    with pytest.raises(NamespaceSerializationError, match="content is not valid"):
        serializer_render(namespace)


@pytest.mark.parametrize(
    ("items", "message"),
    [
        ([NamespaceItem(key="timeout", value=None, line_num=1)], "no value for key=timeout"),
        ([NamespaceItem(key=" ", value="orphan", line_num=4)], "value without key at line 4"),
        (
            [
                NamespaceItem(key="timeout", value="1", line_num=1),
                NamespaceItem(key="timeout", value="2", line_num=2),
            ],
            "duplicate key=timeout",
        ),
    ],
)
def test_serializer_rejects_malformed_items(items: list[NamespaceItem], message: str) -> None:
    """Raise a serialization error for items that cannot be rendered in any format.

    Args:
        items: Malformed namespace items.
        message: Expected error message fragment.

    Returns:
        None: Assertions validate error behavior.

    Raises:
        AssertionError: Raised when malformed items render silently.
    """

    for namespace_name in ("application", "settings.json"):
        with pytest.raises(NamespaceSerializationError, match=message):
            serializer_render(_build_namespace(namespace_name, items))


def test_serializer_xml_rejects_control_characters() -> None:
    namespace = _build_namespace("layout.xml", [NamespaceItem(key="bell", value="ring\x07", line_num=1)])

    with pytest.raises(NamespaceSerializationError, match="not allowed in xml"):
        serializer_render(namespace)


def test_serializer_empty_namespace_renders_empty_payloads() -> None:
    assert serializer_render(_build_namespace("application", [])) == b""
    assert serializer_render(_build_namespace("settings.json", [])) == b"{}\n"
    assert serializer_parse(b"", ConfigFileFormat.YAML) == {}


@pytest.mark.parametrize(
    ("namespace_name", "items"),
    [
        ("application", [NamespaceItem(key="broken", value="\ud800", line_num=1)]),
        ("settings.json", [NamespaceItem(key="broken", value="\ud800", line_num=1)]),
        ("settings.xml", [NamespaceItem(key="broken", value="\ud800", line_num=1)]),
        ("notes.txt", [NamespaceItem(key="content", value="half \udc00 pair", line_num=1)]),
    ],
)
def test_serializer_rejects_text_without_utf8_encoding(namespace_name: str, items: list[NamespaceItem]) -> None:
    """Raise a serialization error for lone surrogates instead of an encoding error.

    Args:
        namespace_name: Namespace name selecting the format.
        items: Items holding unpaired surrogate code points.

    Returns:
        None: Assertions validate error behavior.

    Raises:
        AssertionError: Raised when an encoding error escapes the serializer.
    """

    with pytest.raises(NamespaceSerializationError):
        serializer_render(_build_namespace(namespace_name, items))
