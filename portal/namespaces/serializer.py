"""Rendering of namespaces into portable configuration files.

Key/value namespaces are rendered item by item in stored order. A
non-properties namespace whose only item is keyed `content` is a document
namespace: the value already is the whole file and is emitted verbatim once it
parses in the target format.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as element_tree
from typing import Final

import yaml

from portal.domain import ConfigFileFormat, Namespace, NamespaceItem, NamespaceSerializationError

DOCUMENT_CONTENT_KEY: Final[str] = "content"
DEFAULT_FILE_FORMAT: Final[ConfigFileFormat] = ConfigFileFormat.PROPERTIES

_PROPERTIES_CHAR_ESCAPES: Final[dict[str, str]] = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
}
_PROPERTIES_UNESCAPES: Final[dict[str, str]] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_PROPERTIES_SPECIAL_CHARS: Final[frozenset[str]] = frozenset("=:#!")
_PROPERTIES_WHITESPACE: Final[str] = " \t\f"
_XML_INVALID_CHARS: Final[re.Pattern[str]] = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def serializer_resolve_format(namespace_name: str) -> ConfigFileFormat:
    """Return the file format implied by a namespace name.

    Args:
        namespace_name: Namespace name.

    Returns:
        ConfigFileFormat: Suffix format, or `properties` when there is none.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return ConfigFileFormat.format_from_namespace_name(namespace_name)


def serializer_derive_file_name(namespace_name: str) -> str:
    """Derive the export file name of a namespace.

    A name whose last `.` segment is a supported format token is kept as-is;
    any other name gets the default `.properties` suffix.

    Args:
        namespace_name: Namespace name, e.g. `application` or `db.yml`.

    Returns:
        str: File name, e.g. `application.properties` or `db.yml`.

    Raises:
        NamespaceSerializationError: Raised when the name is blank.
    """

    if not namespace_name.strip():
        raise NamespaceSerializationError("namespace name must not be blank")

    name_segments = namespace_name.split(".")
    if len(name_segments) > 1 and ConfigFileFormat.format_is_valid(name_segments[-1]):
        return namespace_name
    return f"{namespace_name}.{DEFAULT_FILE_FORMAT.value}"


def serializer_render(namespace: Namespace, file_format: ConfigFileFormat | None = None) -> bytes:
    """Render one namespace into UTF-8 file bytes.

    Args:
        namespace: Namespace instance with items.
        file_format: Target format; defaults to the namespace format.

    Returns:
        bytes: Rendered file payload.

    Raises:
        NamespaceSerializationError: Raised when an item is malformed or a
            document does not parse in the target format.
    """

    target_format = file_format or namespace.format
    items = namespace.namespace_sorted_items()
    keyed_items = _serializer_keyed_items(namespace=namespace, items=items)

    if target_format is not ConfigFileFormat.PROPERTIES and _serializer_is_document(keyed_items):
        content = keyed_items[0].value or ""
        _serializer_validate_document(namespace=namespace, content=content, file_format=target_format)
        return _serializer_encode(namespace=namespace, text=content)

    if target_format is ConfigFileFormat.XML:
        return _serializer_render_xml(namespace=namespace, items=keyed_items)
    if target_format is ConfigFileFormat.PROPERTIES:
        rendered_text = _serializer_render_properties(items=items, with_comments=True)
    elif target_format is ConfigFileFormat.TXT:
        rendered_text = _serializer_render_properties(items=keyed_items, with_comments=False)
    elif target_format in (ConfigFileFormat.YML, ConfigFileFormat.YAML):
        rendered_text = yaml.safe_dump(
            {item.key: item.value for item in keyed_items},
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    else:
        rendered_json = json.dumps(
            {item.key: item.value for item in keyed_items},
            ensure_ascii=False,
            indent=2,
        )
        rendered_text = f"{rendered_json}\n"
    return _serializer_encode(namespace=namespace, text=rendered_text)


def serializer_parse(payload: bytes, file_format: ConfigFileFormat, as_document: bool = False) -> dict[str, str]:
    """Parse a rendering back into its items.

    Args:
        payload: Rendered file bytes.
        file_format: Format the payload was rendered in.
        as_document: Whether the payload is a verbatim document namespace.

    Returns:
        dict[str, str]: Items keyed by item key, in file order.

    Raises:
        NamespaceSerializationError: Raised when the payload is not a key/value rendering.
    """

    text = payload.decode("utf-8")
    if as_document:
        return {DOCUMENT_CONTENT_KEY: text}
    try:
        if file_format in (ConfigFileFormat.PROPERTIES, ConfigFileFormat.TXT):
            return _serializer_parse_properties(text)
        if file_format in (ConfigFileFormat.YML, ConfigFileFormat.YAML):
            parsed = yaml.safe_load(text)
        elif file_format is ConfigFileFormat.JSON:
            parsed = json.loads(text)
        else:
            root = element_tree.fromstring(payload)
            return {str(entry.get("key")): entry.text or "" for entry in root.iter("entry")}
    except (yaml.YAMLError, ValueError, element_tree.ParseError) as error:
        raise NamespaceSerializationError(f"payload is not valid {file_format.value}") from error

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise NamespaceSerializationError(f"{file_format.value} payload is not a key/value mapping")
    return {str(key): "" if value is None else str(value) for key, value in parsed.items()}


def _serializer_keyed_items(namespace: Namespace, items: tuple[NamespaceItem, ...]) -> tuple[NamespaceItem, ...]:
    """Validate items and return those carrying a key.

    Args:
        namespace: Namespace owning the items, used in error messages.
        items: Items in stored order.

    Returns:
        tuple[NamespaceItem, ...]: Keyed items in stored order.

    Raises:
        NamespaceSerializationError: Raised for values without key, keys without
            value, or duplicate keys.
    """

    seen_keys: set[str] = set()
    keyed_items: list[NamespaceItem] = []
    for item in items:
        if not item.key.strip():
            if item.value:
                raise NamespaceSerializationError(
                    f"namespace {namespace.namespace_name} has a value without key at line {item.line_num}"
                )
            continue
        if item.value is None:
            raise NamespaceSerializationError(
                f"namespace {namespace.namespace_name} has no value for key={item.key}"
            )
        if item.key in seen_keys:
            raise NamespaceSerializationError(
                f"namespace {namespace.namespace_name} has duplicate key={item.key}"
            )
        seen_keys.add(item.key)
        keyed_items.append(item)
    return tuple(keyed_items)


def _serializer_is_document(keyed_items: tuple[NamespaceItem, ...]) -> bool:
    return len(keyed_items) == 1 and keyed_items[0].key == DOCUMENT_CONTENT_KEY


def _serializer_validate_document(namespace: Namespace, content: str, file_format: ConfigFileFormat) -> None:
    """Check that document content parses in its declared format.

    Args:
        namespace: Namespace owning the document, used in error messages.
        content: Document text.
        file_format: Declared document format.

    Returns:
        None: Validation only.

    Raises:
        NamespaceSerializationError: Raised when the content does not parse.
    """

    try:
        if file_format is ConfigFileFormat.JSON:
            json.loads(content)
        elif file_format in (ConfigFileFormat.YML, ConfigFileFormat.YAML):
            yaml.safe_load(content)
        elif file_format is ConfigFileFormat.XML:
            element_tree.fromstring(content)
    except (yaml.YAMLError, ValueError, element_tree.ParseError) as error:
        raise NamespaceSerializationError(
            f"namespace {namespace.namespace_name} content is not valid {file_format.value}"
        ) from error


def _serializer_encode(namespace: Namespace, text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as error:
        raise NamespaceSerializationError(
            f"namespace {namespace.namespace_name} holds text that is not valid utf-8"
        ) from error


def _serializer_render_properties(items: tuple[NamespaceItem, ...], with_comments: bool) -> str:
    lines: list[str] = []
    for item in items:
        if with_comments and item.comment:
            lines.extend(f"# {comment_line}" for comment_line in item.comment.splitlines())
        if not item.key.strip():
            if with_comments and not item.comment:
                lines.append("")
            continue
        key = _serializer_escape_properties(item.key, escape_all_spaces=True)
        value = _serializer_escape_properties(item.value or "", escape_all_spaces=False)
        lines.append(f"{key}={value}")
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def _serializer_escape_properties(text: str, escape_all_spaces: bool) -> str:
    escaped_chars: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            escaped_chars.append("\\ " if escape_all_spaces or index == 0 else " ")
        elif char in _PROPERTIES_CHAR_ESCAPES:
            escaped_chars.append(_PROPERTIES_CHAR_ESCAPES[char])
        elif char in _PROPERTIES_SPECIAL_CHARS:
            escaped_chars.append(f"\\{char}")
        else:
            escaped_chars.append(char)
    return "".join(escaped_chars)


def _serializer_parse_properties(text: str) -> dict[str, str]:
    """Parse `.properties` text, including continuation lines and escapes.

    Args:
        text: File text.

    Returns:
        dict[str, str]: Parsed items; later keys win.

    Raises:
        ValueError: Raised for malformed unicode escapes.
    """

    parsed: dict[str, str] = {}
    pending_line = ""
    for raw_line in text.splitlines():
        line = raw_line.lstrip(_PROPERTIES_WHITESPACE)
        if not pending_line and (not line or line[0] in "#!"):
            continue

        trailing_backslashes = len(line) - len(line.rstrip("\\"))
        if trailing_backslashes % 2 == 1:
            pending_line += line[:-1]
            continue

        logical_line = pending_line + line
        pending_line = ""
        key, value = _serializer_split_properties_line(logical_line)
        parsed[_serializer_unescape_properties(key)] = _serializer_unescape_properties(value)

    if pending_line:
        key, value = _serializer_split_properties_line(pending_line)
        parsed[_serializer_unescape_properties(key)] = _serializer_unescape_properties(value)
    return parsed


def _serializer_split_properties_line(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char in _PROPERTIES_WHITESPACE:
            break
        index += 1

    key = line[:index]
    while index < len(line) and line[index] in _PROPERTIES_WHITESPACE:
        index += 1
    if index < len(line) and line[index] in "=:":
        index += 1
    while index < len(line) and line[index] in _PROPERTIES_WHITESPACE:
        index += 1
    return key, line[index:]


def _serializer_unescape_properties(text: str) -> str:
    unescaped_chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\":
            unescaped_chars.append(char)
            index += 1
            continue
        if index + 1 >= len(text):
            break
        escaped_char = text[index + 1]
        if escaped_char == "u":
            unescaped_chars.append(chr(int(text[index + 2 : index + 6], 16)))
            index += 6
            continue
        unescaped_chars.append(_PROPERTIES_UNESCAPES.get(escaped_char, escaped_char))
        index += 2
    return "".join(unescaped_chars)


def _serializer_render_xml(namespace: Namespace, items: tuple[NamespaceItem, ...]) -> bytes:
    root = element_tree.Element("properties")
    for item in items:
        value = item.value or ""
        if _XML_INVALID_CHARS.search(item.key) or _XML_INVALID_CHARS.search(value):
            raise NamespaceSerializationError(
                f"namespace {namespace.namespace_name} key={item.key} contains characters not allowed in xml"
            )
        entry = element_tree.SubElement(root, "entry", key=item.key)
        entry.text = value
    element_tree.indent(root)
    rendered_xml = element_tree.tostring(root, encoding="utf-8", xml_declaration=True)
    # Raw carriage returns only occur in entry text; parsers fold them into newlines.
    return rendered_xml.replace(b"\r", b"&#13;") + b"\n"
