"""Unit tests for document loading and writing."""
import pytest

from translation_sync.document_io import (
    KIND_RECORDS,
    KIND_TEXT,
    KIND_TREE,
    Document,
    check_depth,
    detect_indent,
    detect_kind,
    detect_line_ending,
    dump_tree,
    iter_language_files,
    load_document,
    parse_tree,
    write_text
)
from translation_sync.exceptions import DocumentEncodingError, DocumentParseError, DocumentTooDeepError


class TestDetection:

    @pytest.mark.parametrize("relative_path,kind", [
        ("data/items.json", KIND_TREE),
        ("DATA/ITEMS.JSON", KIND_TREE),
        ("lang/en.txt", KIND_RECORDS),
        ("lang/menu_en.txt", KIND_RECORDS),
        ("credits.txt", KIND_TEXT),
    ])
    def test_detect_kind(self, relative_path, kind):
        assert detect_kind(relative_path) == kind

    def test_detect_indent(self):
        assert detect_indent('{\n    "a": 1\n}') == '    '
        assert detect_indent('{\n\t"a": 1\n}') == '\t'
        assert detect_indent('{"a": 1}') == 2

    def test_detect_line_ending(self):
        assert detect_line_ending("a\r\nb") == '\r\n'
        assert detect_line_ending("a\nb") == '\n'


class TestLoadDocument:

    def test_crlf_is_normalized_but_remembered(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_bytes(b'{\r\n    "a": "b"\r\n}\r\n')

        document = load_document(str(path), "items.json")

        assert document.raw == '{\n    "a": "b"\n}\n'
        assert document.line_ending == '\r\n'
        assert document.indent == '    '
        assert document.kind == KIND_TREE
        assert parse_tree(document) == {"a": "b"}

    def test_invalid_utf8_raises_encoding_error(self, tmp_path):
        path = tmp_path / "en.txt"
        path.write_bytes("1 verf\xfcgbar#".encode('latin-1'))

        with pytest.raises(DocumentEncodingError, match="not a valid UTF-8 file"):
            load_document(str(path), "en.txt")

    def test_invalid_json_raises_parse_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"a": ', encoding='utf-8')

        with pytest.raises(DocumentParseError, match="broken.json"):
            parse_tree(load_document(str(path), "broken.json"))

    def test_nesting_past_max_depth_raises_too_deep(self):
        document = Document("deep.json", '[' * 300 + '"x"' + ']' * 300, KIND_TREE)

        with pytest.raises(DocumentTooDeepError, match="deep.json"):
            parse_tree(document)

    def test_nesting_beyond_the_decoder_raises_too_deep(self):
        document = Document("abyss.json", '[' * 100000 + ']' * 100000, KIND_TREE)

        with pytest.raises(DocumentTooDeepError, match="abyss.json"):
            parse_tree(document)

    def test_too_deep_is_a_parse_error(self):
        assert issubclass(DocumentTooDeepError, DocumentParseError)

    def test_check_depth_counts_containers(self):
        check_depth({"a": {"b": 1}}, 1)
        with pytest.raises(DocumentTooDeepError):
            check_depth({"a": {"b": 1}}, 0)
        check_depth("just a string", 0)


class TestWriting:

    def test_dump_tree_keeps_non_ascii(self):
        assert dump_tree({"a": "Espada de aço"}, '  ') == '{\n  "a": "Espada de aço"\n}'

    def test_write_text_applies_line_ending(self, tmp_path):
        path = tmp_path / "nested" / "en.txt"

        write_text(str(path), "1 Um#\n2 Dois#\n", '\r\n')

        assert path.read_bytes() == b"1 Um#\r\n2 Dois#\r\n"

    def test_iter_language_files(self, tmp_path):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "items.json").write_text("{}", encoding='utf-8')
        (tmp_path / "data" / "compiled_books.json").write_text("{}", encoding='utf-8')
        (tmp_path / "en.txt").write_text("1 a#", encoding='utf-8')
        (tmp_path / "font.ttf").write_bytes(b"\x00")

        files = iter_language_files(str(tmp_path), ['.json', '.txt'], ignored=['compiled_books.json'])

        assert files == ["data/items.json", "en.txt"]
        assert "font.ttf" in iter_language_files(str(tmp_path))
        assert iter_language_files(str(tmp_path / "missing")) == []
