"""Tests for the editing session server."""

from unittest.mock import patch

from replace_dom_text import DocumentError, XMLDocument
from replace_dom_text_mcp.cache import CachedDocument
from replace_dom_text_mcp.server import ReplaceServer, create_server


def _open_edited(tmp_path, name, edit=True) -> CachedDocument:
    path = tmp_path / name
    path.write_text("<r>draft</r>", encoding="utf-8")
    cached = CachedDocument(path=str(path), document=XMLDocument.open(str(path)))
    if edit:
        cached.document.find_and_replace("draft", replace="final")
    return cached


class TestServer:
    """Test server initialization."""

    def test_server_has_name(self):
        assert create_server().name == "replace-dom-text"

    def test_server_cache_defaults(self):
        server = create_server()
        assert server.cache.size == 0
        assert server.cache.max_documents == 10

    def test_server_cache_configurable(self):
        assert create_server(max_documents=5).cache.max_documents == 5

    def test_server_without_explicit_cache(self):
        assert ReplaceServer(name="s").cache.max_documents == 10


class TestGracefulShutdown:
    """Test graceful shutdown with dirty document saving."""

    def test_shutdown_saves_dirty_documents(self, tmp_path):
        server = create_server()
        docs = [_open_edited(tmp_path, f"doc{i}.xml") for i in range(2)]
        for doc in docs:
            server.cache.put(doc)

        assert server.shutdown() == []

        for i in range(2):
            assert "<r>final</r>" in (tmp_path / f"doc{i}.xml").read_text(encoding="utf-8")

    def test_shutdown_skips_clean_documents(self, tmp_path):
        server = create_server()
        server.cache.put(_open_edited(tmp_path, "doc.xml", edit=False))

        with patch.object(XMLDocument, "save") as save:
            server.shutdown()

        save.assert_not_called()

    def test_shutdown_continues_on_save_error(self, tmp_path):
        server = create_server()
        failing = _open_edited(tmp_path, "doc1.xml")
        ok = _open_edited(tmp_path, "doc2.xml")
        server.cache.put(failing)
        server.cache.put(ok)

        with patch.object(failing.document, "save", side_effect=DocumentError("Disk full")):
            failed = server.shutdown()

        assert failed == [failing.path]
        assert "<r>final</r>" in (tmp_path / "doc2.xml").read_text(encoding="utf-8")
        assert "<r>draft</r>" in (tmp_path / "doc1.xml").read_text(encoding="utf-8")

    def test_shutdown_clears_cache(self, tmp_path):
        server = create_server()
        cached = _open_edited(tmp_path, "doc.xml", edit=False)
        server.cache.put(cached)

        server.shutdown()

        assert server.cache.size == 0
        assert cached.document.dom is None
