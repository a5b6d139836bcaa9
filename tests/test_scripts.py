"""Tests for JXA script generation."""

import json

from omnioutliner_mcp.outliner import scripts


def embedded_params(script: str) -> dict:
    for line in script.splitlines():
        line = line.strip()
        if line.startswith("const params = "):
            return json.loads(line[len("const params = "):].rstrip(";"))
    raise AssertionError("script has no params literal")


class TestBuildScript:
    """Tests for build_script."""

    def test_structure(self):
        script = scripts.build_script("return JSON.stringify({ ok: true });", "do thing", limit=3)
        assert script.startswith("function run() {")
        assert "const app = Application('OmniOutliner');" in script
        assert "app.running()" in script
        assert "function findDocument(app, documentName)" in script
        assert "Failed to do thing: " in script
        assert embedded_params(script) == {"limit": 3}

    def test_skip_running_check(self):
        script = scripts.build_script("return '{}';", "launch", require_running=False)
        assert "app_not_running" not in script

    def test_params_are_a_single_json_literal(self):
        """Quotes, backslashes and newlines stay inside the literal."""
        hostile = "x'); app.quit(); ('\\\n\"`${evil}`"
        script = scripts.add_row(hostile, note="line1\nline2")
        params = embedded_params(script)
        assert params["topic"] == hostile
        assert params["note"] == "line1\nline2"
        assert hostile not in script

    def test_non_ascii_is_escaped(self):
        script = scripts.search_outline("Ærø ✓")
        assert "Ærø" not in script
        assert embedded_params(script)["query"] == "Ærø ✓"


class TestToolScripts:
    """Tests for the per-tool script builders."""

    def test_get_outline_structure_auto_limit(self):
        params = embedded_params(scripts.get_outline_structure())
        assert params["maxDepth"] is None
        assert params["largeDocThreshold"] == scripts.LARGE_DOC_THRESHOLD == 500

    def test_get_all_documents_content(self):
        params = embedded_params(scripts.get_all_documents_content(include_notes=False))
        assert params == {"includeNotes": False, "largeDocThreshold": 500}

    def test_move_row_defaults(self):
        params = embedded_params(scripts.move_row("r1"))
        assert params == {
            "rowId": "r1",
            "newParentId": None,
            "position": "last",
            "siblingId": None,
            "relativePosition": "after",
            "documentName": None,
        }

    def test_delete_row(self):
        params = embedded_params(scripts.delete_row("r1", confirmed=True, document_name="Plan"))
        assert params == {"rowId": "r1", "confirmed": True, "documentName": "Plan"}

    def test_get_section_content(self):
        params = embedded_params(
            scripts.get_section_content("r1", format="markdown", offset=10, limit=20)
        )
        assert params["format"] == "markdown"
        assert params["offset"] == 10
        assert params["limit"] == 20

    def test_check_connection_is_standalone(self):
        assert scripts.CHECK_CONNECTION.startswith("function run() {")
        assert "const params" not in scripts.CHECK_CONNECTION
