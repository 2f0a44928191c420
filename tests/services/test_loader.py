"""Tests for the document loader and LoadService."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pluggy
import pytest

from hsxctl.config.settings import HsxSettings
from hsxctl.infrastructure.dom import Document
from hsxctl.infrastructure.surface import DocumentSurface
from hsxctl.plugins.builtins.functions import update
from hsxctl.plugins.manager import PluginManager
from hsxctl.services.loader import DocumentLoader, LoadService, NoBlockError, extract_block
from tests.conftest import html_page

hookimpl = pluggy.HookimplMarker("hsxctl")


def _loader(body: str = "", **kwargs: object) -> DocumentLoader:
    surface = DocumentSurface(Document.from_html(f"<body>{body}</body>"))
    return DocumentLoader(surface, functions={"update": update}, **kwargs)  # type: ignore[arg-type]


class TestExtractBlock:
    def test_inner_text(self) -> None:
        assert extract_block("<p>x</p><hsx>\nhsx set variable a = 1\n</hsx>") == (
            "\nhsx set variable a = 1\n"
        )

    def test_case_insensitive_with_attributes(self) -> None:
        assert extract_block('<HSX data-v="1">body</Hsx >') == "body"

    def test_first_block_only(self) -> None:
        assert extract_block("<hsx>one</hsx><hsx>two</hsx>") == "one"

    def test_custom_tag(self) -> None:
        assert extract_block("<mist>x</mist>", "mist") == "x"

    def test_missing_block(self) -> None:
        with pytest.raises(NoBlockError):
            extract_block("<html><body>nothing</body></html>")

    def test_prefix_tag_not_matched(self) -> None:
        with pytest.raises(NoBlockError):
            extract_block("<hsxfoo>x</hsxfoo>")


class TestDocumentLoader:
    def test_runs_block_commands(self) -> None:
        loader = _loader('<div id="app"></div>')
        page = html_page(
            "\n".join(
                [
                    'hsx reactive variable user = "Ann"',
                    "hsx define component Greeting Hello {{user}}",
                    "hsx render component Greeting to #app",
                    'hsx run async update("user", "Bob")',
                ]
            )
        )
        report = asyncio.run(loader.load_text(page))
        assert report.ok
        assert report.executed == 4
        assert loader.surface.resolve("#app").text_content == "Hello Bob"  # type: ignore[union-attr]

    def test_failing_line_is_isolated(self) -> None:
        loader = _loader('<div id="app"></div>')
        page = html_page(
            "\n".join(
                [
                    "hsx set variable a = 1",
                    "hsx run async missing()",
                    "hsx teleport somewhere",
                    "hsx set variable b = 2",
                ]
            )
        )
        report = asyncio.run(loader.load_text(page))
        assert report.executed == 2
        assert [f.line for f in report.failures] == [3, 4]
        assert "Unknown async function" in report.failures[0].error
        assert report.failures[1].text == "hsx teleport somewhere"
        assert report.context.state.snapshot() == {"a": 1, "b": 2}
        assert not report.ok

    def test_unprefixed_lines_ignored(self) -> None:
        report = asyncio.run(_loader().load_text(html_page("just some prose\nhsx set variable a = 1")))
        assert report.failures == []
        assert report.executed == 1

    def test_scripts_hoisted(self) -> None:
        loader = _loader()
        page = html_page(
            '<script src="app.js" type="module" defer></script>\n'
            "<script>window.ready = 1 < 2;</script>"
        )
        report = asyncio.run(loader.load_text(page))
        assert report.scripts == 2
        scripts = loader.surface.document.body.query_selector_all("script")
        assert [s.attrs for s in scripts] == [{"src": "app.js", "type": "module"}, {}]
        assert scripts[1].text_content == "window.ready = 1 < 2;"

    def test_media_elements_cloned_to_body(self) -> None:
        loader = _loader()
        page = html_page('<img src="a.png">\n<video src="b.mp4"></video>\n<p>not cloned</p>')
        report = asyncio.run(loader.load_text(page))
        assert report.cloned == 2
        body = loader.surface.root()
        assert [c.tag for c in body.children] == ["img", "video"]

    def test_clone_pass_runs_after_commands(self) -> None:
        loader = _loader()
        page = html_page('hsx media load img from x.png to #none\n<canvas id="c"></canvas>')
        asyncio.run(loader.load_text(page))
        tags = [c.tag for c in loader.surface.root().children]
        assert tags == ["img", "canvas"]

    def test_custom_clone_tags(self) -> None:
        loader = _loader(clone_tags=["section"])
        page = html_page("<section>s</section><div>d</div>")
        report = asyncio.run(loader.load_text(page))
        assert report.cloned == 1
        assert loader.surface.root().children[0].tag == "section"

    def test_missing_block_is_fatal(self) -> None:
        with pytest.raises(NoBlockError):
            asyncio.run(_loader().load_text("<html><body></body></html>"))

    def test_load_from_path(self, tmp_path: Path) -> None:
        page = tmp_path / "page.html"
        page.write_text(html_page("hsx set variable a = 'x'"), encoding="utf-8")
        report = asyncio.run(_loader().load(str(page)))
        assert report.url == str(page)
        assert report.context.state.get_variable("a") == "x"


class _LoadRecorder:
    def __init__(self) -> None:
        self.loads: list[tuple[str, int, int]] = []

    @hookimpl
    def post_load(self, url: str, commands_run: int, failures: int) -> None:
        self.loads.append((url, commands_run, failures))


class TestLoadService:
    def test_returns_html(self, settings: HsxSettings, project_root: Path) -> None:
        page = project_root / "page.html"
        page.write_text(html_page("hsx media load video from a.mp4 to #missing"), encoding="utf-8")
        result = LoadService(settings).load(str(page))
        assert result.ok, result.error
        assert result.data["commands"] == 1
        assert '<video src="a.mp4"></video>' in result.data["html"]

    def test_writes_output(self, settings: HsxSettings, project_root: Path) -> None:
        page = project_root / "page.html"
        page.write_text(html_page("<img src='a.png'>"), encoding="utf-8")
        out = project_root / "out" / "rendered.html"
        result = LoadService(settings).load(str(page), output=out)
        assert result.ok
        assert result.data["output"] == str(out)
        assert "html" not in result.data
        assert '<img src="a.png">' in out.read_text(encoding="utf-8")

    def test_fetch_failure(self, settings: HsxSettings, project_root: Path) -> None:
        result = LoadService(settings).load(str(project_root / "missing.html"))
        assert not result.ok
        assert result.error.code == "FETCH_FAILED"  # type: ignore[union-attr]

    def test_no_block(self, settings: HsxSettings, project_root: Path) -> None:
        page = project_root / "page.html"
        page.write_text("<html></html>", encoding="utf-8")
        result = LoadService(settings).load(str(page))
        assert result.error.code == "NO_HSX_BLOCK"  # type: ignore[union-attr]

    def test_line_failures_are_warnings(self, settings: HsxSettings, project_root: Path) -> None:
        page = project_root / "page.html"
        page.write_text(html_page("hsx run async nope()\nhsx set variable a = 1"), encoding="utf-8")
        pm = PluginManager()
        recorder = _LoadRecorder()
        pm.register_plugin(recorder, name="recorder")
        result = LoadService(settings, pm).load(str(page))
        assert result.ok
        assert result.data["failures"][0]["line"] == 2
        assert any("Unknown async function" in w for w in result.warnings)
        assert recorder.loads == [(str(page), 1, 1)]

    def test_configured_block_tag(self, project_root: Path) -> None:
        (project_root / "hsx.toml").write_text('[loader]\nblock_tag = "mist"\n', encoding="utf-8")
        page = project_root / "page.html"
        page.write_text("<mist>hsx set variable a = 1</mist>", encoding="utf-8")
        settings = HsxSettings.from_cli(project_root=project_root)
        result = LoadService(settings).load(str(page))
        assert result.ok, result.error
        assert result.data["commands"] == 1
