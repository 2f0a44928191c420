"""Document loader — fetch a page, run its ``<hsx>`` block, return a report.

Steps, in order:

1. fetch the document text,
2. extract the first ``<hsx>...</hsx>`` block (case-insensitive),
3. hoist every ``<script>`` in the block into the body as a new script
   element (``src``, ``type`` and text carried over),
4. run the block line by line with the runtime grammar; a failing line is
   recorded and the next line still runs,
5. clone every ``img``/``video``/``canvas``/``div`` of the block into the
   body, whatever the commands already did.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests
import structlog

from hsxctl.domain.grammar import UnknownLineError, parse_line
from hsxctl.domain.types import Grammar
from hsxctl.infrastructure.dom import Element, Text, parse_fragment
from hsxctl.infrastructure.fetch import DEFAULT_TIMEOUT, fetch_text
from hsxctl.infrastructure.surface import DocumentSurface
from hsxctl.services.base import BaseService
from hsxctl.services.context import RuntimeContext
from hsxctl.services.result import ServiceError, ServiceResult
from hsxctl.services.runtime import RuntimeExecutor
from hsxctl.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)

DEFAULT_CLONE_TAGS = ("img", "video", "canvas", "div")


class NoBlockError(ValueError):
    """The document carries no ``<hsx>`` block."""


def extract_block(text: str, tag: str = "hsx") -> str:
    """Inner text of the first ``<tag ...>...</tag>`` block in *text*.

    Raises:
        NoBlockError: no complete block found.
    """
    name = re.escape(tag)
    m = re.search(rf"<{name}(?:\s[^>]*)?>(.*?)</{name}\s*>", text, re.IGNORECASE | re.DOTALL)
    if m is None:
        msg = f"No <{tag}> block found"
        raise NoBlockError(msg)
    return m.group(1)


@dataclass(frozen=True)
class LineFailure:
    """One block line that failed to parse or execute."""

    line: int
    text: str
    error: str


@dataclass
class LoadReport:
    """Outcome of one :meth:`DocumentLoader.load` run."""

    url: str
    context: RuntimeContext
    executed: int = 0
    failures: list[LineFailure] = field(default_factory=list)
    scripts: int = 0
    cloned: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


class DocumentLoader:
    """Runs HSX blocks against one :class:`DocumentSurface`."""

    def __init__(
        self,
        surface: DocumentSurface | None = None,
        *,
        functions: Mapping[str, Callable[..., Any]] | None = None,
        block_tag: str = "hsx",
        clone_tags: Sequence[str] = DEFAULT_CLONE_TAGS,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.surface = surface or DocumentSurface()
        self.functions = dict(functions or {})
        self.block_tag = block_tag
        self.clone_tags = frozenset(tag.lower() for tag in clone_tags)
        self.timeout = timeout

    async def load(self, url: str) -> LoadReport:
        """Fetch *url* and run its block.

        Raises:
            requests.RequestException, FileNotFoundError: fetch failed.
            NoBlockError: the document has no block.
        """
        text = fetch_text(url, timeout=self.timeout)
        return await self.load_text(text, url=url)

    async def load_text(self, text: str, *, url: str = "<string>") -> LoadReport:
        """Run the block in already-fetched document *text*."""
        block = extract_block(text, self.block_tag)
        fragment = parse_fragment(block)
        context = RuntimeContext.create(surface=self.surface, functions=self.functions)
        report = LoadReport(url=url, context=context)

        report.scripts = self._hoist_scripts(fragment)

        executor = RuntimeExecutor(context)
        for lineno, raw in enumerate(block.splitlines(), start=1):
            try:
                command = parse_line(raw, Grammar.RUNTIME, line=lineno)
                if command is None:
                    continue
                await executor.execute(command)
            except UnknownLineError as exc:
                self._fail(report, lineno, raw, str(exc))
            except Exception as exc:
                self._fail(report, lineno, raw, f"{type(exc).__name__}: {exc}")
            else:
                report.executed += 1

        report.cloned = self._clone_elements(fragment)
        log.info(
            "load.finish",
            url=url,
            executed=report.executed,
            failures=len(report.failures),
            scripts=report.scripts,
            cloned=report.cloned,
        )
        return report

    def _fail(self, report: LoadReport, lineno: int, raw: str, error: str) -> None:
        log.warning("load.line_failed", line=lineno, error=error)
        report.failures.append(LineFailure(line=lineno, text=raw.strip(), error=error))

    def _hoist_scripts(self, fragment: list[Any]) -> int:
        body = self.surface.root()
        count = 0
        for script in _elements(fragment, {"script"}):
            attrs = {name: script.attrs[name] for name in ("src", "type") if name in script.attrs}
            hoisted = Element("script", attrs)
            if script.text_content:
                hoisted.append(Text(script.text_content))
            body.append(hoisted)
            count += 1
        return count

    def _clone_elements(self, fragment: list[Any]) -> int:
        body = self.surface.root()
        count = 0
        for element in _elements(fragment, self.clone_tags):
            body.append(element.clone())
            count += 1
        return count


def _elements(fragment: list[Any], tags: frozenset[str] | set[str]) -> list[Element]:
    """Elements of *fragment* (top level and nested) whose tag is in *tags*."""
    found: list[Element] = []
    for node in fragment:
        if not isinstance(node, Element):
            continue
        if node.tag in tags:
            found.append(node)
        found.extend(el for el in node.iter_elements() if el.tag in tags)
    return found


class LoadService(BaseService):
    """Load a document into a fresh headless page."""

    @traced
    def load(self, url: str, *, output: Path | None = None) -> ServiceResult:
        op = "load"
        cfg = self._settings.loader
        loader = DocumentLoader(
            functions=self._plugins.async_functions(),
            block_tag=cfg.block_tag,
            clone_tags=cfg.clone_tags,
            timeout=cfg.timeout,
        )

        with trace_span("fetch"):
            try:
                text = fetch_text(url, timeout=cfg.timeout)
            except (requests.RequestException, FileNotFoundError) as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="FETCH_FAILED",
                        message=f"Could not fetch {url}: {exc}",
                        detail={"url": url},
                    ),
                )

        with trace_span("run") as span:
            try:
                report = asyncio.run(loader.load_text(text, url=url))
            except NoBlockError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(code="NO_HSX_BLOCK", message=str(exc), detail={"url": url}),
                )
            if span is not None:
                span.note(executed=report.executed, failed=len(report.failures))

        warnings = list(report.context.warnings)
        warnings.extend(f"Line {f.line}: {f.error}" for f in report.failures)
        html = loader.surface.to_html()
        report.context.close()

        self._dispatch_event(
            "post_load",
            {"url": url, "commands_run": report.executed, "failures": len(report.failures)},
            warnings,
        )

        data: dict[str, Any] = {
            "url": url,
            "commands": report.executed,
            "failures": [
                {"line": f.line, "text": f.text, "error": f.error} for f in report.failures
            ],
            "scripts": report.scripts,
            "cloned": report.cloned,
        }
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(html, encoding="utf-8")
            data["output"] = str(output)
        else:
            data["html"] = html
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
