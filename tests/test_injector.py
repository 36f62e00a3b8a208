"""
Tests for the update_document orchestrator.

Covers every outcome: read failure, missing mark (with and without orphan
ends), pending/cancelled/approved cleanup, auto-approve, write failure and
line-ending preservation.
"""

import asyncio
import os
from pathlib import Path

import pytest

from docs_toc.injector import (
    NO_MARK_MESSAGE,
    InjectorOptions,
    update_document,
    update_document_sync,
    write_document,
)
from docs_toc.models import CleanupInfo, InjectionStatus, StaleRegionKind


STALE_DOC = [
    "# Title",
    "<!--toc-->",
    "- old",
    "<!--tocEnd:offset=1-->",
    "",
    "## Section",
    "<!--toc-->",
    "- current",
    "<!--tocEnd:offset=1-->",
]


def make_confirm(answer: bool, calls: list):
    async def _confirm(info: CleanupInfo) -> bool:
        calls.append(info)
        return answer
    return _confirm


class TestBasicUpdate:
    """Tests for the normal update path."""

    def test_updates_toc(self, write_doc, read_lines):
        path = write_doc(["# T", "<!--toc-->", "- old", "<!--tocEnd:offset=1-->"])

        result = asyncio.run(update_document(path, "- a\n- b"))

        assert result.success is True
        assert result.status == InjectionStatus.UPDATED
        assert result.cleaned_regions == 0
        assert result.move_detected is False
        assert read_lines(path) == ["# T", "<!--toc-->", "- a", "- b", "<!--tocEnd:offset=2-->"]

    def test_second_run_leaves_file_unchanged(self, write_doc):
        path = write_doc(["# T", "", "<!--toc-->", "", "text", ""])
        toc = "- [A](a.md)\n"

        asyncio.run(update_document(path, toc))
        first = path.read_bytes()
        result = asyncio.run(update_document(path, toc))

        assert result.success is True
        assert path.read_bytes() == first

    def test_sync_wrapper(self, write_doc, read_lines):
        path = write_doc(["<!--toc-->"])

        result = update_document_sync(path, "- a")

        assert result.success is True
        assert read_lines(path) == ["<!--toc-->", "- a", "<!--tocEnd:offset=1-->"]

    def test_crlf_preserved(self, write_doc):
        path = write_doc(["# T", "<!--toc-->", "tail"], newline="\r\n")

        asyncio.run(update_document(path, "- a"))

        assert path.read_bytes() == b"# T\r\n<!--toc-->\r\n- a\r\n<!--tocEnd:offset=1-->\r\ntail"

    def test_prose_body_with_blank_run_is_stable(self, write_doc, read_lines):
        """A non-list body with a long blank run survives re-runs unchanged."""
        path = write_doc(["# T", "<!--toc-->", "tail"])
        toc = "Contents\n\n\n\n- a"

        asyncio.run(update_document(path, toc))
        first = path.read_bytes()
        second = asyncio.run(update_document(path, toc))
        third = asyncio.run(update_document(path, toc, InjectorOptions(auto_approve=True)))

        assert second.success is True
        assert second.status == InjectionStatus.UPDATED
        assert second.move_detected is False
        assert third.cleaned_regions == 0
        assert path.read_bytes() == first
        assert read_lines(path) == [
            "# T",
            "<!--toc-->",
            "Contents",
            "",
            "",
            "- a",
            "<!--tocEnd:offset=4-->",
            "tail",
        ]

    def test_mixed_line_endings_mostly_crlf(self, tmp_path: Path):
        path = tmp_path / "README.md"
        path.write_bytes(b"# T\r\n<!--toc-->\ntail\r\n")

        result = asyncio.run(update_document(path, "- a"))

        assert result.success is True
        assert path.read_bytes() == b"# T\r\n<!--toc-->\r\n- a\r\n<!--tocEnd:offset=1-->\r\ntail\r\n"

    def test_mark_on_lf_line_in_mixed_file(self, tmp_path: Path):
        """A single CRLF line does not hide markers on LF lines."""
        path = tmp_path / "README.md"
        path.write_bytes(b"a\r\nb\n<!--toc-->\nc\n")

        result = asyncio.run(update_document(path, "- a"))

        assert result.status == InjectionStatus.UPDATED
        assert path.read_bytes() == b"a\nb\n<!--toc-->\n- a\n<!--tocEnd:offset=1-->\nc\n"


class TestFailures:
    """Tests for read/write failures and missing marks."""

    def test_missing_file(self, tmp_path: Path):
        result = asyncio.run(update_document(tmp_path / "missing.md", "- a"))

        assert result.success is False
        assert result.status == InjectionStatus.READ_FAILURE
        assert "Failed to read file" in result.message

    def test_no_mark_leaves_file_untouched(self, write_doc):
        path = write_doc(["# Title", "no markers here"])
        before = path.read_bytes()

        result = asyncio.run(update_document(path, "- a"))

        assert result.success is False
        assert result.status == InjectionStatus.NO_MARK
        assert result.message == NO_MARK_MESSAGE
        assert result.cleaned_regions == 0
        assert path.read_bytes() == before

    def test_no_mark_removes_orphan_ends(self, write_doc, read_lines):
        path = write_doc(["# Title", "<!--tocEnd:offset=1-->", "text", "<!--tocEnd-->"])

        result = asyncio.run(update_document(path, "- a"))

        assert result.success is False
        assert result.status == InjectionStatus.NO_MARK
        assert result.cleaned_regions == 2
        assert read_lines(path) == ["# Title", "text"]

    def test_marks_in_code_do_not_count(self, write_doc):
        path = write_doc(["```", "<!--toc-->", "```"])

        result = asyncio.run(update_document(path, "- a"))

        assert result.status == InjectionStatus.NO_MARK

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
    def test_write_failure(self, tmp_path: Path):
        folder = tmp_path / "locked"
        folder.mkdir()
        path = folder / "README.md"
        path.write_text("<!--toc-->", encoding="utf-8")
        folder.chmod(0o500)
        try:
            result = asyncio.run(update_document(path, "- a"))
        finally:
            folder.chmod(0o700)

        assert result.success is False
        assert result.status == InjectionStatus.WRITE_FAILURE
        assert "Failed to write file" in result.message
        assert path.read_text(encoding="utf-8") == "<!--toc-->"

    def test_write_failure_reported(self, write_doc, monkeypatch):
        """An OSError during the write becomes a result, not an exception."""
        path = write_doc(["<!--toc-->"])

        def _fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("docs_toc.injector.write_document", _fail)
        result = asyncio.run(update_document(path, "- a"))

        assert result.success is False
        assert result.status == InjectionStatus.WRITE_FAILURE
        assert path.read_text(encoding="utf-8") == "<!--toc-->"


class TestConfirmationGate:
    """Tests for the stale-region confirmation protocol."""

    def test_declined_leaves_file_unchanged(self, write_doc):
        path = write_doc(STALE_DOC)
        before = path.read_bytes()
        calls = []

        result = asyncio.run(update_document(
            path, "- new", InjectorOptions(on_cleanup_confirm=make_confirm(False, calls))
        ))

        assert result.success is False
        assert result.status == InjectionStatus.CLEANUP_CANCELLED
        assert result.message == "Cleanup cancelled by user."
        assert path.read_bytes() == before
        assert len(calls) == 1

    def test_confirm_payload(self, write_doc):
        path = write_doc(STALE_DOC)
        calls = []

        asyncio.run(update_document(
            path, "- new", InjectorOptions(on_cleanup_confirm=make_confirm(False, calls))
        ))

        info = calls[0]
        assert [region.kind for region in info.regions] == [StaleRegionKind.COMPLETE]
        assert info.total_lines == 3
        assert "Region 1 [duplicate region]" in info.description

    def test_approved_cleans_and_updates(self, write_doc, read_lines):
        path = write_doc(STALE_DOC)
        calls = []

        result = asyncio.run(update_document(
            path, "- new", InjectorOptions(on_cleanup_confirm=make_confirm(True, calls))
        ))

        assert result.success is True
        assert result.cleaned_regions == 1
        assert read_lines(path) == [
            "# Title",
            "",
            "## Section",
            "<!--toc-->",
            "- new",
            "<!--tocEnd:offset=1-->",
        ]

    def test_no_callback_is_pending(self, write_doc):
        path = write_doc(STALE_DOC)
        before = path.read_bytes()

        result = asyncio.run(update_document(path, "- new"))

        assert result.success is False
        assert result.status == InjectionStatus.CLEANUP_PENDING
        assert result.message.startswith("Detected stale regions to clean:")
        assert path.read_bytes() == before

    def test_auto_approve_skips_callback(self, write_doc, read_lines):
        path = write_doc(STALE_DOC)
        calls = []

        result = asyncio.run(update_document(
            path,
            "- new",
            InjectorOptions(on_cleanup_confirm=make_confirm(False, calls), auto_approve=True),
        ))

        assert result.success is True
        assert calls == []
        assert read_lines(path)[3:] == ["<!--toc-->", "- new", "<!--tocEnd:offset=1-->"]

    def test_clean_document_never_asks(self, write_doc):
        path = write_doc(["<!--toc-->", "- a", "<!--tocEnd:offset=1-->"])
        calls = []

        result = asyncio.run(update_document(
            path, "- b", InjectorOptions(on_cleanup_confirm=make_confirm(False, calls))
        ))

        assert result.success is True
        assert calls == []

    def test_move_detected_reported(self, write_doc, read_lines):
        path = write_doc([
            "# Title",
            "<!--toc-->",
            "Keep this paragraph.",
            "- [A](a.md)",
            "<!--tocEnd:offset=1-->",
        ])

        result = asyncio.run(update_document(path, "- [B](b.md)", InjectorOptions(auto_approve=True)))

        assert result.success is True
        assert result.move_detected is True
        assert result.cleaned_regions == 2
        assert "Keep this paragraph." in read_lines(path)


class TestWriteDocument:
    """Tests for the atomic writer."""

    def test_no_temp_files_left(self, tmp_path: Path):
        path = tmp_path / "doc.md"
        write_document(path, ["a", "b"])

        assert path.read_text(encoding="utf-8") == "a\nb"
        assert [p.name for p in tmp_path.iterdir()] == ["doc.md"]

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlinked_target_keeps_link(self, tmp_path: Path):
        real = tmp_path / "docs" / "index.md"
        real.parent.mkdir()
        real.write_text("<!--toc-->\n", encoding="utf-8")
        link = tmp_path / "README.md"
        link.symlink_to(real)

        result = asyncio.run(update_document(link, "- a"))

        assert result.success is True
        assert link.is_symlink()
        assert real.read_text(encoding="utf-8") == "<!--toc-->\n- a\n<!--tocEnd:offset=1-->\n"
        assert sorted(p.name for p in real.parent.iterdir()) == ["index.md"]
