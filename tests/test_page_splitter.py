"""
Page splitter tests

Renders real PDFs generated with PyMuPDF into the scoped workspace.
"""

import os
import tempfile

import pytest
from PIL import Image

from processors.page_splitter import PageSplitter, natural_sort_key
from utils.errors import ConversionError, InvalidPageError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestNaturalSortKey:
    """Test numeric-aware ordering of rendered page files."""

    def test_page_10_sorts_after_page_9(self):
        names = [f"page-{n}.png" for n in (1, 10, 11, 2, 9, 3)]
        assert sorted(names, key=natural_sort_key) == [
            "page-1.png", "page-2.png", "page-3.png", "page-9.png", "page-10.png", "page-11.png"
        ]

    def test_lexical_order_differs(self):
        names = ["page-10.png", "page-2.png"]
        assert sorted(names) == ["page-10.png", "page-2.png"]
        assert sorted(names, key=natural_sort_key) == ["page-2.png", "page-10.png"]


class TestSplit:
    """Test splitting PDFs into page images."""

    def test_all_pages_in_order(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", [f"page {n}" for n in range(1, 13)])

        with PageSplitter(dpi=36).split(pdf) as pages:
            assert [p.index for p in pages] == list(range(1, 13))
            assert all(p.mime_type == "image/png" for p in pages)
            assert all(p.image_bytes.startswith(PNG_SIGNATURE) for p in pages)

    def test_single_page_selector(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one", "two", "three"])

        with PageSplitter(dpi=36).split(pdf, page_number=2) as pages:
            assert len(pages) == 1
            assert pages[0].index == 2

    def test_selector_beyond_page_count(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one", "two"])

        with pytest.raises(InvalidPageError) as exc_info:
            with PageSplitter(dpi=36).split(pdf, page_number=3):
                pass

        assert exc_info.value.page_count == 2

    def test_selector_zero_is_invalid(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one"])

        with pytest.raises(InvalidPageError):
            with PageSplitter(dpi=36).split(pdf, page_number=0):
                pass

    def test_default_resolution_is_150_dpi(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one"])
        splitter = PageSplitter()
        assert splitter.dpi == 150

        with splitter.split(pdf) as pages:
            with Image.open(pages[0].path) as img:
                # 200pt page at 150 DPI
                assert 416 <= img.size[0] <= 417

    def test_corrupt_pdf_raises_conversion_error(self, tmp_path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"this is not a pdf at all")

        with pytest.raises(ConversionError):
            with PageSplitter(dpi=36).split(bad):
                pass


class TestWorkspaceCleanup:
    """Test that rendered images never outlive the split context."""

    def test_removed_after_success(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one", "two"])

        with PageSplitter(dpi=36).split(pdf) as pages:
            workspace = pages[0].path.parent
            assert workspace.exists()

        assert not workspace.exists()

    def test_removed_after_error_in_body(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one", "two"])
        seen = {}

        with pytest.raises(RuntimeError):
            with PageSplitter(dpi=36).split(pdf) as pages:
                seen["workspace"] = pages[0].path.parent
                raise RuntimeError("boom")

        assert not seen["workspace"].exists()

    def test_removed_after_interrupt(self, pdf_factory):
        pdf = pdf_factory("doc.pdf", ["one", "two"])
        seen = {}

        with pytest.raises(KeyboardInterrupt):
            with PageSplitter(dpi=36).split(pdf) as pages:
                seen["workspace"] = pages[0].path.parent
                raise KeyboardInterrupt

        assert not seen["workspace"].exists()

    def test_removed_after_invalid_page(self, pdf_factory, monkeypatch):
        created = []
        original = tempfile.TemporaryDirectory

        def tracking(*args, **kwargs):
            tmp = original(*args, **kwargs)
            created.append(tmp.name)
            return tmp

        monkeypatch.setattr(tempfile, "TemporaryDirectory", tracking)
        pdf = pdf_factory("doc.pdf", ["one"])

        with pytest.raises(InvalidPageError):
            with PageSplitter(dpi=36).split(pdf, page_number=5):
                pass

        assert created
        assert not any(os.path.exists(name) for name in created)
