"""Tests for page extraction stage."""

import pytest

from conftest import parse_text
from dxfwin.models import BBox, DrawingPage, Point, Window
from dxfwin.pipeline.stage_extract import PageExtractor, extract_pages, percent, summarize


@pytest.fixture
def document(window_drawing):
    return parse_text(window_drawing)


class TestPageExtractor:
    """Tests for splitting a drawing into pages."""

    def test_collect(self, document):
        """Top-level entities are sorted into their roles."""
        extractor = PageExtractor(document)
        extractor.collect()

        assert [f.insertion_point.x for f in extractor.frames] == [0, 4000]
        assert len(extractor.infos) == 2
        assert len(extractor.dimensions) == 4
        # Four sides of each window
        assert len(extractor.fragments) == 8

    def test_collect_twice_does_not_duplicate(self, document):
        extractor = PageExtractor(document)
        extractor.collect()
        extractor.collect()

        assert len(extractor.fragments) == 8

    def test_pages_left_to_right(self, document):
        """Pages come out in frame order with their own info records."""
        first, second = extract_pages(document)

        assert first.box == BBox(min=Point(x=0, y=0), max=Point(x=3000, y=4000))
        assert first.serial == "1"
        assert first.building == "A-1"
        assert second.serial == "2"
        assert second.building == "B-2"

    def test_nested_block_window(self, document):
        """Outline lines two blocks deep resolve to world coordinates."""
        first, _ = extract_pages(document)

        (window,) = first.windows
        assert window.box == BBox(min=Point(x=500, y=1000), max=Point(x=1700, y=2500))
        assert window.widths == [1200]
        assert window.heights == [1500]
        assert window.verified(1.0)

    def test_top_level_window(self, document):
        _, second = extract_pages(document)

        (window,) = second.windows
        assert (window.width, window.height) == (900, 600)
        assert window.widths == [900]
        assert window.heights == [600]

    def test_annotation_layer_filter(self, document):
        """Dimensions on other layers are ignored."""
        pages = extract_pages(document, annotation_layer="NOTES")

        for page in pages:
            (window,) = page.windows
            assert window.widths == []
            assert not window.verified(1.0)

    def test_outline_layer_option(self, document):
        """Another outline layer finds no windows here."""
        pages = extract_pages(document, outline_layer="WALL")

        assert [page.windows for page in pages] == [[], []]

    def test_progress_callback(self, document):
        """Progress reports both phases and ends at 100."""
        calls = []
        extract_pages(document, progress=lambda value, label: calls.append((value, label)))

        labels = {label for _, label in calls}
        assert labels == {"Collecting entities", "Resolving windows"}
        assert all(0 <= value <= 100 for value, _ in calls)
        assert calls[-1] == (100, "Resolving windows")

    def test_no_frames(self, document):
        """Without frame inserts there are no pages."""
        assert extract_pages(document, frame_block="MISSING") == []


class TestPercent:
    def test_percent(self):
        assert percent(1, 4) == 25
        assert percent(3, 3) == 100
        assert percent(0, 0) == 100


class TestSummarize:
    """Tests for run totals."""

    def test_summary_of_drawing(self, document):
        summary = summarize(extract_pages(document))

        assert summary.page_count == 2
        assert summary.attribute_count == 2
        assert summary.attributes_complete
        assert summary.window_count == 2
        assert summary.total_area == pytest.approx(1.8 + 0.54)
        assert summary.mismatch_count == 0

    def test_mismatch_and_missing_info(self):
        """Windows failing verification and pages without info are counted."""
        box = BBox(min=Point(x=0, y=0), max=Point(x=1000, y=1000))
        window = Window(box=box, area=box, widths=[990], heights=[1000])
        pages = [DrawingPage(box=box, windows=[window]), DrawingPage(box=box)]

        summary = summarize(pages, epsilon=1.0)

        assert summary.mismatch_count == 1
        assert summary.attribute_count == 0
        assert not summary.attributes_complete
        assert summarize(pages, epsilon=10.0).mismatch_count == 0

    def test_empty(self):
        summary = summarize([])

        assert summary.page_count == 0
        assert summary.total_area == 0
