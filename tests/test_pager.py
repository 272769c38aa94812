"""Tests for the layout cursor."""

from __future__ import annotations

import pytest

from leadgen.report.layout import DEFAULT_LAYOUT, LayoutConfig, Margins
from leadgen.report.pager import Pager, StyledRun


LAYOUT = DEFAULT_LAYOUT


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------

class TestWrap:
    def test_short_text_is_one_row(self, pager):
        rows = pager.wrap([StyledRun('Acme Corp', LAYOUT.body)], 200)
        assert len(rows) == 1
        assert rows[0][0].text == 'Acme Corp'

    def test_rows_fit_width(self, pager):
        text = ' '.join(['lead'] * 60)
        rows = pager.wrap([StyledRun(text, LAYOUT.body)], 120)
        assert len(rows) > 1
        for row in rows:
            width = sum(pager.measure(run.text, run.style) for run in row)
            assert width <= 120

    def test_overlong_word_is_split_by_character(self, pager):
        token = 'x' * 200
        rows = pager.wrap([StyledRun(token, LAYOUT.body)], 50)
        assert len(rows) > 1
        assert ''.join(run.text for row in rows for run in row) == token

    def test_styles_survive_and_merge(self, pager):
        runs = [StyledRun('Name:', LAYOUT.bold), StyledRun(' Acme Corp', LAYOUT.body)]
        rows = pager.wrap(runs, 400)
        assert [run.style for run in rows[0]] == [LAYOUT.bold, LAYOUT.body]
        assert rows[0][1].text == ' Acme Corp'

    def test_empty_input_has_no_rows(self, pager):
        assert pager.wrap([StyledRun('', LAYOUT.body)], 100) == []


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

class TestPagination:
    def test_ensure_room_breaks_when_crossing_bottom(self, pager, surface):
        pager.y = pager.bottom - 10
        assert pager.ensure_room(20) is True
        assert surface.page_number() == 2
        assert pager.y == LAYOUT.margins.top

    def test_ensure_room_keeps_page_when_it_fits(self, pager, surface):
        pager.y = pager.bottom - 30
        assert pager.ensure_room(20) is False
        assert surface.page_number() == 1

    def test_ensure_room_never_breaks_at_page_top(self, pager, surface):
        assert pager.ensure_room(10_000) is False
        assert surface.page_number() == 1

    def test_check_threshold_uses_distance_to_page_edge(self, pager, surface):
        pager.y = LAYOUT.page_height - 101
        assert pager.check_threshold() is False
        pager.y = LAYOUT.page_height - 99
        assert pager.check_threshold() is True
        assert pager.page_breaks == 1

    def test_check_threshold_custom_value(self, pager):
        pager.y = LAYOUT.page_height - 150
        assert pager.check_threshold(200) is True

    def test_flow_paginates_row_by_row(self, pager, surface):
        text = ' '.join(['contact'] * 2000)
        pager.flow([StyledRun(text, LAYOUT.body)])
        assert surface.page_number() > 1
        for op in surface.of_kind('text'):
            assert op.y <= pager.bottom

    def test_move_down_resets_x(self, pager):
        pager.text('a', LAYOUT.body, continued=True)
        pager.move_down(5)
        assert pager.x == pager.left


# ---------------------------------------------------------------------------
# Text placement
# ---------------------------------------------------------------------------

class TestText:
    def test_continued_runs_share_a_row(self, pager, surface):
        first_width = pager.text('Name: ', LAYOUT.bold, continued=True)
        pager.text('Acme', LAYOUT.body)
        first, second = surface.of_kind('text')
        assert second.y == first.y
        assert second.x == pytest.approx(first.x + first_width)
        assert pager.y == pytest.approx(LAYOUT.margins.top + pager.line_height(LAYOUT.body))

    def test_row_height_is_tallest_run(self, pager):
        pager.text('big', LAYOUT.title, continued=True)
        pager.text('small', LAYOUT.body)
        assert pager.y == pytest.approx(LAYOUT.margins.top + pager.line_height(LAYOUT.title))

    def test_absolute_text_leaves_cursor(self, pager, surface):
        pager.text('footer', LAYOUT.footer, x=100, y=800)
        assert pager.y == LAYOUT.margins.top
        assert pager.x == pager.left
        assert surface.of_kind('text')[0].x == 100

    def test_center_alignment(self, pager, surface):
        width = pager.text('Title', LAYOUT.title, align='center', width=pager.content_width)
        op = surface.of_kind('text')[0]
        assert op.x == pytest.approx(pager.left + (pager.content_width - width) / 2)

    def test_link_and_underline(self, pager, surface):
        pager.text('[1] Source', LAYOUT.citation_title, link='https://acme.example')
        assert surface.of_kind('link')[0].text == 'https://acme.example'
        assert len(surface.of_kind('line')) == 1

    def test_custom_margins(self, surface):
        layout = LayoutConfig(margins=Margins(top=80, bottom=80, left=30, right=30))
        pager = Pager(surface, layout)
        assert pager.y == 80
        assert pager.content_width == pytest.approx(layout.page_width - 60)
