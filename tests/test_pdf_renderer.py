"""Tests for PDF layout and rendering."""

import io
import string
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pdfplumber
import pytest
import reportlab
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from finance_reporter.config import Config, FontConfig, PageConfig, ReportConfig
from finance_reporter.models.report import ReportSummary, TimeWindow
from finance_reporter.models.transaction import Transaction, TransactionKind
from finance_reporter.output.pdf_renderer import (
    RenderError,
    ReportRenderer,
    TableHeader,
    font_name_for,
    layout_report,
    register_fonts,
    render_report,
    row_height,
    wrap_text,
)
from finance_reporter.utils.date_utils import LATEST_INSTANT, end_of_day, start_of_day

UTC = timezone.utc
GENERATED_AT = datetime(2025, 3, 12, 8, 0, tzinfo=UTC)
PAGE_BOTTOM = 297 - 15

VERA_TTF = Path(reportlab.__file__).parent / "fonts" / "Vera.ttf"
BENGALI_FONT_CANDIDATES = [
    Path("/usr/share/fonts/truetype/noto/NotoSansBengali-Regular.ttf"),
    Path("/usr/share/fonts/noto/NotoSansBengali-Regular.ttf"),
    Path("/usr/share/fonts/google-noto/NotoSansBengali-Regular.ttf"),
    Path("/usr/share/fonts/truetype/lohit-bengali/Lohit-Bengali.ttf"),
]
BENGALI_TTF = next((p for p in BENGALI_FONT_CANDIDATES if p.is_file()), None)


def create_expense(amount: str, when: datetime, description: str = "Lunch") -> Transaction:
    """Helper to create an expense."""
    return Transaction(
        owner_id="alice",
        description=description,
        amount=Decimal(amount),
        occurred_at=when,
        kind=TransactionKind.EXPENSE,
        category_id="food",
    )


def create_deposit(amount: str, when: datetime, description: str = "Salary") -> Transaction:
    """Helper to create a deposit."""
    return Transaction(
        owner_id="alice",
        description=description,
        amount=Decimal(amount),
        occurred_at=when,
        kind=TransactionKind.DEPOSIT,
    )


def create_summary(
    expenses: list[Transaction] | None = None,
    deposits: list[Transaction] | None = None,
    window: TimeWindow | None = None,
) -> ReportSummary:
    """Helper to build a summary the way the aggregator does."""
    summary = ReportSummary.from_transactions(expenses or [], deposits or [])
    summary.window = window or TimeWindow()
    return summary


def daily_expenses(days: int) -> list[Transaction]:
    """One expense per day starting 2025-01-01."""
    first = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    return [create_expense("1", first + timedelta(days=i), f"Item {i}") for i in range(days)]


def extract_pages(content: bytes) -> list[str]:
    """Extract the text of every page of a PDF."""
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


class TestSummaryCards:
    """Tests for the headline cards."""

    def test_empty_summary(self) -> None:
        """Test that an empty report shows zero cards and an empty ledger."""
        document = layout_report(create_summary(), generated_at=GENERATED_AT)

        assert document.page_count == 1
        cards = document.pages[0].cards
        assert [c.label for c in cards] == ["Total Deposits", "Total Expenses", "Current Balance"]
        assert [c.amount_text for c in cards] == ["0.00", "0.00", "0.00"]
        assert document.rows == []
        assert len(document.pages[0].table_headers) == 1

    def test_card_values(self) -> None:
        """Test the signed card texts for a positive balance."""
        summary = create_summary(
            expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC))],
            deposits=[create_deposit("50", datetime(2025, 1, 2, tzinfo=UTC))],
        )

        cards = layout_report(summary, generated_at=GENERATED_AT).pages[0].cards

        assert [c.value_text for c in cards] == ["+ $50.00", "- $10.00", "$40.00"]

    def test_negative_balance_card(self) -> None:
        """Test that a negative balance carries a minus sign before the symbol."""
        summary = create_summary(
            expenses=[create_expense("80", datetime(2025, 1, 1, tzinfo=UTC))],
            deposits=[create_deposit("50", datetime(2025, 1, 1, tzinfo=UTC))],
        )

        balance = layout_report(summary, generated_at=GENERATED_AT).pages[0].cards[2]

        assert balance.amount_text == "30.00"
        assert balance.value_text == "-$30.00"

    def test_half_up_rounding_and_symbol(self) -> None:
        """Test money rounding and a configured currency symbol."""
        config = Config(report=ReportConfig(currency_symbol="€"))
        summary = create_summary(deposits=[create_deposit("2.345", datetime(2025, 1, 1, tzinfo=UTC))])

        cards = layout_report(summary, config, generated_at=GENERATED_AT).pages[0].cards

        assert cards[0].value_text == "+ €2.35"


class TestHeader:
    """Tests for the document header."""

    def test_date_range_shown_for_explicit_window(self) -> None:
        """Test the date range line for a bounded window."""
        window = TimeWindow(
            start=start_of_day(datetime(2025, 1, 1).date()),
            end=end_of_day(datetime(2025, 1, 2).date()),
        )

        texts = layout_report(create_summary(window=window), generated_at=GENERATED_AT).pages[0].texts

        assert "Date Range: 2025-01-01 - 2025-01-02" in texts
        assert "Report generated on: 2025-03-12" in texts

    def test_open_ended_bound(self) -> None:
        """Test that an open upper bound is not printed as a year-9999 date."""
        window = TimeWindow(start=start_of_day(datetime(2025, 1, 1).date()), end=LATEST_INSTANT)

        texts = layout_report(create_summary(window=window), generated_at=GENERATED_AT).pages[0].texts

        assert "Date Range: 2025-01-01 - open" in texts

    def test_no_date_range_for_all_time(self) -> None:
        """Test that an all-time report omits the date range line."""
        texts = layout_report(create_summary(), generated_at=GENERATED_AT).pages[0].texts

        assert not any(t.startswith("Date Range") for t in texts)


class TestLedgerLayout:
    """Tests for the day-by-day ledger table."""

    def test_rows_per_day_ascending(self) -> None:
        """Test one row per calendar day, oldest first, with both columns filled."""
        summary = create_summary(
            expenses=[create_expense("10", datetime(2025, 1, 1, 9, tzinfo=UTC), "Lunch")],
            deposits=[create_deposit("50", datetime(2025, 1, 2, 9, tzinfo=UTC), "Salary")],
        )

        rows = layout_report(summary, generated_at=GENERATED_AT).rows

        assert [r.label for r in rows] == ["2025-01-01", "2025-01-02"]
        assert rows[0].expense_lines == ["Lunch ($10.00)"]
        assert rows[0].deposit_lines == []
        assert rows[1].deposit_lines == ["Salary: $50.00"]
        assert rows[1].expense_lines == []

    def test_same_day_transactions_share_a_row(self) -> None:
        """Test that deposits and expenses on one day land in the same row."""
        day = datetime(2025, 1, 1, tzinfo=UTC)
        summary = create_summary(
            expenses=[
                create_expense("1", day + timedelta(hours=20), "Dinner"),
                create_expense("2", day + timedelta(hours=8), "Coffee"),
            ],
            deposits=[create_deposit("5", day + timedelta(hours=12))],
        )

        rows = layout_report(summary, generated_at=GENERATED_AT).rows

        assert len(rows) == 1
        assert rows[0].expense_lines == ["Coffee ($2.00)", "Dinner ($1.00)"]
        assert rows[0].deposit_lines == ["Salary: $5.00"]

    def test_rows_use_business_date_not_record_date(self) -> None:
        """Test grouping ignores when the record was created."""
        expense = create_expense("1", datetime(2025, 1, 1, tzinfo=UTC))
        expense.recorded_at = datetime(2025, 2, 1, tzinfo=UTC)

        rows = layout_report(create_summary(expenses=[expense]), generated_at=GENERATED_AT).rows

        assert rows[0].label == "2025-01-01"

    def test_row_height(self) -> None:
        """Test row height follows the taller column with a minimum body."""
        assert row_height([], []) == 20
        assert row_height(["a"], ["a", "b"]) == 20
        assert row_height(["a", "b", "c"], ["a"]) == 25

    def test_shading_alternates(self) -> None:
        """Test that consecutive rows alternate their background."""
        rows = layout_report(create_summary(expenses=daily_expenses(3)), generated_at=GENERATED_AT).rows

        assert [r.shaded for r in rows] == [False, True, False]

    def test_long_description_wraps_within_column(self) -> None:
        """Test that a long description wraps and no line overflows the column."""
        description = "Groceries " * 30 + "x" * 120
        summary = create_summary(expenses=[create_expense("1", datetime(2025, 1, 1, tzinfo=UTC), description)])
        document = layout_report(summary, generated_at=GENERATED_AT)

        row = document.rows[0]
        max_width = (210 / 2 - 15 - 5 - 10) * mm
        assert len(row.expense_lines) > 3
        assert row.height == len(row.expense_lines) * 5 + 10
        for line in row.expense_lines:
            assert pdfmetrics.stringWidth(line, "Helvetica", 10) <= max_width


class TestPagination:
    """Tests for splitting the ledger across pages."""

    def test_many_days_paginate(self) -> None:
        """Test that overflow continues on new pages with a repeated header."""
        document = layout_report(create_summary(expenses=daily_expenses(60)), generated_at=GENERATED_AT)

        assert document.page_count > 1
        assert len(document.rows) == 60
        days = [r.day for r in document.rows]
        assert days == sorted(days)
        for page in document.pages[1:]:
            assert isinstance(page.items[0], TableHeader)
            assert isinstance(page.ledger_items[0], TableHeader)
            assert page.rows[0].shaded is False

    def test_rows_stay_above_bottom_margin(self) -> None:
        """Test that regular rows never cross the bottom margin."""
        document = layout_report(create_summary(expenses=daily_expenses(60)), generated_at=GENERATED_AT)

        for row in document.rows:
            assert row.y + row.height <= PAGE_BOTTOM

    def test_oversized_row_gets_its_own_page(self) -> None:
        """Test that a row taller than a page moves to a fresh page and overflows there."""
        day = datetime(2025, 1, 1, tzinfo=UTC)
        expenses = [create_expense("1", day + timedelta(minutes=i), f"Item {i}") for i in range(80)]

        document = layout_report(create_summary(expenses=expenses), generated_at=GENERATED_AT)

        assert document.page_count == 2
        assert document.pages[0].rows == []
        [row] = document.pages[1].rows
        assert len(row.expense_lines) == 80
        assert row.y + row.height > PAGE_BOTTOM

    def test_row_after_oversized_row_starts_new_page(self) -> None:
        """Test that layout continues after an overflowing row."""
        day = datetime(2025, 1, 1, tzinfo=UTC)
        expenses = [create_expense("1", day + timedelta(minutes=i)) for i in range(80)]
        expenses.append(create_expense("1", day + timedelta(days=1)))

        document = layout_report(create_summary(expenses=expenses), generated_at=GENERATED_AT)

        assert document.page_count == 3
        assert [len(p.rows) for p in document.pages] == [0, 1, 1]

    def test_ledger_heading_moves_with_first_row(self) -> None:
        """Test that the ledger title and header are not stranded at a page bottom."""
        # Summary cards end at 99mm; title, header and a minimal row need 35mm more
        config = Config(page=PageConfig(height_mm=140))
        summary = create_summary(expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC))])

        document = layout_report(summary, config, generated_at=GENERATED_AT)

        assert document.page_count == 2
        first, second = document.pages
        assert "Detailed Transactions" not in first.texts
        assert first.table_headers == []
        assert len(first.cards) == 3
        assert second.texts[0] == "Detailed Transactions"
        assert isinstance(second.ledger_items[0], TableHeader)
        [row] = second.rows
        assert row.y == 15 + 8 + 7
        assert row.y + row.height <= 140 - 15

    def test_oversized_first_row_after_moved_heading(self) -> None:
        """Test that an oversized row under a moved heading stays on that page."""
        config = Config(page=PageConfig(height_mm=140))
        day = datetime(2025, 1, 1, tzinfo=UTC)
        expenses = [create_expense("1", day + timedelta(minutes=i)) for i in range(40)]

        document = layout_report(create_summary(expenses=expenses), config, generated_at=GENERATED_AT)

        assert document.page_count == 2
        assert [len(p.rows) for p in document.pages] == [0, 1]
        assert len(document.pages[1].table_headers) == 1


class TestWrapText:
    """Tests for text wrapping."""

    def test_short_text_single_line(self) -> None:
        """Test that short text is not wrapped."""
        assert wrap_text("Lunch ($10.00)", "Helvetica", 10, 200) == ["Lunch ($10.00)"]

    def test_long_word_is_split(self) -> None:
        """Test that a word wider than the column is split without losing characters."""
        word = "a" * 100

        lines = wrap_text(word, "Helvetica", 10, 50)

        assert len(lines) > 1
        assert "".join(lines) == word
        assert all(pdfmetrics.stringWidth(line, "Helvetica", 10) <= 50 for line in lines)

    def test_explicit_newlines(self) -> None:
        """Test that embedded newlines start new lines."""
        assert wrap_text("one\ntwo", "Helvetica", 10, 200) == ["one", "two"]


class TestRendering:
    """Tests for the painted PDF."""

    def test_render_produces_pdf(self) -> None:
        """Test the output is a PDF with the report text."""
        summary = create_summary(
            expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC), "Lunch")],
            deposits=[create_deposit("50", datetime(2025, 1, 2, tzinfo=UTC), "Salary")],
        )

        content = ReportRenderer().render(summary, generated_at=GENERATED_AT)

        assert content.startswith(b"%PDF")
        [text] = extract_pages(content)
        assert "Dashboard Report" in text
        assert "Total Deposits" in text
        assert "Lunch ($10.00)" in text
        assert "Salary: $50.00" in text

    def test_empty_report_renders(self) -> None:
        """Test an empty report still renders a page with zero totals."""
        content = render_report(create_summary())

        [text] = extract_pages(content)
        assert "0.00" in text
        assert "Detailed Transactions" in text

    def test_page_count_matches_layout(self) -> None:
        """Test the painted document has as many pages as the layout."""
        renderer = ReportRenderer()
        summary = create_summary(expenses=daily_expenses(40))

        document = renderer.layout(summary, generated_at=GENERATED_AT)
        pages = extract_pages(renderer.render(summary, generated_at=GENERATED_AT))

        assert len(pages) == document.page_count
        assert "Deposits" in pages[1]
        assert "Expenses" in pages[1]


class TestFonts:
    """Tests for font registration."""

    def test_default_fonts(self) -> None:
        """Test that no configuration selects Helvetica."""
        fonts = register_fonts(FontConfig())

        assert fonts.regular == "Helvetica"
        assert fonts.bold == "Helvetica-Bold"

    def test_missing_font_file(self, tmp_path: Path) -> None:
        """Test that a missing font is a RenderError."""
        config = Config(fonts=FontConfig(regular=str(tmp_path / "missing.ttf")))

        with pytest.raises(RenderError, match="not found"):
            ReportRenderer(config).render(create_summary())

    def test_bold_without_regular(self) -> None:
        """Test that a lone bold font is rejected."""
        with pytest.raises(RenderError):
            register_fonts(FontConfig(bold="bold.ttf"))

    def test_unreadable_font_file(self, tmp_path: Path) -> None:
        """Test that a file that is not a font is a RenderError."""
        bogus = tmp_path / "bogus.ttf"
        bogus.write_bytes(b"not a font")

        with pytest.raises(RenderError, match="Cannot load font"):
            register_fonts(FontConfig(regular=str(bogus)))

    @pytest.mark.skipif(not VERA_TTF.is_file(), reason="reportlab bundled fonts not available")
    def test_custom_ttf_font(self) -> None:
        """Test rendering with a TrueType font for all text."""
        config = Config(fonts=FontConfig(regular=str(VERA_TTF)))
        renderer = ReportRenderer(config)
        summary = create_summary(expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC))])

        document = renderer.layout(summary, generated_at=GENERATED_AT)
        content = renderer.render(summary, generated_at=GENERATED_AT)

        assert document.fonts.regular.startswith("FinanceReporter-Vera-")
        assert document.fonts.bold == document.fonts.regular
        assert content.startswith(b"%PDF")

    @pytest.mark.skipif(not VERA_TTF.is_file(), reason="reportlab bundled fonts not available")
    def test_same_file_name_in_different_directories(self, tmp_path: Path) -> None:
        """Test that two fonts sharing a file name register under different names."""
        first = tmp_path / "a" / "Report.ttf"
        second = tmp_path / "b" / "Report.ttf"
        for path in (first, second):
            path.parent.mkdir()
            path.write_bytes(VERA_TTF.read_bytes())

        fonts_a = register_fonts(FontConfig(regular=str(first)))
        fonts_b = register_fonts(FontConfig(regular=str(second)))

        assert fonts_a.regular != fonts_b.regular
        assert fonts_a.regular == font_name_for(first)
        assert fonts_b.regular == font_name_for(second)


def font_covers(path: Path | None, text: str) -> bool:
    """Whether a TTF file has a glyph for every character of text."""
    if path is None:
        return False
    glyphs = TTFont("coverage-check", str(path)).face.charToGlyph
    return all(ord(char) in glyphs for char in text if not char.isspace())


class TestGlyphCoverage:
    """Tests that text the fonts cannot draw is rejected instead of garbled."""

    def test_helvetica_rejects_bengali_description(self) -> None:
        """Test that a Bengali description with the built-in fonts is a RenderError."""
        summary = create_summary(expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC), "বাজার")])

        with pytest.raises(RenderError, match="no glyph"):
            layout_report(summary, generated_at=GENERATED_AT)

    def test_helvetica_rejects_taka_symbol(self) -> None:
        """Test that the taka sign as currency symbol is a RenderError with Helvetica."""
        config = Config(report=ReportConfig(currency_symbol="৳"))

        with pytest.raises(RenderError, match="U\\+09F3"):
            render_report(create_summary(), config)

    def test_latin_accents_pass_with_helvetica(self) -> None:
        """Test that WinAnsi characters are accepted by the built-in fonts."""
        summary = create_summary(expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC), "Café crème")])

        document = layout_report(summary, generated_at=GENERATED_AT)

        assert document.rows[0].expense_lines == ["Café crème ($10.00)"]

    @pytest.mark.skipif(not VERA_TTF.is_file(), reason="reportlab bundled fonts not available")
    def test_ttf_without_bengali_rejected(self) -> None:
        """Test that a TrueType font lacking Bengali glyphs is a RenderError."""
        config = Config(fonts=FontConfig(regular=str(VERA_TTF)))
        summary = create_summary(deposits=[create_deposit("10", datetime(2025, 1, 1, tzinfo=UTC), "বেতন")])

        with pytest.raises(RenderError, match="no glyph for 'ব'"):
            ReportRenderer(config).render(summary, generated_at=GENERATED_AT)

    @pytest.mark.skipif(
        not font_covers(BENGALI_TTF, "বাজার৳" + string.ascii_letters + string.digits + string.punctuation),
        reason="no installed font covers both Bengali and Latin text",
    )
    def test_bengali_font_renders(self) -> None:
        """Test that a covering font renders Bengali text and the taka sign."""
        config = Config(
            report=ReportConfig(currency_symbol="৳"),
            fonts=FontConfig(regular=str(BENGALI_TTF)),
        )
        summary = create_summary(expenses=[create_expense("10", datetime(2025, 1, 1, tzinfo=UTC), "বাজার")])
        renderer = ReportRenderer(config)

        document = renderer.layout(summary, generated_at=GENERATED_AT)
        content = renderer.render(summary, generated_at=GENERATED_AT)

        assert document.rows[0].expense_lines == ["বাজার (৳10.00)"]
        assert content.startswith(b"%PDF")
