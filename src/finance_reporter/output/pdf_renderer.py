"""Paginated PDF rendering of report summaries.

Rendering happens in two passes:

- layout_report() places every block on fixed-size pages and returns a
  Document. Positions are millimetres measured from the top-left corner
  of the page; text is measured with the same fonts used for painting.
- paint_document() draws a Document onto a reportlab canvas and returns
  the PDF bytes.

The ledger is a two-column table (deposits left, expenses right) with one
row per calendar day. Both columns share a single vertical cursor, so a
row is as tall as its taller column.
"""

import hashlib
import io
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path

from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from finance_reporter.config import Config, FontConfig, PageConfig, ReportConfig
from finance_reporter.models.report import ReportSummary, TimeWindow
from finance_reporter.models.transaction import Transaction
from finance_reporter.utils.date_utils import (
    EARLIEST_INSTANT,
    LATEST_INSTANT,
    epoch_day,
    format_date,
)
from finance_reporter.utils.decimal_utils import format_currency, format_money
from finance_reporter.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

Color = tuple[int, int, int]

# Vertical extents (mm)
TEXT_LINE_HEIGHT = 5.0
MIN_ROW_BODY_HEIGHT = 10.0
ROW_CHROME_HEIGHT = 10.0  # date label line plus bottom padding
TABLE_HEADER_HEIGHT = 7.0
LEDGER_TITLE_HEIGHT = 8.0
CARD_HEIGHT = 15.0
CARD_SPACING = 5.0
CARD_RADIUS = 3.0
COLUMN_GUTTER = 5.0
CELL_PADDING = 5.0

# Font sizes (pt)
TITLE_SIZE = 22
SECTION_SIZE = 14
CARD_VALUE_SIZE = 16
TABLE_HEADER_SIZE = 12
BODY_SIZE = 10

THEME: dict[str, Color] = {
    "text": (51, 51, 51),
    "title": (0, 102, 204),
    "muted": (150, 150, 150),
    "label": (100, 100, 100),
    "black": (0, 0, 0),
    "rule": (200, 200, 200),
    "table_header": (230, 230, 230),
    "row_shade": (245, 245, 245),
    "deposit": (0, 150, 0),
    "deposit_tint": (240, 255, 240),
    "expense": (200, 0, 0),
    "expense_tint": (255, 240, 240),
    "balance": (0, 0, 200),
    "balance_tint": (240, 240, 255),
}

DEPOSIT_COLUMN_TITLE = "Deposits"
EXPENSE_COLUMN_TITLE = "Expenses"


class RenderError(Exception):
    """Exception raised when a document cannot be produced."""

    pass


@dataclass(frozen=True)
class FontSet:
    """Registered font names for regular and bold text."""

    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"

    def name_for(self, weight: str) -> str:
        return self.bold if weight == "bold" else self.regular


def font_name_for(path: Path) -> str:
    """Registered name for a TTF file, unique per resolved path."""
    digest = hashlib.sha256(str(path.resolve()).encode()).hexdigest()[:8]
    return f"FinanceReporter-{path.stem}-{digest}"


def _register_ttf(path_str: str) -> str:
    path = Path(path_str)
    if not path.is_file():
        raise RenderError(f"Font file not found: {path}")
    name = font_name_for(path)
    if name in pdfmetrics.getRegisteredFontNames():
        return name
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except Exception as e:
        raise RenderError(f"Cannot load font {path}: {e}") from e
    logger.debug(f"Registered font {name} from {path}")
    return name


def register_fonts(fonts: FontConfig) -> FontSet:
    """Register configured TrueType fonts with reportlab.

    Args:
        fonts: Font configuration; an unset regular path selects Helvetica.

    Returns:
        FontSet naming the registered faces.

    Raises:
        RenderError: If a configured font is missing or unreadable.
    """
    if not fonts.regular:
        if fonts.bold:
            raise RenderError("A bold font was configured without a regular font")
        return FontSet()
    regular = _register_ttf(fonts.regular)
    bold = _register_ttf(fonts.bold) if fonts.bold else regular
    return FontSet(regular=regular, bold=bold)


def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    """Word-wrap text so every line fits within max_width points.

    Explicit newlines start new lines. Words wider than the column are split
    across lines by character, so no text is ever dropped.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if pdfmetrics.stringWidth(candidate, font_name, font_size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            # Hard-split an over-long word
            for char in word:
                if current and pdfmetrics.stringWidth(current + char, font_name, font_size) > max_width:
                    lines.append(current)
                    current = char
                else:
                    current += char
        lines.append(current)
    return lines


# -----------------------------------------------------------------------------
# Document model
# -----------------------------------------------------------------------------


@dataclass
class TextItem:
    """A single line of text; y is the baseline."""

    text: str
    x: float
    y: float
    size: float
    color: Color
    weight: str = "regular"


@dataclass
class RuleItem:
    """A horizontal divider line."""

    x1: float
    x2: float
    y: float
    color: Color


@dataclass
class SummaryCard:
    """A tinted card showing one headline total."""

    label: str
    amount_text: str
    value_text: str
    x: float
    y: float
    width: float
    height: float
    fill: Color
    color: Color


@dataclass
class TableHeader:
    """Column titles for the two-column ledger."""

    y: float
    height: float = TABLE_HEADER_HEIGHT
    titles: tuple[str, str] = (DEPOSIT_COLUMN_TITLE, EXPENSE_COLUMN_TITLE)


@dataclass
class LedgerRow:
    """One calendar day of the ledger."""

    day: date
    label: str
    deposit_lines: list[str]
    expense_lines: list[str]
    y: float
    height: float
    shaded: bool


PageItem = TextItem | RuleItem | SummaryCard | TableHeader | LedgerRow


@dataclass
class Page:
    """A fixed-size page holding positioned items in drawing order."""

    number: int
    items: list[PageItem] = field(default_factory=list)

    @property
    def rows(self) -> list[LedgerRow]:
        return [item for item in self.items if isinstance(item, LedgerRow)]

    @property
    def table_headers(self) -> list[TableHeader]:
        return [item for item in self.items if isinstance(item, TableHeader)]

    @property
    def cards(self) -> list[SummaryCard]:
        return [item for item in self.items if isinstance(item, SummaryCard)]

    @property
    def ledger_items(self) -> list[PageItem]:
        """Table headers and rows in the order they were placed."""
        return [item for item in self.items if isinstance(item, (TableHeader, LedgerRow))]

    @property
    def texts(self) -> list[str]:
        return [item.text for item in self.items if isinstance(item, TextItem)]


@dataclass
class Document:
    """Ordered pages plus the geometry and fonts needed to paint them."""

    width: float
    height: float
    margin: float
    fonts: FontSet
    pages: list[Page] = field(default_factory=list)

    @property
    def rows(self) -> list[LedgerRow]:
        return [row for page in self.pages for row in page.rows]

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class Geometry:
    """Derived page measurements (mm)."""

    width: float
    height: float
    margin: float

    @classmethod
    def from_config(cls, page: PageConfig) -> "Geometry":
        return cls(width=page.width_mm, height=page.height_mm, margin=page.margin_mm)

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def bottom(self) -> float:
        """Lowest y a row may reach."""
        return self.height - self.margin

    @property
    def left_x(self) -> float:
        return self.margin

    @property
    def right_x(self) -> float:
        return self.width / 2

    @property
    def column_width(self) -> float:
        return self.width / 2 - self.margin - COLUMN_GUTTER

    @property
    def text_width_pt(self) -> float:
        """Wrapping width for ledger text, in points."""
        return (self.column_width - 2 * CELL_PADDING) * mm


@dataclass
class LayoutContext:
    """Mutable layout state threaded through every placement step.

    Attributes:
        document: Document being built.
        geometry: Page measurements.
        cursor: Current vertical position on the current page.
        shaded: Whether the next ledger row gets a background.
    """

    document: Document
    geometry: Geometry
    cursor: float = 0.0
    shaded: bool = False

    @property
    def page(self) -> Page:
        return self.document.pages[-1]

    def new_page(self) -> Page:
        """Start a page and reset the cursor and row shading."""
        page = Page(number=len(self.document.pages) + 1)
        self.document.pages.append(page)
        self.cursor = self.geometry.margin
        self.shaded = False
        return page

    def fits(self, height: float) -> bool:
        return self.cursor + height <= self.geometry.bottom

    def place(self, item: PageItem) -> None:
        self.page.items.append(item)

    def text(
        self,
        text: str,
        size: float,
        color: Color,
        weight: str = "regular",
        x: float | None = None,
    ) -> None:
        x = self.geometry.margin if x is None else x
        self.place(TextItem(text=text, x=x, y=self.cursor, size=size, color=color, weight=weight))


# -----------------------------------------------------------------------------
# Layout
# -----------------------------------------------------------------------------


def group_by_day(transactions: list[Transaction]) -> dict[int, list[Transaction]]:
    """Group transactions by business date, keyed by epoch day in ascending order."""
    groups: dict[int, list[Transaction]] = {}
    for txn in sorted(transactions, key=lambda t: t.occurred_at):
        groups.setdefault(epoch_day(txn.business_date), []).append(txn)
    return dict(sorted(groups.items()))


def _format_bound(moment: datetime, fmt: str) -> str:
    if moment == EARLIEST_INSTANT:
        return "beginning"
    if moment == LATEST_INSTANT:
        return "open"
    return format_date(moment.astimezone(timezone.utc).date(), fmt)


def _layout_header(
    ctx: LayoutContext,
    window: TimeWindow,
    report: ReportConfig,
    generated_at: datetime,
) -> None:
    ctx.text(report.title, TITLE_SIZE, THEME["title"])
    ctx.cursor += 8
    ctx.text(report.subtitle, BODY_SIZE, THEME["muted"])
    ctx.cursor += 10
    ctx.text(
        f"Report generated on: {format_date(generated_at.date(), report.date_format)}",
        BODY_SIZE,
        THEME["text"],
    )
    ctx.cursor += 8
    if window.has_explicit_bounds:
        start = _format_bound(window.start, report.date_format)  # type: ignore[arg-type]
        end = _format_bound(window.end, report.date_format)  # type: ignore[arg-type]
        ctx.text(f"Date Range: {start} - {end}", BODY_SIZE, THEME["text"])
        ctx.cursor += 10
    ctx.cursor += 10


def _layout_summary(ctx: LayoutContext, summary: ReportSummary, report: ReportConfig) -> None:
    geometry = ctx.geometry
    ctx.text("Financial Summary", SECTION_SIZE, THEME["black"], weight="bold")
    ctx.cursor += 8
    ctx.place(RuleItem(geometry.margin, geometry.width - geometry.margin, ctx.cursor, THEME["rule"]))
    ctx.cursor += 5

    symbol = report.currency_symbol
    balance_sign = "-" if summary.balance < 0 else ""
    cards = [
        ("Total Deposits", summary.total_deposits, "+ ", "deposit"),
        ("Total Expenses", summary.total_expenses, "- ", "expense"),
        ("Current Balance", summary.balance, balance_sign, "balance"),
    ]
    slot = geometry.content_width / 3
    for i, (label, amount, prefix, tone) in enumerate(cards):
        amount_text = format_currency(abs(amount), include_sign=False)
        last = i == len(cards) - 1
        ctx.place(SummaryCard(
            label=label,
            amount_text=amount_text,
            value_text=f"{prefix}{symbol}{amount_text}",
            x=geometry.margin + i * slot,
            y=ctx.cursor,
            width=slot if last else slot - CARD_SPACING,
            height=CARD_HEIGHT,
            fill=THEME[f"{tone}_tint"],
            color=THEME[tone],
        ))
    ctx.cursor += CARD_HEIGHT + 20


def _layout_table_header(ctx: LayoutContext) -> None:
    ctx.place(TableHeader(y=ctx.cursor))
    ctx.cursor += TABLE_HEADER_HEIGHT


def _row_lines(
    transactions: list[Transaction],
    template: str,
    fonts: FontSet,
    geometry: Geometry,
    symbol: str,
) -> list[str]:
    lines: list[str] = []
    for txn in transactions:
        text = template.format(
            description=txn.description,
            amount=format_money(txn.amount, symbol),
        )
        lines.extend(wrap_text(text, fonts.regular, BODY_SIZE, geometry.text_width_pt))
    return lines


def row_height(deposit_lines: list[str], expense_lines: list[str]) -> float:
    """Vertical extent of a ledger row holding the given wrapped lines."""
    body = max(
        len(deposit_lines) * TEXT_LINE_HEIGHT,
        len(expense_lines) * TEXT_LINE_HEIGHT,
        MIN_ROW_BODY_HEIGHT,
    )
    return body + ROW_CHROME_HEIGHT


def _layout_ledger(ctx: LayoutContext, summary: ReportSummary, report: ReportConfig) -> None:
    fonts = ctx.document.fonts
    geometry = ctx.geometry
    deposits_by_day = group_by_day(summary.deposits)
    expenses_by_day = group_by_day(summary.expenses)
    days = sorted(set(deposits_by_day) | set(expenses_by_day))

    # Keep the heading with room for at least one minimal row
    if not ctx.fits(LEDGER_TITLE_HEIGHT + TABLE_HEADER_HEIGHT + row_height([], [])):
        ctx.new_page()
    top_of_page = ctx.cursor == geometry.margin

    ctx.text("Detailed Transactions", SECTION_SIZE, THEME["black"], weight="bold")
    ctx.cursor += LEDGER_TITLE_HEIGHT
    _layout_table_header(ctx)
    # Cursor position of the first row on a page that holds only headings
    rows_top = ctx.cursor if top_of_page else None

    for key in days:
        deposit_lines = _row_lines(
            deposits_by_day.get(key, []), "{description}: {amount}",
            fonts, geometry, report.currency_symbol,
        )
        expense_lines = _row_lines(
            expenses_by_day.get(key, []), "{description} ({amount})",
            fonts, geometry, report.currency_symbol,
        )
        height = row_height(deposit_lines, expense_lines)

        # A row taller than a whole page still goes on a fresh page, and overflows
        fresh_page = ctx.cursor == rows_top
        if not ctx.fits(height) and not fresh_page:
            ctx.new_page()
            _layout_table_header(ctx)
            rows_top = ctx.cursor

        day = date.fromordinal(key)
        ctx.place(LedgerRow(
            day=day,
            label=format_date(day, report.date_format),
            deposit_lines=deposit_lines,
            expense_lines=expense_lines,
            y=ctx.cursor,
            height=height,
            shaded=ctx.shaded,
        ))
        ctx.cursor += height
        ctx.shaded = not ctx.shaded


def layout_report(
    summary: ReportSummary,
    config: Config | None = None,
    fonts: FontSet | None = None,
    generated_at: datetime | None = None,
) -> Document:
    """Lay out a report summary onto pages.

    Args:
        summary: Aggregated report data.
        config: Report, page and font configuration (defaults if None).
        fonts: Already registered fonts (registered from config if None).
        generated_at: Timestamp printed in the header (defaults to now, UTC).

    Returns:
        The laid-out Document.

    Raises:
        RenderError: If fonts cannot be registered.
    """
    config = config or Config()
    fonts = fonts or register_fonts(config.fonts)
    generated_at = generated_at or datetime.now(timezone.utc)
    geometry = Geometry.from_config(config.page)

    ctx = LayoutContext(
        document=Document(
            width=geometry.width, height=geometry.height, margin=geometry.margin, fonts=fonts
        ),
        geometry=geometry,
    )
    ctx.new_page()
    _layout_header(ctx, summary.window, config.report, generated_at)
    _layout_summary(ctx, summary, config.report)
    _layout_ledger(ctx, summary, config.report)
    check_glyphs(ctx.document)
    return ctx.document


def _item_texts(item: PageItem, fonts: FontSet) -> list[tuple[str, str]]:
    """(font name, text) pairs an item will paint."""
    if isinstance(item, TextItem):
        return [(fonts.name_for(item.weight), item.text)]
    if isinstance(item, SummaryCard):
        return [(fonts.regular, item.value_text), (fonts.regular, item.label)]
    if isinstance(item, TableHeader):
        return [(fonts.bold, title) for title in item.titles]
    if isinstance(item, LedgerRow):
        lines = item.deposit_lines + item.expense_lines
        return [(fonts.bold, item.label)] + [(fonts.regular, line) for line in lines]
    return []


def _missing_glyph(font_name: str, text: str) -> str | None:
    font = pdfmetrics.getFont(font_name)
    if isinstance(font, TTFont):
        glyphs = font.face.charToGlyph
        for char in text:
            if not char.isspace() and ord(char) not in glyphs:
                return char
        return None
    # Built-in faces only cover WinAnsi (cp1252)
    for char in text:
        try:
            char.encode("cp1252")
        except UnicodeEncodeError:
            return char
    return None


def check_glyphs(document: Document) -> None:
    """Verify the document's fonts can draw every character it holds.

    Raises:
        RenderError: Naming the first character the font lacks, instead of
            letting it be painted as a blank or substitute glyph.
    """
    for page in document.pages:
        for item in page.items:
            for font_name, text in _item_texts(item, document.fonts):
                char = _missing_glyph(font_name, text)
                if char is not None:
                    raise RenderError(
                        f"Font {font_name} has no glyph for {char!r} (U+{ord(char):04X}) "
                        f"in {text!r}; configure fonts.regular/fonts.bold with a font that covers it"
                    )


# -----------------------------------------------------------------------------
# Painting
# -----------------------------------------------------------------------------


def _rgb(color: Color) -> tuple[float, float, float]:
    return (color[0] / 255, color[1] / 255, color[2] / 255)


class _Painter:
    """Draws Document items onto a reportlab canvas (top-left mm coordinates)."""

    def __init__(self, c: canvas.Canvas, document: Document):
        self.c = c
        self.document = document
        self.fonts = document.fonts

    def _y(self, y_mm: float) -> float:
        return (self.document.height - y_mm) * mm

    def _text(self, text: str, x: float, y: float, size: float, color: Color, weight: str = "regular") -> None:
        self.c.setFont(self.fonts.name_for(weight), size)
        self.c.setFillColorRGB(*_rgb(color))
        self.c.drawString(x * mm, self._y(y), text)

    def _rect(self, x: float, y: float, w: float, h: float, fill: Color, radius: float = 0.0) -> None:
        self.c.setFillColorRGB(*_rgb(fill))
        if radius:
            self.c.roundRect(x * mm, self._y(y + h), w * mm, h * mm, radius * mm, stroke=0, fill=1)
        else:
            self.c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)

    def paint(self, item: PageItem, geometry: Geometry) -> None:
        if isinstance(item, TextItem):
            self._text(item.text, item.x, item.y, item.size, item.color, item.weight)
        elif isinstance(item, RuleItem):
            self.c.setStrokeColorRGB(*_rgb(item.color))
            self.c.line(item.x1 * mm, self._y(item.y), item.x2 * mm, self._y(item.y))
        elif isinstance(item, SummaryCard):
            self._rect(item.x, item.y, item.width, item.height, item.fill, CARD_RADIUS)
            self._text(item.value_text, item.x + 5, item.y + 9, CARD_VALUE_SIZE, item.color)
            self._text(item.label, item.x + 5, item.y + 13, BODY_SIZE, THEME["label"])
        elif isinstance(item, TableHeader):
            for x, title in zip((geometry.left_x, geometry.right_x), item.titles):
                self._rect(x, item.y, geometry.column_width, item.height, THEME["table_header"])
                self._text(title, x + CELL_PADDING, item.y + 5, TABLE_HEADER_SIZE, THEME["text"], "bold")
        elif isinstance(item, LedgerRow):
            self._paint_row(item, geometry)

    def _paint_row(self, row: LedgerRow, geometry: Geometry) -> None:
        columns = (
            (geometry.left_x, row.deposit_lines, THEME["deposit"]),
            (geometry.right_x, row.expense_lines, THEME["expense"]),
        )
        for x, lines, color in columns:
            if row.shaded:
                self._rect(x, row.y, geometry.column_width, row.height - CELL_PADDING, THEME["row_shade"])
            self._text(row.label, x + CELL_PADDING, row.y + 5, BODY_SIZE, THEME["black"], "bold")
            for i, line in enumerate(lines):
                self._text(line, x + CELL_PADDING, row.y + 10 + i * TEXT_LINE_HEIGHT, BODY_SIZE, color)


def paint_document(document: Document) -> bytes:
    """Draw a laid-out Document and return the PDF bytes.

    Raises:
        RenderError: If reportlab fails to produce the document.
    """
    buffer = io.BytesIO()
    geometry = Geometry(document.width, document.height, document.margin)
    try:
        c = canvas.Canvas(buffer, pagesize=(document.width * mm, document.height * mm))
        painter = _Painter(c, document)
        for page in document.pages:
            for item in page.items:
                painter.paint(item, geometry)
            c.showPage()
        c.save()
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Failed to draw document: {e}") from e
    return buffer.getvalue()


class ReportRenderer:
    """Renders report summaries as paginated PDF documents."""

    def __init__(self, config: Config | None = None):
        """Initialize the renderer.

        Args:
            config: Application configuration (report text, page, fonts).
        """
        self.config = config or Config()
        self._fonts: FontSet | None = None

    @property
    def fonts(self) -> FontSet:
        """Registered fonts, loaded on first use."""
        if self._fonts is None:
            self._fonts = register_fonts(self.config.fonts)
        return self._fonts

    def layout(self, summary: ReportSummary, generated_at: datetime | None = None) -> Document:
        """Lay out a summary without painting it."""
        return layout_report(summary, self.config, self.fonts, generated_at)

    def render(self, summary: ReportSummary, generated_at: datetime | None = None) -> bytes:
        """Render a summary to PDF bytes.

        Raises:
            RenderError: If fonts are unavailable or drawing fails.
        """
        with LogContext(logger, "render", deposits=len(summary.deposits), expenses=len(summary.expenses)):
            document = self.layout(summary, generated_at)
            content = paint_document(document)
        logger.info(f"Rendered report: {document.page_count} page(s), {len(document.rows)} ledger rows")
        return content


def render_report(summary: ReportSummary, config: Config | None = None) -> bytes:
    """Render a summary to PDF bytes with a one-off renderer."""
    return ReportRenderer(config).render(summary)

