"""
Document export: page plans, parallel rasterization, and PDF assembly.
"""

# Standard Library
import concurrent.futures
import dataclasses
import io
import logging
import os
import threading
import typing

# PIP3 modules
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.image_fit
import photo_calendar.layout
import photo_calendar.render
import photo_calendar.surface


CalendarProject = pcal.config.CalendarProject
ImageCache = pcal.image_fit.ImageCache
RasterSurface = pcal.surface.RasterSurface
PagePlan = pcal.render.PagePlan
PageKind = pcal.render.PageKind
ImageLoader = pcal.render.ImageLoader

DEFAULT_TARGET_DPI = pcal.config.DEFAULT_TARGET_DPI
MONTHS_PER_YEAR = pcal.config.MONTHS_PER_YEAR
FRONT_COVER_INDEX = pcal.config.FRONT_COVER_INDEX
BACK_COVER_INDEX = pcal.config.BACK_COVER_INDEX
PREVIOUS_DECEMBER_INDEX = pcal.config.PREVIOUS_DECEMBER_INDEX
FAILED_PAGE_TEXT = pcal.config.FAILED_PAGE_TEXT
PLACEHOLDER_FILL_COLOR = pcal.config.PLACEHOLDER_FILL_COLOR
PLACEHOLDER_BORDER_COLOR = pcal.config.PLACEHOLDER_BORDER_COLOR
HINT_TEXT_SIZE = pcal.config.HINT_TEXT_SIZE

# (photo offset, calendar offset, rotated) for the seven folded sheets,
# front then upside-down back, before the covers sheet.
DOUBLE_SIDED_SCHEDULE = (
	(0, 0, False),
	(11, 1, True),
	(11, 1, False),
	(10, 2, True),
	(10, 2, False),
	(9, 3, True),
	(9, 3, False),
	(8, 4, True),
	(8, 4, False),
	(7, 5, True),
	(7, 5, False),
	(6, 6, True),
	(6, 6, False),
)
PREVIOUS_DECEMBER_PHOTO_OFFSET = 6

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ExportProgress:
	current: int
	total: int
	status: str


@dataclasses.dataclass(frozen=True)
class RenderedPage:
	index: int
	png_bytes: bytes
	width_px: int
	height_px: int
	width_pt: float
	height_pt: float
	scale: float
	label: str = ""


@dataclasses.dataclass
class ExportResult:
	pages: list[RenderedPage]
	total_requested: int
	cancelled: bool = False
	failed_indices: list[int] = dataclasses.field(default_factory=list)
	document: bytes = b""


ProgressCallback = typing.Callable[[ExportProgress], None]


#============================================
def plan_single(offset: int) -> list[PagePlan]:
	return [pcal.render.plan_for_offset(offset)]


#============================================
def plan_year(include_cover: bool = True) -> list[PagePlan]:
	"""
	Plans for a year: optional front cover, twelve months, back cover.

	Args:
		include_cover: Include the front cover page.

	Returns:
		List of PagePlan.
	"""
	plans = []
	if include_cover:
		plans.append(pcal.render.plan_for_offset(FRONT_COVER_INDEX))
	for offset in range(MONTHS_PER_YEAR):
		plans.append(pcal.render.plan_for_offset(offset))
	plans.append(pcal.render.plan_for_offset(BACK_COVER_INDEX))
	return plans


#============================================
def plan_double_sided(project: CalendarProject) -> list[PagePlan]:
	"""
	Plans for a double-sided, folded calendar.

	Each sheet pairs a photo with a later month's grid so the photo faces the
	grid once the stack is folded. With double-sided printing enabled, the
	previous December photos fill the middle sheet. The covers sheet is last.

	Args:
		project: Calendar project.

	Returns:
		Fourteen PagePlan entries.
	"""
	plans = []
	for index, (photo_offset, calendar_offset, rotated) in enumerate(DOUBLE_SIDED_SCHEDULE):
		if project.enable_double_sided and photo_offset == PREVIOUS_DECEMBER_PHOTO_OFFSET:
			photo_offset = PREVIOUS_DECEMBER_INDEX
		side = "Back" if rotated else "Front"
		plans.append(
			PagePlan(
				PageKind.MONTH,
				photo_offset=photo_offset,
				calendar_offset=calendar_offset,
				rotated=rotated,
				label=f"Page {index // 2 + 1} - {side}",
			)
		)
	plans.append(PagePlan(PageKind.COVERS_SHEET, rotated=True, label="Covers Page"))
	return plans


#============================================
def _finish_page(surface: RasterSurface, index: int, label: str) -> RenderedPage:
	return RenderedPage(
		index=index,
		png_bytes=surface.to_png_bytes(),
		width_px=surface.width_px,
		height_px=surface.height_px,
		width_pt=surface.width_pt,
		height_pt=surface.height_pt,
		scale=surface.scale,
		label=label,
	)


#============================================
def rasterize_page(
	project: CalendarProject,
	plan: PagePlan,
	index: int,
	dpi: float = DEFAULT_TARGET_DPI,
	image_loader: ImageLoader | None = None,
	label: str = "",
) -> RenderedPage:
	"""
	Render one page to PNG bytes at a target DPI.

	Args:
		project: Calendar project.
		plan: Page plan.
		index: Page index in the document.
		dpi: Target resolution.
		image_loader: Decoded image provider.
		label: Page label.

	Returns:
		RenderedPage.
	"""
	width, height = pcal.layout.resolve_page_size(project.page)
	surface = RasterSurface(width, height, dpi)
	pcal.render.draw_page(surface, project, plan, image_loader)
	return _finish_page(surface, index, label)


#============================================
def rasterize_failed_page(project: CalendarProject, index: int, dpi: float, label: str = "") -> RenderedPage:
	"""
	Render the placeholder that stands in for a page that failed.
	"""
	width, height = pcal.layout.resolve_page_size(project.page)
	surface = RasterSurface(width, height, dpi)
	content = pcal.layout.compute_content_rect(width, height, project.margins)
	surface.fill_rect(content, PLACEHOLDER_FILL_COLOR)
	surface.stroke_rect(content, PLACEHOLDER_BORDER_COLOR)
	surface.draw_text_centered(FAILED_PAGE_TEXT, content, HINT_TEXT_SIZE, PLACEHOLDER_BORDER_COLOR)
	return _finish_page(surface, index, label)


#============================================
def default_worker_count(page_count: int) -> int:
	return max(1, min(os.cpu_count() or 1, page_count))


#============================================
def render_pages(
	project: CalendarProject,
	plans: list[PagePlan],
	dpi: float = DEFAULT_TARGET_DPI,
	max_workers: int | None = None,
	progress: ProgressCallback | None = None,
	cancel_event: threading.Event | None = None,
	image_cache: ImageCache | None = None,
) -> ExportResult:
	"""
	Rasterize pages on a thread pool.

	Pages are independent and share only the image cache. Cancellation is
	checked before each page starts; pages already rendered are kept. A page
	that raises is replaced by a placeholder and its index recorded.

	Args:
		project: Calendar project.
		plans: Page plans in document order.
		dpi: Target resolution.
		max_workers: Thread count, defaults to the CPU count.
		progress: Called after each page, one call at a time. Errors it
			raises are logged and do not stop the export.
		cancel_event: Set to stop starting new pages.
		image_cache: Shared decoded image cache, a new one when None.

	Returns:
		ExportResult with pages ordered by index.
	"""
	total = len(plans)
	cache = image_cache if image_cache is not None else ImageCache()
	labels = [pcal.render.page_label(project, plan) for plan in plans]
	progress_lock = threading.Lock()
	failed_indices: list[int] = []
	completed = 0

	def render_one(index: int) -> RenderedPage | None:
		nonlocal completed
		if cancel_event is not None and cancel_event.is_set():
			return None
		failed = False
		try:
			page = rasterize_page(project, plans[index], index, dpi, cache.get_or_load, labels[index])
		except Exception as error:
			logger.warning("Page %d (%s) failed to render: %s", index, labels[index], error, exc_info=True)
			page = rasterize_failed_page(project, index, dpi, labels[index])
			failed = True
		with progress_lock:
			completed += 1
			if failed:
				failed_indices.append(index)
			if progress is not None:
				update = ExportProgress(completed, total, f"Rendered {labels[index]} ({completed}/{total})")
				try:
					progress(update)
				except Exception as error:
					logger.warning("Progress callback failed at page %d: %s", index, error, exc_info=True)
		return page

	workers = max_workers if max_workers else default_worker_count(total)
	results: list[RenderedPage | None] = []
	if total > 0:
		with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
			results = list(executor.map(render_one, range(total)))

	pages = [page for page in results if page is not None]
	cancelled = len(pages) < total
	if cancelled:
		logger.debug("Export cancelled after %d of %d pages", len(pages), total)
	return ExportResult(
		pages=pages,
		total_requested=total,
		cancelled=cancelled,
		failed_indices=sorted(failed_indices),
	)


#============================================
def build_page_pdf(page: RenderedPage) -> pypdf.PageObject:
	"""
	Build a one-page PDF holding a rendered page image at its point size.

	Args:
		page: Rendered page.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page.width_pt, page.height_pt))
	image = reportlab.lib.utils.ImageReader(io.BytesIO(page.png_bytes))
	pdf.drawImage(image, 0, 0, width=page.width_pt, height=page.height_pt)
	pdf.showPage()
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def write_pdf_document(pages: list[RenderedPage], output: str | os.PathLike | typing.BinaryIO) -> int:
	"""
	Concatenate rendered pages into one PDF.

	Args:
		pages: Rendered pages in document order.
		output: Output path or binary stream.

	Returns:
		Number of pages written.
	"""
	writer = pypdf.PdfWriter()
	for page in pages:
		writer.add_page(build_page_pdf(page))
	if isinstance(output, (str, os.PathLike)):
		writer.write(os.fspath(output))
	else:
		writer.write(output)
	return len(pages)


#============================================
def export_plans(project: CalendarProject, plans: list[PagePlan], **kwargs) -> ExportResult:
	"""
	Render plans and attach the PDF bytes to the result.

	Keyword arguments are passed to render_pages.
	"""
	result = render_pages(project, plans, **kwargs)
	if result.pages:
		buffer = io.BytesIO()
		write_pdf_document(result.pages, buffer)
		result.document = buffer.getvalue()
	return result


#============================================
def export_month(project: CalendarProject, offset: int, **kwargs) -> ExportResult:
	return export_plans(project, plan_single(offset), **kwargs)


#============================================
def export_cover(project: CalendarProject, **kwargs) -> ExportResult:
	return export_plans(project, plan_single(FRONT_COVER_INDEX), **kwargs)


#============================================
def export_back_cover(project: CalendarProject, **kwargs) -> ExportResult:
	return export_plans(project, plan_single(BACK_COVER_INDEX), **kwargs)


#============================================
def export_year(project: CalendarProject, include_cover: bool = True, **kwargs) -> ExportResult:
	return export_plans(project, plan_year(include_cover), **kwargs)


#============================================
def export_double_sided(project: CalendarProject, **kwargs) -> ExportResult:
	return export_plans(project, plan_double_sided(project), **kwargs)
