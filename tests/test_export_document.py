import io
import pathlib
import threading

import fitz
import PIL.Image
import pypdf
import pytest

import photo_calendar.config
import photo_calendar.export
import photo_calendar.image_fit
import photo_calendar.render


PageKind = photo_calendar.render.PageKind
ImageAsset = photo_calendar.config.ImageAsset
MonthPhoto = photo_calendar.config.MonthPhoto

FAST_DPI = 18


#============================================
def test_plan_year() -> None:
	plans = photo_calendar.export.plan_year()
	assert len(plans) == 14
	assert plans[0].kind == PageKind.FRONT_COVER
	assert plans[-1].kind == PageKind.BACK_COVER
	assert [plan.calendar_offset for plan in plans[1:13]] == list(range(12))
	without_cover = photo_calendar.export.plan_year(include_cover=False)
	assert len(without_cover) == 13
	assert without_cover[0].kind == PageKind.MONTH


#============================================
def test_plan_double_sided(project) -> None:
	plans = photo_calendar.export.plan_double_sided(project)
	assert len(plans) == 14
	assert plans[-1].kind == PageKind.COVERS_SHEET
	assert plans[-1].rotated
	assert (plans[1].photo_offset, plans[1].calendar_offset, plans[1].rotated) == (11, 1, True)
	assert (plans[12].photo_offset, plans[12].calendar_offset) == (6, 6)
	assert plans[1].label == "Page 1 - Back"

	project.enable_double_sided = True
	plans = photo_calendar.export.plan_double_sided(project)
	assert plans[11].photo_offset == -2
	assert plans[12].photo_offset == -2
	assert plans[12].calendar_offset == 6


#============================================
def test_export_year_pages_and_size(project) -> None:
	result = photo_calendar.export.export_year(project, dpi=FAST_DPI, max_workers=4)
	assert not result.cancelled
	assert result.failed_indices == []
	assert [page.index for page in result.pages] == list(range(14))
	assert result.pages[0].label == "Front Cover"
	assert result.pages[1].label == "January 2024"
	assert result.pages[-1].label == "Back Cover"

	reader = pypdf.PdfReader(io.BytesIO(result.document))
	assert len(reader.pages) == 14
	for page in reader.pages:
		assert float(page.mediabox.width) == pytest.approx(612.0)
		assert float(page.mediabox.height) == pytest.approx(792.0)


#============================================
def test_rendered_page_sizes(project) -> None:
	project.page.orientation = photo_calendar.config.Orientation.LANDSCAPE
	plan = photo_calendar.render.plan_for_offset(0)
	page = photo_calendar.export.rasterize_page(project, plan, 3, dpi=36)
	assert page.index == 3
	assert (page.width_pt, page.height_pt) == (792.0, 612.0)
	assert (page.width_px, page.height_px) == (396, 306)
	assert page.scale == 0.5
	image = PIL.Image.open(io.BytesIO(page.png_bytes))
	assert image.size == (396, 306)


#============================================
def test_progress_is_reported_per_page(project) -> None:
	updates = []
	plans = photo_calendar.export.plan_year()
	photo_calendar.export.render_pages(project, plans, dpi=FAST_DPI, max_workers=3, progress=updates.append)
	assert len(updates) == len(plans)
	assert [update.current for update in updates] == list(range(1, len(plans) + 1))
	assert all(update.total == len(plans) for update in updates)


#============================================
def test_cancel_before_start(project) -> None:
	cancel = threading.Event()
	cancel.set()
	result = photo_calendar.export.export_year(project, dpi=FAST_DPI, cancel_event=cancel)
	assert result.cancelled
	assert result.pages == []
	assert result.document == b""
	assert result.total_requested == 14


#============================================
def test_cancel_between_pages_keeps_finished_pages(project) -> None:
	cancel = threading.Event()

	def stop_after_first(update) -> None:
		cancel.set()

	plans = photo_calendar.export.plan_year()
	result = photo_calendar.export.render_pages(
		project,
		plans,
		dpi=FAST_DPI,
		max_workers=1,
		progress=stop_after_first,
		cancel_event=cancel,
	)
	assert result.cancelled
	assert [page.index for page in result.pages] == [0]


#============================================
def test_raising_progress_callback_keeps_pages(project) -> None:
	"""
	A progress callback that raises partway must not lose any page.
	"""
	calls = []

	def closed_window(update) -> None:
		calls.append(update.current)
		if update.current == 3:
			raise RuntimeError("window closed")

	plans = photo_calendar.export.plan_year()
	result = photo_calendar.export.render_pages(
		project,
		plans,
		dpi=FAST_DPI,
		max_workers=1,
		progress=closed_window,
	)
	assert not result.cancelled
	assert result.failed_indices == []
	assert [page.index for page in result.pages] == list(range(len(plans)))
	assert calls == list(range(1, len(plans) + 1))


#============================================
def test_failed_page_becomes_placeholder(project, monkeypatch) -> None:
	original_draw_page = photo_calendar.render.draw_page

	def flaky_draw_page(surface, project, plan, image_loader=None, active_slot=-1) -> None:
		if plan.kind == PageKind.MONTH and plan.calendar_offset == 3:
			raise RuntimeError("broken page")
		original_draw_page(surface, project, plan, image_loader, active_slot)

	monkeypatch.setattr(photo_calendar.render, "draw_page", flaky_draw_page)
	result = photo_calendar.export.export_year(project, dpi=FAST_DPI, max_workers=2)
	assert result.failed_indices == [4]
	assert len(result.pages) == 14
	assert len(pypdf.PdfReader(io.BytesIO(result.document)).pages) == 14


#============================================
def test_shared_image_cache_is_used(project, solid_image) -> None:
	path = solid_image("red.png", (255, 0, 0))
	for offset in range(12):
		project.image_assets.append(ImageAsset(path=path, role=MonthPhoto(month=offset, slot=0)))
	cache = photo_calendar.image_fit.ImageCache()
	photo_calendar.export.export_year(project, dpi=FAST_DPI, max_workers=4, image_cache=cache)
	assert path in cache
	assert len(cache) == 1


#============================================
def test_pdf_renders_back_to_page_pixels(project, solid_image) -> None:
	"""
	The exported PDF shows the rasterized page: red photo over the grid.
	"""
	path = solid_image("red.png", (255, 0, 0))
	project.image_assets.append(ImageAsset(path=path, role=MonthPhoto(month=0, slot=0)))
	result = photo_calendar.export.export_month(project, 0, dpi=72)
	document = fitz.open(stream=result.document, filetype="pdf")
	pixmap = document[0].get_pixmap(matrix=fitz.Matrix(1.0, 1.0), alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	assert image.size == (612, 792)
	red, green, blue = image.getpixel((306, 205))
	assert red > 240 and green < 15 and blue < 15
	assert image.getpixel((5, 600)) == (255, 255, 255)


#============================================
def test_write_pdf_document_to_path(project, tmp_path: pathlib.Path) -> None:
	pages = [
		photo_calendar.export.rasterize_page(project, photo_calendar.render.plan_for_offset(-1), 0, dpi=FAST_DPI),
		photo_calendar.export.rasterize_page(project, photo_calendar.render.plan_for_offset(12), 1, dpi=FAST_DPI),
	]
	output = tmp_path / "covers.pdf"
	assert photo_calendar.export.write_pdf_document(pages, output) == 2
	assert len(pypdf.PdfReader(str(output)).pages) == 2


#============================================
def test_single_page_exports(project) -> None:
	for export in (photo_calendar.export.export_cover, photo_calendar.export.export_back_cover):
		result = export(project, dpi=FAST_DPI)
		assert len(pypdf.PdfReader(io.BytesIO(result.document)).pages) == 1
	double = photo_calendar.export.export_double_sided(project, dpi=FAST_DPI)
	assert len(pypdf.PdfReader(io.BytesIO(double.document)).pages) == 14
