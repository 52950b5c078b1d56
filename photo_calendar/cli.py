"""
CLI entry points for photo calendar PDF export.
"""

# Standard Library
import argparse
import json
import logging
import pathlib
import time

# local repo modules
import photo_calendar as pcal
import photo_calendar.config
import photo_calendar.export
import photo_calendar.layout
import photo_calendar.project_lib


ExportProgress = pcal.export.ExportProgress
ExportResult = pcal.export.ExportResult
CalendarProject = pcal.config.CalendarProject

DEFAULT_TARGET_DPI = pcal.config.DEFAULT_TARGET_DPI
PROGRESS_BAR_WIDTH = pcal.config.PROGRESS_BAR_WIDTH
FRONT_COVER_INDEX = pcal.config.FRONT_COVER_INDEX
BACK_COVER_INDEX = pcal.config.BACK_COVER_INDEX

EXPORT_KINDS = ("year", "cover", "back-cover", "month", "double-sided")


#============================================
def print_progress(update: ExportProgress) -> None:
	"""
	Print a one-line progress bar.

	Args:
		update: Progress update.
	"""
	if update.total <= 0:
		return
	percent = int(round((update.current / update.total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	end = "\n" if update.current >= update.total else "\r"
	print(f"Rendering [{bar}] {update.current}/{update.total} ({percent}%)", end=end)


#============================================
def build_plans(args: argparse.Namespace, project: CalendarProject) -> list:
	"""
	Build page plans for the requested export kind.

	Args:
		args: Parsed argparse namespace.
		project: Calendar project.

	Returns:
		List of PagePlan.
	"""
	if args.kind == "cover":
		return pcal.export.plan_single(FRONT_COVER_INDEX)
	if args.kind == "back-cover":
		return pcal.export.plan_single(BACK_COVER_INDEX)
	if args.kind == "month":
		return pcal.export.plan_single(args.offset)
	if args.kind == "double-sided":
		return pcal.export.plan_double_sided(project)
	return pcal.export.plan_year(args.include_cover)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render a photo calendar project to a PDF.")
	parser.add_argument("project", help="Project JSON file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	pages_group = parser.add_argument_group("Pages")
	pages_group.add_argument("-k", "--kind", dest="kind", choices=EXPORT_KINDS, default="year", help="What to export.")
	pages_group.add_argument("-i", "--offset", dest="offset", type=int, default=0, help="Month page offset for --kind month.")
	pages_group.add_argument("-c", "--cover", dest="include_cover", action="store_true", help="Include the front cover in a year export.")
	pages_group.add_argument("-C", "--no-cover", dest="include_cover", action="store_false", help="Skip the front cover in a year export.")

	render_group = parser.add_argument_group("Rendering")
	render_group.add_argument("-r", "--dpi", dest="dpi", type=float, default=DEFAULT_TARGET_DPI, help="Raster resolution.")
	render_group.add_argument("-w", "--workers", dest="workers", type=int, default=None, help="Render threads.")
	render_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Debug logging.")

	parser.set_defaults(include_cover=True, verbose=False)

	args = parser.parse_args(argv)
	return args


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	args: argparse.Namespace,
	project: CalendarProject,
	result: ExportResult,
) -> None:
	"""
	Write a manifest JSON file describing the export.

	Args:
		manifest_path: Output path.
		args: Parsed argparse namespace.
		project: Calendar project.
		result: Export result.
	"""
	width, height = pcal.layout.resolve_page_size(project.page)
	data = {
		"project": str(args.project),
		"output": str(args.output_path),
		"kind": args.kind,
		"dpi": args.dpi,
		"page_size_pt": [width, height],
		"pages_requested": result.total_requested,
		"pages_written": len(result.pages),
		"cancelled": result.cancelled,
		"failed_pages": result.failed_indices,
		"pages": [
			{
				"index": page.index,
				"label": page.label,
				"width_px": page.width_px,
				"height_px": page.height_px,
			}
			for page in result.pages
		],
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
		handle.write("\n")


#============================================
def run_pipeline(args: argparse.Namespace) -> ExportResult:
	"""
	Load a project, render the requested pages, and write the PDF.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ExportResult.
	"""
	print("Photo calendar export")
	print(f"Project: {args.project}")
	print(f"Output PDF: {args.output_path}")
	print(f"Kind: {args.kind}")
	if args.kind == "month":
		print(f"Offset: {args.offset}")
	if args.kind == "year":
		print(f"Include cover: {args.include_cover}")
	print(f"DPI: {args.dpi:g}")
	if args.workers is not None:
		print(f"Workers: {args.workers}")

	start_time = time.perf_counter()
	project = pcal.project_lib.load_project(args.project)
	plans = build_plans(args, project)
	print(f"Pages planned: {len(plans)}")

	render_start = time.perf_counter()
	result = pcal.export.render_pages(
		project,
		plans,
		dpi=args.dpi,
		max_workers=args.workers,
		progress=print_progress,
	)
	render_end = time.perf_counter()
	if result.failed_indices:
		print(f"Failed pages: {result.failed_indices}")

	output_path = pathlib.Path(args.output_path)
	write_start = time.perf_counter()
	pages_written = pcal.export.write_pdf_document(result.pages, output_path)
	write_end = time.perf_counter()
	print(f"Pages written: {pages_written}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	write_manifest(pathlib.Path(manifest_path), args, project, result)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: render={:.2f}s write={:.2f}s total={:.2f}s".format(
			render_end - render_start,
			write_end - write_start,
			total_time,
		)
	)
	print(f"Manifest written: {manifest_path}")
	return result


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
	run_pipeline(args)
