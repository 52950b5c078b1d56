"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import os
import pathlib
import sys

# PIP3 modules
import PIL.Image
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
@pytest.fixture
def project():
	"""
	Letter portrait project for 2024 with default settings.
	"""
	import photo_calendar.config

	return photo_calendar.config.CalendarProject(name="Test Calendar", year=2024)


#============================================
@pytest.fixture
def solid_image(tmp_path: pathlib.Path):
	"""
	Factory that writes a solid color PNG and returns its path.
	"""

	def _write(name: str, color: tuple[int, int, int], size: tuple[int, int] = (300, 200)) -> str:
		path = tmp_path / name
		PIL.Image.new("RGB", size, color).save(path)
		return str(path)

	return _write
