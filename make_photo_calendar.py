#!/usr/bin/env python3

"""
Render a photo calendar project to a print-ready PDF.
"""

# local repo modules
import photo_calendar.cli


if __name__ == "__main__":
	photo_calendar.cli.main()
