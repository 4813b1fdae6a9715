"""icloudy - locate iCloud Drive folders and copy files into them."""

__version__ = "0.1.7"
