"""yadloader - list and download Yandex.Disk public shares."""

__version__ = "0.1.0"
