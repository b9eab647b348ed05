"""Remote distribution access.

- nodejs.py: distribution index scraping and archive URL construction
- download.py: parallel ranged downloads
"""
