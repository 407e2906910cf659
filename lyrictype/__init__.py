"""
LyricType - a typing game driven by song lyrics

Type excerpts of your favourite artists' songs and get scored on speed and
accuracy. Songs are pulled from Genius and queued per artist.
"""

__version__ = "0.4.0"
__author__ = "LyricType Team"
__description__ = "Typing test engine and song queue for lyrics-based typing practice"
