"""Known file names and XML schema keys found in Ableton .als files."""

from alstools.core.models import TrackType

# Ableton Live Set extension (gzip-compressed XML)
PROJECT_EXTENSION = ".als"

# Per-directory folder holding the decompressed XML of each scanned project
CACHE_FOLDER_NAME = "Ableton Project Info"
CACHE_EXTENSION = ".xml"

# Live writes automatic backups into this folder next to the set
BACKUP_FOLDER_NAME = "Backup"
BACKUP_PATH_MARKER = "Backup"

# Folders that are never descended into
EXCLUDED_FOLDERS = frozenset({CACHE_FOLDER_NAME, BACKUP_FOLDER_NAME})

# Path from the document root to the track groups
TRACKS_PATH = ("Ableton", "LiveSet", "Tracks")

# Track group elements below <Tracks>, in emission order
TRACK_GROUPS = {
    "AudioTrack": TrackType.AUDIO,
    "MidiTrack": TrackType.MIDI,
    "ReturnTrack": TrackType.RETURN,
    "MasterTrack": TrackType.MASTER,
}

UNNAMED_TRACK = "Unnamed Track"

# Attribute prefix used by the generic attribute tree
ATTRIBUTE_PREFIX = "@"
