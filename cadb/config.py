"""Application constants."""

from __future__ import annotations

BUILD_APP_NAME = "makecadb"
SEARCH_APP_NAME = "searchcadb"

DEFAULT_NDIST = 20

HEADER_MARKER = "!"
COMMENT_MARKER = "#"
NDIST_KEY = "NDIST"
PDBDIR_KEY = "PDBDIR"
DATE_KEY = "DATE"

# Distance written when a neighbor does not exist in the same chain.
SENTINEL_DISTANCE = -1.0
DISTANCE_FORMAT = "%.2f"

BLANK_CHAIN_MARKER = "-"
CA_SELECTION = "name CA and record_type ATOM"
ACCEPTED_ALTLOCS = ("", " ", "A")
STRUCTURE_EXTENSIONS = (".gz", ".ent", ".pdb", ".brk")

SEARCH_PROMPT = "SEARCHCADB> "
