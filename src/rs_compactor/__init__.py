"""rs-compactor: automatic compaction crafting for Refined Storage networks."""

__version__ = "0.3.0"
