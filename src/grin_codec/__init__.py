"""grin-codec: static Huffman byte-stream compressor (.grin files)."""

__version__ = "0.1.0"
