"""Request builders and cell-block codec for HBase RPCs."""

__version__ = "0.1.0"