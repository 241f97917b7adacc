"""Command line interface for flickr-reflect (requires the ``cli`` extra)."""
