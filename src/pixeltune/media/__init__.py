"""Storage, retention and download of image files."""
