"""Process endpoint and the Pillow transform engine."""
