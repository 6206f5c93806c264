"""PixelTune image adjustment service.

Uploads land in the incoming store, ``/process`` renders a preview plus
full-quality PNG/JPEG renditions into the derived store and ``/download``
serves them back.
"""

__version__ = "0.1.0"
