"""
Speech recognition demo app built with FastAPI, exposing
- an index.html UI to upload a single .wav clip,
- a speech recognition endpoint that validates the upload,
- and either a simulated recognizer or a proxy to an external prediction service.
"""

__version__ = "0.1.0"
