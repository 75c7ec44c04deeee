"""WorkBeat attendance & leave engine.

This package is organized by feature modules (attendance, leave, requests, ...)
with a thin Flask controller layer over service/repository layers.
"""
