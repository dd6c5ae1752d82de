"""
Server modules for Mapa Solidário application.

This package contains FastAPI router modules for the map settings and
filters, the location list and delete flow, and the draft edit form.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""
