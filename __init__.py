"""
Mapa Solidário application.

A FastAPI-powered tool for locating and managing shelters, food
distribution points, emergency services and mental-health centres on an
interactive map of the municipality.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""
