"""
Configuration management module.

This module provides utilities for loading the map settings stored in
config.json, reading environment overrides from ``.env``, and filling in
missing fields on stored location documents.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import json
import os
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.getenv("MAPA_CONFIG_PATH", os.path.join(BASE_DIR, "config.json"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mapa_solidario.db")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from config.json.

    Args:
        path: Path to the configuration file.

    Returns:
        Configuration dictionary with all required fields ensured.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        config = get_default_config()

    # Ensure all required fields are present
    config = ensure_config_fields(config)
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration structure.

    Returns:
        Default configuration dictionary.
    """
    return {
        "title": "Conectar e Ajudar: Mapa Solidário",
        "center": [-26.292977, -48.848306],
        "zoom": 13,
        "max_bounds": [[-26.6, -49.2], [-25.8, -48.5]],
        "tile_url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attribution": (
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
        ),
        "default_categories": [
            {"id": "alimentação", "name": "Alimentação", "description": "Distribuição de alimentos"},
            {"id": "abrigo", "name": "Abrigo", "description": "Abrigos temporários"},
            {"id": "emergencia", "name": "Emergência", "description": "Serviços de emergência"},
            {"id": "centro_de_ajuda", "name": "Centro de Ajuda", "description": "Pontos de doação e apoio"},
            {"id": "caps", "name": "CAPS", "description": "Centros de Atenção Psicossocial"},
        ],
    }


def ensure_config_fields(config: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure all required fields are present in the configuration.

    Args:
        config: Configuration dictionary to update.

    Returns:
        Updated configuration dictionary.
    """
    for key, default in get_default_config().items():
        config.setdefault(key, default)

    for category in config["default_categories"]:
        ensure_category_fields(category)

    return config


def ensure_category_fields(category: Dict[str, Any]):
    """Ensure a category document has all required fields.

    Args:
        category: Category dictionary to update.
    """
    defaults = {
        "id": "",
        "name": category.get("id", ""),
        "description": "",
    }

    for key, default in defaults.items():
        category.setdefault(key, default)


def ensure_location_fields(document: Dict[str, Any]):
    """Ensure a stored location document has all required fields.

    Older documents kept the opening hours under ``hours``; those are moved
    to ``horarios``.

    Args:
        document: Location document dictionary to update.
    """
    if "hours" in document and "horarios" not in document:
        document["horarios"] = document.pop("hours")

    defaults = {
        "nome": "",
        "descricao": "",
        "categoria": "",
        "latitude": None,
        "longitude": None,
        "horarios": [],
        "info": "",
    }

    for key, default in defaults.items():
        if document.get(key) is None:
            document[key] = default
