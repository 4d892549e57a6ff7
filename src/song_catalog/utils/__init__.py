from .config import CatalogConfig, load_catalog_config, load_catalog_config_from_env

__all__ = [
    "CatalogConfig",
    "load_catalog_config",
    "load_catalog_config_from_env",
]
