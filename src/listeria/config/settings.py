from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized config.

    Key idea:
    - read from env first (so tests/CI can override),
    - otherwise default to values that work against Wikidata.
    """

    model_config = SettingsConfigDict(env_prefix="LISTERIA_", extra="ignore")

    # Wikibase action API used as the entity store
    wikibase_api_url: str = "https://www.wikidata.org/w/api.php"

    # SPARQL endpoint for list queries
    sparql_endpoint_url: str = "https://query.wikidata.org/sparql"

    # HTTP safety defaults
    http_timeout_s: float = 30.0
    http_max_retries: int = 2
    user_agent: str = "Listeria/0.1 (https://github.com/magnusmanske/listeria_rs)"

    # wbgetentities accepts at most 50 ids per request
    entity_batch_size: int = 50

    # Rendering defaults
    default_language: str = "en"
    default_thumbnail_size: int = 128

    # Wikis where local files may shadow Commons files
    shadow_file_wikis: list[str] = ["enwiki"]

    # Only show preferred-rank statements when a property has any
    prefer_preferred: bool = False

    # Tabbed data page metadata
    tabbed_data_license: str = "CC0-1.0"
    tabbed_data_description: str = "Listeria output"
    tabbed_data_sources: str = "https://github.com/magnusmanske/listeria_rs"

    log_level: str = "INFO"


settings = Settings()
