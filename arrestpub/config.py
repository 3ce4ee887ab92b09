"""
Configuration module for the jail activity publisher.
"""

import json
import os
from typing import Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from arrestpub.model import ConfigError


class AirtableConfig(BaseModel):
    """
    Configuration for the booking records store.
    """

    api_url: str = "https://api.airtable.com/v0"  # REST endpoint
    api_key: Optional[str] = None  # Personal access token
    base_id: Optional[str] = None  # Base holding the jail records
    table_id: str = "tblq3cgwhhPPjffEi"  # Jail records table
    view_id: Optional[str] = None  # Optional view restricting the query


class AdvertisementConfig(BaseModel):
    """
    Configuration for the advertisement table.
    """

    enabled: bool = True  # Whether to look up an active advertisement
    api_key: Optional[str] = None  # Falls back to the records-store key
    base_id: Optional[str] = None  # Falls back to the records-store base
    table_name: str = "Advertisements"
    active_view: str = "Active Ads"
    pending_view: str = "Pending Review"
    max_image_bytes: int = 5 * 1024 * 1024  # Upload ceiling
    default_priority: int = 50


class GhostConfig(BaseModel):
    """
    Configuration for the CMS publishing API.
    """

    site_url: str = "https://angelina-411.ghost.io"
    admin_api_key: Optional[str] = None  # Format: "<id>:<hex secret>"
    api_version: str = "v5.0"
    output_format: str = "lexical"  # "lexical" (node tree) or "html" (markup)
    author: Optional[str] = None  # Author email or id, CMS default when unset


class PublicationConfig(BaseModel):
    """
    Configuration for the published article.
    """

    brand: str = "Angelina County"
    subject: str = "Arrests"
    site_name: str = "Angelina411.com"
    site_url: str = "https://www.angelina411.com"
    publisher_name: str = "Angelina411 News Team"
    source_agency: str = "Angelina County Sheriff's Department"
    timezone: str = "America/Chicago"  # Publication civil calendar
    article_date: Optional[str] = None  # YYYY-MM-DD override for the target date
    disclaimer_url: str = "https://www.angelina411.com/legal-disclaimer-daily-arrest-records/"
    tags: List[str] = ["Angelina County", "News", "Jail", "Data", "Crime"]
    footer_tags: List[str] = ["Jail", "Booking", "Community Activities"]
    feature_image: Optional[str] = None


class ParsingConfig(BaseModel):
    """
    Configuration for charge parsing.
    """

    strict_delimiters: bool = False  # Reject charges/degrees split on different delimiters


class RenderConfig(BaseModel):
    """
    Configuration for article rendering.
    """

    show_bond_amounts: bool = False  # Append bond text to each charge
    share_links: bool = True  # Render static share links on each record card


class HttpConfig(BaseModel):
    """
    Configuration for outbound HTTP calls.
    """

    timeout: float = 30.0  # Seconds, applied to every records-store and CMS call


class ServerConfig(BaseModel):
    """
    Configuration for the local preview server.
    """

    host: str = "localhost"
    port: int = 3000
    output_dir: str = "./output"  # Served under /output


class LoggingConfig(BaseModel):
    """
    Configuration for logging.
    """

    level: str = "INFO"  # Logging level (DEBUG/INFO/WARN/ERROR)


class Config(BaseModel):
    """
    Main configuration.
    """

    airtable: AirtableConfig = Field(default_factory=AirtableConfig)
    ads: AdvertisementConfig = Field(default_factory=AdvertisementConfig)
    ghost: GhostConfig = Field(default_factory=GhostConfig)
    publication: PublicationConfig = Field(default_factory=PublicationConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Environment variable -> (section, attribute)
ENV_VARS = {
    "AIRTABLE_API_KEY": ("airtable", "api_key"),
    "AIRTABLE_BASE_ID": ("airtable", "base_id"),
    "AIRTABLE_TABLE_ID": ("airtable", "table_id"),
    "AIRTABLE_VIEW_ID": ("airtable", "view_id"),
    "AIRTABLE_AD_API_KEY": ("ads", "api_key"),
    "AIRTABLE_AD_BASE_ID": ("ads", "base_id"),
    "AIRTABLE_AD_TABLE_NAME": ("ads", "table_name"),
    "GHOST_API_URL": ("ghost", "site_url"),
    "GHOST_SITE_URL": ("ghost", "site_url"),
    "GHOST_ADMIN_API_KEY": ("ghost", "admin_api_key"),
    "ARTICLE_DATE": ("publication", "article_date"),
    "LOCAL_HOST": ("server", "host"),
    "LOCAL_PORT": ("server", "port"),
    "LOG_LEVEL": ("logging", "level"),
}

# Credentials the production pipeline cannot run without
REQUIRED_CREDENTIALS = {
    "AIRTABLE_API_KEY": ("airtable", "api_key"),
    "AIRTABLE_BASE_ID": ("airtable", "base_id"),
    "GHOST_ADMIN_API_KEY": ("ghost", "admin_api_key"),
}


def apply_env(cfg: Config, environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Overlay environment variables onto a configuration.

    Args:
        cfg: Configuration to update
        environ: Environment mapping, defaults to os.environ

    Returns:
        The updated configuration
    """
    if environ is None:
        environ = os.environ

    for var, (section, attr) in ENV_VARS.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        target = getattr(cfg, section)
        if attr == "port":
            try:
                value = int(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {var}: {value!r} is not a port number")
        setattr(target, attr, value)

    return cfg


def missing_credentials(cfg: Config) -> List[str]:
    """
    List the environment variables whose values the pipeline still needs.
    """
    missing = []
    for var, (section, attr) in REQUIRED_CREDENTIALS.items():
        if not getattr(getattr(cfg, section), attr):
            missing.append(var)
    return missing


def require_credentials(cfg: Config) -> None:
    """
    Fail when required credentials are absent.

    Args:
        cfg: Configuration to check

    Raises:
        ConfigError: Naming every missing variable
    """
    missing = missing_credentials(cfg)
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}",
            missing=missing,
        )


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None,
                use_dotenv: bool = True) -> Config:
    """
    Load configuration from a file, then overlay the environment.

    Args:
        path: Path to the configuration file
        environ: Environment mapping, defaults to os.environ
        use_dotenv: Whether to read a local .env file into the environment first

    Returns:
        Configuration object
    """
    if use_dotenv and environ is None:
        load_dotenv()

    if path:
        cfg = Config(**_read_config_file(path))
    else:
        cfg = None
        # Try to load from default locations
        default_locations = [
            "./config.yaml",
            "./config.yml",
            "./config.json",
            os.path.expanduser("~/.config/arrestpub/config.yaml"),
        ]

        for loc in default_locations:
            if os.path.exists(loc):
                cfg = Config(**_read_config_file(loc))
                break

        if cfg is None:
            cfg = Config()

    return apply_env(cfg, environ)


def _read_config_file(path: str) -> Dict:
    with open(path, "r") as f:
        if path.endswith(".yaml") or path.endswith(".yml"):
            config_dict = yaml.safe_load(f)
        elif path.endswith(".json"):
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {path}")

    return config_dict or {}
