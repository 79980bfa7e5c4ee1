"""
Клиент Atlassian Assets (JSM Insight) API на базе сгенерированного кода
"""

from .client import InitStage, init_client
from .config import (
    ClientOptions,
    ResolvedConfig,
    extract_instance_from_url,
    resolve_config,
)
from .configurator import (
    ClientConfig,
    EndpointFallback,
    GeneratedClient,
    configure_client,
)
from .discovery import discover_workspace_id
from .errors import (
    ClientImportError,
    ConfigurationError,
    ConfiguratorError,
    DiscoveryError,
    GenerationError,
    InsightClientError,
    SpecDownloadError,
)
from .generator import ApiClientGenerator, generate_client
from .patches import fix_generated_code
from .spec import download_and_save_spec, download_spec, load_spec

__all__ = [
    "ApiClientGenerator",
    "ClientConfig",
    "ClientImportError",
    "ClientOptions",
    "ConfigurationError",
    "ConfiguratorError",
    "DiscoveryError",
    "EndpointFallback",
    "GeneratedClient",
    "GenerationError",
    "InitStage",
    "InsightClientError",
    "ResolvedConfig",
    "SpecDownloadError",
    "configure_client",
    "discover_workspace_id",
    "download_and_save_spec",
    "download_spec",
    "extract_instance_from_url",
    "fix_generated_code",
    "generate_client",
    "init_client",
    "load_spec",
    "resolve_config",
]
