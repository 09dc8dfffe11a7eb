"""
Competitor Watcher Central Configuration
Sanitizer allowlists, annotator markers, glossary locations and API settings
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import os

import yaml


@dataclass
class SanitizerConfig:
    """Configuration for the report HTML sanitizer"""

    # Benign structural and formatting markup kept in reports
    allowed_tags: List[str] = field(default_factory=lambda: [
        'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'blockquote', 'pre', 'code',
        'a', 'em', 'strong', 'i', 'b', 'u', 'sub', 'sup', 'span', 'div',
        'ul', 'ol', 'li', 'br', 'hr', 'img', 'table', 'thead', 'tbody',
        'tr', 'th', 'td', 'figure', 'figcaption', 'cite', 'q', 'abbr', 'mark',
        'section', 'article', 'header', 'footer', 'small', 'dl', 'dt', 'dd',
    ])

    allowed_attributes: Dict[str, List[str]] = field(default_factory=lambda: {
        'a': ['href', 'title', 'rel', 'target'],
        'img': ['src', 'alt', 'title', 'width', 'height'],
        'td': ['colspan', 'rowspan'],
        'th': ['colspan', 'rowspan'],
        'abbr': ['title'],
        '*': ['id', 'class', 'data-testid'],
    })

    allowed_protocols: List[str] = field(default_factory=lambda: ['http', 'https', 'mailto', 'tel'])

    # Removed together with everything inside them
    removed_tags: List[str] = field(default_factory=lambda: [
        'script', 'style', 'iframe', 'object', 'embed', 'template', 'noscript',
    ])

    strip_comments: bool = True

    # Classes the annotator owns; stripped from report markup
    reserved_class_prefixes: List[str] = field(default_factory=lambda: ['glossary-'])


@dataclass
class AnnotatorConfig:
    """Configuration for glossary annotation markup"""

    excluded_tags: List[str] = field(default_factory=lambda: ['code', 'pre', 'script', 'style'])
    processed_class: str = "glossary-processed"
    term_class: str = "glossary-term"
    show_icon: bool = True


@dataclass
class GlossaryConfig:
    """Where glossaries come from and which locales are served"""

    # None means the glossaries bundled with the package
    glossary_dir: Optional[str] = None
    default_locale: str = "en"
    supported_locales: List[str] = field(default_factory=lambda: ['en', 'pt', 'es', 'fr', 'de'])


@dataclass
class APIConfig:
    """Configuration for the HTTP API"""

    host: str = "0.0.0.0"
    port: int = 8000
    max_payload_kb: int = 512


@dataclass
class CompWatchConfig:
    """Main configuration class combining all settings"""

    sanitizer: SanitizerConfig
    annotator: AnnotatorConfig
    glossary: GlossaryConfig
    api: APIConfig

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    def __init__(self,
                 sanitizer: Optional[SanitizerConfig] = None,
                 annotator: Optional[AnnotatorConfig] = None,
                 glossary: Optional[GlossaryConfig] = None,
                 api: Optional[APIConfig] = None):
        """Initialize with optional custom configurations"""
        self.sanitizer = sanitizer or SanitizerConfig()
        self.annotator = annotator or AnnotatorConfig()
        self.glossary = glossary or GlossaryConfig()
        self.api = api or APIConfig()
        self.log_level = "INFO"
        self.debug = False

        # Override with environment variables if present
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration overrides from environment variables"""
        if os.getenv("COMPWATCH_GLOSSARY_DIR"):
            self.glossary.glossary_dir = os.getenv("COMPWATCH_GLOSSARY_DIR")

        if os.getenv("COMPWATCH_DEFAULT_LOCALE"):
            self.glossary.default_locale = os.getenv("COMPWATCH_DEFAULT_LOCALE").lower()

        if os.getenv("COMPWATCH_LOG_LEVEL"):
            self.log_level = os.getenv("COMPWATCH_LOG_LEVEL").upper()

        if os.getenv("COMPWATCH_API_PORT"):
            try:
                self.api.port = int(os.getenv("COMPWATCH_API_PORT"))
            except ValueError:
                raise ValueError(f"COMPWATCH_API_PORT must be an integer, got {os.getenv('COMPWATCH_API_PORT')!r}")

        # Debug override
        if os.getenv("COMPWATCH_DEBUG", "").lower() in ("true", "1", "yes"):
            self.debug = True
            self.log_level = "DEBUG"

    @classmethod
    def load_from_file(cls, config_path: str) -> 'CompWatchConfig':
        """Load configuration from YAML file"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

            sanitizer = SanitizerConfig(**config_data.get('sanitizer', {}))
            annotator = AnnotatorConfig(**config_data.get('annotator', {}))
            glossary = GlossaryConfig(**config_data.get('glossary', {}))
            api = APIConfig(**config_data.get('api', {}))

            config = cls(sanitizer=sanitizer, annotator=annotator, glossary=glossary, api=api)

            # Override other settings
            for key, value in config_data.items():
                if key not in ['sanitizer', 'annotator', 'glossary', 'api'] and hasattr(config, key):
                    setattr(config, key, value)

            return config

        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        config_data = {
            'sanitizer': {
                'allowed_tags': list(self.sanitizer.allowed_tags),
                'allowed_attributes': {k: list(v) for k, v in self.sanitizer.allowed_attributes.items()},
                'allowed_protocols': list(self.sanitizer.allowed_protocols),
                'removed_tags': list(self.sanitizer.removed_tags),
                'strip_comments': self.sanitizer.strip_comments,
                'reserved_class_prefixes': list(self.sanitizer.reserved_class_prefixes)
            },
            'annotator': {
                'excluded_tags': list(self.annotator.excluded_tags),
                'processed_class': self.annotator.processed_class,
                'term_class': self.annotator.term_class,
                'show_icon': self.annotator.show_icon
            },
            'glossary': {
                'glossary_dir': self.glossary.glossary_dir,
                'default_locale': self.glossary.default_locale,
                'supported_locales': list(self.glossary.supported_locales)
            },
            'api': {
                'host': self.api.host,
                'port': self.api.port,
                'max_payload_kb': self.api.max_payload_kb
            },
            'log_level': self.log_level,
            'debug': self.debug
        }

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2, allow_unicode=True)


def setup_logging(level: str = "INFO"):
    """Configure root logging for command-line and server entry points"""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


# Default global configuration instance
default_config = CompWatchConfig()
