from decouple import config, Csv
from typing import Dict, List, Tuple

# Redis
REDIS_URL = config("REDIS_URL", default="redis://localhost:6379/0")

# Application settings
APP_NAME = config("APP_NAME", default="RecruitPro Search")
APP_VERSION = config("APP_VERSION", default="0.1.0")
API_PREFIX = config("API_PREFIX", default="/api/v1")
DEBUG = config("DEBUG", default=False, cast=bool)

# CORS Settings
CORS_ORIGINS = config("CORS_ORIGINS", default="http://localhost:3000").split(",")
CORS_METHODS = config("CORS_METHODS", default="GET,POST,OPTIONS").split(",")
CORS_HEADERS = config("CORS_HEADERS", default="Content-Type,Accept,X-Requested-With").split(",")

# Logging Settings
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
ERROR_LOG_DIR = config("ERROR_LOG_DIR", default="logs/errors")
ERROR_LOG_MAX_SIZE_MB = config("ERROR_LOG_MAX_SIZE_MB", default=10, cast=int)
ERROR_LOG_ROTATION = config("ERROR_LOG_ROTATION", default="midnight")

# Content Settings
CONTENT_DATA_FILE = config("CONTENT_DATA_FILE", default="data/content.json")
SEARCH_CONTENT_TYPES = config("SEARCH_CONTENT_TYPES", default="article,job,page", cast=Csv())
SEARCH_CATEGORIES = config(
    "SEARCH_CATEGORIES",
    default=(
        "career-advice:Career Advice,"
        "industry-insights:Industry Insights,"
        "recruitment-tips:Recruitment Tips,"
        "salary-guides:Salary Guides,"
        "remote-work:Remote Work"
    ),
    cast=Csv(),
)

# Plural labels are used for facets, singular labels for individual results
CONTENT_TYPE_LABELS: Dict[str, Tuple[str, str]] = {
    "all": ("All", "Content"),
    "article": ("Articles", "Article"),
    "job": ("Jobs", "Job Opportunity"),
    "page": ("Pages", "Page"),
    "case_study": ("Case Studies", "Case Study"),
    "testimonial": ("Testimonials", "Testimonial"),
}

# Search behaviour
SEARCH_PAGE_SIZE = config("SEARCH_PAGE_SIZE", default=10, cast=int)
SEARCH_MAX_PAGE = config("SEARCH_MAX_PAGE", default=1000, cast=int)
SEARCH_MIN_CHARS = config("SEARCH_MIN_CHARS", default=2, cast=int)
SEARCH_EXCERPT_LENGTH = config("SEARCH_EXCERPT_LENGTH", default=250, cast=int)
SEARCH_EXCERPT_LEAD = config("SEARCH_EXCERPT_LEAD", default=100, cast=int)
SEARCH_ELLIPSIS = config("SEARCH_ELLIPSIS", default="...")
SEARCH_HIGHLIGHTING = config("SEARCH_HIGHLIGHTING", default=True, cast=bool)
SEARCH_HIGHLIGHT_OPEN = config("SEARCH_HIGHLIGHT_OPEN", default="<mark>")
SEARCH_HIGHLIGHT_CLOSE = config("SEARCH_HIGHLIGHT_CLOSE", default="</mark>")
SEARCH_CATEGORY_FACETS = config("SEARCH_CATEGORY_FACETS", default=True, cast=bool)
SEARCH_SUGGEST_FILTER_REMOVAL = config("SEARCH_SUGGEST_FILTER_REMOVAL", default=False, cast=bool)
SEARCH_ALTERNATIVE_QUERIES = config(
    "SEARCH_ALTERNATIVE_QUERIES",
    default="remote jobs,software engineer,marketing manager,career advice,recruitment tips,salary guide",
    cast=Csv(),
)
SEARCH_BASE_PATH = config("SEARCH_BASE_PATH", default="/search")
SEARCH_STORE_TIMEOUT = config("SEARCH_STORE_TIMEOUT", default=5.0, cast=float)
SEARCH_FACET_CACHE_TTL = config("SEARCH_FACET_CACHE_TTL", default=900, cast=int)
SEARCH_RECENT_LIMIT = config("SEARCH_RECENT_LIMIT", default=500, cast=int)


def parse_categories(entries: List[str]) -> Dict[str, str]:
    """Turn ``slug:Label`` entries into an ordered slug -> label mapping."""
    categories = {}
    for entry in entries:
        slug, _, label = entry.partition(":")
        slug = slug.strip().lower()
        if not slug:
            continue
        categories[slug] = label.strip() or slug.replace("-", " ").title()
    return categories


# Settings class for FastAPI
class Settings:
    app_name: str = APP_NAME
    app_version: str = APP_VERSION
    api_prefix: str = API_PREFIX
    debug: bool = DEBUG
    redis_url: str = REDIS_URL
    log_level: str = LOG_LEVEL
    cors_origins: List[str] = CORS_ORIGINS
    cors_methods: List[str] = CORS_METHODS
    cors_headers: List[str] = CORS_HEADERS
    error_log_dir: str = ERROR_LOG_DIR
    error_log_max_size_mb: int = ERROR_LOG_MAX_SIZE_MB
    error_log_rotation: str = ERROR_LOG_ROTATION
    content_data_file: str = CONTENT_DATA_FILE
    content_types: List[str] = [t.strip().lower() for t in SEARCH_CONTENT_TYPES if t.strip()]
    content_type_labels: Dict[str, Tuple[str, str]] = CONTENT_TYPE_LABELS
    categories: Dict[str, str] = parse_categories(SEARCH_CATEGORIES)
    page_size: int = SEARCH_PAGE_SIZE
    max_page: int = SEARCH_MAX_PAGE
    min_search_chars: int = SEARCH_MIN_CHARS
    excerpt_length: int = SEARCH_EXCERPT_LENGTH
    excerpt_lead: int = SEARCH_EXCERPT_LEAD
    ellipsis: str = SEARCH_ELLIPSIS
    highlighting: bool = SEARCH_HIGHLIGHTING
    highlight_open: str = SEARCH_HIGHLIGHT_OPEN
    highlight_close: str = SEARCH_HIGHLIGHT_CLOSE
    category_facets: bool = SEARCH_CATEGORY_FACETS
    suggest_filter_removal: bool = SEARCH_SUGGEST_FILTER_REMOVAL
    alternative_queries: List[str] = [q.strip() for q in SEARCH_ALTERNATIVE_QUERIES if q.strip()]
    search_base_path: str = SEARCH_BASE_PATH
    store_timeout: float = SEARCH_STORE_TIMEOUT
    facet_cache_ttl: int = SEARCH_FACET_CACHE_TTL
    recent_limit: int = SEARCH_RECENT_LIMIT

    def type_label(self, content_type: str, plural: bool = False) -> str:
        labels = self.content_type_labels.get(content_type)
        if labels is None:
            return content_type.replace("_", " ").title() if plural else "Content"
        return labels[0] if plural else labels[1]


# Create settings instance
settings = Settings()
