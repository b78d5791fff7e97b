"""Pure constants for the BGG client. No side effects at import time."""

# === Endpoints ===
XML2_API_URL = "https://boardgamegeek.com/xmlapi2"

PATH_FORUM = "forum"
PATH_GUILDS = "guild"
PATH_PLAYS = "plays"
PATH_SITEMAP_INDEX = "sitemapindex"
PATH_THING = "thing"
PATH_USER = "user"

# === Query parameters ===
PARAM_BUDDIES = "buddies"
PARAM_COMMENTS = "comments"
PARAM_DOMAIN = "domain"
PARAM_GUILDS = "guilds"
PARAM_HOT = "hot"
PARAM_ID = "id"
PARAM_MARKETPLACE = "marketplace"
PARAM_MAXIMUM_DATE = "maxdate"
PARAM_MEMBERS = "members"
PARAM_MINIMUM_DATE = "mindate"
PARAM_NAME = "name"
PARAM_PAGE = "page"
PARAM_PAGE_SIZE = "pagesize"
PARAM_RATING_COMMENTS = "ratingcomments"
PARAM_SORT = "sort"
PARAM_STATS = "stats"
PARAM_SUBTYPE = "subtype"
PARAM_TOP = "top"
PARAM_TYPE = "type"
PARAM_USERNAME = "username"
PARAM_VERSIONS = "versions"
PARAM_VIDEOS = "videos"

REQUEST_DATE_FORMAT = "%Y-%m-%d"

# === Page sizes (items per page returned by BGG) ===
PLAYS_PAGE_SIZE = 100
FORUM_PAGE_SIZE = 50
GUILD_MEMBERS_PAGE_SIZE = 25
USER_PAGE_SIZE = 1_000
THING_COMMENTS_PAGE_SIZE = 100  # Default when pagesize isn't sent
THING_COMMENTS_PAGE_SIZE_RANGE = (10, 100)

# === Admission control ===
DEFAULT_MAX_CONCURRENT_REQUESTS = 10
DEFAULT_REQUESTS_PER_WINDOW_LIMIT = 60
DEFAULT_REQUEST_WINDOW_SIZE = 60.0  # seconds

# === Retry (BGG answers 202 while it queues work, 429 when throttling) ===
MAX_RETRIES = 5
DEFAULT_RETRY_BASE = 2.0
DEFAULT_RETRY_MAX_DELAY_MS = 60_000
DEFAULT_RETRY_JITTER_MS = 1_000
TRANSIENT_STATUS_CODES = frozenset({202, 429})

# === Timeouts (milliseconds) ===
DEFAULT_REQUEST_TIMEOUT_MS = 15_000

DEFAULT_USER_AGENT = "bgg-client (+https://boardgamegeek.com/wiki/page/BGG_XML_API2)"
