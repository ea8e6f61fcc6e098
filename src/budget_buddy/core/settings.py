import os

from dotenv import find_dotenv, load_dotenv

from budget_buddy.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"
TRANSACTIONS_FILENAME = "transactions.json"

SOURCE_JSON = "json"
SOURCE_SUPABASE = "supabase"

DEFAULT_PAGE_SIZE = 10
DEFAULT_SUPABASE_TIMEOUT = 30.0

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "DATA_DIR",
    "TRANSACTION_SOURCE",
    "TRANSACTIONS_FILE",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_USER_ID",
    "SUPABASE_TIMEOUT",
    "DEFAULT_PAGE_SIZE",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    return os.path.join(os.getcwd(), CONFIG_FILENAME)


def _unquote_value(raw_value: str) -> str:
    if len(raw_value) >= 2 and raw_value[0] == raw_value[-1] and raw_value[0] in {'"', "'"}:
        return raw_value[1:-1]
    return raw_value


def read_config_file(path: str | None) -> dict[str, str]:
    """Read a flat ``KEY: value`` file. Comments and blank values are skipped."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            cleaned = raw_value.split(" #", 1)[0].strip()
            if not key or not cleaned:
                continue
            value = _unquote_value(cleaned)
            if value:
                values[key] = value
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def get_config_path() -> str | None:
    return _CONFIG_FILE_PATH


def ensure_dir(path: str | None) -> None:
    if path and path not in {".", "./"}:
        os.makedirs(path, exist_ok=True)


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_float(name: str, default: float = 0.0) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %.2f.", name, raw, default)
        return default


def get_env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
    return default


def get_transaction_source() -> str:
    source = (os.getenv("TRANSACTION_SOURCE") or SOURCE_JSON).strip().lower()
    if source not in {SOURCE_JSON, SOURCE_SUPABASE}:
        logger.warning("[ENV] Unknown TRANSACTION_SOURCE='%s', using '%s'.", source, SOURCE_JSON)
        return SOURCE_JSON
    return source


def get_transactions_file() -> str:
    return os.getenv("TRANSACTIONS_FILE") or os.path.join(DATA_DIR, TRANSACTIONS_FILENAME)


def get_default_page_size() -> int:
    return get_env_int("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE, min_value=1)


_SENSITIVE_ENV_KEYS = ("KEY", "TOKEN", "SECRET", "PASSWORD")

_ENV_KEYS_TO_LOG = (
    "LOG_LEVEL",
    "DATA_DIR",
    "TRANSACTION_SOURCE",
    "TRANSACTIONS_FILE",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_USER_ID",
    "DEFAULT_PAGE_SIZE",
)


def _mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    upper_name = name.upper()
    sensitive = any(marker in upper_name for marker in _SENSITIVE_ENV_KEYS)
    if not sensitive and not (sanitized.startswith("eyJ") and sanitized.count(".") == 2):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in _ENV_KEYS_TO_LOG:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else _mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


load_environment()

DATA_DIR = os.getenv("DATA_DIR", ".")
LOG_DIR = os.getenv("LOG_DIR")

ensure_dir(DATA_DIR)
ensure_dir(LOG_DIR)
