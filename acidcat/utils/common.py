import os


def env_bool(key: str, default: bool) -> bool:
    if key in os.environ:
        return os.environ[key].lower() in ("1", "true", "yes")
    return default


def env_integer(key: str, default: int) -> int:
    if key in os.environ:
        return int(os.environ[key])
    return default


def env_string(key: str, default: str) -> str:
    if key in os.environ:
        return os.environ[key]
    return default
