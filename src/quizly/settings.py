"""User preferences stored in the user_settings table."""
from quizly.db import get_connection, transaction

THEME_MODES = ("SYSTEM", "LIGHT", "DARK")

THEME_MODE = "theme_mode"
SOUND_ENABLED = "sound_enabled"
HAPTIC_ENABLED = "haptic_enabled"
DAILY_REMINDER = "daily_reminder"
STREAK_ALERT = "streak_alert"
ACHIEVEMENT_NOTIF = "achievement_notif"

TOGGLES = {
    SOUND_ENABLED: "Sound effects",
    HAPTIC_ENABLED: "Haptic feedback",
    DAILY_REMINDER: "Daily reminder",
    STREAK_ALERT: "Streak alerts",
    ACHIEVEMENT_NOTIF: "Achievement notifications",
}


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    with transaction(db_path) as conn:
        conn.execute(
            "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
            (key, value, value),
        )


def get_flag(db_path: str, key: str, default: bool = True) -> bool:
    value = get_setting(db_path, key)
    if value is None:
        return default
    return value == "1"


def set_flag(db_path: str, key: str, enabled: bool) -> None:
    set_setting(db_path, key, "1" if enabled else "0")


def get_theme_mode(db_path: str) -> str:
    return get_setting(db_path, THEME_MODE, "SYSTEM")


def set_theme_mode(db_path: str, mode: str) -> None:
    mode = mode.upper()
    if mode not in THEME_MODES:
        raise ValueError(f"Unknown theme mode: {mode}")
    set_setting(db_path, THEME_MODE, mode)


def get_all_settings(db_path: str) -> dict:
    settings = {THEME_MODE: get_theme_mode(db_path)}
    for key in TOGGLES:
        settings[key] = get_flag(db_path, key)
    return settings
