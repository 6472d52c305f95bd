from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DbConfig:
    host: str
    port: int
    name: str
    user: str
    password: str
    sslmode: str = "disable"


@dataclass(frozen=True)
class ShopConfig:
    name: str = "Raghav Tailor & Fabric"
    address: str = "123 Fashion Street, New Delhi, 110001"
    phone: str = ""
    email: str = ""


@dataclass(frozen=True)
class PrintConfig:
    invoice_page_size: int = 12
    slip_page_size: int = 2
    print_delay_ms: int = 500


@dataclass(frozen=True)
class AppConfig:
    name: str
    log_level: str
    secret_key: str
    log_dir: str
    db: DbConfig
    shop: ShopConfig
    print: PrintConfig


def _positive_int(table: dict, key: str, default: int) -> int:
    value = int(table.get(key, default))
    if value <= 0:
        raise ConfigError(f"[print] {key} must be a positive integer, got {value}")
    return value


def load_config(path: str | Path) -> AppConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p.resolve()}")

    if tomllib is None:
        raise ConfigError("tomllib not available. Use Python 3.11+.")

    try:
        data = tomllib.loads(p.read_text(encoding="utf-8"))
    except Exception as e:
        raise ConfigError(f"Failed to read config TOML: {e}") from e

    try:
        app = data["app"]
        db = data["db"]
        shop = data.get("shop", {})
        prn = data.get("print", {})
        return AppConfig(
            name=str(app.get("name", "StitchDesk")),
            log_level=str(app.get("log_level", "INFO")),
            secret_key=str(app.get("secret_key", "change-this-secret-key-in-production")),
            log_dir=str(app.get("log_dir", "data/logs")),
            db=DbConfig(
                host=str(db["host"]),
                port=int(db.get("port", 5432)),
                name=str(db["name"]),
                user=str(db["user"]),
                password=str(db["password"]),
                sslmode=str(db.get("sslmode", "disable")),
            ),
            shop=ShopConfig(
                name=str(shop.get("name", ShopConfig.name)),
                address=str(shop.get("address", ShopConfig.address)),
                phone=str(shop.get("phone", "")),
                email=str(shop.get("email", "")),
            ),
            print=PrintConfig(
                invoice_page_size=_positive_int(prn, "invoice_page_size", 12),
                slip_page_size=_positive_int(prn, "slip_page_size", 2),
                print_delay_ms=int(prn.get("print_delay_ms", 500)),
            ),
        )
    except ConfigError:
        raise
    except KeyError as e:
        raise ConfigError(f"Missing config key: {e}") from e
    except Exception as e:
        raise ConfigError(f"Invalid config values: {e}") from e
