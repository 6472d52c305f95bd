from __future__ import annotations

import sys

from stitchdesk.cli import run_cli
from stitchdesk.config import ConfigError, load_config
from stitchdesk.db import Db, DbError
from stitchdesk.logger import setup_logger


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    path = argv[0] if argv else "config.toml"
    try:
        cfg = load_config(path)
        setup_logger(cfg.log_level, cfg.log_dir)
        run_cli(Db(cfg.db), cfg)
        return 0
    except ConfigError as e:
        print(f"[CONFIG ERROR] {e}")
        return 2
    except DbError as e:
        print(f"[DB ERROR] {e}")
        return 3
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
