"""Manages fedlink directory structure following XDG Base Directory spec.

Directory layout:
    ~/.config/fedlink/
        config.yaml         # User configuration

    ~/.local/share/fedlink/
        fedlink.db          # SQLite database (embedded backend)
"""

import os
from pathlib import Path


class FedlinkPaths:
    """Resolves fedlink paths.

    `FEDLINK_DATA_DIR` overrides the data directory; individual directories
    can also be passed in for testing.
    """

    def __init__(
        self,
        *,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
    ) -> None:
        home = Path.home()
        env_data_dir = os.environ.get("FEDLINK_DATA_DIR")
        self._config_dir = config_dir or home / ".config" / "fedlink"
        self._data_dir = data_dir or (
            Path(env_data_dir).expanduser() if env_data_dir else home / ".local" / "share" / "fedlink"
        )

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def config_file(self) -> Path:
        return self._config_dir / "config.yaml"

    @property
    def database_file(self) -> Path:
        return self._data_dir / "fedlink.db"
