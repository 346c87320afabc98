"""Global test fixtures."""

import os
import tempfile

# Keep tests away from the user's ~/.local/share/fedlink and ~/.config/fedlink.
# This must happen at module load time, before any test module builds a Config.
os.environ.setdefault("FEDLINK_DATA_DIR", tempfile.mkdtemp(prefix="fedlink-tests-"))
os.environ.setdefault("FEDLINK_CONFIG_FILE", os.path.join(os.environ["FEDLINK_DATA_DIR"], "none.yaml"))
