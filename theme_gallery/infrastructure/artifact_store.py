"""JSON artifact storage for the theme index."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

from theme_gallery.domain.theme import ThemeGroup

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Reads and writes the consolidated themes.json artifact."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def write(self, groups: List[ThemeGroup]):
        """
        Replace the artifact with the given groups.

        The JSON is written to a temporary file next to the target and moved
        into place, so a failure leaves any previous artifact intact.

        Args:
            groups: Groups to serialize, in output order
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [group.to_dict() for group in groups]

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except Exception as e:
            logger.error(f"Error writing artifact {self.path}: {e}")
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Wrote {len(groups)} groups to {self.path}")

    def load(self) -> List[ThemeGroup]:
        """Load groups from an existing artifact."""
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Artifact {self.path} is not a JSON array")
        return [ThemeGroup.from_dict(item) for item in data]
