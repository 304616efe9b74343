"""Convert HEIC/HEIF images to PNG with the platform's image tool."""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from autofile.models.exceptions import PreprocessError
from domains.file_organizer.mover import resolve_conflict

HEIC_EXTENSIONS = {".heic", ".heif"}
CONVERSION_TIMEOUT = 120


class HeicConverter:
    """Preprocessor that converts HEIC/HEIF images to PNG format."""

    name = "HEIC to PNG Converter"

    def find_tool(self) -> Optional[list[str]]:
        """
        Locate a conversion tool.

        Returns:
            Command prefix, or None when no tool is installed
        """
        if sys.platform == "darwin":
            sips = shutil.which("sips")
            return [sips] if sips else None

        # ImageMagick 7 ships "magick"; version 6 only "convert"
        for tool in ("magick", "convert"):
            found = shutil.which(tool)
            if found:
                return [found]
        return None

    def should_process(self, path: Path) -> bool:
        if path.suffix.lower() not in HEIC_EXTENSIONS:
            return False
        if self.find_tool() is None:
            logger.warning(f"No HEIC conversion tool available, leaving {path.name} as is")
            return False
        return True

    def build_command(self, tool: list[str], source: Path, output: Path) -> list[str]:
        """Build the conversion command line for ``tool``."""
        if Path(tool[0]).name == "sips":
            return [*tool, "-s", "format", "png", str(source), "--out", str(output)]
        return [*tool, str(source), str(output)]

    def process(self, path: Path) -> Path:
        tool = self.find_tool()
        if tool is None:
            raise PreprocessError(f"No HEIC conversion tool available for {path}", path=path)

        output = resolve_conflict(path.with_suffix(".png"))
        command = self.build_command(tool, path, output)

        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=CONVERSION_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PreprocessError(f"Failed to execute {command[0]}: {e}", path=path) from e

        if result.returncode != 0 or not output.exists():
            output.unlink(missing_ok=True)
            raise PreprocessError(
                f"{Path(command[0]).name} failed with status {result.returncode}: {result.stderr.strip()}",
                path=path,
            )

        # Delete original HEIC file after successful conversion
        try:
            path.unlink()
        except OSError as e:
            raise PreprocessError(f"Converted but failed to remove original {path}: {e}", path=path) from e

        logger.info(f"Converted HEIC to PNG: {path} -> {output}")
        return output
