import os
import logging
from datetime import datetime
import stat

logger = logging.getLogger(__name__)


class FileManager:
    """Stores generated export files under a single base directory"""

    def __init__(self, base_dir):
        self.base_dir = os.path.abspath(base_dir)
        self._ensure_base_directory()

    def _ensure_base_directory(self):
        """Create base directory if it doesn't exist with proper permissions"""
        try:
            if not os.path.exists(self.base_dir):
                os.makedirs(self.base_dir, mode=0o755, exist_ok=True)
                logger.info(f"Created base directory: {self.base_dir}")
        except OSError as e:
            logger.error(f"Failed to create base directory: {str(e)}", exc_info=True)
            raise

    def save_content(self, filename, content):
        """Write text or bytes to filename inside the base directory"""
        filepath = self.resolve(filename)
        try:
            if isinstance(content, bytes):
                with open(filepath, 'wb') as f:
                    f.write(content)
            else:
                with open(filepath, 'w', encoding='utf-8') as f:
                    f.write(content)

            os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH)
            logger.info(f"Saved export to: {filepath}")
            return filepath
        except OSError as e:
            logger.error(f"Failed to save content: {str(e)}", exc_info=True)
            raise

    def resolve(self, filename):
        """Absolute path for filename; refuses anything outside the base directory"""
        safe_filename = os.path.basename(filename)
        if not safe_filename or safe_filename != filename:
            raise ValueError(f"Invalid file name: {filename}")
        abs_path = os.path.abspath(os.path.join(self.base_dir, safe_filename))
        if os.path.dirname(abs_path) != self.base_dir:
            raise ValueError(f"Invalid file name: {filename}")
        return abs_path

    def cleanup_old_files(self, max_age_hours=24):
        """Remove export files older than max_age_hours; returns how many were removed"""
        if not os.path.exists(self.base_dir):
            logger.warning("Base directory does not exist, skipping cleanup")
            return 0

        removed = 0
        current_time = datetime.now()
        for item in os.listdir(self.base_dir):
            item_path = os.path.join(self.base_dir, item)
            try:
                if not os.path.isfile(item_path):
                    continue
                modified = datetime.fromtimestamp(os.path.getmtime(item_path))
                if (current_time - modified).total_seconds() >= max_age_hours * 3600:
                    os.remove(item_path)
                    removed += 1
                    logger.info(f"Cleaned up old export: {item_path}")
            except OSError as e:
                # A failed cleanup never blocks an export
                logger.error(f"Failed to cleanup {item}: {str(e)}", exc_info=True)
        return removed
