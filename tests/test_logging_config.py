"""
Unit tests for the logging setup helpers.
"""

import logging
import shutil
import tempfile
import unittest
from pathlib import Path

from slcodec.core.logging_config import SlcodecLogger, setup_logging, get_logger, debug_mode


class TestLoggingConfig(unittest.TestCase):
    """Tests for SlcodecLogger."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        root_logger = logging.getLogger()
        self.saved_handlers = list(root_logger.handlers)
        self.saved_level = root_logger.level
        self.saved_module_levels = {
            module: logging.getLogger(module).level for module in SlcodecLogger.MODULE_LEVELS
        }

    def tearDown(self):
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            if handler not in self.saved_handlers:
                handler.close()
        root_logger.handlers[:] = self.saved_handlers
        root_logger.setLevel(self.saved_level)
        for module, level in self.saved_module_levels.items():
            logging.getLogger(module).setLevel(level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_file_logging(self):
        log_file = Path(self.temp_dir) / 'nested' / 'slcodec.log'
        setup_logging(level='warning', log_file=str(log_file), console=True)

        handlers = logging.getLogger().handlers
        self.assertEqual(len(handlers), 2)
        console_handler = [h for h in handlers if not isinstance(h, logging.FileHandler)][0]
        self.assertEqual(console_handler.level, logging.WARNING)

        get_logger('slcodec.structured_light.test').info("decoded")
        for handler in handlers:
            handler.flush()
        self.assertIn("decoded", log_file.read_text())

    def test_module_levels(self):
        setup_logging(console=False, module_levels={'slcodec.core': 'debug'})
        self.assertEqual(logging.getLogger('slcodec.core').level, logging.DEBUG)
        self.assertEqual(logging.getLogger('slcodec.common').level, logging.INFO)
        self.assertEqual(logging.getLogger().handlers, [])

    def test_unknown_level_defaults_to_info(self):
        setup_logging(level='verbose')
        self.assertEqual(logging.getLogger().handlers[0].level, logging.INFO)

    def test_debug_mode(self):
        log_file = debug_mode('unit', base_dir=self.temp_dir)

        self.assertEqual(Path(log_file), Path(self.temp_dir) / 'unit' / 'debug.log')
        self.assertTrue(Path(log_file).exists())
        for module in SlcodecLogger.MODULE_LEVELS:
            self.assertEqual(logging.getLogger(module).level, logging.DEBUG)

        for handler in logging.getLogger().handlers:
            handler.flush()
        self.assertIn("Debug session started: unit", Path(log_file).read_text())


if __name__ == '__main__':
    unittest.main()
