"""
Unit tests for ReturnCode.
"""

import unittest

from slcodec.core.exceptions import ReturnCodeError
from slcodec.core.returncode import ReturnCode


class TestReturnCode(unittest.TestCase):
    """Tests for accumulating errors and warnings."""

    def test_new_return_code_is_success(self):
        ret = ReturnCode()
        self.assertTrue(ret)
        self.assertFalse(ret.has_errors())
        self.assertFalse(ret.has_warnings())
        self.assertEqual(str(ret), "")

    def test_errors_make_it_falsy(self):
        ret = ReturnCode().add_error("SOMETHING_FAILED")
        self.assertFalse(ret)
        self.assertTrue(ret.contains_error("SOMETHING_FAILED"))
        self.assertEqual(ret.get_error_count(), 1)

    def test_warnings_do_not_fail(self):
        ret = ReturnCode().add_warning("CAREFUL")
        self.assertTrue(ret)
        self.assertTrue(ret.has_warnings())
        self.assertTrue(ret.contains_warning("CAREFUL"))
        self.assertFalse(ret.contains_error("CAREFUL"))

    def test_add_merges_other_code(self):
        first = ReturnCode().add_error("A").add_warning("W")
        second = ReturnCode().add_error("B")
        second.add(first)
        self.assertEqual(second.get_errors(), ["B", "A"])
        self.assertEqual(second.get_warnings(), ["W"])

    def test_str_lists_tags(self):
        ret = ReturnCode().add_error("E1").add_warning("W1")
        self.assertEqual(str(ret), "ERROR: E1\nWARNING: W1")

    def test_clear(self):
        ret = ReturnCode().add_error("E1").add_warning("W1")
        ret.clear()
        self.assertTrue(ret)
        self.assertEqual(ret.get_warning_count(), 0)

    def test_raise_for_errors(self):
        self.assertIsInstance(ReturnCode().raise_for_errors(), ReturnCode)

        with self.assertRaises(ReturnCodeError) as context:
            ReturnCode().add_error("E1").add_error("E2").raise_for_errors()
        self.assertEqual(context.exception.errors, ["E1", "E2"])
        self.assertIn("E1", context.exception.message)


if __name__ == '__main__':
    unittest.main()
