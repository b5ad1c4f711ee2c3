import logging
import unittest

import epmp
import epmp.num as gnp
from epmp.config import get_config, get_backend, get_logger, set_log_level


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = get_config()
        self.assertEqual(config.cg_max_iter, 100)
        self.assertEqual(config.lanczos_rank, 100)
        self.assertIn(get_backend(), ("numpy", "torch"))

    def test_update_and_resolve(self):
        config = get_config()
        old = config.cg_max_iter
        try:
            config.update(cg_max_iter=7)
            self.assertEqual(config.resolve("cg_max_iter"), 7)
            self.assertEqual(config.resolve("cg_max_iter", 3), 3)
        finally:
            config.update(cg_max_iter=old)

    def test_update_unknown_key(self):
        with self.assertRaises(AttributeError):
            get_config().update(no_such_knob=1)

    def test_logger(self):
        logger = get_logger()
        self.assertEqual(logger.name, "epmp")
        set_log_level(logging.DEBUG)
        self.assertEqual(logger.level, logging.DEBUG)
        set_log_level(logging.INFO)

    def test_version(self):
        self.assertIsInstance(epmp.__version__, str)

    def test_clear_caches(self):
        config = get_config()
        gnp.compute_gammaln(2)
        self.assertIn("gammaln", config.caches)
        config.clear_caches("gammaln")
        self.assertNotIn("gammaln", config.caches)
        # the table is rebuilt on demand
        self.assertEqual(gnp.compute_gammaln(2).shape[0], 6)


if __name__ == "__main__":
    unittest.main()
