"""Tests with pytest"""

import os
import logging

if os.environ.get('LOG_DEBUG'):
    logging.basicConfig(level=logging.DEBUG)
